import enum
from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class IngestionRecordStatus(str, enum.Enum):
    SUCCESS = "success"
    DEGRADED = "degraded"
    FAILED = "failed"


# Uploaded client files


class ReferenceDocument(Base):
    __tablename__ = "reference_documents"
    id = Column(String, primary_key=True)
    project_id = Column(String, nullable=False, index=True)
    file_name = Column(String, nullable=False)
    file_path = Column(String, nullable=False)
    mime_type = Column(String, nullable=True)
    size_bytes = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)


# Ingestion runs and their output


class DocumentIngestion(Base):
    __tablename__ = "document_ingestions"
    id = Column(String, primary_key=True)
    project_id = Column(String, nullable=False, index=True)
    reference_document_id = Column(String, ForeignKey("reference_documents.id"), nullable=True)
    file_name = Column(String, nullable=False)
    document_type = Column(String, nullable=True)
    status = Column(String, default=IngestionRecordStatus.SUCCESS.value)
    degraded_reason = Column(String, nullable=True)
    item_count = Column(Integer, default=0)
    skipped_count = Column(Integer, default=0)
    processing_time_ms = Column(Integer, nullable=True)
    extracted_data = Column(JSON, nullable=True)  # IngestionResult, camelCase keys
    error = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    reference_document = relationship("ReferenceDocument")
    ideas = relationship(
        "ContentIdea",
        back_populates="ingestion",
        cascade="all, delete-orphan",
        order_by="ContentIdea.position",
    )


class ContentIdea(Base):
    __tablename__ = "content_ideas"
    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String, nullable=False)
    ingestion_id = Column(String, ForeignKey("document_ingestions.id"), nullable=False)
    position = Column(Integer, default=0)
    title = Column(String, nullable=False)
    description = Column(Text, default="")
    format = Column(String, default="")
    platform = Column(String, default="")
    content_type = Column(String, default="")
    hashtags = Column(JSON, default=list)
    suggested_date = Column(String, nullable=True)  # YYYY-MM-DD
    created_at = Column(DateTime, default=datetime.utcnow)

    ingestion = relationship("DocumentIngestion", back_populates="ideas")

    __table_args__ = (
        Index("ix_content_ideas_project_created", "project_id", "created_at"),
    )
