"""
Persistence for reference documents, ingestion runs and content ideas.

One session per operation; commits on success, rolls back on error.
"""

import logging
import math
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from content_models import (
    Base,
    ContentIdea,
    DocumentIngestion,
    IngestionRecordStatus,
    ReferenceDocument,
)
from core.constants import CONTENT_ITEMS_MAX_PAGE_SIZE, CONTENT_ITEMS_PAGE_SIZE, SKIP_LIST_LIMIT
from core.errors import DocumentNotFoundError, IngestionNotFoundError, raise_validation_error
from ingest.models import IngestionResult, SkipItem

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


def _reference_to_dict(doc: ReferenceDocument) -> Dict[str, Any]:
    return {
        "id": doc.id,
        "project_id": doc.project_id,
        "file_name": doc.file_name,
        "file_path": doc.file_path,
        "mime_type": doc.mime_type,
        "size_bytes": doc.size_bytes,
        "created_at": doc.created_at.isoformat() if doc.created_at else None,
    }


def _ingestion_to_dict(run: DocumentIngestion, include_data: bool = False) -> Dict[str, Any]:
    record = {
        "id": run.id,
        "project_id": run.project_id,
        "reference_document_id": run.reference_document_id,
        "file_name": run.file_name,
        "document_type": run.document_type,
        "status": run.status,
        "degraded_reason": run.degraded_reason,
        "item_count": run.item_count,
        "skipped_count": run.skipped_count,
        "processing_time_ms": run.processing_time_ms,
        "error": run.error,
        "created_at": run.created_at.isoformat() if run.created_at else None,
    }
    if include_data:
        record["extracted_data"] = run.extracted_data
    return record


def _idea_to_dict(idea: ContentIdea) -> Dict[str, Any]:
    return {
        "id": idea.id,
        "position": idea.position,
        "title": idea.title,
        "description": idea.description,
        "format": idea.format,
        "platform": idea.platform,
        "content_type": idea.content_type,
        "hashtags": idea.hashtags or [],
        "date": idea.suggested_date,
        "created_at": idea.created_at.isoformat() if idea.created_at else None,
    }


def _round_ms(value) -> Optional[float]:
    return None if value is None else round(float(value), 1)


class ContentStore:
    """SQLAlchemy-backed store keyed by project."""

    def __init__(self, engine: Engine, create_tables: bool = True):
        self.engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autoflush=False, autocommit=False, future=True
        )
        if create_tables:
            Base.metadata.create_all(bind=engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # --- Reference documents ---

    def add_reference_document(
        self,
        project_id: str,
        file_name: str,
        file_path: str,
        mime_type: Optional[str] = None,
        size_bytes: int = 0,
        document_id: Optional[str] = None,
    ) -> str:
        document_id = document_id or _new_id()
        with self.session() as session:
            session.add(ReferenceDocument(
                id=document_id,
                project_id=project_id,
                file_name=file_name,
                file_path=str(file_path),
                mime_type=mime_type,
                size_bytes=size_bytes,
            ))
        logger.info(f"Registered reference document {document_id} for project {project_id}")
        return document_id

    def get_reference_document(self, document_id: str, project_id: str) -> Dict[str, Any]:
        """
        Raises:
            DocumentNotFoundError: If the document does not exist in this project
        """
        with self.session() as session:
            doc = (
                session.query(ReferenceDocument)
                .filter(
                    ReferenceDocument.id == document_id,
                    ReferenceDocument.project_id == project_id,
                )
                .first()
            )
            if doc is None:
                raise DocumentNotFoundError(document_id)
            return _reference_to_dict(doc)

    # --- Skip list ---

    def get_skip_items(self, project_id: str, limit: int = SKIP_LIST_LIMIT) -> List[SkipItem]:
        """Most recently imported content ideas for a project, newest first."""
        with self.session() as session:
            ideas = (
                session.query(ContentIdea)
                .filter(ContentIdea.project_id == project_id)
                .order_by(ContentIdea.created_at.desc(), ContentIdea.id.desc())
                .limit(limit)
                .all()
            )
            return [
                SkipItem(title=idea.title, description=idea.description, date=idea.suggested_date)
                for idea in ideas
            ]

    # --- Ingestion runs ---

    def save_ingestion(
        self,
        project_id: str,
        file_name: str,
        result: IngestionResult,
        reference_document_id: Optional[str] = None,
    ) -> str:
        """Store one run and its content items. Returns the ingestion id."""
        ingestion_id = _new_id()
        with self.session() as session:
            run = DocumentIngestion(
                id=ingestion_id,
                project_id=project_id,
                reference_document_id=reference_document_id,
                file_name=file_name,
                document_type=result.document_type,
                status=result.status.value,
                degraded_reason=result.degraded_reason,
                item_count=len(result.content_items),
                skipped_count=result.skipped_count,
                processing_time_ms=result.processing_time_ms,
                extracted_data=result.model_dump(mode="json", by_alias=True),
            )
            run.ideas = [
                ContentIdea(
                    project_id=project_id,
                    position=position,
                    title=item.title,
                    description=item.description,
                    format=item.format,
                    platform=item.platform,
                    content_type=item.content_type,
                    hashtags=list(item.hashtags),
                    suggested_date=item.date,
                )
                for position, item in enumerate(result.content_items)
            ]
            session.add(run)
        logger.info(
            f"Saved ingestion {ingestion_id} for project {project_id}: "
            f"{len(result.content_items)} items ({result.status.value})"
        )
        return ingestion_id

    def record_failed_ingestion(
        self,
        project_id: str,
        file_name: str,
        error: str,
        reference_document_id: Optional[str] = None,
        document_type: Optional[str] = None,
        processing_time_ms: Optional[int] = None,
    ) -> str:
        ingestion_id = _new_id()
        with self.session() as session:
            session.add(DocumentIngestion(
                id=ingestion_id,
                project_id=project_id,
                reference_document_id=reference_document_id,
                file_name=file_name,
                document_type=document_type,
                status=IngestionRecordStatus.FAILED.value,
                item_count=0,
                error=error,
                processing_time_ms=processing_time_ms,
            ))
        logger.warning(f"Recorded failed ingestion {ingestion_id} for {file_name}: {error}")
        return ingestion_id

    def get_ingestion_history(self, project_id: str, limit: int = 100) -> List[Dict[str, Any]]:
        with self.session() as session:
            runs = (
                session.query(DocumentIngestion)
                .filter(DocumentIngestion.project_id == project_id)
                .order_by(DocumentIngestion.created_at.desc())
                .limit(limit)
                .all()
            )
            return [_ingestion_to_dict(run) for run in runs]

    def get_ingestion(self, ingestion_id: str) -> Dict[str, Any]:
        """
        Raises:
            IngestionNotFoundError: If no run has this id
        """
        with self.session() as session:
            run = session.get(DocumentIngestion, ingestion_id)
            if run is None:
                raise IngestionNotFoundError(ingestion_id)
            return _ingestion_to_dict(run, include_data=True)

    # --- Content items and analytics ---

    def get_content_items(
        self,
        ingestion_id: str,
        page: int = 1,
        limit: int = CONTENT_ITEMS_PAGE_SIZE,
    ) -> Dict[str, Any]:
        """
        One page of a run's content items, in document order.

        Raises:
            ValidationError: If page or limit is out of range
            IngestionNotFoundError: If no run has this id
        """
        if page < 1:
            raise_validation_error("page", "must be at least 1", value=page)
        if not 1 <= limit <= CONTENT_ITEMS_MAX_PAGE_SIZE:
            raise_validation_error(
                "limit", f"must be between 1 and {CONTENT_ITEMS_MAX_PAGE_SIZE}", value=limit
            )

        with self.session() as session:
            if session.get(DocumentIngestion, ingestion_id) is None:
                raise IngestionNotFoundError(ingestion_id)

            query = session.query(ContentIdea).filter(ContentIdea.ingestion_id == ingestion_id)
            total = query.count()
            ideas = (
                query.order_by(ContentIdea.position)
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )
            return {
                "ingestion_id": ingestion_id,
                "items": [_idea_to_dict(idea) for idea in ideas],
                "pagination": {
                    "page": page,
                    "limit": limit,
                    "total": total,
                    "pages": math.ceil(total / limit),
                },
            }

    def get_analytics(self, project_id: str) -> Dict[str, Any]:
        """Run counts, average processing time and a per-document-type breakdown."""
        with self.session() as session:
            status_counts = dict(
                session.query(DocumentIngestion.status, func.count(DocumentIngestion.id))
                .filter(DocumentIngestion.project_id == project_id)
                .group_by(DocumentIngestion.status)
                .all()
            )
            avg_time = (
                session.query(func.avg(DocumentIngestion.processing_time_ms))
                .filter(DocumentIngestion.project_id == project_id)
                .scalar()
            )
            by_type = (
                session.query(
                    DocumentIngestion.document_type,
                    func.count(DocumentIngestion.id),
                    func.avg(DocumentIngestion.processing_time_ms),
                )
                .filter(
                    DocumentIngestion.project_id == project_id,
                    DocumentIngestion.document_type.isnot(None),
                )
                .group_by(DocumentIngestion.document_type)
                .order_by(func.count(DocumentIngestion.id).desc(), DocumentIngestion.document_type)
                .all()
            )
            total_items = (
                session.query(func.count(ContentIdea.id))
                .filter(ContentIdea.project_id == project_id)
                .scalar()
            )
            content_types = (
                session.query(func.count(func.distinct(ContentIdea.content_type)))
                .filter(ContentIdea.project_id == project_id, ContentIdea.content_type != "")
                .scalar()
            )

        return {
            "project_id": project_id,
            "overview": {
                "total_ingestions": sum(status_counts.values()),
                "successful_ingestions": status_counts.get(IngestionRecordStatus.SUCCESS.value, 0),
                "degraded_ingestions": status_counts.get(IngestionRecordStatus.DEGRADED.value, 0),
                "failed_ingestions": status_counts.get(IngestionRecordStatus.FAILED.value, 0),
                "avg_processing_time_ms": _round_ms(avg_time),
                "document_types_count": len(by_type),
            },
            "content": {
                "total_content_items": total_items or 0,
                "content_types_count": content_types or 0,
            },
            "document_types": [
                {
                    "document_type": document_type,
                    "count": count,
                    "avg_processing_time_ms": _round_ms(avg),
                }
                for document_type, count, avg in by_type
            ],
        }


_store: Optional[ContentStore] = None


def get_content_store() -> ContentStore:
    """Process-wide store on the configured database (FastAPI dependency)."""
    global _store
    if _store is None:
        from sql_db import engine
        _store = ContentStore(engine)
    return _store
