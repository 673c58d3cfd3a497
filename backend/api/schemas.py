"""
API Request/Response schemas.

Request bodies and responses use camelCase on the wire; Python code uses
snake_case field names.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ingest.models import ExtractedContentItem, IngestionStatus, IngestionSummary

MAX_ID_LENGTH = 100
MAX_NAME_LENGTH = 255
MAX_MODEL_NAME_LENGTH = 100


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Model Configuration
# =============================================================================

class ModelConfigUpdate(ApiModel):
    """Update LLM model tiers; omitted tiers are left unchanged."""
    analysis: Optional[str] = Field(None, min_length=1, max_length=MAX_MODEL_NAME_LENGTH)
    extraction: Optional[str] = Field(None, min_length=1, max_length=MAX_MODEL_NAME_LENGTH)


# =============================================================================
# Ingestion Schemas
# =============================================================================

class ProcessExistingRequest(ApiModel):
    """Re-ingest a stored reference document."""
    document_id: str = Field(..., min_length=1, max_length=MAX_ID_LENGTH)
    document_name: Optional[str] = Field(None, max_length=MAX_NAME_LENGTH)
    strategy: Optional[Literal["model", "rules"]] = Field(
        default=None,
        description="Ingestion strategy; defaults to the server's configured strategy",
    )


class IngestionSummaryOut(IngestionSummary):
    is_complete: bool = False
    already_processed: int = 0
    message: str = ""


class IngestionData(ApiModel):
    ingestion_id: str
    document_id: Optional[str] = None
    file_name: str
    document_type: str
    summary: IngestionSummaryOut
    content_items: List[ExtractedContentItem] = Field(default_factory=list)
    status: IngestionStatus
    degraded_reason: Optional[str] = None
    skipped_count: int = 0


class IngestionResponse(ApiModel):
    success: bool = True
    message: str
    data: IngestionData


class HistoryEntry(ApiModel):
    id: str
    reference_document_id: Optional[str] = None
    file_name: str
    document_type: Optional[str] = None
    status: str
    degraded_reason: Optional[str] = None
    item_count: int = 0
    skipped_count: int = 0
    processing_time_ms: Optional[int] = None
    error: Optional[str] = None
    created_at: Optional[str] = None


class HistoryResponse(ApiModel):
    project_id: str
    ingestions: List[HistoryEntry]


class StoredIngestionResponse(HistoryEntry):
    project_id: str
    extracted_data: Optional[Dict[str, Any]] = None


# =============================================================================
# Content Items & Analytics
# =============================================================================

class StoredContentItem(ApiModel):
    id: int
    position: int = 0
    title: str
    description: str = ""
    format: str = ""
    platform: str = ""
    content_type: str = Field(default="", alias="type")
    hashtags: List[str] = Field(default_factory=list)
    date: Optional[str] = None
    created_at: Optional[str] = None


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    pages: int


class ContentItemsResponse(ApiModel):
    ingestion_id: str
    items: List[StoredContentItem]
    pagination: Pagination


class AnalyticsOverview(ApiModel):
    total_ingestions: int = 0
    successful_ingestions: int = 0
    degraded_ingestions: int = 0
    failed_ingestions: int = 0
    avg_processing_time_ms: Optional[float] = None
    document_types_count: int = 0


class ContentStats(ApiModel):
    total_content_items: int = 0
    content_types_count: int = 0


class DocumentTypeStats(ApiModel):
    document_type: str
    count: int
    avg_processing_time_ms: Optional[float] = None


class AnalyticsResponse(ApiModel):
    project_id: str
    overview: AnalyticsOverview
    content: ContentStats
    document_types: List[DocumentTypeStats]
