"""
Data model for the document ingestion pipeline.

Wire names follow the completion-service JSON contract (camelCase); every
model also accepts the snake_case field names and serializes by alias.
"""

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}")


class WireModel(BaseModel):
    """Base for models exchanged with the completion service and API."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Source documents
# =============================================================================

class TextSection(WireModel):
    """A header line and the body lines under it."""
    title: str
    content: List[str] = Field(default_factory=list)
    line_number: int


class SourceDocument(WireModel):
    """Raw input read from disk. Immutable once read."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str
    mime_type: Optional[str] = None
    file_type: str
    text: str = ""
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    sections: List[TextSection] = Field(default_factory=list)
    preamble: List[str] = Field(default_factory=list)  # text lines before the first section


# =============================================================================
# Pass 1: structure analysis
# =============================================================================

class StructureInfo(WireModel):
    format: str = "Unknown"
    has_headers: bool = False
    columns: List[str] = Field(default_factory=list)
    data_rows: int = 0
    key_fields: List[str] = Field(default_factory=list)
    delimiter: Optional[str] = None
    encoding: Optional[str] = None

    @field_validator("columns", "key_fields", mode="before")
    @classmethod
    def _none_to_list(cls, value):
        return [] if value is None else value

    @field_validator("data_rows", mode="before")
    @classmethod
    def _none_to_zero(cls, value):
        return 0 if value is None else value


class StructureAnalysis(WireModel):
    document_type: str
    structure: StructureInfo
    insights: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


# =============================================================================
# Pass 2: content extraction
# =============================================================================

def _coerce_date(value: Any) -> Optional[str]:
    """Normalize a model-supplied date to YYYY-MM-DD, or None if unusable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if not text or text.lower() in ("null", "none", "n/a", "tbd"):
        return None
    match = DATE_PATTERN.match(text)
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(0)).isoformat()
    except ValueError:
        return None


class ExtractedContentItem(WireModel):
    """One content-calendar item, in document order."""
    title: str
    description: str = ""
    format: str = ""
    date: Optional[str] = None
    platform: str = ""
    content_type: str = Field(default="", alias="type")
    hashtags: List[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _title_text(cls, value):
        if value is None:
            raise ValueError("title is required")
        return str(value).strip()

    @field_validator("description", "format", "platform", "content_type", mode="before")
    @classmethod
    def _optional_text(cls, value):
        if value is None:
            return ""
        if isinstance(value, list):
            return ", ".join(str(v) for v in value)
        return str(value)

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, value):
        return _coerce_date(value)

    @field_validator("hashtags", mode="before")
    @classmethod
    def _hashtags(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [tag for tag in re.split(r"[\s,]+", value) if tag]
        return [str(tag) for tag in value if tag]


class SkipItem(WireModel):
    """An item imported by an earlier run, excluded from this one."""
    title: str
    description: Optional[str] = None
    date: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, value):
        return _coerce_date(value)


class DateRange(WireModel):
    start: Optional[str] = None
    end: Optional[str] = None
    total_days: Optional[int] = None


class IngestionSummary(WireModel):
    document_type: str = "Document"
    total_items: int = 0
    date_range: Optional[DateRange] = None
    platforms: List[str] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)

    @field_validator("platforms", "insights", mode="before")
    @classmethod
    def _none_to_list(cls, value):
        return [] if value is None else value

    @field_validator("date_range", mode="before")
    @classmethod
    def _empty_range(cls, value):
        # Models often emit {"start": null, "end": null} for undated documents
        if isinstance(value, dict) and not value.get("start") and not value.get("end"):
            return None
        return value

    @field_validator("total_items", mode="before")
    @classmethod
    def _none_to_zero(cls, value):
        return 0 if value is None else value


class ExtractionPayload(WireModel):
    """Validated shape of the pass-2 JSON response."""
    document_type: str = "Content Calendar"
    summary: Optional[IngestionSummary] = None
    content_items: List[ExtractedContentItem]


class IngestionStatus(str, Enum):
    SUCCESS = "success"
    DEGRADED = "degraded"
    FAILED = "failed"


class IngestionResult(WireModel):
    """Aggregate return value of one ingestion run."""
    document_type: str
    summary: IngestionSummary
    content_items: List[ExtractedContentItem] = Field(default_factory=list)
    status: IngestionStatus = IngestionStatus.SUCCESS
    degraded_reason: Optional[str] = None
    skipped_count: int = 0
    processing_time_ms: Optional[int] = None

    @field_validator("content_items", mode="before")
    @classmethod
    def _never_null(cls, value):
        return [] if value is None else value
