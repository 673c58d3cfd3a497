"""
Document-type classification and rule-based record mapping.

Two interchangeable strategies sit behind one DocumentClassifier interface:
- RuleBasedClassifier: filename hints, then column/keyword heuristics
- ModelClassifier:     the structure-analysis pass, mapped onto DocumentType

Either one picks the record mapper; rows and sections are always mapped
by rules.
"""

import logging
import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from core.config import STRUCTURE_TIMEOUT_SECONDS
from core.constants import (
    CALENDAR_INDICATORS,
    CALENDAR_MIN_MATCHING_COLUMNS,
    CAMPAIGN_BRIEF_KEYWORDS,
    CONTENT_IDEAS_KEYWORDS,
    FILENAME_TYPE_HINTS,
)
from ingest.models import ExtractedContentItem, SourceDocument, TextSection

logger = logging.getLogger(__name__)

HASHTAG_PATTERN = re.compile(r"#\w+")
TITLE_MAX_CHARS = 100


class DocumentType(str, Enum):
    CONTENT_CALENDAR = "content_calendar"
    CAMPAIGN_BRIEF = "campaign_brief"
    BRAND_GUIDELINES = "brand_guidelines"
    CONTENT_IDEAS = "content_ideas"
    GENERAL = "general"


# =============================================================================
# Heuristics
# =============================================================================

def _rows_text(rows: Sequence[Mapping[str, Any]]) -> str:
    return " ".join(
        " ".join(str(value) for value in row.values() if value) for row in rows
    ).lower()


def is_content_calendar(rows: Sequence[Mapping[str, Any]]) -> bool:
    """At least three header columns contain a calendar indicator."""
    if not rows:
        return False
    columns = [str(col).lower() for col in rows[0].keys()]
    matches = [
        col for col in columns
        if any(indicator in col for indicator in CALENDAR_INDICATORS)
    ]
    return len(matches) >= CALENDAR_MIN_MATCHING_COLUMNS


def is_campaign_brief(text: str) -> bool:
    return any(keyword in text for keyword in CAMPAIGN_BRIEF_KEYWORDS)


def is_content_ideas(text: str) -> bool:
    return any(keyword in text for keyword in CONTENT_IDEAS_KEYWORDS)


def detect_document_type(
    rows: Sequence[Mapping[str, Any]],
    filename: str,
    text: str = "",
) -> DocumentType:
    """
    Guess a document type from its filename and content.

    Filename substrings win; then column indicators; then keywords in the
    row values (or in ``text`` when there are no rows).
    """
    name = (filename or "").lower()
    for hints, doc_type in FILENAME_TYPE_HINTS:
        if any(hint in name for hint in hints):
            return DocumentType(doc_type)

    if is_content_calendar(rows):
        return DocumentType.CONTENT_CALENDAR

    content = _rows_text(rows) if rows else (text or "").lower()
    if is_campaign_brief(content):
        return DocumentType.CAMPAIGN_BRIEF
    if is_content_ideas(content):
        return DocumentType.CONTENT_IDEAS

    return DocumentType.GENERAL


def document_type_from_label(label: Optional[str]) -> DocumentType:
    """Map a free-text label such as "Content Calendar" onto DocumentType."""
    text = (label or "").strip().lower()
    slug = re.sub(r"[\s-]+", "_", text)
    try:
        return DocumentType(slug)
    except ValueError:
        pass

    if "calendar" in text or "schedule" in text:
        return DocumentType.CONTENT_CALENDAR
    if "brief" in text or "campaign" in text:
        return DocumentType.CAMPAIGN_BRIEF
    if "guideline" in text or "brand" in text:
        return DocumentType.BRAND_GUIDELINES
    if "idea" in text or "concept" in text:
        return DocumentType.CONTENT_IDEAS
    return DocumentType.GENERAL


# =============================================================================
# Row mappers
# =============================================================================

def _get(row: Mapping[str, Any], *names: str) -> str:
    """First non-empty value among ``names``, matched case-insensitively."""
    lowered = {str(key).strip().lower(): value for key, value in row.items()}
    for name in names:
        value = lowered.get(name.lower())
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def _short_title(text: str) -> str:
    first_line = text.strip().split("\n", 1)[0].strip()
    if len(first_line) > TITLE_MAX_CHARS:
        return first_line[:TITLE_MAX_CHARS].rstrip() + "..."
    return first_line


def map_content_calendar_rows(rows: Sequence[Mapping[str, Any]]) -> List[ExtractedContentItem]:
    items = []
    for index, row in enumerate(rows, start=1):
        caption = _get(row, "Caption (copy)", "Caption", "Copy")
        visual = _get(row, "Visual / Image prompt", "Visual", "Image prompt", "Image")
        cta = _get(row, "CTA")
        description = caption
        if cta:
            description = f"{description}\n\nCTA: {cta}" if description else f"CTA: {cta}"
        items.append(ExtractedContentItem(
            title=_short_title(caption) or _short_title(visual) or f"Row {index}",
            description=description or visual,
            format=_get(row, "Format"),
            date=_get(row, "Date") or None,
            platform=_get(row, "Platform", "Channel"),
            content_type=_get(row, "Event", "Type", "Category"),
            hashtags=HASHTAG_PATTERN.findall(caption),
        ))
    return items


def map_campaign_brief_rows(rows: Sequence[Mapping[str, Any]]) -> List[ExtractedContentItem]:
    items = []
    for index, row in enumerate(rows, start=1):
        description = _get(row, "Description") or _get(row, "Objective")
        key_messages = _get(row, "Key Messages", "key_messages")
        if key_messages:
            description = f"{description}\n\nKey messages: {key_messages}".strip()
        items.append(ExtractedContentItem(
            title=_get(row, "Title", "Campaign") or f"Brief {index}",
            description=description,
            format=_get(row, "Deliverables", "Format"),
            date=_get(row, "Timeline", "Date") or None,
            platform=_get(row, "Platform", "Channel"),
            content_type="Campaign Brief",
        ))
    return items


def map_content_ideas_rows(rows: Sequence[Mapping[str, Any]]) -> List[ExtractedContentItem]:
    items = []
    for index, row in enumerate(rows, start=1):
        items.append(ExtractedContentItem(
            title=_get(row, "Title", "Idea", "Concept") or f"Idea {index}",
            description=_get(row, "Description", "Details"),
            format=_get(row, "Format"),
            date=_get(row, "Date") or None,
            platform=_get(row, "Platform"),
            content_type=_get(row, "Category", "Theme", "Type"),
        ))
    return items


def map_generic_rows(rows: Sequence[Mapping[str, Any]]) -> List[ExtractedContentItem]:
    items = []
    for index, row in enumerate(rows, start=1):
        values = [str(value).strip() for value in row.values() if value and str(value).strip()]
        if not values:
            continue
        items.append(ExtractedContentItem(
            title=_short_title(values[0]) or f"Item {index}",
            description=" ".join(values),
        ))
    return items


def map_text_sections(
    sections: Sequence[TextSection],
    preamble: Sequence[str] = (),
) -> List[ExtractedContentItem]:
    """One item per detected section; leading body text becomes an "Overview" item."""
    items = []
    if preamble:
        items.append(ExtractedContentItem(title="Overview", description=" ".join(preamble)))
    for section in sections:
        items.append(ExtractedContentItem(
            title=_short_title(section.title.rstrip(":")) or f"Section {section.line_number}",
            description=" ".join(section.content),
        ))
    return items


ROW_MAPPERS: Dict[DocumentType, Callable[[Sequence[Mapping[str, Any]]], List[ExtractedContentItem]]] = {
    DocumentType.CONTENT_CALENDAR: map_content_calendar_rows,
    DocumentType.CAMPAIGN_BRIEF: map_campaign_brief_rows,
    DocumentType.CONTENT_IDEAS: map_content_ideas_rows,
    DocumentType.BRAND_GUIDELINES: map_generic_rows,
    DocumentType.GENERAL: map_generic_rows,
}


def map_document(document: SourceDocument, document_type: DocumentType) -> List[ExtractedContentItem]:
    """Rule-based items for a document: row mappers for tables, sections for text."""
    if document.rows:
        return ROW_MAPPERS[document_type](document.rows)
    return map_text_sections(document.sections, document.preamble)


# =============================================================================
# Classifier strategies
# =============================================================================

class DocumentClassifier(ABC):
    """Interface shared by the rule-based and model-based strategies."""

    name: str = ""

    @abstractmethod
    async def classify(self, document: SourceDocument) -> DocumentType:
        pass


class RuleBasedClassifier(DocumentClassifier):
    name = "rules"

    async def classify(self, document: SourceDocument) -> DocumentType:
        return detect_document_type(document.rows, document.name, document.text)


class ModelClassifier(DocumentClassifier):
    """
    Classify with the structure-analysis pass.

    If the pass falls back to its default structure the label carries no
    information, so the rule-based heuristics decide instead.
    """

    name = "model"

    def __init__(self, llm, timeout: Optional[float] = STRUCTURE_TIMEOUT_SECONDS):
        self.llm = llm
        self.timeout = timeout

    async def classify(self, document: SourceDocument) -> DocumentType:
        from ingest.analyzer import analyze_structure, is_default_structure

        analysis = await analyze_structure(
            self.llm, document.name, document.text, timeout=self.timeout
        )
        if is_default_structure(analysis):
            logger.info("Model classification unavailable, using rule-based heuristics")
            return detect_document_type(document.rows, document.name, document.text)
        return document_type_from_label(analysis.document_type)


def get_classifier(
    strategy: str = "rules",
    llm=None,
    timeout: Optional[float] = STRUCTURE_TIMEOUT_SECONDS,
) -> DocumentClassifier:
    """Classifier for a strategy name ("rules" or "model")."""
    if strategy == "rules":
        return RuleBasedClassifier()
    if strategy == "model":
        if llm is None:
            raise ValueError("Model classifier requires a completion service")
        return ModelClassifier(llm, timeout=timeout)
    raise ValueError(f"Unknown classifier strategy: {strategy}")
