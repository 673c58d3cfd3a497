"""
Degraded extraction used when the extraction pass fails outright.
"""

import logging
from datetime import date
from typing import Optional

from core.constants import (
    FALLBACK_DESCRIPTION_CHARS,
    FALLBACK_DOCUMENT_TYPE,
    FALLBACK_MAX_SECTIONS,
)
from ingest.models import (
    ExtractedContentItem,
    IngestionResult,
    IngestionStatus,
    IngestionSummary,
)

logger = logging.getLogger(__name__)


def _truncate(line: str, limit: int = FALLBACK_DESCRIPTION_CHARS) -> str:
    return line[:limit] + ("..." if len(line) > limit else "")


def degraded_extraction(
    document_text: str,
    reason: str,
    today: Optional[date] = None,
) -> IngestionResult:
    """
    One "Section N" item per leading non-blank line of the document.

    Args:
        document_text: Raw document text
        reason: Why the model path failed; recorded as degraded_reason
        today: Date stamped on every item (defaults to the current date)
    """
    today = today or date.today()
    lines = [line.strip() for line in (document_text or "").split("\n") if line.strip()]

    items = [
        ExtractedContentItem(
            title=f"Section {index}",
            description=_truncate(line),
            format="Text",
            date=today.isoformat(),
        )
        for index, line in enumerate(lines[:FALLBACK_MAX_SECTIONS], start=1)
    ]

    logger.warning(f"Using degraded extraction ({reason}): {len(items)} sections")

    return IngestionResult(
        document_type=FALLBACK_DOCUMENT_TYPE,
        summary=IngestionSummary(
            document_type=FALLBACK_DOCUMENT_TYPE,
            total_items=len(items),
            insights=["AI processing failed, using basic extraction"],
        ),
        content_items=items,
        status=IngestionStatus.DEGRADED,
        degraded_reason=reason,
    )
