"""
Result assembly: skip-list backstop, date range, platforms and insights.
"""

import logging
import re
from collections import Counter
from typing import List, Optional, Sequence, Tuple

from core.constants import PLATFORM_KEYWORDS
from ingest.models import DateRange, ExtractedContentItem, IngestionSummary, SkipItem

logger = logging.getLogger(__name__)


def normalize_title(title: Optional[str]) -> str:
    """Case-folded title with surrounding quotes stripped and whitespace collapsed."""
    text = (title or "").strip().strip("\"'“”‘’").strip()
    return re.sub(r"\s+", " ", text).casefold()


def filter_skipped(
    items: Sequence[ExtractedContentItem],
    skip_items: Sequence[SkipItem],
) -> Tuple[List[ExtractedContentItem], int]:
    """
    Drop items matching a skip item by (normalized title, date).

    A skip item without a date matches on title alone.

    Returns:
        (kept items in original order, number removed)
    """
    if not skip_items:
        return list(items), 0

    dated = {(normalize_title(s.title), s.date) for s in skip_items if s.date}
    undated = {normalize_title(s.title) for s in skip_items if not s.date}

    kept = []
    for item in items:
        title = normalize_title(item.title)
        if title in undated or (title, item.date) in dated:
            continue
        kept.append(item)

    removed = len(items) - len(kept)
    if removed:
        logger.info(f"Skip-list filter removed {removed} already imported items")
    return kept, removed


def extract_date_range(items: Sequence[ExtractedContentItem]) -> Optional[DateRange]:
    dates = sorted(item.date for item in items if item.date)
    if not dates:
        return None
    return DateRange(start=dates[0], end=dates[-1], total_days=len(dates))


def detect_platforms(items: Sequence[ExtractedContentItem]) -> List[str]:
    """Platforms named in each item's platform or format, in first-seen order."""
    found: List[str] = []
    for item in items:
        haystack = f"{item.platform} {item.format}".lower()
        for keyword, platform in PLATFORM_KEYWORDS:
            if platform in found:
                continue
            if len(keyword) <= 2:
                matched = re.search(rf"\b{re.escape(keyword)}\b", haystack) is not None
            else:
                matched = keyword in haystack
            if matched:
                found.append(platform)
    return found


def generate_insights(
    items: Sequence[ExtractedContentItem],
    platforms: Sequence[str],
    date_range: Optional[DateRange],
) -> List[str]:
    insights = []

    if items:
        insights.append(f"Found {len(items)} content items")

    if platforms:
        insights.append(f"Targeting {', '.join(platforms)} platforms")

    if date_range and date_range.total_days:
        insights.append(f"Content spans {date_range.total_days} days")

    formats = Counter(item.format for item in items if item.format)
    if formats:
        top_format, count = formats.most_common(1)[0]
        insights.append(f"Most common format: {top_format} ({count} items)")

    return insights


def build_summary(
    document_type: str,
    items: Sequence[ExtractedContentItem],
    model_summary: Optional[IngestionSummary] = None,
) -> IngestionSummary:
    """
    Summary for the final item list.

    Counts are always recomputed from ``items``. Model-reported platforms
    and date range are kept when the items themselves carry none, and the
    model's insights come before the generated ones.
    """
    date_range = extract_date_range(items)
    platforms = detect_platforms(items)

    if model_summary is not None:
        if date_range is None and model_summary.date_range is not None:
            date_range = model_summary.date_range
        for platform in model_summary.platforms:
            if platform not in platforms:
                platforms.append(platform)

    insights = list(model_summary.insights) if model_summary else []
    for insight in generate_insights(items, platforms, date_range):
        if insight not in insights:
            insights.append(insight)

    return IngestionSummary(
        document_type=document_type,
        total_items=len(items),
        date_range=date_range,
        platforms=platforms,
        insights=insights,
    )
