"""
Centralized constants for the Content Engine backend.

All magic numbers, limits, and shared keyword tables should be defined here.
"""

from typing import Dict, FrozenSet, Tuple

# =============================================================================
# Server Configuration
# =============================================================================

DEFAULT_PORT = 8000
DEFAULT_HOST = "0.0.0.0"

# =============================================================================
# LLM Configuration
# =============================================================================

# Both passes ask for strict JSON
LLM_TEMPERATURE = 0.1

# Pass 1 only sees a prefix of the document
STRUCTURE_PREFIX_CHARS = 2000

# Characters of raw model output kept in log previews
RESPONSE_PREVIEW_CHARS = 500

# =============================================================================
# Ingestion
# =============================================================================

# Degraded line-splitting fallback
FALLBACK_MAX_SECTIONS = 5
FALLBACK_DESCRIPTION_CHARS = 150
FALLBACK_DOCUMENT_TYPE = "Document"

# Most recent content ideas passed as the skip list
SKIP_LIST_LIMIT = 50

# Paging for stored content items
CONTENT_ITEMS_PAGE_SIZE = 50
CONTENT_ITEMS_MAX_PAGE_SIZE = 200

# A column-based calendar match needs at least this many indicator columns
CALENDAR_MIN_MATCHING_COLUMNS = 3

CALENDAR_INDICATORS: Tuple[str, ...] = (
    'date', 'day', 'week', 'format', 'caption', 'copy', 'visual', 'image', 'cta', 'event',
)

CAMPAIGN_BRIEF_KEYWORDS: Tuple[str, ...] = ('campaign', 'brief', 'objective')
CONTENT_IDEAS_KEYWORDS: Tuple[str, ...] = ('idea', 'concept', 'theme')

# Filename substrings checked before any content heuristics, in order
FILENAME_TYPE_HINTS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (('calendar', 'schedule'), 'content_calendar'),
    (('brief', 'campaign'), 'campaign_brief'),
    (('guidelines', 'brand'), 'brand_guidelines'),
    (('ideas', 'concepts'), 'content_ideas'),
)

DOCUMENT_TYPE_LABELS: Dict[str, str] = {
    'content_calendar': 'Content Calendar',
    'campaign_brief': 'Campaign Brief',
    'brand_guidelines': 'Brand Guidelines',
    'content_ideas': 'Content Ideas',
    'general': 'General Document',
}

# Platform keyword -> display name. Short tokens are matched as whole words.
PLATFORM_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ('instagram', 'Instagram'),
    ('ig', 'Instagram'),
    ('facebook', 'Facebook'),
    ('fb', 'Facebook'),
    ('twitter', 'Twitter'),
    ('x', 'Twitter'),
    ('linkedin', 'LinkedIn'),
    ('tiktok', 'TikTok'),
    ('youtube', 'YouTube'),
)

# =============================================================================
# File Types
# =============================================================================

ALLOWED_FILE_EXTENSIONS: FrozenSet[str] = frozenset({
    '.csv', '.xlsx', '.xls', '.pdf', '.txt', '.md'
})

ALLOWED_CONTENT_TYPES: FrozenSet[str] = frozenset({
    'text/csv',
    'application/vnd.ms-excel',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'application/pdf',
    'text/plain',
    'text/markdown',
    'application/octet-stream',
})

# =============================================================================
# File Upload/Processing
# =============================================================================

FILE_CHUNK_SIZE_BYTES = 1024 * 1024  # 1MB chunks for file reading
MAX_FILENAME_LENGTH = 255
