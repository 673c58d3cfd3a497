"""
Content Engine Core Module.

Provides core utilities used across the backend:
- Configuration management
- Error handling
- Logging utilities
- Rate limiting
- Per-document ingestion locks
- Constants
"""

# Error handling
from .errors import (
    ErrorCode,
    ContentEngineError,
    ValidationError,
    NotFoundError,
    DocumentNotFoundError,
    IngestionNotFoundError,
    IngestionInProgressError,
    UnsupportedFormatError,
    DocumentReadError,
    ProcessingError,
    LLMError,
    StructureParseError,
    ExtractionParseError,
    ExtractionServiceError,
    handle_exception,
    raise_validation_error,
)

# Logging
from .logging import (
    setup_logging,
    get_logger,
    log_timing,
    log_error,
    log_warning,
    log_audit,
)

# Rate limiting
from .rate_limit import limiter, RateLimits

# Locks
from .locks import IngestionLockRegistry, ingestion_locks

# Constants
from .constants import (
    ALLOWED_FILE_EXTENSIONS,
    ALLOWED_CONTENT_TYPES,
    FILE_CHUNK_SIZE_BYTES,
    SKIP_LIST_LIMIT,
    STRUCTURE_PREFIX_CHARS,
)

__all__ = [
    # Errors
    "ErrorCode",
    "ContentEngineError",
    "ValidationError",
    "NotFoundError",
    "DocumentNotFoundError",
    "IngestionNotFoundError",
    "IngestionInProgressError",
    "UnsupportedFormatError",
    "DocumentReadError",
    "ProcessingError",
    "LLMError",
    "StructureParseError",
    "ExtractionParseError",
    "ExtractionServiceError",
    "handle_exception",
    "raise_validation_error",
    # Logging
    "setup_logging",
    "get_logger",
    "log_timing",
    "log_error",
    "log_warning",
    "log_audit",
    # Rate limiting
    "limiter",
    "RateLimits",
    # Locks
    "IngestionLockRegistry",
    "ingestion_locks",
    # Constants
    "ALLOWED_FILE_EXTENSIONS",
    "ALLOWED_CONTENT_TYPES",
    "FILE_CHUNK_SIZE_BYTES",
    "SKIP_LIST_LIMIT",
    "STRUCTURE_PREFIX_CHARS",
]
