"""
Centralized error types for the Content Engine backend.

Provides consistent error handling across the ingestion pipeline and API with:
- Type-safe error classes
- HTTP status code mapping
- Structured error responses
"""

from enum import Enum
from typing import Optional, Dict, Any
from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    """Application error codes for consistent error identification."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

    # Not found errors (404)
    NOT_FOUND = "NOT_FOUND"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    INGESTION_NOT_FOUND = "INGESTION_NOT_FOUND"

    # Conflict errors (409)
    CONFLICT = "CONFLICT"
    INGESTION_IN_PROGRESS = "INGESTION_IN_PROGRESS"

    # Unprocessable (422)
    DOCUMENT_READ_ERROR = "DOCUMENT_READ_ERROR"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    LLM_ERROR = "LLM_ERROR"
    PROCESSING_ERROR = "PROCESSING_ERROR"
    STRUCTURE_PARSE_ERROR = "STRUCTURE_PARSE_ERROR"
    EXTRACTION_PARSE_ERROR = "EXTRACTION_PARSE_ERROR"
    EXTRACTION_SERVICE_ERROR = "EXTRACTION_SERVICE_ERROR"


class ContentEngineError(Exception):
    """Base exception class for Content Engine application errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "code": self.code.value,
                "message": self.message,
                **self.details,
            }
        )


# =============================================================================
# Request / Resource Errors
# =============================================================================

class ValidationError(ContentEngineError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str = "Validation failed",
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class NotFoundError(ContentEngineError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        message: str = "Resource not found",
        code: ErrorCode = ErrorCode.NOT_FOUND,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class DocumentNotFoundError(NotFoundError):
    """Raised when a reference document is not found."""

    def __init__(self, doc_id: str):
        super().__init__(
            message=f"Document not found: {doc_id}",
            code=ErrorCode.DOCUMENT_NOT_FOUND,
            details={"doc_id": doc_id},
        )


class IngestionNotFoundError(NotFoundError):
    """Raised when a stored ingestion run is not found."""

    def __init__(self, ingestion_id: str):
        super().__init__(
            message=f"Ingestion not found: {ingestion_id}",
            code=ErrorCode.INGESTION_NOT_FOUND,
            details={"ingestion_id": ingestion_id},
        )


class IngestionInProgressError(ContentEngineError):
    """Raised when a document is already being ingested."""

    def __init__(self, key: str):
        super().__init__(
            code=ErrorCode.INGESTION_IN_PROGRESS,
            message=f"An ingestion is already running for document: {key}",
            status_code=status.HTTP_409_CONFLICT,
            details={"document": key},
        )


# =============================================================================
# Document Reading Errors (surfaced to callers)
# =============================================================================

class UnsupportedFormatError(ContentEngineError):
    """Raised when a file extension / MIME type has no reader."""

    def __init__(self, file_type: str, supported: Optional[list] = None):
        super().__init__(
            code=ErrorCode.UNSUPPORTED_FORMAT,
            message=f"Unsupported file format: {file_type or 'unknown'}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"file_type": file_type, "supported": sorted(supported or [])},
        )


class DocumentReadError(ContentEngineError):
    """Raised when a document is missing or cannot be read."""

    def __init__(
        self,
        message: str = "Failed to read document",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=ErrorCode.DOCUMENT_READ_ERROR,
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


# =============================================================================
# Processing / LLM Errors (absorbed by pipeline fallbacks)
# =============================================================================

class ProcessingError(ContentEngineError):
    """Raised when document/data processing fails."""

    def __init__(
        self,
        message: str = "Processing failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=ErrorCode.PROCESSING_ERROR,
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
        )


class LLMError(ContentEngineError):
    """Raised when a completion call fails."""

    def __init__(
        self,
        message: str = "LLM request failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=ErrorCode.LLM_ERROR,
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
        )


class StructureParseError(ContentEngineError):
    """Raised when the structure-analysis response is not usable JSON."""

    def __init__(
        self,
        message: str = "Structure analysis response could not be parsed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=ErrorCode.STRUCTURE_PARSE_ERROR,
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
        )


class ExtractionParseError(ContentEngineError):
    """Raised when the extraction response is not usable JSON, even partially."""

    def __init__(
        self,
        message: str = "Extraction response could not be parsed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=ErrorCode.EXTRACTION_PARSE_ERROR,
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
        )


class ExtractionServiceError(ContentEngineError):
    """Raised when the extraction call itself fails or times out."""

    def __init__(
        self,
        message: str = "Extraction request failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=ErrorCode.EXTRACTION_SERVICE_ERROR,
            message=message,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details=details,
        )


# =============================================================================
# Error Handler Helpers
# =============================================================================

def handle_exception(exc: Exception, default_message: str = "An unexpected error occurred") -> HTTPException:
    """
    Convert any exception to an appropriate HTTPException.

    Args:
        exc: The exception to handle
        default_message: Message to use for unknown exceptions

    Returns:
        HTTPException with appropriate status code and detail
    """
    if isinstance(exc, ContentEngineError):
        return exc.to_http_exception()

    if isinstance(exc, HTTPException):
        return exc

    import logging
    logging.error(f"Unexpected error: {exc}", exc_info=True)

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "code": ErrorCode.INTERNAL_ERROR.value,
            "message": default_message,
        }
    )


def raise_validation_error(
    field: str,
    message: str,
    value: Optional[Any] = None,
) -> None:
    """Helper to raise a validation error with field context."""
    details = {"field": field}
    if value is not None:
        details["value"] = str(value)[:100]  # Truncate for safety
    raise ValidationError(
        message=f"Invalid {field}: {message}",
        code=ErrorCode.INVALID_INPUT,
        details=details,
    )
