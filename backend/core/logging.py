"""
Structured logging configuration for the Content Engine backend.

Provides:
- JSON-formatted logs for production
- Human-readable logs for development
- Operation timing
- Audit events for ingestion runs
"""

import logging
import sys
import time
from typing import Optional, Any, Dict
from contextlib import contextmanager

from pythonjsonlogger import jsonlogger

from .config import LOG_LEVEL, LOG_JSON

SERVICE_NAME = "content-engine"


# =============================================================================
# Logger Configuration
# =============================================================================

def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    service_name: str = SERVICE_NAME,
) -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output structured JSON logs
        service_name: Name to include in log entries

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(service_name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    if json_format:
        formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(levelname)s %(name)s %(message)s',
            rename_fields={
                'asctime': '@timestamp',
                'levelname': 'log_level',
            }
        )
    else:
        formatter = logging.Formatter(
            '[%(asctime)s] %(levelname)s %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


# Default logger instance
logger = setup_logging(level=LOG_LEVEL, json_format=LOG_JSON)


# =============================================================================
# Logging Utilities
# =============================================================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: Module name (usually __name__)

    Returns:
        Logger instance nested under the service logger
    """
    return logging.getLogger(f"{SERVICE_NAME}.{name}")


@contextmanager
def log_timing(operation: str, logger: Optional[logging.Logger] = None):
    """
    Context manager to log operation timing.

    Usage:
        with log_timing("structure_analysis"):
            analysis = await analyze_structure(...)
    """
    log = logger or logging.getLogger(SERVICE_NAME)
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = (time.perf_counter() - start) * 1000  # ms
        log.info(f"{operation} completed in {elapsed:.2f}ms")


def log_error(
    message: str,
    error: Optional[Exception] = None,
    context: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log an error with optional context.

    Args:
        message: Error description
        error: The exception if available
        context: Additional context data
    """
    extra = dict(context or {})
    if error:
        extra["error_type"] = type(error).__name__
        extra["error_detail"] = str(error)

    logger.error(message, extra=extra, exc_info=error is not None)


def log_warning(
    message: str,
    context: Optional[Dict[str, Any]] = None,
) -> None:
    """Log a warning with optional context."""
    logger.warning(message, extra=context)


def log_audit(
    action: str,
    resource: str,
    resource_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log an audit event for tracking important actions.

    Args:
        action: The action performed (ingest_start, ingest_complete, ...)
        resource: The resource type (document, ingestion, ...)
        resource_id: ID of the affected resource
        details: Additional details about the action
    """
    audit_logger = logging.getLogger(f"{SERVICE_NAME}.audit")
    audit_logger.info(
        f"AUDIT: {action} {resource}",
        extra={
            "audit": True,
            "action": action,
            "resource": resource,
            "resource_id": resource_id,
            **(details or {}),
        }
    )
