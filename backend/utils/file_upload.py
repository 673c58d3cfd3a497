"""
Shared file upload utilities.

Validates client uploads and stores them under the project's upload
directory before ingestion.
"""

import logging
import re
import uuid
from pathlib import Path
from typing import Optional, Set, Tuple

from fastapi import UploadFile

from core.config import MAX_FILE_MB, UPLOAD_DIR
from core.constants import (
    ALLOWED_FILE_EXTENSIONS,
    ALLOWED_CONTENT_TYPES,
    FILE_CHUNK_SIZE_BYTES,
    MAX_FILENAME_LENGTH,
)
from core.errors import ErrorCode, ProcessingError, ValidationError

logger = logging.getLogger(__name__)


def sanitize_filename(filename: str) -> str:
    """
    Securely sanitize a filename.

    Args:
        filename: Original filename from upload

    Returns:
        Sanitized filename safe for filesystem operations

    Raises:
        ValidationError: If filename is invalid
    """
    if not filename:
        raise ValidationError("Filename cannot be empty", code=ErrorCode.MISSING_REQUIRED_FIELD)

    # Remove dangerous characters
    safe = re.sub(r"[^\w\.-]", "_", filename)
    safe = safe.lstrip(".-")

    # Enforce length limit
    if len(safe) > MAX_FILENAME_LENGTH:
        name, ext = safe.rsplit(".", 1) if "." in safe else (safe, "")
        if ext:
            safe = name[:MAX_FILENAME_LENGTH - len(ext) - 1] + "." + ext
        else:
            safe = safe[:MAX_FILENAME_LENGTH]

    if not safe:
        raise ValidationError("Filename invalid after sanitization", details={"filename": filename[:100]})

    return safe


def validate_file_extension(
    filename: str,
    allowed: Optional[Set[str]] = None
) -> str:
    """
    Validate file extension against whitelist.

    Returns:
        The extension (lowercase with dot)

    Raises:
        ValidationError: If extension not allowed
    """
    if allowed is None:
        allowed = ALLOWED_FILE_EXTENSIONS

    ext = Path(filename).suffix.lower()

    if ext not in allowed:
        raise ValidationError(
            message=f"Invalid file type '{ext}'. Allowed: {', '.join(sorted(allowed))}",
            code=ErrorCode.INVALID_FILE_TYPE,
            details={"extension": ext, "allowed": sorted(allowed)},
        )

    return ext


def validate_content_type(
    content_type: str,
    allowed: Optional[Set[str]] = None
) -> str:
    """
    Validate content type against whitelist.

    Returns:
        The normalized content type (lowercase, no params)

    Raises:
        ValidationError: If content type not allowed
    """
    if allowed is None:
        allowed = ALLOWED_CONTENT_TYPES

    # Normalize: extract base type without parameters
    base_type = content_type.split(";")[0].strip().lower() if content_type else ""

    if base_type not in allowed:
        raise ValidationError(
            message=f"Invalid content type '{base_type}'",
            code=ErrorCode.INVALID_FILE_TYPE,
            details={"content_type": base_type},
        )

    return base_type


async def save_uploaded_file(
    file: UploadFile,
    project_id: str,
    max_size_mb: int = MAX_FILE_MB,
    upload_dir: Optional[Path] = None,
) -> Tuple[Path, int]:
    """
    Validate an upload and store it under ``upload_dir/<project_id>/``.

    The stored name carries a random prefix so repeated uploads of the same
    file never overwrite each other.

    Returns:
        (path of the stored file, size in bytes)

    Raises:
        ValidationError: On a missing file, bad extension or content type, or oversize upload
        ProcessingError: If the file cannot be written
    """
    if not file or not file.filename:
        raise ValidationError("No file provided", code=ErrorCode.MISSING_REQUIRED_FIELD)

    validate_file_extension(file.filename)
    if file.content_type:
        validate_content_type(file.content_type)

    safe_filename = sanitize_filename(file.filename)
    target_dir = (upload_dir or UPLOAD_DIR) / sanitize_filename(project_id)
    target_dir.mkdir(parents=True, exist_ok=True)

    target_path = target_dir / f"{uuid.uuid4().hex[:12]}_{safe_filename}"
    max_size_bytes = max_size_mb * 1024 * 1024
    total_size = 0

    try:
        with open(target_path, "wb") as f:
            while True:
                chunk = await file.read(FILE_CHUNK_SIZE_BYTES)
                if not chunk:
                    break

                total_size += len(chunk)
                if total_size > max_size_bytes:
                    raise ValidationError(
                        message=f"File exceeds maximum size of {max_size_mb}MB",
                        code=ErrorCode.FILE_TOO_LARGE,
                        details={"max_size_mb": max_size_mb},
                    )

                f.write(chunk)
    except ValidationError:
        # Clean up partial file
        target_path.unlink(missing_ok=True)
        raise
    except OSError as e:
        target_path.unlink(missing_ok=True)
        logger.error(f"Error saving uploaded file: {e}")
        raise ProcessingError("Failed to save uploaded file") from e

    logger.info(f"Saved uploaded file: {target_path.name} ({total_size} bytes)")
    return target_path, total_size


def cleanup_file(file_path: Optional[Path]) -> None:
    """Delete a stored upload, logging rather than raising on failure."""
    try:
        if file_path and file_path.exists():
            file_path.unlink()
            logger.debug(f"Cleaned up file: {file_path}")
    except OSError as e:
        logger.warning(f"Failed to clean up file {file_path}: {e}")
