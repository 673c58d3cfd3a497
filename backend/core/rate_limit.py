"""
Rate limiting configuration using slowapi.

Ingestion runs call a paid completion service twice per document, so the
upload and re-processing endpoints are throttled per client address.
"""

import logging
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# Initialize the limiter with IP-based key extraction
limiter = Limiter(key_func=get_remote_address)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Custom handler for rate limit exceeded errors.

    Returns a JSON response with error details and retry information.
    """
    logger.warning(
        f"Rate limit exceeded for {get_remote_address(request)}: {exc.detail}"
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": "Too many requests. Please slow down.",
            "detail": str(exc.detail),
        }
    )


class RateLimits:
    """Centralized rate limit configurations."""

    # File upload + ingestion - restrictive, each run makes two LLM calls
    UPLOAD = "10/minute"

    # Re-processing an already stored document
    PROCESS = "20/minute"

    # Read-only history / result lookups
    READ = "120/minute"
