"""
Request logging middleware for the Content Engine backend.
"""

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .logging import SERVICE_NAME


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request logging (sanitized, no query params or body).
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.logger = logging.getLogger(f"{SERVICE_NAME}.requests")

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        self.logger.info(
            f"{request.method} {request.url.path} "
            f"status={response.status_code} "
            f"duration={process_time:.3f}s"
        )

        # Add timing header
        response.headers["X-Process-Time"] = f"{process_time:.3f}"

        return response
