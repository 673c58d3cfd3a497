"""
Content Engine Ingestion Service - FastAPI Application

Main entry point for the document ingestion backend API.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
import uvicorn

from core.config import CORS_ORIGINS
from core.constants import DEFAULT_HOST, DEFAULT_PORT
from core.rate_limit import limiter, rate_limit_exceeded_handler
from core.middleware import RequestLoggingMiddleware
from api.routers import documents, system


# Initialize App
app = FastAPI(
    title="Content Engine Ingestion Service",
    description="Two-pass LLM ingestion of client documents into content calendar items",
    version="1.0.0",
)

# Configure rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Request timing / logging
app.add_middleware(RequestLoggingMiddleware)

# CORS Configuration
# Only allow specific origins, methods, and headers
origins = [origin.strip() for origin in CORS_ORIGINS.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=[
        "content-type",
        "accept",
        "accept-language",
        "origin",
    ],
    expose_headers=["content-type", "content-length", "x-process-time"],
    # Cache preflight requests for 1 hour
    max_age=3600,
)

# Include Routers
app.include_router(system.router, tags=["System"])
app.include_router(documents.router, tags=["Document Ingestion"])


if __name__ == "__main__":
    uvicorn.run(app, host=DEFAULT_HOST, port=DEFAULT_PORT)
