"""
Pytest fixtures for Content Engine backend tests.
"""

import json
import os
import sys
import tempfile
from pathlib import Path

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

# Ensure backend is in path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before importing app
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="content_engine_uploads_"))


STRUCTURE_RESPONSE = {
    "documentType": "Content Calendar",
    "structure": {
        "format": "CSV",
        "hasHeaders": True,
        "columns": ["Date", "Format", "Caption"],
        "dataRows": 2,
        "keyFields": ["Date", "Caption"],
        "delimiter": ",",
        "encoding": "UTF-8",
    },
    "insights": ["Weekly posting cadence"],
    "recommendations": [],
}


def make_extraction_response(items, document_type="Content Calendar"):
    return json.dumps({
        "documentType": document_type,
        "summary": {
            "documentType": document_type,
            "totalItems": len(items),
            "platforms": [],
            "insights": [],
        },
        "contentItems": items,
    })


class FakeLLM:
    """
    Scripted stand-in for LLMService.

    complete() returns ``structure`` (or raises ``structure_error``);
    stream() yields ``chunks`` in order (or raises ``stream_error``).
    Every call is recorded in ``calls`` as (method, prompt, system, tier).
    """

    def __init__(self, structure=None, chunks=None, structure_error=None, stream_error=None):
        if structure is None:
            structure = json.dumps(STRUCTURE_RESPONSE)
        self.structure = structure
        self.chunks = list(chunks) if chunks is not None else [make_extraction_response([])]
        self.structure_error = structure_error
        self.stream_error = stream_error
        self.calls = []

    async def complete(self, prompt, *, system, tier="analysis", max_output_tokens=None,
                       timeout=None, json_mode=True):
        self.calls.append(("complete", prompt, system, tier))
        if self.structure_error is not None:
            raise self.structure_error
        return self.structure

    async def stream(self, prompt, *, system, tier="extraction", max_output_tokens=None,
                     json_mode=True):
        self.calls.append(("stream", prompt, system, tier))
        if self.stream_error is not None:
            raise self.stream_error
        for chunk in self.chunks:
            yield chunk


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def sqlite_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def content_store(sqlite_engine):
    from services.content_store import ContentStore
    return ContentStore(sqlite_engine)


@pytest.fixture
def lock_registry():
    from core.locks import IngestionLockRegistry
    return IngestionLockRegistry()


@pytest.fixture
def app(fake_llm, content_store, lock_registry):
    """FastAPI app wired to the fake LLM, in-memory store and a private lock registry."""
    from main import app as fastapi_app
    from api.routers.documents import get_lock_registry, get_pipeline
    from core.rate_limit import limiter
    from ingest import DocumentIngestionPipeline
    from services.content_store import get_content_store

    fastapi_app.dependency_overrides[get_content_store] = lambda: content_store
    fastapi_app.dependency_overrides[get_lock_registry] = lambda: lock_registry
    fastapi_app.dependency_overrides[get_pipeline] = lambda: DocumentIngestionPipeline(
        fake_llm, strategy="model", lock_registry=lock_registry
    )
    limiter.enabled = False
    yield fastapi_app
    limiter.enabled = True
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    """Create an async test client for the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
