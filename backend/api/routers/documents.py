"""
Documents router - Document upload, ingestion, history and analytics endpoints.
"""

import time
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from api.schemas import (
    AnalyticsResponse,
    ContentItemsResponse,
    HistoryResponse,
    IngestionData,
    IngestionResponse,
    IngestionSummaryOut,
    ProcessExistingRequest,
    StoredIngestionResponse,
)
from core import (
    ContentEngineError,
    DocumentReadError,
    IngestionLockRegistry,
    ProcessingError,
    RateLimits,
    UnsupportedFormatError,
    get_logger,
    handle_exception,
    ingestion_locks,
    limiter,
    log_audit,
    log_error,
)
from core.config import INGEST_CLASSIFIER, INGEST_STRATEGY
from core.constants import CONTENT_ITEMS_PAGE_SIZE
from ingest import DocumentIngestionPipeline, IngestionResult, IngestionStatus
from services.content_store import ContentStore, get_content_store
from services.llm_service import LLMService, get_llm_service
from utils.file_upload import cleanup_file, save_uploaded_file

logger = get_logger(__name__)
router = APIRouter()


def get_lock_registry() -> IngestionLockRegistry:
    return ingestion_locks


def get_pipeline(
    llm: LLMService = Depends(get_llm_service),
    locks: IngestionLockRegistry = Depends(get_lock_registry),
) -> DocumentIngestionPipeline:
    return DocumentIngestionPipeline(
        llm, strategy=INGEST_STRATEGY, lock_registry=locks, classifier=INGEST_CLASSIFIER
    )


def is_import_complete(result: IngestionResult, already_processed: int) -> bool:
    """Nothing new came back from a clean run over a document seen before."""
    return (
        result.status == IngestionStatus.SUCCESS
        and not result.content_items
        and already_processed > 0
    )


def completion_message(result: IngestionResult, already_processed: int) -> str:
    found = len(result.content_items)
    if result.status == IngestionStatus.DEGRADED:
        reason = result.degraded_reason or ""
        if reason.startswith("extraction_failed"):
            return f"Document processed with fallback method! Extracted {found} content sections."
        return (
            "Document only partially processed: the AI response was cut off. "
            f"Recovered {found} content items; re-process the document to import the rest."
        )
    if found == 0 and already_processed > 0:
        return (
            "All content has been successfully imported! No new items found - "
            f"you've processed all {already_processed} items from this document."
        )
    if found == 0:
        return (
            "No content items found in this document. "
            "Please check if the document contains extractable content."
        )
    return f"Extracted {found} content items."


def build_ingestion_response(
    ingestion_id: str,
    file_name: str,
    result: IngestionResult,
    already_processed: int,
    document_id: Optional[str] = None,
) -> IngestionResponse:
    message = completion_message(result, already_processed)
    summary = IngestionSummaryOut(
        **result.summary.model_dump(),
        is_complete=is_import_complete(result, already_processed),
        already_processed=already_processed,
        message=message,
    )
    return IngestionResponse(
        success=True,
        message=message,
        data=IngestionData(
            ingestion_id=ingestion_id,
            document_id=document_id,
            file_name=file_name,
            document_type=result.document_type,
            summary=summary,
            content_items=result.content_items,
            status=result.status,
            degraded_reason=result.degraded_reason,
            skipped_count=result.skipped_count,
        ),
    )


async def _run_ingestion(
    project_id: str,
    document_id: str,
    file_path: Path,
    file_name: str,
    mime_type: Optional[str],
    pipeline: DocumentIngestionPipeline,
    store: ContentStore,
    strategy: Optional[str] = None,
) -> IngestionResponse:
    skip_items = store.get_skip_items(project_id)
    logger.info(f"Ingesting {file_name} for project {project_id} with {len(skip_items)} skip items")

    started = time.perf_counter()
    try:
        result = await pipeline.ingest_path(
            file_path,
            name=file_name,
            mime_type=mime_type,
            skip_items=skip_items,
            lock_key=document_id,
            strategy=strategy,
        )
    except (DocumentReadError, UnsupportedFormatError) as e:
        store.record_failed_ingestion(
            project_id,
            file_name,
            e.message,
            reference_document_id=document_id,
            processing_time_ms=int((time.perf_counter() - started) * 1000),
        )
        raise

    ingestion_id = store.save_ingestion(
        project_id, file_name, result, reference_document_id=document_id
    )
    log_audit(
        action="ingest_complete",
        resource="ingestion",
        resource_id=ingestion_id,
        details={
            "project_id": project_id,
            "file_name": file_name,
            "status": result.status.value,
            "items": len(result.content_items),
        },
    )
    return build_ingestion_response(
        ingestion_id, file_name, result, len(skip_items), document_id=document_id
    )


@router.post("/document-ingestion/{project_id}/ingest", response_model=IngestionResponse)
@limiter.limit(RateLimits.UPLOAD)
async def ingest_document(
    request: Request,
    project_id: str,
    file: UploadFile = File(...),
    pipeline: DocumentIngestionPipeline = Depends(get_pipeline),
    store: ContentStore = Depends(get_content_store),
):
    """
    Upload a client document and extract content items from it.

    Supports: CSV, XLSX, XLS, PDF, TXT, MD files.
    """
    file_path = None
    try:
        file_path, size = await save_uploaded_file(file, project_id)
        document_id = store.add_reference_document(
            project_id, file.filename, file_path, mime_type=file.content_type, size_bytes=size
        )
        log_audit(
            action="ingest_start",
            resource="document",
            resource_id=document_id,
            details={"project_id": project_id, "file_name": file.filename, "size_bytes": size},
        )
        return await _run_ingestion(
            project_id, document_id, file_path, file.filename, file.content_type, pipeline, store
        )

    except ContentEngineError as e:
        raise e.to_http_exception()
    except Exception as e:
        cleanup_file(file_path)
        log_error("Document ingestion error", error=e, context={"uploaded_file": file.filename})
        raise handle_exception(
            ProcessingError("An error occurred during document ingestion.")
        )


@router.post("/document-ingestion/{project_id}/process-existing", response_model=IngestionResponse)
@limiter.limit(RateLimits.PROCESS)
async def process_existing_document(
    request: Request,
    project_id: str,
    body: ProcessExistingRequest,
    pipeline: DocumentIngestionPipeline = Depends(get_pipeline),
    store: ContentStore = Depends(get_content_store),
):
    """Re-ingest a stored reference document, skipping already imported items."""
    try:
        document = store.get_reference_document(body.document_id, project_id)
        file_name = body.document_name or document["file_name"]
        log_audit(
            action="reprocess_start",
            resource="document",
            resource_id=body.document_id,
            details={"project_id": project_id, "file_name": file_name},
        )
        return await _run_ingestion(
            project_id,
            body.document_id,
            Path(document["file_path"]),
            file_name,
            document["mime_type"],
            pipeline,
            store,
            strategy=body.strategy,
        )

    except ContentEngineError as e:
        raise e.to_http_exception()
    except Exception as e:
        log_error("Document re-processing error", error=e, context={"document_id": body.document_id})
        raise handle_exception(
            ProcessingError("An error occurred while processing the document.")
        )


@router.get("/document-ingestion/ingestions/{ingestion_id}", response_model=StoredIngestionResponse)
@limiter.limit(RateLimits.READ)
async def get_ingestion(
    request: Request,
    ingestion_id: str,
    store: ContentStore = Depends(get_content_store),
):
    """Get one stored ingestion run, including its extracted data."""
    try:
        return store.get_ingestion(ingestion_id)
    except ContentEngineError as e:
        raise e.to_http_exception()
    except Exception as e:
        log_error("Error fetching ingestion", error=e, context={"ingestion_id": ingestion_id})
        raise handle_exception(
            ProcessingError("An error occurred while fetching the ingestion.")
        )


@router.get("/document-ingestion/{project_id}/history", response_model=HistoryResponse)
@limiter.limit(RateLimits.READ)
async def get_ingestion_history(
    request: Request,
    project_id: str,
    store: ContentStore = Depends(get_content_store),
):
    """List ingestion runs for a project, newest first."""
    try:
        return HistoryResponse(
            project_id=project_id,
            ingestions=store.get_ingestion_history(project_id),
        )
    except Exception as e:
        log_error("Error fetching ingestion history", error=e, context={"project_id": project_id})
        raise handle_exception(
            ProcessingError("An error occurred while fetching ingestion history.")
        )


@router.get(
    "/document-ingestion/ingestions/{ingestion_id}/content-items",
    response_model=ContentItemsResponse,
)
@limiter.limit(RateLimits.READ)
async def get_ingestion_content_items(
    request: Request,
    ingestion_id: str,
    page: int = 1,
    limit: int = CONTENT_ITEMS_PAGE_SIZE,
    store: ContentStore = Depends(get_content_store),
):
    """Page through the content items stored for one ingestion run."""
    try:
        return store.get_content_items(ingestion_id, page=page, limit=limit)
    except ContentEngineError as e:
        raise e.to_http_exception()
    except Exception as e:
        log_error("Error fetching content items", error=e, context={"ingestion_id": ingestion_id})
        raise handle_exception(
            ProcessingError("An error occurred while fetching content items.")
        )


@router.get("/document-ingestion/{project_id}/analytics", response_model=AnalyticsResponse)
@limiter.limit(RateLimits.READ)
async def get_ingestion_analytics(
    request: Request,
    project_id: str,
    store: ContentStore = Depends(get_content_store),
):
    """Ingestion run counts, timing and document-type breakdown for a project."""
    try:
        return store.get_analytics(project_id)
    except Exception as e:
        log_error("Error fetching ingestion analytics", error=e, context={"project_id": project_id})
        raise handle_exception(
            ProcessingError("An error occurred while fetching ingestion analytics.")
        )
