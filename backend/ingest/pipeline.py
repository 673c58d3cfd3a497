"""
Ingestion pipeline orchestration.

Model strategy:
    structure analysis -> content extraction -> (degraded fallback on error)
    -> result assembly
Rules strategy:
    classification (rules by default, or pass 1) -> row/section mapping
    -> result assembly
"""

import asyncio
import logging
import time
from contextlib import nullcontext
from pathlib import Path
from typing import Optional, Sequence, Union

from core.config import EXTRACTION_TIMEOUT_SECONDS, STRUCTURE_TIMEOUT_SECONDS
from core.constants import DOCUMENT_TYPE_LABELS
from core.errors import ContentEngineError
from core.locks import IngestionLockRegistry, ingestion_locks
from core.logging import log_error, log_timing, log_warning
from ingest.analyzer import analyze_structure, is_default_structure
from ingest.classifier import get_classifier, map_document
from ingest.extractor import extract_content
from ingest.fallback import degraded_extraction
from ingest.models import (
    ExtractedContentItem,
    IngestionResult,
    IngestionStatus,
    IngestionSummary,
    SkipItem,
    SourceDocument,
)
from ingest.parsers import read_document
from ingest.summary import build_summary, filter_skipped

logger = logging.getLogger(__name__)

STRATEGIES = ("model", "rules")
PARTIAL_RECOVERY_REASON = "partial_recovery"
STRUCTURE_FALLBACK_INSIGHT = "Structure analysis unavailable, default structure used"


class DocumentIngestionPipeline:
    """
    Turns a SourceDocument into an IngestionResult.

    Every completion call gets a single attempt bounded by its deadline; a
    timeout is handled like any other failure of that pass.
    """

    def __init__(
        self,
        llm=None,
        strategy: str = "model",
        lock_registry: Optional[IngestionLockRegistry] = None,
        structure_timeout: Optional[float] = STRUCTURE_TIMEOUT_SECONDS,
        extraction_timeout: Optional[float] = EXTRACTION_TIMEOUT_SECONDS,
        classifier: str = "rules",
    ):
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown ingestion strategy: {strategy}")
        if strategy == "model" and llm is None:
            raise ValueError("Model strategy requires a completion service")
        self.llm = llm
        self.strategy = strategy
        self.classifier = get_classifier(classifier, llm, timeout=structure_timeout)
        self.lock_registry = lock_registry or ingestion_locks
        self.structure_timeout = structure_timeout
        self.extraction_timeout = extraction_timeout

    async def ingest(
        self,
        document: SourceDocument,
        skip_items: Sequence[SkipItem] = (),
        strategy: Optional[str] = None,
    ) -> IngestionResult:
        """
        Ingest one document.

        Args:
            document: Parsed source document
            skip_items: Items already imported for this project
            strategy: Overrides the pipeline's default strategy for this run

        Returns:
            IngestionResult whose content_items is always a list
        """
        strategy = strategy or self.strategy
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown ingestion strategy: {strategy}")

        logger.info(
            f"Ingesting {document.name} ({document.file_type}, {len(document.text)} chars) "
            f"with {strategy} strategy"
        )
        started = time.perf_counter()
        with log_timing(f"ingest[{strategy}] {document.name}", logger):
            if strategy == "rules":
                result = await self._ingest_rules(document, skip_items)
            else:
                result = await self._ingest_model(document, skip_items)
        result.processing_time_ms = int((time.perf_counter() - started) * 1000)

        logger.info(
            f"Ingestion of {document.name} finished: {result.status.value}, "
            f"{len(result.content_items)} items, {result.skipped_count} skipped"
        )
        return result

    async def ingest_path(
        self,
        path: Union[str, Path],
        name: Optional[str] = None,
        mime_type: Optional[str] = None,
        skip_items: Sequence[SkipItem] = (),
        lock_key: Optional[str] = None,
        strategy: Optional[str] = None,
    ) -> IngestionResult:
        """
        Read a file from disk and ingest it.

        Raises:
            UnsupportedFormatError: If the file type has no reader
            DocumentReadError: If the file cannot be read
            IngestionInProgressError: If ``lock_key`` is already held
        """
        guard = self.lock_registry.hold(lock_key) if lock_key else nullcontext()
        async with guard:
            document = await asyncio.to_thread(read_document, path, name, mime_type)
            return await self.ingest(document, skip_items, strategy=strategy)

    async def _ingest_model(
        self,
        document: SourceDocument,
        skip_items: Sequence[SkipItem],
    ) -> IngestionResult:
        with log_timing("structure_analysis", logger):
            structure = await analyze_structure(
                self.llm, document.name, document.text, timeout=self.structure_timeout
            )
        structure_fallback = is_default_structure(structure)

        try:
            with log_timing("content_extraction", logger):
                outcome = await extract_content(
                    self.llm,
                    structure,
                    document.name,
                    document.text,
                    skip_items=skip_items,
                    timeout=self.extraction_timeout,
                )
        except ContentEngineError as e:
            log_warning(
                f"Extraction failed for {document.name}, using degraded extraction",
                {"document": document.name, "error_code": e.code.value, "error_message": e.message},
            )
            return degraded_extraction(document.text, reason=f"extraction_failed: {type(e).__name__}")
        except Exception as e:
            log_error("Unexpected extraction failure", e, {"document": document.name})
            return degraded_extraction(document.text, reason=f"extraction_failed: {type(e).__name__}")

        payload = outcome.payload
        if "document_type" in payload.model_fields_set:
            document_type = payload.document_type
        elif payload.summary is not None:
            document_type = payload.summary.document_type
        else:
            document_type = structure.document_type

        result = self._assemble(document_type, payload.content_items, skip_items, payload.summary)
        if structure_fallback:
            result.summary.insights.insert(0, STRUCTURE_FALLBACK_INSIGHT)
        if outcome.partial:
            result.status = IngestionStatus.DEGRADED
            result.degraded_reason = PARTIAL_RECOVERY_REASON
        return result

    async def _ingest_rules(
        self,
        document: SourceDocument,
        skip_items: Sequence[SkipItem],
    ) -> IngestionResult:
        document_type = await self.classifier.classify(document)
        logger.info(
            f"Classified {document.name} as {document_type.value} ({self.classifier.name} classifier)"
        )
        items = map_document(document, document_type)
        return self._assemble(DOCUMENT_TYPE_LABELS[document_type.value], items, skip_items)

    def _assemble(
        self,
        document_type: str,
        items: Sequence[ExtractedContentItem],
        skip_items: Sequence[SkipItem],
        model_summary: Optional[IngestionSummary] = None,
    ) -> IngestionResult:
        kept, removed = filter_skipped(items, skip_items)
        return IngestionResult(
            document_type=document_type,
            summary=build_summary(document_type, kept, model_summary),
            content_items=kept,
            status=IngestionStatus.SUCCESS,
            skipped_count=removed,
        )
