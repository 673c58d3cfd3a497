"""
Pass 2: content extraction.

Streams the extraction response, accumulates it in arrival order, then
parses it. Parsing degrades through fence stripping, embedded-object
extraction, truncation repair and finally recovery of whatever complete
objects the contentItems array holds.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from pydantic import ValidationError as SchemaError

from core.config import EXTRACTION_TIMEOUT_SECONDS
from core.constants import RESPONSE_PREVIEW_CHARS
from core.errors import ContentEngineError, ExtractionParseError, ExtractionServiceError
from ingest.models import (
    ExtractedContentItem,
    ExtractionPayload,
    IngestionSummary,
    SkipItem,
    StructureAnalysis,
)
from ingest.prompts import build_extraction_prompt, build_extraction_system_prompt
from services.llm_service import accumulate_stream
from utils.json_utils import (
    extract_json_from_text,
    fix_truncated_json,
    recover_array_items,
    safe_json_parse,
    strip_code_fences,
)

logger = logging.getLogger(__name__)

CONTENT_ITEMS_KEY = "contentItems"


@dataclass
class ExtractionOutcome:
    payload: ExtractionPayload
    partial: bool = False  # True when the response needed truncation repair or array recovery


def _recover_partial(text: str) -> Optional[ExtractionPayload]:
    """Salvage complete item objects from a malformed response."""
    raw_items = recover_array_items(text, CONTENT_ITEMS_KEY)
    if raw_items is None:
        return None

    items = []
    for raw_item in raw_items:
        try:
            items.append(ExtractedContentItem.model_validate(raw_item))
        except SchemaError:
            logger.debug(f"Dropping unrecoverable item: {str(raw_item)[:100]}")

    logger.info(f"Recovered {len(items)} items from malformed JSON")
    return ExtractionPayload(
        summary=IngestionSummary(
            document_type="Content Calendar",
            insights=["AI returned malformed JSON", "Manual extraction attempted"],
        ),
        content_items=items,
    )


def parse_extraction_response(raw: str) -> ExtractionOutcome:
    """
    Parse and validate an accumulated pass-2 response.

    Raises:
        ExtractionParseError: If no tier yields a payload matching the schema
    """
    text = strip_code_fences(raw or "")
    partial = False

    data = safe_json_parse(text)
    if not isinstance(data, dict):
        data = extract_json_from_text(text)
    if data is None:
        fixed = fix_truncated_json(text)
        if fixed is not None:
            logger.info("Repaired truncated extraction response")
            data = safe_json_parse(fixed)
            partial = True

    if not isinstance(data, dict):
        logger.warning(f"Extraction JSON parse failed, raw response: {text[:RESPONSE_PREVIEW_CHARS]}")
        payload = _recover_partial(text)
        if payload is None:
            raise ExtractionParseError(details={"preview": text[:RESPONSE_PREVIEW_CHARS]})
        return ExtractionOutcome(payload=payload, partial=True)

    try:
        payload = ExtractionPayload.model_validate(data)
    except SchemaError as e:
        raise ExtractionParseError(
            "Extraction response did not match the expected schema",
            details={"errors": e.error_count()},
        ) from e

    return ExtractionOutcome(payload=payload, partial=partial)


async def extract_content(
    llm,
    structure: StructureAnalysis,
    document_name: str,
    document_text: str,
    skip_items: Sequence[SkipItem] = (),
    timeout: Optional[float] = EXTRACTION_TIMEOUT_SECONDS,
) -> ExtractionOutcome:
    """
    Run the content-extraction pass.

    Args:
        llm: Completion service exposing stream()
        structure: Output of pass 1 (or the fallback structure)
        document_name: Display name of the document
        document_text: Full document text, not truncated
        skip_items: Items imported by earlier runs
        timeout: Deadline covering the whole stream

    Raises:
        ExtractionServiceError: If the call fails or times out
        ExtractionParseError: If the response cannot be parsed even partially
    """
    logger.info(
        f"Pass 2: extracting content from {document_name} "
        f"({len(document_text)} chars, skipping {len(skip_items) or 'none'})"
    )
    system = build_extraction_system_prompt(skip_items)
    prompt = build_extraction_prompt(structure, document_name, document_text, skip_items)

    try:
        raw = await asyncio.wait_for(
            accumulate_stream(llm.stream(prompt, system=system, tier="extraction")),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        raise ExtractionServiceError(
            f"Extraction timed out after {timeout}s", details={"document": document_name}
        ) from e
    except ContentEngineError as e:
        raise ExtractionServiceError(e.message, details={"document": document_name, **e.details}) from e
    except Exception as e:
        raise ExtractionServiceError(
            f"Extraction failed: {type(e).__name__}", details={"document": document_name}
        ) from e

    logger.debug(f"Raw extraction response: {raw[:RESPONSE_PREVIEW_CHARS]}")
    outcome = parse_extraction_response(raw)
    logger.info(
        f"Extracted {len(outcome.payload.content_items)} items"
        + (" (partial recovery)" if outcome.partial else "")
    )
    return outcome
