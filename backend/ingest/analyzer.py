"""
Pass 1: document structure analysis.

A fast model tier classifies the shape of a bounded document prefix. This
pass never fails outward: any error yields the default structure so that
pass 2 always has a structure context.
"""

import logging
from typing import Optional

from pydantic import ValidationError as SchemaError

from core.config import STRUCTURE_TIMEOUT_SECONDS
from core.constants import RESPONSE_PREVIEW_CHARS
from core.errors import ContentEngineError, StructureParseError
from ingest.models import StructureAnalysis, StructureInfo
from ingest.prompts import STRUCTURE_SYSTEM_PROMPT, build_structure_prompt
from utils.json_utils import safe_json_parse, strip_code_fences

logger = logging.getLogger(__name__)


def default_structure_analysis() -> StructureAnalysis:
    """Generic CSV content-calendar schema used when pass 1 fails."""
    return StructureAnalysis(
        document_type="Content Calendar",
        structure=StructureInfo(
            format="CSV",
            has_headers=True,
            columns=["Week", "Day", "Date", "Format", "Caption", "Visual", "CTA"],
            data_rows=10,
            key_fields=["Date", "Format", "Caption"],
            delimiter=",",
            encoding="UTF-8",
        ),
        insights=["Fallback analysis due to JSON parsing error"],
        recommendations=["Manual review recommended"],
    )


def is_default_structure(analysis: StructureAnalysis) -> bool:
    return analysis == default_structure_analysis()


def parse_structure_response(raw: str) -> StructureAnalysis:
    """
    Parse and validate a pass-1 response.

    Raises:
        StructureParseError: If the text is not JSON or does not match the schema
    """
    text = strip_code_fences(raw or "")
    data = safe_json_parse(text)
    if not isinstance(data, dict):
        raise StructureParseError(details={"preview": text[:RESPONSE_PREVIEW_CHARS]})

    try:
        return StructureAnalysis.model_validate(data)
    except SchemaError as e:
        raise StructureParseError(
            "Structure analysis response did not match the expected schema",
            details={"errors": e.error_count()},
        ) from e


async def analyze_structure(
    llm,
    document_name: str,
    document_text: str,
    timeout: Optional[float] = STRUCTURE_TIMEOUT_SECONDS,
) -> StructureAnalysis:
    """
    Run the structure-analysis pass.

    Args:
        llm: Completion service (see services.llm_service.LLMService)
        document_name: Display name of the document
        document_text: Document text; only a prefix is sent
        timeout: Deadline for the completion call

    Returns:
        The parsed StructureAnalysis, or the default one on any failure
    """
    logger.info(f"Pass 1: analyzing structure of {document_name}")
    try:
        raw = await llm.complete(
            build_structure_prompt(document_name, document_text),
            system=STRUCTURE_SYSTEM_PROMPT,
            tier="analysis",
            timeout=timeout,
        )
        logger.debug(f"Raw structure response: {(raw or '')[:RESPONSE_PREVIEW_CHARS]}")
        analysis = parse_structure_response(raw)
    except ContentEngineError as e:
        logger.warning(f"Structure analysis failed ({e.code.value}): {e.message}. Using fallback structure")
        return default_structure_analysis()
    except Exception as e:
        logger.warning(f"Structure analysis call failed ({type(e).__name__}: {e}). Using fallback structure")
        return default_structure_analysis()

    logger.info(
        f"Structure analysis: {analysis.document_type}, "
        f"{analysis.structure.format}, ~{analysis.structure.data_rows} rows"
    )
    return analysis
