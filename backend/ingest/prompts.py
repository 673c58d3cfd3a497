"""
Prompts for the two-pass ingestion pipeline.
"""

import json
from typing import Sequence

from core.constants import STRUCTURE_PREFIX_CHARS
from ingest.models import SkipItem, StructureAnalysis

STRUCTURE_SYSTEM_PROMPT = """You are a document structure analyst. Analyze the provided document and determine its structure, format, and data organization.

CRITICAL: You MUST return ONLY valid JSON. Do not include any explanations, markdown formatting, or text outside the JSON object.

Return a JSON response with this EXACT format:

{
  "documentType": "Content Calendar",
  "structure": {
    "format": "CSV",
    "hasHeaders": true,
    "columns": ["column1", "column2", "column3"],
    "dataRows": 10,
    "keyFields": ["date", "content", "platform", "format"],
    "delimiter": ",",
    "encoding": "UTF-8"
  },
  "insights": ["key structural insights"],
  "recommendations": ["how to best parse this data"]
}

IMPORTANT: Return ONLY the JSON object, nothing else."""

EXTRACTION_SYSTEM_PROMPT = """You are an expert data extraction specialist. Based on the document structure analysis, extract all relevant content and organize it into a structured format.

CRITICAL: You MUST return ONLY valid JSON. Do not include any markdown formatting, explanations, or text outside the JSON object.

Return a JSON response with this EXACT format:

{
  "documentType": "Content Calendar",
  "summary": {
    "documentType": "Content Calendar",
    "totalItems": number,
    "dateRange": {
      "start": "YYYY-MM-DD or null",
      "end": "YYYY-MM-DD or null"
    },
    "platforms": ["Instagram", "Facebook", "TikTok"],
    "insights": ["key insights about the content"]
  },
  "contentItems": [
    {
      "title": "Post title or description",
      "description": "Full post content",
      "format": "Feed carousel, Reel, Story, etc.",
      "date": "YYYY-MM-DD",
      "platform": "Instagram, Facebook, etc.",
      "type": "Educational, Promotional, etc.",
      "hashtags": ["#hashtag1", "#hashtag2"]
    }
  ]
}

IMPORTANT:
- Extract ALL content items from the document, not just samples
- Process EVERY SINGLE ROW/ITEM in the document
- Do not skip any content items, even if there are many
- Return ONLY the JSON object, nothing else
- Include every single content item found in the document
- If the document has 50 items, return 50 items
- If the document has 100 items, return 100 items
- For very large documents, focus on extracting the most important/recent content first"""


def build_structure_prompt(document_name: str, document_text: str) -> str:
    """User message for pass 1. Only a bounded prefix of the text is sent."""
    return (
        "Analyze the structure of this document to understand how to parse it correctly:\n\n"
        f"Document: {document_name}\n"
        f"Content: {document_text[:STRUCTURE_PREFIX_CHARS]}"
    )


def build_skip_instruction(skip_items: Sequence[SkipItem]) -> str:
    """
    Numbered "already processed" list, in input order.

    Returns an empty string when there is nothing to skip.
    """
    if not skip_items:
        return ""

    lines = [
        f'{index}. "{item.title}" ({item.date or "no date"})'
        for index, item in enumerate(skip_items, start=1)
    ]
    return (
        "\nCRITICAL: DO NOT extract these items that have already been processed:\n"
        + "\n".join(lines)
        + "\n\nONLY extract NEW items that are NOT in the above list."
    )


def build_extraction_system_prompt(skip_items: Sequence[SkipItem]) -> str:
    skip_instruction = build_skip_instruction(skip_items)
    if not skip_instruction:
        return EXTRACTION_SYSTEM_PROMPT
    return f"{EXTRACTION_SYSTEM_PROMPT}\n{skip_instruction}"


def build_extraction_prompt(
    structure: StructureAnalysis,
    document_name: str,
    document_text: str,
    skip_items: Sequence[SkipItem],
) -> str:
    """User message for pass 2: structure context plus the full, uncapped document."""
    structure_json = json.dumps(structure.model_dump(by_alias=True), indent=2)
    prompt = (
        "Based on the structure analysis, extract ALL content from this document:\n\n"
        f"Structure Analysis: {structure_json}\n\n"
        f"Document: {document_name}\n"
        f"Full Content: {document_text}\n"
    )
    skip_instruction = build_skip_instruction(skip_items)
    if skip_instruction:
        prompt += f"\n{skip_instruction}"
    return prompt
