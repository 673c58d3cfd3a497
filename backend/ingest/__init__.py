"""
Ingest module - Two-pass document ingestion pipeline.

This module turns an uploaded client document into dated content items:
- parsers/: File type specific readers (CSV, XLSX/XLS, PDF, TXT)
- analyzer.py: Pass 1, structure analysis on a fast model tier
- extractor.py: Pass 2, streamed content extraction with JSON repair
- fallback.py: Degraded extraction when pass 2 fails
- classifier.py: Rule-based document typing and row mapping
- summary.py: Skip-list filtering and summary generation
- pipeline.py: Orchestration of the full ingestion flow

Public API:
- DocumentIngestionPipeline: ingest() a SourceDocument or ingest_path() a file
- read_document(): Read a stored file into a SourceDocument
"""

from .models import (
    ExtractedContentItem,
    IngestionResult,
    IngestionStatus,
    IngestionSummary,
    SkipItem,
    SourceDocument,
    StructureAnalysis,
)
from .parsers import PARSERS, BaseParser, get_parser, read_document, supported_extensions
from .classifier import DocumentType, detect_document_type, get_classifier
from .fallback import degraded_extraction
from .pipeline import DocumentIngestionPipeline

__all__ = [
    # Models
    "ExtractedContentItem",
    "IngestionResult",
    "IngestionStatus",
    "IngestionSummary",
    "SkipItem",
    "SourceDocument",
    "StructureAnalysis",
    # Readers
    "BaseParser",
    "PARSERS",
    "get_parser",
    "read_document",
    "supported_extensions",
    # Classification
    "DocumentType",
    "detect_document_type",
    "get_classifier",
    # Pipeline
    "DocumentIngestionPipeline",
    "degraded_extraction",
]
