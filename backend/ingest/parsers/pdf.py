"""
PDF reader.
"""

import logging
from pathlib import Path
from typing import Optional

import pdfplumber

from core.errors import DocumentReadError
from ingest.models import SourceDocument
from .base import BaseParser

logger = logging.getLogger(__name__)


class PDFParser(BaseParser):
    """
    Reader for PDF files using the pdfplumber text layer.

    There is no OCR: scanned or image-only PDFs yield empty text.
    """

    supported_extensions = [".pdf"]
    supported_mime_types = ["application/pdf"]

    def parse(self, file_path: Path, name: str, mime_type: Optional[str] = None) -> SourceDocument:
        if not file_path.exists():
            raise DocumentReadError(
                f"File not found: {file_path.name}",
                details={"path": str(file_path)},
            )

        try:
            pages = []
            with pdfplumber.open(file_path) as pdf:
                for page in pdf.pages:
                    pages.append(page.extract_text() or "")
        except Exception as e:
            logger.error(f"Error parsing PDF file {file_path}: {e}")
            raise DocumentReadError(
                f"Failed to parse PDF file: {name}",
                details={"path": str(file_path), "reason": str(e)},
            )

        full_text = "\n".join(pages).strip()
        if not full_text:
            logger.warning(f"PDF {name} has no text layer, extraction will be empty")

        sections, preamble = self.split_sections(full_text)

        return SourceDocument(
            name=name,
            mime_type=mime_type or "application/pdf",
            file_type=self.resolve_file_type(file_path),
            text=full_text,
            sections=sections,
            preamble=preamble,
        )
