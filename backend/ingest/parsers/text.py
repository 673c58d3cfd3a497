"""
Plain text and Markdown reader.
"""

import logging
from pathlib import Path
from typing import Optional

from ingest.models import SourceDocument
from .base import BaseParser

logger = logging.getLogger(__name__)


class TextParser(BaseParser):
    """Reader for plain text and markdown files."""

    supported_extensions = [".txt", ".md"]
    supported_mime_types = ["text/plain", "text/markdown"]

    def parse(self, file_path: Path, name: str, mime_type: Optional[str] = None) -> SourceDocument:
        content = self.read_text(file_path)
        sections, preamble = self.split_sections(content)

        logger.debug(f"Text document {name}: {len(sections)} sections, {len(content)} chars")

        return SourceDocument(
            name=name,
            mime_type=mime_type or "text/plain",
            file_type=self.resolve_file_type(file_path),
            text=content,
            sections=sections,
            preamble=preamble,
        )
