"""
Base reader interface for client documents.

All file type readers inherit from this base class and produce a
SourceDocument. Read failures are raised, never returned, since there is
nothing to extract from a document that could not be read.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Tuple

from core.errors import DocumentReadError
from ingest.models import SourceDocument, TextSection

logger = logging.getLogger(__name__)


class BaseParser(ABC):
    """Abstract base class for document readers."""

    supported_extensions: List[str] = []
    supported_mime_types: List[str] = []

    @classmethod
    def can_parse(cls, file_type: str) -> bool:
        """Check if this reader handles the given extension (with dot)."""
        return file_type.lower() in cls.supported_extensions

    @classmethod
    def can_parse_mime(cls, mime_type: str) -> bool:
        """Check if this reader handles the given MIME type; parameters such as charset are ignored."""
        return mime_type.split(";")[0].strip().lower() in cls.supported_mime_types

    @abstractmethod
    def parse(self, file_path: Path, name: str, mime_type: Optional[str] = None) -> SourceDocument:
        """
        Read a file and extract its content.

        Args:
            file_path: Path to the stored file
            name: Display name of the document (usually the original filename)
            mime_type: MIME type recorded at upload, if any

        Returns:
            SourceDocument with text, rows and/or sections populated

        Raises:
            DocumentReadError: If the file is missing or unreadable
        """
        pass

    def resolve_file_type(self, file_path: Path) -> str:
        """Extension of the file, or this reader's canonical one when dispatched by MIME type."""
        suffix = file_path.suffix.lower()
        return suffix if self.can_parse(suffix) else self.supported_extensions[0]

    @staticmethod
    def read_text(file_path: Path) -> str:
        """Read a text file as UTF-8, tolerating a BOM."""
        try:
            return file_path.read_text(encoding="utf-8-sig")
        except FileNotFoundError:
            raise DocumentReadError(
                f"File not found: {file_path.name}",
                details={"path": str(file_path)},
            )
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading {file_path}: {e}")
            raise DocumentReadError(
                f"Failed to read document: {file_path.name}",
                details={"path": str(file_path), "reason": str(e)},
            )

    @staticmethod
    def split_sections(text: str) -> Tuple[List[TextSection], List[str]]:
        """
        Heuristically split text into header/body sections.

        A non-blank line is a header when it is entirely upper case (or has no
        cased characters at all) or contains a colon. Lines before the first
        header are returned separately as preamble.
        """
        sections: List[TextSection] = []
        preamble: List[str] = []
        current: Optional[TextSection] = None

        lines = [line.strip() for line in text.split("\n")]
        for index, line in enumerate(line for line in lines if line):
            if line == line.upper() or ":" in line:
                current = TextSection(title=line, content=[], line_number=index + 1)
                sections.append(current)
            elif current is not None:
                current.content.append(line)
            else:
                preamble.append(line)

        return sections, preamble
