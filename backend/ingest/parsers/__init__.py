"""
Document readers for the supported client file types.

This module provides format dispatch by extension (falling back to the
MIME type) and a single read_document() entry point.
"""

from pathlib import Path
from typing import Optional, Union

from core.errors import UnsupportedFormatError
from ingest.models import SourceDocument
from .base import BaseParser
from .text import TextParser
from .pdf import PDFParser
from .csv_parser import CSVParser
from .spreadsheet import SpreadsheetParser

__all__ = [
    "BaseParser",
    "TextParser",
    "PDFParser",
    "CSVParser",
    "SpreadsheetParser",
    "get_parser",
    "read_document",
    "supported_extensions",
    "PARSERS",
]

# Registry of all available readers
PARSERS = [
    CSVParser(),
    SpreadsheetParser(),
    PDFParser(),
    TextParser(),
]


def supported_extensions() -> list:
    return [ext for parser in PARSERS for ext in parser.supported_extensions]


def get_parser(file_name: Union[str, Path], mime_type: Optional[str] = None) -> Optional[BaseParser]:
    """
    Get the reader for a file based on its extension, then its MIME type.

    Args:
        file_name: Filename or path of the document
        mime_type: MIME type recorded at upload, if any

    Returns:
        A reader instance that can handle the file, or None if none matches
    """
    suffix = Path(file_name).suffix.lower()
    for parser in PARSERS:
        if parser.can_parse(suffix):
            return parser

    if mime_type:
        for parser in PARSERS:
            if parser.can_parse_mime(mime_type):
                return parser
    return None


def read_document(
    file_path: Union[str, Path],
    name: Optional[str] = None,
    mime_type: Optional[str] = None,
) -> SourceDocument:
    """
    Read a stored document into a SourceDocument.

    Raises:
        UnsupportedFormatError: Before any reading, if no reader matches
        DocumentReadError: If the file is missing or unreadable
    """
    file_path = Path(file_path)
    display_name = name or file_path.name

    parser = get_parser(display_name, mime_type) or get_parser(file_path, mime_type)
    if parser is None:
        file_type = Path(display_name).suffix.lower() or (mime_type or "")
        raise UnsupportedFormatError(file_type, supported=supported_extensions())

    return parser.parse(file_path, display_name, mime_type)
