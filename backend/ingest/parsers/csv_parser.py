"""
CSV reader.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.errors import DocumentReadError
from ingest.models import SourceDocument
from .base import BaseParser

logger = logging.getLogger(__name__)


class CSVParser(BaseParser):
    """Reader for CSV files such as exported content calendars."""

    supported_extensions = [".csv"]
    supported_mime_types = ["text/csv"]

    def parse(self, file_path: Path, name: str, mime_type: Optional[str] = None) -> SourceDocument:
        """Parse rows into header-keyed records; keep the raw text for the model."""
        content = self.read_text(file_path)

        try:
            rows = self.parse_rows(content)
        except csv.Error as e:
            logger.error(f"Error parsing CSV file {file_path}: {e}")
            raise DocumentReadError(
                f"Malformed CSV: {name}",
                details={"path": str(file_path), "reason": str(e)},
            )

        columns = list(rows[0].keys()) if rows else []
        logger.debug(f"CSV {name}: {len(rows)} rows. Columns: {columns}")

        return SourceDocument(
            name=name,
            mime_type=mime_type or "text/csv",
            file_type=self.resolve_file_type(file_path),
            text=content,
            rows=rows,
        )

    @staticmethod
    def parse_rows(content: str) -> List[Dict[str, Any]]:
        """Stream rows through DictReader, dropping rows with no values."""
        reader = csv.DictReader(io.StringIO(content))
        rows: List[Dict[str, Any]] = []
        for row in reader:
            # DictReader puts overflow cells under a None key
            record = {
                (key or "").strip(): (value.strip() if isinstance(value, str) else value)
                for key, value in row.items()
                if key is not None
            }
            if any(value for value in record.values()):
                rows.append(record)
        return rows
