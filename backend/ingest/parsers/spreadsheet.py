"""
Excel spreadsheet reader (first worksheet only).
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from core.errors import DocumentReadError
from ingest.models import SourceDocument
from .base import BaseParser

logger = logging.getLogger(__name__)


class SpreadsheetParser(BaseParser):
    """Reader for .xlsx / .xls workbooks using pandas."""

    supported_extensions = [".xlsx", ".xls"]
    supported_mime_types = [
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-excel",
    ]

    def parse(self, file_path: Path, name: str, mime_type: Optional[str] = None) -> SourceDocument:
        if not file_path.exists():
            raise DocumentReadError(
                f"File not found: {file_path.name}",
                details={"path": str(file_path)},
            )

        try:
            # sheet_name=0 -> first worksheet only
            df = pd.read_excel(file_path, sheet_name=0, dtype=str)
        except Exception as e:
            logger.error(f"Error parsing spreadsheet {file_path}: {e}")
            raise DocumentReadError(
                f"Failed to parse Excel file: {name}",
                details={"path": str(file_path), "reason": str(e)},
            )

        df = df.fillna("")
        df.columns = [str(col).strip() for col in df.columns]
        rows = self.frame_to_rows(df)

        logger.debug(f"Spreadsheet {name}: {len(rows)} rows. Columns: {list(df.columns)}")

        return SourceDocument(
            name=name,
            mime_type=mime_type or self.supported_mime_types[0],
            file_type=self.resolve_file_type(file_path),
            text=df.to_csv(index=False),
            rows=rows,
        )

    @staticmethod
    def frame_to_rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
        """Convert a sheet to header-keyed records, skipping empty rows."""
        rows = []
        for record in df.to_dict(orient="records"):
            cleaned = {key: str(value).strip() for key, value in record.items()}
            if any(cleaned.values()):
                rows.append(cleaned)
        return rows
