"""
Tests for document readers and format dispatch.
"""

import pandas as pd
import pytest

from core.errors import DocumentReadError, UnsupportedFormatError
from ingest.parsers import (
    CSVParser,
    PDFParser,
    SpreadsheetParser,
    TextParser,
    get_parser,
    read_document,
    supported_extensions,
)
from ingest.parsers.base import BaseParser


CALENDAR_CSV = (
    "Date,Format,Caption (copy),Visual,CTA\n"
    "2024-03-01,Reel,Spring launch #spring,Flowers,Shop now\n"
    ",,,,\n"
    "2024-03-04,Carousel,Behind the scenes,Team photo,Learn more\n"
)


class TestDispatch:
    """Test reader selection by extension and MIME type."""

    def test_dispatch_by_extension(self):
        assert isinstance(get_parser("calendar.CSV"), CSVParser)
        assert isinstance(get_parser("plan.xlsx"), SpreadsheetParser)
        assert isinstance(get_parser("legacy.xls"), SpreadsheetParser)
        assert isinstance(get_parser("brief.pdf"), PDFParser)
        assert isinstance(get_parser("notes.txt"), TextParser)

    def test_dispatch_falls_back_to_mime_type(self):
        assert isinstance(get_parser("upload", "text/csv; charset=utf-8"), CSVParser)
        assert isinstance(get_parser("upload", "application/pdf"), PDFParser)
        assert isinstance(get_parser("upload", "application/vnd.ms-excel"), SpreadsheetParser)
        assert isinstance(get_parser("upload", "TEXT/MARKDOWN"), TextParser)

    def test_mime_types_come_from_each_reader(self):
        assert SpreadsheetParser.can_parse_mime(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert CSVParser.can_parse_mime("text/csv; charset=utf-8")
        assert not CSVParser.can_parse_mime("text/plain")

    def test_unknown_type_has_no_parser(self):
        assert get_parser("slides.pptx") is None
        assert get_parser("slides.pptx", "application/octet-stream") is None

    def test_supported_extensions(self):
        assert {".csv", ".xlsx", ".xls", ".pdf", ".txt"} <= set(supported_extensions())

    def test_unsupported_format_raised_before_reading(self, tmp_path):
        """The file does not even exist; the format check comes first."""
        with pytest.raises(UnsupportedFormatError) as exc_info:
            read_document(tmp_path / "deck.pptx")
        assert exc_info.value.status_code == 400


class TestCSVParser:
    def test_rows_keyed_by_header(self, tmp_path):
        path = tmp_path / "calendar.csv"
        path.write_text(CALENDAR_CSV, encoding="utf-8")

        doc = read_document(path)

        assert doc.file_type == ".csv"
        assert doc.name == "calendar.csv"
        assert doc.text == CALENDAR_CSV
        assert len(doc.rows) == 2  # blank row dropped
        assert doc.rows[0]["Caption (copy)"] == "Spring launch #spring"
        assert doc.rows[1]["Date"] == "2024-03-04"

    def test_utf8_bom_is_stripped(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes("﻿Title,Date\nHello,2024-01-01\n".encode("utf-8"))

        doc = read_document(path)

        assert list(doc.rows[0].keys()) == ["Title", "Date"]

    def test_overflow_cells_are_ignored(self):
        rows = CSVParser.parse_rows("A,B\n1,2,3\n")
        assert rows == [{"A": "1", "B": "2"}]

    def test_display_name_overrides_path_name(self, tmp_path):
        path = tmp_path / "abc123_calendar.csv"
        path.write_text(CALENDAR_CSV, encoding="utf-8")

        doc = read_document(path, name="March Calendar.csv", mime_type="text/csv")

        assert doc.name == "March Calendar.csv"
        assert doc.mime_type == "text/csv"

    def test_missing_file_raises_read_error(self, tmp_path):
        with pytest.raises(DocumentReadError) as exc_info:
            read_document(tmp_path / "missing.csv")
        assert exc_info.value.status_code == 422


class TestSpreadsheetParser:
    def test_first_sheet_rows(self, tmp_path):
        path = tmp_path / "calendar.xlsx"
        with pd.ExcelWriter(path) as writer:
            pd.DataFrame({
                "Date": ["2024-03-01", "2024-03-02"],
                "Format": ["Reel", None],
                "Caption": ["Launch", "Teaser"],
            }).to_excel(writer, sheet_name="March", index=False)
            pd.DataFrame({"Other": ["ignored"]}).to_excel(writer, sheet_name="Notes", index=False)

        doc = read_document(path)

        assert doc.file_type == ".xlsx"
        assert doc.rows == [
            {"Date": "2024-03-01", "Format": "Reel", "Caption": "Launch"},
            {"Date": "2024-03-02", "Format": "", "Caption": "Teaser"},
        ]
        assert doc.text.splitlines()[0] == "Date,Format,Caption"
        assert "ignored" not in doc.text

    def test_corrupt_workbook_raises_read_error(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"this is not a workbook")

        with pytest.raises(DocumentReadError):
            read_document(path)

    def test_missing_file_raises_read_error(self, tmp_path):
        with pytest.raises(DocumentReadError):
            read_document(tmp_path / "missing.xlsx")


class TestPDFParser:
    def test_missing_file_raises_read_error(self, tmp_path):
        with pytest.raises(DocumentReadError):
            read_document(tmp_path / "missing.pdf")

    def test_invalid_pdf_raises_read_error(self, tmp_path):
        path = tmp_path / "fake.pdf"
        path.write_text("plain text pretending to be a pdf")

        with pytest.raises(DocumentReadError):
            read_document(path)


class TestTextParser:
    def test_sections_and_preamble(self, tmp_path):
        path = tmp_path / "brief.txt"
        path.write_text(
            "Intro paragraph for the client.\n"
            "\n"
            "OBJECTIVES\n"
            "Grow followers\n"
            "Launch spring range\n"
            "Audience: young professionals\n"
            "Urban, 25-34\n",
            encoding="utf-8",
        )

        doc = read_document(path)

        assert doc.file_type == ".txt"
        assert doc.preamble == ["Intro paragraph for the client."]
        assert [s.title for s in doc.sections] == ["OBJECTIVES", "Audience: young professionals"]
        assert doc.sections[0].content == ["Grow followers", "Launch spring range"]
        assert doc.sections[0].line_number == 2
        assert doc.sections[1].line_number == 5

    def test_markdown_is_read_as_text(self, tmp_path):
        path = tmp_path / "ideas.md"
        path.write_text("IDEAS\nPost a poll\n", encoding="utf-8")

        doc = read_document(path)

        assert doc.sections[0].content == ["Post a poll"]

    def test_mime_dispatch_keeps_reader_extension(self, tmp_path):
        path = tmp_path / "upload"
        path.write_text("NOTES\nhello\n", encoding="utf-8")

        doc = read_document(path, mime_type="text/plain")

        assert doc.file_type == ".txt"


class TestSplitSections:
    def test_no_headers_means_all_preamble(self):
        sections, preamble = BaseParser.split_sections("just some text\nmore text")
        assert sections == []
        assert preamble == ["just some text", "more text"]
