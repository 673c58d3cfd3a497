"""
Tests for rule-based document classification and row mapping.
"""

import json

import pytest

from conftest import FakeLLM
from core.errors import LLMError
from ingest.classifier import (
    DocumentType,
    ModelClassifier,
    RuleBasedClassifier,
    detect_document_type,
    document_type_from_label,
    get_classifier,
    is_content_calendar,
    map_campaign_brief_rows,
    map_content_calendar_rows,
    map_content_ideas_rows,
    map_document,
    map_generic_rows,
)
from ingest.models import SourceDocument, TextSection


CALENDAR_ROW = {
    "Date": "2024-03-01",
    "Format": "Reel",
    "Caption (copy)": "Spring is here! #spring #newin",
    "Visual": "Flat lay of the new range",
    "CTA": "Shop now",
}


class TestDetectDocumentType:
    def test_calendar_columns(self):
        rows = [CALENDAR_ROW]
        assert detect_document_type(rows, "client.csv") == DocumentType.CONTENT_CALENDAR

    def test_filename_hint_wins(self):
        rows = [{"Idea": "Poll", "Description": "Ask followers"}]
        assert detect_document_type(rows, "Q2_Campaign_Brief.xlsx") == DocumentType.CAMPAIGN_BRIEF
        assert detect_document_type([], "Brand Guidelines.pdf") == DocumentType.BRAND_GUIDELINES
        assert detect_document_type([], "march-schedule.csv") == DocumentType.CONTENT_CALENDAR

    def test_two_indicator_columns_is_not_a_calendar(self):
        assert not is_content_calendar([{"Date": "x", "Format": "y", "Notes": "z"}])

    def test_keywords_in_row_values(self):
        rows = [{"Field": "Campaign objective", "Value": "Awareness"}]
        assert detect_document_type(rows, "data.csv") == DocumentType.CAMPAIGN_BRIEF

        rows = [{"Name": "Seasonal theme", "Notes": "Autumn"}]
        assert detect_document_type(rows, "data.csv") == DocumentType.CONTENT_IDEAS

    def test_text_used_when_no_rows(self):
        assert detect_document_type([], "notes.txt", "Our next big IDEA list") == DocumentType.CONTENT_IDEAS

    def test_general_fallback(self):
        assert detect_document_type([{"A": "1", "B": "2"}], "export.csv") == DocumentType.GENERAL
        assert detect_document_type([], "") == DocumentType.GENERAL


class TestDocumentTypeFromLabel:
    @pytest.mark.parametrize("label,expected", [
        ("Content Calendar", DocumentType.CONTENT_CALENDAR),
        ("content_calendar", DocumentType.CONTENT_CALENDAR),
        ("Social Media Schedule", DocumentType.CONTENT_CALENDAR),
        ("Campaign Brief", DocumentType.CAMPAIGN_BRIEF),
        ("Brand Guidelines", DocumentType.BRAND_GUIDELINES),
        ("Content Ideas", DocumentType.CONTENT_IDEAS),
        ("Invoice", DocumentType.GENERAL),
        (None, DocumentType.GENERAL),
    ])
    def test_labels(self, label, expected):
        assert document_type_from_label(label) == expected


class TestRowMappers:
    def test_calendar_rows(self):
        items = map_content_calendar_rows([CALENDAR_ROW, {"Date": "", "Visual": "Team photo"}])

        first = items[0]
        assert first.title == "Spring is here! #spring #newin"
        assert first.description == "Spring is here! #spring #newin\n\nCTA: Shop now"
        assert first.format == "Reel"
        assert first.date == "2024-03-01"
        assert first.hashtags == ["#spring", "#newin"]

        second = items[1]
        assert second.title == "Team photo"
        assert second.date is None

    def test_long_caption_title_truncated(self):
        items = map_content_calendar_rows([{"Caption": "w" * 150}])
        assert items[0].title == "w" * 100 + "..."

    def test_campaign_brief_rows(self):
        items = map_campaign_brief_rows([
            {"Title": "Spring Push", "Objective": "Awareness", "Key Messages": "Fresh, local"},
        ])
        assert items[0].title == "Spring Push"
        assert items[0].description == "Awareness\n\nKey messages: Fresh, local"
        assert items[0].content_type == "Campaign Brief"

    def test_content_ideas_rows(self):
        items = map_content_ideas_rows([{"idea": "Poll", "category": "Engagement", "platform": "Instagram"}])
        assert items[0].title == "Poll"
        assert items[0].content_type == "Engagement"
        assert items[0].platform == "Instagram"

    def test_generic_rows_skip_empty(self):
        items = map_generic_rows([{"A": "", "B": ""}, {"A": "First", "B": "Second"}])
        assert len(items) == 1
        assert items[0].title == "First"
        assert items[0].description == "First Second"

    def test_text_document_maps_sections(self):
        doc = SourceDocument(
            name="brief.txt",
            file_type=".txt",
            text="...",
            sections=[TextSection(title="GOALS:", content=["Grow", "Sell"], line_number=2)],
            preamble=["Intro"],
        )
        items = map_document(doc, DocumentType.CAMPAIGN_BRIEF)
        assert [item.title for item in items] == ["Overview", "GOALS"]
        assert items[1].description == "Grow Sell"


class TestClassifiers:
    @pytest.mark.asyncio
    async def test_rule_based(self):
        doc = SourceDocument(name="client.csv", file_type=".csv", rows=[CALENDAR_ROW])
        assert await RuleBasedClassifier().classify(doc) == DocumentType.CONTENT_CALENDAR

    @pytest.mark.asyncio
    async def test_model_based_uses_structure_label(self):
        structure = json.dumps({"documentType": "Brand Guidelines", "structure": {"format": "PDF"}})
        doc = SourceDocument(name="doc.pdf", file_type=".pdf", text="Logo usage")
        llm = FakeLLM(structure=structure)

        assert await ModelClassifier(llm).classify(doc) == DocumentType.BRAND_GUIDELINES
        assert llm.calls[0][0] == "complete"

    @pytest.mark.asyncio
    async def test_model_based_falls_back_to_rules(self):
        doc = SourceDocument(name="ideas.txt", file_type=".txt", text="x")
        llm = FakeLLM(structure_error=LLMError("no key"))

        assert await ModelClassifier(llm).classify(doc) == DocumentType.CONTENT_IDEAS

    def test_get_classifier(self):
        assert isinstance(get_classifier("rules"), RuleBasedClassifier)
        assert isinstance(get_classifier("model", FakeLLM()), ModelClassifier)
        with pytest.raises(ValueError):
            get_classifier("model")
        with pytest.raises(ValueError):
            get_classifier("magic")
