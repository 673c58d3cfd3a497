"""
Tests for pass prompts and the skip-list instruction.
"""

import json

from core.constants import STRUCTURE_PREFIX_CHARS
from ingest.analyzer import default_structure_analysis
from ingest.models import SkipItem
from ingest.prompts import (
    EXTRACTION_SYSTEM_PROMPT,
    build_extraction_prompt,
    build_extraction_system_prompt,
    build_skip_instruction,
    build_structure_prompt,
)


class TestSkipInstruction:
    def test_empty_skip_list_adds_nothing(self):
        assert build_skip_instruction([]) == ""
        assert build_extraction_system_prompt([]) == EXTRACTION_SYSTEM_PROMPT

    def test_numbered_entries_in_input_order(self):
        skip = [
            SkipItem(title="Spring launch", date="2024-03-01"),
            SkipItem(title="Team spotlight"),
        ]

        instruction = build_skip_instruction(skip)

        assert "CRITICAL: DO NOT extract these items that have already been processed:" in instruction
        assert '1. "Spring launch" (2024-03-01)' in instruction
        assert '2. "Team spotlight" (no date)' in instruction
        assert instruction.index("1. ") < instruction.index("2. ")
        assert instruction.rstrip().endswith("ONLY extract NEW items that are NOT in the above list.")

    def test_system_prompt_carries_skip_list(self):
        system = build_extraction_system_prompt([SkipItem(title="Old post", date="2024-01-05")])
        assert system.startswith(EXTRACTION_SYSTEM_PROMPT)
        assert '1. "Old post" (2024-01-05)' in system


class TestStructurePrompt:
    def test_only_prefix_is_sent(self):
        text = "a" * STRUCTURE_PREFIX_CHARS + "TAIL"
        prompt = build_structure_prompt("calendar.csv", text)

        assert "Document: calendar.csv" in prompt
        assert "TAIL" not in prompt
        assert "a" * STRUCTURE_PREFIX_CHARS in prompt


class TestExtractionPrompt:
    def test_full_text_and_structure_included(self):
        text = "row\n" * 5000
        prompt = build_extraction_prompt(default_structure_analysis(), "big.csv", text, [])

        assert f"Full Content: {text}" in prompt
        structure_json = json.dumps(default_structure_analysis().model_dump(by_alias=True), indent=2)
        assert structure_json in prompt
        assert '"hasHeaders": true' in prompt
        assert "CRITICAL" not in prompt

    def test_skip_list_appended(self):
        prompt = build_extraction_prompt(
            default_structure_analysis(), "cal.csv", "x", [SkipItem(title="Done", date="2024-02-02")]
        )
        assert '1. "Done" (2024-02-02)' in prompt
