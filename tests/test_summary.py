"""
Unit tests for the shared summarization helpers: prompt, response schema,
and reply normalization.
"""

import json
import pytest
from pydantic import ValidationError

from scribe.note_template import DEFAULT_TEMPLATE
from scribe.summary import (
    DEFAULT_FILE_TITLE,
    SummarizationError,
    build_summary_model,
    build_summary_prompt,
    normalize_summary,
)


class TestBuildSummaryPrompt:

    def test_transcript_is_embedded(self):
        prompt = build_summary_prompt("we talked about tides")
        assert "<transcript>\nwe talked about tides\n</transcript>" in prompt

    def test_output_language(self):
        assert "respond in French" in build_summary_prompt("x", "French")
        assert "respond in" not in build_summary_prompt("x")


class TestBuildSummaryModel:

    def test_schema_fields(self):
        schema = build_summary_model(DEFAULT_TEMPLATE).model_json_schema()

        assert set(schema["properties"]) == {"fileTitle", "summary", "insights", "mermaid_chart"}
        assert set(schema["required"]) == {"fileTitle", "summary", "insights"}

    def test_instructions_become_descriptions(self):
        schema = build_summary_model(DEFAULT_TEMPLATE).model_json_schema()
        assert schema["properties"]["summary"]["description"] == DEFAULT_TEMPLATE.sections[0].instructions

    def test_mandatory_sections_required(self):
        model = build_summary_model(DEFAULT_TEMPLATE)
        with pytest.raises(ValidationError):
            model.model_validate({"fileTitle": "T", "summary": "s"})

    def test_optional_sections_nullable(self):
        model = build_summary_model(DEFAULT_TEMPLATE)
        parsed = model.model_validate({"fileTitle": "T", "summary": "s", "insights": "i"})
        assert parsed.model_dump()["mermaid_chart"] is None


class TestNormalizeSummary:

    def test_dict_passthrough_fills_missing(self):
        summary = normalize_summary({"fileTitle": "Standup", "summary": "s"}, DEFAULT_TEMPLATE)

        assert summary == {"fileTitle": "Standup", "summary": "s", "insights": "", "mermaid_chart": ""}

    def test_json_string(self):
        raw = json.dumps({"fileTitle": "T", "summary": "s", "insights": "i"})
        assert normalize_summary(raw, DEFAULT_TEMPLATE)["insights"] == "i"

    def test_json_embedded_in_chatter(self):
        raw = 'Sure! Here is the JSON:\n{"fileTitle": "T", "summary": "s"}\nHope that helps.'
        assert normalize_summary(raw, DEFAULT_TEMPLATE)["summary"] == "s"

    @pytest.mark.parametrize("envelope", ["parameters", "arguments"])
    def test_unwraps_envelope(self, envelope):
        raw = {"name": "summarize_transcript", envelope: {"fileTitle": "T", "summary": "s"}}
        summary = normalize_summary(raw, DEFAULT_TEMPLATE)

        assert summary["summary"] == "s"
        assert "name" not in summary

    def test_default_file_title(self):
        assert normalize_summary({"fileTitle": ""}, DEFAULT_TEMPLATE)["fileTitle"] == DEFAULT_FILE_TITLE
        assert normalize_summary({}, DEFAULT_TEMPLATE)["fileTitle"] == DEFAULT_FILE_TITLE

    def test_null_values_become_empty(self):
        summary = normalize_summary({"summary": "s", "mermaid_chart": None}, DEFAULT_TEMPLATE)
        assert summary["mermaid_chart"] == ""

    def test_text_without_json_raises(self):
        with pytest.raises(SummarizationError, match="without valid JSON"):
            normalize_summary("I could not summarize this.", DEFAULT_TEMPLATE)

    def test_broken_json_raises(self):
        with pytest.raises(SummarizationError, match="instead of JSON"):
            normalize_summary("result: {not json}", DEFAULT_TEMPLATE)

    def test_non_object_json_raises(self):
        with pytest.raises(SummarizationError):
            normalize_summary("[1, 2, 3]", DEFAULT_TEMPLATE)
