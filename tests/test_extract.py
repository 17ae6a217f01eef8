"""Tests for locating the JSON region in raw model output."""

import pytest

from nova_llm.exceptions import ExtractionError, FailureCategory
from nova_llm.structured.extract import extract


class TestExtract:
    def test_clean_json(self):
        assert extract('{"summary": "A room"}').text == '{"summary": "A room"}'

    def test_markdown_fenced_json(self):
        text = '```json\n{"summary": "A room", "objects": []}\n```'
        assert extract(text).text == '{"summary": "A room", "objects": []}'

    def test_markdown_fence_plain(self):
        assert extract('```\n{"key": "value"}\n```').text == '{"key": "value"}'

    def test_markdown_fenced_no_closing(self):
        text = '```json\n{"summary": "A room"}'
        assert extract(text).text == '{"summary": "A room"}'

    def test_skips_fence_that_is_not_json(self):
        text = (
            "Example usage:\n```python\nprint('hi')\n```\n"
            'And the result:\n```json\n{"ok": true}\n```'
        )
        assert extract(text).text == '{"ok": true}'

    def test_leading_trailing_prose(self):
        text = 'Here is the analysis:\n{"summary": "office"}\nDone!'
        assert extract(text).text == '{"summary": "office"}'

    def test_first_brace_to_last_brace(self):
        text = 'Sure! {"a": {"b": 1}} Hope that helps {smile}'
        assert extract(text).text == '{"a": {"b": 1}} Hope that helps {smile}'

    def test_truncated_object_runs_to_end(self):
        text = 'Result: {"summary": "room", "objects": ["chair"'
        assert extract(text).text == '{"summary": "room", "objects": ["chair"'

    def test_whitespace_padding(self):
        assert extract('   \n  {"key": "value"}  \n  ').text == '{"key": "value"}'

    def test_candidate_starts_with_no_fixes(self):
        assert extract('{"a": 1}').fixes == []

    def test_no_brace_raises(self):
        with pytest.raises(ExtractionError) as exc_info:
            extract("This is just text with no JSON at all.")
        assert "No JSON object found" in str(exc_info.value)
        assert exc_info.value.category is FailureCategory.EXTRACTION

    def test_empty_string_raises(self):
        with pytest.raises(ExtractionError):
            extract("")

    def test_none_raises(self):
        with pytest.raises(ExtractionError):
            extract(None)

    def test_array_only_is_not_json_like(self):
        with pytest.raises(ExtractionError):
            extract("[1, 2, 3]")
