"""Tests for JSON recovery from raw model text."""

import pytest

from codelens_core.errors import MalformedModelOutput
from codelens_core.extraction import Failed, Parsed, extract_json, parse_model_output

PAYLOAD = {"score": 80, "strengths": ["a"], "improvements": ["b"]}
PAYLOAD_TEXT = '{"score": 80, "strengths": ["a"], "improvements": ["b"]}'


class TestExtractJson:
    def test_bare_json_uses_direct_strategy(self):
        outcome = extract_json(PAYLOAD_TEXT)
        assert outcome == Parsed(PAYLOAD, "direct")

    def test_surrounding_whitespace_is_ignored(self):
        outcome = extract_json(f"\n\n  {PAYLOAD_TEXT}  \n")
        assert isinstance(outcome, Parsed)
        assert outcome.strategy == "direct"

    def test_fenced_json_with_language_tag(self):
        outcome = extract_json(f"```json\n{PAYLOAD_TEXT}\n```")
        assert outcome == Parsed(PAYLOAD, "fenced")

    def test_fenced_json_without_language_tag(self):
        outcome = extract_json(f"```\n{PAYLOAD_TEXT}\n```")
        assert outcome == Parsed(PAYLOAD, "fenced")

    def test_fence_inside_string_value_survives(self):
        text = '```json\n{"score": 1, "strengths": [], "improvements": ["Refactor: ```py\\nx = 1\\n```"]}\n```'
        outcome = extract_json(text)
        assert isinstance(outcome, Parsed)
        assert outcome.value["improvements"] == ["Refactor: ```py\nx = 1\n```"]

    def test_backticks_in_valid_json_never_reach_fence_strategy(self):
        text = '{"score": 5, "strengths": ["uses ```code```"], "improvements": []}'
        outcome = extract_json(text)
        assert outcome.strategy == "direct"
        assert outcome.value["strengths"] == ["uses ```code```"]

    def test_prose_around_object_uses_brace_strategy(self):
        outcome = extract_json(f"Here is the review:\n{PAYLOAD_TEXT}\nHope that helps!")
        assert outcome == Parsed(PAYLOAD, "braces")

    def test_text_without_json_fails_with_both_errors(self):
        outcome = extract_json("not json at all")
        assert isinstance(outcome, Failed)
        assert outcome.raw_text == "not json at all"
        assert len(outcome.errors) == 2
        assert outcome.errors[0].startswith("direct:")
        assert outcome.errors[1].startswith("braces:")

    def test_broken_fenced_json_fails_with_fence_error(self):
        outcome = extract_json('```json\n{"score": 80,\n```')
        assert isinstance(outcome, Failed)
        assert outcome.errors[1].startswith("fenced:")

    def test_unbalanced_braces_fail(self):
        outcome = extract_json("} nothing useful {")
        assert isinstance(outcome, Failed)

    def test_failure_keeps_original_untrimmed_text(self):
        outcome = extract_json("  garbage  ")
        assert outcome.raw_text == "  garbage  "

    def test_parsed_value_need_not_be_an_object(self):
        assert extract_json("[1, 2]") == Parsed([1, 2], "direct")

    @pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
    def test_non_standard_constants_rejected(self, constant):
        text = f'{{"score": {constant}, "strengths": [], "improvements": []}}'
        outcome = extract_json(text)
        assert isinstance(outcome, Failed)
        assert constant in outcome.errors[0]
        assert outcome.errors[1].startswith("braces:")

    def test_non_standard_constant_inside_fence_rejected(self):
        outcome = extract_json('```json\n{"score": NaN, "strengths": [], "improvements": []}\n```')
        assert isinstance(outcome, Failed)
        assert outcome.errors[1].startswith("fenced:")


class TestParseModelOutput:
    def test_returns_value(self):
        assert parse_model_output(f"```json\n{PAYLOAD_TEXT}\n```") == PAYLOAD

    def test_raises_with_diagnostics(self):
        with pytest.raises(MalformedModelOutput) as exc_info:
            parse_model_output("not json at all")
        err = exc_info.value
        assert err.message == "Model returned invalid JSON"
        assert err.status_code == 500
        assert err.raw_text == "not json at all"
        assert len(err.errors) == 2
