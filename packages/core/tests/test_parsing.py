"""Tests for tolerant reply parsing."""

import json

import pytest

from codezen_core.parsing import effort_score, extract_effort_estimation, findings_of, parse_review

VALID_REPLY = json.dumps(
    {
        "summary": "Small helper with a bare except.",
        "findings": [
            {"line": 3, "type": "bug", "message": "Bare except", "suggestion": "Catch ValueError"},
            {"line": 1, "type": "style", "message": "Missing docstring", "suggestion": "Add one"},
        ],
        "effort_estimation": "7/10",
    },
    indent=2,
)


class TestExtractEffortEstimation:
    def test_extracts_from_valid_reply(self):
        assert extract_effort_estimation(VALID_REPLY) == "7/10"

    def test_extracts_with_spaced_colon(self):
        assert extract_effort_estimation('{"effort_estimation": "7/10"}') == "7/10"

    def test_extracts_without_whitespace(self):
        assert extract_effort_estimation('{"effort_estimation":"3/10"}') == "3/10"

    def test_extracts_from_surrounding_prose(self):
        text = 'Sure! Here is the review:\n```json\n{"summary": "ok", "effort_estimation": "5/10"}\n```'
        assert extract_effort_estimation(text) == "5/10"

    def test_extracts_from_otherwise_malformed_json(self):
        text = '{"summary": "ok", "findings": [ {"line": , "effort_estimation": "4/10"'
        assert extract_effort_estimation(text) == "4/10"

    def test_skips_key_mentioned_in_leading_prose(self):
        text = (
            "Here is the review with an effort_estimation as requested.\n"
            '{"summary": "ok", "findings": [], "effort_estimation": "7/10"}'
        )
        assert extract_effort_estimation(text) == "7/10"

    def test_skips_key_mentioned_in_finding_message(self):
        text = json.dumps(
            {
                "summary": "ok",
                "findings": [{"line": 1, "type": "style", "message": "rename effort_estimation var"}],
                "effort_estimation": "3/10",
            }
        )
        assert extract_effort_estimation(text) == "3/10"

    @pytest.mark.parametrize(
        "text",
        [
            '{"summary": "ok", "findings": []}',
            '{"summary": "ok", "effort_estimation": "7/1',
            '{"summary": "ok", "effort_estimation":',
            '{"effort_estimation": 7}',
            "effort_estimation",
            "",
            None,
        ],
    )
    def test_returns_none_without_raising(self, text):
        assert extract_effort_estimation(text) is None

    def test_never_raises_on_unexpected_input(self):
        assert extract_effort_estimation(12345) is None  # type: ignore[arg-type]


class TestEffortScore:
    @pytest.mark.parametrize(
        "estimate,expected",
        [("7/10", 7), (" 3 / 10 ", 3), ("10/10", 10), ("0/10", None), ("11/10", None), ("7", None), (None, None)],
    )
    def test_scores(self, estimate, expected):
        assert effort_score(estimate) == expected


class TestParseReview:
    def test_parses_valid_json(self):
        parsed = parse_review(VALID_REPLY)
        assert parsed["summary"].startswith("Small helper")
        assert len(parsed["findings"]) == 2

    def test_strips_markdown_code_fences(self):
        assert parse_review(f"```json\n{VALID_REPLY}\n```")["effort_estimation"] == "7/10"

    def test_preserves_code_blocks_inside_values(self):
        """Backticks inside string values must not be stripped."""
        payload = json.dumps({"summary": "Use this:\n```python\nfoo()\n```", "findings": []})
        parsed = parse_review(f"```json\n{payload}\n```")
        assert "```python" in parsed["summary"]

    def test_recovers_object_from_prose(self):
        parsed = parse_review(f"Here you go:\n{VALID_REPLY}\nHope this helps!")
        assert parsed is not None
        assert parsed["effort_estimation"] == "7/10"

    def test_returns_none_on_truncated_json(self):
        assert parse_review(VALID_REPLY[:40]) is None

    def test_returns_none_for_non_object(self):
        assert parse_review("[1, 2, 3]") is None

    def test_returns_none_for_empty(self):
        assert parse_review("") is None
        assert parse_review(None) is None


class TestFindingsOf:
    def test_returns_dict_findings_only(self):
        assert findings_of({"findings": [{"line": 1}, "junk", 3]}) == [{"line": 1}]

    def test_missing_or_invalid_findings(self):
        assert findings_of(None) == []
        assert findings_of({"summary": "x"}) == []
        assert findings_of({"findings": "none"}) == []
