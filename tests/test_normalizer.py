"""Tests for LLM response normalization (normalizer.py)."""

import json

import pytest

from normalizer import (
    FALLBACK_RECOMMENDATION,
    drop_refactored_code,
    escape_control_chars,
    escape_inner_quotes,
    extract_array,
    extract_fenced,
    normalize,
    parse_arrays,
    parse_direct,
    parse_without_refactored,
    slice_object,
    strip_trailing_commas,
)

WELL_FORMED = json.dumps(
    {
        "issues": [
            {
                "severity": "high",
                "category": "Logic",
                "message": "Off by one in loop bound",
                "lineNumber": 4,
                "suggestion": "Use < instead of <=",
                "reasoning": "The last iteration reads past the end",
            }
        ],
        "strengths": ["Clear naming"],
        "recommendations": ["Add tests for empty input"],
    }
)


# ============================================================================
# Helpers
# ============================================================================


class TestPreprocessing:
    def test_extract_fenced_json(self):
        text = 'Here you go:\n```json\n{"issues": []}\n```\nThanks!'
        assert extract_fenced(text) == '{"issues": []}'

    def test_extract_fenced_plain(self):
        assert extract_fenced("```\n{}\n```") == "{}"

    def test_extract_fenced_without_fence(self):
        assert extract_fenced('  {"issues": []}  ') == '{"issues": []}'

    def test_slice_object(self):
        assert slice_object('Sure! {"issues": []} Hope it helps') == '{"issues": []}'

    def test_slice_object_without_braces(self):
        assert slice_object("no json here") == "no json here"


class TestRepairs:
    def test_strip_trailing_commas(self):
        assert strip_trailing_commas('{"a": [1, 2,], }') == '{"a": [1, 2]}'

    def test_escape_control_chars_only_inside_strings(self):
        text = '{\n  "a": "x\ty"\n}'
        assert escape_control_chars(text) == '{\n  "a": "x\\ty"\n}'

    def test_escape_inner_quotes(self):
        text = '{"message": "has "quote" inside"}'
        assert json.loads(escape_inner_quotes(text)) == {"message": 'has "quote" inside'}

    def test_escape_inner_quotes_leaves_valid_json(self):
        assert escape_inner_quotes(WELL_FORMED) == WELL_FORMED

    def test_drop_refactored_code_skips_escaped_quotes(self):
        text = r'{"issues": [{"message": "m"}], "refactoredCode": "call(\"a\", \"b\")"}'
        assert drop_refactored_code(text) == '{"issues": [{"message": "m"}]}'

    def test_drop_refactored_code_first_member(self):
        text = '{"refactoredCode": "x = 1", "issues": []}'
        assert json.loads(drop_refactored_code(text)) == {"issues": []}

    def test_drop_refactored_code_unterminated(self):
        text = '{"issues": [], "refactoredCode": "x = 1'
        assert drop_refactored_code(text) == text

    def test_extract_array_respects_strings(self):
        text = '{"strengths": ["uses list[0] safely", "ok"], "x": 1}'
        assert extract_array(text, "strengths") == '["uses list[0] safely", "ok"]'

    def test_extract_array_unbalanced(self):
        assert extract_array('{"issues": [{"message": "a"}', "issues") is None

    def test_extract_array_missing_key(self):
        assert extract_array('{"other": []}', "issues") is None


# ============================================================================
# Repair ladder
# ============================================================================


class TestRepairLadder:
    def test_direct_requires_issues_list(self):
        assert parse_direct('{"issues": []}') == {"issues": []}
        assert parse_direct('{"issues": "none"}') is None
        assert parse_direct("[1, 2]") is None

    def test_refactored_code_removal(self):
        text = (
            r'{"issues": [{"message": "Use raw strings"}], '
            r'"refactoredCode": "path = C:\data\new"}'
        )
        assert parse_direct(text) is None
        assert parse_without_refactored(text) == {"issues": [{"message": "Use raw strings"}]}

    def test_refactored_code_with_escaped_quote_before_comma(self):
        text = (
            r'{"issues": [{"message": "Hardcoded path"}], '
            r'"refactoredCode": "open(\"C:\data\", \"r\")"}'
        )
        assert parse_without_refactored(text) == {"issues": [{"message": "Hardcoded path"}]}

    def test_array_extraction(self):
        text = (
            '{"issues": [{"message": "a"}], "summary": broken, '
            '"strengths": ["uses list[0] safely"]}'
        )
        assert parse_arrays(text) == {
            "issues": [{"message": "a"}],
            "strengths": ["uses list[0] safely"],
            "recommendations": [],
        }


# ============================================================================
# normalize()
# ============================================================================


class TestNormalize:
    def test_well_formed(self):
        review = normalize(WELL_FORMED)

        assert review.degraded is False
        assert len(review.issues) == 1
        issue = review.issues[0]
        assert issue.severity == "high"
        assert issue.category == "Logic"
        assert issue.message == "Off by one in loop bound"
        assert issue.line_number == 4
        assert issue.suggestion == "Use < instead of <="
        assert issue.reasoning == "The last iteration reads past the end"
        assert review.strengths == ["Clear naming"]
        assert review.recommendations == ["Add tests for empty input"]

    def test_fenced_with_prose(self):
        review = normalize(f"Here is my review:\n```json\n{WELL_FORMED}\n```\nLet me know!")
        assert len(review.issues) == 1
        assert review.degraded is False

    def test_trailing_comma_and_inner_quote(self):
        review = normalize('{"issues": [ {"message": "has "quote" inside"} ],}')

        assert len(review.issues) == 1
        assert review.issues[0].message == 'has "quote" inside'
        assert review.issues[0].severity == "medium"
        assert review.issues[0].category == "general"

    def test_pretty_printed_odd_quote(self):
        text = (
            "{\n"
            '  "issues": [\n'
            "    {\n"
            '      "severity": "low",\n'
            '      "message": "Use a 6" margin",\n'
            '      "lineNumber": 2\n'
            "    },\n"
            "    {\n"
            '      "severity": "high",\n'
            '      "message": "Loop never ends"\n'
            "    }\n"
            "  ],\n"
            '  "strengths": ["Readable"]\n'
            "}"
        )

        review = normalize(text)

        assert review.degraded is False
        assert [issue.message for issue in review.issues] == [
            'Use a 6" margin',
            "Loop never ends",
        ]
        assert review.issues[0].line_number == 2
        assert review.strengths == ["Readable"]

    def test_raw_newline_in_string(self):
        review = normalize('{"issues": [{"message": "line one\nline two"}]}')
        assert review.issues[0].message == "line one\nline two"

    def test_pretty_printed_json(self):
        review = normalize(json.dumps(json.loads(WELL_FORMED), indent=2))
        assert len(review.issues) == 1

    def test_broken_refactored_code_dropped(self):
        text = (
            r'{"issues": [{"message": "Use raw strings"}], '
            r'"refactoredCode": "path = C:\data\new"}'
        )
        review = normalize(text)
        assert [issue.message for issue in review.issues] == ["Use raw strings"]
        assert review.refactored_code is None

    def test_refactored_code_kept_when_valid(self):
        review = normalize('{"issues": [], "refactoredCode": "x = 1"}')
        assert review.refactored_code == "x = 1"

    @pytest.mark.parametrize(
        "raw",
        [
            "I could not review this file.",
            "",
            None,
            "[1, 2, 3]",
            '{"findings": []}',
            '{"issues": [',
        ],
    )
    def test_total_failure_is_degraded(self, raw):
        review = normalize(raw)

        assert review.degraded is True
        assert review.issues == []
        assert review.recommendations == [FALLBACK_RECOMMENDATION]


class TestIssueCoercion:
    def test_severity_case_and_unknown(self):
        review = normalize(
            json.dumps(
                {
                    "issues": [
                        {"severity": "CRITICAL", "message": "a"},
                        {"severity": "urgent", "message": "b"},
                    ]
                }
            )
        )
        assert [issue.severity for issue in review.issues] == ["critical", "medium"]

    def test_line_number_coercion(self):
        review = normalize(
            json.dumps(
                {
                    "issues": [
                        {"message": "a", "lineNumber": "12"},
                        {"message": "b", "lineNumber": 0},
                        {"message": "c", "lineNumber": "n/a"},
                        {"message": "d", "line": 7},
                    ]
                }
            )
        )
        assert [issue.line_number for issue in review.issues] == [12, None, None, 7]

    @pytest.mark.parametrize("line", ["1e400", "Infinity", "-Infinity", "NaN"])
    def test_non_finite_line_number(self, line):
        review = normalize('{"issues": [{"message": "x", "lineNumber": %s}]}' % line)

        assert review.degraded is False
        assert review.issues[0].message == "x"
        assert review.issues[0].line_number is None

    def test_invalid_issues_skipped(self):
        review = normalize(
            json.dumps(
                {
                    "issues": [
                        {"severity": "high"},
                        {"message": "   "},
                        "not an object",
                        {"message": "kept"},
                    ]
                }
            )
        )
        assert [issue.message for issue in review.issues] == ["kept"]
        assert review.degraded is False

    def test_non_string_list_entries_dropped(self):
        review = normalize('{"issues": [], "strengths": ["a", {"b": 1}, ""]}')
        assert review.strengths == ["a"]
