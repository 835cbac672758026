"""Tests for string sanitization and malicious content detection."""

import pytest

from backoffice.app.services.validation import (
    MAX_JSON_DEPTH,
    MAX_STRING_LENGTH,
    has_malicious_content,
    has_sql_injection,
    has_xss,
    is_valid_email,
    is_valid_url,
    is_valid_uuid,
    json_depth,
    safe_json_parse,
    sanitize_object,
    sanitize_string,
)


class TestSanitizeString:
    def test_strips_whitespace_and_angle_brackets(self):
        assert sanitize_string("  <b>Data Structures</b>  ") == "bData Structures/b"

    def test_removes_script_protocol_case_insensitively(self):
        assert sanitize_string("JavaScript:alert(1)") == "alert(1)"

    def test_removes_inline_event_handlers(self):
        assert sanitize_string("img onerror=alert(1)") == "img alert(1)"

    def test_truncates_long_strings(self):
        assert len(sanitize_string("a" * 20000)) == MAX_STRING_LENGTH

    @pytest.mark.parametrize(
        "raw",
        [
            "  <script>alert('x')</script>  ",
            "javajavascript:script:alert(1)",
            "ononclick==x",
            "<<>>",
            " x " * 6000,
            "Intro to Algorithms",
        ],
    )
    def test_is_idempotent(self, raw):
        once = sanitize_string(raw)
        assert sanitize_string(once) == once

    def test_spliced_script_protocol_is_fully_removed(self):
        assert "javascript:" not in sanitize_string("javajavascript:script:alert(1)").lower()

    @pytest.mark.parametrize("value", [42, 3.5, True, None, ["a"], {"k": "v"}])
    def test_non_strings_pass_through(self, value):
        assert sanitize_string(value) == value


class TestSanitizeObject:
    def test_filters_keys_and_sanitizes_values(self):
        result = sanitize_object({"na-me!": " <Science> ", "order": 1})
        assert result == {"name": "Science", "order": 1}

    def test_recurses_through_nested_dicts_and_lists(self):
        result = sanitize_object({
            "faculty": {
                "levels": [" <L1> ", 2],
                "children": [{"dep$t": "onload=x"}],
            }
        })
        assert result == {
            "faculty": {
                "levels": ["L1", 2],
                "children": [{"dept": "x"}],
            }
        }


class TestMaliciousContent:
    @pytest.mark.parametrize(
        "value",
        [
            "'; DROP TABLE users; --",
            "1 OR 1=1",
            "admin' AND password='x",
            "SELECT * FROM modules",
            "a /* comment */",
        ],
    )
    def test_detects_sql_injection(self, value):
        assert has_sql_injection(value)
        assert has_malicious_content(value)

    @pytest.mark.parametrize(
        "value",
        [
            "<script>alert('x')</script>",
            "javascript:alert(1)",
            "<img src=x onerror = alert(1)>",
            "<iframe src='evil'>",
            "<object data='x'>",
            "<embed src='x'>",
        ],
    )
    def test_detects_xss(self, value):
        assert has_xss(value)
        assert has_malicious_content(value)

    @pytest.mark.parametrize(
        "value",
        ["Data Structures and Algorithms", "Faculty of Engineering", "CS 1012", "Semester 1"],
    )
    def test_clean_strings_pass(self, value):
        assert not has_malicious_content(value)

    @pytest.mark.parametrize("value", [None, 1, ["<script>"], {"x": "DROP"}])
    def test_non_strings_are_never_malicious(self, value):
        assert has_malicious_content(value) is False


class TestFormatChecks:
    @pytest.mark.parametrize(
        "value",
        ["550e8400-e29b-41d4-a716-446655440000", "550E8400-E29B-41D4-A716-446655440000"],
    )
    def test_valid_uuids(self, value):
        assert is_valid_uuid(value)

    @pytest.mark.parametrize(
        "value",
        [
            "not-a-uuid",
            "550e8400-e29b-61d4-a716-446655440000",  # version nibble out of range
            "550e8400-e29b-41d4-c716-446655440000",  # variant nibble out of range
            "550e8400e29b41d4a716446655440000",
            "",
            None,
            123,
        ],
    )
    def test_invalid_uuids(self, value):
        assert not is_valid_uuid(value)

    def test_email(self):
        assert is_valid_email("admin@kuppi.lk")
        assert not is_valid_email("admin@kuppi")
        assert not is_valid_email("admin@kuppi.lk\n")

    def test_url(self):
        assert is_valid_url("https://www.youtube.com/watch?v=abc123")
        assert not is_valid_url("ftp://example.com")


class TestSafeJsonParse:
    def test_parses_valid_json(self):
        assert safe_json_parse('{"a": 1}', None) == {"a": 1}

    def test_returns_fallback_on_malformed_input(self):
        sentinel = object()
        assert safe_json_parse("{not json", sentinel) is sentinel
        assert safe_json_parse(b"\xff\xfe", sentinel) is sentinel

    def test_deeply_nested_input_returns_fallback(self):
        sentinel = object()
        assert safe_json_parse("[" * 200000 + "]" * 200000, sentinel) is sentinel

    def test_nesting_beyond_limit_returns_fallback(self):
        sentinel = object()
        at_limit = "[" * MAX_JSON_DEPTH + "]" * MAX_JSON_DEPTH
        too_deep = "[" * (MAX_JSON_DEPTH + 1) + "]" * (MAX_JSON_DEPTH + 1)

        assert safe_json_parse(at_limit, sentinel) is not sentinel
        assert safe_json_parse(too_deep, sentinel) is sentinel


@pytest.mark.parametrize(
    ("value", "depth"),
    [(7, 0), ({}, 1), ([1, [2]], 2), ({"a": {"b": [{"c": 1}]}}, 4)],
)
def test_json_depth(value, depth):
    assert json_depth(value) == depth
