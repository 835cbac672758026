"""Tests for declarative payload validation."""

import pytest

from backoffice.app.services.validation import (
    PATTERNS,
    ValidationRule,
    validate_request,
)

FACULTY_RULES = {
    "name": ValidationRule("Name", required=True, type="string", min_length=1, max_length=200),
}


def test_missing_required_field():
    result = validate_request({}, FACULTY_RULES)

    assert result.valid is False
    assert result.errors == ["Name is required"]
    assert result.message == "Name is required"
    assert result.sanitized == {}


@pytest.mark.parametrize("value", [None, ""])
def test_null_and_empty_count_as_missing(value):
    result = validate_request({"name": value}, FACULTY_RULES)
    assert result.errors == ["Name is required"]


def test_optional_absent_field_is_omitted():
    rules = {"description": ValidationRule("Description", type="string")}
    result = validate_request({}, rules)

    assert result.valid is True
    assert "description" not in result.sanitized


def test_errors_accumulate_across_fields():
    rules = {
        "code": ValidationRule("Code", required=True, type="string", max_length=5),
        "name": ValidationRule("Name", required=True, type="string"),
        "credits": ValidationRule("Credits", type="number", min=1, max=10),
    }
    result = validate_request({"code": "ABCDEFG", "credits": 12}, rules)

    assert result.valid is False
    assert result.errors == [
        "Code must not exceed 5 characters",
        "Name is required",
        "Credits must not exceed 10",
    ]
    assert result.message == "Code must not exceed 5 characters, Name is required, Credits must not exceed 10"


def test_multiple_violations_on_one_field():
    rules = {
        "code": ValidationRule(
            "Code", type="string", min_length=4, pattern=PATTERNS["ALPHANUMERIC"], enum=("CS1012",)
        ),
    }
    result = validate_request({"code": "a-b"}, rules)

    assert result.errors == [
        "Code must be at least 4 characters",
        "Code format is invalid",
        "Code must be one of: CS1012",
    ]


def test_undeclared_fields_are_dropped():
    result = validate_request({"name": "Science", "is_admin": True}, FACULTY_RULES)

    assert result.valid is True
    assert result.sanitized == {"name": "Science"}


def test_strings_are_sanitized():
    result = validate_request({"name": "  Faculty of Science  "}, FACULTY_RULES)
    assert result.sanitized == {"name": "Faculty of Science"}


def test_sanitize_can_be_disabled():
    rules = {"raw": ValidationRule("Raw", type="string", sanitize=False)}
    result = validate_request({"raw": "  padded  "}, rules)
    assert result.sanitized == {"raw": "  padded  "}


def test_malicious_string_is_rejected_and_tagged():
    result = validate_request({"name": "<script>alert('x')</script>"}, FACULTY_RULES)

    assert result.valid is False
    assert result.errors == ["Name contains invalid characters"]
    assert result.malicious_fields == ["name"]
    assert "name" not in result.sanitized


class TestTypes:
    @pytest.mark.parametrize("value", ["5", True, [1]])
    def test_number_is_not_coerced(self, value):
        rules = {"order": ValidationRule("Order", type="number")}
        result = validate_request({"order": value}, rules)
        assert result.errors == ["Order must be of type number"]

    def test_bool_is_not_a_string(self):
        result = validate_request({"name": True}, FACULTY_RULES)
        assert result.errors == ["Name must be of type string"]

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_numbers_are_rejected(self, value):
        rules = {"order": ValidationRule("Order", type="number", min=0)}
        result = validate_request({"order": value}, rules)
        assert result.errors == ["Order must be a finite number"]

    def test_number_range(self):
        rules = {"order": ValidationRule("Order", type="number", min=0, max=1.5)}
        assert validate_request({"order": -1}, rules).errors == ["Order must be at least 0"]
        assert validate_request({"order": 1}, rules).sanitized == {"order": 1}

    def test_boolean(self):
        rules = {"is_hidden": ValidationRule("Hidden", type="boolean")}
        assert validate_request({"is_hidden": False}, rules).sanitized == {"is_hidden": False}
        assert validate_request({"is_hidden": "false"}, rules).errors == ["Hidden must be of type boolean"]


class TestArrays:
    RULES = {"youtube_links": ValidationRule("YouTube links", required=True, type="array", min_length=1, max_length=2)}

    def test_requires_list(self):
        result = validate_request({"youtube_links": "https://youtu.be/x"}, self.RULES)
        assert result.errors == ["YouTube links must be an array"]

    def test_item_count_bounds(self):
        assert validate_request({"youtube_links": []}, self.RULES).errors == [
            "YouTube links must have at least 1 items"
        ]
        assert validate_request({"youtube_links": ["a", "b", "c"]}, self.RULES).errors == [
            "YouTube links must not exceed 2 items"
        ]

    def test_string_items_are_sanitized_others_pass_through(self):
        result = validate_request({"youtube_links": [" <https://youtu.be/x> ", 7]}, self.RULES)
        assert result.sanitized == {"youtube_links": ["https://youtu.be/x", 7]}


def test_object_values_are_sanitized():
    rules = {"data": ValidationRule("Data", type="object")}
    result = validate_request({"data": {"ke y": " <v> "}}, rules)
    assert result.sanitized == {"data": {"key": "v"}}
