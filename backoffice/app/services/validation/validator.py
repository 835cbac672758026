"""Declarative request payload validation."""
import math
from typing import Any, Mapping

from backoffice.app.core.logging import get_logger
from backoffice.app.services.validation.models import RuleSet, ValidationResult, ValidationRule
from backoffice.app.services.validation.sanitizer import (
    has_malicious_content,
    sanitize_object,
    sanitize_string,
)

logger = get_logger(__name__)


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def _matches_type(value: Any, field_type: str) -> bool:
    if field_type == "string":
        return isinstance(value, str)
    if field_type == "number":
        # bool is an int subclass but never a number here
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if field_type == "boolean":
        return isinstance(value, bool)
    if field_type == "object":
        return isinstance(value, dict)
    return True


def _check_string(value: str, rule: ValidationRule, errors: list[str]) -> None:
    if rule.min_length is not None and len(value) < rule.min_length:
        errors.append(f"{rule.name} must be at least {rule.min_length} characters")
    if rule.max_length is not None and len(value) > rule.max_length:
        errors.append(f"{rule.name} must not exceed {rule.max_length} characters")
    if rule.pattern is not None and not rule.pattern.search(value):
        errors.append(f"{rule.name} format is invalid")
    if rule.enum is not None and value not in rule.enum:
        errors.append(f"{rule.name} must be one of: {', '.join(rule.enum)}")


def _check_number(value: float, rule: ValidationRule, errors: list[str]) -> None:
    if isinstance(value, float) and not math.isfinite(value):
        errors.append(f"{rule.name} must be a finite number")
        return
    if rule.min is not None and value < rule.min:
        errors.append(f"{rule.name} must be at least {rule.min:g}")
    if rule.max is not None and value > rule.max:
        errors.append(f"{rule.name} must not exceed {rule.max:g}")


def _check_array(value: list, rule: ValidationRule, errors: list[str]) -> None:
    if rule.min_length is not None and len(value) < rule.min_length:
        errors.append(f"{rule.name} must have at least {rule.min_length} items")
    if rule.max_length is not None and len(value) > rule.max_length:
        errors.append(f"{rule.name} must not exceed {rule.max_length} items")


def validate_request(payload: Mapping[str, Any], rules: RuleSet) -> ValidationResult:
    """Validate and sanitize a payload against a rule set.

    Only fields declared in ``rules`` are considered; anything else in the
    payload is dropped from the sanitized output. Every violation is
    collected, and a field that fails any check is left out of
    ``sanitized`` without stopping the other fields.

    Args:
        payload: Parsed request body
        rules: Mapping of field name to its rule

    Returns:
        ValidationResult with the accumulated errors and sanitized fields
    """
    result = ValidationResult(valid=True)

    for field_name, rule in rules.items():
        value = payload.get(field_name)

        if _is_missing(value):
            if rule.required:
                result.errors.append(f"{rule.name} is required")
            continue

        if rule.type == "array":
            if not isinstance(value, (list, tuple)):
                result.errors.append(f"{rule.name} must be an array")
                continue
        elif rule.type is not None and not _matches_type(value, rule.type):
            result.errors.append(f"{rule.name} must be of type {rule.type}")
            continue

        field_errors: list[str] = []

        if rule.type == "string":
            if has_malicious_content(value):
                result.errors.append(f"{rule.name} contains invalid characters")
                result.malicious_fields.append(field_name)
                continue
            if rule.sanitize:
                value = sanitize_string(value)
            _check_string(value, rule, field_errors)
        elif rule.type == "number":
            _check_number(value, rule, field_errors)
        elif rule.type == "array":
            _check_array(value, rule, field_errors)
            value = [sanitize_string(item) if isinstance(item, str) else item for item in value]
        elif rule.type == "object" and rule.sanitize:
            value = sanitize_object(value)

        if field_errors:
            result.errors.extend(field_errors)
            continue

        result.sanitized[field_name] = value

    result.valid = not result.errors
    if result.malicious_fields:
        logger.debug(f"Malicious content in fields: {', '.join(result.malicious_fields)}")
    return result
