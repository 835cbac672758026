"""Request payload validation and sanitization."""

from backoffice.app.services.validation.models import (
    FieldType,
    RuleSet,
    ValidationResult,
    ValidationRule,
)
from backoffice.app.services.validation.patterns import MAX_JSON_DEPTH, MAX_STRING_LENGTH, PATTERNS
from backoffice.app.services.validation.sanitizer import (
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
from backoffice.app.services.validation.validator import validate_request

__all__ = [
    "FieldType",
    "RuleSet",
    "ValidationResult",
    "ValidationRule",
    "MAX_JSON_DEPTH",
    "MAX_STRING_LENGTH",
    "PATTERNS",
    "has_malicious_content",
    "has_sql_injection",
    "has_xss",
    "is_valid_email",
    "is_valid_url",
    "is_valid_uuid",
    "json_depth",
    "safe_json_parse",
    "sanitize_object",
    "sanitize_string",
    "validate_request",
]
