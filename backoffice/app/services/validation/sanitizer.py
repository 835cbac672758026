"""String and payload sanitization.

This is denylist filtering: a best-effort layer in front of the store,
which only ever receives values through bound query parameters.
"""
import json
from typing import Any, Dict, TypeVar

from backoffice.app.services.validation.patterns import (
    ANGLE_BRACKETS,
    EVENT_HANDLER,
    MAX_JSON_DEPTH,
    MAX_STRING_LENGTH,
    PATTERNS,
    SCRIPT_PROTOCOL,
    SQL_INJECTION_PATTERNS,
    UNSAFE_KEY_CHARS,
    XSS_PATTERNS,
)

T = TypeVar("T")


def _sanitize_once(value: str) -> str:
    value = value.strip()
    value = ANGLE_BRACKETS.sub("", value)
    value = SCRIPT_PROTOCOL.sub("", value)
    value = EVENT_HANDLER.sub("", value)
    return value[:MAX_STRING_LENGTH]


def sanitize_string(value: Any) -> Any:
    """Strip dangerous characters from a string.

    Trims whitespace, removes angle brackets, ``javascript:`` and inline
    ``on<event>=`` handlers, then truncates to MAX_STRING_LENGTH. Removing
    one match can splice together a new one (``javajavascript:script:``),
    so the pass is repeated until the value is stable. Each changing pass
    shortens the string, which bounds the loop.

    Non-string values are returned unchanged.
    """
    if not isinstance(value, str):
        return value
    while True:
        cleaned = _sanitize_once(value)
        if cleaned == value:
            return cleaned
        value = cleaned


def _sanitize_value(value: Any) -> Any:
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, dict):
        return sanitize_object(value)
    if isinstance(value, (list, tuple)):
        return [_sanitize_value(item) for item in value]
    return value


def sanitize_object(obj: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively sanitize a mapping of unknown shape.

    Keys lose every character outside ``[A-Za-z0-9_]``; string values are
    sanitized, lists are mapped element-wise and nested mappings recursed.
    Keys that collapse to the same name keep the last value.
    """
    sanitized: Dict[str, Any] = {}
    for key, value in obj.items():
        sanitized[UNSAFE_KEY_CHARS.sub("", str(key))] = _sanitize_value(value)
    return sanitized


def has_sql_injection(value: str) -> bool:
    """Check for SQL keywords, comment markers or tautologies."""
    return any(pattern.search(value) for pattern in SQL_INJECTION_PATTERNS)


def has_xss(value: str) -> bool:
    """Check for script tags, script protocol, event handlers or embeds."""
    return any(pattern.search(value) for pattern in XSS_PATTERNS)


def has_malicious_content(value: Any) -> bool:
    """Return True if the string matches any injection or XSS signature."""
    if not isinstance(value, str):
        return False
    return has_sql_injection(value) or has_xss(value)


def is_valid_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(PATTERNS["UUID"].fullmatch(value))


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(PATTERNS["EMAIL"].fullmatch(value))


def is_valid_url(value: Any) -> bool:
    return isinstance(value, str) and bool(PATTERNS["URL"].fullmatch(value))


def safe_json_parse(text: str | bytes, fallback: T) -> Any | T:
    """Parse JSON, returning ``fallback`` on malformed or overly nested input."""
    try:
        payload = json.loads(text)
    except (TypeError, ValueError, RecursionError):
        return fallback
    if json_depth(payload) > MAX_JSON_DEPTH:
        return fallback
    return payload


def json_depth(value: Any) -> int:
    """Nesting depth of parsed JSON; scalars are 0, ``[]`` and ``{}`` are 1."""
    deepest = 0
    stack = [(value, 1)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, dict):
            children = node.values()
        elif isinstance(node, list):
            children = node
        else:
            continue
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in children)
    return deepest
