"""Validation patterns.

Denylist signatures used by the malicious-content scan and the common
format patterns used by field rules. All patterns are compiled once at
import time and never mutated.
"""
import re
from typing import Dict, List, Pattern

# Sanitized strings are truncated to this many characters
MAX_STRING_LENGTH = 10000

# Request bodies nested deeper than this are rejected before any recursive walk
MAX_JSON_DEPTH = 32

PATTERNS: Dict[str, Pattern[str]] = {
    "EMAIL": re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"),
    "UUID": re.compile(
        r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
        re.IGNORECASE,
    ),
    "ALPHANUMERIC": re.compile(r"^[a-zA-Z0-9]+$"),
    "ALPHANUMERIC_WITH_SPACES": re.compile(r"^[a-zA-Z0-9\s]+$"),
    "URL": re.compile(
        r"^https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
        r"([-a-zA-Z0-9()@:%_+.~#?&/=]*)$"
    ),
    "YOUTUBE_URL": re.compile(r"^(https?://)?(www\.)?(youtube\.com|youtu\.be)/.+$"),
    "SLUG": re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$"),
    "PHONE": re.compile(r"^\+?[1-9]\d{1,14}$"),
}

# SQL keywords, comment markers and tautologies
SQL_INJECTION_PATTERNS: List[Pattern[str]] = [
    re.compile(
        r"\b(SELECT|INSERT|UPDATE|DELETE|DROP|CREATE|ALTER|TRUNCATE|EXEC|UNION|SCRIPT)\b",
        re.IGNORECASE,
    ),
    re.compile(r"(--)|(/\*)|(\*/)"),
    re.compile(r"\bOR\b.*=.*", re.IGNORECASE),
    re.compile(r"\bAND\b.*=.*", re.IGNORECASE),
]

# Script tags, script protocol, inline event handlers and embed tags
XSS_PATTERNS: List[Pattern[str]] = [
    re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"<iframe", re.IGNORECASE),
    re.compile(r"<object", re.IGNORECASE),
    re.compile(r"<embed", re.IGNORECASE),
]

# Sanitizer strip patterns
ANGLE_BRACKETS = re.compile(r"[<>]")
SCRIPT_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE)
UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9_]")
