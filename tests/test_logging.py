"""Tests for structured logging configuration."""

import json
import logging
import sys
from unittest.mock import patch

from backoffice.app.core.logging import (
    ContextFilter,
    JSONFormatter,
    get_log_context,
    get_logger,
    get_logging_config,
    setup_logging,
)


def _record(msg="Test message", level=logging.INFO, exc_info=None):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestJSONFormatter:
    def test_basic_json_format(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert data["source"]["file"] == "test.py"
        assert data["source"]["line"] == 1

    def test_security_context_fields(self):
        record = _record("Admin authentication failed")
        record.request_id = "req-1"
        record.client_id = "203.0.113.7:/api/faculties"
        record.auth_failure = "stale_token"
        record.admin_email = "admin@kuppi.lk"

        data = json.loads(JSONFormatter().format(record))

        assert data["request_id"] == "req-1"
        assert data["client_id"] == "203.0.113.7:/api/faculties"
        assert data["auth_failure"] == "stale_token"
        assert data["admin_email"] == "admin@kuppi.lk"
        assert "extra" not in data

    def test_unset_context_fields_are_omitted(self):
        record = _record()
        ContextFilter().filter(record)

        data = json.loads(JSONFormatter().format(record))

        assert "request_id" not in data
        assert "validation_kind" not in data

    def test_unknown_fields_go_under_extra(self):
        record = _record("Custom event")
        record.malicious_fields = ["name"]
        record.retry_after = 42

        data = json.loads(JSONFormatter().format(record))

        assert data["extra"]["malicious_fields"] == ["name"]
        assert data["extra"]["retry_after"] == 42

    def test_exception_traceback(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            record = _record("Error occurred", logging.ERROR, sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        exception_text = "".join(data["exception"])
        assert "ValueError" in exception_text
        assert "Test error" in exception_text

    def test_unicode_message(self):
        data = json.loads(JSONFormatter().format(_record("කුප්පි සටහන")))
        assert data["message"] == "කුප්පි සටහන"


class TestContextFilter:
    def test_adds_default_fields(self):
        record = _record()

        assert ContextFilter().filter(record) is True
        for field in JSONFormatter.CONTEXT_FIELDS:
            assert getattr(record, field) is None

    def test_preserves_existing_values(self):
        record = _record()
        record.request_id = "existing"

        ContextFilter().filter(record)

        assert record.request_id == "existing"


class TestGetLoggingConfig:
    def test_default_text_format(self):
        with patch("backoffice.app.core.logging.settings") as mock_settings:
            mock_settings.log_format = "text"
            mock_settings.log_level = "INFO"
            config = get_logging_config()

        assert "json" not in config["formatters"]
        assert config["handlers"]["console"]["formatter"] == "standard"

    def test_structured_format(self):
        with patch("backoffice.app.core.logging.settings") as mock_settings:
            mock_settings.log_format = "structured"
            mock_settings.log_level = "debug"
            config = get_logging_config()

        assert config["handlers"]["console"]["formatter"] == "structured"
        assert config["handlers"]["console"]["level"] == "DEBUG"

    def test_json_format(self):
        with patch("backoffice.app.core.logging.settings") as mock_settings:
            mock_settings.log_format = "json"
            mock_settings.log_level = "WARNING"
            config = get_logging_config()

        assert config["formatters"]["json"]["()"] == "backoffice.app.core.logging.JSONFormatter"
        assert config["handlers"]["console"]["formatter"] == "json"
        assert config["loggers"]["backoffice"]["level"] == "WARNING"


def test_setup_logging_quiets_third_party_loggers():
    setup_logging()

    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING
    assert get_logger().name == "backoffice"


def test_get_log_context_drops_missing_values():
    context = get_log_context(path="/api/kuppis", method=None, auth_failure="not_authorized")

    assert context == {"path": "/api/kuppis", "auth_failure": "not_authorized"}
