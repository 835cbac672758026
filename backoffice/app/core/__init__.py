"""Core utilities for the back office application."""

from backoffice.app.core.config import get_settings, settings
from backoffice.app.core.logging import get_log_context, get_logger, setup_logging

__all__ = [
    "get_settings",
    "settings",
    "get_log_context",
    "get_logger",
    "setup_logging",
]
