"""Core infrastructure: configuration, logging and shared models."""

from tidytab.core.config import Settings, get_settings
from tidytab.core.logging import configure_logging, get_logger, log_context
from tidytab.core.models import ColumnType, Result

__all__ = [
    "ColumnType",
    "Result",
    "Settings",
    "configure_logging",
    "get_logger",
    "get_settings",
    "log_context",
]
