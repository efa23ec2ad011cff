"""Core models shared by every module."""

from tidytab.core.models.base import TYPE_PRIORITY, ColumnType, Result

__all__ = [
    "ColumnType",
    "Result",
    "TYPE_PRIORITY",
]
