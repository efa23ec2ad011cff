"""Base models and types used across all modules.

This module contains the fundamental types that don't belong to any specific
domain module (table, parsing, reshape, sources).
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Result[T](BaseModel):
    """Result type for operations that can fail.

    Use this instead of exceptions for expected failures.
    Exceptions are reserved for structural/programming errors.
    """

    success: bool
    value: T | None = None
    error: str | None = None
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, value: T, warnings: list[str] | None = None) -> Result[T]:
        """Create a successful result."""
        return cls(success=True, value=value, warnings=warnings or [])

    @classmethod
    def fail(cls, error: str) -> Result[T]:
        """Create a failed result."""
        return cls(success=False, error=error)

    def unwrap(self) -> T:
        """Get the value or raise if failed."""
        if not self.success:
            raise ValueError(f"Result failed: {self.error}")
        assert self.value is not None
        return self.value

    def map(self, fn: Callable[[T], Any]) -> Result[Any]:
        """Transform the value if successful."""
        if self.success and self.value is not None:
            return Result.ok(fn(self.value), self.warnings)
        return self


# === Enums ===


class ColumnType(str, Enum):
    """Semantic type of a column.

    Declaration order is the guessing priority order.
    """

    LOGICAL = "logical"
    INTEGER = "integer"
    DOUBLE = "double"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    TEXT = "text"

    @property
    def abbreviation(self) -> str:
        """One-letter shorthand used in compact column type strings."""
        return _ABBREVIATION_BY_TYPE[self]

    @property
    def is_numeric(self) -> bool:
        return self in (ColumnType.INTEGER, ColumnType.DOUBLE)


_ABBREVIATION_BY_TYPE: dict[ColumnType, str] = {
    ColumnType.LOGICAL: "l",
    ColumnType.INTEGER: "i",
    ColumnType.DOUBLE: "d",
    ColumnType.DATE: "D",
    ColumnType.DATETIME: "T",
    ColumnType.TIME: "t",
    ColumnType.TEXT: "c",
}

# Guess order for type inference
TYPE_PRIORITY: tuple[ColumnType, ...] = tuple(ColumnType)
