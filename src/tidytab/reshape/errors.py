"""Structural reshape errors.

These abort the single operation that raised them; no partial table is
ever returned.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from tidytab.table import Cell, format_cell


class ReshapeError(ValueError):
    """A reshape operation cannot produce any output."""


class ColumnNameError(ReshapeError):
    """An output column name collides with another column."""


class DuplicateIdentifierError(ReshapeError):
    """Two rows share the same identifiers and key value in ``spread``."""

    def __init__(
        self,
        key: str,
        key_value: Cell,
        identifiers: Mapping[str, Cell],
        rows: Sequence[int],
    ):
        self.key = key
        self.key_value = key_value
        self.identifiers = dict(identifiers)
        self.rows = list(rows)
        ident = ", ".join(f"{name}={format_cell(v)}" for name, v in self.identifiers.items())
        super().__init__(
            f"Duplicate identifiers for rows {self.rows}: "
            f"({ident}{', ' if ident else ''}{key}={format_cell(key_value)})"
        )


class PieceCountError(ReshapeError):
    """A value split into the wrong number of pieces under extra='error'."""

    def __init__(self, column: str, row: int, value: str, expected: int, actual: int):
        self.column = column
        self.row = row
        self.value = value
        self.expected = expected
        self.actual = actual
        qualifier = "too many" if actual > expected else "too few"
        super().__init__(
            f"Expected {expected} pieces in column {column!r}, row {row}: "
            f"{value!r} has {qualifier} ({actual})"
        )
