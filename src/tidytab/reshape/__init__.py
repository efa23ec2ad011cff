"""Reshape engine: move tables between wide and long layouts.

This module provides:
- gather/spread: collapse columns into key/value pairs and back
- separate/unite: split one column into several and join them again
- extract: regex capture groups into columns

Every operation returns a new Table. Structural problems raise ReshapeError
subclasses (or ColumnNotFoundError) and never produce a partial table.

Usage:
    from tidytab.reshape import gather, spread

    long = gather(table4a, "year", "cases", ["1999", "2000"])
    wide = spread(long, "year", "cases")
"""

from tidytab.reshape.columns import DEFAULT_SEPARATOR, extract, separate, unite
from tidytab.reshape.errors import (
    ColumnNameError,
    DuplicateIdentifierError,
    PieceCountError,
    ReshapeError,
)
from tidytab.reshape.pivot import common_type, gather, spread

__all__ = [
    # Operations
    "gather",
    "spread",
    "separate",
    "unite",
    "extract",
    "common_type",
    "DEFAULT_SEPARATOR",
    # Errors
    "ReshapeError",
    "ColumnNameError",
    "DuplicateIdentifierError",
    "PieceCountError",
]
