"""Parsing result models.

The problems ledger records every cell that failed to parse. A failed cell is
stored as missing and the parse carries on, so a caller always gets a table
back together with the ledger describing what went wrong.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict

from tidytab.core.models.base import ColumnType
from tidytab.table import Cell, Column, Table


class Problem(BaseModel):
    """A single cell-level parse failure."""

    model_config = ConfigDict(frozen=True)

    row: int  # 0-based data row
    column: str
    expected: str
    actual: str

    def __str__(self) -> str:
        return f"row {self.row}, column {self.column!r}: expected {self.expected}, got {self.actual!r}"


@dataclass
class Problems:
    """Ledger of parse failures, ordered by (row, column)."""

    items: list[Problem] = field(default_factory=list)

    def __iter__(self) -> Iterator[Problem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)

    @property
    def count(self) -> int:
        return len(self.items)

    def add(self, problem: Problem) -> None:
        self.items.append(problem)

    def for_column(self, name: str) -> list[Problem]:
        return [p for p in self.items if p.column == name]

    def summary(self) -> str:
        noun = "failure" if self.count == 1 else "failures"
        return f"{self.count} parsing {noun}"

    @classmethod
    def merge(cls, ledgers: Iterable[Problems]) -> Problems:
        """Combine ledgers; the result does not depend on the input order."""
        items = [p for ledger in ledgers for p in ledger]
        items.sort(key=lambda p: (p.row, p.column, p.expected, p.actual))
        return cls(items)


@dataclass(frozen=True)
class ParsedColumn:
    """A text column after type inference and parsing."""

    name: str
    type: ColumnType
    values: tuple[Cell, ...]
    problems: Problems = field(default_factory=Problems, compare=False)

    @property
    def column(self) -> Column:
        return Column(self.name, self.type, self.values)


@dataclass(frozen=True)
class ParseResult:
    """A parsed table plus its problems ledger."""

    table: Table
    problems: Problems = field(default_factory=Problems)

    @property
    def has_problems(self) -> bool:
        return bool(self.problems)
