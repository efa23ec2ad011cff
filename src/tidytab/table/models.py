"""Immutable column and table value objects.

A Table is an ordered sequence of uniquely named columns of equal length.
Every derivation returns a new Table; nothing here mutates in place.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import TYPE_CHECKING, Any

from tidytab.core.models.base import ColumnType

if TYPE_CHECKING:
    import pandas as pd

Cell = bool | int | float | date | datetime | time | str | None


class TableError(ValueError):
    """A table invariant was violated."""


class ColumnNotFoundError(TableError, KeyError):
    """A referenced column does not exist in the table."""

    def __init__(self, name: str, available: Sequence[str]):
        self.name = name
        self.available = list(available)
        super().__init__(f"Column {name!r} not found; available columns: {self.available}")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0])


def _fits(value: Any, column_type: ColumnType) -> bool:
    """Check whether a non-missing python value belongs to a column type."""
    match column_type:
        case ColumnType.LOGICAL:
            return isinstance(value, bool)
        case ColumnType.INTEGER:
            return isinstance(value, int) and not isinstance(value, bool)
        case ColumnType.DOUBLE:
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        case ColumnType.DATE:
            return isinstance(value, date) and not isinstance(value, datetime)
        case ColumnType.DATETIME:
            return isinstance(value, datetime)
        case ColumnType.TIME:
            return isinstance(value, time)
        case ColumnType.TEXT:
            return isinstance(value, str)
    return False


def type_of_value(value: Any) -> ColumnType:
    """Map a python scalar onto the column type that holds it."""
    if isinstance(value, bool):
        return ColumnType.LOGICAL
    if isinstance(value, int):
        return ColumnType.INTEGER
    if isinstance(value, float):
        return ColumnType.DOUBLE
    if isinstance(value, datetime):
        return ColumnType.DATETIME
    if isinstance(value, date):
        return ColumnType.DATE
    if isinstance(value, time):
        return ColumnType.TIME
    if isinstance(value, str):
        return ColumnType.TEXT
    raise TableError(f"Unsupported cell value {value!r} of type {type(value).__name__}")


def infer_value_type(values: Iterable[Any]) -> ColumnType:
    """Infer the column type of already-typed python values.

    An all-missing sequence is logical. Integers mixed with floats widen to
    double; any other mix is rejected.
    """
    found: set[ColumnType] = {type_of_value(v) for v in values if v is not None}
    if not found:
        return ColumnType.LOGICAL
    if len(found) == 1:
        return found.pop()
    if found == {ColumnType.INTEGER, ColumnType.DOUBLE}:
        return ColumnType.DOUBLE
    names = sorted(t.value for t in found)
    raise TableError(f"Cannot infer a single column type from mixed values: {names}")


@dataclass(frozen=True)
class Column:
    """A named, typed, immutable sequence of cells."""

    name: str
    type: ColumnType
    values: tuple[Cell, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise TableError(f"Column names must be non-empty strings, got {self.name!r}")
        values = tuple(self.values)
        if self.type is ColumnType.DOUBLE:
            values = tuple(float(v) if v is not None else None for v in values)
        for row, value in enumerate(values):
            if value is not None and not _fits(value, self.type):
                raise TableError(
                    f"Column {self.name!r} of type {self.type.value} cannot hold "
                    f"{value!r} (row {row})"
                )
        object.__setattr__(self, "values", values)

    @classmethod
    def from_values(
        cls, name: str, values: Iterable[Cell], type: ColumnType | None = None
    ) -> Column:
        """Build a column, inferring its type from the values when not given."""
        values = tuple(values)
        return cls(name, type if type is not None else infer_value_type(values), values)

    def __len__(self) -> int:
        return len(self.values)

    def rename(self, name: str) -> Column:
        return Column(name, self.type, self.values)

    @property
    def missing_count(self) -> int:
        return sum(1 for v in self.values if v is None)


@dataclass(frozen=True)
class Table:
    """An ordered, immutable collection of equal-length named columns."""

    columns: tuple[Column, ...] = ()
    _index: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        columns = tuple(self.columns)
        index: dict[str, int] = {}
        for position, column in enumerate(columns):
            if column.name in index:
                raise TableError(f"Duplicate column name: {column.name!r}")
            index[column.name] = position
        lengths = {len(c) for c in columns}
        if len(lengths) > 1:
            detail = ", ".join(f"{c.name}={len(c)}" for c in columns)
            raise TableError(f"Columns must have equal length ({detail})")
        object.__setattr__(self, "columns", columns)
        object.__setattr__(self, "_index", index)

    # === Construction ===

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Iterable[Cell]],
        types: Mapping[str, ColumnType] | None = None,
    ) -> Table:
        """Build a table from a mapping of column name to values."""
        types = types or {}
        return cls(
            tuple(Column.from_values(name, values, types.get(name)) for name, values in data.items())
        )

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Cell]],
        columns: Sequence[str] | None = None,
        types: Mapping[str, ColumnType] | None = None,
    ) -> Table:
        """Build a table from row dictionaries.

        Column order follows ``columns`` or the first appearance of each key.
        Keys absent from a record become missing cells.
        """
        records = list(records)
        if columns is None:
            seen: dict[str, None] = {}
            for record in records:
                for key in record:
                    seen.setdefault(key, None)
            columns = list(seen)
        return cls.from_dict(
            {name: [record.get(name) for record in records] for name in columns},
            types=types,
        )

    @classmethod
    def from_pandas(cls, frame: pd.DataFrame) -> Table:
        """Build a table from a pandas DataFrame (missing values become None)."""
        import pandas as pd

        data: dict[str, list[Cell]] = {}
        for name in frame.columns:
            cells: list[Cell] = []
            for value in frame[name].tolist():
                if value is None or (not isinstance(value, str) and pd.isna(value)):
                    cells.append(None)
                elif isinstance(value, pd.Timestamp):
                    cells.append(value.to_pydatetime())
                elif hasattr(value, "item") and not isinstance(value, (str, date, time)):
                    cells.append(value.item())
                else:
                    cells.append(value)
            data[str(name)] = cells
        return cls.from_dict(data)

    # === Access ===

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def column_types(self) -> dict[str, ColumnType]:
        return {c.name: c.type for c in self.columns}

    @property
    def n_rows(self) -> int:
        return len(self.columns[0]) if self.columns else 0

    @property
    def n_columns(self) -> int:
        return len(self.columns)

    def __len__(self) -> int:
        return self.n_rows

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __getitem__(self, name: str) -> tuple[Cell, ...]:
        return self.column(name).values

    def column(self, name: str) -> Column:
        """Get a column by name.

        Raises:
            ColumnNotFoundError: If no column has that name
        """
        try:
            return self.columns[self._index[name]]
        except KeyError:
            raise ColumnNotFoundError(name, self.column_names) from None

    def position(self, name: str) -> int:
        """Get the 0-based position of a column."""
        self.column(name)
        return self._index[name]

    def rows(self) -> Iterator[tuple[Cell, ...]]:
        """Iterate over rows as tuples in column order."""
        return zip(*(c.values for c in self.columns), strict=True)

    def to_dict(self) -> dict[str, list[Cell]]:
        return {c.name: list(c.values) for c in self.columns}

    def to_records(self) -> list[dict[str, Cell]]:
        names = self.column_names
        return [dict(zip(names, row, strict=True)) for row in self.rows()]

    def to_pandas(self) -> pd.DataFrame:
        """Convert to a pandas DataFrame using nullable extension dtypes."""
        import pandas as pd

        dtypes = {
            ColumnType.LOGICAL: "boolean",
            ColumnType.INTEGER: "Int64",
            ColumnType.DOUBLE: "Float64",
            ColumnType.TEXT: "string",
        }
        data = {}
        for column in self.columns:
            dtype = dtypes.get(column.type, "object")
            data[column.name] = pd.array(list(column.values), dtype=dtype)
        return pd.DataFrame(data)

    # === Derivation ===

    def select(self, names: Sequence[str]) -> Table:
        """Keep only the named columns, in the given order."""
        return Table(tuple(self.column(n) for n in names))

    def drop(self, names: Iterable[str]) -> Table:
        """Remove the named columns."""
        dropped = set(names)
        for name in dropped:
            self.column(name)
        return Table(tuple(c for c in self.columns if c.name not in dropped))

    def rename(self, mapping: Mapping[str, str]) -> Table:
        """Rename columns; names absent from the mapping are kept."""
        for name in mapping:
            self.column(name)
        return Table(tuple(c.rename(mapping.get(c.name, c.name)) for c in self.columns))

    def with_column(self, column: Column, position: int | None = None) -> Table:
        """Add a column at ``position`` (default: last)."""
        if column.name in self._index:
            raise TableError(f"Column {column.name!r} already exists")
        if self.columns and len(column) != self.n_rows:
            raise TableError(
                f"Column {column.name!r} has {len(column)} values, table has {self.n_rows} rows"
            )
        columns = list(self.columns)
        columns.insert(len(columns) if position is None else position, column)
        return Table(tuple(columns))

    def replace_column(self, name: str, column: Column) -> Table:
        """Swap the named column for another, keeping its position."""
        position = self.position(name)
        columns = list(self.columns)
        columns[position] = column
        return Table(tuple(columns))

    def take(self, indices: Sequence[int]) -> Table:
        """Build a table from the rows at ``indices`` (in that order)."""
        return Table(
            tuple(Column(c.name, c.type, tuple(c.values[i] for i in indices)) for c in self.columns)
        )

    def head(self, n: int = 5) -> Table:
        return self.take(range(min(n, self.n_rows)))


def format_cell(value: Cell, na: str = "NA") -> str:
    """Render a cell as text.

    Logical values render as TRUE/FALSE, whole doubles without a fractional
    part, temporal values as ISO-8601 and missing values as ``na``.
    """
    if value is None:
        return na
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Inf" if value > 0 else "-Inf"
        if value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        text = value.isoformat()
        return text[:-6] + "Z" if text.endswith("+00:00") else text
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)
