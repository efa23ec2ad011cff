"""Wide <-> long reshaping with key/value pairs.

gather collapses several columns into a key column (former column names) and
a value column (their cells). spread is the inverse: one new column per
distinct key, filled from the value column.

Row order for gather: grouped by original row, then by the gathered
columns' left-to-right order. Row order for spread: first appearance of each
identifier combination. New spread columns appear in first-appearance order
of their key values.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from tidytab.core.logging import get_logger
from tidytab.core.models.base import ColumnType
from tidytab.parsing import infer_and_parse
from tidytab.reshape.errors import ColumnNameError, DuplicateIdentifierError
from tidytab.reshape.selection import check_new_names, select_names
from tidytab.table import Cell, Column, Table, format_cell

logger = get_logger(__name__)

# Shared NaN object: dict lookups match it by identity, so NaN keys group.
_NAN = float("nan")


def _group_key(value: Cell) -> Cell:
    if isinstance(value, float) and math.isnan(value):
        return _NAN
    return value


def common_type(columns: Sequence[Column]) -> ColumnType:
    """Type able to hold the values of every column.

    All-missing columns do not constrain the result. Integer and double widen
    to double; any other mix falls back to text.
    """
    informative = {c.type for c in columns if c.missing_count < len(c)}
    if not informative:
        return columns[0].type if columns else ColumnType.LOGICAL
    if len(informative) == 1:
        return informative.pop()
    if informative <= {ColumnType.INTEGER, ColumnType.DOUBLE}:
        return ColumnType.DOUBLE
    return ColumnType.TEXT


def _coerce(value: Cell, target: ColumnType) -> Cell:
    if value is None:
        return None
    if target is ColumnType.TEXT and not isinstance(value, str):
        return format_cell(value)
    return value


def _reinfer(column: Column) -> Column:
    """Guess a better type for a column from its text rendering."""
    tokens = [None if v is None else format_cell(v) for v in column.values]
    return infer_and_parse(tokens, column_name=column.name).column


def gather(
    table: Table,
    key: str = "key",
    value: str = "value",
    columns: Iterable[str] | None = None,
    *,
    exclude: Iterable[str] | None = None,
    na_rm: bool = False,
    convert: bool = False,
) -> Table:
    """Collapse columns into key/value pairs (wide to long).

    Args:
        table: Input table
        key: Name of the new column holding former column names
        value: Name of the new column holding the cells
        columns: Columns to collapse (default: all except ``exclude``)
        exclude: Columns to keep as identifiers when ``columns`` is None
        na_rm: Drop output rows whose value is missing
        convert: Re-infer the key column's type (e.g. years become integers)

    Returns:
        A new table: kept columns, then key, then value

    Raises:
        ColumnNotFoundError: If a named column does not exist
        ColumnNameError: If key/value clash with each other or kept columns
    """
    selected = select_names(table, columns, exclude)
    if not selected:
        return table

    kept = [c for c in table.columns if c.name not in selected]
    if key == value:
        raise ColumnNameError(f"key and value must have different names, both are {key!r}")
    check_new_names(Table(tuple(kept)), [key, value])

    gathered = [table.column(name) for name in selected]
    value_type = common_type(gathered)
    if value_type is ColumnType.TEXT and any(c.type is not ColumnType.TEXT for c in gathered):
        logger.warning(
            "gather_values_coerced_to_text",
            columns={c.name: c.type.value for c in gathered},
        )

    kept_values: list[list[Cell]] = [[] for _ in kept]
    key_values: list[Cell] = []
    value_values: list[Cell] = []
    for row in range(table.n_rows):
        for column in gathered:
            cell = column.values[row]
            if na_rm and cell is None:
                continue
            for i, kept_column in enumerate(kept):
                kept_values[i].append(kept_column.values[row])
            key_values.append(column.name)
            value_values.append(_coerce(cell, value_type))

    key_column = Column(key, ColumnType.TEXT, tuple(key_values))
    if convert:
        key_column = _reinfer(key_column)

    out = [Column(c.name, c.type, tuple(vals)) for c, vals in zip(kept, kept_values, strict=True)]
    out.append(key_column)
    out.append(Column(value, value_type, tuple(value_values)))

    logger.debug("gathered", columns=selected, rows_in=table.n_rows, rows_out=len(key_values))
    return Table(tuple(out))


def spread(
    table: Table,
    key: str,
    value: str,
    *,
    fill: Cell = None,
    convert: bool = False,
    sep: str | None = None,
) -> Table:
    """Spread a key/value pair across columns (long to wide).

    Args:
        table: Input table
        key: Column whose values become column names
        value: Column whose values fill the new columns
        fill: Cell used where a combination has no row (default: missing)
        convert: Re-infer each new column's type
        sep: When given, new names are ``<key><sep><key value>``

    Returns:
        A new table: identifier columns, then one column per key value

    Raises:
        ColumnNotFoundError: If key or value does not exist
        DuplicateIdentifierError: If two rows share identifiers and key value
        ColumnNameError: If a new column name clashes with an identifier
    """
    key_column = table.column(key)
    value_column = table.column(value)
    if key == value:
        raise ColumnNameError(f"key and value must be different columns, both are {key!r}")
    id_columns = [c for c in table.columns if c.name not in (key, value)]
    id_names = [c.name for c in id_columns]

    row_ids: dict[tuple[Cell, ...], int] = {}
    first_rows: list[int] = []
    key_order: dict[Cell, None] = {}
    cells: dict[tuple[int, Cell], tuple[Cell, int]] = {}

    for row in range(table.n_rows):
        ident = tuple(_group_key(c.values[row]) for c in id_columns)
        if ident not in row_ids:
            row_ids[ident] = len(first_rows)
            first_rows.append(row)
        key_value = _group_key(key_column.values[row])
        key_order.setdefault(key_value, None)
        slot = (row_ids[ident], key_value)
        if slot in cells:
            raise DuplicateIdentifierError(
                key=key,
                key_value=key_value,
                identifiers=dict(zip(id_names, ident, strict=True)),
                rows=[cells[slot][1], row],
            )
        cells[slot] = (value_column.values[row], row)

    new_names = [
        f"{key}{sep}{format_cell(k)}" if sep is not None else format_cell(k) for k in key_order
    ]
    check_new_names(Table(tuple(id_columns)), new_names)

    out = [Column(c.name, c.type, tuple(c.values[r] for r in first_rows)) for c in id_columns]
    for name, key_value in zip(new_names, key_order, strict=True):
        values = tuple(
            cells[(i, key_value)][0] if (i, key_value) in cells else fill
            for i in range(len(first_rows))
        )
        column = Column(name, value_column.type, values)
        out.append(_reinfer(column) if convert else column)

    logger.debug("spread", key=key, new_columns=len(new_names), rows_out=len(first_rows))
    return Table(tuple(out))
