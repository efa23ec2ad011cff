"""Column selection and placement helpers shared by reshape operations."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from tidytab.reshape.errors import ColumnNameError
from tidytab.table import Column, Table


def select_names(
    table: Table,
    columns: Iterable[str] | None = None,
    exclude: Iterable[str] | None = None,
) -> list[str]:
    """Resolve an include/exclude selection to column names in table order.

    ``columns`` None selects every column; ``exclude`` then removes names.
    Unknown names raise ColumnNotFoundError.
    """
    if columns is None:
        chosen = set(table.column_names)
    else:
        chosen = set()
        for name in columns:
            table.column(name)
            chosen.add(name)
    for name in exclude or ():
        table.column(name)
        chosen.discard(name)
    return [name for name in table.column_names if name in chosen]


def check_new_names(table: Table, names: Sequence[str], replaced: Iterable[str] = ()) -> None:
    """Ensure new column names are unique and do not clash with kept columns."""
    duplicated = sorted({n for n in names if names.count(n) > 1})
    if duplicated:
        raise ColumnNameError(f"Output column names must be unique, duplicated: {duplicated}")
    freed = set(replaced)
    clashes = [n for n in names if n in table and n not in freed]
    if clashes:
        raise ColumnNameError(f"Output columns would overwrite existing columns: {clashes}")


def place_columns(table: Table, source: str, new_columns: Sequence[Column], remove: bool) -> Table:
    """Put new columns where ``source`` sits, dropping it when ``remove``.

    When the source is kept the new columns follow it.
    """
    position = table.position(source)
    columns = list(table.columns)
    if remove:
        columns[position : position + 1] = new_columns
    else:
        columns[position + 1 : position + 1] = new_columns
    return Table(tuple(columns))
