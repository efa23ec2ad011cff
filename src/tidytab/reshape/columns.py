"""Split one column into several, or join several into one.

separate cuts each cell of a column into pieces (literal separator, regular
expression or character positions) and spreads the pieces over new columns.
unite is its inverse. extract pulls regex capture groups into columns.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Literal

from tidytab.core.logging import get_logger
from tidytab.core.models.base import ColumnType
from tidytab.parsing import infer_and_parse
from tidytab.reshape.errors import PieceCountError, ReshapeError
from tidytab.reshape.selection import check_new_names, place_columns
from tidytab.table import Column, Table, format_cell

logger = get_logger(__name__)

ExtraPolicy = Literal["error", "drop", "merge"]
FillPolicy = Literal["right", "left"]
Separator = str | re.Pattern[str] | Sequence[int]

# Any run of characters that are not letters or digits
DEFAULT_SEPARATOR = re.compile(r"[\W_]+")


def _split_literal(value: str, sep: str, maxsplit: int) -> list[str]:
    return value.split(sep, maxsplit)


def _split_pattern(value: str, pattern: re.Pattern[str], maxsplit: int) -> list[str]:
    """Split at each non-empty match; capture groups do not add pieces."""
    pieces: list[str] = []
    start = 0
    for match in pattern.finditer(value):
        if match.end() == match.start():
            continue
        if maxsplit >= 0 and len(pieces) == maxsplit:
            break
        pieces.append(value[start : match.start()])
        start = match.end()
    pieces.append(value[start:])
    return pieces


def _split_positions(value: str, positions: Sequence[int]) -> list[str]:
    """Cut at character positions; negative positions count from the end."""
    length = len(value)
    cuts = [min(max(p if p >= 0 else length + p, 0), length) for p in positions]
    pieces: list[str] = []
    start = 0
    for cut in cuts:
        cut = max(cut, start)
        pieces.append(value[start:cut])
        start = cut
    pieces.append(value[start:])
    return pieces


def _pad(pieces: list[str | None], n: int, fill: FillPolicy) -> list[str | None]:
    missing = [None] * (n - len(pieces))
    return missing + pieces if fill == "left" else pieces + missing


def _new_columns(
    names: Sequence[str | None], pieces: Sequence[Sequence[str | None]], convert: bool
) -> list[Column]:
    columns: list[Column] = []
    for i, name in enumerate(names):
        if name is None:
            continue
        values = [row[i] for row in pieces]
        if convert:
            columns.append(infer_and_parse(values, column_name=name).column)
        else:
            columns.append(Column(name, ColumnType.TEXT, tuple(values)))
    return columns


def _text_values(column: Column) -> list[str | None]:
    if column.type is ColumnType.TEXT:
        return list(column.values)  # type: ignore[arg-type]
    return [None if v is None else format_cell(v) for v in column.values]


def separate(
    table: Table,
    column: str,
    into: Sequence[str | None],
    sep: Separator = DEFAULT_SEPARATOR,
    *,
    remove: bool = True,
    convert: bool = False,
    extra: ExtraPolicy = "error",
    fill: FillPolicy = "right",
) -> Table:
    """Split one column into several.

    Args:
        table: Input table
        column: Column to split (non-text cells are split on their rendering)
        into: Names of the new columns; a None entry drops that piece
        sep: Literal separator, compiled regex, or character positions
        remove: Drop the source column
        convert: Infer the types of the new columns
        extra: Piece-count mismatch policy ("error", "drop" or "merge")
        fill: Side padded with missing when a cell has too few pieces

    Returns:
        A new table with the pieces where the source column was

    Raises:
        ColumnNotFoundError: If the column does not exist
        PieceCountError: On the first mismatch when extra="error"
        ReshapeError: On invalid arguments or colliding output names
    """
    source = table.column(column)
    n = len(into)
    if n == 0:
        raise ReshapeError("separate needs at least one output column")
    if extra not in ("error", "drop", "merge"):
        raise ReshapeError(f"extra must be 'error', 'drop' or 'merge', got {extra!r}")
    if fill not in ("right", "left"):
        raise ReshapeError(f"fill must be 'right' or 'left', got {fill!r}")

    if isinstance(sep, str):
        if not sep:
            raise ReshapeError("separator must not be empty")
        maxsplit = n - 1 if extra == "merge" else -1

        def split(value: str) -> list[str]:
            return _split_literal(value, sep, maxsplit)

    elif isinstance(sep, re.Pattern):
        maxsplit = n - 1 if extra == "merge" else -1

        def split(value: str) -> list[str]:
            return _split_pattern(value, sep, maxsplit)

    else:
        positions = list(sep)
        if len(positions) + 1 != n:
            raise ReshapeError(
                f"{len(positions)} split positions give {len(positions) + 1} pieces, "
                f"but {n} output columns were named"
            )

        def split(value: str) -> list[str]:
            return _split_positions(value, positions)

    names = [name for name in into if name is not None]
    check_new_names(table, names, replaced=[column] if remove else [])

    too_many = too_few = 0
    rows: list[list[str | None]] = []
    for row, value in enumerate(_text_values(source)):
        if value is None:
            rows.append([None] * n)
            continue
        pieces: list[str | None] = list(split(value))
        if len(pieces) != n and extra == "error":
            raise PieceCountError(column, row, value, n, len(pieces))
        if len(pieces) > n:
            too_many += 1
            pieces = pieces[:n]
        elif len(pieces) < n:
            too_few += 1
            pieces = _pad(pieces, n, fill)
        rows.append(pieces)

    if too_many or too_few:
        logger.warning(
            "separate_piece_mismatch",
            column=column,
            expected=n,
            too_many=too_many,
            too_few=too_few,
        )

    new_columns = _new_columns(into, rows, convert)
    return place_columns(table, column, new_columns, remove)


def unite(
    table: Table,
    column: str,
    columns: Sequence[str],
    sep: str = "_",
    *,
    remove: bool = True,
    na_rm: bool = False,
) -> Table:
    """Join several columns into one text column.

    Cells are rendered with format_cell; missing cells render as ``NA`` unless
    ``na_rm`` drops them. A row whose source cells are all missing stays
    missing, so uniting the pieces of a separated missing cell restores it.
    The new column sits where the first source column was.

    Raises:
        ColumnNotFoundError: If a source column does not exist
        ReshapeError: If no columns are given or the new name collides
    """
    if not columns:
        raise ReshapeError("unite needs at least one source column")
    sources = [table.column(name) for name in columns]
    check_new_names(table, [column], replaced=columns if remove else [])

    values: list[str | None] = []
    for row in range(table.n_rows):
        cells = [c.values[row] for c in sources]
        if all(v is None for v in cells):
            values.append(None)
            continue
        if na_rm:
            cells = [v for v in cells if v is not None]
        values.append(sep.join(format_cell(v) for v in cells))
    united = Column(column, ColumnType.TEXT, tuple(values))

    position = table.position(columns[0])
    if not remove:
        return table.with_column(united, position)
    shift = sum(1 for name in set(columns) if table.position(name) < position)
    return table.drop(columns).with_column(united, position - shift)


def extract(
    table: Table,
    column: str,
    into: Sequence[str | None],
    regex: str | re.Pattern[str],
    *,
    remove: bool = True,
    convert: bool = False,
) -> Table:
    """Turn the capture groups of a regex into new columns.

    The first match in each cell is used. Cells that do not match (and missing
    cells) give missing values in every new column.

    Raises:
        ColumnNotFoundError: If the column does not exist
        ReshapeError: If the group count differs from ``len(into)``
    """
    source = table.column(column)
    pattern = re.compile(regex) if isinstance(regex, str) else regex
    if pattern.groups != len(into):
        raise ReshapeError(
            f"Pattern {pattern.pattern!r} has {pattern.groups} groups, "
            f"but {len(into)} output columns were named"
        )
    check_new_names(table, [n for n in into if n is not None], replaced=[column] if remove else [])

    rows: list[list[str | None]] = []
    unmatched = 0
    for value in _text_values(source):
        match = pattern.search(value) if value is not None else None
        if match is None:
            unmatched += value is not None
            rows.append([None] * len(into))
        else:
            rows.append(list(match.groups()))
    if unmatched:
        logger.debug("extract_unmatched", column=column, count=unmatched)

    return place_columns(table, column, _new_columns(into, rows, convert), remove)
