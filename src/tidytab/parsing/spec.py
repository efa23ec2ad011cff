"""Column type specifications.

A column spec says how a text column should be parsed: as a fixed type (with
an optional date/time format), by guessing, or not at all (skipped).

Compact strings use one letter per column:

    c text      i integer   d double    n number (loose double)
    l logical   D date      T datetime  t time
    ? guess     _ or - skip
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from tidytab.core.models.base import ColumnType
from tidytab.parsing.errors import ColumnSpecError


@dataclass(frozen=True)
class ColumnSpec:
    """How to parse one column.

    ``type`` None means guess from the data.
    """

    type: ColumnType | None = None
    format: str | None = None
    loose: bool = False
    skip: bool = False

    @property
    def is_guess(self) -> bool:
        return self.type is None and not self.skip

    def describe(self) -> str:
        if self.skip:
            return "skip"
        if self.type is None:
            return "guess"
        name = "number" if self.loose else self.type.value
        return f"{name}({self.format})" if self.format else name


def col_guess() -> ColumnSpec:
    return ColumnSpec()


def col_logical() -> ColumnSpec:
    return ColumnSpec(ColumnType.LOGICAL)


def col_integer() -> ColumnSpec:
    return ColumnSpec(ColumnType.INTEGER)


def col_double() -> ColumnSpec:
    return ColumnSpec(ColumnType.DOUBLE)


def col_number() -> ColumnSpec:
    """Double parsed with the loose number parser (ignores $, %, grouping)."""
    return ColumnSpec(ColumnType.DOUBLE, loose=True)


def col_character() -> ColumnSpec:
    return ColumnSpec(ColumnType.TEXT)


def col_date(format: str | None = None) -> ColumnSpec:
    return ColumnSpec(ColumnType.DATE, format=format)


def col_datetime(format: str | None = None) -> ColumnSpec:
    return ColumnSpec(ColumnType.DATETIME, format=format)


def col_time(format: str | None = None) -> ColumnSpec:
    return ColumnSpec(ColumnType.TIME, format=format)


def col_skip() -> ColumnSpec:
    return ColumnSpec(skip=True)


ABBREVIATIONS: dict[str, ColumnSpec] = {
    "c": col_character(),
    "i": col_integer(),
    "d": col_double(),
    "n": col_number(),
    "l": col_logical(),
    "D": col_date(),
    "T": col_datetime(),
    "t": col_time(),
    "?": col_guess(),
    "_": col_skip(),
    "-": col_skip(),
}


def from_abbreviation(letter: str) -> ColumnSpec:
    """Look up the spec for a one-letter abbreviation."""
    try:
        return ABBREVIATIONS[letter]
    except KeyError:
        raise ColumnSpecError(
            f"Unknown column type abbreviation {letter!r}; expected one of {''.join(ABBREVIATIONS)}"
        ) from None


SpecLike = ColumnSpec | ColumnType | str


def as_spec(value: SpecLike) -> ColumnSpec:
    """Coerce a spec, a ColumnType or an abbreviation into a ColumnSpec."""
    if isinstance(value, ColumnSpec):
        return value
    if isinstance(value, ColumnType):
        return ColumnSpec(value)
    if isinstance(value, str):
        if len(value) == 1:
            return from_abbreviation(value)
        try:
            return ColumnSpec(ColumnType(value))
        except ValueError:
            raise ColumnSpecError(f"Unknown column type {value!r}") from None
    raise ColumnSpecError(f"Cannot interpret {value!r} as a column type")


def resolve_col_types(
    col_types: str | Mapping[str, SpecLike] | Sequence[SpecLike] | None,
    names: Sequence[str],
) -> list[ColumnSpec]:
    """Expand a caller's ``col_types`` into one spec per column.

    Args:
        col_types: None (guess everything), a compact string with one letter
            per column, a mapping of column name to spec (unlisted columns are
            guessed) or a sequence of specs in column order
        names: Column names, in order

    Returns:
        List of ColumnSpec, one per name

    Raises:
        ColumnSpecError: On unknown letters, unknown names or a length mismatch
    """
    if col_types is None:
        return [col_guess() for _ in names]

    if isinstance(col_types, str):
        if len(col_types) != len(names):
            raise ColumnSpecError(
                f"Compact col_types {col_types!r} has {len(col_types)} letters "
                f"but there are {len(names)} columns"
            )
        return [from_abbreviation(letter) for letter in col_types]

    if isinstance(col_types, Mapping):
        unknown = [name for name in col_types if name not in names]
        if unknown:
            raise ColumnSpecError(f"col_types names unknown columns: {unknown}")
        return [as_spec(col_types[name]) if name in col_types else col_guess() for name in names]

    specs = [as_spec(value) for value in col_types]
    if len(specs) != len(names):
        raise ColumnSpecError(f"col_types has {len(specs)} entries but there are {len(names)} columns")
    return specs
