"""Type inference and column parsing.

Inference works on a bounded prefix of each column:
1. Trim tokens and drop designated missing-value tokens
2. Try each candidate type in priority order
   (logical > integer > double > date > datetime > time > text)
3. Pick the first type under which every sampled token parses

The whole column is then parsed under the chosen type. Tokens that fail are
recorded in the problems ledger and become missing; parsing never aborts on
a bad cell.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from functools import partial

from tidytab.core.config import get_settings
from tidytab.core.logging import get_logger
from tidytab.core.models.base import TYPE_PRIORITY, ColumnType
from tidytab.parsing.datetime_format import parse_date, parse_datetime, parse_time
from tidytab.parsing.errors import ColumnSpecError, ParseError
from tidytab.parsing.locale import LocaleConfig, default_locale
from tidytab.parsing.models import ParsedColumn, ParseResult, Problem, Problems
from tidytab.parsing.null_values import resolve_na
from tidytab.parsing.numbers import parse_double, parse_integer, parse_logical, parse_number
from tidytab.parsing.spec import ColumnSpec, SpecLike, as_spec, col_guess, resolve_col_types
from tidytab.table import Cell, Column, Table

logger = get_logger(__name__)

Token = str | None


def _prepare(token: Token, na: frozenset[str], trim_ws: bool) -> str | None:
    """Trim a token and map missing-value tokens to None."""
    if token is None:
        return None
    text = token.strip() if trim_ws else token
    if text in na or token in na:
        return None
    return text


def _candidate_parser(
    column_type: ColumnType, locale: LocaleConfig, guess_integer: bool
) -> Callable[[str], Cell] | None:
    """Parser used while guessing; None means the candidate is not tried."""
    match column_type:
        case ColumnType.LOGICAL:
            return partial(parse_logical, guessing=True)
        case ColumnType.INTEGER:
            return parse_integer if guess_integer else None
        case ColumnType.DOUBLE:
            return partial(parse_double, locale=locale)
        case ColumnType.DATE:
            return partial(parse_date, locale=locale)
        case ColumnType.DATETIME:
            return partial(parse_datetime, locale=locale)
        case ColumnType.TIME:
            return partial(parse_time, locale=locale)
    return None


def _parses_all(parser: Callable[[str], Cell], tokens: Sequence[str]) -> bool:
    for token in tokens:
        try:
            parser(token)
        except ParseError:
            return False
    return True


def guess_type(
    tokens: Iterable[Token],
    locale: LocaleConfig | None = None,
    *,
    guess_max: int | None = None,
    na: Iterable[str] | str | None = None,
    trim_ws: bool | None = None,
    guess_integer: bool | None = None,
) -> ColumnType:
    """Guess the most specific type every sampled token parses as.

    Args:
        tokens: Raw text tokens (None counts as missing)
        locale: Parsing locale (default: settings' default locale)
        guess_max: Number of leading tokens examined
        na: Missing-value tokens (default: configured null values)
        trim_ws: Strip whitespace before parsing
        guess_integer: Whether whole numbers may be guessed as integer

    Returns:
        The chosen ColumnType; an all-missing sample is logical
    """
    settings = get_settings()
    locale = locale or default_locale()
    guess_max = settings.guess_max if guess_max is None else guess_max
    trim_ws = settings.trim_ws if trim_ws is None else trim_ws
    guess_integer = settings.guess_integer if guess_integer is None else guess_integer
    missing = resolve_na(na)

    sample: list[str] = []
    for position, token in enumerate(tokens):
        if position >= guess_max:
            break
        prepared = _prepare(token, missing, trim_ws)
        if prepared is not None:
            sample.append(prepared)

    if not sample:
        return ColumnType.LOGICAL

    for candidate in TYPE_PRIORITY:
        if candidate is ColumnType.TEXT:
            break
        parser = _candidate_parser(candidate, locale, guess_integer)
        if parser is not None and _parses_all(parser, sample):
            return candidate
    return ColumnType.TEXT


def _column_parser(spec: ColumnSpec, locale: LocaleConfig) -> Callable[[str], Cell]:
    """Parser used for the full-column pass under a fixed spec."""
    match spec.type:
        case ColumnType.LOGICAL:
            return parse_logical
        case ColumnType.INTEGER:
            return parse_integer
        case ColumnType.DOUBLE:
            return partial(parse_number if spec.loose else parse_double, locale=locale)
        case ColumnType.DATE:
            return partial(parse_date, locale=locale, format=spec.format)
        case ColumnType.DATETIME:
            return partial(parse_datetime, locale=locale, format=spec.format)
        case ColumnType.TIME:
            return partial(parse_time, locale=locale, format=spec.format)
        case ColumnType.TEXT:
            return str
    raise ColumnSpecError(f"Cannot parse with spec {spec.describe()}")


def parse_column(
    tokens: Sequence[Token],
    spec: SpecLike | None = None,
    locale: LocaleConfig | None = None,
    *,
    column_name: str = "",
    na: Iterable[str] | str | None = None,
    trim_ws: bool | None = None,
    guess_max: int | None = None,
    guess_integer: bool | None = None,
) -> ParsedColumn:
    """Parse an entire column of tokens.

    A guess spec (or None) runs type inference first. Tokens that fail to
    parse become missing and are recorded as problems.

    Raises:
        ColumnSpecError: If the spec is a skip spec
    """
    settings = get_settings()
    locale = locale or default_locale()
    trim_ws = settings.trim_ws if trim_ws is None else trim_ws
    missing = resolve_na(na)
    resolved = col_guess() if spec is None else as_spec(spec)

    if resolved.skip:
        raise ColumnSpecError(f"Column {column_name!r} is skipped and cannot be parsed")

    if resolved.is_guess:
        guessed = guess_type(
            tokens,
            locale,
            guess_max=guess_max,
            na=missing,
            trim_ws=trim_ws,
            guess_integer=guess_integer,
        )
        resolved = ColumnSpec(guessed)
        logger.debug("column_type_guessed", column=column_name, type=guessed.value)

    assert resolved.type is not None
    parser = _column_parser(resolved, locale)
    problems = Problems()
    values: list[Cell] = []
    for row, token in enumerate(tokens):
        prepared = _prepare(token, missing, trim_ws)
        if prepared is None:
            values.append(None)
            continue
        try:
            values.append(parser(prepared))
        except ParseError as e:
            values.append(None)
            problems.add(Problem(row=row, column=column_name, expected=e.expected, actual=token or ""))

    if problems:
        logger.warning(
            "parsing_failures",
            column=column_name,
            type=resolved.type.value,
            count=problems.count,
        )
    return ParsedColumn(column_name, resolved.type, tuple(values), problems)


def infer_and_parse(
    tokens: Sequence[Token],
    locale: LocaleConfig | None = None,
    *,
    column_name: str = "",
    guess_max: int | None = None,
    na: Iterable[str] | str | None = None,
    trim_ws: bool | None = None,
    guess_integer: bool | None = None,
) -> ParsedColumn:
    """Guess a column's type from a prefix of its tokens, then parse all of it."""
    return parse_column(
        tokens,
        col_guess(),
        locale,
        column_name=column_name,
        na=na,
        trim_ws=trim_ws,
        guess_max=guess_max,
        guess_integer=guess_integer,
    )


def parse_columns(
    names: Sequence[str],
    columns: Sequence[Sequence[Token]],
    specs: Sequence[ColumnSpec],
    locale: LocaleConfig | None = None,
    **options: object,
) -> ParseResult:
    """Parse several token columns into a table, dropping skipped columns.

    Each column is parsed independently; their problems are merged.
    """
    parsed: list[ParsedColumn] = []
    for name, tokens, spec in zip(names, columns, specs, strict=True):
        if spec.skip:
            continue
        parsed.append(parse_column(tokens, spec, locale, column_name=name, **options))  # type: ignore[arg-type]
    table = Table(tuple(p.column for p in parsed))
    return ParseResult(table, Problems.merge(p.problems for p in parsed))


def type_convert(
    table: Table,
    col_types: str | Mapping[str, SpecLike] | Sequence[SpecLike] | None = None,
    locale: LocaleConfig | None = None,
    *,
    na: Iterable[str] | str | None = None,
    trim_ws: bool | None = None,
    guess_max: int | None = None,
    guess_integer: bool | None = None,
) -> ParseResult:
    """Re-parse the text columns of a table.

    Columns that are not text are kept as they are. Skipped text columns are
    dropped from the result.
    """
    specs = resolve_col_types(col_types, table.column_names)
    columns: list[Column] = []
    ledgers: list[Problems] = []
    for column, spec in zip(table.columns, specs, strict=True):
        if column.type is not ColumnType.TEXT:
            columns.append(column)
            continue
        if spec.skip:
            continue
        parsed = parse_column(
            column.values,  # type: ignore[arg-type]
            spec,
            locale,
            column_name=column.name,
            na=na,
            trim_ws=trim_ws,
            guess_max=guess_max,
            guess_integer=guess_integer,
        )
        columns.append(parsed.column)
        ledgers.append(parsed.problems)
    return ParseResult(Table(tuple(columns)), Problems.merge(ledgers))
