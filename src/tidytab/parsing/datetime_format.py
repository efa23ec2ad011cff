"""Date/time format language.

A format string such as ``"%m/%d/%y %H:%M"`` compiles into a sequence of
tokens that are matched left to right against the input. The whole input
must be consumed.

Specifiers:
    %Y  4-digit year             %y  2-digit year (00-68 -> 20xx, 69-99 -> 19xx)
    %m  month (1-2 digits)       %b  month name or abbreviation (%B is the same)
    %d  day (1-2 digits)         %e  day, optional leading space
    %H  hour 0-23                %I  hour 1-12 (use with %p)
    %M  minute                   %S  integer second
    %OS second with fraction     %p  AM/PM marker
    %Z  time zone name           %z  offset: Z, +hh, +hhmm, +hh:mm
    %a  day name (ignored)       %A  same as %a
    %.  skip one non-digit       %*  skip any run of non-digits
    %AD flexible Y-m-d or Y/m/d  %AT flexible H:M[:S][ AM/PM]
    %D  = %m/%d/%y   %F = %Y-%m-%d   %R = %H:%M   %T = %H:%M:%S
    %%  literal percent

Whitespace in the format matches zero or more whitespace characters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tidytab.parsing.errors import FormatError, ParseError
from tidytab.parsing.locale import LocaleConfig

_SHORTCUTS = {
    "D": "%m/%d/%y",
    "F": "%Y-%m-%d",
    "R": "%H:%M",
    "T": "%H:%M:%S",
}
_SPECIFIERS = frozenset(
    {"Y", "y", "m", "b", "B", "d", "e", "H", "I", "M", "S", "OS", "p", "Z", "z", "a", "A",
     ".", "*", "AD", "AT", "%"}
)  # fmt: skip

_ISO8601_RE = re.compile(
    r"(?P<year>\d{4})(?P<sep>-?)(?P<month>\d{2})(?P=sep)(?P<day>\d{2})"
    r"(?:[T ](?P<hour>\d{2})(?::?(?P<minute>\d{2})(?::?(?P<second>\d{2})(?:[.,](?P<frac>\d+))?)?)?)?"
    r"\s*(?P<tz>Z|[+-]\d{2}(?::?\d{2})?)?"
)


@dataclass(frozen=True)
class FormatToken:
    """One compiled element of a format: a specifier, a literal or whitespace."""

    kind: str  # "spec", "literal" or "space"
    value: str = ""


@dataclass
class DateTimeParts:
    """Components collected while matching a format."""

    year: int | None = None
    month: int | None = None
    day: int | None = None
    hour: int | None = None
    minute: int | None = None
    second: int | None = None
    microsecond: int = 0
    pm: bool | None = None
    tz: tzinfo | None = None

    def to_date(self) -> date:
        return date(
            self.year if self.year is not None else 1970,
            self.month if self.month is not None else 1,
            self.day if self.day is not None else 1,
        )

    def to_time(self) -> time:
        hour = self.hour or 0
        if self.pm is not None:
            if not 1 <= hour <= 12:
                raise ValueError(f"hour {hour} is out of range for AM/PM")
            hour = hour % 12 + (12 if self.pm else 0)
        return time(hour, self.minute or 0, self.second or 0, self.microsecond)

    def to_datetime(self, default_tz: tzinfo) -> datetime:
        return datetime.combine(self.to_date(), self.to_time(), tzinfo=self.tz or default_tz)


class _Cursor:
    """Position within the token being matched."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    @property
    def done(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos] if not self.done else ""

    def digits(self, min_len: int, max_len: int) -> int:
        start = self.pos
        while self.pos < len(self.text) and self.pos - start < max_len and self.text[self.pos].isdigit():
            self.pos += 1
        if self.pos - start < min_len:
            raise ValueError(f"expected {min_len}-{max_len} digits at position {start}")
        return int(self.text[start : self.pos])

    def skip_space(self) -> None:
        while not self.done and self.text[self.pos].isspace():
            self.pos += 1

    def literal(self, char: str) -> None:
        if self.peek() != char:
            raise ValueError(f"expected {char!r} at position {self.pos}")
        self.pos += 1

    def one_of(self, names: list[tuple[str, int]]) -> int:
        """Match the first (longest) name case-insensitively."""
        rest = self.text[self.pos :].lower()
        for name, number in names:
            if rest.startswith(name):
                self.pos += len(name)
                return number
        raise ValueError(f"no known name at position {self.pos}")


class DateTimeFormat:
    """A compiled format string."""

    def __init__(self, fmt: str, tokens: tuple[FormatToken, ...]):
        self.format = fmt
        self.tokens = tokens

    def __repr__(self) -> str:
        return f"DateTimeFormat({self.format!r})"

    def match(self, text: str, locale: LocaleConfig) -> DateTimeParts:
        """Match ``text`` against the format.

        Raises:
            ValueError: If the text does not match completely
        """
        cursor = _Cursor(text)
        parts = DateTimeParts()
        for token in self.tokens:
            if token.kind == "space":
                cursor.skip_space()
            elif token.kind == "literal":
                cursor.literal(token.value)
            else:
                _match_spec(token.value, cursor, parts, locale)
        if not cursor.done:
            raise ValueError(f"trailing characters at position {cursor.pos}")
        return parts


def _match_spec(spec: str, cursor: _Cursor, parts: DateTimeParts, locale: LocaleConfig) -> None:
    names = locale.date_names
    match spec:
        case "Y":
            parts.year = cursor.digits(4, 4)
        case "y":
            short = cursor.digits(2, 2)
            parts.year = short + (2000 if short < 69 else 1900)
        case "m":
            parts.month = cursor.digits(1, 2)
        case "b" | "B":
            parts.month = cursor.one_of(names.month_names())
        case "d":
            parts.day = cursor.digits(1, 2)
        case "e":
            if cursor.peek() == " ":
                cursor.pos += 1
            parts.day = cursor.digits(1, 2)
        case "H" | "I":
            parts.hour = cursor.digits(1, 2)
        case "M":
            parts.minute = cursor.digits(1, 2)
        case "S":
            parts.second = cursor.digits(1, 2)
        case "OS":
            _match_fractional_second(cursor, parts, locale)
        case "p":
            _match_am_pm(cursor, parts, locale)
        case "a" | "A":
            cursor.one_of(names.day_names())
        case "Z":
            _match_zone_name(cursor, parts)
        case "z":
            _match_offset(cursor, parts)
        case ".":
            if cursor.done or cursor.peek().isdigit():
                raise ValueError(f"expected a non-digit at position {cursor.pos}")
            cursor.pos += 1
        case "*":
            while not cursor.done and not cursor.peek().isdigit():
                cursor.pos += 1
        case "%":
            cursor.literal("%")
        case "AD":
            parts.year = cursor.digits(4, 4)
            sep = cursor.peek()
            if sep not in ("-", "/"):
                raise ValueError(f"expected '-' or '/' at position {cursor.pos}")
            cursor.pos += 1
            parts.month = cursor.digits(1, 2)
            cursor.literal(sep)
            parts.day = cursor.digits(1, 2)
        case "AT":
            parts.hour = cursor.digits(1, 2)
            cursor.literal(":")
            parts.minute = cursor.digits(1, 2)
            if cursor.peek() == ":":
                cursor.pos += 1
                _match_fractional_second(cursor, parts, locale)
            start = cursor.pos
            cursor.skip_space()
            try:
                _match_am_pm(cursor, parts, locale)
            except ValueError:
                cursor.pos = start


def _match_fractional_second(cursor: _Cursor, parts: DateTimeParts, locale: LocaleConfig) -> None:
    parts.second = cursor.digits(1, 2)
    if not cursor.done and cursor.peek() in (".", locale.decimal_mark):
        cursor.pos += 1
        start = cursor.pos
        cursor.digits(1, 9)
        parts.microsecond = int(cursor.text[start : cursor.pos][:6].ljust(6, "0"))


def _match_am_pm(cursor: _Cursor, parts: DateTimeParts, locale: LocaleConfig) -> None:
    am, pm = locale.date_names.am_pm
    choices = [(am.lower(), 0), (pm.lower(), 1), ("am", 0), ("pm", 1)]
    choices.sort(key=lambda item: len(item[0]), reverse=True)
    parts.pm = cursor.one_of(choices) == 1


def _match_zone_name(cursor: _Cursor, parts: DateTimeParts) -> None:
    start = cursor.pos
    while not cursor.done and (cursor.peek().isalnum() or cursor.peek() in "/_+-"):
        cursor.pos += 1
    name = cursor.text[start : cursor.pos]
    if not name:
        raise ValueError(f"expected a time zone name at position {start}")
    if name.upper() in ("UTC", "GMT", "Z"):
        parts.tz = UTC
        return
    try:
        parts.tz = ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"unknown time zone {name!r}") from e


def _match_offset(cursor: _Cursor, parts: DateTimeParts) -> None:
    if cursor.peek() == "Z":
        cursor.pos += 1
        parts.tz = UTC
        return
    sign = cursor.peek()
    if sign not in ("+", "-"):
        raise ValueError(f"expected a UTC offset at position {cursor.pos}")
    cursor.pos += 1
    hours = cursor.digits(2, 2)
    minutes = 0
    if cursor.peek() == ":":
        cursor.pos += 1
        minutes = cursor.digits(2, 2)
    elif cursor.peek().isdigit():
        minutes = cursor.digits(2, 2)
    if hours > 23 or minutes > 59:
        raise ValueError(f"UTC offset out of range at position {cursor.pos}")
    offset = timedelta(hours=hours, minutes=minutes)
    parts.tz = timezone(-offset if sign == "-" else offset)


@lru_cache(maxsize=256)
def compile_format(fmt: str) -> DateTimeFormat:
    """Compile a format string into a reusable matcher.

    Raises:
        FormatError: If the format contains an unknown specifier
    """
    return DateTimeFormat(fmt, tuple(_tokenize(fmt)))


def _tokenize(fmt: str) -> list[FormatToken]:
    tokens: list[FormatToken] = []
    i = 0
    while i < len(fmt):
        char = fmt[i]
        if char.isspace():
            while i < len(fmt) and fmt[i].isspace():
                i += 1
            tokens.append(FormatToken("space"))
            continue
        if char != "%":
            tokens.append(FormatToken("literal", char))
            i += 1
            continue
        if i + 1 >= len(fmt):
            raise FormatError(f"Format {fmt!r} ends with a bare '%'")
        spec = fmt[i + 1]
        if spec in ("O", "A") and fmt[i + 1 : i + 3] in ("OS", "AD", "AT"):
            spec = fmt[i + 1 : i + 3]
        if spec in _SHORTCUTS:
            tokens.extend(_tokenize(_SHORTCUTS[spec]))
        elif spec in _SPECIFIERS:
            tokens.append(FormatToken("spec", spec))
        else:
            raise FormatError(f"Unknown format specifier '%{spec}' in {fmt!r}")
        i += 1 + len(spec)
    return tokens


def describe_format(kind: str, fmt: str | None) -> str:
    """Human-readable expectation used in the problems ledger."""
    return f"{kind} like {fmt}" if fmt else f"{kind} in ISO8601"


def parse_date(token: str, locale: LocaleConfig, format: str | None = None) -> date:
    """Parse a date; the default format is the locale's date_format."""
    fmt = format or locale.date_format
    try:
        return compile_format(fmt).match(token, locale).to_date()
    except ValueError as e:
        if isinstance(e, FormatError):
            raise
        raise ParseError(token, describe_format("date", fmt)) from e


def parse_time(token: str, locale: LocaleConfig, format: str | None = None) -> time:
    """Parse a time of day; the default format is the locale's time_format."""
    fmt = format or locale.time_format
    try:
        return compile_format(fmt).match(token, locale).to_time()
    except ValueError as e:
        if isinstance(e, FormatError):
            raise
        raise ParseError(token, describe_format("time", fmt)) from e


def parse_datetime(token: str, locale: LocaleConfig, format: str | None = None) -> datetime:
    """Parse a date-time; ISO-8601 unless a format is given.

    Values without an explicit zone are placed in the locale's time zone.
    """
    if format is None:
        return _parse_iso8601(token, locale)
    try:
        return compile_format(format).match(token, locale).to_datetime(locale.tzinfo)
    except ValueError as e:
        if isinstance(e, FormatError):
            raise
        raise ParseError(token, describe_format("date-time", format)) from e


def _parse_iso8601(token: str, locale: LocaleConfig) -> datetime:
    match = _ISO8601_RE.fullmatch(token)
    if match is None:
        raise ParseError(token, describe_format("date-time", None))
    parts = DateTimeParts(
        year=int(match["year"]),
        month=int(match["month"]),
        day=int(match["day"]),
        hour=int(match["hour"]) if match["hour"] else 0,
        minute=int(match["minute"]) if match["minute"] else 0,
        second=int(match["second"]) if match["second"] else 0,
        microsecond=int(match["frac"][:6].ljust(6, "0")) if match["frac"] else 0,
    )
    try:
        if match["tz"]:
            _match_offset(_Cursor(match["tz"]), parts)
        return parts.to_datetime(locale.tzinfo)
    except ValueError as e:
        raise ParseError(token, describe_format("date-time", None)) from e
