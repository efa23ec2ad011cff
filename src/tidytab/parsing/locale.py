"""Locale configuration for parsing.

A locale bundles the region-specific conventions used while parsing text:
decimal and grouping marks, month/day names, default date and time formats,
the time zone naive datetimes are placed in, and the text encoding.

Locales are plain values passed explicitly to every parser. There is no
process-wide mutable default; ``default_locale()`` builds one from settings.

Date names for languages other than English live in config/locales/<name>.yaml.
"""

from __future__ import annotations

import codecs
from datetime import UTC, tzinfo
from functools import lru_cache
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tidytab.core.config import get_settings

_EN_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)  # fmt: skip
_EN_DAYS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


class LocaleError(ValueError):
    """A locale could not be found or built."""


class DateNames(BaseModel):
    """Month and day names plus AM/PM markers for one language."""

    model_config = ConfigDict(frozen=True)

    language: str = "en"
    months: tuple[str, ...] = _EN_MONTHS
    months_abbr: tuple[str, ...] = tuple(m[:3] for m in _EN_MONTHS)
    days: tuple[str, ...] = _EN_DAYS
    days_abbr: tuple[str, ...] = tuple(d[:3] for d in _EN_DAYS)
    am_pm: tuple[str, str] = ("AM", "PM")

    @field_validator("months", "months_abbr")
    @classmethod
    def _twelve_months(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if len(value) != 12:
            raise ValueError(f"expected 12 month names, got {len(value)}")
        return value

    @field_validator("days", "days_abbr")
    @classmethod
    def _seven_days(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if len(value) != 7:
            raise ValueError(f"expected 7 day names, got {len(value)}")
        return value

    def month_names(self) -> list[tuple[str, int]]:
        """(lowercased name, month number) pairs, longest names first.

        Abbreviations ending in a period also match without it.
        """
        pairs: dict[str, int] = {}
        for number, (full, abbr) in enumerate(zip(self.months, self.months_abbr, strict=True), 1):
            for name in (full, abbr, abbr.rstrip(".")):
                pairs.setdefault(name.lower(), number)
        return sorted(pairs.items(), key=lambda item: len(item[0]), reverse=True)

    def day_names(self) -> list[tuple[str, int]]:
        """(lowercased name, 0=Sunday day number) pairs, longest names first."""
        pairs: dict[str, int] = {}
        for number, (full, abbr) in enumerate(zip(self.days, self.days_abbr, strict=True)):
            for name in (full, abbr, abbr.rstrip(".")):
                pairs.setdefault(name.lower(), number)
        return sorted(pairs.items(), key=lambda item: len(item[0]), reverse=True)


class LocaleConfig(BaseModel):
    """Parsing conventions for one region."""

    model_config = ConfigDict(frozen=True)

    name: str = "en"
    date_names: DateNames = Field(default_factory=DateNames)
    date_format: str = "%AD"
    time_format: str = "%AT"
    decimal_mark: str = "."
    grouping_mark: str = ","
    tz: str = "UTC"
    encoding: str = "UTF-8"

    @model_validator(mode="before")
    @classmethod
    def _pair_marks(cls, data: Any) -> Any:
        """Setting one mark to the other's default swaps the pair."""
        if isinstance(data, dict):
            data = dict(data)
            if data.get("decimal_mark") == "," and "grouping_mark" not in data:
                data["grouping_mark"] = "."
            if data.get("grouping_mark") == "." and "decimal_mark" not in data:
                data["decimal_mark"] = ","
        return data

    @model_validator(mode="after")
    def _check(self) -> LocaleConfig:
        if self.decimal_mark not in (".", ","):
            raise ValueError(f"decimal_mark must be '.' or ',', got {self.decimal_mark!r}")
        if self.decimal_mark == self.grouping_mark:
            raise ValueError("decimal_mark and grouping_mark must be different")
        _zone(self.tz)
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {self.encoding!r}") from e
        return self

    @property
    def tzinfo(self) -> tzinfo:
        return _zone(self.tz)


@lru_cache
def _zone(name: str) -> tzinfo:
    if name.upper() in ("UTC", "GMT", "Z"):
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown time zone: {name!r}") from e


@lru_cache
def _read_locale_file(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_locale(name: str = "en", config_path: Path | None = None, **overrides: Any) -> LocaleConfig:
    """Build a locale from config/locales/<name>.yaml plus overrides.

    Args:
        name: Locale name (file stem under config/locales)
        config_path: Optional config directory. If None, uses default from settings.
        **overrides: LocaleConfig fields replacing the file's values

    Returns:
        LocaleConfig instance

    Raises:
        LocaleError: If the locale file is missing (other than "en") or invalid
    """
    if config_path is None:
        config_path = get_settings().config_path
    path = config_path / "locales" / f"{name}.yaml"

    if path.is_file():
        data = dict(_read_locale_file(path))
    elif name == "en":
        data = {}
    else:
        raise LocaleError(f"Unknown locale {name!r}: {path} not found")

    data["name"] = name
    data.update(overrides)
    try:
        return LocaleConfig.model_validate(data)
    except ValueError as e:
        raise LocaleError(f"Invalid locale {name!r}: {e}") from e


def default_locale() -> LocaleConfig:
    """The locale used when a call does not pass one explicitly."""
    return load_locale(get_settings().default_locale)
