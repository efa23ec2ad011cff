"""Missing-value configuration loader."""

from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from tidytab.core.config import get_settings

DEFAULT_NA: tuple[str, ...] = ("", "NA")


class NullValueConfig:
    """Missing-value token configuration for parsing."""

    def __init__(self, config_dict: dict[str, Any]):
        self._config = config_dict

    def get_null_strings(self, include_extended: bool = False) -> list[str]:
        """Get list of strings to treat as missing.

        Args:
            include_extended: Whether to include the opt-in tokens (N/A, NULL, ...)

        Returns:
            List of missing-value representations
        """
        null_strings = [item["value"] for item in self._config.get("standard_nulls", [])]

        if include_extended:
            for item in self._config.get("extended_nulls", []):
                # NaN is a valid double; only treat it as missing on request
                if item.get("context") != "numeric_only":
                    null_strings.append(item["value"])

        return null_strings


def load_null_value_config(config_path: Path | None = None) -> NullValueConfig:
    """Load missing-value configuration from YAML.

    Args:
        config_path: Optional path to config file. If None, uses default from settings.

    Returns:
        NullValueConfig instance
    """
    if config_path is None:
        settings = get_settings()
        config_path = settings.config_path / "null_values.yaml"

    if not config_path.is_file():
        return NullValueConfig({"standard_nulls": [{"value": v} for v in DEFAULT_NA]})

    with open(config_path) as f:
        config_dict = yaml.safe_load(f) or {}

    return NullValueConfig(config_dict)


@lru_cache
def _configured_na(config_path: Path, extended: bool) -> frozenset[str]:
    config = load_null_value_config(config_path / "null_values.yaml")
    return frozenset(config.get_null_strings(include_extended=extended))


def resolve_na(na: Iterable[str] | str | None, extended: bool | None = None) -> frozenset[str]:
    """Turn a caller's ``na`` argument into the set of missing tokens.

    ``None`` means the configured standard tokens, plus the extended ones
    when ``extended`` (default: ``Settings.na_extended``) is set. A single
    string is one token. An explicit ``na`` ignores ``extended``.
    """
    if na is None:
        settings = get_settings()
        extended = settings.na_extended if extended is None else extended
        return _configured_na(settings.config_path, extended)
    if isinstance(na, str):
        return frozenset((na,))
    return frozenset(na)
