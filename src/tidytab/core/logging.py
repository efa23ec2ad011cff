"""Structured logging for tidytab.

The library emits structlog events but never configures output on import;
applications (or tests) decide where events go.

Usage:
    from tidytab.core.logging import configure_logging, get_logger, log_context

    configure_logging(log_level="DEBUG", log_format="json")

    logger = get_logger(__name__)
    logger.debug("column_type_guessed", column="year", type="integer")

    with log_context(source="table1.csv"):
        logger.warning("parsing_failures", column="cases", count=3)
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from typing import Any, cast

import structlog
from structlog.typing import FilteringBoundLogger, Processor

_scope: ContextVar[dict[str, Any] | None] = ContextVar("tidytab_log_scope", default=None)


@dataclass(frozen=True)
class LogConfig:
    """Output options for configure_logging."""

    level: str = "INFO"
    format: str = "console"  # "console" or "json"
    show_timestamps: bool = True
    color: bool = True

    @property
    def numeric_level(self) -> int:
        level = logging.getLevelName(self.level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {self.level!r}")
        return level


def _merge_scope(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Copy the active log_context values into the event (event keys win)."""
    scope = _scope.get()
    if scope:
        for key, value in scope.items():
            event_dict.setdefault(key, value)
    return event_dict


def _processors(config: LogConfig) -> list[Processor]:
    chain: list[Processor] = [
        _merge_scope,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
    ]
    if config.show_timestamps:
        chain.insert(0, structlog.processors.TimeStamper(fmt="iso", utc=True))

    if config.format == "json":
        chain += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    elif config.format == "console":
        chain.append(
            structlog.dev.ConsoleRenderer(
                colors=config.color, exception_formatter=structlog.dev.plain_traceback
            )
        )
    else:
        raise ValueError(f"Unknown log format {config.format!r}; use 'console' or 'json'")
    return chain


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    show_timestamps: bool = True,
    color: bool = True,
) -> LogConfig:
    """Route tidytab events to stderr.

    Args:
        log_level: Minimum level (DEBUG shows per-column type guesses)
        log_format: "console" for people, "json" for log collectors
        show_timestamps: Prefix events with an ISO timestamp
        color: Colorize console output

    Returns:
        The applied LogConfig
    """
    config = LogConfig(log_level, log_format, show_timestamps, color)
    structlog.configure(
        processors=_processors(config),
        wrapper_class=structlog.make_filtering_bound_logger(config.numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        level=config.numeric_level,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
    return config


def configure_from_settings(**overrides: Any) -> LogConfig:
    """Configure logging from Settings.log_level / Settings.log_format."""
    from tidytab.core.config import get_settings

    settings = get_settings()
    config = replace(LogConfig(settings.log_level, settings.log_format), **overrides)
    return configure_logging(config.level, config.format, config.show_timestamps, config.color)


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    """Get a logger; events carry ``logger=<name>`` when a name is given."""
    if name is None:
        return cast(FilteringBoundLogger, structlog.get_logger())
    return cast(FilteringBoundLogger, structlog.get_logger(logger=name))


class LogContext:
    """Scope that adds key/value pairs to every event logged inside it.

    Scopes nest; leaving one restores the enclosing values.
    """

    def __init__(self, **context: Any):
        self.context = context
        self._token: Token[dict[str, Any] | None] | None = None

    def __enter__(self) -> LogContext:
        self._token = _scope.set({**(_scope.get() or {}), **self.context})
        return self

    def __exit__(self, *args: Any) -> None:
        if self._token is not None:
            _scope.reset(self._token)
            self._token = None


def log_context(**context: Any) -> LogContext:
    """Shorthand for ``LogContext(**context)``."""
    return LogContext(**context)


def current_context() -> dict[str, Any]:
    """Copy of the values the active log_context scopes add."""
    return dict(_scope.get() or {})
