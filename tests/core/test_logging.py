"""Tests for structured logging setup."""

import pytest
import structlog
from structlog.testing import capture_logs

from tidytab.core.logging import (
    configure_logging,
    current_context,
    get_logger,
    log_context,
)


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestLogContext:
    """Tests for scoped logging context."""

    def test_nested_context(self):
        """Inner scopes add keys and restore the outer scope on exit."""
        assert current_context() == {}
        with log_context(source="table1.csv"):
            with log_context(column="year"):
                assert current_context() == {"source": "table1.csv", "column": "year"}
            assert current_context() == {"source": "table1.csv"}
        assert current_context() == {}

    def test_events_are_captured(self):
        logger = get_logger("tidytab.test")
        with capture_logs() as logs:
            logger.warning("parsing_failures", column="year", count=2)

        assert logs == [
            {
                "event": "parsing_failures",
                "logger": "tidytab.test",
                "column": "year",
                "count": 2,
                "log_level": "warning",
            }
        ]


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output(self, capsys, reset_structlog):
        configure_logging(log_level="INFO", log_format="json", show_timestamps=False)

        get_logger("tidytab.test").info("delim_read", rows=3)

        err = capsys.readouterr().err
        assert '"event": "delim_read"' in err
        assert '"rows": 3' in err

    def test_level_filters_debug(self, capsys, reset_structlog):
        configure_logging(log_level="WARNING", log_format="json", show_timestamps=False)

        get_logger("tidytab.test").debug("column_type_guessed")

        assert "column_type_guessed" not in capsys.readouterr().err

    def test_scoped_context_included(self, capsys, reset_structlog):
        configure_logging(log_level="INFO", log_format="json", show_timestamps=False)

        with log_context(reader="delim"):
            get_logger("tidytab.test").info("delim_read")

        assert '"reader": "delim"' in capsys.readouterr().err

    def test_unknown_format_rejected(self, reset_structlog):
        with pytest.raises(ValueError, match="format"):
            configure_logging(log_format="xml")

    def test_unknown_level_rejected(self, reset_structlog):
        with pytest.raises(ValueError, match="level"):
            configure_logging(log_level="LOUD")

    def test_returns_applied_config(self, reset_structlog):
        config = configure_logging(log_level="debug", log_format="json", color=False)
        assert config.level == "debug"
        assert config.format == "json"
        assert not config.color
