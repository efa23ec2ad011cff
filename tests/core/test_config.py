"""Tests for settings and shared core models."""

from pathlib import Path

import pytest

from tidytab.core.config import Settings, get_settings
from tidytab.core.models.base import TYPE_PRIORITY, ColumnType, Result


class TestSettings:
    """Tests for pydantic-settings configuration."""

    def test_defaults(self):
        """Defaults match the documented inference behaviour."""
        settings = Settings()
        assert settings.guess_max == 1000
        assert settings.guess_integer is True
        assert settings.trim_ws is True
        assert settings.default_locale == "en"
        assert settings.log_format == "console"

    def test_config_dir_found(self):
        """The repository config directory holds the null value file."""
        settings = Settings()
        assert (settings.config_path / "null_values.yaml").is_file()
        assert (settings.config_path / "locales" / "en.yaml").is_file()

    def test_env_override(self, monkeypatch):
        """TIDYTAB_ environment variables override defaults."""
        monkeypatch.setenv("TIDYTAB_GUESS_MAX", "10")
        monkeypatch.setenv("TIDYTAB_GUESS_INTEGER", "false")
        monkeypatch.setenv("TIDYTAB_CONFIG_PATH", "/tmp/elsewhere")

        settings = Settings()

        assert settings.guess_max == 10
        assert settings.guess_integer is False
        assert settings.config_path == Path("/tmp/elsewhere")

    def test_get_settings_cached(self):
        """get_settings returns the same instance until the cache is cleared."""
        assert get_settings() is get_settings()


class TestResult:
    """Tests for the Result type."""

    def test_ok(self):
        result = Result.ok(42, warnings=["careful"])
        assert result.success
        assert result.unwrap() == 42
        assert result.warnings == ["careful"]

    def test_fail(self):
        result = Result.fail("boom")
        assert not result.success
        assert result.error == "boom"
        with pytest.raises(ValueError, match="boom"):
            result.unwrap()

    def test_map(self):
        assert Result.ok(2).map(lambda v: v * 10).unwrap() == 20
        failed = Result.fail("nope")
        assert failed.map(lambda v: v * 10) is failed


class TestColumnType:
    """Tests for the ColumnType enum."""

    def test_priority_order(self):
        """Guessing tries the most specific types first."""
        assert TYPE_PRIORITY == (
            ColumnType.LOGICAL,
            ColumnType.INTEGER,
            ColumnType.DOUBLE,
            ColumnType.DATE,
            ColumnType.DATETIME,
            ColumnType.TIME,
            ColumnType.TEXT,
        )

    def test_abbreviations(self):
        assert "".join(t.abbreviation for t in ColumnType) == "lidDTtc"

    def test_is_numeric(self):
        assert ColumnType.INTEGER.is_numeric
        assert ColumnType.DOUBLE.is_numeric
        assert not ColumnType.TEXT.is_numeric
