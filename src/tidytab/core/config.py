"""Configuration management.

Uses pydantic-settings for type-safe configuration from environment variables.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_config_dir() -> Path:
    """Find the config directory by walking up from the package location.

    Looks for a 'config/' directory containing null_values.yaml.
    Falls back to relative Path("config") if not found.
    """
    # Start from this file: src/tidytab/core/config.py
    # Project root is 4 levels up: config.py -> core/ -> tidytab/ -> src/ -> root/
    package_dir = Path(__file__).resolve().parent.parent.parent.parent
    candidate = package_dir / "config"
    if (candidate / "null_values.yaml").is_file():
        return candidate

    # Fallback: relative path (works when CWD is project root)
    return Path("config")


class Settings(BaseSettings):
    """Application settings.

    All settings can be overridden via environment variables.
    Prefix: TIDYTAB_
    """

    model_config = SettingsConfigDict(
        env_prefix="TIDYTAB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Configuration paths
    config_path: Path = Field(
        default_factory=_find_config_dir,
        description="Path to configuration files (null values, locales)",
    )

    # Type inference
    guess_max: int = Field(
        default=1000,
        description="Number of leading tokens examined when guessing a column type",
    )
    guess_integer: bool = Field(
        default=True,
        description="Guess whole numbers as integer rather than double",
    )
    trim_ws: bool = Field(
        default=True,
        description="Strip leading/trailing whitespace from tokens before parsing",
    )
    na_extended: bool = Field(
        default=False,
        description="Also treat the extended null tokens (N/A, NULL, ...) as missing",
    )

    # Locale
    default_locale: str = Field(
        default="en",
        description="Locale used when a call does not pass one explicitly",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")  # 'json' or 'console'


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
