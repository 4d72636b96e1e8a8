"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Constructor arguments
  2. Environment variables  (MACVENDOR__CHECK_INTERVAL=PT10M)
  3. macvendor.yaml         (searched in cwd, then ~/.config/macvendor/)
  4. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
Intervals accept seconds or ISO 8601 durations.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from macvendor import __version__

_DEFAULT_CACHE_DIR: str = platformdirs.user_cache_dir("macvendor")

DEFAULT_SOURCE_URL = "https://standards-oui.ieee.org/"


def _find_config_file() -> str | None:
    """Return the path of the first macvendor.yaml found, or None."""
    candidates = [
        Path("macvendor.yaml"),
        Path.home() / ".config" / "macvendor" / "macvendor.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class FetcherSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timeout_seconds: float = 60.0
    user_agent: str = f"macvendor/{__version__}"


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: MACVENDOR__LOGGING__LEVEL=DEBUG
        env_prefix="MACVENDOR__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    auto_refresh: bool = True
    # None disables the on-disk cache: embedded snapshot plus in-memory refreshes
    cache_directory: str | None = _DEFAULT_CACHE_DIR
    check_interval: timedelta = timedelta(hours=1)
    refresh_interval: timedelta = timedelta(days=30)
    source_url: str = DEFAULT_SOURCE_URL
    synchronous_initial_load: bool = False
    fail_initial_load_is_fatal: bool = False
    lock_timeout: timedelta = timedelta(seconds=30)

    fetcher: FetcherSettings = FetcherSettings()
    logging: LoggingSettings = LoggingSettings()

    @field_validator("cache_directory")
    @classmethod
    def validate_cache_directory(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return str(Path(v).expanduser())

    @field_validator("check_interval", "refresh_interval", "lock_timeout")
    @classmethod
    def validate_interval(cls, v: timedelta) -> timedelta:
        if v < timedelta(0):
            raise ValueError("interval must not be negative")
        return v

    @field_validator("source_url")
    @classmethod
    def validate_source_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("source_url must use http or https scheme")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
