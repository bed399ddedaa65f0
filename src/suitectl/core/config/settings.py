"""
Centralized settings for suitectl.

:class:`SuiteSettings` is the single validated source of truth for
process-wide knobs: worker counts, pacing, retry policy, output mode,
logging and API endpoints.  Values resolve in this order:

1. ``SUITECTL_*`` environment variables (and ``.env``)
2. the TOML config file (``~/.config/suitectl/config.toml`` by default)
3. field defaults

CLI flags override the resolved settings per invocation; see
:class:`suitectl.execution.context.InvocationContext`.

Example config file::

    batch_threads = 8
    standard_delay_ms = 500

    [retry]
    max_attempts = 7
    on = [403]

    [logging]
    level = "DEBUG"
"""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from suitectl.core.errors import ConfigError

DEFAULT_CONFIG_FILE = Path.home() / ".config" / "suitectl" / "config.toml"


class SuiteSettings(BaseSettings):
    """suitectl configuration.

    All fields can be set via ``SUITECTL_*`` environment variables (e.g.
    ``SUITECTL_BATCH_THREADS=8``).
    """

    model_config = SettingsConfigDict(
        env_prefix="SUITECTL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Batch execution ──────────────────────────────────────────
    batch_threads: int = Field(default=4, description="Default worker count for batch verbs")
    max_threads: int = Field(default=16, description="Hard cap on the worker count")
    standard_delay_ms: int = Field(default=200, ge=0, description="Pause after every remote call")

    # ── Retry ────────────────────────────────────────────────────
    retry_max_attempts: int = Field(default=5, ge=1)
    retry_base_delay: float = Field(default=1.0, ge=0)
    retry_max_delay: float = Field(default=32.0, ge=0)
    retry_on: list[int] = Field(default_factory=list, description="Extra HTTP statuses to retry")

    # ── Transport ────────────────────────────────────────────────
    request_timeout: float = Field(default=60.0, gt=0, description="Per-request deadline in seconds")
    access_token: str = Field(default="", repr=False)
    drive_url: str = Field(default="https://www.googleapis.com/drive/v3")
    directory_url: str = Field(default="https://admin.googleapis.com/admin/directory/v1")
    gmail_url: str = Field(default="https://gmail.googleapis.com/gmail/v1")
    sheets_url: str = Field(default="https://sheets.googleapis.com/v4")

    # ── Output ───────────────────────────────────────────────────
    compress_output: bool = Field(default=False)
    stream_output: bool = Field(default=False)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("console", "json"):
            raise ValueError("log_format must be 'console' or 'json'")
        return value

    @model_validator(mode="after")
    def _stream_implies_compress(self) -> SuiteSettings:
        if self.stream_output:
            object.__setattr__(self, "compress_output", True)
        return self


# ── Config file ──────────────────────────────────────────────────────────

# Nested TOML tables map onto flat field names.
_TABLE_PREFIXES = {"retry": "retry_", "logging": "log_", "api": ""}


def read_config_file(path: Path) -> dict[str, Any]:
    """Flatten a TOML config file into ``SuiteSettings`` field names."""
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            prefix = _TABLE_PREFIXES.get(key, f"{key}_")
            for sub_key, sub_value in value.items():
                flat[f"{prefix}{sub_key}"] = sub_value
        else:
            flat[key] = value
    return flat


def _to_env_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return json.dumps(value)
    return str(value)


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, SuiteSettings] = {}


def get_settings(
    *,
    config_file: Path | None = None,
    _force_reload: bool = False,
) -> SuiteSettings:
    """Load, validate, and cache a :class:`SuiteSettings` instance.

    Parameters
    ----------
    config_file:
        TOML file to read.  Defaults to ``SUITECTL_CONFIG_FILE`` or
        ``~/.config/suitectl/config.toml``; a missing default file is ignored.
    _force_reload:
        Bypass cache and reload.
    """
    explicit = config_file is not None or "SUITECTL_CONFIG_FILE" in os.environ
    path = config_file or Path(os.environ.get("SUITECTL_CONFIG_FILE", DEFAULT_CONFIG_FILE))
    cache_key = str(path)

    if not _force_reload and cache_key in _settings_cache:
        return _settings_cache[cache_key]

    file_values: dict[str, Any] = {}
    if path.is_file():
        try:
            file_values = read_config_file(path)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Cannot read config file {path}: {e}", cause=e) from e
    elif explicit:
        raise ConfigError(f"Config file not found: {path}")

    # Inject file values into os.environ temporarily; explicit env vars win.
    original_env: dict[str, str | None] = {}
    for key, value in file_values.items():
        env_key = f"SUITECTL_{key.upper()}"
        if env_key not in os.environ:
            original_env[env_key] = os.environ.get(env_key)
            os.environ[env_key] = _to_env_value(value)

    try:
        settings = SuiteSettings()
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}", cause=e) from e
    finally:
        for key, orig_value in original_env.items():
            if orig_value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = orig_value

    _settings_cache[cache_key] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
