"""Settings for the fallible CLI and benchmark runner.

Values come from ``FALLIBLE_*`` environment variables and an optional ``.env``
file. The combinators take no configuration; only the tooling around them
(logging, workload sizes, benchmark rounds) does.

Examples:
    >>> import os
    >>> os.environ["FALLIBLE_BENCH_SIZE"] = "1000"
    >>> get_settings(_force_reload=True).bench_size
    1000

Tags:
    settings, configuration, pydantic, environment, fallible
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fallible.core.errors import ConfigError

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def normalize_log_level(value: str) -> str:
    """Uppercase a level name, rejecting anything structlog cannot filter on."""
    upper = value.upper()
    if upper not in _LOG_LEVELS:
        raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {value!r}")
    return upper


class FallibleSettings(BaseSettings):
    """Settings shared by the CLI and ``fallible.bench``.

    Fields
    ──────
    log_level            : structlog level
    log_json             : JSON logs (None = auto-detect from tty)
    bench_size           : Workload size (item ids 1..size-1)
    bench_rounds         : Measured rounds per strategy
    warmup_rounds        : Unmeasured rounds per strategy
    bad_every            : Every n-th item id is "bad"
    """

    model_config = SettingsConfigDict(
        env_prefix="FALLIBLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "WARNING"
    log_json: bool | None = None

    # ── Workload ─────────────────────────────────────────────────
    bench_size: int = Field(default=100_000, description="Number of item ids + 1")
    bench_rounds: int = Field(default=10, description="Measured rounds per strategy")
    warmup_rounds: int = Field(default=5, description="Warm-up rounds per strategy")
    bad_every: int = Field(default=17, description="Every n-th item is bad")

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        return normalize_log_level(value)

    @field_validator("bench_size", "bench_rounds", "bad_every")
    @classmethod
    def _check_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be >= 1")
        return value

    @field_validator("warmup_rounds")
    @classmethod
    def _check_non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must be >= 0")
        return value


_settings_cache: dict[str, FallibleSettings] = {}


def get_settings(*, _force_reload: bool = False) -> FallibleSettings:
    """Load, validate and cache settings.

    Raises:
        ConfigError: An environment value failed validation
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    try:
        settings = FallibleSettings()
    except ValidationError as exc:
        raise ConfigError(f"invalid settings: {exc.error_count()} error(s)", cause=exc) from exc

    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Drop the cached settings (for testing)."""
    _settings_cache.clear()


__all__ = ["FallibleSettings", "clear_settings_cache", "get_settings", "normalize_log_level"]
