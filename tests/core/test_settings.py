"""Tests for fallible.core.settings module."""

import pytest

from fallible.core.errors import ConfigError
from fallible.core.settings import FallibleSettings, get_settings, normalize_log_level


class TestDefaults:
    def test_defaults(self, isolated_env):
        settings = get_settings()
        assert settings.log_level == "WARNING"
        assert settings.log_json is None
        assert settings.bench_size == 100_000
        assert settings.bad_every == 17

    def test_cached(self, isolated_env):
        assert get_settings() is get_settings()


class TestEnvironment:
    def test_env_overrides(self, isolated_env, monkeypatch):
        monkeypatch.setenv("FALLIBLE_BENCH_SIZE", "1000")
        monkeypatch.setenv("FALLIBLE_LOG_LEVEL", "debug")
        monkeypatch.setenv("FALLIBLE_LOG_JSON", "true")
        settings = get_settings(_force_reload=True)
        assert settings.bench_size == 1000
        assert settings.log_level == "DEBUG"
        assert settings.log_json is True

    def test_env_file(self, isolated_env):
        (isolated_env / ".env").write_text("FALLIBLE_BAD_EVERY=13\n")
        assert get_settings(_force_reload=True).bad_every == 13

    def test_invalid_value_is_config_error(self, isolated_env, monkeypatch):
        monkeypatch.setenv("FALLIBLE_BENCH_ROUNDS", "0")
        with pytest.raises(ConfigError, match="invalid settings"):
            get_settings(_force_reload=True)


class TestValidation:
    def test_unknown_log_level(self, isolated_env):
        with pytest.raises(ValueError, match="log_level"):
            FallibleSettings(log_level="LOUD")

    def test_warmup_may_be_zero(self, isolated_env):
        assert FallibleSettings(warmup_rounds=0).warmup_rounds == 0

    def test_negative_warmup_rejected(self, isolated_env):
        with pytest.raises(ValueError):
            FallibleSettings(warmup_rounds=-1)

    def test_normalize_log_level(self):
        assert normalize_log_level("warning") == "WARNING"
        with pytest.raises(ValueError, match="log_level"):
            normalize_log_level("loud")
