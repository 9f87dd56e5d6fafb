"""
Shared pytest fixtures and configuration for fallible tests.

This module provides:
- Settings cache isolation
- structlog reset after tests that configure logging
- Auto-marking of tests as unit unless marked slow
"""

from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from fallible.core.settings import clear_settings_cache


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "slow"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def clean_settings_cache() -> Generator[None, None, None]:
    """Each test loads settings from its own environment."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def reset_logging() -> Generator[None, None, None]:
    """Restore structlog defaults after a test that configures logging."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory with no FALLIBLE_* variables set."""
    import os

    for key in list(os.environ):
        if key.startswith("FALLIBLE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return tmp_path
