"""
Shared pytest fixtures for storm-foundation tests.

This module provides:
- Settings cache cleanup for test isolation
- An application rooted in a temporary directory
- Cache-path environment cleanup

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments.

    def test_something(app):
        app.register_configured_providers()
"""

from pathlib import Path

import pytest

from storm.core.config import clear_settings_cache
from storm.core.config.settings import StormSettings
from storm.foundation.application import Application

CACHE_ENV_KEYS = (
    "STORM_CONFIG_CACHE",
    "STORM_ROUTES_CACHE",
    "STORM_COMPILED_CACHE",
    "STORM_SERVICES_CACHE",
    "STORM_PACKAGES_CACHE",
    "STORM_CLASSES_CACHE",
)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Drop cached settings and cache-path overrides around every test."""
    for key in CACHE_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Application fixtures
# =============================================================================


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """Resolved application root."""
    return tmp_path.resolve()


@pytest.fixture
def settings(root: Path) -> StormSettings:
    """Settings for an application in ``root`` with an in-memory database."""
    return StormSettings(
        base_path=str(root),
        database_url="sqlite:///:memory:",
        log_format="console",
    )


@pytest.fixture
def make_app(root: Path):
    """Factory building an application in ``root`` with settings overrides."""

    def _make(**overrides) -> Application:
        values = {
            "base_path": str(root),
            "database_url": "sqlite:///:memory:",
            "log_format": "console",
            **overrides,
        }
        return Application(root, settings=StormSettings(**values))

    return _make


@pytest.fixture
def app(root: Path, settings: StormSettings) -> Application:
    return Application(root, settings=settings)
