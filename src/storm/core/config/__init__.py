"""Centralized configuration for the Storm kernel.

Quick start::

    from storm.core.config import get_settings

    settings = get_settings()
    print(settings.providers)
    print(settings.load_discovered_packages)

Architecture::

    settings.py       StormSettings (Pydantic) + get_settings() cache
    loader.py         .env cascade discovery

Tags:
    storm-core, configuration, settings, pydantic, env-files
"""

from .loader import discover_env_files, env_file_names, find_project_root
from .settings import (
    ExecutionContext,
    StormSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "ExecutionContext",
    "StormSettings",
    "get_settings",
    "clear_settings_cache",
    # Loader
    "find_project_root",
    "discover_env_files",
    "env_file_names",
]
