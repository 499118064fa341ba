"""
Centralized settings for the Storm application kernel.

Manifesto:
    One validated, cached settings object replaces ad-hoc lookups of the
    same environment variables across modules. ``StormSettings`` plays the
    role of the application config repository: the provider list, the
    discovery switch, path overrides, locale and database connection all
    resolve here.

All fields can be set via ``STORM_*`` environment variables (e.g.
``STORM_LOAD_DISCOVERED_PACKAGES=true``) or through ``.env`` files found
by :mod:`~storm.core.config.loader`. List fields accept JSON
(``STORM_PROVIDERS='["acme.blog.BlogServiceProvider"]'``).

Tags:
    storm-core, configuration, settings, pydantic, caching, validation

Doc-Types:
    api-reference
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExecutionContext(str, Enum):
    """Which area of the CMS the current process is serving."""

    FRONT_END = "front-end"
    BACK_END = "back-end"
    CONSOLE = "console"


class StormSettings(BaseSettings):
    """Storm kernel configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    # ── Application ──────────────────────────────────────────────
    app_name: str = Field(default="Storm CMS")
    environment: str = Field(default="production")
    debug: bool = Field(default=False)

    # ── Paths ────────────────────────────────────────────────────
    base_path: str = Field(default=".", description="Application root directory")
    storage_path: str | None = Field(default=None, description="Defaults to <base_path>/storage")
    plugins_path: str | None = Field(default=None)
    themes_path: str | None = Field(default=None)
    temp_path: str | None = Field(default=None)
    uploads_path: str | None = Field(default=None)
    media_path: str | None = Field(default=None)

    # ── Service providers ────────────────────────────────────────
    providers: list[str] = Field(default_factory=list)
    core_provider_prefix: str = Field(
        default="storm.",
        description="Identifiers starting with this prefix are framework-core providers",
    )
    load_discovered_packages: bool = Field(default=False)
    dont_discover: list[str] = Field(
        default_factory=list,
        description="Package names excluded from discovery ('*' excludes all)",
    )
    provider_entry_point_group: str = Field(default="storm.providers")

    # ── Locale / context ─────────────────────────────────────────
    locale: str = Field(default="en")
    fallback_locale: str = Field(default="en")
    execution_context: ExecutionContext = Field(default=ExecutionContext.FRONT_END)
    backend_uri: str = Field(default="/backend")

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(default="sqlite:///storage/database.sqlite")
    database_echo: bool = Field(default=False)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or console")

    @model_validator(mode="after")
    def _validate(self) -> StormSettings:
        if not self.core_provider_prefix:
            raise ValueError("core_provider_prefix must not be empty")
        if self.log_format not in ("json", "console"):
            raise ValueError(f"log_format must be 'json' or 'console', got {self.log_format!r}")
        return self

    @property
    def json_logs(self) -> bool:
        return self.log_format == "json"


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, StormSettings] = {}


def get_settings(
    *,
    environment: str | None = None,
    project_root: Path | None = None,
    _force_reload: bool = False,
) -> StormSettings:
    """Load, validate, and cache a :class:`StormSettings` instance.

    Parameters
    ----------
    environment:
        Explicit environment name used to pick ``.env.{environment}``.
        Falls back to ``STORM_ENVIRONMENT``.
    project_root:
        Override the auto-detected project root.
    _force_reload:
        Bypass cache and reload from disk.
    """
    from .loader import discover_env_files, find_project_root

    root = (project_root or find_project_root()).resolve()
    cache_key = f"{root}:{environment or ''}"

    if not _force_reload and cache_key in _settings_cache:
        return _settings_cache[cache_key]

    env_files = discover_env_files(root, environment)
    settings = StormSettings(_env_file=env_files)  # type: ignore[call-arg]

    object.__setattr__(settings, "_project_root", root)
    object.__setattr__(settings, "_env_files_loaded", env_files)

    _settings_cache[cache_key] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
