"""
Named application paths and cache-file locations.

:class:`ApplicationPaths` is built once at startup from the base path (and
optional overrides, relative ones anchored at the base path) and owned by
the :class:`~storm.foundation.application.Application`.
Every accessor is a pure join of a base directory with a fixed suffix;
cache-file accessors additionally honour a ``STORM_<NAME>_CACHE``
environment override and create the parent directory so the file can be
written.

Layout::

    <base>/plugins                    plugins_path
    <base>/themes                     themes_path
    <base>/lang[/<path>]              lang_path()
    <base>/storage                    storage_path
    <base>/storage/temp               temp_path
    <base>/storage/app/uploads        uploads_path
    <base>/storage/app/media          media_path
    <storage>/framework/config.json   cached_config_path()
    <storage>/framework/routes.json   cached_routes_path()
    <storage>/framework/compiled.json cached_compile_path()
    <storage>/framework/services.json cached_services_path()
    <storage>/framework/packages.json cached_packages_path()
    <storage>/framework/classes.json  cached_classes_path()
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from storm.core.config.settings import StormSettings


def standardize(path: str | Path) -> str:
    """Normalise separators and ``..`` segments without touching the filesystem."""
    return os.path.normpath(os.fspath(path)).replace("\\", "/")


def join(base: str | Path, suffix: str) -> str:
    """Join ``suffix`` onto ``base``; a leading slash on ``suffix`` is ignored."""
    return standardize(Path(base) / suffix.lstrip("/"))


@dataclass
class ApplicationPaths:
    """Resolved directory layout of one application instance."""

    base: str
    storage: str | None = None
    plugins: str | None = None
    themes: str | None = None
    temp: str | None = None
    uploads: str | None = None
    media: str | None = None

    def __post_init__(self) -> None:
        self.base = standardize(self.base)
        for name in ("storage", "plugins", "themes", "temp", "uploads", "media"):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, self.resolve(value))

    def resolve(self, path: str | Path) -> str:
        """Absolute paths are kept; relative ones are taken relative to the base path."""
        path = os.fspath(path)
        return standardize(path) if os.path.isabs(path) else join(self.base, path)

    @classmethod
    def from_settings(cls, settings: StormSettings, base_path: str | Path | None = None) -> ApplicationPaths:
        base = Path(base_path if base_path is not None else settings.base_path).resolve()
        return cls(
            base=str(base),
            storage=settings.storage_path,
            plugins=settings.plugins_path,
            themes=settings.themes_path,
            temp=settings.temp_path,
            uploads=settings.uploads_path,
            media=settings.media_path,
        )

    # ── Named directories ────────────────────────────────────────

    @property
    def public_path(self) -> str:
        return self.base

    @property
    def storage_path(self) -> str:
        return self.storage or join(self.base, "/storage")

    @property
    def plugins_path(self) -> str:
        return self.plugins or join(self.base, "/plugins")

    @property
    def themes_path(self) -> str:
        return self.themes or join(self.base, "/themes")

    @property
    def temp_path(self) -> str:
        return self.temp or join(self.base, "/storage/temp")

    @property
    def uploads_path(self) -> str:
        return self.uploads or join(self.base, "/storage/app/uploads")

    @property
    def media_path(self) -> str:
        return self.media or join(self.base, "/storage/app/media")

    def lang_path(self, path: str = "") -> str:
        return join(self.base, "/lang" + (f"/{path}" if path else ""))

    # ── Cache files ──────────────────────────────────────────────

    def normalize_cache_path(self, key: str, default: str) -> str:
        """Resolve a cache file location and make sure its directory exists.

        ``key`` names an environment variable that may override ``default``;
        relative overrides are taken relative to the base path.
        """
        override = os.environ.get(key)
        path = self.resolve(override) if override else default
        Path(path).parent.mkdir(mode=0o755, parents=True, exist_ok=True)
        return standardize(path)

    def _framework_cache(self, key: str, filename: str) -> str:
        return self.normalize_cache_path(key, join(self.storage_path, f"/framework/{filename}"))

    def cached_config_path(self) -> str:
        return self._framework_cache("STORM_CONFIG_CACHE", "config.json")

    def cached_routes_path(self) -> str:
        return self._framework_cache("STORM_ROUTES_CACHE", "routes.json")

    def cached_compile_path(self) -> str:
        return self._framework_cache("STORM_COMPILED_CACHE", "compiled.json")

    def cached_services_path(self) -> str:
        return self._framework_cache("STORM_SERVICES_CACHE", "services.json")

    def cached_packages_path(self) -> str:
        return self._framework_cache("STORM_PACKAGES_CACHE", "packages.json")

    def cached_classes_path(self) -> str:
        return self._framework_cache("STORM_CLASSES_CACHE", "classes.json")

    def as_dict(self) -> dict[str, str]:
        """Named directories keyed by their container binding."""
        return {
            "path.base": self.base,
            "path.public": self.public_path,
            "path.storage": self.storage_path,
            "path.plugins": self.plugins_path,
            "path.themes": self.themes_path,
            "path.temp": self.temp_path,
            "path.uploads": self.uploads_path,
            "path.media": self.media_path,
            "path.lang": self.lang_path(),
        }
