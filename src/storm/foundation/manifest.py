"""
Package discovery manifest.

Installed distributions contribute service providers by declaring entry
points in the ``storm.providers`` group::

    [project.entry-points."storm.providers"]
    blog = "acme_blog.providers:BlogServiceProvider"

:class:`PackageManifest` collects them into ``{package: {"providers": [...]}}``,
caches that document at the packages cache path and keeps the decoded
result in memory (``manifest``). ``reset()`` drops the in-memory copy; the
next access re-reads the cache file or, if it was deleted, rebuilds from
the installed entry points. Passing ``use_cache=False`` always rebuilds.
"""

from __future__ import annotations

from collections.abc import Iterable
from importlib.metadata import EntryPoint, entry_points
from typing import Any

from storm.core.errors import ProviderCacheError
from storm.core.filesystem import Filesystem
from storm.core.logging import get_logger

logger = get_logger(__name__)


class PackageManifest:
    """Providers contributed by auto-discovered installed packages."""

    def __init__(
        self,
        files: Filesystem,
        manifest_path: str,
        *,
        group: str = "storm.providers",
        dont_discover: Iterable[str] = (),
    ) -> None:
        self.files = files
        self.manifest_path = manifest_path
        self.group = group
        self.dont_discover = list(dont_discover)
        self.manifest: dict[str, dict[str, list[str]]] | None = None

    def providers(self, use_cache: bool = True) -> list[str]:
        """All discovered provider identifiers, in package order."""
        return self.config("providers", use_cache)

    def config(self, key: str, use_cache: bool = True) -> list[str]:
        values: list[str] = []
        for configuration in self.get_manifest(use_cache).values():
            values.extend(configuration.get(key, []))
        return values

    def get_manifest(self, use_cache: bool = True) -> dict[str, dict[str, list[str]]]:
        """The decoded manifest.

        ``use_cache=False`` ignores both the in-memory copy and the packages
        cache file and rebuilds from the installed entry points.
        """
        if not use_cache:
            self.manifest = self.build()
            return self.manifest

        if self.manifest is not None:
            return self.manifest

        if not self.files.is_file(self.manifest_path):
            self.build()

        if self.files.is_file(self.manifest_path):
            self.manifest = self._validate(self.files.get_json(self.manifest_path))
        else:
            self.manifest = {}
        return self.manifest

    def build(self) -> dict[str, dict[str, list[str]]]:
        """Scan installed entry points and write the packages cache."""
        packages: dict[str, dict[str, list[str]]] = {}
        ignore_all = "*" in self.dont_discover

        for entry_point in self._entry_points():
            package = self._package_name(entry_point)
            if ignore_all or package in self.dont_discover:
                continue
            packages.setdefault(package, {"providers": []})["providers"].append(entry_point.value)

        self.files.put_json(self.manifest_path, packages)
        logger.info("packages_discovered", packages=sorted(packages), path=self.manifest_path)
        return packages

    def reset(self) -> None:
        """Forget the in-memory manifest."""
        self.manifest = None

    def _entry_points(self) -> list[EntryPoint]:
        return list(entry_points(group=self.group))

    @staticmethod
    def _package_name(entry_point: EntryPoint) -> str:
        dist = getattr(entry_point, "dist", None)
        if dist is not None:
            return dist.name
        return entry_point.module.split(".")[0]

    def _validate(self, data: Any) -> dict[str, dict[str, list[str]]]:
        if not isinstance(data, dict):
            raise ProviderCacheError(self.manifest_path, "expected a JSON object")
        for package, configuration in data.items():
            if not isinstance(configuration, dict):
                raise ProviderCacheError(self.manifest_path, f"entry for {package!r} must be an object")
            providers = configuration.get("providers", [])
            if not isinstance(providers, list) or not all(isinstance(p, str) for p in providers):
                raise ProviderCacheError(self.manifest_path, f"providers of {package!r} must be a list of strings")
        return data
