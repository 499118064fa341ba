"""
Provider repository: compiles, caches and loads service providers.

Manifesto:
    Deciding which providers are eager and which are deferred means
    importing and instantiating every one of them. That work only has to
    happen when the provider list changes, so its outcome is compiled into
    a :class:`ProviderManifest` and cached on disk. Every later process
    start reads the manifest and only imports the eager providers.

Architecture:
    ::

        load(providers)
          │
          ├─ load_manifest()  ── services.json ──► ProviderManifest | None
          │        (malformed file → ProviderCacheError; skipped if use_cache=False)
          │
          ├─ should_recompile? (missing, or compiled from another list)
          │        └─ compile_manifest() → write_manifest() (atomic)
          │
          ├─ eager:    app.register(provider)
          ├─ deferred: app.add_deferred_services({service: provider})
          └─ when:     register_load_events()  (event → app.register)

Tags:
    storm-foundation, providers, cache, manifest, deferred-loading
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from storm.core.errors import ProviderCacheError
from storm.core.filesystem import Filesystem
from storm.core.logging import get_logger
from storm.foundation.provider import resolve_provider_class

if TYPE_CHECKING:
    from storm.foundation.application import Application

logger = get_logger(__name__)


@dataclass
class ProviderManifest:
    """Compiled registration metadata for an ordered provider list."""

    providers: list[str]
    eager: list[str] = field(default_factory=list)
    deferred: dict[str, str] = field(default_factory=dict)
    when: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "providers": list(self.providers),
            "eager": list(self.eager),
            "deferred": dict(self.deferred),
            "when": {provider: list(events) for provider, events in self.when.items()},
        }

    @classmethod
    def from_dict(cls, data: Any, path: str) -> ProviderManifest:
        """Validate a decoded cache document.

        Raises:
            ProviderCacheError: The document does not have the manifest shape.
        """
        if not isinstance(data, dict):
            raise ProviderCacheError(path, "expected a JSON object")
        try:
            providers = data["providers"]
            eager = data["eager"]
            deferred = data["deferred"]
            when = data.get("when", {})
        except KeyError as exc:
            raise ProviderCacheError(path, f"missing key {exc.args[0]!r}", cause=exc) from exc

        if not _is_str_list(providers) or not _is_str_list(eager):
            raise ProviderCacheError(path, "'providers' and 'eager' must be lists of strings")
        if not isinstance(deferred, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in deferred.items()
        ):
            raise ProviderCacheError(path, "'deferred' must map service names to providers")
        if not isinstance(when, dict) or not all(
            isinstance(k, str) and _is_str_list(v) for k, v in when.items()
        ):
            raise ProviderCacheError(path, "'when' must map providers to event lists")

        return cls(providers=providers, eager=eager, deferred=deferred, when=when)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


class ProviderRepository:
    """Loads providers into ``app`` through the manifest cached at ``manifest_path``."""

    def __init__(self, app: Application, files: Filesystem, manifest_path: str) -> None:
        self.app = app
        self.files = files
        self.manifest_path = manifest_path

    def load(self, providers: list[str], use_cache: bool = True) -> ProviderManifest:
        """Register the application's service providers.

        With ``use_cache=False`` the services cache is never read; the
        manifest is compiled from ``providers`` and written back.
        """
        manifest = self.load_manifest() if use_cache else None

        if manifest is None or self.should_recompile(manifest, providers):
            manifest = self.compile_manifest(providers)

        for provider in manifest.eager:
            self.app.register(provider)

        self.app.add_deferred_services(manifest.deferred)

        for provider, events in manifest.when.items():
            self.register_load_events(provider, events)

        logger.debug(
            "providers_loaded",
            eager=len(manifest.eager),
            deferred=len(manifest.deferred),
            manifest=self.manifest_path,
        )
        return manifest

    def load_manifest(self) -> ProviderManifest | None:
        """Read the cached manifest, or None if there is no cache file."""
        if not self.files.is_file(self.manifest_path):
            return None
        return ProviderManifest.from_dict(self.files.get_json(self.manifest_path), self.manifest_path)

    def should_recompile(self, manifest: ProviderManifest | None, providers: list[str]) -> bool:
        return manifest is None or manifest.providers != providers

    def register_load_events(self, provider: str, events: list[str]) -> None:
        """Register ``provider`` when any of ``events`` is dispatched."""
        if not events:
            return

        def _load(*_args: Any) -> None:
            self.app.register(provider)

        self.app.make("events").listen(events, _load)

    def compile_manifest(self, providers: list[str]) -> ProviderManifest:
        """Instantiate every provider to classify it, then write the cache."""
        manifest = ProviderManifest(providers=list(providers))

        for identifier in providers:
            instance = resolve_provider_class(identifier)(self.app)

            if instance.is_deferred():
                for service in instance.provides():
                    manifest.deferred[service] = identifier
                manifest.when[identifier] = instance.when()
            else:
                manifest.eager.append(identifier)

        self.write_manifest(manifest)
        logger.info("provider_manifest_compiled", providers=len(providers), path=self.manifest_path)
        return manifest

    def write_manifest(self, manifest: ProviderManifest) -> ProviderManifest:
        self.files.put_json(self.manifest_path, manifest.to_dict())
        return manifest
