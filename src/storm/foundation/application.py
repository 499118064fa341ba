"""
The Storm application kernel.

:class:`Application` is the container every request or console process is
built around. It owns:

* the resolved directory layout (:class:`~storm.foundation.paths.ApplicationPaths`)
  and the cache-file locations derived from it;
* service-provider registration, including deferred providers;
* the bootstrap sequence, which runs every stage and re-raises the first
  failure at the end;
* loading of the configured providers through the on-disk provider cache,
  with one clear-cache-and-retry recovery.

Usage::

    from storm.foundation import Application

    app = Application("/var/www/site")
    app.bootstrap()
    engine = app["db"]          # registers the deferred database provider

Provider loading::

    register_configured_providers()
        attempt = FIRST
        ┌──────────────────────────────────────────────────┐
        │ core providers → discovered packages → app ones  │
        │ ProviderRepository.load(...)                     │
        └──────────────────────────────────────────────────┘
              │ ok → done
              │ error, attempt == FIRST → clear_package_cache(); attempt = RETRY
              │ error, attempt == RETRY → raise (same exception)
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from storm import __version__
from storm.core.config.settings import ExecutionContext, StormSettings, get_settings
from storm.core.container import Abstract, Container
from storm.core.errors import DatabaseError, StorageError, categorize_error, is_retryable
from storm.core.events import Dispatcher
from storm.core.filesystem import Filesystem
from storm.core.logging import get_logger
from storm.core.result import first_error
from storm.foundation.bootstrap import DEFAULT_BOOTSTRAPPERS, LoadAttempt, run_bootstrappers
from storm.foundation.manifest import PackageManifest
from storm.foundation.paths import ApplicationPaths
from storm.foundation.provider import ServiceProvider, resolve_provider_class
from storm.foundation.providers import (
    DatabaseServiceProvider,
    EventServiceProvider,
    ExecutionContextProvider,
    LogServiceProvider,
)
from storm.foundation.repository import ProviderManifest, ProviderRepository

logger = get_logger(__name__)

BASE_SERVICE_PROVIDERS: tuple[type[ServiceProvider], ...] = (
    EventServiceProvider,
    LogServiceProvider,
    ExecutionContextProvider,
    DatabaseServiceProvider,
)


def partition_providers(providers: Sequence[str], core_prefix: str) -> tuple[list[str], list[str]]:
    """Split provider identifiers into (core, application), each in original order."""
    core: list[str] = []
    application: list[str] = []
    for provider in providers:
        (core if provider.startswith(core_prefix) else application).append(provider)
    return core, application


class Application(Container):
    """Application container and bootstrap kernel."""

    def __init__(
        self,
        base_path: str | Path | None = None,
        settings: StormSettings | None = None,
    ) -> None:
        super().__init__()
        if settings is None:
            settings = get_settings(project_root=Path(base_path) if base_path is not None else None)
        self.paths = ApplicationPaths.from_settings(settings, base_path)

        self.has_been_bootstrapped = False
        self.booted = False
        self.service_providers: list[ServiceProvider] = []
        self.loaded_providers: dict[str, bool] = {}
        self.deferred_services: dict[str, str] = {}

        self.instance("config", settings)
        self.register_base_bindings()
        self.register_base_service_providers()
        self.register_core_container_aliases()

    def version(self) -> str:
        return f"{__version__} - Storm CMS"

    @property
    def settings(self) -> StormSettings:
        return self.make("config")

    # ── Base registration ────────────────────────────────────────

    def register_base_bindings(self) -> None:
        self.instance("app", self)
        self.instance("files", Filesystem())
        self.singleton(
            "package.manifest",
            lambda app: PackageManifest(
                app.make("files"),
                app.cached_packages_path(),
                group=app.settings.provider_entry_point_group,
                dont_discover=app.settings.dont_discover,
            ),
        )
        self.bind_paths_in_container()

    def register_base_service_providers(self) -> None:
        for provider_class in BASE_SERVICE_PROVIDERS:
            provider = provider_class(self)
            if provider.is_deferred():
                self.add_deferred_services({service: provider.identifier() for service in provider.provides()})
            else:
                self.register(provider)

    def register_core_container_aliases(self) -> None:
        aliases: dict[str, list[Abstract]] = {
            "app": [Application, Container],
            "config": [StormSettings],
            "events": [Dispatcher],
            "log": ["logger"],
            "files": [Filesystem],
            "db": [Engine],
            "db.session": [sessionmaker],
            "package.manifest": [PackageManifest],
        }
        for key, targets in aliases.items():
            for alias in targets:
                self.alias(key, alias)

    # ── Paths ────────────────────────────────────────────────────

    def bind_paths_in_container(self) -> None:
        for key, value in self.paths.as_dict().items():
            self.instance(key, value)

    def base_path(self) -> str:
        return self.paths.base

    def public_path(self) -> str:
        return self.paths.public_path

    def storage_path(self) -> str:
        return self.paths.storage_path

    def plugins_path(self) -> str:
        return self.paths.plugins_path

    def themes_path(self) -> str:
        return self.paths.themes_path

    def temp_path(self) -> str:
        return self.paths.temp_path

    def uploads_path(self) -> str:
        return self.paths.uploads_path

    def media_path(self) -> str:
        return self.paths.media_path

    def lang_path(self, path: str = "") -> str:
        return self.paths.lang_path(path)

    def _set_path(self, name: str, path: str | Path) -> Application:
        value = self.paths.resolve(path)
        setattr(self.paths, name, value)
        self.instance(f"path.{name}", value)
        return self

    def set_storage_path(self, path: str | Path) -> Application:
        return self._set_path("storage", path)

    def set_plugins_path(self, path: str | Path) -> Application:
        return self._set_path("plugins", path)

    def set_themes_path(self, path: str | Path) -> Application:
        return self._set_path("themes", path)

    def set_temp_path(self, path: str | Path) -> Application:
        return self._set_path("temp", path)

    def set_uploads_path(self, path: str | Path) -> Application:
        return self._set_path("uploads", path)

    def set_media_path(self, path: str | Path) -> Application:
        return self._set_path("media", path)

    def cached_config_path(self) -> str:
        return self.paths.cached_config_path()

    def cached_routes_path(self) -> str:
        return self.paths.cached_routes_path()

    def cached_compile_path(self) -> str:
        return self.paths.cached_compile_path()

    def cached_services_path(self) -> str:
        return self.paths.cached_services_path()

    def cached_packages_path(self) -> str:
        return self.paths.cached_packages_path()

    def cached_classes_path(self) -> str:
        return self.paths.cached_classes_path()

    # ── Resolution ───────────────────────────────────────────────

    def make(self, abstract: Abstract, **parameters: Any) -> Any:
        """Resolve ``abstract``, registering its deferred provider first if needed."""
        key = self.get_alias(abstract)
        if key in self.deferred_services:
            self.load_deferred_provider(key)
        return super().make(abstract, **parameters)

    # ── Service providers ────────────────────────────────────────

    def register(self, provider: ServiceProvider | type[ServiceProvider] | str, force: bool = False) -> ServiceProvider:
        """Register a provider with the application.

        Registering an already registered provider returns the existing
        instance unless ``force`` is set. Providers registered after
        :meth:`boot` are booted immediately.
        """
        registered = self.get_provider(provider)
        if registered is not None and not force:
            return registered

        if isinstance(provider, str):
            provider = resolve_provider_class(provider)
        if isinstance(provider, type):
            provider = provider(self)

        provider.register()
        self.service_providers.append(provider)
        self.loaded_providers[provider.identifier()] = True
        logger.debug("provider_registered", provider=provider.identifier())

        if self.booted:
            provider.boot()

        return provider

    def get_provider(self, provider: ServiceProvider | type[ServiceProvider] | str) -> ServiceProvider | None:
        identifier = _provider_identifier(provider)
        for registered in self.service_providers:
            if registered.identifier() == identifier:
                return registered
        return None

    def provider_is_loaded(self, provider: str) -> bool:
        return _provider_identifier(provider) in self.loaded_providers

    def add_deferred_services(self, services: dict[str, str]) -> None:
        self.deferred_services.update(services)

    def is_deferred_service(self, service: str) -> bool:
        return service in self.deferred_services

    def load_deferred_provider(self, service: str) -> None:
        """Register the provider that offers ``service``, if it is deferred."""
        provider = self.deferred_services.get(service)
        if provider is None:
            return
        for name in [s for s, p in self.deferred_services.items() if p == provider]:
            del self.deferred_services[name]
        if not self.provider_is_loaded(provider):
            self.register(provider)

    def load_deferred_providers(self) -> None:
        """Register every deferred provider (used when caching or debugging)."""
        for service in list(self.deferred_services):
            self.load_deferred_provider(service)

    def boot(self) -> None:
        if self.booted:
            return
        for provider in list(self.service_providers):
            provider.boot()
        self.booted = True

    def is_booted(self) -> bool:
        return self.booted

    # ── Bootstrap ────────────────────────────────────────────────

    def bootstrap_with(self, bootstrappers: Sequence[Any]) -> None:
        """Run every bootstrapper, then re-raise the first failure (if any)."""
        self.has_been_bootstrapped = True
        error = first_error(run_bootstrappers(self, bootstrappers))
        if error is not None:
            raise error

    def bootstrap(self) -> None:
        self.bootstrap_with(DEFAULT_BOOTSTRAPPERS)

    def register_configured_providers(self, is_retry: bool = False) -> ProviderManifest:
        """Load the configured providers through the provider cache.

        A failure on the first attempt clears the package caches and retries
        once; a failure on the retry is raised unchanged. The retry never
        reads the services or packages cache, even if clearing them failed.
        """
        attempt = LoadAttempt.RETRY if is_retry else LoadAttempt.FIRST
        while True:
            try:
                return self._load_configured_providers(use_cache=attempt is LoadAttempt.FIRST)
            except Exception as exc:
                if attempt is LoadAttempt.RETRY:
                    logger.error("provider_loading_failed", **_describe(exc))
                    raise
                logger.warning("provider_cache_invalid", **_describe(exc))
                try:
                    self.clear_package_cache()
                except StorageError as clear_error:
                    logger.error("provider_cache_clear_failed", **clear_error.to_dict())
                attempt = LoadAttempt.RETRY

    def configured_providers(self, use_cache: bool = True) -> list[str]:
        """Core providers, then discovered package providers, then application providers."""
        settings = self.settings
        core, application = partition_providers(settings.providers, settings.core_provider_prefix)
        discovered: list[str] = []
        if settings.load_discovered_packages:
            discovered = self.make("package.manifest").providers(use_cache)
        return [*core, *discovered, *application]

    def _load_configured_providers(self, use_cache: bool = True) -> ProviderManifest:
        repository = ProviderRepository(self, self.make("files"), self.cached_services_path())
        return repository.load(self.configured_providers(use_cache), use_cache=use_cache)

    def clear_package_cache(self) -> None:
        """Delete the packages, services and classes caches and reset discovery.

        Raises:
            StorageError: One of the cache files still exists afterwards.
        """
        paths = [
            self.cached_packages_path(),
            self.cached_services_path(),
            self.cached_classes_path(),
        ]
        files = self.make("files")
        files.delete(paths)
        self.make("package.manifest").reset()

        remaining = [path for path in paths if files.exists(path)]
        if remaining:
            raise StorageError(f"Unable to delete cache files: {', '.join(remaining)}").with_context(
                path=remaining[0], remaining=remaining
            )
        logger.info("provider_cache_cleared", paths=paths)

    # ── Environment ──────────────────────────────────────────────

    def running_in_backend(self) -> bool:
        return self.make("execution.context") == ExecutionContext.BACK_END.value

    def has_database(self) -> bool:
        """True if a connection to the ``db`` engine can be opened."""
        try:
            with self.make("db").connect():
                pass
        except SQLAlchemyError:
            return False
        return True

    def has_database_table(self, table: str) -> bool:
        """True if the database is reachable and ``table`` exists.

        Raises:
            DatabaseError: The schema could not be inspected.
        """
        if not self.has_database():
            return False
        try:
            return inspect(self.make("db")).has_table(table)
        except SQLAlchemyError as exc:
            raise DatabaseError(f"Unable to inspect table {table!r}", cause=exc).with_context(
                table=table
            ) from exc

    def get_locale(self) -> str:
        return self.settings.locale

    def set_locale(self, locale: str) -> None:
        self.settings.locale = locale
        self.make("events").dispatch("locale.changed", [locale])

    def __repr__(self) -> str:
        return f"<Application base={self.paths.base!r}>"


def _describe(error: Exception) -> dict[str, Any]:
    return {
        "error_type": type(error).__name__,
        "error": str(error),
        "category": categorize_error(error).value,
        "retryable": is_retryable(error),
    }


def _provider_identifier(provider: ServiceProvider | type[ServiceProvider] | str) -> str:
    if isinstance(provider, str):
        return provider.replace(":", ".")
    if isinstance(provider, type):
        return provider.identifier()
    return provider.identifier()
