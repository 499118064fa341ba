"""
Service providers.

A service provider is the unit of registration: it wires one or more
services into the application container (``register``) and may run
start-up logic once every provider is registered (``boot``).

Providers are referenced by identifier strings so they can be listed in
configuration and cached on disk:

* ``package.module.ClassName`` (dotted)
* ``package.module:ClassName`` (entry-point style)

Deferred providers (``defer = True``) are not registered at start-up. The
provider cache records the services they ``provides()``; the provider is
registered the first time one of those services is resolved, or when one
of the events named by ``when()`` is dispatched.

Usage::

    class BlogServiceProvider(ServiceProvider):
        defer = True

        def register(self) -> None:
            self.app.singleton("blog.posts", lambda app: PostRepository(app["db"]))

        def provides(self) -> list[str]:
            return ["blog.posts"]
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, ClassVar

from storm.core.errors import ProviderError, ProviderNotFoundError

if TYPE_CHECKING:
    from storm.foundation.application import Application


class ServiceProvider:
    """Base class for all service providers."""

    defer: ClassVar[bool] = False

    def __init__(self, app: Application) -> None:
        self.app = app

    def register(self) -> None:
        """Register bindings in the container."""

    def boot(self) -> None:
        """Run after all providers have been registered."""

    def provides(self) -> list[str]:
        """Services offered by a deferred provider."""
        return []

    def when(self) -> list[str]:
        """Events that trigger registration of a deferred provider."""
        return []

    def is_deferred(self) -> bool:
        return self.defer

    @classmethod
    def identifier(cls) -> str:
        return f"{cls.__module__}.{cls.__qualname__}"


def resolve_provider_class(identifier: str) -> type[ServiceProvider]:
    """Import the provider class named by ``identifier``.

    Raises:
        ProviderNotFoundError: The module or attribute does not exist.
        ProviderError: The attribute is not a ServiceProvider subclass.
    """
    if ":" in identifier:
        module_name, _, attr_path = identifier.partition(":")
    else:
        module_name, _, attr_path = identifier.rpartition(".")
    if not module_name or not attr_path:
        raise ProviderNotFoundError(identifier)

    try:
        target: object = importlib.import_module(module_name)
        for part in attr_path.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as exc:
        raise ProviderNotFoundError(identifier, cause=exc) from exc

    if not isinstance(target, type) or not issubclass(target, ServiceProvider):
        raise ProviderError(f"{identifier} is not a ServiceProvider").with_context(provider=identifier)
    return target
