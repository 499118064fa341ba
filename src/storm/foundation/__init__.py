"""
Application foundation: kernel, paths, service providers and provider caching.

Modules
-------
application   Application (container + bootstrap kernel)
paths         ApplicationPaths (named directories, cache-file locations)
provider      ServiceProvider base class, identifier resolution
repository    ProviderRepository + ProviderManifest (services cache)
manifest      PackageManifest (entry-point discovery, packages cache)
bootstrap     Bootstrap stages and the best-effort stage runner
"""

from storm.foundation.application import Application, partition_providers
from storm.foundation.bootstrap import (
    DEFAULT_BOOTSTRAPPERS,
    BootProviders,
    ConfigureLogging,
    LoadAttempt,
    LoadConfiguration,
    RegisterProviders,
    run_bootstrappers,
)
from storm.foundation.manifest import PackageManifest
from storm.foundation.paths import ApplicationPaths
from storm.foundation.provider import ServiceProvider, resolve_provider_class
from storm.foundation.repository import ProviderManifest, ProviderRepository

__all__ = [
    "Application",
    "ApplicationPaths",
    "BootProviders",
    "ConfigureLogging",
    "DEFAULT_BOOTSTRAPPERS",
    "LoadAttempt",
    "LoadConfiguration",
    "PackageManifest",
    "ProviderManifest",
    "ProviderRepository",
    "RegisterProviders",
    "ServiceProvider",
    "partition_providers",
    "resolve_provider_class",
    "run_bootstrappers",
]
