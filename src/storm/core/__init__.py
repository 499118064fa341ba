"""
Storm core primitives.

Modules
-------
errors       Typed error hierarchy (StormError, ProviderError, ...)
result       Ok / Err result envelope
logging      structlog configuration
events       Synchronous event dispatcher
container    Lazy dependency-injection container
filesystem   Atomic JSON cache-file helpers
config       StormSettings + .env loader
orm          SQLAlchemy base, session and Sortable mixin
"""

from storm.core.container import Container
from storm.core.errors import (
    BindingResolutionError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    ProviderCacheError,
    ProviderError,
    ProviderNotFoundError,
    StormError,
    ValidationError,
)
from storm.core.events import Dispatcher
from storm.core.filesystem import Filesystem
from storm.core.logging import configure_logging, get_logger
from storm.core.result import Err, Ok, Result, first_error, try_result

__all__ = [
    "Container",
    "Dispatcher",
    "Filesystem",
    "configure_logging",
    "get_logger",
    "BindingResolutionError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "ProviderCacheError",
    "ProviderError",
    "ProviderNotFoundError",
    "StormError",
    "ValidationError",
    "Ok",
    "Err",
    "Result",
    "first_error",
    "try_result",
]
