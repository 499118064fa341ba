"""
Structured error types for the Storm application kernel.

Every failure raised by the kernel carries a category, a retry hint, an
optional cause and structured context, so the bootstrap sequence can log it
as a structured event and decide whether recovery is possible.

Manifesto:
    - **Typed Error Hierarchy:** Different error types for different concerns
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry provider, stage and path metadata
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                        StormError                                │
        │  (category, retryable, context, cause)                           │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ConfigError       ProviderError        ContainerError           │
        │  (CONFIG)          (PROVIDER)           (CONTAINER)              │
        │       │                 │                     │                  │
        │  InvalidConfig     ProviderNotFound     BindingResolution        │
        │                    ProviderCache                                 │
        │                                                                  │
        │  StorageError         DatabaseError          ValidationError     │
        │  (STORAGE)            (DATABASE)             (VALIDATION)        │
        └─────────────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Use generic Exception - loses all metadata
    ✅ DO: Use appropriate StormError subclass

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, error-context, storm-core

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and log routing."""

    CONFIG = "CONFIG"
    PROVIDER = "PROVIDER"
    CONTAINER = "CONTAINER"
    STORAGE = "STORAGE"
    DATABASE = "DATABASE"
    VALIDATION = "VALIDATION"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields cover the metadata the kernel attaches most often; anything
    else goes into ``metadata``. ``to_dict()`` only emits fields that are set.

    Examples:
        >>> ctx = ErrorContext(provider="acme.blog.BlogServiceProvider")
        >>> ctx.to_dict()
        {'provider': 'acme.blog.BlogServiceProvider'}
    """

    provider: str | None = None
    service: str | None = None
    stage: str | None = None
    path: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key in ("provider", "service", "stage", "path"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class StormError(Exception):
    """
    Base class for all kernel errors.

    Subclasses set ``default_category`` and ``default_retryable``; callers
    may override either per instance.

    Examples:
        >>> error = StormError("Something failed", category=ErrorCategory.STORAGE)
        >>> error.category
        <ErrorCategory.STORAGE: 'STORAGE'>
        >>> error.retryable
        False
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> StormError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ProviderError("Failed").with_context(provider="acme.Provider")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(StormError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# PROVIDER ERRORS
# =============================================================================


class ProviderError(StormError):
    """
    A service provider could not be loaded or registered.

    Provider errors raised on the first load attempt are recoverable by
    clearing the provider caches and retrying once, hence retryable.
    """

    default_category = ErrorCategory.PROVIDER
    default_retryable = True


class ProviderNotFoundError(ProviderError):
    """Provider identifier does not resolve to an importable class."""

    def __init__(self, identifier: str, *, cause: Exception | None = None):
        self.identifier = identifier
        super().__init__(
            f"Service provider not found: {identifier}",
            context=ErrorContext(provider=identifier),
            cause=cause,
        )


class ProviderCacheError(ProviderError):
    """A provider or package cache file exists but cannot be trusted."""

    def __init__(self, path: str, message: str, *, cause: Exception | None = None):
        self.path = path
        super().__init__(
            f"Invalid cache file {path}: {message}",
            context=ErrorContext(path=path),
            cause=cause,
        )


# =============================================================================
# CONTAINER ERRORS
# =============================================================================


class ContainerError(StormError):
    """Dependency container misuse."""

    default_category = ErrorCategory.CONTAINER


class BindingResolutionError(ContainerError):
    """Requested service has no binding and cannot be built."""

    def __init__(self, abstract: str, message: str | None = None, *, cause: Exception | None = None):
        self.abstract = abstract
        super().__init__(
            message or f"Target [{abstract}] is not bound and cannot be built",
            context=ErrorContext(service=abstract),
            cause=cause,
        )


# =============================================================================
# STORAGE / DATABASE / VALIDATION
# =============================================================================


class StorageError(StormError):
    """Filesystem error (cache files, directories)."""

    default_category = ErrorCategory.STORAGE


class DatabaseError(StormError):
    """Database query or transaction error."""

    default_category = ErrorCategory.DATABASE


class ValidationError(StormError):
    """
    Invalid input to a kernel operation.

    Never retryable - input must be fixed.
    """

    default_category = ErrorCategory.VALIDATION


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, StormError):
        return error.retryable
    return False


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, StormError):
        return error.category
    if isinstance(error, (ImportError, AttributeError)):
        return ErrorCategory.PROVIDER
    if isinstance(error, OSError):
        return ErrorCategory.STORAGE
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "StormError",
    "ConfigError",
    "InvalidConfigError",
    "ProviderError",
    "ProviderNotFoundError",
    "ProviderCacheError",
    "ContainerError",
    "BindingResolutionError",
    "StorageError",
    "DatabaseError",
    "ValidationError",
    "is_retryable",
    "categorize_error",
]
