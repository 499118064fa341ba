"""
Bootstrap stages and the best-effort stage runner.

The application starts by running an ordered list of *bootstrappers*.
Every stage runs even when an earlier one failed: failures are captured
as :class:`~storm.core.result.Err` values, and the caller re-raises the
first of them once the whole sequence has been attempted. Callers must not
assume later stages were skipped after an earlier failure.

Each stage is announced with ``bootstrapping: <name>`` and
``bootstrapped: <name>`` events.

Default sequence (:data:`DEFAULT_BOOTSTRAPPERS`)::

    LoadConfiguration → ConfigureLogging → RegisterProviders → BootProviders
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from storm.core.config.settings import get_settings
from storm.core.container import abstract_key
from storm.core.errors import categorize_error
from storm.core.logging import configure_logging, get_logger
from storm.core.result import Err, Result, try_result

if TYPE_CHECKING:
    from storm.foundation.application import Application

logger = get_logger(__name__)


class LoadAttempt(str, Enum):
    """States of the configured-provider loader. ``RETRY`` is terminal."""

    FIRST = "first"
    RETRY = "retry"


class Bootstrapper(Protocol):
    def bootstrap(self, app: Application) -> None: ...


class LoadConfiguration:
    """Bind the settings as ``config`` if the application was built without them."""

    def bootstrap(self, app: Application) -> None:
        if not app.bound("config"):
            app.instance("config", get_settings(project_root=Path(app.base_path())))
        app.instance("env", app.settings.environment)


class ConfigureLogging:
    def bootstrap(self, app: Application) -> None:
        settings = app.settings
        configure_logging(
            level=settings.log_level,
            json_format=settings.json_logs,
            service=settings.app_name,
        )


class RegisterProviders:
    def bootstrap(self, app: Application) -> None:
        app.register_configured_providers()


class BootProviders:
    def bootstrap(self, app: Application) -> None:
        app.boot()


DEFAULT_BOOTSTRAPPERS: tuple[type, ...] = (
    LoadConfiguration,
    ConfigureLogging,
    RegisterProviders,
    BootProviders,
)


def bootstrapper_name(bootstrapper: Any) -> str:
    if isinstance(bootstrapper, (str, type)):
        return abstract_key(bootstrapper)
    return abstract_key(type(bootstrapper))


def run_bootstrappers(app: Application, bootstrappers: Sequence[Any]) -> list[Result[None]]:
    """Run every bootstrapper in order and return one result per stage.

    Bootstrappers may be classes or container keys (resolved through
    ``app.make``) or ready instances.
    """
    events = app.make("events")
    results: list[Result[None]] = []

    for bootstrapper in bootstrappers:
        name = bootstrapper_name(bootstrapper)
        events.dispatch(f"bootstrapping: {name}", [app])

        def _run(target: Any = bootstrapper) -> None:
            instance = app.make(target) if isinstance(target, (str, type)) else target
            instance.bootstrap(app)

        result = try_result(_run)
        if isinstance(result, Err):
            logger.error(
                "bootstrapper_failed",
                stage=name,
                error_type=type(result.error).__name__,
                error=str(result.error),
                category=categorize_error(result.error).value,
            )
        results.append(result)

        events.dispatch(f"bootstrapped: {name}", [app])

    return results
