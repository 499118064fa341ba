from __future__ import annotations

from storm.core.logging import get_logger
from storm.foundation.provider import ServiceProvider


class LogServiceProvider(ServiceProvider):
    """Binds a structlog logger named after the application as ``log``."""

    def register(self) -> None:
        self.app.singleton("log", lambda app: get_logger(app.settings.app_name))
