from __future__ import annotations

from storm.core.events import Dispatcher
from storm.foundation.provider import ServiceProvider


class EventServiceProvider(ServiceProvider):
    """Binds the shared event dispatcher as ``events``."""

    def register(self) -> None:
        self.app.singleton("events", lambda app: Dispatcher())
