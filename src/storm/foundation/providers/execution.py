from __future__ import annotations

from storm.foundation.provider import ServiceProvider


class ExecutionContextProvider(ServiceProvider):
    """Binds ``execution.context``: ``front-end``, ``back-end`` or ``console``."""

    def register(self) -> None:
        self.app.singleton(
            "execution.context",
            lambda app: app.settings.execution_context.value,
        )
