"""
Synchronous event dispatcher for kernel lifecycle events.

The kernel announces its own progress through named events so that
providers and application code can hook into it without importing each
other:

* ``bootstrapping: <stage>`` / ``bootstrapped: <stage>`` around every
  bootstrap stage, where ``<stage>`` is the dotted class path
  (``storm.foundation.bootstrap.RegisterProviders``) or container key;
* ``locale.changed`` when the application locale is switched;
* any event named by a deferred provider's ``when()``.

Usage::

    from storm.core.events import Dispatcher

    events = Dispatcher()
    events.listen("bootstrapped: *", lambda app: print("stage done"))
    events.dispatch("bootstrapped: storm.foundation.bootstrap.RegisterProviders", [app])

Tags:
    storm-core, events, dispatcher, lifecycle
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

__all__ = ["Dispatcher", "EventListener", "matches"]

EventListener = Callable[..., Any]


def matches(event: str, pattern: str) -> bool:
    """Check if an event name matches a listener pattern.

    Examples:
        - ``*`` matches everything
        - ``bootstrapped: *`` matches ``bootstrapped: storm.foundation.bootstrap.BootProviders``
        - ``locale.changed`` matches exactly ``locale.changed``
    """
    if pattern == "*":
        return True
    if pattern.endswith("*"):
        return event.startswith(pattern[:-1])
    return event == pattern


@dataclass
class _Listener:
    pattern: str
    handler: EventListener


class Dispatcher:
    """In-process event dispatcher.

    Listeners are called synchronously, in registration order, with the
    payload unpacked as positional arguments. A listener returning
    ``False`` stops propagation to the remaining listeners.
    """

    def __init__(self) -> None:
        self._listeners: list[_Listener] = []

    def listen(self, events: str | Sequence[str], handler: EventListener) -> None:
        """Register ``handler`` for one or more event names / patterns."""
        names = [events] if isinstance(events, str) else list(events)
        for name in names:
            self._listeners.append(_Listener(name, handler))

    def has_listeners(self, event: str) -> bool:
        return any(matches(event, listener.pattern) for listener in self._listeners)

    def dispatch(self, event: str, payload: Sequence[Any] | None = None) -> list[Any]:
        """Call every listener matching ``event`` and collect their responses."""
        args = list(payload or [])
        responses: list[Any] = []
        for listener in list(self._listeners):
            if not matches(event, listener.pattern):
                continue
            response = listener.handler(*args)
            if response is False:
                break
            responses.append(response)
        return responses

    def forget(self, event: str) -> None:
        """Remove all listeners registered under exactly ``event``."""
        self._listeners = [listener for listener in self._listeners if listener.pattern != event]
