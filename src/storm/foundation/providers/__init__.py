"""Service providers registered by every application before configuration is read."""

from storm.foundation.providers.database import DatabaseServiceProvider
from storm.foundation.providers.events import EventServiceProvider
from storm.foundation.providers.execution import ExecutionContextProvider
from storm.foundation.providers.log import LogServiceProvider

__all__ = [
    "DatabaseServiceProvider",
    "EventServiceProvider",
    "ExecutionContextProvider",
    "LogServiceProvider",
]
