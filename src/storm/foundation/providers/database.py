"""
Database service provider.

Deferred: the engine and session factory are only registered the first
time ``db`` or ``db.session`` is resolved, so processes that never touch
the database never import a driver or open a connection pool. A relative
SQLite file in ``database_url`` is placed under the application base path.
"""

from __future__ import annotations

from storm.core.orm.session import create_storm_engine, resolve_sqlite_url, storm_session_factory
from storm.foundation.provider import ServiceProvider


class DatabaseServiceProvider(ServiceProvider):
    defer = True

    def register(self) -> None:
        self.app.singleton(
            "db",
            lambda app: create_storm_engine(
                resolve_sqlite_url(app.settings.database_url, app.base_path()),
                echo=app.settings.database_echo,
            ),
        )
        self.app.singleton("db.session", lambda app: storm_session_factory(app["db"]))

    def provides(self) -> list[str]:
        return ["db", "db.session"]
