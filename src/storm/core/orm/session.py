"""SQLAlchemy engine factory and pre-configured session.

This module provides:

* ``resolve_sqlite_url``     -- Anchor a relative SQLite file at the app root.
* ``create_storm_engine``    -- Create a SA engine from a URL.
* ``StormSession``           -- Session with ``expire_on_commit=False`` and the
  sortable default-ordering hook installed.
* ``storm_session_factory``  -- ``sessionmaker`` producing ``StormSession``.

Tags:
    storm-core, orm, sqlalchemy, session, engine

Doc-Types:
    api-reference
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from storm.core.orm.sortable import apply_sortable_ordering


def resolve_sqlite_url(url: str, base_path: str | Path) -> str:
    """Anchor a relative SQLite database file at *base_path*.

    Other drivers, in-memory databases and absolute paths are returned as is.
    """
    if not url.startswith("sqlite"):
        return url
    parsed = make_url(url)
    database = parsed.database
    if not database or database == ":memory:" or database.startswith("file:") or os.path.isabs(database):
        return url
    return parsed.set(database=str(Path(base_path) / database)).render_as_string(hide_password=False)


def create_storm_engine(
    url: str = "sqlite:///storage/database.sqlite",
    *,
    echo: bool = False,
    pool_size: int | None = None,
    max_overflow: int | None = None,
    **kwargs: Any,
) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    For file-backed SQLite URLs the database directory is created if
    missing, and foreign keys are switched on for every connection.
    """
    if url.startswith("sqlite"):
        database = make_url(url).database
        if database and database != ":memory:" and not database.startswith("file:"):
            Path(database).parent.mkdir(parents=True, exist_ok=True)

        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = _sa_create_engine(url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    pool_kwargs: dict[str, Any] = {}
    if pool_size is not None:
        pool_kwargs["pool_size"] = pool_size
    if max_overflow is not None:
        pool_kwargs["max_overflow"] = max_overflow

    return _sa_create_engine(url, echo=echo, **pool_kwargs, **kwargs)


class StormSession(Session):
    """Pre-configured session with ``expire_on_commit=False``.

    Prevents lazy-load surprises after commit. Queries for
    :class:`~storm.core.orm.sortable.Sortable` classes get their default
    ordering here.
    """

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


event.listen(StormSession, "do_orm_execute", apply_sortable_ordering)


def storm_session_factory(engine: Engine) -> sessionmaker[StormSession]:
    """Return a ``sessionmaker`` bound to *engine* that produces ``StormSession`` instances."""
    return sessionmaker(bind=engine, class_=StormSession)
