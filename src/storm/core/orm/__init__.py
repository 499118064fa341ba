"""SQLAlchemy 2.0 ORM layer for Storm.

Modules
-------
base        StormBase (declarative base) + TimestampMixin
session     Engine factory, StormSession, storm_session_factory
sortable    Sortable mixin + default rank ordering

Tags:
    storm-core, orm, sqlalchemy, declarative, sortable
"""

from __future__ import annotations

from storm.core.orm.base import StormBase, TimestampMixin
from storm.core.orm.session import (
    StormSession,
    create_storm_engine,
    storm_session_factory,
)
from storm.core.orm.sortable import Sortable, apply_default_ordering

__all__ = [
    "StormBase",
    "TimestampMixin",
    "Sortable",
    "apply_default_ordering",
    "create_storm_engine",
    "StormSession",
    "storm_session_factory",
]
