"""Manual ordering for mapped classes.

Mixing :class:`Sortable` into a mapped class gives it a rank column
(``sort_order`` unless the class overrides ``sort_order_column``) that is
used as the default ordering of every query for that class:

* a ``SELECT`` for the class with **no** ``ORDER BY`` gets
  ``ORDER BY <rank> ASC``;
* a ``SELECT`` that already has an ``ORDER BY`` is left exactly as the
  caller built it. The rank is not appended as a tiebreaker.

The default is applied late, when the statement runs through a
:class:`~storm.core.orm.session.StormSession` (``do_orm_execute`` hook) or
is passed to :func:`apply_default_ordering`, so that a caller's own
``order_by()`` is never stacked behind the default.

Rows inserted with a NULL rank get their primary key as rank, which keeps
new records at the end of the list.

Usage::

    class Category(Sortable, StormBase):
        __tablename__ = "categories"

        id: Mapped[int] = mapped_column(primary_key=True)
        name: Mapped[str]
        sort_order: Mapped[int | None]

    session.scalars(select(Category)).all()            # ORDER BY sort_order ASC
    session.scalars(select(Category).order_by(Category.name)).all()  # name only
    Category.set_sortable_order(session, [3, 1, 2], [1, 2, 3])
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, ClassVar

from sqlalchemy import Select, event, select, update
from sqlalchemy.dialects import sqlite
from sqlalchemy.engine import Connection, Dialect
from sqlalchemy.orm import InstrumentedAttribute, Mapper, ORMExecuteState, Session
from sqlalchemy.orm.attributes import set_committed_value

from storm.core.errors import InvalidConfigError, ValidationError

__all__ = [
    "Sortable",
    "apply_default_ordering",
    "apply_sortable_ordering",
]


class Sortable:
    """Mixin for mapped classes that carry a manual rank column."""

    sort_order_column: ClassVar[str] = "sort_order"

    @classmethod
    def get_sort_order_column(cls) -> InstrumentedAttribute[Any]:
        column = getattr(cls, cls.sort_order_column, None)
        if not isinstance(column, InstrumentedAttribute):
            raise InvalidConfigError(
                "sort_order_column",
                cls.sort_order_column,
                f"{cls.__name__} has no mapped rank column {cls.sort_order_column!r}",
            )
        return column

    @classmethod
    def new_query(cls) -> Select[Any]:
        """A fresh, un-ordered ``SELECT`` for this class."""
        return select(cls)

    @classmethod
    def to_sql(cls, statement: Select[Any] | None = None, dialect: Dialect | None = None) -> str:
        """Render ``statement`` (default: :meth:`new_query`) as it will be executed."""
        stmt = apply_default_ordering(cls.new_query() if statement is None else statement, cls)
        return str(stmt.compile(dialect=dialect or sqlite.dialect()))

    @classmethod
    def set_sortable_order(
        cls,
        session: Session,
        ids: int | Iterable[int],
        orders: int | Iterable[int] | None = None,
    ) -> None:
        """Assign ranks by primary key. ``orders`` defaults to the ids themselves."""
        id_list = [ids] if isinstance(ids, int) else list(ids)
        if orders is None:
            order_list = list(id_list)
        else:
            order_list = [orders] if isinstance(orders, int) else list(orders)

        if len(id_list) != len(order_list):
            raise ValidationError(
                "Invalid set_sortable_order call - count of ids does not match count of orders"
            ).with_context(ids=len(id_list), orders=len(order_list))

        primary_key = cls.__mapper__.primary_key[0]  # type: ignore[attr-defined]
        rank = cls.get_sort_order_column()
        for item_id, order in zip(id_list, order_list):
            session.execute(update(cls).where(primary_key == item_id).values({rank: order}))


def _primary_entity(statement: Select[Any]) -> type | None:
    descriptions = statement.column_descriptions
    if not descriptions:
        return None
    entity = descriptions[0].get("entity")
    return entity if isinstance(entity, type) else None


def apply_default_ordering(statement: Select[Any], entity: type | None = None) -> Select[Any]:
    """Return ``statement`` ordered by the entity's rank if it has no ``ORDER BY`` yet.

    Statements that are already ordered, or whose primary entity is not
    :class:`Sortable`, are returned unchanged. Applying it twice is a no-op.
    """
    if statement._order_by_clauses:
        return statement
    if entity is None:
        entity = _primary_entity(statement)
    if entity is None or not issubclass(entity, Sortable):
        return statement
    return statement.order_by(entity.get_sort_order_column().asc())


def apply_sortable_ordering(execute_state: ORMExecuteState) -> None:
    """``do_orm_execute`` hook applying :func:`apply_default_ordering`."""
    if not execute_state.is_select or execute_state.is_column_load:
        return
    statement = execute_state.statement
    if not isinstance(statement, Select):
        return
    execute_state.statement = apply_default_ordering(statement)


@event.listens_for(Sortable, "after_insert", propagate=True)
def _assign_initial_rank(mapper: Mapper[Any], connection: Connection, target: Sortable) -> None:
    name = target.sort_order_column
    if getattr(target, name, None) is not None:
        return
    key = mapper.primary_key_from_instance(target)[0]
    column = mapper.columns[name]
    connection.execute(
        update(mapper.local_table).where(mapper.primary_key[0] == key).values({column: key})
    )
    set_committed_value(target, name, key)
