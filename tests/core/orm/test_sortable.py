"""Tests for storm.core.orm.sortable - default rank ordering for sortable models."""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Mapped, mapped_column

from storm.core.errors import InvalidConfigError, ValidationError
from storm.core.orm.base import StormBase
from storm.core.orm.session import StormSession, create_storm_engine
from storm.core.orm.sortable import Sortable, apply_default_ordering


class Test(Sortable, StormBase):
    __tablename__ = "test"
    __test__ = False

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(default="")
    email: Mapped[str] = mapped_column(default="")
    sort_order: Mapped[int | None]


class Page(Sortable, StormBase):
    __tablename__ = "sortable_pages"

    sort_order_column = "position"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(default="")
    position: Mapped[int | None]


class Tag(StormBase):
    __tablename__ = "sortable_tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    label: Mapped[str] = mapped_column(default="")


class Broken(Sortable, StormBase):
    __tablename__ = "sortable_broken"

    id: Mapped[int] = mapped_column(primary_key=True)


# =========================================================================
# Fixtures
# =========================================================================


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    eng = create_storm_engine("sqlite:///:memory:")
    StormBase.metadata.create_all(eng)
    return eng


@pytest.fixture
def session(engine):
    with StormSession(bind=engine) as sess:
        yield sess


# =========================================================================
# Rendering
# =========================================================================


class TestDefaultOrdering:
    def test_unordered_query_gets_rank(self):
        sql = Test.to_sql()
        assert sql.endswith("ORDER BY test.sort_order ASC")
        assert sql.count("ORDER BY") == 1

    def test_idempotent(self):
        stmt = apply_default_ordering(apply_default_ordering(Test.new_query()))
        sql = Test.to_sql(stmt)
        assert sql.count("sort_order ASC") == 1
        assert sql.endswith("ORDER BY test.sort_order ASC")

    def test_new_query_is_unordered(self):
        assert "ORDER BY" not in str(Test.new_query())

    def test_explicit_order_left_unchanged(self):
        stmt = Test.new_query().order_by(Test.name.asc(), Test.email.desc())
        sql = Test.to_sql(stmt)
        assert sql.endswith("ORDER BY test.name ASC, test.email DESC")
        assert "sort_order ASC" not in sql

    def test_where_clause_kept(self):
        sql = Test.to_sql(Test.new_query().where(Test.name == "a"))
        assert "WHERE test.name = ?" in sql
        assert sql.endswith("ORDER BY test.sort_order ASC")

    def test_custom_rank_column(self):
        assert Page.to_sql().endswith("ORDER BY sortable_pages.position ASC")

    def test_entity_inferred_from_statement(self):
        stmt = apply_default_ordering(select(Test))
        assert str(stmt).endswith("ORDER BY test.sort_order ASC")

    def test_non_sortable_unchanged(self):
        stmt = select(Tag)
        assert apply_default_ordering(stmt) is stmt

    def test_missing_rank_column(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            Broken.get_sort_order_column()
        assert exc_info.value.key == "sort_order_column"

    def test_get_sort_order_column(self):
        assert Page.get_sort_order_column() is Page.position


# =========================================================================
# Execution through StormSession
# =========================================================================


class TestSessionOrdering:
    def test_select_ordered_by_rank(self, session):
        session.add_all([
            Test(name="c", sort_order=3),
            Test(name="a", sort_order=1),
            Test(name="b", sort_order=2),
        ])
        session.commit()

        names = [t.name for t in session.scalars(select(Test)).all()]
        assert names == ["a", "b", "c"]

    def test_explicit_order_wins(self, session):
        session.add_all([
            Test(name="b", sort_order=1),
            Test(name="a", sort_order=2),
        ])
        session.commit()

        names = [t.name for t in session.scalars(select(Test).order_by(Test.name.desc())).all()]
        assert names == ["b", "a"]

    def test_non_sortable_query(self, session):
        session.add_all([Tag(label="x"), Tag(label="y")])
        session.commit()
        assert len(session.scalars(select(Tag)).all()) == 2


class TestInitialRank:
    def test_null_rank_becomes_primary_key(self, session):
        first = Test(name="first")
        second = Test(name="second")
        session.add_all([first, second])
        session.commit()

        assert first.sort_order == first.id
        assert second.sort_order == second.id

        stored = session.execute(select(Test.sort_order).where(Test.id == second.id)).scalar_one()
        assert stored == second.id

    def test_explicit_rank_kept(self, session):
        item = Test(name="pinned", sort_order=99)
        session.add(item)
        session.commit()
        assert item.sort_order == 99

    def test_custom_column(self, session):
        page = Page(title="home")
        session.add(page)
        session.commit()
        assert page.position == page.id


class TestSetSortableOrder:
    def _seed(self, session) -> list[int]:
        items = [Test(name=n) for n in ("a", "b", "c")]
        session.add_all(items)
        session.commit()
        return [item.id for item in items]

    def test_reorder(self, session):
        ids = self._seed(session)
        Test.set_sortable_order(session, ids, [3, 1, 2])
        session.commit()

        names = [t.name for t in session.scalars(select(Test)).all()]
        assert names == ["b", "c", "a"]

    def test_orders_default_to_ids(self, session):
        ids = self._seed(session)
        Test.set_sortable_order(session, ids[0], 10)
        Test.set_sortable_order(session, ids[0])
        session.commit()

        rank = session.execute(select(Test.sort_order).where(Test.id == ids[0])).scalar_one()
        assert rank == ids[0]

    def test_mismatched_lengths(self, session):
        with pytest.raises(ValidationError, match="count of ids does not match count of orders"):
            Test.set_sortable_order(session, [1, 2], [1])
