"""
Integration tests — finders on SQLAlchemy models against in-memory SQLite.

Covers dialect quoting, pagination syntax, single-table-inheritance type
restriction and ORM row mapping through the bundled backend.
"""
from __future__ import annotations

import datetime

import pytest
from sqlalchemy import String, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column
from sqlalchemy.pool import StaticPool

from sqlfinder.core.errors import ArgumentMismatch, BackendError
from sqlfinder.db.backend import SQLAlchemyBackend
from sqlfinder.db.connection import get_engine, reset_engine, set_engine
from sqlfinder.finders.synthesizer import FinderMixin, define_finder


class Base(DeclarativeBase):
    pass


class Recipe(FinderMixin, Base):
    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(primary_key=True)
    user: Mapped[str] = mapped_column(String(50))
    priv: Mapped[int]
    title: Mapped[str] = mapped_column(String(100))
    kind: Mapped[str] = mapped_column(String(20))

    __mapper_args__ = {"polymorphic_on": "kind", "polymorphic_identity": "recipe"}


class Cake(Recipe):
    __mapper_args__ = {"polymorphic_identity": "cake"}


class Cheesecake(Cake):
    __mapper_args__ = {"polymorphic_identity": "cheesecake"}


class NotMapped:
    pass


_ROWS = [
    Recipe(id=1, user="martin", priv=0, title="Soup", kind="recipe"),
    Recipe(id=2, user="martin", priv=5, title="Pie: the sequel", kind="recipe"),
    Cake(id=3, user="martin", priv=0, title="Sponge", kind="cake"),
    Cheesecake(id=4, user="anna", priv=0, title="Basque", kind="cheesecake"),
    Recipe(id=5, user="o'hara", priv=0, title="Stew", kind="recipe"),
]


@pytest.fixture(scope="module", autouse=True)
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        session.add_all(_ROWS)
        session.commit()
    set_engine(engine)
    yield engine
    reset_engine()


@pytest.fixture
def backend(engine):
    return SQLAlchemyBackend(Recipe, engine)


# ── Backend contract ─────────────────────────────────────

def test_installed_engine_is_shared(engine):
    assert get_engine() is engine


def test_quote_strings_and_numbers(backend):
    assert backend.quote("martin") == "'martin'"
    assert backend.quote("o'hara") == "'o''hara'"
    assert backend.quote(1) == "1"
    assert backend.quote(None) == "NULL"


def test_quote_sequences(backend):
    assert backend.quote([1, 2, 3]) == "1, 2, 3"
    assert backend.quote(("a", "b")) == "'a', 'b'"
    assert backend.quote([]) == "NULL"


def test_quote_unrenderable_value(backend):
    class Opaque:
        pass

    with pytest.raises(BackendError, match="Opaque"):
        backend.quote(Opaque())


def test_table_name(backend, engine):
    assert backend.table_name() == "recipes"
    assert SQLAlchemyBackend(Cake, engine).table_name() == "recipes"


def test_root_has_no_restriction(backend):
    assert backend.is_hierarchy_root() is True
    assert backend.type_restriction_predicate() is None


def test_subclass_restriction_includes_descendants(engine):
    cake = SQLAlchemyBackend(Cake, engine)
    assert cake.is_hierarchy_root() is False
    assert cake.type_restriction_predicate() == "recipes.kind IN ('cake', 'cheesecake')"


def test_unmapped_class_rejected(engine):
    with pytest.raises(BackendError, match="not a mapped"):
        SQLAlchemyBackend(NotMapped, engine)


def test_define_on_unmapped_plain_class_fails():
    with pytest.raises(BackendError):
        define_finder(NotMapped, "everything", "all")


# ── Finders end to end ───────────────────────────────────

def test_named_finder_returns_models():
    Recipe.define_finder(
        "find_all_of_user", "all",
        conditions="user = :user AND priv < :priv",
        order="id",
    )
    sql = Recipe.find_all_of_user.to_sql({"user": "martin", "priv": 1})
    assert sql == "SELECT * FROM recipes WHERE (user = 'martin' AND priv < 1) ORDER BY id"

    rows = Recipe.find_all_of_user({"user": "martin", "priv": 1})
    assert [r.id for r in rows] == [1, 3]
    assert isinstance(rows[1], Cake)


def test_positional_finder_same_sql():
    Recipe.define_finder(
        "mine_named", "all", conditions="user = :user AND priv < :priv", order="id",
    )
    Recipe.define_finder(
        "mine_positional", "all", conditions="user = :user AND priv < :priv", order="id",
        positional=True,
    )
    assert Recipe.mine_positional.to_sql("martin", 1) == Recipe.mine_named.to_sql(user="martin", priv=1)
    assert [r.id for r in Recipe.mine_positional(user="martin", priv=1)] == [1, 3]


def test_single_finder_and_absence():
    Recipe.define_finder("find_first", "first", conditions="id = :id")
    found = Recipe.find_first(id=2)
    assert found.title == "Pie: the sequel"
    assert Recipe.find_first(id=999) is None


def test_colons_in_values_survive_execution():
    Recipe.define_finder("by_title", "first", conditions="title = :title")
    assert Recipe.by_title(title="Pie: the sequel").id == 2


def test_quotes_in_values_survive_execution():
    Recipe.define_finder("by_user", "all", conditions="user = :user")
    assert [r.title for r in Recipe.by_user(user="o'hara")] == ["Stew"]


def test_in_list_placeholder():
    Recipe.define_finder("by_ids", "all", conditions="id IN (:ids)", order="id DESC")
    assert [r.id for r in Recipe.by_ids(ids=[1, 4, 5])] == [5, 4, 1]


def test_limit_and_offset_placeholders():
    Recipe.define_finder("page", "all", order="id", limit=":per_page", offset=":skip", positional=True)
    assert Recipe.page.to_sql(2, 1) == "SELECT * FROM recipes ORDER BY id LIMIT 2 OFFSET 1"
    assert [r.id for r in Recipe.page(2, 1)] == [2, 3]


def test_offset_without_limit_on_sqlite():
    Recipe.define_finder("skip_three", "all", order="id", offset=3)
    assert Recipe.skip_three.to_sql() == "SELECT * FROM recipes ORDER BY id LIMIT -1 OFFSET 3"
    assert [r.id for r in Recipe.skip_three()] == [4, 5]


def test_subclass_finder_restricted_to_subtree():
    Cake.define_finder("cakes_of", "all", conditions="user = :user", order="id")
    assert Cake.cakes_of.to_sql(user="martin") == (
        "SELECT * FROM recipes WHERE (user = 'martin') "
        "AND (recipes.kind IN ('cake', 'cheesecake')) ORDER BY id"
    )
    assert [r.id for r in Cake.cakes_of(user="martin")] == [3]
    assert [r.id for r in Cake.cakes_of(user="anna")] == [4]


def test_leaf_subclass_restriction():
    Cheesecake.define_finder("every_cheesecake", "all")
    rows = Cheesecake.every_cheesecake()
    assert [r.id for r in rows] == [4]
    assert all(isinstance(r, Cheesecake) for r in rows)


def test_missing_named_value_fails_before_execution():
    Recipe.define_finder("by_priv", "all", conditions="priv = :priv")
    with pytest.raises(ArgumentMismatch):
        Recipe.by_priv({})


def test_iso_date_string_value():
    Recipe.define_finder(
        "since", "all",
        conditions="id >= :min_id AND :day IS NOT NULL",
        order="id",
    )
    rows = Recipe.since(min_id=4, day=datetime.date(2024, 1, 15).isoformat())
    assert [r.id for r in rows] == [4, 5]
