"""
Shared fixtures -- a recording in-memory backend and throwaway models.
"""
from __future__ import annotations

from typing import Any

import pytest

from sqlfinder.finders.synthesizer import FinderMixin
from sqlfinder.finders.template import ClauseTemplate


class FakeBackend:
    """Backend double: ANSI-ish quoting, LIMIT/OFFSET, canned rows."""

    def __init__(
        self,
        table: str = "recipes",
        rows: list[Any] | None = None,
        root: bool = True,
        predicate: str | None = None,
    ):
        self.table = table
        self.rows = list(rows or [])
        self.root = root
        self.predicate = predicate
        self.executed: list[str] = []
        self.quoted: list[Any] = []

    def quote(self, value: Any) -> str:
        self.quoted.append(value)
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        if isinstance(value, (int, float)):
            return str(value)
        return "'" + str(value).replace("'", "''") + "'"

    def apply_pagination(self, template, limit=None, offset=None) -> ClauseTemplate:
        if limit is not None:
            template = template + " LIMIT " + limit
        if offset is not None:
            template = template + " OFFSET " + offset
        return template

    def table_name(self) -> str:
        return self.table

    def type_restriction_predicate(self) -> str | None:
        return self.predicate

    def is_hierarchy_root(self) -> bool:
        return self.root

    def execute(self, sql: str) -> list[Any]:
        self.executed.append(sql)
        return list(self.rows)


def make_model(backend: FakeBackend, name: str = "Recipe") -> type:
    """A fresh FinderMixin class bound to *backend*."""
    return type(name, (FinderMixin,), {"finder_backend": classmethod(lambda cls: backend)})


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def recipe(backend):
    return make_model(backend)
