"""
SQLAlchemy finder backend.

Binds one mapped model class to an engine and provides what the finder
compiler needs from the database side:

  1. Value quoting through the engine's dialect (literal rendering)
  2. LIMIT / OFFSET syntax
  3. Table name and single-table-inheritance type restriction
  4. Execution of the final SQL, mapping rows back to model instances
"""
from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import inspect as sa_inspect, literal, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, CompileError
from sqlalchemy.orm import Mapper, Session

from sqlfinder.core.errors import BackendError
from sqlfinder.core.logging import get_logger
from sqlfinder.finders.template import ClauseTemplate

logger = get_logger(__name__)

# Dialects that cannot express OFFSET without a LIMIT
_OFFSET_ONLY_LIMIT = {
    "sqlite": "-1",
    "mysql": "18446744073709551615",
    "mariadb": "18446744073709551615",
}


class SQLAlchemyBackend:
    def __init__(self, model: type, engine: Engine):
        mapper = sa_inspect(model, raiseerr=False)
        if not isinstance(mapper, Mapper):
            raise BackendError(f"{model.__name__} is not a mapped SQLAlchemy class")
        self._model = model
        self._mapper = mapper
        self._engine = engine

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    # ── Quoting ─────────────────────────────────────────

    def quote(self, value: Any) -> str:
        """Render *value* as a SQL literal for this engine's dialect.

        Lists and tuples render as a comma-separated list for use inside
        `IN (...)`; an empty one renders as NULL.
        """
        if value is None:
            return "NULL"
        if isinstance(value, (list, tuple)):
            if not value:
                return "NULL"
            return ", ".join(self.quote(v) for v in value)
        try:
            compiled = literal(value).compile(
                dialect=self._engine.dialect,
                compile_kwargs={"literal_binds": True},
            )
        except (ArgumentError, CompileError, NotImplementedError) as exc:
            raise BackendError(
                f"Cannot quote {type(value).__name__} value for dialect {self.dialect_name}"
            ) from exc
        return str(compiled)

    # ── Pagination ──────────────────────────────────────

    def apply_pagination(
        self,
        template: ClauseTemplate,
        limit: ClauseTemplate | None = None,
        offset: ClauseTemplate | None = None,
    ) -> ClauseTemplate:
        if limit is not None:
            template = template + " LIMIT " + limit
        elif offset is not None and self.dialect_name in _OFFSET_ONLY_LIMIT:
            template = template + f" LIMIT {_OFFSET_ONLY_LIMIT[self.dialect_name]}"
        if offset is not None:
            template = template + " OFFSET " + offset
        return template

    # ── Schema / hierarchy ──────────────────────────────

    def table_name(self) -> str:
        table = self._mapper.local_table
        name = getattr(table, "fullname", None)
        if not name:
            raise BackendError(f"{self._model.__name__} is not mapped to a plain table")
        return name

    def is_hierarchy_root(self) -> bool:
        return self._mapper.inherits is None

    def type_restriction_predicate(self) -> str | None:
        """Discriminator restriction for single-table-inheritance subclasses."""
        mapper = self._mapper
        if not mapper.single or mapper.polymorphic_on is None:
            return None
        identities = [
            m.polymorphic_identity
            for m in mapper.self_and_descendants
            if m.polymorphic_identity is not None
        ]
        if not identities:
            return None
        column = f"{self.table_name()}.{mapper.polymorphic_on.name}"
        return f"{column} IN ({self.quote(identities)})"

    # ── Execution ───────────────────────────────────────

    def execute(self, sql: str) -> Sequence[Any]:
        """Run fully rendered *sql* and return mapped model instances."""
        # Values are already inlined; keep text() from treating ':x' as binds.
        stmt = select(self._model).from_statement(text(sql.replace(":", "\\:")))
        with Session(self._engine) as session:
            rows = session.scalars(stmt).all()
        logger.debug("Mapped %d %s rows", len(rows), self._model.__name__)
        return rows
