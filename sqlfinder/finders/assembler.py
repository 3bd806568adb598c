"""
Clause assembler -- turns a normalized OptionSet into one ClauseTemplate.

Clauses are emitted in a fixed order:

    SELECT, FROM, JOIN, WHERE, GROUP BY, ORDER BY, LIMIT/OFFSET

Only `conditions`, `group`, `order`, `limit` and `offset` are scanned for
placeholders (in that order).  `select`, `from` and `joins` are copied
verbatim; quoting anything inside them is the caller's job.
"""
from __future__ import annotations

from sqlfinder.core.errors import DefinitionError
from sqlfinder.finders.binder import PlaceholderBinder
from sqlfinder.finders.protocols import FinderBackend, PrefetchCapable
from sqlfinder.finders.spec import OptionSet
from sqlfinder.finders.template import ClauseTemplate, join_templates
from sqlfinder.core.logging import get_logger

logger = get_logger(__name__)


def assemble_template(
    model: type,
    options: OptionSet,
    backend: FinderBackend,
    binder: PlaceholderBinder,
) -> ClauseTemplate:
    """Build the full SQL template for *model* from *options*.

    Placeholders found along the way are registered on *binder*, which
    therefore ends up holding the finder's parameter order.
    """
    if isinstance(model, type) and issubclass(model, PrefetchCapable):
        options = _apply_prefetch(model, options)

    clauses: list[ClauseTemplate] = [
        _select_clause(options),
        _from_clause(options, backend),
    ]

    # ── JOIN (static SQL, not scanned) ───────────────
    if options.joins:
        clauses.append(ClauseTemplate.literal(options.joins))

    # ── WHERE ────────────────────────────────────────
    where = _where_clause(options, backend, binder)
    if where:
        clauses.append(where)

    # ── GROUP BY / ORDER BY ──────────────────────────
    if options.group:
        clauses.append("GROUP BY " + binder.bind(options.group))
    if options.order:
        clauses.append("ORDER BY " + binder.bind(options.order))

    template = join_templates(" ", clauses)

    # ── LIMIT / OFFSET (backend syntax) ──────────────
    limit = _pagination_value(options.limit, binder)
    offset = _pagination_value(options.offset, binder)
    if limit is not None or offset is not None:
        template = backend.apply_pagination(template, limit, offset)

    return template


# ── Clause helpers ───────────────────────────────────────

def _select_clause(options: OptionSet) -> ClauseTemplate:
    return ClauseTemplate.literal(f"SELECT {options.select or '*'}")


def _from_clause(options: OptionSet, backend: FinderBackend) -> ClauseTemplate:
    return ClauseTemplate.literal(f"FROM {options.from_ or backend.table_name()}")


def _where_clause(
    options: OptionSet,
    backend: FinderBackend,
    binder: PlaceholderBinder,
) -> ClauseTemplate | None:
    predicates: list[ClauseTemplate] = []

    if options.conditions:
        predicates.append(binder.bind(options.conditions))

    if not backend.is_hierarchy_root():
        restriction = backend.type_restriction_predicate()
        if restriction:
            predicates.append(ClauseTemplate.literal(restriction))

    if not predicates:
        return None
    wrapped = ["(" + p + ")" for p in predicates]
    return "WHERE " + join_templates(" AND ", wrapped)


def _pagination_value(value: int | str | None, binder: PlaceholderBinder) -> ClauseTemplate | None:
    if value is None:
        return None
    return binder.bind(str(value))


def _apply_prefetch(model: type[PrefetchCapable], options: OptionSet) -> OptionSet:
    rewritten = model.apply_prefetch(options)
    if not isinstance(rewritten, OptionSet):
        raise DefinitionError(
            f"{model.__name__}.apply_prefetch must return an OptionSet, "
            f"got {type(rewritten).__name__}"
        )
    logger.debug("Prefetch hook rewrote options for %s", model.__name__)
    return rewritten
