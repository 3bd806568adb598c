"""
Finder definition & invocation.

`define_finder` runs the whole compile pipeline

    build_spec -> normalize_options -> assemble_template -> CompiledFinder

and attaches the result to the model class as a `FinderMethod`
descriptor.  Redefining a name replaces the previous finder.

Calling the attribute resolves the model's backend, renders the SQL
(quoting happens here and only here), executes it and shapes the rows:
single-row finders return the first row or None, the others a list.
"""
from __future__ import annotations

import inspect
from typing import Any
from weakref import WeakKeyDictionary

from sqlfinder.core.errors import DefinitionError
from sqlfinder.core.logging import get_logger, log_sql
from sqlfinder.core.utils import timer
from sqlfinder.db.backend import SQLAlchemyBackend
from sqlfinder.db.connection import get_engine
from sqlfinder.finders.assembler import assemble_template
from sqlfinder.finders.binder import PlaceholderBinder
from sqlfinder.finders.compiled import CompiledFinder
from sqlfinder.finders.protocols import FinderBackend
from sqlfinder.finders.spec import Arity, OptionSet, build_spec, normalize_options

logger = get_logger(__name__)

# model class -> {finder name -> CompiledFinder}, own definitions only
_REGISTRY: WeakKeyDictionary[type, dict[str, CompiledFinder]] = WeakKeyDictionary()


class FinderMixin:
    """Gives a model class `define_finder` and a backend to run finders on.

    Override `finder_backend` to point a model at something other than the
    shared SQLAlchemy engine.
    """

    @classmethod
    def finder_backend(cls) -> FinderBackend:
        return SQLAlchemyBackend(cls, get_engine())

    @classmethod
    def define_finder(cls, name: str, arity: Arity | str, **options: Any) -> CompiledFinder:
        return define_finder(cls, name, arity, options)

    @classmethod
    def finders(cls) -> dict[str, CompiledFinder]:
        return dict(_REGISTRY.get(cls, {}))


def resolve_backend(model: type) -> FinderBackend:
    if issubclass(model, FinderMixin):
        return model.finder_backend()
    return SQLAlchemyBackend(model, get_engine())


# ── Definition ───────────────────────────────────────────

def define_finder(
    model: type,
    name: str,
    arity: Arity | str,
    options: OptionSet | dict[str, Any] | None = None,
) -> CompiledFinder:
    """Compile a finder and attach it to *model* as ``model.<name>``."""
    if not isinstance(model, type):
        raise DefinitionError(f"define_finder needs a model class, got {model!r}")

    spec = build_spec(name, arity, options)
    _check_not_shadowing(model, spec.name)
    normalized = normalize_options(spec.options, spec.arity)

    backend = resolve_backend(model)
    binder = PlaceholderBinder()
    template = assemble_template(model, normalized, backend, binder)

    finder = CompiledFinder(
        name=spec.name,
        arity=spec.arity,
        template=template,
        parameter_order=binder.parameter_order,
        positional=normalized.positional,
    )
    _register(model, finder)

    logger.info(
        "Defined finder %s.%s  arity=%s  params=%d  mode=%s",
        model.__name__,
        finder.name,
        finder.arity.value,
        len(finder.parameter_order),
        "positional" if finder.positional else "named",
    )
    return finder


def _check_not_shadowing(model: type, name: str) -> None:
    existing = inspect.getattr_static(model, name, None)
    if existing is not None and not isinstance(existing, FinderMethod):
        raise DefinitionError(
            f"Finder {name!r} would replace existing attribute {model.__name__}.{name}"
        )


def _register(model: type, finder: CompiledFinder) -> None:
    _REGISTRY.setdefault(model, {})[finder.name] = finder
    setattr(model, finder.name, FinderMethod(finder))


# ── Invocation ───────────────────────────────────────────

class FinderMethod:
    """Class-level descriptor; always binds to the class, never an instance."""

    def __init__(self, finder: CompiledFinder):
        self.finder = finder

    def __get__(self, instance: Any, owner: type | None = None) -> BoundFinder:
        if owner is None:
            owner = type(instance)
        return BoundFinder(owner, self.finder)


class BoundFinder:
    def __init__(self, model: type, finder: CompiledFinder):
        self.model = model
        self.finder = finder
        self.__name__ = finder.name
        self.__qualname__ = f"{model.__name__}.{finder.name}"
        self.__signature__ = finder.signature
        self.__doc__ = f"{finder.arity.value}: {finder.sql}"

    def to_sql(self, *args: Any, **kwargs: Any) -> str:
        """Render the final SQL for these arguments without executing it."""
        return self.finder.render(resolve_backend(self.model), *args, **kwargs)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        backend = resolve_backend(self.model)
        sql = self.finder.render(backend, *args, **kwargs)
        log_sql(logger, self.__qualname__, sql)

        with timer() as t:
            rows = backend.execute(sql)
        logger.info("%s returned %d rows in %d ms", self.__qualname__, len(rows), t["elapsed_ms"])

        if self.finder.single:
            return rows[0] if rows else None
        return list(rows)

    def __repr__(self) -> str:
        return f"<finder {self.__qualname__}{self.__signature__}>"
