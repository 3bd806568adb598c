"""
CompiledFinder -- the immutable artifact produced by define_finder.

It holds the SQL template, the parameter order and the calling
convention.  It never holds argument values: `render()` receives them per
call and routes every placeholder through the backend's `quote()`.
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Mapping

from sqlfinder.core.errors import ArgumentMismatch, DefinitionError
from sqlfinder.core.utils import is_parameter_name
from sqlfinder.finders.protocols import FinderBackend
from sqlfinder.finders.spec import Arity
from sqlfinder.finders.template import ClauseTemplate, Placeholder


@dataclass(frozen=True)
class CompiledFinder:
    name: str
    arity: Arity
    template: ClauseTemplate
    parameter_order: tuple[str, ...]
    positional: bool = False
    signature: inspect.Signature = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.positional:
            bad = [n for n in self.parameter_order if not is_parameter_name(n)]
            if bad:
                raise DefinitionError(
                    f"Finder {self.name!r}: placeholder(s) "
                    f"{', '.join(':' + n for n in bad)} cannot be positional parameter names"
                )
            params = [
                inspect.Parameter(n, inspect.Parameter.POSITIONAL_OR_KEYWORD)
                for n in self.parameter_order
            ]
        else:
            params = [
                inspect.Parameter("params", inspect.Parameter.POSITIONAL_ONLY, default=None),
                inspect.Parameter("values", inspect.Parameter.VAR_KEYWORD),
            ]
        object.__setattr__(self, "signature", inspect.Signature(params))

    @property
    def sql(self) -> str:
        """Template text with `:name` markers."""
        return self.template.text

    @property
    def single(self) -> bool:
        return self.arity is Arity.SINGLE

    # ── Call-time ────────────────────────────────────

    def bind_arguments(self, args: tuple, kwargs: dict[str, Any]) -> Any:
        """Validate call arguments against the calling convention.

        Positional finders return a list of values indexed by parameter
        position; named finders return the merged mapping.
        """
        if self.positional:
            try:
                bound = self.signature.bind(*args, **kwargs)
            except TypeError as exc:
                raise ArgumentMismatch(f"{self.name}(): {exc}") from None
            return [bound.arguments[n] for n in self.parameter_order]

        if len(args) > 1:
            raise ArgumentMismatch(
                f"{self.name}() takes a single mapping of placeholder values, "
                f"got {len(args)} positional arguments"
            )
        params = args[0] if args else None
        if params is None:
            params = {}
        if not isinstance(params, Mapping):
            raise ArgumentMismatch(
                f"{self.name}() expects a mapping of placeholder values, "
                f"got {type(params).__name__}"
            )
        if kwargs:
            params = {**params, **kwargs}
        return params

    def render(self, backend: FinderBackend, *args: Any, **kwargs: Any) -> str:
        """Return final SQL with every placeholder quoted by *backend*."""
        values = self.bind_arguments(args, kwargs)

        if self.positional:
            def resolve(slot: Placeholder) -> str:
                return backend.quote(values[slot.position])
        else:
            def resolve(slot: Placeholder) -> str:
                try:
                    value = values[slot.name]
                except KeyError:
                    raise ArgumentMismatch(
                        f"{self.name}() missing value for placeholder :{slot.name}"
                    ) from None
                return backend.quote(value)

        return self.template.render(resolve)
