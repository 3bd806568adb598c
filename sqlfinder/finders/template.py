"""
ClauseTemplate -- SQL text with deferred placeholder slots.

A template is an immutable sequence of literal SQL strings and
`Placeholder` slots.  Slots are only turned into quoted values by
`render()`, which is called at finder invocation time.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Union


@dataclass(frozen=True)
class Placeholder:
    """A named slot; *position* indexes the finder's parameter order."""

    name: str
    position: int

    @property
    def marker(self) -> str:
        return f":{self.name}"


Part = Union[str, Placeholder]


class ClauseTemplate:
    __slots__ = ("_parts",)

    def __init__(self, parts: Iterable[Part | "ClauseTemplate"] = ()):
        merged: list[Part] = []
        for part in _flatten(parts):
            if isinstance(part, str):
                if not part:
                    continue
                if merged and isinstance(merged[-1], str):
                    merged[-1] += part
                    continue
            merged.append(part)
        self._parts: tuple[Part, ...] = tuple(merged)

    @classmethod
    def literal(cls, sql: str) -> ClauseTemplate:
        return cls((sql,))

    @property
    def parts(self) -> tuple[Part, ...]:
        return self._parts

    @property
    def placeholders(self) -> tuple[Placeholder, ...]:
        return tuple(p for p in self._parts if isinstance(p, Placeholder))

    @property
    def text(self) -> str:
        """The template with every slot shown as its `:name` marker."""
        return "".join(p if isinstance(p, str) else p.marker for p in self._parts)

    def render(self, resolve: Callable[[Placeholder], str]) -> str:
        """Substitute each slot with *resolve(slot)* and return plain SQL."""
        return "".join(p if isinstance(p, str) else resolve(p) for p in self._parts)

    # ── Composition ─────────────────────────────────────

    def __add__(self, other: object) -> ClauseTemplate:
        if isinstance(other, (str, ClauseTemplate)):
            return ClauseTemplate((self, other))
        return NotImplemented

    def __radd__(self, other: object) -> ClauseTemplate:
        if isinstance(other, str):
            return ClauseTemplate((other, self))
        return NotImplemented

    def __bool__(self) -> bool:
        return bool(self._parts)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ClauseTemplate):
            return self._parts == other._parts
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._parts)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"ClauseTemplate({self.text!r})"


def join_templates(separator: str, templates: Iterable[ClauseTemplate]) -> ClauseTemplate:
    parts: list[Part | ClauseTemplate] = []
    for i, template in enumerate(templates):
        if i:
            parts.append(separator)
        parts.append(template)
    return ClauseTemplate(parts)


def _flatten(parts: Iterable[Part | ClauseTemplate]) -> Iterable[Part]:
    for part in parts:
        if isinstance(part, ClauseTemplate):
            yield from part.parts
        elif isinstance(part, (str, Placeholder)):
            yield part
        else:
            raise TypeError(f"Unsupported template part: {part!r}")
