"""
PlaceholderBinder -- turns `:name` markers into deferred slots.

One binder is used per finder definition, so the parameter order it
accumulates spans every scanned clause.  Each distinct name gets one
position, in order of first appearance; every occurrence of the name
(in any clause) becomes a slot pointing at that position.

Markers follow the usual named-bind shape: a colon directly followed by
word characters.  A colon preceded by another colon or a word character
(`price::numeric`, `'10:30'`) is not a marker.
"""
from __future__ import annotations

import re

from sqlfinder.finders.template import ClauseTemplate, Placeholder, Part

PLACEHOLDER_RE = re.compile(r"(?<![:\w]):(\w+)(?![\w:])")


class PlaceholderBinder:
    def __init__(self) -> None:
        self._order: list[str] = []

    @property
    def parameter_order(self) -> tuple[str, ...]:
        return tuple(self._order)

    def bind(self, fragment: str) -> ClauseTemplate:
        """Rewrite every marker in *fragment* into a slot."""
        parts: list[Part] = []
        pos = 0
        for m in PLACEHOLDER_RE.finditer(fragment):
            parts.append(fragment[pos:m.start()])
            parts.append(self._slot(m.group(1)))
            pos = m.end()
        parts.append(fragment[pos:])
        return ClauseTemplate(parts)

    def _slot(self, name: str) -> Placeholder:
        if name not in self._order:
            self._order.append(name)
        return Placeholder(name, self._order.index(name))
