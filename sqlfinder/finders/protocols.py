"""
Collaborator interfaces consumed by the finder compiler.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Sequence, runtime_checkable

from sqlfinder.finders.template import ClauseTemplate

if TYPE_CHECKING:
    from sqlfinder.finders.spec import OptionSet


@runtime_checkable
class FinderBackend(Protocol):
    """Connection-side behaviour a finder needs, bound to one model type."""

    def quote(self, value: Any) -> str: ...

    def apply_pagination(
        self,
        template: ClauseTemplate,
        limit: ClauseTemplate | None = None,
        offset: ClauseTemplate | None = None,
    ) -> ClauseTemplate: ...

    def table_name(self) -> str: ...

    def type_restriction_predicate(self) -> str | None: ...

    def is_hierarchy_root(self) -> bool: ...

    def execute(self, sql: str) -> Sequence[Any]: ...


class PrefetchCapable:
    """Mixin for models that rewrite finder options before assembly.

    Typical use is piggy-backing columns of associated tables onto the
    SELECT (adding `select` columns and `joins`) based on the opaque
    `prefetch` option.  Only models that inherit this mixin are asked.
    """

    @classmethod
    def apply_prefetch(cls, options: OptionSet) -> OptionSet:
        raise NotImplementedError
