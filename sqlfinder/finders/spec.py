"""
FinderSpec -- the validated, declarative description of one finder.

`build_spec` turns the raw `define_finder` arguments into a FinderSpec
(raising DefinitionError on anything unusable) and `normalize_options`
applies the arity-dependent defaults before clause assembly.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sqlfinder.core.errors import DefinitionError
from sqlfinder.core.utils import is_parameter_name

_ARITY_ALIASES = {
    "first": "first",
    "single": "first",
    "one": "first",
    "all": "all",
    "many": "all",
}


class Arity(str, Enum):
    SINGLE = "first"
    MANY = "all"


class OptionSet(BaseModel):
    """Clause options accepted by define_finder."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    select: str | None = Field(None, description="Column list, defaults to '*'")
    from_: str | None = Field(None, alias="from", description="FROM text, defaults to the model table")
    joins: str | None = Field(None, description="Literal JOIN text (never scanned)")
    conditions: str | None = Field(None, description="WHERE fragment with :placeholders")
    group: str | None = Field(None, description="GROUP BY fragment")
    order: str | None = Field(None, description="ORDER BY fragment")
    limit: int | str | None = Field(None, description="Row limit or a :placeholder")
    offset: int | str | None = Field(None, description="Row offset or a :placeholder")
    positional: bool = Field(False, description="Positional arguments instead of a mapping")
    prefetch: Any = Field(None, description="Opaque passthrough for a prefetch hook")

    @field_validator("select", "from_", "joins", "conditions", "group", "order", mode="before")
    @classmethod
    def _blank_is_absent(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("limit", "offset", mode="before")
    @classmethod
    def _check_pagination(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("must be an integer or SQL text, not a boolean")
        if isinstance(v, int) and v < 0:
            raise ValueError("must not be negative")
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("positional", mode="before")
    @classmethod
    def _none_is_false(cls, v: Any) -> Any:
        return False if v is None else v


class FinderSpec(BaseModel):
    name: str
    arity: Arity
    options: OptionSet = Field(default_factory=OptionSet)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        if not is_parameter_name(v) or v.startswith("_"):
            raise ValueError(f"{v!r} is not a usable finder name")
        return v

    @field_validator("arity", mode="before")
    @classmethod
    def _coerce_arity(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, Arity):
            key = v.strip().lower()
            if key not in _ARITY_ALIASES:
                raise ValueError(f"unsupported arity {v!r} (use 'first' or 'all')")
            return _ARITY_ALIASES[key]
        return v


def build_spec(
    name: str,
    arity: Arity | str,
    options: OptionSet | Mapping[str, Any] | None = None,
) -> FinderSpec:
    """Validate raw define_finder arguments into a FinderSpec."""
    if options is None:
        options = {}
    if not isinstance(options, (OptionSet, Mapping)):
        raise DefinitionError(f"Finder options must be a mapping, got {type(options).__name__}")
    try:
        if not isinstance(options, OptionSet):
            options = OptionSet.model_validate(dict(options))
        return FinderSpec(name=name, arity=arity, options=options)
    except ValidationError as exc:
        raise DefinitionError(f"Invalid finder {name!r}: {_summarise(exc)}") from exc


def normalize_options(options: OptionSet, arity: Arity) -> OptionSet:
    """Force `limit 1` for single-row finders; everything else passes through."""
    if arity is Arity.SINGLE:
        return options.model_copy(update={"limit": 1})
    return options


def _summarise(exc: ValidationError) -> str:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        messages.append(f"{loc}: {err['msg']}")
    return "; ".join(messages)
