"""
Loads finder definitions from YAML and applies them to model classes.

Document shape:

    version: 1
    finders:
      - model: Recipe
        name: find_all_of_user
        arity: all
        conditions: "user = :user AND priv < :priv"
      - model: Recipe
        name: find_first
        arity: first
        conditions: "id = :id"
        positional: true

Every key other than `model`, `name` and `arity` is a define_finder option.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from sqlfinder.core.config import get_settings
from sqlfinder.core.errors import DefinitionError
from sqlfinder.core.logging import get_logger
from sqlfinder.finders.compiled import CompiledFinder
from sqlfinder.finders.synthesizer import define_finder

logger = get_logger(__name__)

_RESERVED_KEYS = ("model", "name", "arity")


@dataclass(frozen=True)
class FinderDefinition:
    model: str
    name: str
    arity: str
    options: dict[str, Any] = field(default_factory=dict)


# ── Parsing ──────────────────────────────────────────────

def _parse_definition(raw: Any, index: int) -> FinderDefinition:
    if not isinstance(raw, dict):
        raise DefinitionError(f"finders[{index}] must be a mapping")
    missing = [k for k in _RESERVED_KEYS if not raw.get(k)]
    if missing:
        raise DefinitionError(f"finders[{index}] is missing {', '.join(missing)}")
    return FinderDefinition(
        model=str(raw["model"]),
        name=str(raw["name"]),
        arity=str(raw["arity"]),
        options={k: v for k, v in raw.items() if k not in _RESERVED_KEYS},
    )


def parse_definitions(raw_yaml: Any) -> list[FinderDefinition]:
    if raw_yaml is None:
        return []
    if not isinstance(raw_yaml, dict):
        raise DefinitionError("Finder definitions must be a mapping with a 'finders' list")
    version = raw_yaml.get("version", 1)
    if version != 1:
        raise DefinitionError(f"Unsupported finder definitions version {version!r}")
    finders = raw_yaml.get("finders") or []
    if not isinstance(finders, list):
        raise DefinitionError("'finders' must be a list")
    return [_parse_definition(raw, i) for i, raw in enumerate(finders)]


# ── Public API ───────────────────────────────────────────

def load_definitions(path: str | Path | None = None) -> list[FinderDefinition]:
    """Read finder definitions from *path* (default: settings.definitions_path)."""
    if path is None:
        path = get_settings().definitions_path
    if not path:
        raise DefinitionError("No finder definitions path given or configured")
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise DefinitionError(f"Malformed finder definitions in {path}: {exc}") from exc
    definitions = parse_definitions(raw)
    logger.info("Loaded %d finder definitions from %s", len(definitions), path)
    return definitions


def apply_definitions(
    definitions: Iterable[FinderDefinition],
    models: Mapping[str, type] | Iterable[type],
) -> list[CompiledFinder]:
    """Define every finder on its model class, in document order."""
    if not isinstance(models, Mapping):
        models = {m.__name__: m for m in models}

    definitions = list(definitions)
    unknown = [d for d in definitions if d.model not in models]
    if unknown:
        raise DefinitionError(
            f"Unknown model {unknown[0].model!r} for finder {unknown[0].name!r}. "
            f"Known: {', '.join(sorted(models))}"
        )

    return [
        define_finder(models[d.model], d.name, d.arity, d.options)
        for d in definitions
    ]
