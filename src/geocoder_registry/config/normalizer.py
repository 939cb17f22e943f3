"""
geocoder-registry — configuration normalization and validation.

File: src/geocoder_registry/config/normalizer.py

Purpose
- Turn raw, loosely-typed configuration documents into the canonical document
  described by a schema tree, or report the first structural violation.

What should be included in this file
- Phase 1 (expand): shorthand rewrites, ``true``/``false``/``null`` substitutions
  and singular-to-plural key remapping. Shape only, never fails on kinds.
- Merge of several expanded documents, in order.
- Phase 2 (finalize): kind checks, closed keys, requiredness, minimum sizes and
  defaults.

Functional requirements
- Fail fast: the first violation aborts normalization with its dotted path.
- Never mutate inputs; always build fresh containers.
- Idempotent on canonical input.

Non-functional requirements
- Pure and re-entrant; the only side effect is a structured log event.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final

import structlog

from geocoder_registry.config.errors import (
    ROOT_PATH,
    ConfigValidationError,
    ConfigValidationIssue,
    EmptyCollection,
    MissingRequiredField,
    SchemaViolation,
    TypeMismatch,
)
from geocoder_registry.config.nodes import (
    ArrayNode,
    PrototypedArrayNode,
    ScalarNode,
    SchemaNode,
    ValueKind,
)

logger = structlog.get_logger(__name__)

_OMIT: Final[object] = object()


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Either a canonical document or the error that rejected the input."""

    config: dict[str, Any] | None
    error: ConfigValidationError | None = None

    @property
    def is_valid(self) -> bool:
        return self.config is not None and self.error is None

    @property
    def issue(self) -> ConfigValidationIssue | None:
        return None if self.error is None else self.error.issue

    def unwrap(self) -> dict[str, Any]:
        if self.error is not None:
            raise self.error
        assert self.config is not None
        return self.config


def normalize(schema: ArrayNode, raw: object) -> ConfigValidationResult:
    """Normalize a single raw document against ``schema``."""

    return process_configs(schema, (raw,))


def process_configs(schema: ArrayNode, raws: Sequence[object]) -> ConfigValidationResult:
    """Expand each raw document, merge them in order, then finalize once."""

    try:
        merged: object = None
        for index, raw in enumerate(raws):
            expanded = expand(schema, {} if raw is None else raw, "")
            merged = expanded if index == 0 else merge(schema, merged, expanded)
        document = finalize(schema, {} if merged is None else merged, "")
    except ConfigValidationError as exc:
        logger.info("config_rejected", path=exc.path, rule=exc.rule, reason=exc.message)
        return ConfigValidationResult(config=None, error=exc)

    assert isinstance(document, dict)
    logger.debug(
        "config_normalized",
        documents=len(raws),
        providers=sorted(document.get("providers", {})),
    )
    return ConfigValidationResult(config=document)


# ---------------------------------------------------------------------------
# Phase 1: expand
# ---------------------------------------------------------------------------


def expand(node: SchemaNode, value: object, path: str) -> object:
    """Rewrite shorthand forms under ``node``; leave unexpected kinds untouched."""

    if isinstance(node, ScalarNode):
        return value
    if isinstance(node, ArrayNode):
        return _expand_array(node, value, path)
    return _expand_prototyped(node, value, path)


def _expand_array(node: ArrayNode, value: object, path: str) -> object:
    for rule in node.before_normalization:
        value = rule(value)

    value = _apply_equivalents(node, value)
    if not isinstance(value, Mapping):
        return value

    value = _apply_remappings(node, value)
    out: dict[object, object] = {}
    for key, item in value.items():
        child = node.child(key) if isinstance(key, str) else None
        out[key] = item if child is None else expand(child, item, _join(path, key))
    return out


def _apply_equivalents(node: ArrayNode, value: object) -> object:
    if value is True and node.treat_true_like is not None:
        return dict(node.treat_true_like)
    if value is False and node.treat_false_like is not None:
        return dict(node.treat_false_like)
    if value is None:
        return {} if node.treat_null_like is None else dict(node.treat_null_like)
    return value


def _apply_remappings(node: ArrayNode, value: Mapping[Any, object]) -> Mapping[Any, object]:
    remapped: dict[Any, object] | None = None
    for singular, plural in node.remappings:
        if singular not in value or plural in value:
            continue
        if remapped is None:
            remapped = dict(value)
        item = remapped.pop(singular)
        remapped[plural] = list(item) if _is_sequence(item) else [item]
    return value if remapped is None else remapped


def _expand_prototyped(node: PrototypedArrayNode, value: object, path: str) -> object:
    if value is None:
        return node.empty()

    if node.is_keyed:
        if _is_sequence(value):
            value = _key_by_attribute(node, value, path)
        if not isinstance(value, Mapping):
            return value
        return {
            key: expand(node.prototype, item, _join(path, key)) if isinstance(key, str) else item
            for key, item in value.items()
        }

    if not _is_sequence(value):
        return value
    return [
        expand(node.prototype, item, _index(path, position)) for position, item in enumerate(value)
    ]


def _key_by_attribute(node: PrototypedArrayNode, items: Sequence[object], path: str) -> object:
    attribute = node.key_attribute
    assert attribute is not None
    if not all(
        isinstance(item, Mapping) and isinstance(item.get(attribute), str) for item in items
    ):
        return items

    keyed: dict[str, object] = {}
    for position, item in enumerate(items):
        assert isinstance(item, Mapping)
        name = item[attribute]
        if name in keyed:
            raise SchemaViolation(
                _index(path, position), f"duplicate {attribute} {name!r}"
            )
        keyed[name] = {key: entry for key, entry in item.items() if key != attribute}
    return keyed


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def merge(node: SchemaNode, left: object, right: object) -> object:
    """Merge two expanded values: mappings deep-merge, sequences concatenate."""

    if isinstance(node, ScalarNode):
        return right

    if isinstance(node, ArrayNode):
        if not (isinstance(left, Mapping) and isinstance(right, Mapping)):
            return right
        out = dict(left)
        for key, item in right.items():
            child = node.child(key) if isinstance(key, str) else None
            if key in out and child is not None:
                out[key] = merge(child, out[key], item)
            else:
                out[key] = item
        return out

    if node.is_keyed:
        if not (isinstance(left, Mapping) and isinstance(right, Mapping)):
            return right
        merged = dict(left)
        for key, item in right.items():
            merged[key] = merge(node.prototype, merged[key], item) if key in merged else item
        return merged

    if _is_sequence(left) and _is_sequence(right):
        return [*left, *right]
    return right


# ---------------------------------------------------------------------------
# Phase 2: finalize
# ---------------------------------------------------------------------------


def finalize(node: SchemaNode, value: object, path: str) -> object:
    """Validate an expanded value under ``node`` and fill in defaults."""

    if isinstance(node, ScalarNode):
        return _finalize_scalar(node, value, path)
    if isinstance(node, ArrayNode):
        return _finalize_array(node, value, path)
    return _finalize_prototyped(node, value, path)


def _finalize_scalar(node: ScalarNode, value: object, path: str) -> object:
    if node.cannot_be_empty and (value is None or value == ""):
        raise MissingRequiredField(path, "must not be empty")

    if value is None:
        return copy.deepcopy(node.default)

    if node.kind is ValueKind.VARIABLE:
        return copy.deepcopy(value)
    if node.kind is ValueKind.BOOLEAN:
        if not isinstance(value, bool):
            raise TypeMismatch(path, f"expected boolean, got {_kind_name(value)}")
        return value
    if node.kind is ValueKind.STRING:
        if not isinstance(value, str):
            raise TypeMismatch(path, f"expected string, got {_kind_name(value)}")
        return value
    if not isinstance(value, (str, int, float, bool)):
        raise TypeMismatch(path, f"expected scalar, got {_kind_name(value)}")
    return value


def _finalize_array(node: ArrayNode, value: object, path: str) -> dict[str, Any]:
    payload = _as_mapping(value, path)

    for key in sorted(payload):
        if node.child(key) is None:
            raise SchemaViolation(_join(path, key), "unrecognized key")

    out: dict[str, Any] = {}
    for child in node.children:
        child_path = _join(path, child.name)
        if child.name in payload:
            out[child.name] = finalize(child, payload[child.name], child_path)
            continue
        absent = _absent(child, child_path)
        if absent is not _OMIT:
            out[child.name] = absent
    return out


def _absent(node: SchemaNode, path: str) -> object:
    if isinstance(node, ScalarNode):
        if node.required:
            raise MissingRequiredField(path, "missing required field")
        return copy.deepcopy(node.default)
    if isinstance(node, ArrayNode):
        if node.add_defaults_if_not_set:
            return _finalize_array(node, {}, path)
        return _OMIT
    return _finalize_prototyped(node, node.empty(), path)


def _finalize_prototyped(
    node: PrototypedArrayNode, value: object, path: str
) -> dict[str, Any] | list[Any]:
    if node.is_keyed:
        entries = _as_mapping(value, path)
        _require_min_elements(node, len(entries), path)
        return {
            key: finalize(node.prototype, item, _join(path, key)) for key, item in entries.items()
        }

    if not _is_sequence(value):
        raise TypeMismatch(path, f"expected sequence, got {_kind_name(value)}")
    _require_min_elements(node, len(value), path)
    return [
        finalize(node.prototype, item, _index(path, position))
        for position, item in enumerate(value)
    ]


def _require_min_elements(node: PrototypedArrayNode, count: int, path: str) -> None:
    if count >= node.min_elements:
        return
    noun = "entry" if node.min_elements == 1 else "entries"
    raise EmptyCollection(path, f"must contain at least {node.min_elements} {noun}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _as_mapping(value: object, path: str) -> dict[str, object]:
    if not isinstance(value, Mapping):
        raise TypeMismatch(path, f"expected mapping, got {_kind_name(value)}")
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise TypeMismatch(path, f"mapping key must be string, got {_kind_name(key)}")
        out[key] = item
    return out


def _is_sequence(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _kind_name(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, Mapping):
        return "mapping"
    if _is_sequence(value):
        return "sequence"
    return type(value).__name__


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _index(path: str, position: int) -> str:
    return f"{path or ROOT_PATH}[{position}]"


__all__ = [
    "ConfigValidationResult",
    "expand",
    "finalize",
    "merge",
    "normalize",
    "process_configs",
]
