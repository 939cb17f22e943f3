"""
geocoder-registry — schema node vocabulary.

File: src/geocoder_registry/config/nodes.py

Purpose
- Describe the accepted configuration tree as plain, immutable node descriptors.

What should be included in this file
- Scalar, closed-mapping and prototyped (sequence / keyed-mapping) node types.
- The reusable tri-state ``enableable`` block builder.

Functional requirements
- Descriptors carry everything the normalizer needs: kind, requiredness, defaults,
  shorthand rules and ``info`` text for reference dumps.

Non-functional requirements
- No behavior beyond trivial lookups; the normalizer owns all traversal.
- Nodes compare and hash by identity; defaults may be mutable containers.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, TypeAlias

ShorthandRule: TypeAlias = Callable[[object], object]


class ValueKind(StrEnum):
    """Runtime kind accepted by a scalar node."""

    SCALAR = "scalar"
    STRING = "string"
    BOOLEAN = "boolean"
    VARIABLE = "variable"


@dataclass(frozen=True, slots=True, eq=False)
class ScalarNode:
    """Leaf value. ``VARIABLE`` leaves are opaque and passed through verbatim."""

    name: str
    kind: ValueKind = ValueKind.SCALAR
    default: Any = None
    required: bool = False
    cannot_be_empty: bool = False
    info: str | None = None


@dataclass(frozen=True, slots=True, eq=False)
class ArrayNode:
    """Closed mapping with an ordered set of named children."""

    name: str
    children: tuple[SchemaNode, ...] = ()
    add_defaults_if_not_set: bool = False
    treat_true_like: Mapping[str, Any] | None = None
    treat_false_like: Mapping[str, Any] | None = None
    treat_null_like: Mapping[str, Any] | None = None
    before_normalization: tuple[ShorthandRule, ...] = ()
    remappings: tuple[tuple[str, str], ...] = ()
    info: str | None = None
    _index: dict[str, SchemaNode] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_index", {child.name: child for child in self.children})

    def child(self, name: str) -> SchemaNode | None:
        return self._index.get(name)

    @property
    def child_names(self) -> tuple[str, ...]:
        return tuple(child.name for child in self.children)


@dataclass(frozen=True, slots=True, eq=False)
class PrototypedArrayNode:
    """Homogeneous collection of ``prototype`` entries.

    Without ``key_attribute`` the collection is an ordered sequence. With it, the
    collection is a mapping whose keys play the role of that attribute, which makes
    entry names unique by construction.
    """

    name: str
    prototype: SchemaNode
    key_attribute: str | None = None
    min_elements: int = 0
    info: str | None = None

    @property
    def is_keyed(self) -> bool:
        return self.key_attribute is not None

    def empty(self) -> dict[str, Any] | list[Any]:
        return {} if self.is_keyed else []


SchemaNode: TypeAlias = ScalarNode | ArrayNode | PrototypedArrayNode


def enableable(
    name: str,
    *children: SchemaNode,
    default_enabled: bool,
    null_enabled: bool = True,
    enable_on_mapping: bool = True,
    before_normalization: tuple[ShorthandRule, ...] = (),
    info: str | None = None,
    enabled_info: str | None = None,
) -> ArrayNode:
    """Build a block that accepts ``true``, ``false``, ``null`` or a full mapping.

    ``true``/``false`` collapse to ``{"enabled": <bool>}``; ``null`` collapses to
    ``{"enabled": null_enabled}``; an absent block gets ``default_enabled``. When
    ``enable_on_mapping`` is set, a mapping that omits ``enabled`` is switched on,
    so configuring the block implies wanting it.
    """

    rules = tuple(before_normalization)
    if enable_on_mapping:
        rules = (*rules, enable_when_configured)
    return ArrayNode(
        name,
        children=(
            ScalarNode("enabled", ValueKind.BOOLEAN, default=default_enabled, info=enabled_info),
            *children,
        ),
        add_defaults_if_not_set=True,
        treat_true_like={"enabled": True},
        treat_false_like={"enabled": False},
        treat_null_like={"enabled": null_enabled},
        before_normalization=rules,
        info=info,
    )


def enable_when_configured(value: object) -> object:
    if isinstance(value, Mapping) and "enabled" not in value:
        return {**value, "enabled": True}
    return value


__all__ = [
    "ArrayNode",
    "PrototypedArrayNode",
    "ScalarNode",
    "SchemaNode",
    "ShorthandRule",
    "ValueKind",
    "enable_when_configured",
    "enableable",
]
