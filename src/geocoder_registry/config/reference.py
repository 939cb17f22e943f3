"""Annotated YAML reference rendering for a schema tree."""

from __future__ import annotations

from typing import Final

import yaml

from geocoder_registry.config.nodes import ArrayNode, PrototypedArrayNode, ScalarNode, SchemaNode

_INDENT: Final[str] = "    "
_VALUE_COLUMN: Final[int] = 30


def dump_reference(schema: ArrayNode) -> str:
    """Render ``schema`` as commented YAML showing every key and its default.

    Prototype entries are shown once under a placeholder key (the key attribute for
    keyed collections, ``-`` for sequences). Required leaves are tagged ``# Required``.
    """

    lines: list[str] = []
    _write_node(schema, depth=0, lines=lines, label=schema.name)
    return "\n".join(lines) + "\n"


def render_scalar(value: object) -> str:
    if value is None:
        return "~"
    rendered = yaml.safe_dump(value, default_flow_style=True, allow_unicode=True)
    return rendered.removesuffix("...\n").strip()


def _write_node(node: SchemaNode, *, depth: int, lines: list[str], label: str) -> None:
    indent = _INDENT * depth
    if node.info:
        for info_line in node.info.splitlines():
            lines.append(f"{indent}# {info_line}")

    if isinstance(node, ScalarNode):
        key = f"{indent}{label}:"
        value = "~" if node.required else render_scalar(node.default)
        line = f"{key.ljust(_VALUE_COLUMN + len(indent))} {value}"
        if node.required:
            line += " # Required"
        lines.append(line)
        return

    if isinstance(node, PrototypedArrayNode):
        _write_prototyped(node, depth=depth, lines=lines, label=label)
        return

    suffix = _enableable_hint(node)
    lines.append(f"{indent}{label}:{suffix}")
    for child in node.children:
        _write_node(child, depth=depth + 1, lines=lines, label=child.name)


def _write_prototyped(
    node: PrototypedArrayNode, *, depth: int, lines: list[str], label: str
) -> None:
    indent = _INDENT * depth
    child_indent = _INDENT * (depth + 1)
    header = f"{indent}{label}:"
    if node.min_elements:
        header += f" # Required, at least {node.min_elements}"
    prototype = node.prototype

    if isinstance(prototype, ScalarNode):
        lines.append(header if node.min_elements else f"{header} []")
        return

    lines.append(header)
    lines.append(f"{child_indent}# Prototype")
    if node.is_keyed:
        _write_node(prototype, depth=depth + 1, lines=lines, label=node.key_attribute or "name")
        return

    lines.append(f"{child_indent}-")
    assert isinstance(prototype, ArrayNode)
    for child in prototype.children:
        _write_node(child, depth=depth + 2, lines=lines, label=child.name)


def _enableable_hint(node: ArrayNode) -> str:
    if node.treat_true_like is None or node.treat_false_like is None:
        return ""
    return " # also accepts true/false"


__all__ = ["dump_reference", "render_scalar"]
