"""
geocoder-registry — configuration tree definition.

File: src/geocoder_registry/config/schema.py

Purpose
- Declare the accepted shape of geocoder registry configuration: providers,
  profiling and fake IP settings, with defaults and shorthand rules.

What should be included in this file
- ``build_schema(debug)``, a pure function returning the root node.
- The shorthand rewrites that belong to specific nodes (fake IP string, plugin id).

Functional requirements
- ``providers`` is keyed by provider name and needs at least one entry.
- ``profiling.enabled`` defaults to the debug flag.
- Plugin order is preserved exactly as declared.

Non-functional requirements
- Schema construction never fails and has no side effects.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

from geocoder_registry.config.nodes import (
    ArrayNode,
    PrototypedArrayNode,
    ScalarNode,
    ValueKind,
    enableable,
)
from geocoder_registry.config.normalizer import ConfigValidationResult, normalize
from geocoder_registry.constants import (
    FAKE_IP_KEY,
    PROFILING_KEY,
    PROVIDERS_KEY,
    ROOT_NODE_NAME,
)

PROVIDER_KEY_ATTRIBUTE: Final[str] = "name"

_NULLABLE_PROVIDER_FIELDS: Final[tuple[tuple[str, str | None], ...]] = (
    ("cache", "Service id of the cache pool used for this provider."),
    ("cache_lifetime", "Lifetime of cached results, in seconds."),
    ("cache_precision", "Precision of the coordinates to cache."),
    ("limit", "Default maximum number of results per query."),
    ("locale", "Default locale sent with each query."),
    ("logger", "Service id of the logger attached to this provider."),
)


def build_schema(debug: bool) -> ArrayNode:
    """Return the root node of the configuration tree for the given debug flag."""

    debug = bool(debug)
    return ArrayNode(
        ROOT_NODE_NAME,
        children=(
            _providers_node(),
            _profiling_node(debug),
            _fake_ip_node(debug),
        ),
    )


def process_configuration(raw: object, *, debug: bool) -> ConfigValidationResult:
    """Normalize a raw document against the schema built for ``debug``."""

    return normalize(build_schema(debug), raw)


def assert_valid_config(raw: object, *, debug: bool) -> dict[str, Any]:
    """Normalize ``raw`` and raise ``ConfigValidationError`` on failure."""

    return process_configuration(raw, debug=debug).unwrap()


def fake_ip_string_shorthand(value: object) -> object:
    """``fake_ip: "1.2.3.4"`` means ``fake_ip: {ip: "1.2.3.4"}``."""

    if isinstance(value, str):
        return {"ip": value}
    return value


def plugin_id_shorthand(value: object) -> object:
    """A bare service id in a plugin list means an enabled reference to it."""

    if isinstance(value, str):
        return {"reference": {"enabled": True, "id": value}}
    return value


def _providers_node() -> PrototypedArrayNode:
    provider = ArrayNode(
        "provider",
        children=(
            ScalarNode(
                "factory",
                ValueKind.STRING,
                required=True,
                cannot_be_empty=True,
                info="Service id of the factory that builds this provider.",
            ),
            ScalarNode(
                "options",
                ValueKind.VARIABLE,
                default={},
                info="Options handed verbatim to the provider factory.",
            ),
            *(ScalarNode(name, info=info) for name, info in _NULLABLE_PROVIDER_FIELDS),
            PrototypedArrayNode(
                "aliases",
                ScalarNode("alias", ValueKind.STRING),
                info="Additional service ids under which this provider is registered.",
            ),
            _plugins_node(),
        ),
        remappings=(("plugin", "plugins"),),
    )
    return PrototypedArrayNode(
        PROVIDERS_KEY,
        provider,
        key_attribute=PROVIDER_KEY_ATTRIBUTE,
        min_elements=1,
        info="Geocoding providers keyed by name.",
    )


def _plugins_node() -> PrototypedArrayNode:
    reference = enableable(
        "reference",
        ScalarNode(
            "id",
            ValueKind.STRING,
            required=True,
            cannot_be_empty=True,
            info="Service id of a plugin",
        ),
        default_enabled=False,
        info="Reference to a plugin service",
    )
    plugin = ArrayNode(
        "plugin",
        children=(reference,),
        before_normalization=(plugin_id_shorthand,),
    )
    return PrototypedArrayNode(
        "plugins",
        plugin,
        info="A list of plugin service ids. The order is important.",
    )


def _profiling_node(debug: bool) -> ArrayNode:
    return enableable(
        PROFILING_KEY,
        default_enabled=debug,
        null_enabled=debug,
        enable_on_mapping=False,
        info="Extend the debug profiler with information about requests.",
        enabled_info="Turn request profiling on or off. Defaults to debug mode.",
    )


def _fake_ip_node(debug: bool) -> ArrayNode:
    return enableable(
        FAKE_IP_KEY,
        ScalarNode("ip", ValueKind.STRING, info="Address substituted for the client IP."),
        default_enabled=debug,
        null_enabled=debug,
        before_normalization=(fake_ip_string_shorthand,),
        info="Replace the client IP with a fixed address, for local development.",
    )


def describe_schema(node: ArrayNode | PrototypedArrayNode | ScalarNode) -> Mapping[str, object]:
    """Return a JSON-friendly outline of ``node`` (kind, requiredness, children)."""

    if isinstance(node, ScalarNode):
        return {
            "kind": node.kind.value,
            "required": node.required,
            "default": node.default,
        }
    if isinstance(node, PrototypedArrayNode):
        return {
            "kind": "keyed_mapping" if node.is_keyed else "sequence",
            "min_elements": node.min_elements,
            "prototype": describe_schema(node.prototype),
        }
    return {
        "kind": "mapping",
        "children": {child.name: describe_schema(child) for child in node.children},
    }


__all__ = [
    "PROVIDER_KEY_ATTRIBUTE",
    "assert_valid_config",
    "build_schema",
    "describe_schema",
    "fake_ip_string_shorthand",
    "plugin_id_shorthand",
    "process_configuration",
]
