"""
geocoder-registry config package public API.

File: src/geocoder_registry/config/__init__.py

Purpose
- Export the schema builder, normalizer, loader and public error types.

What should be included in this file
- Re-exports only; no side effects at import time.

Functional requirements
- Fail fast with a single structured validation error per rejected document.
"""

from geocoder_registry.config.errors import (
    ConfigValidationError,
    ConfigValidationIssue,
    EmptyCollection,
    MissingRequiredField,
    SchemaViolation,
    TypeMismatch,
)
from geocoder_registry.config.loader import (
    ConfigLoadError,
    load_config,
    load_raw_document,
    resolve_debug_flag,
)
from geocoder_registry.config.models import (
    FakeIpConfig,
    GeocoderConfig,
    PluginRef,
    ProfilingConfig,
    ProviderSpec,
)
from geocoder_registry.config.nodes import (
    ArrayNode,
    PrototypedArrayNode,
    ScalarNode,
    SchemaNode,
    ValueKind,
    enableable,
)
from geocoder_registry.config.normalizer import (
    ConfigValidationResult,
    normalize,
    process_configs,
)
from geocoder_registry.config.redaction import redact_config
from geocoder_registry.config.reference import dump_reference
from geocoder_registry.config.schema import (
    assert_valid_config,
    build_schema,
    process_configuration,
)

__all__ = [
    "ArrayNode",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "EmptyCollection",
    "FakeIpConfig",
    "GeocoderConfig",
    "MissingRequiredField",
    "PluginRef",
    "ProfilingConfig",
    "PrototypedArrayNode",
    "ProviderSpec",
    "ScalarNode",
    "SchemaNode",
    "SchemaViolation",
    "TypeMismatch",
    "ValueKind",
    "assert_valid_config",
    "build_schema",
    "dump_reference",
    "enableable",
    "load_config",
    "load_raw_document",
    "normalize",
    "process_configs",
    "process_configuration",
    "redact_config",
    "resolve_debug_flag",
]
