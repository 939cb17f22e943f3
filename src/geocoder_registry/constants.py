"""Stable constants shared across the configuration layer and CLI."""

from __future__ import annotations

from typing import Final

# Top-level keys of a configuration document.
ROOT_NODE_NAME: Final[str] = "geocoder"
PROVIDERS_KEY: Final[str] = "providers"
PROFILING_KEY: Final[str] = "profiling"
FAKE_IP_KEY: Final[str] = "fake_ip"

# Environment variables read by the loader and CLI.
ENV_PREFIX: Final[str] = "GEOCODER_"
DEBUG_ENV_VAR: Final[str] = f"{ENV_PREFIX}DEBUG"
LOG_LEVEL_ENV_VAR: Final[str] = f"{ENV_PREFIX}LOG_LEVEL"

# File suffixes understood by the loader.
YAML_SUFFIXES: Final[frozenset[str]] = frozenset({".yaml", ".yml"})
TOML_SUFFIXES: Final[frozenset[str]] = frozenset({".toml"})
JSON_SUFFIXES: Final[frozenset[str]] = frozenset({".json"})

__all__ = [
    "DEBUG_ENV_VAR",
    "ENV_PREFIX",
    "FAKE_IP_KEY",
    "JSON_SUFFIXES",
    "LOG_LEVEL_ENV_VAR",
    "PROFILING_KEY",
    "PROVIDERS_KEY",
    "ROOT_NODE_NAME",
    "TOML_SUFFIXES",
    "YAML_SUFFIXES",
]
