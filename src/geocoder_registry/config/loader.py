"""
geocoder-registry — configuration file loader.

File: src/geocoder_registry/config/loader.py

Purpose
- Read one or more configuration files, resolve the debug flag and hand the raw
  documents to the normalizer.

What should be included in this file
- YAML (PyYAML ``safe_load``), TOML (``tomllib``) and JSON parsing by suffix.
- ``${NAME}`` / ``${NAME:-default}`` environment interpolation inside strings.
- Unwrapping of the optional ``geocoder`` root key.
- Debug-flag precedence: explicit argument > ``GEOCODER_DEBUG`` > false.

Functional requirements
- Files are merged in the order given; later files win for scalars.
- Load failures surface as ``ConfigLoadError``; schema failures as
  ``ConfigValidationError`` subclasses.

Non-functional requirements
- Deterministic: the same files and environment always give the same document.
"""

from __future__ import annotations

import json
import os
import re
import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final

import structlog
import yaml

from geocoder_registry.config.normalizer import process_configs
from geocoder_registry.config.schema import build_schema
from geocoder_registry.constants import (
    DEBUG_ENV_VAR,
    JSON_SUFFIXES,
    ROOT_NODE_NAME,
    TOML_SUFFIXES,
    YAML_SUFFIXES,
)

logger = structlog.get_logger(__name__)

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off", ""})
_ENV_TOKEN_RE: Final[re.Pattern[str]] = re.compile(
    r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-(.*?))?\}"
)


class ConfigLoadError(ValueError):
    """Raised when a config file cannot be read, parsed or interpolated.

    ``source`` names the offending file when the failure belongs to one.
    """

    def __init__(self, message: str, *, source: str | Path | None = None) -> None:
        self.message = message
        self.source = None if source is None else str(source)
        super().__init__(message)


def load_config(
    config_paths: str | Path | Sequence[str | Path],
    *,
    debug: bool | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Load, merge and normalize config files into the canonical document."""

    env_map = dict(os.environ if environ is None else environ)
    paths = _as_path_list(config_paths)
    resolved_debug = resolve_debug_flag(debug, environ=env_map)

    raws = [load_raw_document(path, environ=env_map) for path in paths]
    logger.debug(
        "config_files_loaded",
        files=[path.as_posix() for path in paths],
        debug=resolved_debug,
    )
    return process_configs(build_schema(resolved_debug), raws).unwrap()


def load_raw_document(path: str | Path, *, environ: Mapping[str, str] | None = None) -> object:
    """Parse a single file and return its raw (not yet normalized) document."""

    env_map = dict(os.environ if environ is None else environ)
    resolved = Path(path).expanduser().resolve()
    parsed = _parse_file(resolved)
    return unwrap_root(interpolate_env(parsed, env_map, source=resolved))


def resolve_debug_flag(
    debug: bool | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> bool:
    if debug is not None:
        return bool(debug)

    env_map = os.environ if environ is None else environ
    raw = env_map.get(DEBUG_ENV_VAR)
    if raw is None:
        return False
    lowered = raw.strip().lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise ConfigLoadError(
        f"{DEBUG_ENV_VAR} must be a boolean (true/false/1/0/yes/no/on/off), got {raw!r}"
    )


def unwrap_root(document: object) -> object:
    """Strip a ``geocoder:`` wrapper when it is the document's only key."""

    if isinstance(document, Mapping) and set(document) == {ROOT_NODE_NAME}:
        return document[ROOT_NODE_NAME]
    return document


def interpolate_env(value: object, environ: Mapping[str, str], *, source: Path | None = None) -> object:
    """Replace ``${NAME}`` tokens in every string of ``value``."""

    if isinstance(value, Mapping):
        return {key: interpolate_env(item, environ, source=source) for key, item in value.items()}
    if isinstance(value, list):
        return [interpolate_env(item, environ, source=source) for item in value]
    if isinstance(value, str):
        return _interpolate_string(value, environ, source)
    return value


def _interpolate_string(value: str, environ: Mapping[str, str], source: Path | None) -> str:
    if "${" not in value:
        return value

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        default = match.group(2)
        resolved = environ.get(name)
        if resolved is not None:
            return resolved
        if default is not None:
            return default
        where = f" in {source}" if source is not None else ""
        raise ConfigLoadError(
            f"missing environment variable {name!r} referenced by {match.group(0)!r}{where}",
            source=source,
        )

    return _ENV_TOKEN_RE.sub(_replace, value)


def _as_path_list(config_paths: str | Path | Sequence[str | Path]) -> list[Path]:
    if isinstance(config_paths, (str, Path)):
        return [Path(config_paths)]
    paths = [Path(item) for item in config_paths]
    if not paths:
        raise ConfigLoadError("at least one config file is required")
    return paths


def _parse_file(path: Path) -> object:
    if not path.exists():
        raise ConfigLoadError(f"config file not found: {path}", source=path)

    suffix = path.suffix.lower()
    try:
        if suffix in YAML_SUFFIXES:
            with path.open("r", encoding="utf-8") as handle:
                return yaml.safe_load(handle)
        if suffix in TOML_SUFFIXES:
            with path.open("rb") as handle:
                return tomllib.load(handle)
        if suffix in JSON_SUFFIXES:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"invalid YAML in {path}: {exc}", source=path) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}", source=path) from exc
    except json.JSONDecodeError as exc:
        raise ConfigLoadError(f"invalid JSON in {path}: {exc}", source=path) from exc
    except UnicodeDecodeError as exc:
        raise ConfigLoadError(f"config file {path} is not valid UTF-8: {exc}", source=path) from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}", source=path) from exc

    supported = ", ".join(sorted(YAML_SUFFIXES | TOML_SUFFIXES | JSON_SUFFIXES))
    raise ConfigLoadError(
        f"unsupported config format {suffix!r} for {path}; expected {supported}", source=path
    )


__all__ = [
    "ConfigLoadError",
    "interpolate_env",
    "load_config",
    "load_raw_document",
    "resolve_debug_flag",
    "unwrap_root",
]
