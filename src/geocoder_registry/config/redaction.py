"""Recursive masking of secret-looking keys in configuration documents."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Final

REDACTED_VALUE: Final[str] = "<redacted>"

_CAMEL_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

_SENSITIVE_KEY_TOKENS: Final[frozenset[str]] = frozenset(
    {
        "secret",
        "token",
        "password",
        "passwd",
        "key",
        "apikey",
        "private",
        "credential",
        "credentials",
        "auth",
        "signature",
    }
)
_SENSITIVE_KEY_PHRASES: Final[tuple[str, ...]] = (
    "api_key",
    "access_token",
    "refresh_token",
    "client_secret",
    "private_key",
    "password",
    "secret",
)


def redact_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Return a redacted deep copy suitable for logs and CLI output."""

    if not isinstance(config, Mapping):
        return {}
    redacted = _redact_value(config)
    if isinstance(redacted, dict):
        return redacted
    return {}


def looks_sensitive_key(key: str) -> bool:
    normalized = _normalize_key(key)
    if any(phrase in normalized for phrase in _SENSITIVE_KEY_PHRASES):
        return True
    tokens = tuple(token for token in normalized.split("_") if token)
    return any(token in _SENSITIVE_KEY_TOKENS for token in tokens)


def _redact_value(value: object) -> object:
    if isinstance(value, Mapping):
        out: dict[str, object] = {}
        for key, item in value.items():
            name = str(key)
            out[name] = REDACTED_VALUE if _is_secret_entry(name, item) else _redact_value(item)
        return out
    if isinstance(value, (list, tuple)):
        return [_redact_value(item) for item in value]
    return value


def _is_secret_entry(key: str, value: object) -> bool:
    # Containers under a sensitive-looking key are walked rather than masked whole.
    if isinstance(value, (Mapping, list, tuple)) or value is None:
        return False
    return looks_sensitive_key(key)


def _normalize_key(key: str) -> str:
    with_boundaries = _CAMEL_CASE_BOUNDARY.sub(r"\1_\2", key.strip())
    return _NON_ALNUM.sub("_", with_boundaries.lower()).strip("_")


__all__ = ["REDACTED_VALUE", "looks_sensitive_key", "redact_config"]
