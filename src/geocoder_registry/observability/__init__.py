"""Public observability primitives: structured logging setup and formatters."""

from geocoder_registry.observability.logging import (
    JsonLineFormatter,
    KeyValueFormatter,
    parse_log_level,
    setup_logging,
)

__all__ = [
    "JsonLineFormatter",
    "KeyValueFormatter",
    "parse_log_level",
    "setup_logging",
]
