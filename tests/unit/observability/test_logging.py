"""
geocoder-registry — unit tests for observability logging

File: tests/unit/observability/test_logging.py

Purpose
- Validate that structlog events from the config layer land as redacted lines on
  the configured stream.

What this test file should cover
- JSON line validity and field redaction.
- Key/value text format.
- Level filtering and unknown level rejection.

Non-functional requirements
- Deterministic; handlers are reset after each test.
"""

from __future__ import annotations

import io
import json
import logging
from typing import TYPE_CHECKING

import pytest
import structlog

from geocoder_registry.config.schema import process_configuration
from geocoder_registry.observability.logging import (
    JsonLineFormatter,
    KeyValueFormatter,
    parse_log_level,
    setup_logging,
)

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    logger = logging.getLogger("geocoder_registry")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    structlog.reset_defaults()


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="geocoder_registry.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="config_loaded",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_emits_one_redacted_object() -> None:
    line = JsonLineFormatter().format(_record(api_key="k-123", providers=["acme"], ratio=float("inf")))

    event = json.loads(line)
    assert event["level"] == "INFO"
    assert event["logger"] == "geocoder_registry.test"
    assert event["message"] == "config_loaded"
    assert event["timestamp"].endswith("Z")
    assert event["fields"] == {
        "api_key": "<redacted>",
        "providers": ["acme"],
        "ratio": "<non-finite>",
    }
    assert "\n" not in line


def test_key_value_formatter() -> None:
    line = KeyValueFormatter().format(_record(path="providers", password="p"))

    assert line == (
        'INFO geocoder_registry.test: config_loaded password="<redacted>" path="providers"'
    )


def test_structlog_events_are_routed_to_stream() -> None:
    stream = io.StringIO()
    setup_logging("INFO", json_output=True, stream=stream)

    result = process_configuration({"providers": {}}, debug=False)

    assert not result.is_valid
    lines = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert len(lines) == 1
    assert lines[0]["message"] == "config_rejected"
    assert lines[0]["logger"] == "geocoder_registry.config.normalizer"
    assert lines[0]["fields"] == {
        "path": "providers",
        "reason": "must contain at least 1 entry",
        "rule": "empty_collection",
    }


def test_level_filtering_drops_debug_events() -> None:
    stream = io.StringIO()
    setup_logging("WARNING", json_output=False, stream=stream)

    process_configuration({"providers": {"acme": {"factory": "f"}}}, debug=False)
    process_configuration({}, debug=False)

    assert stream.getvalue() == ""


def test_debug_level_reports_normalized_documents() -> None:
    stream = io.StringIO()
    setup_logging("debug", json_output=False, stream=stream)

    process_configuration({"providers": {"b": {"factory": "f"}, "a": {"factory": "f"}}}, debug=False)

    output = stream.getvalue()
    assert output.startswith("DEBUG geocoder_registry.config.normalizer: config_normalized")
    assert 'providers=["a", "b"]' in output
    assert "documents=1" in output


def test_parse_log_level() -> None:
    assert parse_log_level("info") == logging.INFO
    assert parse_log_level(" Warning ") == logging.WARNING
    assert parse_log_level(logging.DEBUG) == logging.DEBUG
    with pytest.raises(ValueError, match="unknown log level"):
        parse_log_level("chatty")
