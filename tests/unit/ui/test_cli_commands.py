"""
geocoder-registry — unit tests for the geocoder-config CLI

File: tests/unit/ui/test_cli_commands.py

Purpose
- Validate command routing, output contracts and exit codes in-process.

What this test file should cover
- ``validate`` JSON and text output, secret redaction, failure reporting.
- ``reference`` text and JSON output.
- Exit-code mapping for load errors and bad options.

Functional requirements
- No subprocesses; real config files under ``tmp_path``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
import structlog

from geocoder_registry.main import ExitCode, cli_entrypoint
from geocoder_registry.ui.cli import run_cli

if TYPE_CHECKING:
    from collections.abc import Iterator

REPO_ROOT = Path(__file__).resolve().parents[3]
SAMPLE_PATH = REPO_ROOT / "samples" / "geocoder.yaml"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("GEOCODER_DEBUG", raising=False)
    monkeypatch.delenv("GEOCODER_LOG_LEVEL", raising=False)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("ACME_API_KEY", "k-123")
    yield
    logger = logging.getLogger("geocoder_registry")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    structlog.reset_defaults()


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_validate_json_redacts_secrets(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = run_cli(["validate", str(SAMPLE_PATH), "--json"])

    assert exit_code == ExitCode.SUCCESS
    payload = json.loads(capsys.readouterr().out)
    assert payload["command"] == "validate"
    assert payload["debug"] is False
    config = payload["config"]
    assert config["providers"]["acme"]["options"] == {"api_key": "<redacted>", "region": "eu"}
    assert list(config["providers"]) == ["acme", "fallback"]
    assert config["fake_ip"] == {"enabled": True, "ip": "203.0.113.5"}


def test_validate_json_show_secrets(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = run_cli(["validate", str(SAMPLE_PATH), "--json", "--show-secrets", "--debug"])

    assert exit_code == ExitCode.SUCCESS
    payload = json.loads(capsys.readouterr().out)
    assert payload["debug"] is True
    assert payload["config"]["providers"]["acme"]["options"]["api_key"] == "k-123"
    assert payload["config"]["profiling"] == {"enabled": False}


def test_validate_text_output(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = run_cli(["validate", str(SAMPLE_PATH), "--no-color"])

    assert exit_code == ExitCode.SUCCESS
    out = capsys.readouterr().out
    assert "  OK  2 provider(s) valid (debug=off)" in out
    assert "geocoder.plugin.logger" in out
    assert "Canonical config:" in out
    assert "api_key: <redacted>" in out
    assert "k-123" not in out


def test_validate_quiet(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = run_cli(["validate", str(SAMPLE_PATH), "-q"])

    assert exit_code == ExitCode.SUCCESS
    assert capsys.readouterr().out.strip() == "OK  2 provider(s) valid (debug=off)"


def test_debug_env_is_honored(
    capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("GEOCODER_DEBUG", "1")
    path = _write(tmp_path / "geocoder.yaml", "providers:\n  acme:\n    factory: f\n")

    assert run_cli(["validate", str(path), "--json"]) == ExitCode.SUCCESS
    payload = json.loads(capsys.readouterr().out)
    assert payload["debug"] is True
    assert payload["config"]["profiling"] == {"enabled": True}

    assert run_cli(["validate", str(path), "--json", "--no-debug"]) == ExitCode.SUCCESS
    assert json.loads(capsys.readouterr().out)["debug"] is False


def test_validate_json_reports_first_violation(
    capsys: pytest.CaptureFixture[str], tmp_path: Path
) -> None:
    path = _write(tmp_path / "broken.yaml", "providers:\n  acme:\n    locale: en\n")

    exit_code = run_cli(["validate", str(path), "--json"])

    assert exit_code == ExitCode.CONFIG_ERROR
    payload = json.loads(capsys.readouterr().out)
    assert payload == {
        "command": "validate",
        "error": {
            "message": "missing required field",
            "path": "providers.acme.factory",
            "rule": "missing_required_field",
        },
    }


def test_validate_json_reports_load_errors(
    capsys: pytest.CaptureFixture[str], tmp_path: Path
) -> None:
    missing = tmp_path / "absent.yaml"

    exit_code = cli_entrypoint(["validate", str(missing), "--json"])

    assert exit_code == ExitCode.CONFIG_ERROR
    payload = json.loads(capsys.readouterr().out)
    assert payload["command"] == "validate"
    assert payload["error"]["path"] == str(missing.resolve())
    assert payload["error"]["rule"] == "load_error"
    assert payload["error"]["message"].startswith("config file not found")


def test_validate_json_reports_undecodable_file(
    capsys: pytest.CaptureFixture[str], tmp_path: Path
) -> None:
    path = tmp_path / "bad.toml"
    path.write_bytes(b"providers: \xff\xfe\n")

    exit_code = cli_entrypoint(["validate", str(path), "--json"])

    assert exit_code == ExitCode.CONFIG_ERROR
    captured = capsys.readouterr()
    assert json.loads(captured.out)["error"]["rule"] == "load_error"
    assert "Traceback" not in captured.err


def test_validate_json_reports_bad_debug_env(
    capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("GEOCODER_DEBUG", "maybe")

    exit_code = run_cli(["validate", str(SAMPLE_PATH), "--json"])

    assert exit_code == ExitCode.CONFIG_ERROR
    error = json.loads(capsys.readouterr().out)["error"]
    assert error["path"] == "<root>"
    assert "GEOCODER_DEBUG" in error["message"]


def test_undecodable_file_without_json_maps_to_config_error(
    capsys: pytest.CaptureFixture[str], tmp_path: Path
) -> None:
    path = tmp_path / "bad.yaml"
    path.write_bytes(b"providers: \xff\xfe\n")

    exit_code = cli_entrypoint(["validate", str(path)])

    assert exit_code == ExitCode.CONFIG_ERROR
    err = capsys.readouterr().err
    assert err.startswith("error: ")
    assert "Traceback" not in err


def test_unexpected_exception_maps_to_internal_error(
    capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    def _boom(argv: object = None) -> int:
        raise RuntimeError("boom")

    monkeypatch.setattr("geocoder_registry.ui.cli.run_cli", _boom)

    exit_code = cli_entrypoint(["reference"])

    assert exit_code == ExitCode.INTERNAL_ERROR
    assert "RuntimeError: boom" in capsys.readouterr().err


def test_validate_text_reports_failure(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    path = _write(tmp_path / "broken.yaml", "providers: {}\nbogus_key: 1\n")

    exit_code = run_cli(["validate", str(path)])

    assert exit_code == ExitCode.CONFIG_ERROR
    assert "FAIL  bogus_key: unrecognized key [schema_violation]" in capsys.readouterr().out


def test_validate_merges_multiple_files(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    override = _write(tmp_path / "override.json", '{"geocoder": {"profiling": true}}')

    exit_code = run_cli(["validate", str(SAMPLE_PATH), str(override), "--json"])

    assert exit_code == ExitCode.SUCCESS
    assert json.loads(capsys.readouterr().out)["config"]["profiling"] == {"enabled": True}


def test_reference_text(capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["reference"]) == ExitCode.SUCCESS

    out = capsys.readouterr().out
    assert out.startswith("geocoder:\n")
    assert "# Required" in out


def test_reference_json(capsys: pytest.CaptureFixture[str]) -> None:
    assert run_cli(["reference", "--json", "--debug"]) == ExitCode.SUCCESS

    payload = json.loads(capsys.readouterr().out)
    assert payload["command"] == "reference"
    assert payload["debug"] is True
    assert payload["schema"]["children"]["fake_ip"]["children"]["enabled"]["default"] is True


def test_missing_file_maps_to_config_error(
    capsys: pytest.CaptureFixture[str], tmp_path: Path
) -> None:
    exit_code = cli_entrypoint(["validate", str(tmp_path / "absent.yaml")])

    assert exit_code == ExitCode.CONFIG_ERROR
    assert "error: config file not found" in capsys.readouterr().err


def test_invalid_debug_env_maps_to_config_error(
    capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("GEOCODER_DEBUG", "maybe")

    exit_code = cli_entrypoint(["reference"])

    assert exit_code == ExitCode.CONFIG_ERROR
    assert "GEOCODER_DEBUG" in capsys.readouterr().err


def test_unknown_log_level_is_a_cli_error(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = run_cli(["reference", "--log-level", "chatty"])

    assert exit_code == ExitCode.CONFIG_ERROR
    assert "error: unknown log level" in capsys.readouterr().err


def test_missing_command_exits_with_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli_entrypoint([])

    assert exit_code == ExitCode.CONFIG_ERROR
    assert "usage:" in capsys.readouterr().err


def test_debug_log_level_writes_events_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = run_cli(["validate", str(SAMPLE_PATH), "-q", "--log-level", "DEBUG"])

    assert exit_code == ExitCode.SUCCESS
    captured = capsys.readouterr()
    assert "config_files_loaded" in captured.err
    assert "config_normalized" in captured.err
    assert "config_normalized" not in captured.out
