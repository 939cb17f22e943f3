"""Command-line interface router for geocoder-registry."""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Final

import yaml

from geocoder_registry.config import (
    ConfigLoadError,
    ConfigValidationError,
    GeocoderConfig,
    build_schema,
    dump_reference,
    load_config,
    redact_config,
    resolve_debug_flag,
)
from geocoder_registry.config.errors import ROOT_PATH
from geocoder_registry.config.schema import describe_schema
from geocoder_registry.constants import DEBUG_ENV_VAR, LOG_LEVEL_ENV_VAR
from geocoder_registry.main import ExitCode
from geocoder_registry.observability.logging import setup_logging
from geocoder_registry.ui.render import CLIRenderer, create_renderer

DEFAULT_LOG_LEVEL: Final[str] = "WARNING"
LOAD_ERROR_RULE: Final[str] = "load_error"


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = int(ExitCode.CONFIG_ERROR)

    def __str__(self) -> str:
        return self.message


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router."""

    parser = argparse.ArgumentParser(
        prog="geocoder-config",
        description=(
            "geocoder-config — validate and normalize geocoder provider registries.\n\n"
            "Common workflows:\n"
            "  geocoder-config validate geocoder.yaml       Print the canonical config\n"
            "  geocoder-config validate base.yaml dev.yaml  Merge files, later wins\n"
            "  geocoder-config reference                    Show every key with defaults\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    debug_group = common.add_mutually_exclusive_group()
    debug_group.add_argument(
        "--debug",
        dest="debug",
        action="store_const",
        const=True,
        default=None,
        help=f"Use debug-mode defaults (default: ${DEBUG_ENV_VAR} or off).",
    )
    debug_group.add_argument(
        "--no-debug",
        dest="debug",
        action="store_const",
        const=False,
        help="Force production defaults.",
    )
    common.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    common.add_argument(
        "--log-level",
        default=None,
        help=f"Log level for diagnostics on stderr (default: ${LOG_LEVEL_ENV_VAR} or WARNING).",
    )
    common.add_argument(
        "--log-format",
        choices=("json", "text"),
        default="text",
        help="Diagnostic log line format.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # validate ------------------------------------------------------------
    validate_parser = subparsers.add_parser(
        "validate",
        parents=[common],
        help="Load, merge and normalize config files",
        description="Load one or more config files, merge them in order and print the result.",
    )
    validate_parser.add_argument("paths", nargs="+", help="YAML, TOML or JSON config files")
    validate_parser.add_argument(
        "--show-secrets",
        action="store_true",
        default=False,
        help="Print secret-looking option values instead of <redacted>.",
    )
    validate_parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        default=False,
        help="Only report success or failure.",
    )
    validate_parser.set_defaults(handler=_cmd_validate)

    # reference -----------------------------------------------------------
    reference_parser = subparsers.add_parser(
        "reference",
        parents=[common],
        help="Print the annotated configuration reference",
        description="Print every accepted key with its default and description.",
    )
    reference_parser.set_defaults(handler=_cmd_reference)

    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return int(ExitCode.CONFIG_ERROR)

    try:
        _configure_logging(namespace)
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_validate(args: argparse.Namespace) -> int:
    try:
        debug = resolve_debug_flag(args.debug)
        document = load_config(args.paths, debug=debug)
    except ConfigValidationError as exc:
        return _report_invalid(args, exc)
    except ConfigLoadError as exc:
        if not args.json:
            raise
        _emit_json({"command": "validate", "error": _load_error_payload(exc)})
        return int(ExitCode.CONFIG_ERROR)

    shown = document if args.show_secrets else redact_config(document)
    if args.json:
        _emit_json({"command": "validate", "debug": debug, "config": shown})
        return int(ExitCode.SUCCESS)

    renderer = _get_renderer(args)
    typed = GeocoderConfig.from_document(document)
    renderer.ok(f"{len(typed.providers)} provider(s) valid (debug={'on' if debug else 'off'})")
    if args.quiet:
        return int(ExitCode.SUCCESS)

    renderer.table(
        ("Provider", "Factory", "Plugins"),
        [
            (spec.name, spec.factory, ", ".join(spec.enabled_plugin_ids) or "-")
            for spec in typed.providers
        ],
    )
    renderer.section("Canonical config:")
    renderer.text(yaml.safe_dump(shown, sort_keys=False, default_flow_style=False))
    return int(ExitCode.SUCCESS)


def _cmd_reference(args: argparse.Namespace) -> int:
    debug = resolve_debug_flag(args.debug)
    schema = build_schema(debug)
    if args.json:
        _emit_json({"command": "reference", "debug": debug, "schema": describe_schema(schema)})
        return int(ExitCode.SUCCESS)

    _get_renderer(args).text(dump_reference(schema))
    return int(ExitCode.SUCCESS)


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _report_invalid(args: argparse.Namespace, exc: ConfigValidationError) -> int:
    if args.json:
        _emit_json({"command": "validate", "error": exc.issue.to_dict()})
    else:
        renderer = _get_renderer(args)
        renderer.fail(f"{exc.path}: {exc.message} [{exc.rule}]")
    return int(ExitCode.CONFIG_ERROR)


def _load_error_payload(exc: ConfigLoadError) -> dict[str, str]:
    return {"path": exc.source or ROOT_PATH, "rule": LOAD_ERROR_RULE, "message": exc.message}


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=bool(getattr(args, "no_color", False)))


def _configure_logging(args: argparse.Namespace) -> None:
    level = args.log_level or os.environ.get(LOG_LEVEL_ENV_VAR) or DEFAULT_LOG_LEVEL
    try:
        setup_logging(level, json_output=args.log_format == "json")
    except ValueError as exc:
        raise CLIError(str(exc)) from exc


__all__ = ["CLIError", "build_parser", "run_cli"]
