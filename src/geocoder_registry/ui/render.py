"""Output rendering abstraction for the geocoder-config CLI.

File: src/geocoder_registry/ui/render.py

Purpose
- Provide a thin rendering layer for CLI output with optional ANSI color.
- Respect NO_COLOR environment variable and --no-color CLI flag.

Functional requirements
- Plain-text rendering must always work; color is only a decoration.
"""

from __future__ import annotations

import os
import sys
from typing import IO, TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Sequence

_GREEN: Final[str] = "\x1b[32m"
_RED: Final[str] = "\x1b[31m"
_RESET: Final[str] = "\x1b[0m"


def _color_allowed(no_color_flag: bool, stream: IO[str]) -> bool:
    """Check whether color output should be attempted."""

    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


class CLIRenderer:
    """Thin CLI output renderer.

    Produces clean, deterministic plain-text output on ``stream`` (stdout by default).
    """

    def __init__(self, *, no_color: bool = False, stream: IO[str] | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self._color = _color_allowed(no_color, self._stream)

    def text(self, line: str) -> None:
        """Print plain text; a trailing newline in ``line`` is not doubled."""

        self._write(line.rstrip("\n"))

    def section(self, title: str) -> None:
        self._write(f"\n{title}")

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        """Print a formatted ASCII table."""

        if not rows:
            return

        col_count = len(headers)
        widths = [len(h) for h in headers]
        for row in rows:
            for i in range(min(len(row), col_count)):
                widths[i] = max(widths[i], len(str(row[i])))

        def _pad(cells: Sequence[str]) -> str:
            parts: list[str] = []
            for i in range(col_count):
                cell = str(cells[i]) if i < len(cells) else ""
                parts.append(cell.ljust(widths[i]))
            return "  ".join(parts).rstrip()

        self._write(f"  {_pad(list(headers))}")
        self._write(f"  {'  '.join('-' * w for w in widths)}")
        for row in rows:
            self._write(f"  {_pad(list(row))}")

    def ok(self, label: str) -> None:
        self._write(f"  {self._paint('OK', _GREEN)}  {label}")

    def fail(self, label: str) -> None:
        self._write(f"  {self._paint('FAIL', _RED)}  {label}")

    def _paint(self, text: str, color: str) -> str:
        if not self._color:
            return text
        return f"{color}{text}{_RESET}"

    def _write(self, line: str) -> None:
        print(line, file=self._stream)


def create_renderer(*, no_color: bool = False, stream: IO[str] | None = None) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(no_color=no_color, stream=stream)


__all__ = ["CLIRenderer", "create_renderer"]
