"""Module entrypoint for ``python -m geocoder_registry``."""

from __future__ import annotations

from geocoder_registry.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
