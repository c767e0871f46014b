"""Compatibility entry point delegating to the Typer-powered CLI."""

from __future__ import annotations

from typing import Iterable

from orgchart.cli.main import run


def main(argv: Iterable[str] | None = None) -> int:
    """Execute the orgchart CLI via the Typer application."""

    return run(argv)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
