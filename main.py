"""Script entry point delegating to the Typer-powered siterecipes CLI."""

from __future__ import annotations

from typing import Iterable

from siterecipes.cli.main import app


def main(argv: Iterable[str] | None = None) -> int:
    """Execute the siterecipes CLI and return its exit code."""

    try:
        app(prog_name="siterecipes", args=list(argv) if argv is not None else None)
    except SystemExit as exc:
        if exc.code is None:
            return 0
        return exc.code if isinstance(exc.code, int) else 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
