"""Module entrypoint for ``python -m docsync``."""

from __future__ import annotations

from docsync.cli import app


def run() -> None:
    """Invoke the CLI."""
    app(prog_name="docsync")


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    run()
