"""Command-line interface for copying C documentation into Rust sources.

Any Rust function, method, struct, enum, variant or constant annotated with
``#[doc(alias = "c_name")]`` receives the documentation comment of the C
declaration named ``c_name``.
"""

from __future__ import annotations

from typing import Annotated

import typer

from docsync import __version__
from docsync.errors import DocSyncError
from docsync.logging import get_logger, setup_logging
from docsync.pipeline import run
from docsync.settings import RunConfig, load_settings

__all__ = ["app", "main"]

LOGGER = get_logger(__name__)

app = typer.Typer(
    help=f"Copy doc comments from C sources into Rust sources ({__version__}).",
    add_completion=False,
)

RustSourcesArgument = Annotated[
    list[str] | None,
    typer.Argument(
        help="Glob patterns of Rust sources to parse and insert doc comments into.",
        show_default=False,
    ),
]
InPlaceOption = Annotated[
    bool,
    typer.Option("--in-place", "-i", help="Rewrite Rust files in place."),
]
BackupOption = Annotated[
    bool,
    typer.Option("--backup", "-b", help="Backup files before writing. Must be used with -i."),
]
CSourcesOption = Annotated[
    list[str] | None,
    typer.Option(
        "--c-srcs",
        "-c",
        help="Glob pattern of C sources to pull doc comments from (repeatable).",
        show_default=False,
    ),
]
LogLevelOption = Annotated[
    str | None,
    typer.Option("--log-level", help="Override DOCSYNC_LOG_LEVEL.", show_default=False),
]


@app.command()
def main(
    rust_srcs: RustSourcesArgument = None,
    in_place: InPlaceOption = False,  # noqa: FBT002
    backup: BackupOption = False,  # noqa: FBT002
    c_srcs: CSourcesOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Copy doc comments from C declarations into aliased Rust declarations.

    Without --in-place every matched Rust file is printed as ``<path>:`` followed
    by its content.
    """
    try:
        overrides: dict[str, object] = {"log_level": log_level} if log_level else {}
        settings = load_settings(**overrides)
        setup_logging(settings.log_level)
        config = RunConfig(
            rust_patterns=tuple(rust_srcs or ()),
            c_patterns=tuple(c_srcs or ()),
            in_place=in_place,
            backup=backup,
            settings=settings,
        )
        run(config, emit=typer.echo)
    except DocSyncError as exc:
        LOGGER.debug("Run aborted", exc_info=True, extra={"operation": "cli", "code": str(exc.code)})
        typer.echo(f"error: {exc.message}", err=True)
        raise typer.Exit(code=int(exc.exit_status)) from exc
