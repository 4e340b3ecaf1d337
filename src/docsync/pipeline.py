"""Three-phase synchronization run: scan, resolve, splice.

1. Every primary (Rust) file is read, parsed and scanned for aliased
   declarations.
2. The whole secondary (C) corpus is parsed and every needed alias is
   resolved and rendered.
3. Every primary file is spliced once and printed or rewritten.

Phase 2 completes before phase 3 starts, so the order in which primary files
are processed cannot affect the result.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import uuid4

from docsync.apply import apply_docs, write_result
from docsync.logging import get_logger, measure_duration, with_fields
from docsync.paths import expand_patterns, read_source
from docsync.render import render_comment
from docsync.resolver import CorpusResolver
from docsync.scanner import SiteMap, scan_aliases

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from pathlib import Path

    from docsync.comments import StructuredComment
    from docsync.settings import RunConfig

__all__ = [
    "FileOutcome",
    "RunReport",
    "SourceFile",
    "render_bodies",
    "resolve_aliases",
    "run",
    "scan_primary",
]

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class SourceFile:
    """A scanned primary file."""

    path: Path
    text: str
    sites: SiteMap


@dataclass(frozen=True, slots=True)
class FileOutcome:
    """What happened to one primary file."""

    path: Path
    changed: bool
    text: str
    written: bool = False
    backup: Path | None = None


@dataclass(slots=True)
class RunReport:
    """Summary of a completed run."""

    files: list[FileOutcome] = field(default_factory=list)
    resolved: list[str] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)

    @property
    def changed(self) -> list[Path]:
        return [outcome.path for outcome in self.files if outcome.changed]


def scan_primary(paths: Iterable[Path], *, encoding: str = "utf-8") -> list[SourceFile]:
    """Read and scan every primary file."""
    sources: list[SourceFile] = []
    for path in paths:
        text = read_source(path, encoding)
        sources.append(SourceFile(path=path, text=text, sites=scan_aliases(text, path)))
    return sources


def resolve_aliases(
    needed: Iterable[str],
    paths: Iterable[Path],
    *,
    encoding: str = "utf-8",
    strict: bool = False,
) -> dict[str, StructuredComment | None]:
    """Resolve ``needed`` aliases over the secondary corpus; first match wins."""
    resolver = CorpusResolver(needed, strict=strict)
    for path in paths:
        resolver.add_source(read_source(path, encoding), path)
    return resolver.resolved


def render_bodies(
    resolved: Mapping[str, StructuredComment | None], *, marker: str = "///"
) -> dict[str, str]:
    """Render every resolved alias; unresolved aliases map to ``""``."""
    return {
        alias: render_comment(comment, marker=marker) if comment is not None else ""
        for alias, comment in resolved.items()
    }


def run(config: RunConfig, emit: Callable[[str], None] = print) -> RunReport:
    """Run one synchronization.

    Parameters
    ----------
    config : RunConfig
        Patterns, flags and settings.
    emit : Callable[[str], None], optional
        Receives ``"<path>:\\n<content>"`` for each primary file when not
        rewriting in place. Defaults to :func:`print`.

    Returns
    -------
    RunReport
        Per-file outcomes and alias resolution summary.

    Raises
    ------
    DocSyncError
        On the first fatal error; nothing after it is processed.
    """
    settings = config.settings
    report = RunReport()
    with with_fields(LOGGER, run_id=uuid4().hex, operation="sync") as log:
        if config.backup and not config.in_place:
            log.warning("--backup has no effect without --in-place")

        started = time.monotonic()
        sources = scan_primary(expand_patterns(config.rust_patterns), encoding=settings.encoding)
        needed = sorted({alias for source in sources for alias in source.sites})
        log.info(
            "Scanned primary corpus",
            extra={"files": len(sources), "aliases": len(needed), "duration_ms": measure_duration(started)},
        )

        started = time.monotonic()
        resolved = resolve_aliases(
            needed,
            expand_patterns(config.c_patterns),
            encoding=settings.encoding,
            strict=settings.strict_secondary_parse,
        )
        bodies = render_bodies(resolved, marker=settings.doc_marker)
        report.resolved = sorted(alias for alias, body in bodies.items() if body)
        report.unresolved = sorted(alias for alias, body in bodies.items() if not body)
        log.info(
            "Resolved secondary corpus",
            extra={
                "resolved": len(report.resolved),
                "unresolved": report.unresolved,
                "duration_ms": measure_duration(started),
            },
        )

        for source in sources:
            result = apply_docs(source.text, source.sites, bodies)
            outcome = FileOutcome(path=source.path, changed=result.changed, text=result.text)
            if not config.in_place:
                emit(f"{source.path}:\n{result.text}")
            elif result.changed:
                backup = write_result(
                    source.path,
                    source.text,
                    result.text,
                    backup_suffix=settings.backup_suffix if config.write_backups else None,
                    encoding=settings.encoding,
                )
                outcome = FileOutcome(
                    path=source.path, changed=True, text=result.text, written=True, backup=backup
                )
            report.files.append(outcome)
            log.debug(
                "Spliced source",
                extra={"path": str(source.path), "replacements": result.replacements},
            )
    return report
