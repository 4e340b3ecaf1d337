"""Expand primary and secondary path patterns and read their sources."""

from __future__ import annotations

import glob
from pathlib import Path
from typing import TYPE_CHECKING

from docsync.errors import PatternExpansionError, SourceIOError

if TYPE_CHECKING:
    from collections.abc import Iterable

__all__ = ["expand_patterns", "read_source"]


def expand_patterns(patterns: Iterable[str]) -> list[Path]:
    """Expand glob ``patterns`` to regular files.

    Each pattern is expanded with ``**`` support and its matches are sorted;
    patterns keep their command-line order. Directories are skipped and a
    pattern matching nothing contributes nothing.

    Parameters
    ----------
    patterns : Iterable[str]
        Glob patterns, or plain paths.

    Returns
    -------
    list[Path]
        Matching files, without duplicates.

    Raises
    ------
    PatternExpansionError
        If a pattern is empty or cannot be expanded.
    """
    seen: set[Path] = set()
    files: list[Path] = []
    for pattern in patterns:
        if not pattern.strip():
            message = "Empty path pattern"
            raise PatternExpansionError(message, context={"pattern": pattern})
        try:
            matches = sorted(glob.glob(pattern, recursive=True))
        except (OSError, ValueError) as exc:
            message = f"Unable to expand pattern '{pattern}': {exc}"
            raise PatternExpansionError(message, cause=exc, context={"pattern": pattern}) from exc
        for match in matches:
            path = Path(match)
            if not path.is_file() or path in seen:
                continue
            seen.add(path)
            files.append(path)
    return files


def read_source(path: Path, encoding: str = "utf-8") -> str:
    """Read ``path`` without translating line endings.

    Raises
    ------
    SourceIOError
        If the file cannot be opened or decoded.
    """
    try:
        with path.open(encoding=encoding, newline="") as handle:
            return handle.read()
    except (OSError, UnicodeError) as exc:
        message = f"Failed to read {path}: {exc}"
        raise SourceIOError(message, cause=exc, context={"path": str(path)}) from exc
