"""Splice rendered documentation into primary sources and write the results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from docsync.errors import OverlappingRangesError, SourceIOError
from docsync.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path

    from docsync.positions import InsertionSite, TextRange

__all__ = [
    "ApplyResult",
    "Replacement",
    "apply_docs",
    "check_disjoint",
    "detect_newline",
    "plan_replacements",
    "reindent",
    "splice",
    "write_result",
]

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Replacement:
    """Text to put in place of ``range``."""

    text: str
    range: TextRange


@dataclass(frozen=True, slots=True)
class ApplyResult:
    """Outcome of splicing one file.

    Attributes
    ----------
    changed : bool
        True when at least one non-empty body was spliced.
    text : str
        The buffer after splicing.
    replacements : int
        Number of sites that received documentation.
    """

    changed: bool
    text: str
    replacements: int = 0


def reindent(body: str, column: int, newline: str = "\n") -> str:
    """Align a rendered body to a site at ``column``.

    Lines after the first are prefixed with ``column`` spaces (the first lands
    at the site's existing column), and a line break plus ``column`` spaces is
    appended so the text following the site keeps its column. Lines are joined
    with ``newline``.

    Examples
    --------
    >>> reindent("/// a\\n/// b", 4)
    '/// a\\n    /// b\\n    '
    >>> reindent("/// a", 0, "\\r\\n")
    '/// a\\r\\n'
    """
    indent = " " * column
    lines = body.split("\n")
    return newline.join([lines[0], *(indent + line for line in lines[1:])]) + newline + indent


def detect_newline(text: str) -> str:
    """Return the line ending of the first line of ``text``, ``"\\n"`` by default."""
    end = text.find("\n")
    return "\r\n" if end > 0 and text[end - 1] == "\r" else "\n"


def plan_replacements(
    sites: Mapping[str, Sequence[InsertionSite]],
    bodies: Mapping[str, str],
    newline: str = "\n",
) -> list[Replacement]:
    """Pair every site of a resolved alias with its reindented body.

    Aliases whose body is empty or missing contribute nothing. The result is
    sorted by range start.
    """
    replacements = [
        Replacement(reindent(body, site.column, newline), site.range)
        for alias, alias_sites in sites.items()
        if (body := bodies.get(alias, ""))
        for site in alias_sites
    ]
    replacements.sort(key=lambda item: (item.range.start, item.range.end))
    return replacements


def check_disjoint(replacements: Sequence[Replacement], length: int) -> None:
    """Verify sorted ``replacements`` are pairwise disjoint and inside ``[0, length]``.

    Two empty ranges at the same offset count as overlapping, since their
    order in the output would be ambiguous.

    Raises
    ------
    OverlappingRangesError
        If any range leaves the buffer or overlaps its predecessor.
    """
    previous: TextRange | None = None
    for item in replacements:
        current = item.range
        if current.start < 0 or current.end > length:
            message = f"range [{current.start}, {current.end}) is outside a buffer of length {length}"
            raise OverlappingRangesError(message, context={"start": current.start, "end": current.end})
        if previous is not None and (
            current.start < previous.end or (current.start == previous.start)
        ):
            message = (
                f"range [{current.start}, {current.end}) overlaps "
                f"[{previous.start}, {previous.end})"
            )
            raise OverlappingRangesError(message, context={"start": current.start, "end": current.end})
        previous = current


def splice(text: str, replacements: Sequence[Replacement]) -> str:
    """Apply sorted, disjoint ``replacements`` to a copy of ``text``, back to front."""
    check_disjoint(replacements, len(text))
    buffer = text
    for item in reversed(replacements):
        buffer = buffer[: item.range.start] + item.text + buffer[item.range.end :]
    return buffer


def apply_docs(
    text: str, sites: Mapping[str, Sequence[InsertionSite]], bodies: Mapping[str, str]
) -> ApplyResult:
    """Splice rendered ``bodies`` into ``text`` at the sites of each alias.

    Parameters
    ----------
    text : str
        Original primary source.
    sites : Mapping[str, Sequence[InsertionSite]]
        Sites per alias, as collected by the scanner.
    bodies : Mapping[str, str]
        Rendered documentation per alias; empty bodies leave sites untouched.
        Inserted lines use the line ending of the first line of ``text``.

    Returns
    -------
    ApplyResult
        The new buffer and whether anything was spliced.

    Raises
    ------
    OverlappingRangesError
        If two sites overlap.
    """
    replacements = plan_replacements(sites, bodies, detect_newline(text))
    if not replacements:
        return ApplyResult(changed=False, text=text)
    return ApplyResult(changed=True, text=splice(text, replacements), replacements=len(replacements))


def write_result(
    path: Path,
    original: str,
    updated: str,
    *,
    backup_suffix: str | None = None,
    encoding: str = "utf-8",
) -> Path | None:
    """Rewrite ``path`` with ``updated``, writing a backup of ``original`` first.

    Parameters
    ----------
    path : Path
        File to rewrite.
    original : str
        Content before splicing.
    updated : str
        Content after splicing.
    backup_suffix : str | None, optional
        Extension replacing the file's own for the backup (``.bk`` gives
        ``lib.bk`` for ``lib.rs``). No backup when None.
    encoding : str, optional
        Output encoding. Defaults to ``utf-8``.

    Returns
    -------
    Path | None
        The backup path, if one was written.

    Raises
    ------
    SourceIOError
        If either write fails.
    """
    backup_path: Path | None = None
    try:
        if backup_suffix is not None:
            backup_path = path.with_suffix(backup_suffix)
            with backup_path.open("w", encoding=encoding, newline="") as handle:
                handle.write(original)
        with path.open("w", encoding=encoding, newline="") as handle:
            handle.write(updated)
    except (OSError, UnicodeError) as exc:
        message = f"Failed to write {path}: {exc}"
        raise SourceIOError(message, cause=exc, context={"path": str(path)}) from exc
    LOGGER.info(
        "Rewrote source",
        extra={"operation": "write", "path": str(path), "backup": str(backup_path or "")},
    )
    return backup_path
