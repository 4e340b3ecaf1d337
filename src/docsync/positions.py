"""Source positions, text ranges and the line/column to offset index."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["InsertionSite", "Position", "PositionIndex", "Span", "TextRange"]


@dataclass(frozen=True, slots=True)
class Position:
    """A 1-indexed line and a 0-indexed column counted in characters."""

    line: int
    column: int


@dataclass(frozen=True, slots=True)
class Span:
    """Start and end positions of a stretch of source, such as a doc block."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True, order=True)
class TextRange:
    """Half-open ``[start, end)`` offsets into one text buffer."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            msg = f"range start {self.start} is after end {self.end}"
            raise ValueError(msg)

    @classmethod
    def empty(cls, offset: int) -> TextRange:
        """Return the zero-length range at ``offset``."""
        return cls(offset, offset)

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True, slots=True)
class InsertionSite:
    """Where rendered documentation lands in a primary file.

    Attributes
    ----------
    column : int
        Character column of the replaced comment, or of the declaration when
        nothing is replaced. Lines after the first are indented to it.
    range : TextRange
        The existing documentation block, or an empty range at the
        declaration start for a pure insertion.
    """

    column: int
    range: TextRange


class PositionIndex:
    """Resolve parser positions to offsets in an immutable text buffer.

    Parameters
    ----------
    text : str
        Full source text. Offsets returned by the index are indices into it.

    Examples
    --------
    >>> index = PositionIndex("fn a() {}\\n  fn b() {}\\n")
    >>> index.position(2, 2)
    12
    >>> index.position(2, 99)
    21
    >>> index.position(9, 0) is None
    True
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.lines: list[str] = []
        self._starts: list[int] = []
        offset = 0
        # Parsers count rows by "\n" only, so str.splitlines would disagree on "\f" and friends.
        for raw in text.split("\n"):
            self._starts.append(offset)
            self.lines.append(raw.removesuffix("\r"))
            offset += len(raw) + 1

    def __len__(self) -> int:
        return len(self.text)

    def position(self, line: int, column: int) -> int | None:
        """Return the offset of ``(line, column)``, or None when the line is out of range.

        Columns past the end of the line clamp to the end of the line.
        """
        index = line - 1
        if index < 0 or index >= len(self.lines):
            return None
        return self._starts[index] + min(max(column, 0), len(self.lines[index]))

    def range_for(self, start: Position, end: Position) -> TextRange | None:
        """Return the range between two positions, or None if either is unresolved."""
        start_offset = self.position(start.line, start.column)
        end_offset = self.position(end.line, end.column)
        if start_offset is None or end_offset is None or end_offset < start_offset:
            return None
        return TextRange(start_offset, end_offset)

    def span_range(self, span: Span) -> TextRange | None:
        """Return the range covered by ``span``, or None if either end is unresolved."""
        return self.range_for(span.start, span.end)
