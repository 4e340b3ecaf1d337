"""Parse Doxygen-style C documentation comments into structured comment XML.

The XML shape follows the one libclang produces for parsed comments::

    <Function>
      <Name>c_foo</Name>
      <Abstract><Para>Does foo.</Para></Abstract>
      <Parameters>
        <Parameter>
          <Name>n</Name><Index>0</Index><Direction isExplicit="0">in</Direction>
          <Discussion><Para>count</Para></Discussion>
        </Parameter>
      </Parameters>
      <ResultDiscussion><Para>zero on success</Para></ResultDiscussion>
      <Discussion><Para>More text.</Para></Discussion>
    </Function>

Inline ``\\a``, ``\\e`` and ``\\em`` words become ``<emphasized>``, ``\\b`` becomes
``<bold>`` and ``\\c``/``\\p`` become ``<monospaced>``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final
from xml.etree.ElementTree import Element, SubElement, tostring

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

__all__ = ["CommentKind", "StructuredComment", "comment_lines", "is_doc_comment", "parse_comment"]

_BLOCK_COMMAND_RE = re.compile(r"^[\\@](?P<cmd>[A-Za-z]+)(?P<dir>\[[^\]]*\])?(?:\s+(?P<rest>.*))?$")
_INLINE_RE = re.compile(r"(?<![\w@\\])[\\@](?P<cmd>em|a|e|b|c|p)\s+(?P<word>\S+)")
_PARAM_NAME_RE = re.compile(r"^(?P<name>[A-Za-z_]\w*(?:\s*,\s*[A-Za-z_]\w*)*|\.\.\.)(?:\s+(?P<rest>.*))?$")
_XML_INVALID_RE = re.compile(r"[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")

_INLINE_TAGS: Final[dict[str, str]] = {
    "a": "emphasized",
    "e": "emphasized",
    "em": "emphasized",
    "b": "bold",
    "c": "monospaced",
    "p": "monospaced",
}
_BRIEF_COMMANDS: Final[frozenset[str]] = frozenset({"brief", "short"})
_PARAM_COMMANDS: Final[frozenset[str]] = frozenset({"param", "arg"})
_RETURN_COMMANDS: Final[frozenset[str]] = frozenset({"return", "returns", "result"})
_PARAGRAPH_COMMANDS: Final[frozenset[str]] = frozenset(
    {
        "attention",
        "author",
        "authors",
        "bug",
        "copyright",
        "date",
        "deprecated",
        "details",
        "invariant",
        "note",
        "par",
        "post",
        "pre",
        "remark",
        "remarks",
        "retval",
        "sa",
        "see",
        "since",
        "throw",
        "throws",
        "exception",
        "todo",
        "version",
        "warning",
    }
)


class CommentKind(StrEnum):
    """Root element of the structured comment, by declaration kind."""

    FUNCTION = "Function"
    CLASS = "Class"
    ENUM = "Enum"
    TYPEDEF = "Typedef"
    VARIABLE = "Variable"


@dataclass(frozen=True, slots=True)
class StructuredComment:
    """A parsed documentation comment attached to one C declaration."""

    name: str
    kind: CommentKind
    xml: str

    def as_xml(self) -> str:
        return self.xml


@dataclass(slots=True)
class _Parameter:
    name: str | None
    direction: str | None
    paragraphs: list[str] = field(default_factory=list)


@dataclass(slots=True)
class _Sections:
    brief: list[str] = field(default_factory=list)
    discussion: list[str] = field(default_factory=list)
    parameters: list[_Parameter] = field(default_factory=list)
    returns: list[str] = field(default_factory=list)


def is_doc_comment(text: str) -> bool:
    """Return True for ``/**``, ``/*!``, ``///`` and ``//!`` comments."""
    if text.startswith(("/**", "/*!")):
        return not text.startswith(("/***", "/**/"))
    if text.startswith("///"):
        return not text.startswith("////")
    return text.startswith("//!")


def comment_lines(texts: Iterable[str]) -> list[str]:
    """Strip comment markers from a run of comments and return the content lines."""
    lines: list[str] = []
    for raw_text in texts:
        # Control characters such as form feeds cannot be carried in XML 1.0.
        text = _XML_INVALID_RE.sub("", raw_text)
        if text.startswith("/*"):
            body = text[3:].removesuffix("*/").removeprefix("<")
            for raw in body.split("\n"):
                line = raw.strip()
                if line.startswith("*"):
                    line = line[1:]
                lines.append(line.strip())
        else:
            body = text.rstrip("\r\n")[3:].removeprefix("<")
            lines.append(body.strip())
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return lines


def _split_sections(lines: Sequence[str]) -> _Sections:
    sections = _Sections()
    target: list[str] = sections.discussion
    pending: list[str] = []

    def flush() -> None:
        if pending:
            target.append("\n".join(pending))
            pending.clear()

    for line in lines:
        if not line:
            flush()
            target = sections.discussion
            continue
        command = _BLOCK_COMMAND_RE.match(line)
        name = command.group("cmd").lower() if command else ""
        rest = (command.group("rest") or "") if command else ""
        if command is not None and name in _BRIEF_COMMANDS:
            flush()
            target = sections.brief
        elif command is not None and name in _PARAM_COMMANDS:
            flush()
            named = _PARAM_NAME_RE.match(rest)
            parameter = _Parameter(
                name=named.group("name") if named else None,
                direction=(command.group("dir") or "").strip("[]").replace(" ", "") or None,
            )
            rest = (named.group("rest") or "") if named else rest
            sections.parameters.append(parameter)
            target = parameter.paragraphs
        elif command is not None and name in _RETURN_COMMANDS:
            flush()
            target = sections.returns
        elif command is not None and name in _PARAGRAPH_COMMANDS:
            flush()
            target = sections.discussion
        else:
            rest = line
        if rest:
            pending.append(rest)
    flush()
    return sections


def _append_text(parent: Element, last: Element | None, text: str) -> None:
    if not text:
        return
    if last is None:
        parent.text = (parent.text or "") + text
    else:
        last.tail = (last.tail or "") + text


def _para(parent: Element, text: str) -> Element:
    para = SubElement(parent, "Para")
    last: Element | None = None
    position = 0
    for match in _INLINE_RE.finditer(text):
        _append_text(para, last, text[position : match.start()])
        last = SubElement(para, _INLINE_TAGS[match.group("cmd")])
        last.text = match.group("word")
        position = match.end()
    _append_text(para, last, text[position:])
    return para


def _paragraphs(parent: Element, tag: str, paragraphs: Sequence[str]) -> None:
    if not paragraphs:
        return
    section = SubElement(parent, tag)
    for text in paragraphs:
        _para(section, text)


def parse_comment(texts: Sequence[str], name: str, kind: CommentKind) -> StructuredComment:
    """Parse a run of documentation comments into a :class:`StructuredComment`.

    Parameters
    ----------
    texts : Sequence[str]
        Raw comment texts, markers included, in source order.
    name : str
        Name of the documented declaration.
    kind : CommentKind
        Root element to emit.

    Returns
    -------
    StructuredComment
        The comment with its XML form.

    Examples
    --------
    >>> comment = parse_comment(["/** Does foo. */"], "c_foo", CommentKind.FUNCTION)
    >>> comment.as_xml()
    '<Function><Name>c_foo</Name><Abstract><Para>Does foo.</Para></Abstract></Function>'
    """
    sections = _split_sections(comment_lines(texts))
    if sections.brief:
        abstract, discussion = sections.brief, sections.discussion
    else:
        abstract, discussion = sections.discussion[:1], sections.discussion[1:]

    root = Element(kind.value)
    SubElement(root, "Name").text = name
    _paragraphs(root, "Abstract", abstract)
    if sections.parameters:
        params = SubElement(root, "Parameters")
        for index, parameter in enumerate(sections.parameters):
            entry = SubElement(params, "Parameter")
            if parameter.name is not None:
                SubElement(entry, "Name").text = parameter.name
            SubElement(entry, "Index").text = str(index)
            direction = SubElement(entry, "Direction", isExplicit="1" if parameter.direction else "0")
            direction.text = parameter.direction or "in"
            _paragraphs(entry, "Discussion", parameter.paragraphs)
    _paragraphs(root, "ResultDiscussion", sections.returns)
    _paragraphs(root, "Discussion", discussion)
    return StructuredComment(name=name, kind=kind, xml=tostring(root, encoding="unicode"))
