"""Find ``#[doc(alias = "...")]`` declarations and their documentation sites in Rust sources.

A declaration takes part in synchronization only when one of its outer
attributes is ``#[doc(alias = "name")]``. Its site is either the existing
documentation block (``///`` lines, ``/** */`` blocks or ``#[doc = "..."]``
attributes) or an empty range where a new block is inserted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from docsync.errors import PrimaryParseError
from docsync.logging import get_logger
from docsync.positions import InsertionSite, PositionIndex, Span, TextRange
from docsync.tscore import first_error, iter_nodes, load_language, node_text, parse_text, start_position

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from tree_sitter import Node

__all__ = [
    "DECLARATION_KINDS",
    "AliasAnnotation",
    "Annotation",
    "DocAnnotation",
    "OtherAttribute",
    "PlainComment",
    "SiteMap",
    "classify_annotation",
    "scan_aliases",
]

LOGGER = get_logger(__name__)

SiteMap = dict[str, list[InsertionSite]]

DECLARATION_KINDS: Final[frozenset[str]] = frozenset(
    {
        "function_item",
        "function_signature_item",
        "struct_item",
        "union_item",
        "type_item",
        "enum_item",
        "enum_variant",
        "const_item",
    }
)
"""Rust node types that may carry an alias."""

_LEADING_KINDS: Final[frozenset[str]] = frozenset({"attribute_item", "line_comment", "block_comment"})

_STRING = r'(?:"(?P<plain>(?:[^"\\]|\\.)*)"|r(?P<hashes>#*)"(?P<raw>.*?)"(?P=hashes))'
_ALIAS_RE = re.compile(rf"#\[\s*doc\s*\(\s*alias\s*=\s*{_STRING}\s*,?\s*\)\s*\]", re.DOTALL)
_DOC_ATTR_RE = re.compile(rf"#\[\s*doc\s*=\s*{_STRING}\s*\]", re.DOTALL)
_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F_]{1,8}\}|x[0-7][0-9a-fA-F]|\n\s*|.)", re.DOTALL)
_SIMPLE_ESCAPES: Final[dict[str, str]] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    "0": "\0",
    "'": "'",
    '"': '"',
}


@dataclass(frozen=True, slots=True)
class AliasAnnotation:
    """``#[doc(alias = "name")]``."""

    alias: str


@dataclass(frozen=True, slots=True)
class DocAnnotation:
    """An outer documentation comment or ``#[doc = "..."]`` attribute."""


@dataclass(frozen=True, slots=True)
class OtherAttribute:
    """Any other outer attribute, including malformed ``doc`` attributes."""


@dataclass(frozen=True, slots=True)
class PlainComment:
    """A regular or inner-documentation comment; not part of the declaration."""


Annotation = AliasAnnotation | DocAnnotation | OtherAttribute | PlainComment


def _unescape(body: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        escape = match.group(1)
        if escape.startswith("u{"):
            return chr(int(escape[2:-1].replace("_", ""), 16))
        if escape.startswith("x"):
            return chr(int(escape[1:], 16))
        if escape.startswith("\n"):
            return ""
        return _SIMPLE_ESCAPES.get(escape, match.group(0))

    return _ESCAPE_RE.sub(_replace, body)


def _string_value(match: re.Match[str]) -> str:
    if match.group("raw") is not None:
        return match.group("raw")
    return _unescape(match.group("plain"))


def classify_annotation(kind: str, text: str) -> Annotation:
    """Classify one node preceding a declaration.

    Parameters
    ----------
    kind : str
        Tree-sitter node type (``attribute_item``, ``line_comment`` or
        ``block_comment``).
    text : str
        Source text of the node.

    Returns
    -------
    Annotation
        The recognized shape. Malformed ``doc`` attributes classify as
        :class:`OtherAttribute`, the same as any unrelated attribute.

    Examples
    --------
    >>> classify_annotation("attribute_item", '#[doc(alias = "c_foo")]')
    AliasAnnotation(alias='c_foo')
    >>> classify_annotation("attribute_item", "#[doc(alias = 5)]")
    OtherAttribute()
    """
    match kind:
        case "line_comment":
            if text.startswith("///") and not text.startswith("////"):
                return DocAnnotation()
            return PlainComment()
        case "block_comment":
            if text.startswith("/**") and not text.startswith(("/***", "/**/")):
                return DocAnnotation()
            return PlainComment()
        case "attribute_item":
            alias = _ALIAS_RE.fullmatch(text)
            if alias is not None:
                return AliasAnnotation(_string_value(alias))
            if _DOC_ATTR_RE.fullmatch(text) is not None:
                return DocAnnotation()
            return OtherAttribute()
        case _:
            return PlainComment()


def _leading_nodes(node: Node) -> list[Node]:
    """Return the attributes and comments directly preceding ``node``, in order."""
    leading: list[Node] = []
    sibling = node.prev_sibling
    while sibling is not None and sibling.type in _LEADING_KINDS:
        leading.append(sibling)
        sibling = sibling.prev_sibling
    leading.reverse()
    return leading


def _doc_block(annotations: Sequence[Annotation]) -> tuple[int, int] | None:
    """Return ``(first, after_last)`` indices of the first run of doc annotations."""
    for first, annotation in enumerate(annotations):
        if isinstance(annotation, DocAnnotation):
            last = first
            while last + 1 < len(annotations) and isinstance(annotations[last + 1], DocAnnotation):
                last += 1
            return first, last + 1
    return None


def _site_for(
    index: PositionIndex, data: bytes, declaration: Node, leading: Sequence[Node], annotations: Sequence[Annotation]
) -> InsertionSite | None:
    block = _doc_block(annotations)
    if block is not None:
        first, after = block
        following = leading[after] if after < len(leading) else declaration
        start = start_position(data, leading[first])
        text_range = index.span_range(Span(start, start_position(data, following)))
        if text_range is not None:
            return InsertionSite(column=start.column, range=text_range)
    head = next(
        (node for node, ann in zip(leading, annotations, strict=True) if not isinstance(ann, PlainComment)),
        declaration,
    )
    start = start_position(data, head)
    offset = index.position(start.line, start.column)
    if offset is None:
        return None
    return InsertionSite(column=start.column, range=TextRange.empty(offset))


def scan_aliases(text: str, path: Path | str = "<memory>") -> SiteMap:
    """Collect documentation sites for every aliased declaration in one Rust file.

    Parameters
    ----------
    text : str
        Source of the file.
    path : Path | str, optional
        Path used in error messages.

    Returns
    -------
    SiteMap
        Mapping from alias to its sites, in discovery order.

    Raises
    ------
    PrimaryParseError
        If the file contains syntax errors.
    """
    tree, data = parse_text(load_language("rust"), text)
    error = first_error(tree.root_node)
    if error is not None:
        where = start_position(data, error)
        message = f"{path}:{where.line}:{where.column + 1}: unable to parse Rust source"
        raise PrimaryParseError(message, context={"path": str(path), "line": where.line})

    index = PositionIndex(text)
    sites: SiteMap = {}
    for node in iter_nodes(tree.root_node):
        if node.type not in DECLARATION_KINDS:
            continue
        leading = _leading_nodes(node)
        annotations = [classify_annotation(item.type, node_text(data, item)) for item in leading]
        alias = next((ann.alias for ann in annotations if isinstance(ann, AliasAnnotation)), None)
        if alias is None:
            continue
        site = _site_for(index, data, node, leading, annotations)
        if site is None:
            LOGGER.debug(
                "Dropped unresolvable site",
                extra={"operation": "scan", "path": str(path), "alias": alias},
            )
            continue
        sites.setdefault(alias, []).append(site)
    return sites
