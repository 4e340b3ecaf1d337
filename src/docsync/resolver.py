"""Resolve aliases to the documentation comments of C declarations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from docsync.comments import CommentKind, StructuredComment, is_doc_comment, parse_comment
from docsync.errors import SecondaryParseError
from docsync.logging import get_logger
from docsync.tscore import first_error, iter_nodes, load_language, node_text, parse_text, start_position

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path

    from tree_sitter import Node

__all__ = ["CorpusResolver", "declared_names"]

LOGGER = get_logger(__name__)

_WRAPPING_PARENTS: Final[frozenset[str]] = frozenset({"declaration", "type_definition"})
_NAME_KINDS: Final[frozenset[str]] = frozenset({"identifier", "type_identifier", "field_identifier"})


def _declarator_name(node: Node | None, data: bytes) -> tuple[str | None, bool]:
    """Return the declared name and whether a function declarator was crossed."""
    is_function = False
    while node is not None:
        if node.type in _NAME_KINDS:
            return node_text(data, node), is_function
        if node.type == "function_declarator":
            is_function = True
        inner = node.child_by_field_name("declarator")
        if inner is None and node.type == "parenthesized_declarator":
            inner = next(iter(node.named_children), None)
        node = inner
    return None, is_function


def _declares_tag(node: Node) -> bool:
    """Return True for a struct or enum definition or a bare forward declaration.

    A specifier used as the type of a function or variable only references the tag.
    """
    if node.child_by_field_name("body") is not None:
        return True
    parent = node.parent
    return parent is not None and parent.type == "translation_unit"


def declared_names(node: Node, data: bytes) -> Iterator[tuple[str, CommentKind]]:
    """Yield the documentable names introduced by ``node``.

    Functions (definitions and prototypes), structs, typedefs, enums and enum
    constants are documentable; variables and fields are not.
    """
    match node.type:
        case "function_definition":
            name, _ = _declarator_name(node.child_by_field_name("declarator"), data)
            if name is not None:
                yield name, CommentKind.FUNCTION
        case "declaration":
            for declarator in node.children_by_field_name("declarator"):
                name, is_function = _declarator_name(declarator, data)
                if name is not None and is_function:
                    yield name, CommentKind.FUNCTION
        case "type_definition":
            for declarator in node.children_by_field_name("declarator"):
                name, _ = _declarator_name(declarator, data)
                if name is not None:
                    yield name, CommentKind.TYPEDEF
        case "struct_specifier" | "enum_specifier" if not _declares_tag(node):
            return
        case "struct_specifier" | "enum_specifier" | "enumerator":
            name_node = node.child_by_field_name("name")
            if name_node is not None:
                kind = {
                    "struct_specifier": CommentKind.CLASS,
                    "enum_specifier": CommentKind.ENUM,
                    "enumerator": CommentKind.VARIABLE,
                }[node.type]
                yield node_text(data, name_node), kind
        case _:
            return


def _is_trailing(text: str) -> bool:
    return text[3:4] == "<"


def _leading_comments(anchor: Node, data: bytes) -> list[str]:
    """Return the documentation comment run directly above ``anchor``."""
    sibling = anchor.prev_sibling
    run: list[Node] = []
    while sibling is not None and sibling.type == "comment":
        text = node_text(data, sibling)
        if not is_doc_comment(text) or _is_trailing(text):
            if run:
                break
        elif text.startswith("/*"):
            if not run:
                run.append(sibling)
            break
        elif run and run[-1].start_point[0] - sibling.start_point[0] != 1:
            break
        else:
            run.append(sibling)
        sibling = sibling.prev_sibling
    run.reverse()
    return [node_text(data, node) for node in run]


def _trailing_comment(node: Node, data: bytes) -> list[str]:
    """Return a ``///<`` or ``/**<`` comment on the same line after an enum constant."""
    sibling = node.next_sibling
    if sibling is not None and sibling.type == ",":
        sibling = sibling.next_sibling
    if sibling is None or sibling.type != "comment":
        return []
    if sibling.start_point[0] != node.end_point[0]:
        return []
    text = node_text(data, sibling)
    if is_doc_comment(text) and _is_trailing(text):
        return [text]
    return []


def _doc_comments(node: Node, data: bytes) -> list[str]:
    anchor = node
    parent = node.parent
    if (
        node.type in {"struct_specifier", "enum_specifier"}
        and parent is not None
        and parent.type in _WRAPPING_PARENTS
    ):
        anchor = parent
    comments = _leading_comments(anchor, data)
    if not comments and node.type == "enumerator":
        comments = _trailing_comment(node, data)
    return comments


class CorpusResolver:
    """Walk C sources and resolve each needed alias to the first documented match.

    Parameters
    ----------
    needed : Iterable[str]
        Aliases requested by the primary corpus.
    strict : bool, optional
        Raise on syntax errors instead of logging a warning and using the
        recovered tree. Defaults to False.

    Examples
    --------
    >>> resolver = CorpusResolver({"c_foo"})
    >>> resolver.add_source("/** Does foo. */\\nvoid c_foo(void);\\n")
    >>> resolver.resolved["c_foo"].name
    'c_foo'
    """

    def __init__(self, needed: Iterable[str], *, strict: bool = False) -> None:
        self.strict = strict
        self.resolved: dict[str, StructuredComment | None] = dict.fromkeys(needed)

    @property
    def pending(self) -> list[str]:
        """Aliases without a resolution so far, sorted."""
        return sorted(alias for alias, comment in self.resolved.items() if comment is None)

    def add_source(self, text: str, path: Path | str = "<memory>") -> None:
        """Resolve aliases declared in one C source.

        Parameters
        ----------
        text : str
            Source of the file.
        path : Path | str, optional
            Path used in messages.

        Raises
        ------
        SecondaryParseError
            If the source has syntax errors and the resolver is strict.
        """
        tree, data = parse_text(load_language("c"), text)
        error = first_error(tree.root_node)
        if error is not None:
            where = start_position(data, error)
            message = f"{path}:{where.line}:{where.column + 1}: unable to parse C source"
            if self.strict:
                raise SecondaryParseError(message, context={"path": str(path), "line": where.line})
            LOGGER.warning(message, extra={"operation": "resolve", "path": str(path)})
        if not any(comment is None for comment in self.resolved.values()):
            return
        for node in iter_nodes(tree.root_node):
            for name, kind in declared_names(node, data):
                if name not in self.resolved or self.resolved[name] is not None:
                    continue
                comments = _doc_comments(node, data)
                if comments:
                    self.resolved[name] = parse_comment(comments, name, kind)
