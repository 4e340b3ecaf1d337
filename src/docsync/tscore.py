"""Core Tree-sitter utilities shared by the Rust scanner and the C resolver."""

from __future__ import annotations

from functools import cache
from importlib import import_module
from typing import TYPE_CHECKING, Any, Final, cast

from tree_sitter import Language, Parser

from docsync.errors import ConfigurationError
from docsync.positions import Position

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tree_sitter import Node, Tree

__all__ = [
    "LANG_PACKAGES",
    "first_error",
    "iter_nodes",
    "load_language",
    "node_text",
    "parse_text",
    "start_position",
]

LANG_PACKAGES: Final[dict[str, str]] = {
    "rust": "tree_sitter_rust",
    "c": "tree_sitter_c",
}
"""Grammar package for each supported language."""


@cache
def load_language(name: str) -> Language:
    """Load the Tree-sitter grammar for ``name``.

    Parameters
    ----------
    name : str
        Canonical language name, a key of :data:`LANG_PACKAGES`.

    Returns
    -------
    Language
        Instantiated Tree-sitter ``Language`` ready for parsing.

    Raises
    ------
    ConfigurationError
        If the language is unknown, or its package is missing or does not
        expose the expected ``language`` factory.
    """
    try:
        package = LANG_PACKAGES[name]
    except KeyError as exc:
        message = f"Unsupported language '{name}'."
        raise ConfigurationError(message, cause=exc) from exc
    try:
        module = import_module(package)
    except ModuleNotFoundError as exc:  # pragma: no cover - configuration error
        message = f"Tree-sitter package '{package}' is not installed."
        raise ConfigurationError(message, cause=exc) from exc
    try:
        factory = module.language
    except AttributeError as exc:  # pragma: no cover - configuration error
        message = f"Tree-sitter package '{package}' does not expose a 'language()' factory."
        raise ConfigurationError(message, cause=exc) from exc
    return Language(factory())


def parse_text(lang: Language, text: str) -> tuple[Tree, bytes]:
    """Parse ``text`` and return the tree together with the UTF-8 buffer it indexes."""
    data = text.encode("utf-8")
    parser = Parser()
    cast("Any", parser).language = lang
    return parser.parse(data), data


def iter_nodes(node: Node) -> Iterator[Node]:
    """Yield ``node`` and its descendants in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def first_error(node: Node) -> Node | None:
    """Return the first ``ERROR`` or missing node below ``node``, if any."""
    if not node.has_error:
        return None
    for child in iter_nodes(node):
        if child.is_error or child.is_missing:
            return child
    return node


def start_position(data: bytes, node: Node) -> Position:
    """Return the node's start as a 1-indexed line and a character column.

    Tree-sitter reports columns in bytes; the prefix of the line is decoded so
    multi-byte characters count once.
    """
    row, byte_column = node.start_point
    line_start = node.start_byte - byte_column
    prefix = data[line_start : node.start_byte].decode("utf-8", errors="replace")
    return Position(line=row + 1, column=len(prefix))


def node_text(data: bytes, node: Node) -> str:
    """Return the decoded source text covered by ``node``."""
    return data[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
