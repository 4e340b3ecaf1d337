"""Render structured comment XML into linear Rust documentation comments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from xml.etree.ElementTree import ParseError

from defusedxml import ElementTree as SafeElementTree
from defusedxml.common import DefusedXmlException
from jinja2 import Environment, StrictUndefined, TemplateError

from docsync.errors import DocRenderError

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from jinja2 import Template

    from docsync.comments import StructuredComment

__all__ = ["DEFAULT_MARKER", "paragraph_text", "render_comment", "render_comment_xml"]

DEFAULT_MARKER = "///"

_TEMPLATE = (
    "{% for para in doc.summary %}{{ para }}\n\n{% endfor %}"
    "{% if doc.parameters %}# Parameters\n\n"
    "{% for param in doc.parameters %}* `{{ param.name }}`"
    "{% for para in param.paragraphs %}\n\n{{ para | indent(2, first=True) }}{% endfor %}\n"
    "{% endfor %}\n{% endif %}"
    "{% if doc.returns %}# Returns\n\n{% for para in doc.returns %}{{ para }}\n\n{% endfor %}{% endif %}"
)


@dataclass(frozen=True, slots=True)
class _ParameterDoc:
    name: str
    paragraphs: list[str]


@dataclass(frozen=True, slots=True)
class _DocSections:
    summary: list[str]
    parameters: list[_ParameterDoc]
    returns: list[str]


def _build_environment() -> Environment:
    """Build the Jinja2 environment used for composing sections.

    Returns
    -------
    Environment
        Environment with strict undefined handling and no autoescaping, since
        the output is Markdown rather than HTML.
    """
    return Environment(
        undefined=StrictUndefined,
        trim_blocks=False,
        lstrip_blocks=True,
        autoescape=False,  # noqa: S701
        keep_trailing_newline=True,
    )


_ENV = _build_environment()
_TEMPLATE_OBJ: Template = _ENV.from_string(_TEMPLATE)


def paragraph_text(para: Element) -> str:
    """Flatten one ``Para`` element to Markdown text.

    Plain text is kept verbatim and ``emphasized`` elements become inline
    code. Other elements contribute their own text, or the text of all their
    descendants when they carry none directly.

    Parameters
    ----------
    para : Element
        The paragraph element.

    Returns
    -------
    str
        Paragraph text without surrounding whitespace.
    """
    parts = [para.text or ""]
    for child in para:
        if child.text:
            parts.append(f"`{child.text}`" if child.tag == "emphasized" else child.text)
        else:
            parts.append("".join(child.itertext()))
        parts.append(child.tail or "")
    return "".join(parts).strip()


def _paragraphs(section: Element | None) -> list[str]:
    if section is None:
        return []
    texts = (paragraph_text(para) for para in section if para.tag == "Para")
    return [text for text in texts if text]


def _sections(root: Element) -> _DocSections:
    summary = _paragraphs(root.find("Abstract"))
    for discussion in root.findall("Discussion"):
        summary.extend(_paragraphs(discussion))
    parameters: list[_ParameterDoc] = []
    params = root.find("Parameters")
    if params is not None:
        for param in params.findall("Parameter"):
            name = (param.findtext("Name") or "").strip()
            if name:
                parameters.append(_ParameterDoc(name, _paragraphs(param.find("Discussion"))))
    return _DocSections(
        summary=summary,
        parameters=parameters,
        returns=_paragraphs(root.find("ResultDiscussion")),
    )


def _prefix(text: str, marker: str) -> str:
    lines = [line.rstrip() for line in text.split("\n")]
    return "\n".join(f"{marker} {line}" if line else marker for line in lines)


def render_comment_xml(xml: str, *, marker: str = DEFAULT_MARKER, name: str = "<unknown>") -> str:
    """Render structured comment XML to documentation-comment lines.

    Parameters
    ----------
    xml : str
        Structured comment (``<Function><Abstract>...``).
    marker : str, optional
        Comment marker prefixed to every line. Defaults to ``///``.
    name : str, optional
        Declaration name used in error messages.

    Returns
    -------
    str
        The rendered lines joined by newlines, without a trailing newline, or
        ``""`` when the comment has no content.

    Raises
    ------
    DocRenderError
        If ``xml`` is not well-formed.

    Examples
    --------
    >>> render_comment_xml("<Function><Abstract><Para>Does X.</Para></Abstract></Function>")
    '/// Does X.'
    """
    try:
        root = SafeElementTree.fromstring(xml)
    except (ParseError, DefusedXmlException) as exc:
        message = f"Unable to render documentation for '{name}': {exc}"
        raise DocRenderError(message, cause=exc, context={"name": name}) from exc
    try:
        rendered = _TEMPLATE_OBJ.render(doc=_sections(root))
    except TemplateError as exc:
        message = f"Unable to render documentation for '{name}': {exc}"
        raise DocRenderError(message, cause=exc, context={"name": name}) from exc
    body = rendered.strip("\n")
    if not body.strip():
        return ""
    return _prefix(body, marker)


def render_comment(comment: StructuredComment, *, marker: str = DEFAULT_MARKER) -> str:
    """Render a :class:`~docsync.comments.StructuredComment`."""
    return render_comment_xml(comment.as_xml(), marker=marker, name=comment.name)
