"""Helpers for walking BeautifulSoup trees of rustdoc pages."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from ..models.doc import Code, Text

# Permalink anchors (the "§" signs) and trait popups are not part of the content
SKIPPED_CLASSES = ("notable-traits", "anchor")

_COLLISION_SUFFIX = re.compile(r"-\d+$")


def strip_collision_suffix(name: str) -> str:
    """Remove the ``-<n>`` suffix rustdoc appends to duplicate element ids."""
    return _COLLISION_SUFFIX.sub("", name)


def is_element(node, *names: str) -> bool:
    """Check whether ``node`` is a tag, optionally one of ``names``."""
    if not isinstance(node, Tag):
        return False
    return not names or node.name in names


def has_class(node, cls: str) -> bool:
    return isinstance(node, Tag) and cls in (node.get("class") or ())


def child_elements(node) -> list[Tag]:
    return [child for child in node.children if isinstance(child, Tag)]


def first_child_element(node) -> Tag | None:
    for child in node.children:
        if isinstance(child, Tag):
            return child
    return None


def next_sibling_element(node) -> Tag | None:
    sibling = node.next_sibling
    while sibling is not None and not isinstance(sibling, Tag):
        sibling = sibling.next_sibling
    return sibling


def previous_sibling_element(node) -> Tag | None:
    sibling = node.previous_sibling
    while sibling is not None and not isinstance(sibling, Tag):
        sibling = sibling.previous_sibling
    return sibling


def iter_sibling_elements(node):
    sibling = next_sibling_element(node)
    while sibling is not None:
        yield sibling
        sibling = next_sibling_element(sibling)


def get_id_part(node, index: int) -> str | None:
    """Return one part of a ``<type>.<name>`` element id.

    rustdoc disambiguates colliding ids with a ``-<n>`` suffix, which is
    stripped from the result.
    """
    element_id = node.get("id") if isinstance(node, Tag) else None
    if not element_id:
        return None
    parts = element_id.split(".", 1)
    if index >= len(parts):
        return None
    return strip_collision_suffix(parts[index])


def node_to_text(node) -> str:
    """Render a node as plain text, keeping the line structure of code blocks."""
    chunks: list[str] = []
    _push_text(chunks, node)
    return "".join(chunks).strip()


def _ends_with_newline(chunks: list[str]) -> bool:
    return chunks[-1].endswith("\n")


def _push_text(chunks: list[str], node) -> None:
    if isinstance(node, NavigableString):
        if not isinstance(node, PreformattedString) and node:
            chunks.append(str(node))
        return
    if not isinstance(node, Tag):
        return
    if any(has_class(node, cls) for cls in SKIPPED_CLASSES):
        return

    is_docblock = has_class(node, "docblock")
    if node.name == "br":
        chunks.append("\n")
    elif (has_class(node, "fmt-newline") or is_docblock) and chunks:
        if not _ends_with_newline(chunks):
            chunks.append("\n")

    for child in node.children:
        _push_text(chunks, child)

    if is_docblock and chunks and not _ends_with_newline(chunks):
        chunks.append("\n")


def inner_html(node) -> str:
    return node.decode_contents().strip()


def to_text(node) -> Text | None:
    """Convert a description block; blocks without any content yield None."""
    if node is None:
        return None
    plain = node_to_text(node)
    html = inner_html(node)
    if not plain and not html:
        return None
    return Text(plain=plain, html=html)


def to_code(node) -> Code | None:
    if node is None:
        return None
    return Code(node_to_text(node))


def parse_html(markup: str | bytes) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")
