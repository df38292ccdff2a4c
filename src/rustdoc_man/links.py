"""Resolution of links found in rendered documentation.

rustdoc writes intra-doc links as paths relative to the current page, for
example ``../struct.Bar.html#method.new``. ``resolve_link`` maps such a link
back to the documented item it points at.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

from .errors import LinkResolutionError, UnknownItemTypeError
from .models.doc import ItemType, Name
from .parser.util import strip_collision_suffix

logger = logging.getLogger(__name__)

HTML_SUFFIX = ".html"


@dataclass(frozen=True)
class DocLink:
    """A link to another documentation item; ``ty`` is None if unknown."""

    ty: ItemType | None
    name: Name


@dataclass(frozen=True)
class ExternalLink:
    url: str


def resolve_link(name: Name, ty: ItemType, link: str) -> DocLink | ExternalLink:
    """Resolve ``link`` as seen on the page of item ``name`` of type ``ty``.

    Raises:
        LinkResolutionError: If the link leaves the documentation root or
            uses an unknown item type
    """
    if urlsplit(link).scheme:
        logger.debug("Treating link %r as external", link)
        return ExternalLink(link)
    try:
        return _resolve_doc_link(name, ty, link)
    except UnknownItemTypeError as e:
        raise LinkResolutionError(link, str(e)) from e


class _Cursor:
    """The item a link has been resolved to so far."""

    def __init__(self, ty: ItemType | None, name: Name | None):
        self.ty = ty
        self.name = name

    def child(self, ty: ItemType | None, segment: str) -> None:
        self.ty = ty
        self.name = self.name.child(segment) if self.name is not None else Name(segment)

    def up(self, link: str) -> None:
        if self.name is None:
            raise LinkResolutionError(link, "exceeded root level")
        self.ty = None
        self.name = self.name.parent()


def _split_typed(part: str) -> tuple[ItemType, str] | None:
    """Split a ``<type>.<name>`` token, dropping any duplicate-id suffix."""
    pieces = part.split(".")
    if len(pieces) != 2 or not all(pieces):
        return None
    return ItemType.parse(pieces[0]), strip_collision_suffix(pieces[1])


def _resolve_doc_link(name: Name, ty: ItemType, link: str) -> DocLink:
    path, _, fragment = link.partition("#")
    parts = [part for part in path.split("/") if part and part != "."]

    # Relative paths start at the directory of the current page
    if ty != ItemType.MODULE and parts:
        cursor = _Cursor(None, name.parent())
    else:
        cursor = _Cursor(ty, name)

    for part in parts:
        if part == "..":
            cursor.up(link)
        elif part == "index.html":
            continue
        elif part.endswith(HTML_SUFFIX):
            stem = part[: -len(HTML_SUFFIX)]
            typed = _split_typed(stem)
            if typed is not None:
                cursor.child(*typed)
            else:
                cursor.child(None, stem)
        else:
            cursor.child(ItemType.MODULE, part)

    if fragment:
        # Other fragments point to an element on the same page
        typed = _split_typed(fragment)
        if typed is not None:
            cursor.child(*typed)

    if cursor.name is None:
        raise LinkResolutionError(link, "cannot handle link to root")
    logger.debug("Resolved link %r to %s (%s)", link, cursor.name, cursor.ty)
    return DocLink(cursor.ty, cursor.name)
