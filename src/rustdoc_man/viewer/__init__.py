"""Viewers rendering documents to the terminal."""

from __future__ import annotations

import sys

from ..errors import RustdocManError
from ..models.doc import Doc, Example
from .base import TextViewer, format_title, get_line_width
from .plain import PlainViewer
from .rich import RichViewer

VIEWERS: dict[str, type[TextViewer]] = {
    PlainViewer.name: PlainViewer,
    RichViewer.name: RichViewer,
}


def get_viewer(name: str, **options) -> TextViewer:
    """Create the viewer called ``name`` (``plain`` or ``rich``)."""
    try:
        cls = VIEWERS[name.lower()]
    except KeyError:
        raise RustdocManError(f"The viewer {name} is not supported") from None
    if cls is PlainViewer:
        options = {k: v for k, v in options.items() if k in ("width", "stream")}
    return cls(**options)


def get_default_viewer(**options) -> TextViewer:
    """Rich output on a terminal, plain text otherwise."""
    stream = options.get("stream") or sys.stdout
    name = RichViewer.name if stream.isatty() else PlainViewer.name
    return get_viewer(name, **options)


def open_examples(doc: Doc, examples: list[Example], viewer: TextViewer | None = None) -> None:
    (viewer or get_default_viewer()).open_examples(doc, examples)


__all__ = [
    "VIEWERS",
    "PlainViewer",
    "RichViewer",
    "TextViewer",
    "format_title",
    "get_default_viewer",
    "get_line_width",
    "get_viewer",
    "open_examples",
]
