"""Plain text viewer without any terminal escape sequences."""

from .base import TextViewer


class PlainViewer(TextViewer):
    name = "plain"
