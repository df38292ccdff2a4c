"""Exception types raised by the extraction engine and its collaborators.

Missing optional blocks (descriptions, definitions, member groups) never raise;
they show up as ``None`` or as an absent group in the document model.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .models.index import IndexItem


class RustdocManError(Exception):
    """Base class for all reported failures."""


class UnknownItemTypeError(RustdocManError, ValueError):
    """An item type token, number or code that rustdoc never emits."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Unsupported item type: {value!r}")


class ItemNotFoundError(RustdocManError):
    """No page, member or package matches the requested name."""

    def __init__(self, name: str, suggestions: Sequence[str] | None = None):
        self.name = name
        self.suggestions = list(suggestions or [])
        message = f"Could not find documentation for {name}"
        if self.suggestions:
            message += f" (did you mean: {', '.join(self.suggestions)}?)"
        super().__init__(message)


class MemberNotFoundError(RustdocManError):
    """A member page lacks the member heading or its declaration."""

    def __init__(self, name: str, detail: str | None = None):
        self.name = name
        self.detail = detail
        super().__init__(detail or f"Could not find member {name}")


class MalformedSourceError(RustdocManError):
    """A search index or HTML file matches none of the known layouts."""

    def __init__(self, path: Path | str | None, detail: str):
        self.path = Path(path) if path is not None else None
        self.detail = detail
        location = f"'{self.path}'" if self.path is not None else "<string>"
        super().__init__(f"Malformed documentation source {location}: {detail}")


class AmbiguousMatchError(RustdocManError):
    """A search returned several candidates and nobody can choose one."""

    def __init__(self, name: str, items: Sequence[IndexItem]):
        self.name = name
        self.items = list(items)
        listing = "\n".join(f"  {item}" for item in self.items)
        super().__init__(f"Found multiple matches for {name}:\n{listing}")


class LinkResolutionError(RustdocManError):
    """A relative link cannot be mapped back to a documentation item."""

    def __init__(self, link: str, detail: str):
        self.link = link
        self.detail = detail
        super().__init__(f"Could not resolve link {link!r}: {detail}")
