"""
Models package for rustdoc-man.

Re-exports the document model and the canonical search-index model so that
callers can write ``from rustdoc_man.models import Doc, Name``.
"""

from .base import lenient_config, strict_config
from .doc import Code, Doc, Example, ItemType, MemberGroup, Name, Text
from .index import CrateData, IndexItem, ItemData

__all__ = [
    "Code",
    "CrateData",
    "Doc",
    "Example",
    "IndexItem",
    "ItemData",
    "ItemType",
    "MemberGroup",
    "Name",
    "Text",
    "lenient_config",
    "strict_config",
]
