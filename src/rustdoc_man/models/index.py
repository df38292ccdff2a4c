"""
Canonical search-index models.

Every historical search-index encoding is converted to ``CrateData`` before
any lookup happens, so the search code only ever sees this one shape.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field

from .base import lenient_config
from .doc import ItemType, Name


class ItemData(BaseModel):
    """One search-index entry.

    ``path`` may be empty, meaning "same path as the previous entry".
    ``parent`` is a 0-based index into ``CrateData.paths`` or None.
    """

    ty: ItemType
    name: str
    path: str = ""
    desc: str = ""
    parent: int | None = None

    model_config = lenient_config


class CrateData(BaseModel):
    """All entries of one package plus the table of parent paths."""

    items: list[ItemData] = Field(default_factory=list)
    paths: list[tuple[int, str]] = Field(default_factory=list)

    model_config = lenient_config

    def parent_path(self, item: ItemData) -> str | None:
        """Resolve an item's parent; dangling indices count as no parent."""
        if item.parent is None or not 0 <= item.parent < len(self.paths):
            return None
        return self.paths[item.parent][1]


@dataclass(frozen=True, order=True)
class IndexItem:
    """A search hit: the item's simple name and its owning path."""

    path: str
    name: str
    description: str = ""
    ty: ItemType | None = None

    @property
    def full_name(self) -> Name:
        return Name(self.path).child(self.name) if self.path else Name(self.name)

    def __str__(self) -> str:
        if self.description:
            return f"{self.full_name}: {self.description}"
        return str(self.full_name)
