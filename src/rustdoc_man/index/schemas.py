"""Search-index encodings, one adapter per rustdoc generation.

The search index carries no version tag, so each package's raw JSON object is
validated against the adapters in ``SCHEMA_ADAPTERS`` (most specific first)
and the first one that validates wins:

- Rust 1.69 (rust-lang/rust#108013): parallel arrays, item types packed into
  one string with a character per item (``A`` = module, ``B`` = extern crate,
  ...), item paths as strings or sparse ``[index, path]`` pairs.
- Rust 1.52 (commit 3934dd1b): parallel arrays with numeric item types.
- Rust 1.44 (commit b4fb3069): a list of ``[type, name, path, desc, parent,
  ...]`` tuples.

In the parallel-array forms a parent of ``0`` means "no parent" and every other
value is 1-based. In the tuple form parents are 0-based or null.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Union

import structlog
from pydantic import (
    BaseModel,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
    model_validator,
)

from ..errors import MalformedSourceError
from ..models.base import lenient_config
from ..models.doc import ItemType
from ..models.index import CrateData, ItemData

logger = structlog.get_logger(__name__)

ItemPath = Union[StrictStr, tuple[StrictInt, StrictStr]]


def _normalize_paths(value: Any) -> list[tuple[int, str]]:
    """Accept ``[type, name, ...]`` entries; later releases append extra fields."""
    if not isinstance(value, list):
        raise ValueError("paths must be a list")
    paths = []
    for entry in value:
        if (
            not isinstance(entry, (list, tuple))
            or len(entry) < 2
            or type(entry[0]) is not int
            or not isinstance(entry[1], str)
        ):
            raise ValueError(f"invalid path entry: {entry!r}")
        paths.append((entry[0], entry[1]))
    return paths


def _decode_parent(raw: int) -> int | None:
    return None if raw == 0 else raw - 1


class SchemaAdapter(BaseModel):
    """Common interface of all search-index encodings."""

    format_name: ClassVar[str] = "unknown"

    paths: list[tuple[int, str]] = Field(alias="p")

    model_config = lenient_config

    @field_validator("paths", mode="before")
    @classmethod
    def normalize_paths(cls, v):
        return _normalize_paths(v)

    def to_canonical(self) -> CrateData:
        raise NotImplementedError


class CrateDataV1_44(SchemaAdapter):
    """Tuple-per-item encoding used from Rust 1.44 to 1.51."""

    format_name: ClassVar[str] = "1.44"

    items: list[ItemData] = Field(alias="i")

    @field_validator("items", mode="before")
    @classmethod
    def parse_item_tuples(cls, v):
        if not isinstance(v, list):
            raise ValueError("items must be a list")
        items = []
        for entry in v:
            if not isinstance(entry, (list, tuple)) or len(entry) < 5:
                raise ValueError(f"invalid item tuple: {entry!r}")
            ty, name, path, desc, parent = entry[:5]
            if type(ty) is not int:
                raise ValueError(f"invalid item type: {ty!r}")
            if not all(isinstance(s, str) for s in (name, path, desc)):
                raise ValueError(f"invalid item strings: {entry!r}")
            if parent is not None and type(parent) is not int:
                raise ValueError(f"invalid parent: {parent!r}")
            items.append(
                ItemData(
                    ty=ItemType.from_index_number(ty),
                    name=name,
                    path=path,
                    desc=desc,
                    parent=parent,
                )
            )
        return items

    def to_canonical(self) -> CrateData:
        return CrateData(items=list(self.items), paths=list(self.paths))


class CrateDataV1_52(SchemaAdapter):
    """Parallel-array encoding with numeric item types (Rust 1.52 to 1.68)."""

    format_name: ClassVar[str] = "1.52"

    item_types: list[StrictInt] = Field(alias="t")
    item_names: list[StrictStr] = Field(alias="n")
    item_paths: list[ItemPath] = Field(alias="q")
    item_descs: list[StrictStr] = Field(alias="d")
    item_parents: list[StrictInt] = Field(alias="i")

    @field_validator("item_types")
    @classmethod
    def check_item_types(cls, v):
        for number in v:
            ItemType.from_index_number(number)
        return v

    @model_validator(mode="after")
    def check_lengths(self):
        count = len(self.item_names)
        lengths = {
            "t": self._type_count(),
            "d": len(self.item_descs),
            "i": len(self.item_parents),
        }
        mismatched = {key: n for key, n in lengths.items() if n != count}
        if mismatched:
            raise ValueError(
                f"parallel arrays differ in length: n={count}, {mismatched}"
            )
        if any(p < 0 for p in self.item_parents):
            raise ValueError("negative parent index")
        for position, entry in enumerate(self.item_paths):
            index = entry[0] if isinstance(entry, tuple) else position
            if not 0 <= index < max(count, 1):
                raise ValueError(f"item path index {index} out of range")
        return self

    def _type_count(self) -> int:
        return len(self.item_types)

    def _types(self) -> list[ItemType]:
        return [ItemType.from_index_number(n) for n in self.item_types]

    def _expanded_paths(self) -> list[str]:
        expanded = [""] * len(self.item_names)
        for position, entry in enumerate(self.item_paths):
            if isinstance(entry, tuple):
                index, path = entry
            else:
                index, path = position, entry
            if index < len(expanded):
                expanded[index] = path
        return expanded

    def to_canonical(self) -> CrateData:
        items = [
            ItemData(
                ty=ty,
                name=name,
                path=path,
                desc=desc,
                parent=_decode_parent(parent),
            )
            for ty, name, path, desc, parent in zip(
                self._types(),
                self.item_names,
                self._expanded_paths(),
                self.item_descs,
                self.item_parents,
            )
        ]
        return CrateData(items=items, paths=list(self.paths))


class CrateDataV1_69(CrateDataV1_52):
    """Parallel-array encoding with one type character per item (Rust 1.69+)."""

    format_name: ClassVar[str] = "1.69"

    item_types: StrictStr = Field(alias="t")

    @field_validator("item_types")
    @classmethod
    def check_item_types(cls, v):
        for code in v:
            ItemType.from_index_code(code)
        return v

    def _types(self) -> list[ItemType]:
        return [ItemType.from_index_code(c) for c in self.item_types]


# Most specific first: a 1.52 payload never validates as 1.69 (numbers vs.
# string) and a 1.44 payload has no "t" key at all.
SCHEMA_ADAPTERS: tuple[type[SchemaAdapter], ...] = (
    CrateDataV1_69,
    CrateDataV1_52,
    CrateDataV1_44,
)


def decode_crate_data(
    krate: str, raw: Any, source: Path | str | None = None
) -> CrateData:
    """Convert one package's raw search-index object to ``CrateData``.

    Raises:
        MalformedSourceError: If no adapter accepts the object
    """
    failures = []
    for adapter in SCHEMA_ADAPTERS:
        try:
            data = adapter.model_validate(raw)
        except ValidationError as e:
            logger.debug(
                "search index adapter rejected package",
                krate=krate,
                adapter=adapter.format_name,
                errors=e.error_count(),
            )
            failures.append(f"{adapter.format_name}: {e.errors()[0]['msg']}")
            continue
        logger.debug(
            "search index adapter matched", krate=krate, adapter=adapter.format_name
        )
        return data.to_canonical()

    raise MalformedSourceError(
        source,
        f"package '{krate}' matches no known search index format "
        f"({'; '.join(failures)})",
    )
