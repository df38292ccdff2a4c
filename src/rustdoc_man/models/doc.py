"""
Document model for scraped rustdoc pages.

``Name`` addresses documentation items (``krate::module::Item::member``),
``ItemType`` enumerates the item kinds rustdoc knows about, and ``Doc`` is the
structured record produced for one item by the page scraper.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import total_ordering
from pathlib import Path
from types import MappingProxyType

SEPARATOR = "::"


@total_ordering
class Name:
    """An immutable ``::``-separated item path.

    The offsets of the end of the first segment and the start of the last
    segment are computed once, so all accessors are simple slices.
    """

    __slots__ = ("_s", "_first_end", "_last_start")

    def __init__(self, s: str = ""):
        s = str(s)
        first_end = s.find(SEPARATOR)
        last_sep = s.rfind(SEPARATOR)
        object.__setattr__(self, "_s", s)
        object.__setattr__(self, "_first_end", len(s) if first_end < 0 else first_end)
        object.__setattr__(
            self, "_last_start", 0 if last_sep < 0 else last_sep + len(SEPARATOR)
        )

    def __setattr__(self, key, value):
        raise AttributeError("Name is immutable")

    def is_singleton(self) -> bool:
        return self._last_start == 0

    def first(self) -> str:
        return self._s[: self._first_end]

    def last(self) -> str:
        return self._s[self._last_start :]

    def full(self) -> str:
        return self._s

    def rest(self) -> str | None:
        """Everything after the first segment, or None for a singleton."""
        if self.is_singleton():
            return None
        return self._s[self._first_end + len(SEPARATOR) :]

    def rest_or_first(self) -> str:
        rest = self.rest()
        return rest if rest is not None else self.first()

    def segments(self) -> list[str]:
        return self._s.split(SEPARATOR)

    def parent(self) -> Name | None:
        if self.is_singleton():
            return None
        return Name(self._s[: self._last_start - len(SEPARATOR)])

    def child(self, segment: str) -> Name:
        return Name(f"{self._s}{SEPARATOR}{segment}")

    def ends_with(self, other: Name | str) -> bool:
        """Check whether ``other`` is this name or a suffix on a segment boundary.

        ``rand::error::Error`` ends with ``Error`` and ``error::Error``, but
        ``rand::erroreous`` does not end with ``error``.
        """
        suffix = other.full() if isinstance(other, Name) else str(other)
        return self._s == suffix or self._s.endswith(f"{SEPARATOR}{suffix}")

    def __str__(self) -> str:
        return self._s

    def __repr__(self) -> str:
        return f"Name({self._s!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Name):
            return NotImplemented
        return self._s == other._s

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Name):
            return NotImplemented
        return self._s < other._s

    def __hash__(self) -> int:
        return hash(self._s)

    def __reduce__(self):
        return (Name, (self._s,))


@total_ordering
class ItemType(Enum):
    """Kinds of documentation items, in rustdoc's group order.

    The value of each member is the token rustdoc uses in element ids and
    file names (``struct.Foo.html``, ``#method.bar``).
    """

    EXTERN_CRATE = "externcrate"
    IMPORT = "import"
    PRIMITIVE = "primitive"
    MODULE = "mod"
    MACRO = "macro"
    STRUCT = "struct"
    ENUM = "enum"
    CONSTANT = "constant"
    STATIC = "static"
    TRAIT = "trait"
    FUNCTION = "fn"
    TYPEDEF = "type"
    UNION = "union"
    STRUCT_FIELD = "structfield"
    VARIANT = "variant"
    ASSOC_TYPE = "associatedtype"
    ASSOC_CONST = "associatedconstant"
    METHOD = "method"
    IMPL = "impl"
    TY_METHOD = "tymethod"
    FOREIGN_TYPE = "foreigntype"
    KEYWORD = "keyword"
    OPAQUE_TY = "opaque"
    PROC_ATTRIBUTE = "attr"
    PROC_DERIVE = "derive"
    TRAIT_ALIAS = "traitalias"

    @classmethod
    def parse(cls, token: str) -> ItemType:
        """Parse the id/file-name token (``fn``, ``struct``, ...)."""
        try:
            return cls(token)
        except ValueError:
            from ..errors import UnknownItemTypeError

            raise UnknownItemTypeError(token) from None

    @classmethod
    def from_index_number(cls, number: int) -> ItemType:
        """Map the numeric type used in search-index files."""
        try:
            return _BY_INDEX_NUMBER[number]
        except KeyError:
            from ..errors import UnknownItemTypeError

            raise UnknownItemTypeError(number) from None

    @classmethod
    def from_index_code(cls, code: str) -> ItemType:
        """Map the one-character type code used since Rust 1.69 (``A`` = module)."""
        if len(code) != 1:
            from ..errors import UnknownItemTypeError

            raise UnknownItemTypeError(code)
        return cls.from_index_number(ord(code) - ord("A"))

    @property
    def id(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return _ITEM_TYPE_INFO[self][0]

    @property
    def group_name(self) -> str:
        return _ITEM_TYPE_INFO[self][1]

    @property
    def group_id(self) -> str:
        """Id of the section heading listing items of this type on a module page."""
        return _ITEM_TYPE_INFO[self][2]

    @property
    def index_number(self) -> int:
        return _ITEM_TYPE_INFO[self][3]

    @property
    def index_code(self) -> str:
        return chr(ord("A") + self.index_number)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ItemType):
            return NotImplemented
        return _ORDER[self] < _ORDER[other]


# (display name, group name, group id, search-index number)
_ITEM_TYPE_INFO: dict[ItemType, tuple[str, str, str, int]] = {
    ItemType.MODULE: ("Module", "Modules", "modules", 0),
    ItemType.EXTERN_CRATE: ("Extern Crate", "Extern Crates", "extern-crates", 1),
    ItemType.IMPORT: ("Import", "Imports", "imports", 2),
    ItemType.STRUCT: ("Struct", "Structs", "structs", 3),
    ItemType.ENUM: ("Enum", "Enums", "enums", 4),
    ItemType.FUNCTION: ("Function", "Functions", "functions", 5),
    ItemType.TYPEDEF: ("Typedef", "Typedefs", "types", 6),
    ItemType.STATIC: ("Static", "Statics", "statics", 7),
    ItemType.TRAIT: ("Trait", "Traits", "traits", 8),
    ItemType.IMPL: ("Implementation", "Implementations", "impls", 9),
    ItemType.TY_METHOD: ("Required Method", "Required Methods", "required-methods", 10),
    ItemType.METHOD: ("Method", "Methods", "methods", 11),
    ItemType.STRUCT_FIELD: ("Field", "Fields", "fields", 12),
    ItemType.VARIANT: ("Variant", "Variants", "variants", 13),
    ItemType.MACRO: ("Macro", "Macros", "macros", 14),
    ItemType.PRIMITIVE: ("Primitive", "Primitives", "primitives", 15),
    ItemType.ASSOC_TYPE: ("Associated Type", "Associated Types", "associated-types", 16),
    ItemType.CONSTANT: ("Constant", "Constants", "constants", 17),
    ItemType.ASSOC_CONST: ("Associated Const", "Associated Consts", "associated-consts", 18),
    ItemType.UNION: ("Union", "Unions", "unions", 19),
    ItemType.FOREIGN_TYPE: ("Foreign Type", "Foreign Types", "foreign-types", 20),
    ItemType.KEYWORD: ("Keyword", "Keywords", "keywords", 21),
    ItemType.OPAQUE_TY: ("Opaque Type", "Opaque Types", "opaque-types", 22),
    ItemType.PROC_ATTRIBUTE: ("Proc Attribute", "Proc Attributes", "proc-attributes", 23),
    ItemType.PROC_DERIVE: ("Proc Derive", "Proc Derives", "proc-derives", 24),
    ItemType.TRAIT_ALIAS: ("Trait Alias", "Trait Aliases", "trait-aliases", 25),
}

_ORDER: dict[ItemType, int] = {ty: i for i, ty in enumerate(ItemType)}
_BY_INDEX_NUMBER: dict[int, ItemType] = {
    info[3]: ty for ty, info in _ITEM_TYPE_INFO.items()
}


@dataclass(frozen=True, order=True)
class Text:
    """Prose in two forms: plain text and the inner HTML of its block."""

    plain: str
    html: str


@dataclass(frozen=True, order=True)
class Code:
    """A rendered declaration or code block."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class MemberGroup:
    """Members of one type listed under one (optional) heading."""

    title: str | None = None
    members: tuple[Doc, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "members", tuple(self.members))


@dataclass(frozen=True)
class Doc:
    """Structured documentation for one item.

    A doc is immutable once built: ``with_groups`` and ``with_url`` return
    updated copies. ``groups`` is a read-only mapping kept in item-type order
    that never holds an empty group list.
    """

    name: Name
    ty: ItemType
    definition: Code | None = None
    description: Text | None = None
    groups: Mapping[ItemType, tuple[MemberGroup, ...]] = field(default_factory=dict, hash=False)
    url: str | None = None

    def __post_init__(self):
        groups = {
            ty: tuple(group_list)
            for ty, group_list in sorted(self.groups.items())
            if group_list
        }
        object.__setattr__(self, "groups", MappingProxyType(groups))

    def with_groups(self, ty: ItemType, groups: list[MemberGroup]) -> Doc:
        """Return a copy with ``groups`` appended to the groups of type ``ty``."""
        if not groups:
            return self
        merged = dict(self.groups)
        merged[ty] = merged.get(ty, ()) + tuple(groups)
        return replace(self, groups=merged)

    def with_url(self, path: Path | str, fragment: str | None = None) -> Doc:
        url = Path(path).resolve().as_uri()
        return replace(self, url=f"{url}#{fragment}" if fragment else url)

    def find_examples(self) -> list[Example]:
        """Collect the rendered examples from the description."""
        if self.description is None:
            return []
        from ..parser import Parser

        return Parser.from_string(self.description.html).find_examples()

    def __str__(self) -> str:
        if self.description is not None:
            return f"{self.name}: {self.description.plain}"
        return str(self.name)


@dataclass
class Example:
    """A rendered code example with the caption that introduced it."""

    code: Code
    description: Text | None = None
