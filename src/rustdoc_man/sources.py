"""Documentation sources: directories of rustdoc output.

A source directory holds one subdirectory per package (``<source>/<crate>/``)
plus the search index shared by all of them. Items are located with the
addressing scheme rustdoc uses for its files:

- ``<crate>/all.html`` lists every item with a link to its page,
- ``<crate>/<module path>/index.html`` is a module page,
- ``<type>.<name>.html`` is an item page,
- members are anchors (``#<type>.<name>``) on the page of their parent.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

from . import config
from .errors import UnknownItemTypeError
from .fuzzy_resolver import get_fuzzy_suggestions
from .index import SearchIndex
from .models.doc import SEPARATOR, Doc, ItemType, Name
from .models.index import IndexItem
from .parser import Parser
from .sysroot_detector import sysroot_doc_dirs

logger = structlog.get_logger(__name__)

SEARCH_INDEX_GLOB = "search-index*.js"

# Members are documented on the page of their parent
MEMBER_ITEM_TYPES = frozenset(
    {
        ItemType.STRUCT_FIELD,
        ItemType.VARIANT,
        ItemType.ASSOC_TYPE,
        ItemType.ASSOC_CONST,
        ItemType.METHOD,
        ItemType.TY_METHOD,
    }
)


@dataclass(frozen=True)
class ItemRef:
    """A located documentation item that has not been scraped yet.

    ``member`` is set for members and holds the name of the item whose page
    documents them.
    """

    name: Name
    ty: ItemType
    path: Path
    member: Name | None = None

    def load_doc(self) -> Doc:
        parser = Parser.from_file(self.path)
        if self.member is not None:
            return parser.parse_member_doc(self.name, self.ty)
        if self.ty == ItemType.MODULE:
            return parser.parse_module_doc(self.name)
        return parser.parse_item_doc(self.name, self.ty)


class Crate:
    """The documentation of one package inside a source directory."""

    def __init__(self, name: str, path: Path):
        self.name = name
        self.path = path

    def _owns(self, name: Name) -> bool:
        return name.first().replace("-", "_") == self.name

    def __repr__(self) -> str:
        return f"Crate({self.name!r}, {str(self.path)!r})"

    def find_item(self, name: Name) -> ItemRef | None:
        """Find an item with its own page via ``all.html``."""
        rest = name.rest()
        all_path = self.path / "all.html"
        if not self._owns(name) or rest is None or not all_path.is_file():
            return None

        link = Parser.from_file(all_path).find_item(rest)
        if link is None:
            return None
        path = self.path / link
        try:
            ty = ItemType.parse(path.name.split(".", 1)[0])
        except UnknownItemTypeError:
            logger.warning("unexpected item link", crate=self.name, link=link)
            return None
        logger.debug("found item page", item=str(name), path=str(path))
        return ItemRef(name, ty, path)

    def find_module(self, name: Name) -> ItemRef | None:
        if not self._owns(name):
            return None
        path = self.path.joinpath(*name.segments()[1:], "index.html")
        if not path.is_file():
            return None
        logger.debug("found module page", item=str(name), path=str(path))
        return ItemRef(name, ItemType.MODULE, path)

    def find_member(self, name: Name) -> ItemRef | None:
        parent_name = name.parent()
        if parent_name is None:
            return None
        parent = self.find_item(parent_name)
        if parent is None:
            return None
        ty = Parser.from_file(parent.path).find_member(name)
        if ty is None:
            return None
        logger.debug("found member", item=str(name), ty=ty.id, path=str(parent.path))
        return ItemRef(name, ty, parent.path, member=parent_name)

    def find(self, name: Name, ty_hint: ItemType | None = None) -> ItemRef | None:
        """Find ``name`` as an item, a module or a member, in that order.

        A member type hint tries the member lookup first.
        """
        lookups = [self.find_item, self.find_module, self.find_member]
        if ty_hint in MEMBER_ITEM_TYPES:
            lookups.insert(0, lookups.pop())
        for lookup in lookups:
            item = lookup(name)
            if item is not None:
                return item
        return None


class DirectorySource:
    """A directory containing rustdoc output for one or more packages."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"DirectorySource({str(self.path)!r})"

    def find_crate(self, name: str) -> Crate | None:
        crate_path = self.path / name.replace("-", "_")
        if (crate_path / "all.html").is_file() or (crate_path / "index.html").is_file():
            return Crate(name.replace("-", "_"), crate_path)
        return None

    def load_index(self) -> SearchIndex | None:
        """Load the first search index of this source, if there is one.

        Raises:
            MalformedSourceError: If the index has an unknown format
        """
        for index_path in sorted(self.path.glob(SEARCH_INDEX_GLOB)):
            if index_path.is_file():
                logger.debug("loading search index", path=str(index_path))
                return SearchIndex.load(index_path)
        logger.debug("no search index in source", path=str(self.path))
        return None


class Sources:
    """Ordered documentation sources; the source added last is searched first."""

    def __init__(self, sources: list[DirectorySource] | None = None):
        self._sources: list[DirectorySource] = []
        self._loaded_indexes: list[SearchIndex] | None = None
        for source in sources or []:
            self.add(source)

    def add(self, source: DirectorySource) -> None:
        self._sources.insert(0, source)
        self._loaded_indexes = None

    def __iter__(self):
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def find_crate(self, name: str) -> Crate | None:
        for source in self._sources:
            krate = source.find_crate(name)
            if krate is not None:
                return krate
        return None

    def find(self, name: Name, ty_hint: ItemType | None = None) -> ItemRef | None:
        krate = self.find_crate(name.first())
        if krate is None:
            logger.info("package not found", krate=name.first())
            return None
        return krate.find(name, ty_hint)

    def _indexes(self) -> list[SearchIndex]:
        """Search indexes of all sources, loaded once per source list."""
        if self._loaded_indexes is None:
            indexes = []
            for source in self._sources:
                index = source.load_index()
                if index is not None:
                    indexes.append(index)
            self._loaded_indexes = indexes
        return self._loaded_indexes

    def search(self, keyword: Name | str) -> list[IndexItem]:
        """Search all indexes for items whose name ends with ``keyword``."""
        keyword = str(keyword)
        items: set[IndexItem] = set()
        for index in self._indexes():
            items.update(index.find(keyword))
        logger.info("searched indexes", keyword=keyword, matches=len(items))
        return sorted(items)

    def suggest(self, keyword: Name | str, limit: int | None = None) -> list[str]:
        """Suggest known item names close to ``keyword``."""
        names: set[str] = set()
        for index in self._indexes():
            names.update(index.names())
        if not names:
            return []
        keyword = str(keyword)
        # Compare against names of the same depth when the keyword is a path
        if SEPARATOR not in keyword:
            by_last: dict[str, list[str]] = {}
            for name in sorted(names):
                by_last.setdefault(name.rsplit(SEPARATOR, 1)[-1], []).append(name)
            limit = limit or config.SUGGESTION_LIMIT
            matches = get_fuzzy_suggestions(keyword, list(by_last), limit=limit)
            return [name for match in matches for name in by_last[match]][:limit]
        return get_fuzzy_suggestions(
            keyword, sorted(names), limit=limit or config.SUGGESTION_LIMIT
        )


def default_source_paths(sysroot: Path | None = None) -> list[Path]:
    """Existing default documentation directories, lowest priority first."""
    candidates = sysroot_doc_dirs(sysroot) + [config.LOCAL_DOC_DIR]
    return [path for path in candidates if path.is_dir()]


def load_sources(paths: list[Path | str], load_default_sources: bool = True) -> Sources:
    """Build the source list from default and explicitly given paths.

    Raises:
        NotADirectoryError: If an explicitly given source is not a directory
    """
    sources = Sources()
    if load_default_sources:
        for path in default_source_paths():
            sources.add(DirectorySource(path))
    for path in paths:
        path = Path(path)
        if not path.is_dir():
            raise NotADirectoryError(f"Documentation source is not a directory: '{path}'")
        sources.add(DirectorySource(path))
    logger.debug("loaded sources", sources=[str(s.path) for s in sources])
    return sources
