"""Search index for a documentation source.

The search index is read from the ``search-index.js`` file generated by
rustdoc. It holds a single JavaScript assignment whose right-hand side is a
JSON object, quoted as a single-quoted JavaScript string, mapping package
names to one of the encodings in ``schemas``.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

import structlog

from ..errors import MalformedSourceError
from ..models.doc import SEPARATOR, ItemType, Name
from ..models.index import CrateData, IndexItem
from .schemas import decode_crate_data

logger = structlog.get_logger(__name__)

MULTILINE_START = "var searchIndex = JSON.parse('{\\"
MULTILINE_END = "}');"
SINGLE_LINE_PATTERN = re.compile(r"^var searchIndex = JSON\.parse\('(.*)'\);?\s*$")
_JS_ESCAPE = re.compile(r"\\(.)")


def _unescape_js(s: str) -> str:
    """Undo the escaping of a single-quoted JavaScript string literal."""
    return _JS_ESCAPE.sub(lambda m: m.group(1), s)


def _extract_multiline(lines: list[str], path: Path) -> str | None:
    """``var searchIndex = JSON.parse('{\\`` + one package per line + ``}');``"""
    try:
        start = lines.index(MULTILINE_START)
    except ValueError:
        return None

    body = ["{"]
    for line in lines[start + 1 :]:
        if line == MULTILINE_END:
            body.append("}")
            return "".join(body)
        body.append(line[:-1] if line.endswith("\\") else line)

    raise MalformedSourceError(path, "search index is not terminated")


def _extract_single_line(lines: list[str], path: Path) -> str | None:
    for line in lines:
        match = SINGLE_LINE_PATTERN.match(line)
        if match:
            return match.group(1)
    return None


# Wrapper layouts, tried in order
PAYLOAD_STRATEGIES = (
    ("multi-line", _extract_multiline),
    ("single-line", _extract_single_line),
)


class SearchIndex:
    """Canonical search data of every package in one documentation source."""

    def __init__(self, crates: dict[str, CrateData], path: Path | None = None):
        self.crates = crates
        self.path = path

    @classmethod
    def load(cls, path: Path | str) -> SearchIndex | None:
        """Read and decode a search index file.

        Returns:
            The index, or None if the file has no recognizable index payload

        Raises:
            OSError: If the file cannot be read
            MalformedSourceError: If the file is not UTF-8 or the payload is
                truncated or undecodable
        """
        path = Path(path)
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except UnicodeDecodeError as e:
            raise MalformedSourceError(path, f"search index is not valid UTF-8: {e}") from e

        payload = None
        for strategy, extract in PAYLOAD_STRATEGIES:
            payload = extract(lines, path)
            if payload is not None:
                logger.debug("found search index payload", path=str(path), layout=strategy)
                break
        if payload is None:
            logger.info("no compatible search index found", path=str(path))
            return None

        return cls.from_json(_unescape_js(payload), path)

    @classmethod
    def from_json(cls, payload: str, path: Path | None = None) -> SearchIndex:
        """Decode the unescaped JSON object mapping package names to data."""
        try:
            raw = json.loads(payload)
        except json.JSONDecodeError as e:
            raise MalformedSourceError(path, f"could not parse search index: {e}") from e
        if not isinstance(raw, dict):
            raise MalformedSourceError(path, "search index is not a JSON object")

        crates = {
            krate: decode_crate_data(krate, data, path) for krate, data in raw.items()
        }
        logger.info(
            "loaded search index",
            path=str(path) if path else None,
            crates=len(crates),
            items=sum(len(data.items) for data in crates.values()),
        )
        return cls(crates, path)

    def _iter_entries(self):
        """Yield ``(item, owning path)`` for every addressable item.

        Empty item paths repeat the previous item's path, starting with the
        package name. Associated types are skipped because they have no page
        of their own.
        """
        for krate, data in self.crates.items():
            path = krate
            for item in data.items:
                if item.path:
                    path = item.path
                if item.ty == ItemType.ASSOC_TYPE:
                    continue

                parent = data.parent_path(item)
                full_path = f"{path}{SEPARATOR}{parent}" if parent else path
                yield item, full_path

    def find(self, keyword: str) -> list[IndexItem]:
        """Find all items whose full name is ``keyword`` or ends with ``::keyword``.

        Matching is case-sensitive; results are sorted and deduplicated.
        """
        keyword = Name(keyword)
        matches = {
            IndexItem(
                path=full_path, name=item.name, description=item.desc, ty=item.ty
            )
            for item, full_path in self._iter_entries()
            if Name(full_path).child(item.name).ends_with(keyword)
        }
        return sorted(matches)

    def names(self) -> list[str]:
        """All addressable full names, sorted."""
        return sorted(
            {f"{full_path}{SEPARATOR}{item.name}" for item, full_path in self._iter_entries()}
        )
