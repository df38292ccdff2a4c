"""Parses HTML files generated by rustdoc into ``Doc`` records.

For the structure of the parsed pages, see the ``html::render`` module of
``librustdoc``: ``print_item`` and the ``item_*`` functions render item pages,
``AllTypes::print`` renders ``all.html``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import MemberNotFoundError
from ..models.doc import Doc, Example, ItemType, MemberGroup, Name
from . import members, strategies
from .strategies import first_match
from .util import (
    get_id_part,
    has_class,
    is_element,
    next_sibling_element,
    node_to_text,
    parse_html,
    previous_sibling_element,
    to_code,
    to_text,
)

logger = logging.getLogger(__name__)


class Parser:
    """Scraper for one rustdoc HTML document.

    A parser holds the parsed document and, when it was read from disk, the
    file path used to build ``Doc.url``. It never modifies the document, so
    every entry point can be called any number of times.
    """

    def __init__(self, document, path: Path | None = None):
        self.document = document
        self.path = path

    @classmethod
    def from_file(cls, path: Path | str) -> Parser:
        """Parse an HTML file.

        Raises:
            OSError: If the file cannot be read
        """
        path = Path(path)
        logger.info("Reading HTML from file '%s'", path)
        with path.open("rb") as f:
            document = parse_html(f.read())
        logger.info("HTML file parsed successfully")
        return cls(document, path)

    @classmethod
    def from_string(cls, s: str) -> Parser:
        logger.info("Reading HTML from string")
        return cls(parse_html(s))

    def find_item(self, item: str) -> str | None:
        """Look up a crate-relative item name in ``all.html``.

        Returns:
            The relative link to the item's page, or None
        """
        return first_match("find item", strategies.FIND_ITEM_STRATEGIES, self.document, item)

    def _get_member(self, name: str):
        selector = ", ".join(
            strategies.member_selector(ty, name) for ty in strategies.MEMBER_TYPES
        )
        return self.document.select_one(selector)

    def find_member(self, name: Name) -> ItemType | None:
        """Find the type of the member ``name.last()`` on this page."""
        member = self._get_member(name.last())
        if member is None:
            return None
        return ItemType.parse(get_id_part(member, 0))

    def parse_item_doc(self, name: Name, ty: ItemType) -> Doc:
        logger.info("Parsing item documentation for '%s'", name)
        definition = first_match(
            f"{ty.id} definition", strategies.definition_strategies(ty), self.document
        )
        description = first_match(
            "item description", strategies.DESCRIPTION_STRATEGIES, self.document
        )

        doc = Doc(
            name=name,
            ty=ty,
            definition=to_code(definition),
            description=to_text(description),
        )
        if self.path is not None:
            doc = doc.with_url(self.path)

        for extract in (
            members.get_variants,
            members.get_fields,
            members.get_assoc_types,
            members.get_methods,
            members.get_implementations,
        ):
            member_ty, groups = extract(self.document, name)
            doc = doc.with_groups(member_ty, groups)

        return doc

    def parse_member_doc(self, name: Name, ty: ItemType) -> Doc:
        """Scrape a member (method, field, ...) from its parent's page.

        Raises:
            MemberNotFoundError: If the member or its declaration is missing
        """
        logger.info("Parsing member documentation for '%s'", name)
        member_id = f"{ty.id}.{name.last()}"
        heading = self.document.select_one(strategies.member_selector(ty, name.last()))
        if heading is None:
            raise MemberNotFoundError(str(name))

        code = first_match(
            "member definition", strategies.MEMBER_DEFINITION_STRATEGIES, heading
        )
        if code is None:
            raise MemberNotFoundError(
                str(name), f"The member {name} does not have a definition"
            )

        doc = Doc(
            name=name,
            ty=ty,
            definition=to_code(code),
            description=to_text(_member_docblock(heading)),
        )
        if self.path is not None:
            doc = doc.with_url(self.path, member_id)
        return doc

    def parse_module_doc(self, name: Name) -> Doc:
        logger.info("Parsing module documentation for '%s'", name)
        description = first_match(
            "module description", strategies.MODULE_DESCRIPTION_STRATEGIES, self.document
        )

        doc = Doc(name=name, ty=ItemType.MODULE, description=to_text(description))
        if self.path is not None:
            doc = doc.with_url(self.path)

        for item_type in strategies.MODULE_MEMBER_TYPES:
            module_members = members.get_module_members(self.document, name, item_type)
            if module_members:
                doc = doc.with_groups(item_type, [MemberGroup(members=module_members)])
        return doc

    def find_examples(self) -> list[Example]:
        return [_get_example(node) for node in self.document.select(".rust-example-rendered")]


def _member_docblock(heading):
    # Since Rust 1.54 the heading sits in a summary element next to the docblock
    sibling = next_sibling_element(heading)
    if sibling is None and is_element(heading.parent, "summary"):
        sibling = next_sibling_element(heading.parent)
    if sibling is not None and has_class(sibling, "docblock"):
        return sibling
    return None


def _get_example(node) -> Example:
    parent = node.parent
    if has_class(parent, "example-wrap"):
        caption = previous_sibling_element(parent)
    else:
        caption = previous_sibling_element(node)

    description = None
    if caption is not None and node_to_text(caption).endswith(":"):
        description = to_text(caption)
    return Example(code=to_code(node), description=description)
