"""Member extraction: fields, variants, methods, impls and module items.

Members are listed as flat runs of sibling elements: a heading carrying the
member id and declaration, optionally followed by a docblock. The runs are
folded into ``Doc`` records by ``MemberAccumulator``.
"""

from __future__ import annotations

import logging
from enum import Enum, auto

from ..models.doc import Code, Doc, ItemType, MemberGroup, Name, Text
from . import strategies
from .strategies import first_match
from .util import (
    child_elements,
    get_id_part,
    has_class,
    is_element,
    iter_sibling_elements,
    next_sibling_element,
    node_to_text,
    to_code,
    to_text,
)

logger = logging.getLogger(__name__)


class AccumulatorState(Enum):
    IDLE = auto()
    NAME = auto()
    NAME_DEFINITION = auto()


class MemberAccumulator:
    """Collects ``(name, definition, description)`` triples into member docs.

    ``start`` begins a new member and flushes the pending one, ``describe``
    completes the pending member with its docblock and ``finish`` flushes
    whatever is left at the end of the run. A docblock that arrives while
    idle (before the first heading, or right after another docblock) belongs
    to no member and is dropped.
    """

    def __init__(self, parent: Name, ty: ItemType):
        self.parent = parent
        self.ty = ty
        self.docs: list[Doc] = []
        self.state = AccumulatorState.IDLE
        self._name: str | None = None
        self._definition: Code | None = None

    def start(self, name: str | None, definition: Code | None = None) -> None:
        self.finish()
        if not name:
            return
        self._name = name
        self._definition = definition
        if definition is None:
            self.state = AccumulatorState.NAME
        else:
            self.state = AccumulatorState.NAME_DEFINITION

    def describe(self, description: Text | None) -> None:
        if self.state is AccumulatorState.IDLE:
            logger.debug("Dropping %s docblock without a heading", self.ty.id)
            return
        self._flush(description)

    def finish(self) -> None:
        if self.state is not AccumulatorState.IDLE:
            self._flush(None)

    def _flush(self, description: Text | None) -> None:
        self.docs.append(
            Doc(
                name=self.parent.child(self._name),
                ty=self.ty,
                definition=self._definition,
                description=description,
            )
        )
        self._name = None
        self._definition = None
        self.state = AccumulatorState.IDLE

    def sort(self) -> None:
        self.docs.sort(key=_member_sort_key)

    def group(self, title: str | None = None) -> MemberGroup | None:
        self.finish()
        if not self.docs:
            return None
        return MemberGroup(title=title, members=tuple(self.docs))

    def groups(self, title: str | None = None) -> list[MemberGroup]:
        group = self.group(title)
        return [group] if group is not None else []


def _member_sort_key(doc: Doc):
    # Members without a definition sort first
    definition = doc.definition
    return (doc.name, definition is not None, definition.text if definition else "")


def member_definition(heading) -> Code | None:
    """Declaration of a member heading, preferring its code element."""
    code = first_match("member definition", strategies.MEMBER_DEFINITION_STRATEGIES, heading)
    return to_code(code if code is not None else heading)


def _group_id_heading(document, ty: ItemType):
    return document.find(id=ty.group_id)


def get_fields(document, parent: Name) -> tuple[ItemType, list[MemberGroup]]:
    ty = ItemType.STRUCT_FIELD
    fields = MemberAccumulator(parent, ty)
    heading = _group_id_heading(document, ty)

    if heading is not None:
        for element in iter_sibling_elements(heading):
            if is_element(element, "span") and has_class(element, "structfield"):
                fields.start(get_id_part(element, 1), member_definition(element))
            elif is_element(element, "div"):
                if has_class(element, "docblock"):
                    fields.describe(to_text(element))
            else:
                break

    return ty, fields.groups()


def _variant_elements(heading):
    for element in iter_sibling_elements(heading):
        if is_element(element, "div") and has_class(element, "variants"):
            # Rust 1.6x wraps all variants in one container
            yield from child_elements(element)
            return
        yield element


def get_variants(document, parent: Name) -> tuple[ItemType, list[MemberGroup]]:
    ty = ItemType.VARIANT
    variants = MemberAccumulator(parent, ty)
    heading = _group_id_heading(document, ty)

    if heading is not None:
        for element in _variant_elements(heading):
            variant = first_match(
                "variant heading", strategies.VARIANT_HEADING_STRATEGIES, element
            )
            if variant is not None:
                variants.start(get_id_part(variant, 1), member_definition(variant))
            elif is_element(element, "div"):
                if has_class(element, "docblock"):
                    variants.describe(to_text(element))
            else:
                break

    return ty, variants.groups()


def get_method_group(
    parent: Name, title: str | None, impl_items, ty: ItemType
) -> MemberGroup | None:
    """Read the members listed in one ``impl-items``/``methods`` container."""
    methods = MemberAccumulator(parent, ty)

    for element in child_elements(impl_items):
        heading = first_match("member heading", strategies.MEMBER_HEADING_STRATEGIES, element)
        if heading is not None:
            methods.start(get_id_part(heading, 1), member_definition(heading))
        elif is_element(element, "div") and has_class(element, "docblock"):
            methods.describe(to_text(element))
        elif is_element(element, "details"):
            # Rust 1.54+: heading in details > summary, docblock after the summary
            summary = element.find("summary")
            if summary is not None:
                for candidate in summary.find_all(["div", "section"]):
                    heading = first_match(
                        "member heading", strategies.MEMBER_HEADING_STRATEGIES, candidate
                    )
                    if heading is not None:
                        methods.start(get_id_part(heading, 1), member_definition(heading))
                        break
            docblock = element.find("div", class_="docblock")
            if docblock is not None:
                methods.describe(to_text(docblock))

    return methods.group(title)


def _impl_title(title_node) -> str:
    first = title_node.find(True, recursive=False)
    if is_element(first, "code"):
        title_node = first
    return node_to_text(title_node)


def _impl_groups(
    elements, parent: Name, ty: ItemType, heading_strategies, skip_unknown: bool = False
) -> list[MemberGroup]:
    groups = []
    elements = list(elements)
    i = 0
    while i < len(elements):
        element = elements[i]
        found = first_match("impl heading", heading_strategies, element)
        if found is None:
            if not skip_unknown:
                break
            i += 1
            continue
        title_node, anchor = found
        impl_items = next_sibling_element(anchor)
        if impl_items is not None and is_element(impl_items, "div") and has_class(
            impl_items, "impl-items"
        ):
            group = get_method_group(parent, _impl_title(title_node), impl_items, ty)
            if group is not None:
                groups.append(group)
            if anchor is element:
                # The items follow the heading on the same level
                i += 1
        i += 1
    return groups


def _impl_section_groups(heading, parent: Name, ty: ItemType) -> list[MemberGroup]:
    following = next_sibling_element(heading)
    if following is not None and following.get("id") == "implementations-list":
        return _impl_groups(
            child_elements(following),
            parent,
            ty,
            strategies.IMPL_LIST_HEADING_STRATEGIES,
            skip_unknown=True,
        )
    return _impl_groups(
        iter_sibling_elements(heading), parent, ty, strategies.IMPL_HEADING_STRATEGIES
    )


def get_methods(document, parent: Name) -> tuple[ItemType, list[MemberGroup]]:
    ty = ItemType.METHOD
    groups: list[MemberGroup] = []

    for section_id in strategies.IMPL_SECTION_IDS:
        heading = document.find(id=section_id)
        if heading is not None:
            groups.extend(_impl_section_groups(heading, parent, ty))

    for selector, title, member_ty in strategies.METHOD_SECTIONS:
        for heading in document.select(selector):
            methods = next_sibling_element(heading)
            if methods is None:
                continue
            group = get_method_group(
                parent,
                title if title is not None else node_to_text(heading),
                methods,
                member_ty,
            )
            if group is not None:
                groups.append(group)

    return ty, groups


def get_assoc_types(document, parent: Name) -> tuple[ItemType, list[MemberGroup]]:
    ty = ItemType.ASSOC_TYPE
    groups: list[MemberGroup] = []

    for selector in strategies.ASSOC_TYPE_SECTIONS:
        heading = document.select_one(selector)
        if heading is None:
            continue
        items = next_sibling_element(heading)
        if items is not None:
            group = get_method_group(parent, None, items, ty)
            if group is not None:
                groups.append(group)

    return ty, groups


def _implementation_group(document, parent: Name, title: str, lists) -> MemberGroup | None:
    impls = MemberAccumulator(parent, ItemType.IMPL)

    for list_id, heading_strategies in lists:
        list_div = document.find(id=list_id)
        if list_div is None:
            continue
        for item in child_elements(list_div):
            h3 = first_match("trait impl heading", heading_strategies, item)
            if h3 is None:
                continue
            link = h3.find("a")
            name = node_to_text(link) if link is not None else None
            impls.start(name, member_definition(h3))
        break

    impls.finish()
    impls.sort()
    return impls.group(title)


def get_implementations(document, parent: Name) -> tuple[ItemType, list[MemberGroup]]:
    groups = []
    for title, lists in strategies.IMPLEMENTATION_LISTS:
        group = _implementation_group(document, parent, title, lists)
        if group is not None:
            groups.append(group)
    return ItemType.IMPL, groups


# Module member layouts

def _table_members(document, parent: Name, ty: ItemType) -> list[Doc]:
    """``<table><tr><td><a>Name</a></td><td class="docblock-short">`` (< 1.5x)."""
    table = document.select_one(f"#{ty.group_id} + table")
    if table is None:
        return []
    members = []
    for item in table.select("td:first-child > :first-child"):
        docblock = next_sibling_element(item.parent)
        members.append(
            Doc(name=parent.child(item.get_text().strip()), ty=ty, description=to_text(docblock))
        )
    return members


def _item_table_pairs(container):
    children = child_elements(container)
    rows = [c for c in children if has_class(c, "item-row")]
    if rows:
        for row in rows:
            yield tuple(child_elements(row)[:2])
    else:
        yield from zip(children[::2], children[1::2])


def _div_item_table_members(document, parent: Name, ty: ItemType) -> list[Doc]:
    """``<div class="item-table">`` of module-item / docblock-short pairs."""
    div = document.select_one(f"#{ty.group_id} + div.item-table")
    if div is None:
        return []
    members = []
    for pair in _item_table_pairs(div):
        if len(pair) != 2:
            continue
        item, docblock = pair
        if not has_class(item, "module-item") or not has_class(docblock, "docblock-short"):
            continue
        members.append(
            Doc(name=parent.child(item.get_text().strip()), ty=ty, description=to_text(docblock))
        )
    return members


def _list_item_table_members(document, parent: Name, ty: ItemType) -> list[Doc]:
    """``<ul class="item-table"><li><div class="item-name">`` (Rust 1.6x)."""
    ul = document.select_one(f"#{ty.group_id} + ul.item-table")
    if ul is None:
        return []
    members = []
    for li in ul.find_all("li", recursive=False):
        item = li.select_one("div.item-name")
        if item is None:
            continue
        link = item.find("a")
        name = (link if link is not None else item).get_text().strip()
        members.append(
            Doc(name=parent.child(name), ty=ty, description=to_text(li.select_one("div.desc")))
        )
    return members


MODULE_MEMBER_LAYOUTS = (
    strategies.Strategy("member table", _table_members),
    strategies.Strategy("item table", _div_item_table_members),
    strategies.Strategy("item list", _list_item_table_members),
)


def get_module_members(document, parent: Name, ty: ItemType) -> list[Doc]:
    members = first_match(
        f"{ty.group_id} members", MODULE_MEMBER_LAYOUTS, document, parent, ty
    )
    return members or []
