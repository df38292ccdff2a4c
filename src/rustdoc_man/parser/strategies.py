"""Ordered selector strategies for every extraction site of the scraper.

rustdoc does not version its HTML, so each block of a page is located by
trying the layouts of all known rustdoc generations in order. Every table
below is tried front to back and the first strategy that yields something
wins:

- Rust < 1.45: ``#main``, ``h3.impl`` / ``h4.method`` headings, module
  members in tables.
- Rust 1.45 - 1.53: ``#implementations`` replaces ``#methods``.
- Rust 1.54+: ``details``/``summary`` wrappers, ``h4.code-header``,
  ``details.top-doc`` around the item description.
- Rust 1.6x: ``#main-content``, ``section`` headings, ``pre.item-decl``,
  ``ul.item-table`` and ``ul.all-items`` lists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from ..models.doc import ItemType
from .util import child_elements, first_child_element, has_class, is_element

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Strategy:
    """One named way of extracting something from a page."""

    name: str
    extract: Callable[..., Any]

    def __call__(self, *args):
        return self.extract(*args)


def _is_empty(result) -> bool:
    # Tags are falsy when they have no children, so test for None explicitly
    return result is None or (isinstance(result, (list, str)) and not result)


def first_match(site: str, strategies: Sequence[Strategy], *args):
    """Apply ``strategies`` in order and return the first non-empty result."""
    for strategy in strategies:
        result = strategy(*args)
        if not _is_empty(result):
            logger.debug("%s: matched strategy '%s'", site, strategy.name)
            return result
    logger.debug("%s: no strategy matched", site)
    return None


def select_one(selector: str) -> Callable:
    def extract(root):
        return root.select_one(selector)

    return extract


# Item declaration

_GENERIC_DEFINITION = (
    Strategy("type declaration block", select_one(".docblock.type-decl")),
    Strategy("item declaration", select_one("pre.rust.item-decl")),
    Strategy("wrapped item declaration", select_one(".item-decl pre")),
)

_SPECIFIC_DEFINITION = {
    ItemType.CONSTANT: Strategy("constant block", select_one("pre.const")),
    ItemType.FUNCTION: Strategy("function block", select_one("pre.fn")),
    ItemType.TYPEDEF: Strategy("typedef block", select_one("pre.typedef")),
}


def definition_strategies(ty: ItemType) -> tuple[Strategy, ...]:
    specific = _SPECIFIC_DEFINITION.get(ty)
    if specific is None:
        return _GENERIC_DEFINITION
    return (specific,) + _GENERIC_DEFINITION[1:]


# Item description

DESCRIPTION_STRATEGIES = (
    Strategy(
        "collapsible top doc",
        select_one("#main > details.top-doc > .docblock:not(.type-decl)"),
    ),
    Strategy(
        "collapsible top doc in main content",
        select_one("#main-content > details.top-doc > .docblock:not(.type-decl)"),
    ),
    Strategy(
        "plain top doc",
        select_one("#main > .docblock:not(.type-decl):not(.item-decl)"),
    ),
)

MODULE_DESCRIPTION_STRATEGIES = (
    Strategy("collapsible top doc", select_one("details.top-doc > .docblock")),
    Strategy("first docblock", select_one(".docblock")),
)


# Entries of all.html

def _find_link(selector: str) -> Callable:
    def extract(root, name: str):
        for link in root.select(selector):
            if link.get_text() == name:
                return link.get("href")
        return None

    return extract


FIND_ITEM_STRATEGIES = (
    Strategy("docblock list", _find_link("ul.docblock li a")),
    Strategy("all-items list", _find_link("ul.all-items li a")),
)


# Definition of a member heading

MEMBER_DEFINITION_STRATEGIES = (
    Strategy("code element", select_one("code")),
    Strategy("code header", select_one(".code-header")),
)


# Member headings inside impl blocks

MEMBER_HEADING_CLASSES = ("method", "associatedtype", "associatedconstant")


def _legacy_member_heading(element):
    """``<h4 class="method" id="method.foo"><code>...</code></h4>`` (< 1.54)."""
    if is_element(element, "h3", "h4") and any(
        has_class(element, cls) for cls in MEMBER_HEADING_CLASSES
    ):
        return element
    return None


def _code_header_member_heading(element):
    """``<div|section class="method" id="method.foo"><h4 class="code-header">``."""
    if is_element(element, "div", "section") and any(
        has_class(element, cls) for cls in MEMBER_HEADING_CLASSES
    ):
        if any(has_class(child, "code-header") for child in child_elements(element)):
            return element
    return None


MEMBER_HEADING_STRATEGIES = (
    Strategy("heading element", _legacy_member_heading),
    Strategy("code header section", _code_header_member_heading),
)


# Variant headings

def _variant_heading(element):
    if is_element(element, "div", "section", "h3") and has_class(element, "variant"):
        return element
    return None


VARIANT_HEADING_STRATEGIES = (Strategy("variant heading", _variant_heading),)


# Headings of implementation blocks

def _legacy_impl_heading(element):
    """``<h3 class="impl"><code>impl Foo</code></h3>`` followed by the items."""
    if is_element(element, "h3") and has_class(element, "impl"):
        return element, element
    return None


def _details_impl_heading(element):
    """``<details><summary>...<h3>impl Foo</h3></summary><div class="impl-items">``."""
    if not is_element(element, "details"):
        return None
    summary = first_child_element(element)
    if summary is None:
        return None
    h3 = summary.select_one("h3")
    if h3 is None:
        return None
    return h3, summary


IMPL_HEADING_STRATEGIES = (
    Strategy("impl heading", _legacy_impl_heading),
    Strategy("impl details", _details_impl_heading),
)

# Children of the inherent #implementations-list (Rust 1.6x)
IMPL_LIST_HEADING_STRATEGIES = (Strategy("impl details", _details_impl_heading),)


def _details_trait_impl(item):
    if not is_element(item, "details"):
        return None
    summary = first_child_element(item)
    if summary is None:
        return None
    return summary.select_one("h3.impl, h3.code-header")


def _legacy_trait_impl(item):
    if is_element(item, "h3") and has_class(item, "impl"):
        return item
    return None


def _wrapped_trait_impl(item):
    if is_element(item, "div", "section") and has_class(item, "impl"):
        return item.select_one("h3")
    return None


TRAIT_IMPL_HEADING_STRATEGIES = (
    Strategy("impl details", _details_trait_impl),
    Strategy("impl heading", _legacy_trait_impl),
    Strategy("impl wrapper", _wrapped_trait_impl),
)

# Before Rust 1.45 the trait implementations were listed in #implementations-list,
# which newer releases use for inherent impls wrapped in details elements.
LEGACY_TRAIT_IMPL_HEADING_STRATEGIES = (Strategy("impl heading", _legacy_trait_impl),)

# (title, (list id, heading strategies) pairs tried in order)
IMPLEMENTATION_LISTS = (
    (
        "Trait Implementations",
        (
            ("trait-implementations-list", TRAIT_IMPL_HEADING_STRATEGIES),
            ("implementations-list", LEGACY_TRAIT_IMPL_HEADING_STRATEGIES),
        ),
    ),
    (
        "Auto Trait Implementations",
        (("synthetic-implementations-list", TRAIT_IMPL_HEADING_STRATEGIES),),
    ),
    (
        "Blanket Implementations",
        (("blanket-implementations-list", TRAIT_IMPL_HEADING_STRATEGIES),),
    ),
)


# Method sections

IMPL_SECTION_IDS = ("methods", "implementations")

# (heading selector, title, member type); a title of None means the heading text
METHOD_SECTIONS = (
    ('h2#deref-methods, h2[id^="deref-methods-"]', None, ItemType.METHOD),
    ("#required-methods", "Required Methods", ItemType.TY_METHOD),
    ("#provided-methods", "Provided Methods", ItemType.METHOD),
)

ASSOC_TYPE_SECTIONS = ("#associated-types", "#required-associated-types")


# Module members

MODULE_MEMBER_TYPES = (
    ItemType.EXTERN_CRATE,
    ItemType.IMPORT,
    ItemType.PRIMITIVE,
    ItemType.MODULE,
    ItemType.MACRO,
    ItemType.STRUCT,
    ItemType.ENUM,
    ItemType.CONSTANT,
    ItemType.STATIC,
    ItemType.TRAIT,
    ItemType.FUNCTION,
    ItemType.TYPEDEF,
    ItemType.UNION,
)

MEMBER_TYPES = (
    ItemType.STRUCT_FIELD,
    ItemType.VARIANT,
    ItemType.ASSOC_TYPE,
    ItemType.ASSOC_CONST,
    ItemType.METHOD,
    ItemType.TY_METHOD,
)


def member_selector(ty: ItemType, name: str) -> str:
    return f'[id="{ty.id}.{name}"]'
