"""Tests for scraping rustdoc pages of different rustdoc generations."""

import pytest

from rustdoc_man.errors import MemberNotFoundError
from rustdoc_man.models import Code, Doc, ItemType, MemberGroup, Name, Text
from rustdoc_man.parser import AccumulatorState, MemberAccumulator, Parser
from rustdoc_man.parser.util import get_id_part, node_to_text, parse_html, to_text

STRUCT_PAGES = ["struct_legacy.html", "struct_details.html", "struct_modern.html"]
ENUM_PAGES = ["enum_legacy.html", "enum_modern.html"]
MODULE_PAGES = ["mod_table.html", "mod_item_table.html", "mod_item_list.html"]

NODE_REF = Name("kuchiki::NodeRef")


def text(s: str) -> Text:
    return Text(plain=s, html=f"<p>{s}</p>")


class TestItemDoc:
    """Test ``Parser.parse_item_doc`` on item pages."""

    @pytest.mark.parametrize("page", STRUCT_PAGES)
    def test_struct_definition_and_description(self, load_page, page):
        doc = load_page(page).parse_item_doc(NODE_REF, ItemType.STRUCT)
        assert doc.name == NODE_REF
        assert doc.ty == ItemType.STRUCT
        assert doc.definition == Code(
            "pub struct NodeRef {\n"
            "    pub node: Node,\n"
            "    pub count: usize,\n"
            "    pub extra: bool,\n"
            "}"
        )
        assert doc.description.plain == (
            "A strong reference to a node.\nExamples:\nlet node = NodeRef::new();"
        )
        assert doc.url.endswith(page)

    @pytest.mark.parametrize("page", STRUCT_PAGES)
    def test_struct_fields(self, load_page, page):
        doc = load_page(page).parse_item_doc(NODE_REF, ItemType.STRUCT)
        [group] = doc.groups[ItemType.STRUCT_FIELD]
        assert group.title is None
        assert list(group.members) == [
            Doc(
                NODE_REF.child("node"),
                ItemType.STRUCT_FIELD,
                definition=Code("node: Node"),
                description=text("The node."),
            ),
            Doc(NODE_REF.child("count"), ItemType.STRUCT_FIELD, definition=Code("count: usize")),
            Doc(
                NODE_REF.child("extra"),
                ItemType.STRUCT_FIELD,
                definition=Code("extra: bool"),
                description=text("Extra flag."),
            ),
        ]

    def test_last_field_without_description(self):
        parser = Parser.from_string(
            '<section id="main-content">'
            '<h2 id="fields" class="fields section-header">Fields</h2>'
            '<span id="structfield.a" class="structfield section-header"><code>a: u8</code></span>'
            '<div class="docblock"><p>First.</p></div>'
            '<span id="structfield.b" class="structfield section-header"><code>b: u8</code></span>'
            '<div class="docblock"><p>Second.</p></div>'
            '<span id="structfield.c" class="structfield section-header"><code>c: u8</code></span>'
            "</section>"
        )
        doc = parser.parse_item_doc(Name("pkg::Foo"), ItemType.STRUCT)
        [group] = doc.groups[ItemType.STRUCT_FIELD]
        assert [(d.name.last(), d.definition, d.description) for d in group.members] == [
            ("a", Code("a: u8"), text("First.")),
            ("b", Code("b: u8"), text("Second.")),
            ("c", Code("c: u8"), None),
        ]

    @pytest.mark.parametrize("page", STRUCT_PAGES)
    def test_struct_methods(self, load_page, page):
        doc = load_page(page).parse_item_doc(NODE_REF, ItemType.STRUCT)
        assert list(doc.groups[ItemType.METHOD]) == [
            MemberGroup(
                title="impl NodeRef",
                members=[
                    Doc(
                        NODE_REF.child("new"),
                        ItemType.METHOD,
                        definition=Code("pub fn new(node: Node) -> NodeRef"),
                        description=text("Create a new node."),
                    ),
                    Doc(
                        NODE_REF.child("len"),
                        ItemType.METHOD,
                        definition=Code("pub fn len(&self) -> usize"),
                    ),
                ],
            )
        ]

    @pytest.mark.parametrize("page", STRUCT_PAGES)
    def test_trait_implementations(self, load_page, page):
        doc = load_page(page).parse_item_doc(NODE_REF, ItemType.STRUCT)
        impls = doc.groups[ItemType.IMPL]
        assert impls[0].title == "Trait Implementations"
        # Sorted by trait name regardless of page order
        assert list(impls[0].members) == [
            Doc(
                NODE_REF.child("Clone"),
                ItemType.IMPL,
                definition=Code("impl Clone for NodeRef"),
            ),
            Doc(
                NODE_REF.child("Debug"),
                ItemType.IMPL,
                definition=Code("impl Debug for NodeRef"),
            ),
        ]

    def test_auto_trait_implementations(self, load_page):
        doc = load_page("struct_modern.html").parse_item_doc(NODE_REF, ItemType.STRUCT)
        assert [g.title for g in doc.groups[ItemType.IMPL]] == [
            "Trait Implementations",
            "Auto Trait Implementations",
        ]
        [send] = doc.groups[ItemType.IMPL][1].members
        assert send.name == NODE_REF.child("Send")
        assert send.definition == Code("impl !Send for NodeRef")

    def test_group_order(self, load_page):
        doc = load_page("struct_modern.html").parse_item_doc(NODE_REF, ItemType.STRUCT)
        assert list(doc.groups) == [ItemType.STRUCT_FIELD, ItemType.METHOD, ItemType.IMPL]

    def test_layouts_agree(self, load_page):
        docs = [load_page(page).parse_item_doc(NODE_REF, ItemType.STRUCT) for page in STRUCT_PAGES]
        for doc in docs[1:]:
            assert doc.definition == docs[0].definition
            assert doc.groups[ItemType.STRUCT_FIELD] == docs[0].groups[ItemType.STRUCT_FIELD]
            assert doc.groups[ItemType.METHOD] == docs[0].groups[ItemType.METHOD]

    def test_parsing_is_repeatable(self, load_page):
        parser = load_page("struct_modern.html")
        first = parser.parse_item_doc(NODE_REF, ItemType.STRUCT)
        second = parser.parse_item_doc(NODE_REF, ItemType.STRUCT)
        assert first == second

    @pytest.mark.parametrize("page", ENUM_PAGES)
    def test_enum_variants(self, load_page, page):
        name = Name("kuchiki::Ordering")
        doc = load_page(page).parse_item_doc(name, ItemType.ENUM)
        assert doc.description == text("The result of comparing two nodes.")
        [group] = doc.groups[ItemType.VARIANT]
        assert list(group.members) == [
            Doc(
                name.child("Less"),
                ItemType.VARIANT,
                definition=Code("Less"),
                description=text("Less than."),
            ),
            Doc(name.child("Equal"), ItemType.VARIANT, definition=Code("Equal")),
            Doc(
                name.child("Greater"),
                ItemType.VARIANT,
                definition=Code("Greater"),
                description=text("Greater than."),
            ),
        ]

    def test_trait_methods_and_associated_types(self, load_page):
        name = Name("rand::Rng")
        doc = load_page("trait_modern.html").parse_item_doc(name, ItemType.TRAIT)
        assert list(doc.groups) == [ItemType.ASSOC_TYPE, ItemType.METHOD]

        [assoc] = doc.groups[ItemType.ASSOC_TYPE]
        assert list(assoc.members) == [
            Doc(
                name.child("Seed"),
                ItemType.ASSOC_TYPE,
                definition=Code("type Seed"),
                description=text("The seed type."),
            )
        ]

        required, provided = doc.groups[ItemType.METHOD]
        assert required.title == "Required Methods"
        assert list(required.members) == [
            Doc(
                name.child("next_u32"),
                ItemType.TY_METHOD,
                definition=Code("fn next_u32(&mut self) -> u32"),
                description=text("Return the next random u32."),
            )
        ]
        assert provided.title == "Provided Methods"
        assert list(provided.members) == [
            Doc(name.child("gen"), ItemType.METHOD, definition=Code("fn gen(&mut self) -> u8"))
        ]

    def test_deref_methods(self, load_page):
        name = Name("kuchiki::iter::Siblings")
        doc = load_page("siblings_modern.html").parse_item_doc(name, ItemType.STRUCT)
        [group] = doc.groups[ItemType.METHOD]
        assert group.title == "Methods from Deref<Target = Node>"
        assert [str(m.name) for m in group.members] == ["kuchiki::iter::Siblings::first_child"]
        assert group.members[0].description == text("Return the first child of this node.")

    @pytest.mark.parametrize("page", ["fn_legacy.html", "fn_modern.html"])
    def test_function(self, load_page, page):
        doc = load_page(page).parse_item_doc(Name("kuchiki::parse_html"), ItemType.FUNCTION)
        assert doc.definition == Code("pub fn parse_html() -> Parser")
        assert doc.description.plain.startswith("Parse an HTML document")
        assert doc.groups == {}

    def test_missing_blocks_are_none(self):
        parser = Parser.from_string("<html><body><p>Nothing here</p></body></html>")
        doc = parser.parse_item_doc(NODE_REF, ItemType.STRUCT)
        assert doc.definition is None
        assert doc.description is None
        assert doc.groups == {}
        assert doc.url is None


class TestMemberDoc:
    """Test ``Parser.parse_member_doc`` and ``Parser.find_member``."""

    @pytest.mark.parametrize("page", STRUCT_PAGES)
    def test_method(self, load_page, page):
        doc = load_page(page).parse_member_doc(NODE_REF.child("new"), ItemType.METHOD)
        assert doc.ty == ItemType.METHOD
        assert doc.definition == Code("pub fn new(node: Node) -> NodeRef")
        assert doc.description == text("Create a new node.")
        assert doc.url.endswith(f"{page}#method.new")

    @pytest.mark.parametrize("page", STRUCT_PAGES)
    def test_method_without_description(self, load_page, page):
        doc = load_page(page).parse_member_doc(NODE_REF.child("len"), ItemType.METHOD)
        assert doc.definition == Code("pub fn len(&self) -> usize")
        assert doc.description is None

    @pytest.mark.parametrize("page", STRUCT_PAGES)
    def test_field(self, load_page, page):
        parser = load_page(page)
        node = parser.parse_member_doc(NODE_REF.child("node"), ItemType.STRUCT_FIELD)
        assert node.definition == Code("node: Node")
        assert node.description == text("The node.")
        count = parser.parse_member_doc(NODE_REF.child("count"), ItemType.STRUCT_FIELD)
        assert count.description is None

    def test_required_method(self, load_page):
        doc = load_page("trait_modern.html").parse_member_doc(
            Name("rand::Rng::next_u32"), ItemType.TY_METHOD
        )
        assert doc.definition == Code("fn next_u32(&mut self) -> u32")
        assert doc.description == text("Return the next random u32.")

    def test_missing_member(self, load_page):
        with pytest.raises(MemberNotFoundError, match="Could not find member kuchiki::NodeRef::nope"):
            load_page("struct_modern.html").parse_member_doc(
                NODE_REF.child("nope"), ItemType.METHOD
            )

    def test_member_without_definition(self, load_page):
        name = Name("kuchiki::iter::Siblings::broken")
        with pytest.raises(MemberNotFoundError, match="does not have a definition"):
            load_page("siblings_modern.html").parse_member_doc(name, ItemType.METHOD)

    @pytest.mark.parametrize(
        "page, member, expected",
        [
            ("struct_legacy.html", "new", ItemType.METHOD),
            ("struct_modern.html", "node", ItemType.STRUCT_FIELD),
            ("enum_modern.html", "Less", ItemType.VARIANT),
            ("trait_modern.html", "next_u32", ItemType.TY_METHOD),
            ("trait_modern.html", "gen", ItemType.METHOD),
            ("trait_modern.html", "Seed", ItemType.ASSOC_TYPE),
            ("struct_modern.html", "nope", None),
        ],
    )
    def test_find_member(self, load_page, page, member, expected):
        assert load_page(page).find_member(Name("kuchiki::Item").child(member)) == expected


class TestModuleDoc:
    """Test ``Parser.parse_module_doc`` on the module page layouts."""

    @pytest.mark.parametrize("page", MODULE_PAGES)
    def test_module_members(self, load_page, page):
        name = Name("kuchiki")
        doc = load_page(page).parse_module_doc(name)
        assert doc.ty == ItemType.MODULE
        assert doc.description == text("Kuchiki is an HTML tree manipulation library.")
        assert list(doc.groups) == [ItemType.MODULE, ItemType.STRUCT, ItemType.FUNCTION]
        [structs] = doc.groups[ItemType.STRUCT]
        assert list(structs.members) == [
            Doc(
                name.child("NodeRef"),
                ItemType.STRUCT,
                description=text("A strong reference to a node."),
            ),
            Doc(name.child("Node"), ItemType.STRUCT),
        ]

    def test_layouts_agree(self, load_page):
        docs = [load_page(page).parse_module_doc(Name("kuchiki")) for page in MODULE_PAGES]
        assert docs[0].groups == docs[1].groups == docs[2].groups

    def test_empty_module(self):
        doc = Parser.from_string("<html><body></body></html>").parse_module_doc(Name("empty"))
        assert doc.description is None
        assert doc.groups == {}


class TestAllItems:
    """Test ``Parser.find_item`` on all.html."""

    @pytest.mark.parametrize("page", ["all_legacy.html", "all_modern.html"])
    def test_find_item(self, load_page, page):
        parser = load_page(page)
        assert parser.find_item("NodeRef") == "struct.NodeRef.html"
        assert parser.find_item("iter::Siblings") == "iter/struct.Siblings.html"
        assert parser.find_item("parse_html") == "fn.parse_html.html"
        assert parser.find_item("Siblings") is None
        assert parser.find_item("Node") is None


class TestExamples:
    """Test extraction of rendered code examples."""

    @pytest.mark.parametrize("page", STRUCT_PAGES)
    def test_examples_from_description(self, load_page, page):
        doc = load_page(page).parse_item_doc(NODE_REF, ItemType.STRUCT)
        [example] = doc.find_examples()
        assert example.code == Code("let node = NodeRef::new();")
        assert example.description.plain == "Examples:"

    def test_example_without_caption(self):
        parser = Parser.from_string(
            '<p>Some prose.</p><pre class="rust rust-example-rendered">foo();</pre>'
        )
        [example] = parser.find_examples()
        assert example.code == Code("foo();")
        assert example.description is None

    def test_no_examples(self, load_page):
        doc = load_page("fn_modern.html").parse_item_doc(
            Name("kuchiki::parse_html"), ItemType.FUNCTION
        )
        assert doc.find_examples() == []


class TestMemberAccumulator:
    """Test the state machine folding headings and docblocks into members."""

    def test_docblock_without_heading_is_dropped(self):
        acc = MemberAccumulator(NODE_REF, ItemType.STRUCT_FIELD)
        acc.describe(text("orphan"))
        assert acc.state is AccumulatorState.IDLE
        assert acc.group() is None
        assert acc.groups() == []

    def test_transitions(self):
        acc = MemberAccumulator(NODE_REF, ItemType.STRUCT_FIELD)
        acc.start("a", Code("a: u8"))
        assert acc.state is AccumulatorState.NAME_DEFINITION
        acc.describe(text("First."))
        assert acc.state is AccumulatorState.IDLE
        # A second docblock in a row belongs to nobody
        acc.describe(text("Dropped."))
        acc.start("b")
        assert acc.state is AccumulatorState.NAME
        acc.start("c", Code("c: u8"))
        group = acc.group("Fields")

        assert group.title == "Fields"
        assert [(str(d.name), d.definition, d.description) for d in group.members] == [
            ("kuchiki::NodeRef::a", Code("a: u8"), text("First.")),
            ("kuchiki::NodeRef::b", None, None),
            ("kuchiki::NodeRef::c", Code("c: u8"), None),
        ]

    def test_start_without_name_is_ignored(self):
        acc = MemberAccumulator(NODE_REF, ItemType.METHOD)
        acc.start(None, Code("fn x()"))
        assert acc.state is AccumulatorState.IDLE
        assert acc.groups() == []

    def test_sort(self):
        acc = MemberAccumulator(NODE_REF, ItemType.IMPL)
        acc.start("Debug", Code("impl Debug for NodeRef"))
        acc.start("Clone", Code("impl Clone for NodeRef"))
        acc.start("Clone")
        acc.finish()
        acc.sort()
        assert [(d.name.last(), d.definition) for d in acc.docs] == [
            ("Clone", None),
            ("Clone", Code("impl Clone for NodeRef")),
            ("Debug", Code("impl Debug for NodeRef")),
        ]


class TestTextConversion:
    """Test the node helpers."""

    def test_line_breaks(self):
        pre = parse_html("<pre>fn a()<br>fn b()</pre>").pre
        assert node_to_text(pre) == "fn a()\nfn b()"

    def test_where_clause_newline(self):
        code = parse_html(
            '<code>impl&lt;T&gt; Foo&lt;T&gt;<span class="where fmt-newline">where T: Clone</span></code>'
        ).code
        assert node_to_text(code) == "impl<T> Foo<T>\nwhere T: Clone"

    def test_anchors_are_skipped(self):
        h2 = parse_html('<h2 id="fields">Fields<a href="#fields" class="anchor">§</a></h2>').h2
        assert node_to_text(h2) == "Fields"

    def test_empty_block_is_none(self):
        assert to_text(parse_html('<div class="docblock"></div>').div) is None
        assert to_text(None) is None

    def test_id_parts(self):
        h4 = parse_html('<h4 id="method.new-1" class="method"></h4>').h4
        assert get_id_part(h4, 0) == "method"
        assert get_id_part(h4, 1) == "new"
        assert get_id_part(h4, 2) is None
        assert get_id_part(parse_html("<h4></h4>").h4, 0) is None
