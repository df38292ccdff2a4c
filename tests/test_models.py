"""Tests for the document model: names, item types and docs."""

import pickle

import pytest
from hypothesis import given
from hypothesis import strategies as st

from rustdoc_man.errors import UnknownItemTypeError
from rustdoc_man.models import Code, Doc, ItemType, MemberGroup, Name, Text

segment = st.from_regex(r"[A-Za-z_][A-Za-z0-9_]{0,10}", fullmatch=True)
segments = st.lists(segment, min_size=1, max_size=6)


class TestName:
    """Test the ``::``-separated item path."""

    def test_accessors(self):
        name = Name("kuchiki::iter::Siblings")
        assert name.first() == "kuchiki"
        assert name.last() == "Siblings"
        assert name.rest() == "iter::Siblings"
        assert name.rest_or_first() == "iter::Siblings"
        assert name.parent() == Name("kuchiki::iter")
        assert not name.is_singleton()

    def test_singleton(self):
        name = Name("kuchiki")
        assert name.is_singleton()
        assert name.first() == name.last() == "kuchiki"
        assert name.rest() is None
        assert name.rest_or_first() == "kuchiki"
        assert name.parent() is None

    def test_ends_with_respects_segment_boundaries(self):
        name = Name("rand::error::Error")
        assert name.ends_with("Error")
        assert name.ends_with(Name("error::Error"))
        assert name.ends_with("rand::error::Error")
        assert not name.ends_with("rror")
        assert not Name("rand::erroreous").ends_with("error")

    def test_immutable(self):
        name = Name("kuchiki")
        with pytest.raises(AttributeError):
            name._s = "other"

    def test_pickle(self):
        name = Name("kuchiki::NodeRef")
        assert pickle.loads(pickle.dumps(name)) == name

    @given(segments)
    def test_segments_roundtrip(self, parts):
        name = Name("::".join(parts))
        assert name.segments() == parts
        assert name.first() == parts[0]
        assert name.last() == parts[-1]
        assert str(name) == name.full()

    @given(segments, segment)
    def test_child_then_parent(self, parts, child):
        name = Name("::".join(parts))
        assert name.child(child).parent() == name
        assert name.child(child).last() == child
        assert name.child(child).ends_with(child)

    @given(segments)
    def test_rest_joins_remaining_segments(self, parts):
        name = Name("::".join(parts))
        if len(parts) == 1:
            assert name.rest() is None
        else:
            assert name.rest() == "::".join(parts[1:])

    @given(st.lists(segments, min_size=2, max_size=5))
    def test_ordering_matches_strings(self, names):
        paths = ["::".join(parts) for parts in names]
        assert [str(n) for n in sorted(Name(p) for p in paths)] == sorted(paths)


class TestItemType:
    """Test parsing and properties of item types."""

    def test_parse_id_tokens(self):
        assert ItemType.parse("fn") is ItemType.FUNCTION
        assert ItemType.parse("struct") is ItemType.STRUCT
        assert ItemType.parse("tymethod") is ItemType.TY_METHOD
        assert ItemType.parse("structfield") is ItemType.STRUCT_FIELD

    def test_parse_unknown_token(self):
        with pytest.raises(UnknownItemTypeError):
            ItemType.parse("function")
        # Still usable where a ValueError is expected
        with pytest.raises(ValueError):
            ItemType.parse("")

    def test_index_numbers_and_codes(self):
        assert ItemType.from_index_number(0) is ItemType.MODULE
        assert ItemType.from_index_number(3) is ItemType.STRUCT
        assert ItemType.from_index_number(11) is ItemType.METHOD
        assert ItemType.from_index_code("A") is ItemType.MODULE
        assert ItemType.from_index_code("D") is ItemType.STRUCT
        assert ItemType.from_index_code("Q") is ItemType.ASSOC_TYPE

    def test_every_type_maps_back_from_its_index(self):
        for ty in ItemType:
            assert ItemType.from_index_number(ty.index_number) is ty
            assert ItemType.from_index_code(ty.index_code) is ty

    @pytest.mark.parametrize("code", ["", "AB", "~", "a"])
    def test_unknown_index_codes(self, code):
        with pytest.raises(UnknownItemTypeError):
            ItemType.from_index_code(code)

    def test_unknown_index_number(self):
        with pytest.raises(UnknownItemTypeError):
            ItemType.from_index_number(99)

    def test_names(self):
        assert ItemType.STRUCT.display_name == "Struct"
        assert ItemType.STRUCT.group_name == "Structs"
        assert ItemType.STRUCT.group_id == "structs"
        assert ItemType.TYPEDEF.group_id == "types"
        assert ItemType.METHOD.id == "method"

    def test_group_order(self):
        assert ItemType.MODULE < ItemType.STRUCT < ItemType.FUNCTION
        assert ItemType.STRUCT_FIELD < ItemType.VARIANT < ItemType.METHOD < ItemType.IMPL
        assert sorted([ItemType.IMPL, ItemType.STRUCT_FIELD, ItemType.METHOD]) == [
            ItemType.STRUCT_FIELD,
            ItemType.METHOD,
            ItemType.IMPL,
        ]


class TestDoc:
    """Test the document record."""

    def test_with_groups_keeps_type_order(self):
        doc = Doc(Name("kuchiki::Ordering"), ItemType.ENUM)
        method = Doc(Name("kuchiki::Ordering::reverse"), ItemType.METHOD)
        variant = Doc(Name("kuchiki::Ordering::Less"), ItemType.VARIANT)
        doc = doc.with_groups(ItemType.METHOD, [MemberGroup("impl Ordering", [method])])
        doc = doc.with_groups(ItemType.VARIANT, [MemberGroup(members=[variant])])
        assert list(doc.groups) == [ItemType.VARIANT, ItemType.METHOD]

    def test_with_groups_ignores_empty_lists(self):
        doc = Doc(Name("kuchiki::Node"), ItemType.STRUCT)
        assert doc.with_groups(ItemType.METHOD, []) is doc
        assert doc.groups == {}

    def test_empty_group_lists_are_dropped(self):
        doc = Doc(Name("kuchiki::Node"), ItemType.STRUCT, groups={ItemType.METHOD: []})
        assert ItemType.METHOD not in doc.groups

    def test_with_groups_appends_to_existing_type(self):
        doc = Doc(Name("rand::Rng"), ItemType.TRAIT)
        doc = doc.with_groups(ItemType.METHOD, [MemberGroup("Required Methods")])
        doc = doc.with_groups(ItemType.METHOD, [MemberGroup("Provided Methods")])
        assert [g.title for g in doc.groups[ItemType.METHOD]] == [
            "Required Methods",
            "Provided Methods",
        ]

    def test_with_groups_leaves_original_unchanged(self):
        doc = Doc(Name("kuchiki::Node"), ItemType.STRUCT)
        updated = doc.with_groups(ItemType.METHOD, [MemberGroup("impl Node")])
        assert doc.groups == {}
        assert list(updated.groups) == [ItemType.METHOD]

    def test_docs_are_immutable(self):
        member = Doc(Name("kuchiki::Node::parent"), ItemType.METHOD)
        doc = Doc(
            Name("kuchiki::Node"),
            ItemType.STRUCT,
            groups={ItemType.METHOD: [MemberGroup("impl Node", [member])]},
        )
        with pytest.raises(AttributeError):
            doc.url = "file:///tmp/x.html"
        with pytest.raises(TypeError):
            doc.groups[ItemType.FUNCTION] = ()
        [group] = doc.groups[ItemType.METHOD]
        assert group.members == (member,)
        with pytest.raises(AttributeError):
            group.title = "impl Other"

    def test_with_url(self, tmp_path):
        page = tmp_path / "struct.NodeRef.html"
        doc = Doc(Name("kuchiki::NodeRef"), ItemType.STRUCT)
        assert doc.with_url(page).url == page.resolve().as_uri()
        assert doc.with_url(page, "method.new").url.endswith("struct.NodeRef.html#method.new")
        assert doc.url is None

    def test_str(self):
        doc = Doc(
            Name("kuchiki::NodeRef"),
            ItemType.STRUCT,
            definition=Code("pub struct NodeRef;"),
            description=Text("A node.", "<p>A node.</p>"),
        )
        assert str(doc) == "kuchiki::NodeRef: A node."
        assert str(Doc(Name("kuchiki"), ItemType.MODULE)) == "kuchiki"

    def test_find_examples_without_description(self):
        assert Doc(Name("kuchiki"), ItemType.MODULE).find_examples() == []
