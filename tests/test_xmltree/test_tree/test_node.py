"""Tests for the mutable XML tree model."""

import pytest

from xmltree.shared.errors import DuplicateNameError
from xmltree.tree import (
    XMLAttribute,
    XMLNode,
    XMLText,
    has_attribute,
    name_equals,
    tag_equals,
    text_equals,
    value_equals,
)


@pytest.fixture
def library():
    """Small tree: library > book(id=1) title, book(id=2) title, magazine."""
    root = XMLNode("library")
    first = root.add_child("book")
    first.add_attribute("id", "1")
    first.add_child("title").set_text("Dune")
    second = root.add_child("book")
    second.add_attribute("id", "2")
    second.add_child("title").set_text("Emma")
    root.add_child("magazine").set_text("Wired")
    return root


class TestXMLNodeConstruction:
    """Test root construction and ownership."""

    def test_empty_root(self):
        node = XMLNode()

        assert node.tag is None
        assert node.text is None
        assert node.children == []
        assert node.attributes == []
        assert node.is_root()
        assert node.parent is None

    def test_tagged_root(self):
        assert XMLNode("root").tag == "root"

    def test_add_child_sets_parent(self):
        root = XMLNode("root")
        child = root.add_child("child")

        assert child.tag == "child"
        assert child.parent is root
        assert child.has_parent()
        assert not child.is_root()

    def test_add_child_without_tag(self):
        root = XMLNode("root")
        assert root.add_child().tag is None

    def test_owned_objects_reference_node(self):
        root = XMLNode("root")
        attribute = root.add_attribute("a", "1")

        assert attribute.parent is root
        assert isinstance(root.text_node, XMLText)
        assert root.text_node.parent is root

    def test_parent_reference_is_weak(self):
        """Test that children do not keep their owner alive."""
        root = XMLNode("root")
        child = root.add_child("child")
        del root

        assert child.parent is None
        assert child.has_parent()

    def test_set_tag_is_chainable(self):
        node = XMLNode()
        assert node.set_tag("renamed") is node
        assert node.tag == "renamed"

    def test_tag_property_setter(self):
        node = XMLNode("a")
        node.tag = "b"
        assert node.tag == "b"


class TestChildren:
    """Test child queries and mutation."""

    def test_children_in_insertion_order(self, library):
        assert [child.tag for child in library.children] == ["book", "book", "magazine"]
        assert library.child_count == 3
        assert library.has_children()

    def test_children_is_snapshot(self, library):
        """Test that returned lists are detached from the node."""
        snapshot = library.children
        library.add_child("newspaper")
        snapshot.clear()

        assert len(snapshot) == 0
        assert library.child_count == 4

    def test_get_child(self, library):
        assert library.get_child(2).tag == "magazine"

    @pytest.mark.parametrize("index", [3, -1, 100])
    def test_get_child_out_of_range(self, library, index):
        with pytest.raises(IndexError, match="out of range"):
            library.get_child(index)

    def test_get_child_non_integer(self, library):
        with pytest.raises(TypeError):
            library.get_child("0")

    def test_find_child_by_tag(self, library):
        book = library.find_child("book")

        assert book is library.get_child(0)
        assert library.find_child("missing") is None

    def test_find_child_by_predicate(self, library):
        book = library.find_child(has_attribute("id", "2"))
        assert book is library.get_child(1)

    def test_find_children(self, library):
        assert len(library.find_children("book")) == 2
        assert len(library.find_children()) == 3
        assert library.find_children(text_equals("Wired"))[0].tag == "magazine"
        assert library.find_children("missing") == []

    def test_contains_child(self, library):
        assert library.contains_child("magazine")
        assert not library.contains_child("journal")

    def test_get_or_add_child_existing(self, library):
        assert library.get_or_add_child("magazine") is library.get_child(2)
        assert library.child_count == 3

    def test_get_or_add_child_missing(self, library):
        journal = library.get_or_add_child("journal")

        assert journal.tag == "journal"
        assert library.get_child(3) is journal

    def test_remove_child_by_index(self, library):
        removed = library.remove_child(0)

        assert removed.get_attribute_value("id") == "1"
        assert library.child_count == 2

    def test_remove_child_by_index_out_of_range(self, library):
        with pytest.raises(IndexError):
            library.remove_child(5)
        assert library.child_count == 3

    def test_remove_child_by_tag_removes_first_match(self, library):
        removed = library.remove_child("book")

        assert removed.get_attribute_value("id") == "1"
        assert [c.tag for c in library.children] == ["book", "magazine"]

    def test_remove_child_by_missing_tag(self, library):
        assert library.remove_child("journal") is None
        assert library.child_count == 3

    def test_remove_children(self, library):
        assert library.remove_children("book") is library
        assert [c.tag for c in library.children] == ["magazine"]

    def test_remove_children_by_predicate(self, library):
        library.remove_children(lambda node: node.has_attributes())
        assert [c.tag for c in library.children] == ["magazine"]

    def test_sort_children_is_stable(self, library):
        library.sort_children(key=lambda node: node.tag, reverse=True)

        assert [c.tag for c in library.children] == ["magazine", "book", "book"]
        assert library.get_child(1).get_attribute_value("id") == "1"

    def test_clear_children(self, library):
        library.clear_children()

        assert library.children == []
        assert not library.has_children()


class TestAttributes:
    """Test attribute queries, mutation and name uniqueness."""

    def test_add_attribute(self):
        node = XMLNode("a")
        attribute = node.add_attribute("x", "1")

        assert isinstance(attribute, XMLAttribute)
        assert (attribute.name, attribute.value) == ("x", "1")
        assert node.attribute_count == 1
        assert node.has_attributes()

    def test_add_attribute_without_value(self):
        assert XMLNode("a").add_attribute("flag").value is None

    def test_attributes_in_insertion_order(self):
        node = XMLNode("a")
        for name in ("z", "a", "m"):
            node.add_attribute(name, name.upper())

        assert [attr.name for attr in node.attributes] == ["z", "a", "m"]
        assert node.get_attribute(1).value == "A"

    def test_attributes_is_snapshot(self):
        node = XMLNode("a")
        node.add_attribute("x", "1")
        snapshot = node.attributes
        node.add_attribute("y", "2")

        assert len(snapshot) == 1

    def test_duplicate_add_rejected(self):
        """Test that a duplicate name leaves the node unchanged."""
        node = XMLNode("a")
        node.add_attribute("x", "1")

        with pytest.raises(DuplicateNameError) as exc_info:
            node.add_attribute("x", "2")

        assert exc_info.value.name == "x"
        assert node.attribute_count == 1
        assert node.get_attribute_value("x") == "1"

    def test_rename_to_sibling_name_rejected(self):
        node = XMLNode("a")
        node.add_attribute("x", "1")
        second = node.add_attribute("y", "2")

        with pytest.raises(DuplicateNameError):
            second.set_name("x")

        assert second.name == "y"

    def test_rename_to_own_name_rejected(self):
        """Test that an attribute collides with its own current name."""
        node = XMLNode("a")
        attribute = node.add_attribute("x", "1")

        with pytest.raises(DuplicateNameError):
            attribute.name = "x"

    def test_rename_to_free_name(self):
        node = XMLNode("a")
        attribute = node.add_attribute("x", "1")

        assert attribute.set_name("y") is attribute
        assert node.contains_attribute("y")
        assert not node.contains_attribute("x")

    def test_set_value(self):
        attribute = XMLNode("a").add_attribute("x", "1")

        assert attribute.set_value(42) is attribute
        assert attribute.value == 42
        attribute.value = "3"
        assert attribute.value == "3"

    def test_find_attribute(self):
        node = XMLNode("a")
        node.add_attribute("x", "1")
        node.add_attribute("y", "2")

        assert node.find_attribute("y").value == "2"
        assert node.find_attribute(value_equals("1")).name == "x"
        assert node.find_attribute("z") is None

    def test_find_attributes(self):
        node = XMLNode("a")
        node.add_attribute("x", "1")
        node.add_attribute("y", "1")
        node.add_attribute("z", "2")

        assert [a.name for a in node.find_attributes(value_equals("1"))] == ["x", "y"]
        assert len(node.find_attributes()) == 3

    def test_get_attribute_value_default(self):
        assert XMLNode("a").get_attribute_value("x", "fallback") == "fallback"

    def test_get_attribute_out_of_range(self):
        with pytest.raises(IndexError):
            XMLNode("a").get_attribute(0)

    def test_get_or_add_attribute(self):
        node = XMLNode("a")
        existing = node.add_attribute("x", "1")

        assert node.get_or_add_attribute("x") is existing
        created = node.get_or_add_attribute("y")
        assert created.value is None
        assert node.attribute_count == 2

    def test_remove_attribute(self):
        node = XMLNode("a")
        node.add_attribute("x", "1")
        node.add_attribute("y", "2")

        assert node.remove_attribute("x").value == "1"
        assert node.remove_attribute("x") is None
        assert node.remove_attribute(0).name == "y"
        assert node.attribute_count == 0

    def test_removed_name_can_be_reused(self):
        node = XMLNode("a")
        node.add_attribute("x", "1")
        node.remove_attribute("x")

        assert node.add_attribute("x", "2").value == "2"

    def test_remove_attributes(self):
        node = XMLNode("a")
        node.add_attribute("x", "1")
        node.add_attribute("y", "2")

        node.remove_attributes(name_equals("y"))
        assert [a.name for a in node.attributes] == ["x"]

    def test_sort_attributes(self):
        node = XMLNode("a")
        for name in ("c", "a", "b"):
            node.add_attribute(name)

        node.sort_attributes(key=lambda attr: attr.name)
        assert [a.name for a in node.attributes] == ["a", "b", "c"]

    def test_clear_attributes(self):
        node = XMLNode("a")
        node.add_attribute("x", "1")
        node.clear_attributes()

        assert not node.has_attributes()

    def test_set_tag_does_not_check_attribute_names(self):
        node = XMLNode("a")
        node.add_attribute("x", "1")

        node.set_tag("x")
        assert node.tag == "x"


class TestText:
    """Test text handling."""

    def test_set_text_is_chainable(self):
        node = XMLNode("a")
        assert node.set_text("hello") is node
        assert node.text == "hello"

    @pytest.mark.parametrize("text,expected", [
        (None, False),
        ("", False),
        (" \n\t", False),
        ("x", True),
        ("  x  ", True),
    ])
    def test_has_text(self, text, expected):
        node = XMLNode("a").set_text(text)
        assert node.has_text() is expected

    def test_text_node_shares_state(self):
        node = XMLNode("a")
        node.text_node.set_text("via text node")

        assert node.text == "via text node"
        assert repr(node.text_node) == "XMLText(text='via text node')"


class TestNavigation:
    """Test depth, paths and descendant traversal."""

    def test_get_depth(self, library):
        title = library.get_child(0).get_child(0)

        assert library.get_depth() == 0
        assert title.get_depth() == 2

    def test_get_path(self, library):
        assert library.get_path() == "/library"
        assert library.get_child(1).get_child(0).get_path() == "/library/book[2]/title"
        assert library.get_child(2).get_path() == "/library/magazine"

    def test_iter_descendants_document_order(self, library):
        tags = [node.tag for node in library.iter_descendants()]
        assert tags == ["book", "title", "book", "title", "magazine"]

    def test_find_descendants(self, library):
        titles = library.find_descendants("title")
        assert [t.text for t in titles] == ["Dune", "Emma"]

    def test_find_descendants_by_predicate(self, library):
        assert library.find_descendants(tag_equals("missing")) == []

    def test_to_dict(self, library):
        data = library.to_dict()

        assert data["tag"] == "library"
        assert data["attributes"] == {}
        assert "text" not in data
        assert data["children"][0] == {
            "tag": "book",
            "attributes": {"id": "1"},
            "children": [{"tag": "title", "attributes": {}, "text": "Dune"}],
        }

    def test_to_dict_and_path_of_deep_chain(self):
        root = XMLNode("n")
        node = root
        for _ in range(2999):
            node = node.add_child("n")
        node.set_text("end")

        data = root.to_dict()
        levels = 1
        while "children" in data:
            assert len(data["children"]) == 1
            data = data["children"][0]
            levels += 1
        assert levels == 3000
        assert data == {"tag": "n", "attributes": {}, "text": "end"}
        assert node.get_path() == "/n" * 3000


class TestRepresentation:
    """Test string conversion."""

    def test_str_uses_tab_indent(self):
        root = XMLNode("root")
        root.add_child("child").set_text("hi")

        assert str(root) == "<root>\n\t<child>hi</child>\n</root>"

    def test_to_xml_string_with_indent(self):
        root = XMLNode("root")
        root.add_child("child")

        assert root.to_xml_string(" ") == "<root>\n <child/>\n</root>"

    def test_repr(self):
        node = XMLNode("a")
        node.add_attribute("x", "1")

        assert repr(node) == (
            "XMLNode(tag='a', attributes=[XMLAttribute(name='x', value='1')], "
            "children=0, text=None)"
        )


class TestPredicates:
    """Test predicate builders."""

    def test_tag_equals(self):
        assert tag_equals("a")(XMLNode("a"))
        assert not tag_equals("a")(XMLNode("b"))

    def test_text_equals(self):
        assert text_equals("x")(XMLNode("a").set_text("x"))
        assert text_equals(None)(XMLNode("a"))

    def test_has_attribute(self):
        node = XMLNode("a")
        node.add_attribute("x", "1")

        assert has_attribute("x")(node)
        assert has_attribute("x", "1")(node)
        assert not has_attribute("x", "2")(node)
        assert not has_attribute("y")(node)

    def test_has_attribute_matches_none_value(self):
        node = XMLNode("a")
        node.add_attribute("flag")

        assert has_attribute("flag", None)(node)

    def test_name_and_value_equals(self):
        attribute = XMLNode("a").add_attribute("x", "1")

        assert name_equals("x")(attribute)
        assert value_equals("1")(attribute)
        assert not value_equals(1)(attribute)
