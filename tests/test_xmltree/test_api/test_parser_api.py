"""Tests for the public parsing API."""

import pytest

import xmltree
from xmltree.api import XMLTreeParser, parse_file, parse_string, to_xml_string
from xmltree.shared.config import XMLTreeConfig
from xmltree.shared.errors import DuplicateNameError, StructuralParseError
from xmltree.tree import XMLNode


class TestEndToEnd:
    """Documented parse and serialize scenarios."""

    def test_root_with_attribute_and_child(self):
        root = parse_string('<root a="1"><child>hi</child></root>')

        assert root.tag == "root"
        assert [(a.name, a.value) for a in root.attributes] == [("a", "1")]
        assert root.child_count == 1
        assert root.get_child(0).tag == "child"
        assert root.get_child(0).text == "hi"
        assert to_xml_string(root) == '<root a="1">\n\t<child>hi</child>\n</root>'

    def test_comment_between_children(self):
        root = parse_string("<root><!-- c --><a/></root>")

        assert [child.tag for child in root.children] == ["a"]
        assert not root.get_child(0).has_children()
        assert not root.has_text()

    def test_self_closing_leaf(self):
        leaf = parse_string('<leaf x="1"/>')

        assert leaf.tag == "leaf"
        assert not leaf.has_children()
        assert not leaf.has_text()
        assert leaf.get_attribute_value("x") == "1"
        assert to_xml_string(leaf) == '<leaf x="1"/>'

    def test_last_text_gap_wins(self):
        root = parse_string("<root>before<a/>after</root>")

        assert [child.tag for child in root.children] == ["a"]
        assert root.text == "after"


class TestRoundTrip:
    """Test parse and serialize interplay."""

    def test_serialization_is_idempotent(self):
        source = """<?xml version="1.0"?>
        <!-- catalog -->
        <catalog xmlns:x="urn:x" version="2">
            <item id="1" x:kind="book">Dune</item>
            <item id="2"/>
            <group>
                <item id="3">Emma</item>
            </group>
        </catalog>"""
        first = to_xml_string(parse_string(source))
        second = to_xml_string(parse_string(first))

        assert first == second
        assert first == (
            '<catalog xmlns:x="urn:x" version="2">\n'
            '\t<item id="1" kind="book">Dune</item>\n'
            '\t<item id="2"/>\n'
            "\t<group>\n"
            '\t\t<item id="3">Emma</item>\n'
            "\t</group>\n"
            "</catalog>"
        )

    def test_model_built_tree_is_idempotent(self):
        """Test a tree assembled with mutation calls survives a re-parse."""
        root = XMLNode("catalog")
        root.add_attribute("xmlns:x", "urn:x")
        root.add_attribute("version", "2")
        root.add_attribute("flag")
        root.add_child("item").add_attribute("id", "1").parent.set_text("Dune")
        root.add_child("item").set_text("")
        group = root.add_child("group").set_text("hidden by children")
        group.add_child("item").set_text("Emma")
        group.add_child("empty").add_attribute("kind", "none")

        first = to_xml_string(root)
        second = to_xml_string(parse_string(first))

        assert first == second
        assert first == (
            '<catalog xmlns:x="urn:x" version="2" flag="">\n'
            '\t<item id="1">Dune</item>\n'
            "\t<item/>\n"
            "\t<group>\n"
            "\t\t<item>Emma</item>\n"
            '\t\t<empty kind="none"/>\n'
            "\t</group>\n"
            "</catalog>"
        )

    @pytest.mark.parametrize("text, attribute, first, second", [
        ("a & b", None, "<a>a &amp; b</a>", "<a>a &amp;amp; b</a>"),
        ("1 < 2", None, "<a>1 &lt; 2</a>", "<a>1 &amp;lt; 2</a>"),
        (" hi ", None, "<a> hi </a>", "<a>hi</a>"),
        (None, ("v", 'say "hi"'), '<a v="say &quot;hi&quot;"/>',
         '<a v="say &amp;quot;hi&amp;quot;"/>'),
        (None, ("p:x", "1"), '<a p:x="1"/>', '<a x="1"/>'),
    ])
    def test_round_trip_exceptions(self, text, attribute, first, second):
        """Test the documented cases that change on a second pass.

        Entity references are not decoded on input, surrounding whitespace is
        trimmed and attribute prefixes other than xmlns are folded away.
        """
        root = XMLNode("a").set_text(text)
        if attribute is not None:
            root.add_attribute(*attribute)

        assert to_xml_string(root) == first
        assert to_xml_string(parse_string(first)) == second

    def test_namespace_declarations_serialized_first(self):
        root = parse_string('<r a="1" xmlns:p="urn:p" p:b="2" xmlns="urn:d"/>')
        assert to_xml_string(root) == '<r xmlns:p="urn:p" xmlns="urn:d" a="1" b="2"/>'

    def test_entities_are_escaped_again(self):
        """Test that entity references survive parsing as literal text."""
        root = parse_string('<a v="x &amp; y">Tom &amp; Jerry</a>')

        assert root.text == "Tom &amp; Jerry"
        assert root.get_attribute_value("v") == "x &amp; y"
        assert to_xml_string(root) == '<a v="x &amp;amp; y">Tom &amp;amp; Jerry</a>'

    def test_cdata_is_escaped_on_output(self):
        root = parse_string("<a><![CDATA[1 < 2]]></a>")
        assert to_xml_string(root) == "<a>1 &lt; 2</a>"

    def test_edit_then_serialize(self):
        root = parse_string('<config><entry key="a">1</entry></config>')
        root.get_or_add_child("entry").set_text("2")
        root.add_child("entry").add_attribute("key", "b")

        assert to_xml_string(root, indent=" ") == (
            "<config>\n"
            ' <entry key="a">2</entry>\n'
            ' <entry key="b"/>\n'
            "</config>"
        )


class TestXMLTreeParser:
    """Test the configured parser."""

    def test_default_config(self):
        assert XMLTreeParser().config == XMLTreeConfig()

    def test_parse_into_existing_node(self):
        target = XMLNode()
        result = XMLTreeParser().parse("<root><a/></root>", into=target)

        assert result is target
        assert target.tag == "root"

    def test_rejects_non_string_source(self):
        with pytest.raises(TypeError, match="source must be str"):
            XMLTreeParser().parse(b"<a/>")

    def test_last_metrics(self):
        parser = XMLTreeParser()
        assert parser.last_metrics is None

        source = '<a x="1"><b/><c/></a>'
        parser.parse(source)

        metrics = parser.last_metrics
        assert metrics.elements_created == 3
        assert metrics.attributes_created == 1
        assert metrics.characters_processed == len(source)
        assert metrics.processing_time_ms >= 0

    def test_failed_parse_keeps_previous_metrics(self):
        parser = XMLTreeParser()
        parser.parse("<a/>")
        previous = parser.last_metrics

        with pytest.raises(StructuralParseError):
            parser.parse("<a></b>")

        assert parser.last_metrics is previous

    def test_serialize_uses_configured_indent(self):
        parser = XMLTreeParser(XMLTreeConfig.spaces())
        root = parser.parse("<a><b/></a>")

        assert parser.serialize(root) == "<a>\n <b/>\n</a>"
        assert parser.serialize(root, indent="\t") == "<a>\n\t<b/>\n</a>"

    def test_strict_depth_limit(self):
        source = "<n>" * 101 + "</n>" * 101

        with pytest.raises(StructuralParseError, match="Maximum nesting depth 100"):
            parse_string(source, XMLTreeConfig.strict())
        assert parse_string(source).tag == "n"

    def test_parse_file(self, tmp_path):
        path = tmp_path / "doc.xml"
        path.write_text('<?xml version="1.0"?>\n<doc>café</doc>\n', encoding="utf-8")

        assert parse_file(path).text == "café"
        assert XMLTreeParser().parse_file(str(path)).tag == "doc"

    def test_parse_file_missing(self, tmp_path):
        with pytest.raises(OSError):
            parse_file(tmp_path / "missing.xml")


class TestParseErrors:
    """Test error propagation through the API."""

    @pytest.mark.parametrize("source", [
        "",
        "plain text",
        "<a><b></a",
        "<a></b>",
        "<a/><b/>",
        "<a><!-- open",
    ])
    def test_structural_errors(self, source):
        with pytest.raises(StructuralParseError):
            parse_string(source)

    def test_duplicate_attribute(self):
        with pytest.raises(DuplicateNameError):
            parse_string('<a id="1" id="2"/>')

    def test_errors_are_package_errors(self):
        with pytest.raises(xmltree.XMLTreeError):
            parse_string("<a></b>")
