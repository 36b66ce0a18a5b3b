"""Tree to string serialization.

Renders an :class:`~xmltree.tree.XMLNode` as multi-line XML, one element per
line, indented with a repeated character. Children always take precedence
over a node's own text, and no XML declaration is emitted.
"""

from typing import List, Optional, Tuple

from xmltree.shared.config import SerializerConfig
from xmltree.shared.escaping import escape_xml
from xmltree.tree.node import XMLAttribute, XMLNode


class XMLSerializer:
    """Serializer turning nodes into indented XML strings."""

    def __init__(
        self,
        indent: Optional[str] = None,
        config: Optional[SerializerConfig] = None,
    ) -> None:
        """Initialize serializer.

        Args:
            indent: Indent character; overrides ``config.indent`` when given
            config: Serializer configuration

        Raises:
            ValueError: If the indent is not a single character
        """
        if config is None:
            config = SerializerConfig() if indent is None else SerializerConfig(indent=indent)
        elif indent is not None:
            config = SerializerConfig(indent=indent)
        self.config = config

    @property
    def indent(self) -> str:
        return self.config.indent

    def serialize(self, node: XMLNode) -> str:
        """Render ``node`` at depth 0.

        Works on an explicit stack, so nesting depth is not bounded by the
        interpreter recursion limit.
        """
        lines: List[str] = []
        pending: List[Tuple[XMLNode, int, bool]] = [(node, 0, False)]
        while pending:
            current, depth, closing = pending.pop()
            indent_string = self.indent * depth
            if closing:
                lines.append(f"{indent_string}</{current.tag}>")
                continue

            opening = self._open_tag(current, indent_string)
            children = current.children
            if children:
                lines.append(f"{opening}>")
                pending.append((current, depth, True))
                pending.extend((child, depth + 1, False) for child in reversed(children))
            elif current.has_text():
                lines.append(f"{opening}>{escape_xml(current.text)}</{current.tag}>")
            else:
                lines.append(f"{opening}/>")

        return "\n".join(lines)

    def render_attribute(self, attribute: XMLAttribute) -> str:
        """Render one attribute as ``name="value"``."""
        value = "" if attribute.value is None else str(attribute.value)
        return f'{escape_xml(attribute.name)}="{escape_xml(value)}"'

    def _open_tag(self, node: XMLNode, indent_string: str) -> str:
        """Render the indent, ``<TAG`` and the attributes of ``node``."""
        parts: List[str] = [indent_string, "<", str(node.tag)]
        attributes = node.attributes
        if attributes:
            parts.append(" ")
            parts.append(" ".join(self.render_attribute(attr) for attr in attributes))
        return "".join(parts)
