"""Tree model and tree building for xmltree.

Key Components:
    XMLNode: Element with tag, ordered attributes, ordered children and text
    XMLAttribute: Name/value pair owned by one node
    XMLText: Text payload owned by one node
    XMLTreeBuilder: Builds a node tree from a token stream
"""

from .builder import XMLTreeBuilder
from .node import XMLAttribute, XMLNode, XMLObject, XMLText
from .predicates import (
    has_attribute,
    name_equals,
    tag_equals,
    text_equals,
    value_equals,
)

__all__ = [
    "XMLAttribute",
    "XMLNode",
    "XMLObject",
    "XMLText",
    "XMLTreeBuilder",
    "has_attribute",
    "name_equals",
    "tag_equals",
    "text_equals",
    "value_equals",
]
