"""Predicate builders for node and attribute lookups."""

from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from .node import XMLAttribute, XMLNode

NodePredicate = Callable[["XMLNode"], bool]
AttributePredicate = Callable[["XMLAttribute"], bool]

_ANY = object()


def tag_equals(tag: Optional[str]) -> NodePredicate:
    """Match nodes whose tag equals ``tag``."""
    return lambda node: node.tag == tag


def text_equals(text: Optional[str]) -> NodePredicate:
    """Match nodes whose text equals ``text``."""
    return lambda node: node.text == text


def has_attribute(name: Optional[str], value: Any = _ANY) -> NodePredicate:
    """Match nodes carrying attribute ``name``, optionally with ``value``."""
    def predicate(node: "XMLNode") -> bool:
        attribute = node.find_attribute(name)
        if attribute is None:
            return False
        return value is _ANY or attribute.value == value
    return predicate


def name_equals(name: Optional[str]) -> AttributePredicate:
    """Match attributes whose name equals ``name``."""
    return lambda attribute: attribute.name == name


def value_equals(value: Any) -> AttributePredicate:
    """Match attributes whose value equals ``value``."""
    return lambda attribute: attribute.value == value
