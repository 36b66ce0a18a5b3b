"""Mutable XML tree model.

An :class:`XMLNode` owns its attributes, its children and one text value.
Every owned object keeps a weak, non-owning reference to the node that
created it; the reference is fixed at construction and only used for
attribute-name validation and navigation, so ownership stays tree-shaped.

All collection-returning queries return snapshot copies: mutating the node
afterwards is not reflected in a previously returned list, and mutating the
returned list does not touch the node.
"""

import weakref
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from xmltree.shared.errors import DuplicateNameError

from .predicates import AttributePredicate, NodePredicate, name_equals, tag_equals

NodeMatch = Union[str, NodePredicate]
AttributeMatch = Union[str, AttributePredicate]


def _node_matcher(match: Optional[NodeMatch]) -> NodePredicate:
    if callable(match):
        return match
    return tag_equals(match)


def _attribute_matcher(match: Optional[AttributeMatch]) -> AttributePredicate:
    if callable(match):
        return match
    return name_equals(match)


def _check_index(items: List[Any], index: int, kind: str) -> None:
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError(f"{kind} index must be an integer")
    if not 0 <= index < len(items):
        raise IndexError(f"{kind} index {index} out of range for length {len(items)}")


class XMLObject:
    """Base class for objects owned by an :class:`XMLNode`."""

    __slots__ = ("_parent_ref", "__weakref__")

    def __init__(self, parent: Optional["XMLNode"] = None) -> None:
        self._parent_ref = weakref.ref(parent) if parent is not None else None

    @property
    def parent(self) -> Optional["XMLNode"]:
        """Node that created this object, or None for a root node."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def has_parent(self) -> bool:
        """Check whether this object was created by a parent node."""
        return self._parent_ref is not None


class XMLAttribute(XMLObject):
    """Name/value pair owned by exactly one node."""

    __slots__ = ("_name", "_value")

    def __init__(self, parent: "XMLNode") -> None:
        super().__init__(parent)
        self._name: Optional[str] = None
        self._value: Any = None

    @property
    def name(self) -> Optional[str]:
        return self._name

    @name.setter
    def name(self, name: Optional[str]) -> None:
        self.set_name(name)

    def set_name(self, name: Optional[str]) -> "XMLAttribute":
        """Rename the attribute.

        The new name is checked against every attribute of the parent node,
        this one included, so renaming an attribute to its current name also
        fails.

        Raises:
            DuplicateNameError: If the parent already holds an attribute
                named ``name``
        """
        parent = self.parent
        if parent is not None and parent.contains_attribute(name):
            raise DuplicateNameError(name)
        self._name = name
        return self

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        self._value = value

    def set_value(self, value: Any) -> "XMLAttribute":
        """Set the attribute value and return the attribute."""
        self._value = value
        return self

    def __repr__(self) -> str:
        return f"XMLAttribute(name={self._name!r}, value={self._value!r})"


class XMLText(XMLObject):
    """Text payload of a node."""

    __slots__ = ("_text",)

    def __init__(self, parent: "XMLNode") -> None:
        super().__init__(parent)
        self._text: Optional[str] = None

    @property
    def text(self) -> Optional[str]:
        return self._text

    @text.setter
    def text(self, text: Optional[str]) -> None:
        self._text = text

    def set_text(self, text: Optional[str]) -> "XMLText":
        self._text = text
        return self

    def has_text(self) -> bool:
        """Check for text that is not None and not only whitespace."""
        return self._text is not None and bool(self._text.strip())

    def __repr__(self) -> str:
        return f"XMLText(text={self._text!r})"


class XMLNode(XMLObject):
    """One XML element: a tag, ordered attributes, ordered children and text.

    Construct a root with ``XMLNode()`` or ``XMLNode("tag")``; every other
    node is created by :meth:`add_child` on its owner.

    Examples:
        >>> root = XMLNode("config")
        >>> root.add_child("entry").set_text("on").add_attribute("id", "1")
        XMLAttribute(name='id', value='1')
        >>> print(root)
        <config>
        	<entry id="1">on</entry>
        </config>
    """

    __slots__ = ("_tag", "_attributes", "_children", "_text")

    def __init__(self, tag: Optional[str] = None, *, _parent: Optional["XMLNode"] = None) -> None:
        super().__init__(_parent)
        self._tag = tag
        self._attributes: List[XMLAttribute] = []
        self._children: List["XMLNode"] = []
        self._text = XMLText(self)

    # Tag

    @property
    def tag(self) -> Optional[str]:
        return self._tag

    @tag.setter
    def tag(self, tag: Optional[str]) -> None:
        self._tag = tag

    def set_tag(self, tag: Optional[str]) -> "XMLNode":
        """Set the element name and return the node."""
        self._tag = tag
        return self

    # Children

    @property
    def children(self) -> List["XMLNode"]:
        """Snapshot copy of the child nodes."""
        return list(self._children)

    @property
    def child_count(self) -> int:
        return len(self._children)

    def has_children(self) -> bool:
        return bool(self._children)

    def get_child(self, index: int) -> "XMLNode":
        """Get child at ``index``.

        Raises:
            IndexError: If ``index`` is not in ``range(child_count)``
        """
        _check_index(self._children, index, "Child")
        return self._children[index]

    def find_child(self, match: NodeMatch) -> Optional["XMLNode"]:
        """Find the first child matching a tag name or predicate."""
        predicate = _node_matcher(match)
        return next((child for child in self._children if predicate(child)), None)

    def find_children(self, match: Optional[NodeMatch] = None) -> List["XMLNode"]:
        """Find all children matching a tag name or predicate.

        With no ``match`` every child is returned.
        """
        if match is None:
            return list(self._children)
        predicate = _node_matcher(match)
        return [child for child in self._children if predicate(child)]

    def contains_child(self, tag: Optional[str]) -> bool:
        """Check if a child with the given tag exists."""
        return self.find_child(tag_equals(tag)) is not None

    def add_child(self, tag: Optional[str] = None) -> "XMLNode":
        """Create a child node, append it and return it."""
        child = XMLNode(tag, _parent=self)
        self._children.append(child)
        return child

    def get_or_add_child(self, tag: Optional[str]) -> "XMLNode":
        """Return the first child tagged ``tag``, creating it if absent."""
        child = self.find_child(tag_equals(tag))
        if child is None:
            child = self.add_child(tag)
        return child

    def remove_child(self, key: Union[int, str]) -> Optional["XMLNode"]:
        """Remove one child by position or by tag.

        An integer removes and returns the child at that position, raising
        IndexError if there is none. A tag removes and returns the first child
        with that tag, or returns None without touching the children.
        """
        if isinstance(key, int) and not isinstance(key, bool):
            _check_index(self._children, key, "Child")
            return self._children.pop(key)
        child = self.find_child(tag_equals(key))
        if child is not None:
            self._children.remove(child)
        return child

    def remove_children(self, match: NodeMatch) -> "XMLNode":
        """Remove every child matching a tag name or predicate."""
        predicate = _node_matcher(match)
        self._children[:] = [child for child in self._children if not predicate(child)]
        return self

    def sort_children(self, key: Callable[["XMLNode"], Any], reverse: bool = False) -> "XMLNode":
        """Stable in-place sort of the children."""
        self._children.sort(key=key, reverse=reverse)
        return self

    def clear_children(self) -> "XMLNode":
        self._children.clear()
        return self

    # Attributes

    @property
    def attributes(self) -> List[XMLAttribute]:
        """Snapshot copy of the attributes in insertion order."""
        return list(self._attributes)

    @property
    def attribute_count(self) -> int:
        return len(self._attributes)

    def has_attributes(self) -> bool:
        return bool(self._attributes)

    def get_attribute(self, index: int) -> XMLAttribute:
        """Get attribute at ``index``.

        Raises:
            IndexError: If ``index`` is not in ``range(attribute_count)``
        """
        _check_index(self._attributes, index, "Attribute")
        return self._attributes[index]

    def find_attribute(self, match: AttributeMatch) -> Optional[XMLAttribute]:
        """Find the first attribute matching a name or predicate."""
        predicate = _attribute_matcher(match)
        return next((attr for attr in self._attributes if predicate(attr)), None)

    def find_attributes(self, match: Optional[AttributeMatch] = None) -> List[XMLAttribute]:
        """Find all attributes matching a name or predicate."""
        if match is None:
            return list(self._attributes)
        predicate = _attribute_matcher(match)
        return [attr for attr in self._attributes if predicate(attr)]

    def get_attribute_value(self, name: str, default: Any = None) -> Any:
        """Get the value of attribute ``name`` with optional default."""
        attribute = self.find_attribute(name_equals(name))
        return default if attribute is None else attribute.value

    def contains_attribute(self, name: Optional[str]) -> bool:
        """Check if an attribute with the given name exists."""
        return any(attr.name == name for attr in self._attributes)

    def add_attribute(self, name: Optional[str], value: Any = None) -> XMLAttribute:
        """Create an attribute, append it and return it.

        Raises:
            DuplicateNameError: If an attribute named ``name`` already exists;
                the node is left unchanged
        """
        attribute = XMLAttribute(self)
        attribute.set_name(name)
        attribute.set_value(value)
        self._attributes.append(attribute)
        return attribute

    def get_or_add_attribute(self, name: Optional[str]) -> XMLAttribute:
        """Return the attribute named ``name``, creating it if absent."""
        attribute = self.find_attribute(name_equals(name))
        if attribute is None:
            attribute = self.add_attribute(name)
        return attribute

    def remove_attribute(self, key: Union[int, str]) -> Optional[XMLAttribute]:
        """Remove one attribute by position or by name.

        Mirrors :meth:`remove_child`.
        """
        if isinstance(key, int) and not isinstance(key, bool):
            _check_index(self._attributes, key, "Attribute")
            return self._attributes.pop(key)
        attribute = self.find_attribute(name_equals(key))
        if attribute is not None:
            self._attributes.remove(attribute)
        return attribute

    def remove_attributes(self, match: AttributeMatch) -> "XMLNode":
        """Remove every attribute matching a name or predicate."""
        predicate = _attribute_matcher(match)
        self._attributes[:] = [attr for attr in self._attributes if not predicate(attr)]
        return self

    def sort_attributes(
        self, key: Callable[[XMLAttribute], Any], reverse: bool = False
    ) -> "XMLNode":
        """Stable in-place sort of the attributes."""
        self._attributes.sort(key=key, reverse=reverse)
        return self

    def clear_attributes(self) -> "XMLNode":
        self._attributes.clear()
        return self

    # Text

    @property
    def text(self) -> Optional[str]:
        return self._text.text

    @text.setter
    def text(self, text: Optional[str]) -> None:
        self._text.text = text

    @property
    def text_node(self) -> XMLText:
        """The owned text object."""
        return self._text

    def set_text(self, text: Optional[str]) -> "XMLNode":
        """Set the text and return the node."""
        self._text.text = text
        return self

    def has_text(self) -> bool:
        """Check for text that is not None and not only whitespace."""
        return self._text.has_text()

    # Navigation

    def is_root(self) -> bool:
        return not self.has_parent()

    def get_depth(self) -> int:
        """Get depth of this node in the tree (root = 0)."""
        depth = 0
        parent = self.parent
        while parent is not None:
            depth += 1
            parent = parent.parent
        return depth

    def get_path(self) -> str:
        """Get XPath-like path to this node."""
        steps: List[str] = []
        node = self
        parent = node.parent
        while parent is not None:
            siblings = parent.find_children(tag_equals(node._tag))
            if len(siblings) > 1:
                position = next(
                    (i for i, sibling in enumerate(siblings, 1) if sibling is node), 1
                )
                steps.append(f"{node._tag}[{position}]")
            else:
                steps.append(f"{node._tag}")
            node, parent = parent, parent.parent
        steps.append(f"{node._tag}")
        return "/" + "/".join(reversed(steps))

    def iter_descendants(self) -> Iterator["XMLNode"]:
        """Iterate over all descendants in document order."""
        stack = list(reversed(self._children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node._children))

    def find_descendants(self, match: NodeMatch) -> List["XMLNode"]:
        """Find all descendants matching a tag name or predicate."""
        predicate = _node_matcher(match)
        return [node for node in self.iter_descendants() if predicate(node)]

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary representation."""
        result = self._shallow_dict()
        pending = [(self, result)]
        while pending:
            node, data = pending.pop()
            if node._children:
                data["children"] = []
                for child in node._children:
                    child_data = child._shallow_dict()
                    data["children"].append(child_data)
                    pending.append((child, child_data))
        return result

    def _shallow_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "tag": self._tag,
            "attributes": {attr.name: attr.value for attr in self._attributes},
        }
        if self.text is not None:
            result["text"] = self.text
        return result

    # Serialization

    def to_xml_string(self, indent: str = "\t") -> str:
        """Render this node and its subtree as indented XML."""
        # Imported here to avoid circular dependency
        from xmltree.serialization import XMLSerializer

        return XMLSerializer(indent=indent).serialize(self)

    def __str__(self) -> str:
        return self.to_xml_string()

    def __repr__(self) -> str:
        return (
            f"XMLNode(tag={self._tag!r}, attributes={self._attributes!r}, "
            f"children={len(self._children)}, text={self.text!r})"
        )
