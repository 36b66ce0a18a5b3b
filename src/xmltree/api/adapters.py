"""Integration adapters converting node trees to and from other libraries.

Each adapter converts an :class:`~xmltree.tree.XMLNode` into a target
representation (``to_target``) and back (``from_target``). Conversions never
raise for bad input data; failures are reported through
:class:`ConversionResult`. Target libraries are imported lazily, so an adapter
whose library is missing is simply unavailable.
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Tuple, Type

from xmltree.shared import XMLTreeError, get_logger
from xmltree.tree import XMLNode

_NAMESPACE_ATTRIBUTE = "xmlns"
_ATTRIBUTE_COLUMN_PREFIX = "attr_"


class AdapterType(Enum):
    """Types of integration adapters."""

    XML_LIBRARY = auto()     # Element tree libraries (lxml, ElementTree)
    DATA_FRAME = auto()      # DataFrame libraries (pandas)


@dataclass
class AdapterMetadata:
    """Metadata about an integration adapter."""

    name: str
    adapter_type: AdapterType
    target_library: str
    description: str


@dataclass
class ConversionResult:
    """Result of a conversion operation."""

    success: bool
    converted_data: Any
    original_data: Any
    conversion_time_ms: float
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


def _local_name(name: str) -> str:
    """Strip a ``{uri}`` or ``prefix:`` qualifier from ``name``."""
    return name.rpartition("}")[2].rpartition(":")[2]


def _resolve_element_text(element: Any) -> Optional[str]:
    """Apply the parser's text rules to an element and its children's tails."""
    gaps = [element.text] + [child.tail for child in element]
    if not any(isinstance(child.tag, str) for child in element):
        if all(gap is None for gap in gaps):
            return None
        return "".join(gap or "" for gap in gaps).strip()

    text = None
    for gap in gaps:
        if gap and gap.strip():
            text = gap.strip()
    return text


def _attribute_string(value: Any) -> str:
    return "" if value is None else str(value)


class IntegrationAdapter(ABC):
    """Abstract base class for all integration adapters."""

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize the integration adapter.

        Args:
            correlation_id: Optional correlation ID for request tracking
        """
        self.correlation_id = correlation_id
        self._logger = get_logger(__name__, correlation_id, self.__class__.__name__)

    @property
    @abstractmethod
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the target library can be imported."""

    @abstractmethod
    def _convert_to(self, node: XMLNode) -> Tuple[Any, Dict[str, Any]]:
        """Convert ``node``; return the target object and result metadata."""

    @abstractmethod
    def _convert_from(self, target_data: Any) -> Tuple[XMLNode, Dict[str, Any]]:
        """Convert ``target_data``; return a new root node and result metadata."""

    def to_target(self, node: XMLNode) -> ConversionResult:
        """Convert a node and its subtree to the target format.

        Args:
            node: Node to convert; it becomes the target's root

        Returns:
            ConversionResult containing the converted data
        """
        return self._run(self._convert_to, node, "to")

    def from_target(self, target_data: Any) -> ConversionResult:
        """Convert target data into a new root :class:`XMLNode`.

        Args:
            target_data: Data in the target format

        Returns:
            ConversionResult containing the root node
        """
        return self._run(self._convert_from, target_data, "from")

    def _run(self, convert: Any, data: Any, direction: str) -> ConversionResult:
        start_time = time.time()
        try:
            converted, metadata = convert(data)
        except (XMLTreeError, ValueError, TypeError, KeyError, RecursionError) as e:
            processing_time = (time.time() - start_time) * 1000
            self._logger.debug(
                "Conversion failed",
                extra={"direction": direction, "error": str(e)}
            )
            return ConversionResult(
                success=False,
                converted_data=None,
                original_data=data,
                conversion_time_ms=processing_time,
                errors=[f"Failed to convert {direction} {self.metadata.target_library}: {e}"],
            )

        processing_time = (time.time() - start_time) * 1000
        self._logger.debug(
            "Conversion completed",
            extra={"direction": direction, "processing_time_ms": processing_time}
        )
        return ConversionResult(
            success=True,
            converted_data=converted,
            original_data=data,
            conversion_time_ms=processing_time,
            metadata=metadata,
        )

    def _node_from_element(
        self, element: Any, node: XMLNode, declarations: Dict[Optional[str], str]
    ) -> None:
        """Populate ``node`` from an element and its element children."""
        tag = _local_name(element.tag)
        prefix = getattr(element, "prefix", None)
        node.set_tag(f"{prefix}:{tag}" if prefix else tag)

        for prefix_name, uri in declarations.items():
            name = f"{_NAMESPACE_ATTRIBUTE}:{prefix_name}" if prefix_name else _NAMESPACE_ATTRIBUTE
            node.add_attribute(name, uri)
        for name, value in element.attrib.items():
            node.add_attribute(_local_name(name), value)
        node.set_text(_resolve_element_text(element))

        for child in element:
            # Comments and processing instructions have non-string tags
            if isinstance(child.tag, str):
                self._node_from_element(
                    child, node.add_child(), self._declared_namespaces(child, element)
                )

    def _declared_namespaces(self, element: Any, parent: Any) -> Dict[Optional[str], str]:
        """Namespaces first declared on ``element``; none by default."""
        return {}


class ElementTreeAdapter(IntegrationAdapter):
    """Adapter for conversion with :mod:`xml.etree.ElementTree`."""

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="elementtree",
            adapter_type=AdapterType.XML_LIBRARY,
            target_library="xml.etree.ElementTree",
            description="Conversion between XMLNode trees and ElementTree elements",
        )

    def is_available(self) -> bool:
        """ElementTree ships with the standard library."""
        return True

    def _convert_to(self, node: XMLNode) -> Tuple[Any, Dict[str, Any]]:
        import xml.etree.ElementTree as ET

        element = self._element_from_node(node, ET)
        return element, {"element_count": len(list(element.iter()))}

    def _element_from_node(self, node: XMLNode, ET: Any) -> Any:
        element = ET.Element(node.tag)
        for attribute in node.attributes:
            element.set(attribute.name, _attribute_string(attribute.value))
        if node.text is not None:
            element.text = node.text
        for child in node.children:
            element.append(self._element_from_node(child, ET))
        return element

    def _convert_from(self, target_data: Any) -> Tuple[XMLNode, Dict[str, Any]]:
        if not hasattr(target_data, "tag"):
            raise TypeError("Target data is not an ElementTree element")
        root = XMLNode()
        self._node_from_element(target_data, root, {})
        return root, {"original_tag": target_data.tag}


class LxmlAdapter(IntegrationAdapter):
    """Adapter for conversion with :mod:`lxml.etree`.

    Namespace declarations stored as ``xmlns``/``xmlns:PREFIX`` attributes
    become lxml namespace maps, and prefixed tags are resolved against them.
    """

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="lxml",
            adapter_type=AdapterType.XML_LIBRARY,
            target_library="lxml",
            description="Conversion between XMLNode trees and lxml.etree elements",
        )

    def is_available(self) -> bool:
        """Check if lxml is available."""
        try:
            import lxml.etree  # noqa: F401
            return True
        except ImportError:
            return False

    def _convert_to(self, node: XMLNode) -> Tuple[Any, Dict[str, Any]]:
        from lxml import etree

        element = self._element_from_node(node, etree, None, {})
        return element, {
            "lxml_version": etree.LXML_VERSION,
            "element_count": len(element.xpath("//*")),
        }

    def _element_from_node(
        self,
        node: XMLNode,
        etree: Any,
        parent: Any,
        scope: Dict[Optional[str], str],
    ) -> Any:
        nsmap: Dict[Optional[str], str] = {}
        attributes = []
        for attribute in node.attributes:
            name, value = attribute.name, _attribute_string(attribute.value)
            if name == _NAMESPACE_ATTRIBUTE:
                nsmap[None] = value
            elif name.startswith(f"{_NAMESPACE_ATTRIBUTE}:"):
                nsmap[name.split(":", 1)[1]] = value
            else:
                attributes.append((name, value))

        scope = {**scope, **nsmap}
        tag = self._qualify(node.tag, scope)
        if parent is None:
            element = etree.Element(tag, nsmap=nsmap or None)
        else:
            element = etree.SubElement(parent, tag, nsmap=nsmap or None)

        for name, value in attributes:
            element.set(name, value)
        if node.text is not None:
            element.text = node.text
        for child in node.children:
            self._element_from_node(child, etree, element, scope)
        return element

    @staticmethod
    def _qualify(tag: Optional[str], scope: Dict[Optional[str], str]) -> Optional[str]:
        """Turn ``prefix:name`` into lxml's ``{uri}name`` form."""
        if tag is None:
            return tag
        prefix, separator, local = tag.rpartition(":")
        if not separator:
            prefix = None
        if prefix in scope:
            return f"{{{scope[prefix]}}}{local}"
        return local

    def _convert_from(self, target_data: Any) -> Tuple[XMLNode, Dict[str, Any]]:
        if not hasattr(target_data, "nsmap"):
            raise TypeError("Target data is not an lxml element")
        root = XMLNode()
        self._node_from_element(target_data, root, dict(target_data.nsmap))
        return root, {"original_tag": target_data.tag}

    def _declared_namespaces(self, element: Any, parent: Any) -> Dict[Optional[str], str]:
        inherited = parent.nsmap
        return {
            prefix: uri for prefix, uri in element.nsmap.items()
            if inherited.get(prefix) != uri
        }


class PandasAdapter(IntegrationAdapter):
    """Adapter for conversion with pandas DataFrames.

    A tree becomes one row per element in document order with ``tag``,
    ``text``, ``depth`` and ``path`` columns plus one ``attr_NAME`` column per
    attribute name. The ``depth`` column is enough to rebuild the tree.
    Missing cells mark absent attributes, so an attribute whose value is None
    is stored as an empty string and comes back with the value ``""``.
    """

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="pandas",
            adapter_type=AdapterType.DATA_FRAME,
            target_library="pandas",
            description="Conversion between XMLNode trees and pandas DataFrames",
        )

    def is_available(self) -> bool:
        """Check if pandas is available."""
        try:
            import pandas  # noqa: F401
            return True
        except ImportError:
            return False

    def _convert_to(self, node: XMLNode) -> Tuple[Any, Dict[str, Any]]:
        import pandas as pd

        base_depth = node.get_depth()
        rows = []
        for element in [node, *node.iter_descendants()]:
            row = {
                "tag": element.tag,
                "text": element.text,
                "depth": element.get_depth() - base_depth,
                "path": element.get_path(),
            }
            for attribute in element.attributes:
                row[f"{_ATTRIBUTE_COLUMN_PREFIX}{attribute.name}"] = _attribute_string(
                    attribute.value
                )
            rows.append(row)

        df = pd.DataFrame(rows)
        return df, {
            "dataframe_shape": df.shape,
            "columns": list(df.columns),
        }

    def _convert_from(self, target_data: Any) -> Tuple[XMLNode, Dict[str, Any]]:
        import pandas as pd

        if not isinstance(target_data, pd.DataFrame):
            raise TypeError("Target data is not a pandas DataFrame")
        if len(target_data) == 0:
            raise ValueError("DataFrame has no rows")

        attribute_columns = [
            column for column in target_data.columns
            if str(column).startswith(_ATTRIBUTE_COLUMN_PREFIX)
        ]
        root = XMLNode()
        stack: List[XMLNode] = []
        for _, row in target_data.iterrows():
            depth = int(row["depth"])
            if depth > len(stack) or (depth == 0 and stack):
                raise ValueError(f"Row depth {depth} does not continue the tree")
            del stack[depth:]
            node = stack[-1].add_child() if stack else root
            node.set_tag(row["tag"])
            text = row.get("text")
            node.set_text(None if pd.isna(text) else str(text))
            for column in attribute_columns:
                if not pd.isna(row[column]):
                    node.add_attribute(column[len(_ATTRIBUTE_COLUMN_PREFIX):], row[column])
            stack.append(node)

        return root, {"row_count": len(target_data)}


class AdapterRegistry:
    """Registry for managing integration adapters."""

    def __init__(self) -> None:
        """Initialize the adapter registry."""
        self._adapters: Dict[str, Type[IntegrationAdapter]] = {}
        self._lock = threading.RLock()

    def register(self, adapter_class: Type[IntegrationAdapter]) -> None:
        """Register an adapter class under its metadata name."""
        with self._lock:
            self._adapters[adapter_class().metadata.name] = adapter_class

    def get_adapter(
        self,
        adapter_name: str,
        correlation_id: Optional[str] = None
    ) -> Optional[IntegrationAdapter]:
        """Get an adapter instance by name.

        Returns:
            Adapter instance if registered and available, None otherwise
        """
        with self._lock:
            adapter_class = self._adapters.get(adapter_name)
        if adapter_class is None:
            return None
        adapter = adapter_class(correlation_id)
        return adapter if adapter.is_available() else None

    def list_available_adapters(self) -> List[AdapterMetadata]:
        """List metadata of every registered adapter whose library imports."""
        with self._lock:
            adapter_classes = list(self._adapters.values())
        return [
            adapter.metadata for adapter in (cls() for cls in adapter_classes)
            if adapter.is_available()
        ]


# Global adapter registry instance
_adapter_registry = AdapterRegistry()


def register_adapter(adapter_class: Type[IntegrationAdapter]) -> None:
    """Register an integration adapter globally."""
    _adapter_registry.register(adapter_class)


def get_adapter(
    adapter_name: str,
    correlation_id: Optional[str] = None
) -> Optional[IntegrationAdapter]:
    """Get a registered adapter instance, or None if unknown or unavailable."""
    return _adapter_registry.get_adapter(adapter_name, correlation_id)


def list_available_adapters() -> List[AdapterMetadata]:
    """List all available integration adapters."""
    return _adapter_registry.list_available_adapters()


register_adapter(ElementTreeAdapter)
register_adapter(LxmlAdapter)
register_adapter(PandasAdapter)
