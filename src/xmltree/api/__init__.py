"""Public API for xmltree."""

from .adapters import (
    AdapterMetadata,
    AdapterRegistry,
    AdapterType,
    ConversionResult,
    ElementTreeAdapter,
    IntegrationAdapter,
    LxmlAdapter,
    PandasAdapter,
    get_adapter,
    list_available_adapters,
    register_adapter,
)
from .parser import XMLTreeParser, parse_file, parse_string, to_xml_string

__all__ = [
    "XMLTreeParser",
    "parse_file",
    "parse_string",
    "to_xml_string",
    # Integration adapters
    "AdapterMetadata",
    "AdapterRegistry",
    "AdapterType",
    "ConversionResult",
    "ElementTreeAdapter",
    "IntegrationAdapter",
    "LxmlAdapter",
    "PandasAdapter",
    "get_adapter",
    "list_available_adapters",
    "register_adapter",
]
