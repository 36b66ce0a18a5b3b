"""xmltree: a mutable in-memory XML tree.

Parse a document into a tree of :class:`XMLNode` objects, query and edit it,
and render it back as indented XML.

Progressive API Disclosure:
- Level 1: Simple functions - parse_string(), parse_file(), to_xml_string()
- Level 2: Configured parser - XMLTreeParser with XMLTreeConfig
- Level 3: Building blocks - XMLTokenizer, XMLTreeBuilder, XMLSerializer
"""

__version__ = "0.1.0"
__author__ = "xmltree developers"

from .api import XMLTreeParser, parse_file, parse_string, to_xml_string
from .serialization import XMLSerializer
from .shared.config import (
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    SerializerConfig,
    XMLTreeConfig,
)
from .shared.errors import DuplicateNameError, StructuralParseError, XMLTreeError
from .shared.escaping import escape_xml
from .tokenization import XMLTokenizer
from .tree import XMLAttribute, XMLNode, XMLText, XMLTreeBuilder

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "parse_string",
    "parse_file",
    "to_xml_string",

    # Level 2: Configured parser
    "XMLTreeParser",
    "XMLTreeConfig",
    "ParserConfig",
    "SerializerConfig",

    # Tree model
    "XMLNode",
    "XMLAttribute",
    "XMLText",

    # Level 3: Building blocks
    "XMLTokenizer",
    "XMLTreeBuilder",
    "XMLSerializer",
    "escape_xml",

    # Errors
    "XMLTreeError",
    "StructuralParseError",
    "DuplicateNameError",
    "ConfigError",
    "ConfigValidationError",
]
