"""Public parsing and serialization API for xmltree.

Progressive disclosure, simplest first:

* :func:`parse_string` / :func:`parse_file` return a new root node
* :class:`XMLTreeParser` holds a configuration, can populate an existing
  node and keeps metrics for the last parse
* :func:`to_xml_string` renders a node with an optional configuration
"""

import logging
import time
from pathlib import Path
from typing import Optional, Union

from xmltree.serialization import XMLSerializer
from xmltree.shared import (
    ParseMetrics,
    StructuralParseError,
    XMLTreeConfig,
    get_logger,
)
from xmltree.tokenization import XMLTokenizer
from xmltree.tree import XMLNode, XMLTreeBuilder

PathType = Union[str, Path]

# Max length for content preview in logs
PREVIEW_LENGTH = 100


class XMLTreeParser:
    """Configured parser turning XML source text into :class:`XMLNode` trees.

    Examples:
        >>> parser = XMLTreeParser()
        >>> root = parser.parse('<root a="1"><child>hi</child></root>')
        >>> root.get_child(0).text
        'hi'
        >>> parser.last_metrics.elements_created
        2
    """

    def __init__(self, config: Optional[XMLTreeConfig] = None) -> None:
        """Initialize parser.

        Args:
            config: Complete configuration; defaults to ``XMLTreeConfig()``
        """
        self.config = config or XMLTreeConfig()
        self.correlation_id = self.config.parser.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "xml_tree_parser")
        self.last_metrics: Optional[ParseMetrics] = None

    def parse(self, source: str, into: Optional[XMLNode] = None) -> XMLNode:
        """Parse ``source`` into a node tree.

        Args:
            source: Complete XML document
            into: Empty node to populate; a new root is created when omitted

        Returns:
            The populated root node

        Raises:
            StructuralParseError: If the document is not a single element
            DuplicateNameError: If an element repeats an attribute name
        """
        if not isinstance(source, str):
            raise TypeError(f"source must be str, not {type(source).__name__}")

        start_time = time.time()
        if self.logger.is_enabled_for(logging.DEBUG):
            self.logger.debug(
                "Starting parse",
                extra={
                    "content_length": len(source),
                    "content_preview": source[:PREVIEW_LENGTH],
                }
            )

        tokenizer = XMLTokenizer(correlation_id=self.correlation_id)
        builder = XMLTreeBuilder(self.config.parser, correlation_id=self.correlation_id)
        try:
            tokens = tokenizer.tokenize(source)
            root = builder.build(tokens, into=into)
        except StructuralParseError as e:
            self.logger.debug(
                "Parse failed",
                extra={"error": e.message, "line": e.line, "column": e.column}
            )
            raise

        metrics = builder.metrics
        metrics.characters_processed = tokens.character_count
        metrics.processing_time_ms = (time.time() - start_time) * 1000
        self.last_metrics = metrics

        self.logger.debug(
            "Parse completed",
            extra={
                "element_count": metrics.elements_created,
                "processing_time_ms": metrics.processing_time_ms,
            }
        )
        return root

    def parse_file(self, path: PathType, encoding: str = "utf-8") -> XMLNode:
        """Read and parse an XML file.

        Raises:
            OSError: If the file cannot be read
        """
        source = Path(path).read_text(encoding=encoding)
        return self.parse(source)

    def serialize(self, node: XMLNode, indent: Optional[str] = None) -> str:
        """Render ``node`` using this parser's serializer configuration."""
        return XMLSerializer(indent=indent, config=self.config.serializer).serialize(node)


def parse_string(source: str, config: Optional[XMLTreeConfig] = None) -> XMLNode:
    """Parse an XML document string into a new root node.

    Examples:
        >>> root = parse_string('<root><!-- c --><a/></root>')
        >>> [child.tag for child in root.children]
        ['a']
    """
    return XMLTreeParser(config).parse(source)


def parse_file(
    path: PathType,
    encoding: str = "utf-8",
    config: Optional[XMLTreeConfig] = None,
) -> XMLNode:
    """Read an XML file and parse it into a new root node."""
    return XMLTreeParser(config).parse_file(path, encoding=encoding)


def to_xml_string(
    node: XMLNode,
    indent: Optional[str] = None,
    config: Optional[XMLTreeConfig] = None,
) -> str:
    """Render ``node`` as indented XML without a declaration."""
    serializer_config = (config or XMLTreeConfig()).serializer
    return XMLSerializer(indent=indent, config=serializer_config).serialize(node)
