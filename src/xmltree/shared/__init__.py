"""Shared utilities for xmltree.

This module provides configuration objects, error types, metrics, escaping
and logging helpers used across the tokenizer, tree and serializer layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    SerializerConfig,
    XMLTreeConfig,
)
from .errors import (
    DuplicateNameError,
    StructuralParseError,
    XMLTreeError,
)
from .escaping import escape_xml
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import ParseMetrics

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "SerializerConfig",
    "XMLTreeConfig",
    "DuplicateNameError",
    "StructuralParseError",
    "XMLTreeError",
    "escape_xml",
    "CorrelationLogger",
    "get_logger",
    "ParseMetrics",
]
