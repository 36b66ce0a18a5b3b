"""Configuration classes for xmltree.

This module provides configuration objects for the parser and serializer,
plus an immutable top-level configuration combining them.
"""

import json
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

_VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
_COMPONENTS = ("parser", "serializer")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass
class ParserConfig:
    """Configuration for the string to tree parser."""

    max_depth: int = 1000
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate parser configuration."""
        if self.max_depth <= 0:
            raise ValueError("max_depth must be > 0")


@dataclass
class SerializerConfig:
    """Configuration for the tree to string serializer."""

    indent: str = "\t"

    def __post_init__(self) -> None:
        """Validate serializer configuration."""
        if not isinstance(self.indent, str) or len(self.indent) != 1:
            raise ValueError("indent must be a single character")


@dataclass(frozen=True)
class XMLTreeConfig:
    """Complete configuration for parsing and serializing XML trees.

    Frozen so a configuration can be shared between parser instances; use
    :meth:`override` to derive a modified copy.
    """

    parser: ParserConfig = field(default_factory=ParserConfig)
    serializer: SerializerConfig = field(default_factory=SerializerConfig)
    logging_level: str = "WARNING"
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete configuration."""
        try:
            self.parser.__post_init__()
            self.serializer.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if self.logging_level not in _VALID_LOGGING_LEVELS:
            raise ConfigValidationError(
                f"logging_level must be one of {_VALID_LOGGING_LEVELS}",
                field_name="logging_level",
                suggestions=list(_VALID_LOGGING_LEVELS),
            )

    def override(self, **kwargs: Any) -> "XMLTreeConfig":
        """Create a new configuration with specific overrides.

        Nested fields use ``component__field`` notation.

        Example:
            >>> config = XMLTreeConfig().override(serializer__indent=" ")
            >>> config.serializer.indent
            ' '
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENTS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for component, overrides in nested_overrides.items():
                new_fields[component] = replace(getattr(self, component), **overrides)
            new_fields.update(top_level)
            return replace(self, **new_fields)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if hasattr(value, "__dataclass_fields__"):
                value = {sub.name: getattr(value, sub.name) for sub in fields(value)}
            result[f.name] = value
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "XMLTreeConfig":
        """Create configuration from dictionary.

        Raises:
            ConfigValidationError: If a key is unknown or a value is invalid
        """
        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                raise ConfigValidationError(
                    f"Unknown configuration field: {key}", field_name=key
                )
            field_type = known[key].type
            try:
                if hasattr(field_type, "__dataclass_fields__") and isinstance(value, dict):
                    value = field_type(**value)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=key) from e
            values[key] = value
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "XMLTreeConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def tabs(cls) -> "XMLTreeConfig":
        """Default preset: one tab per nesting level."""
        return cls(name="tabs")

    @classmethod
    def spaces(cls) -> "XMLTreeConfig":
        """Preset indenting with one space per nesting level."""
        return cls(serializer=SerializerConfig(indent=" "), name="spaces")

    @classmethod
    def strict(cls) -> "XMLTreeConfig":
        """Preset rejecting deeply nested input early."""
        return cls(parser=ParserConfig(max_depth=100), name="strict")
