"""Exception types raised by xmltree."""

from typing import Optional


class XMLTreeError(Exception):
    """Base exception for all xmltree errors."""


class StructuralParseError(XMLTreeError):
    """Raised when source text cannot be classified as a recognized tag shape.

    The whole parse is aborted; the node being populated is left in an
    unspecified state.
    """

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.message = message
        self.offset = offset
        self.line = line
        self.column = column
        if line is not None and column is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


class DuplicateNameError(XMLTreeError, ValueError):
    """Raised when an attribute name collides with a sibling attribute.

    The rejected mutation leaves the owning node unchanged.
    """

    def __init__(self, name: Optional[str]) -> None:
        self.name = name
        super().__init__(f'Attribute with name "{name}" already exists')
