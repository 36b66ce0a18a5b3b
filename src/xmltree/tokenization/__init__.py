"""Tokenization engine for xmltree.

Converts XML source text into a flat token stream consumed by the tree
builder.

Key Components:
    XMLTokenizer: Main tokenization class
    Token: Single XML token with its source position
    TokenType: Enumeration of supported token types
    TokenPosition: Line, column and offset of a token
    parse_attributes: Attribute string splitter with namespace ordering
"""

from .attributes import parse_attributes
from .tokenizer import (
    Token,
    TokenizationResult,
    TokenPosition,
    TokenType,
    XMLTokenizer,
)

__all__ = [
    "Token",
    "TokenizationResult",
    "TokenPosition",
    "TokenType",
    "XMLTokenizer",
    "parse_attributes",
]
