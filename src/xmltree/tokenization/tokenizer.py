"""XML tokenizer.

Splits a source string into declaration, doctype, comment, CDATA, tag and
text tokens in a single left-to-right pass. Every pattern is anchored at the
current offset, so no part of the input is scanned twice.
"""

import logging
import re
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, List, Optional, Tuple

from xmltree.shared.errors import StructuralParseError

from .attributes import parse_attributes

logger = logging.getLogger(__name__)

NAME_PATTERN = r"[A-Za-z_:][\w.:-]*"

# The attribute run alternatives are disjoint. A "/" that follows whitespace
# is captured by the run, not by the last group.
_OPEN_TAG = re.compile(
    rf"<({NAME_PATTERN})"
    r"(\s(?:[^>\"']|\"[^\"]*\"|'[^']*')*)?"
    r"(/?)>"
)
_CLOSE_TAG = re.compile(rf"</({NAME_PATTERN})\s*>")
_DOCTYPE = re.compile(
    r"<!DOCTYPE(?:[^>\[\"']|\"[^\"]*\"|'[^']*'|\[[^\]]*\])*>",
    re.IGNORECASE,
)

_COMMENT_START, _COMMENT_END = "<!--", "-->"
_CDATA_START, _CDATA_END = "<![CDATA[", "]]>"
_DECLARATION_START, _DECLARATION_END = "<?", "?>"

# Markup snippet length quoted in error messages
_SNIPPET_LENGTH = 30


class TokenType(Enum):
    """XML token types produced by the tokenizer."""

    DECLARATION = auto()   # <?xml ... ?> and other processing instructions
    DOCTYPE = auto()       # <!DOCTYPE ...>
    COMMENT = auto()       # <!-- ... -->
    CDATA = auto()         # <![CDATA[ ... ]]>
    OPEN_TAG = auto()      # <name attrs>
    EMPTY_TAG = auto()     # <name attrs/>
    CLOSE_TAG = auto()     # </name>
    TEXT = auto()          # Character content between markup


@dataclass
class TokenPosition:
    """Position information for XML tokens."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")


@dataclass
class Token:
    """Single XML token.

    ``value`` holds the tag name for tag tokens and the raw content for all
    other token types. ``attributes`` is only populated for opening tags.
    """

    type: TokenType
    value: str
    position: TokenPosition
    attributes: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def is_markup(self) -> bool:
        """Check if this token is anything other than character content."""
        return self.type not in (TokenType.TEXT, TokenType.CDATA)


@dataclass
class TokenizationResult:
    """Result of tokenization with basic statistics."""

    tokens: List[Token]
    processing_time: float = 0.0
    character_count: int = 0

    @property
    def token_count(self) -> int:
        """Get the total number of tokens."""
        return len(self.tokens)


class _PositionTracker:
    """Incremental offset to line/column conversion for forward scans."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.offset = 0
        self.line = 1
        self.line_start = 0

    def at(self, offset: int) -> TokenPosition:
        """Position of ``offset``; offsets must not decrease between calls."""
        newlines = self.source.count("\n", self.offset, offset)
        if newlines:
            self.line += newlines
            self.line_start = self.source.rfind("\n", self.offset, offset) + 1
        self.offset = offset
        return TokenPosition(self.line, offset - self.line_start + 1, offset)


class XMLTokenizer:
    """Tokenizer converting XML source text into a token stream.

    Raises :class:`StructuralParseError` on markup it cannot classify, such as
    an unterminated comment or a ``<`` that does not start a valid tag.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize the XML tokenizer.

        Args:
            correlation_id: Optional correlation ID for tracking requests
        """
        self.correlation_id = correlation_id

    def tokenize(self, source: str) -> TokenizationResult:
        """Tokenize ``source`` into a list of tokens.

        Args:
            source: Complete XML document text

        Returns:
            TokenizationResult with tokens and timing information
        """
        start_time = time.time()
        tokens = list(self.iter_tokens(source))
        processing_time = time.time() - start_time

        logger.debug(
            "Tokenization completed",
            extra={
                "component": "xml_tokenizer",
                "correlation_id": self.correlation_id,
                "token_count": len(tokens),
                "processing_time": processing_time,
            }
        )

        return TokenizationResult(
            tokens=tokens,
            processing_time=processing_time,
            character_count=len(source),
        )

    def iter_tokens(self, source: str) -> Iterator[Token]:
        """Lazily yield tokens from ``source`` in document order."""
        positions = _PositionTracker(source)
        offset = 0
        length = len(source)

        while offset < length:
            markup_start = source.find("<", offset)
            if markup_start == -1:
                markup_start = length
            if markup_start > offset:
                yield Token(TokenType.TEXT, source[offset:markup_start], positions.at(offset))
                offset = markup_start
                if offset == length:
                    break

            token, offset = self._read_markup(source, offset, positions.at(offset))
            yield token

    def _read_markup(
        self, source: str, offset: int, position: TokenPosition
    ) -> Tuple[Token, int]:
        """Read the markup construct starting with ``<`` at ``offset``."""
        if source.startswith(_COMMENT_START, offset):
            content, end = self._read_delimited(
                source, offset, _COMMENT_START, _COMMENT_END, "comment", position
            )
            return Token(TokenType.COMMENT, content, position), end

        if source.startswith(_CDATA_START, offset):
            content, end = self._read_delimited(
                source, offset, _CDATA_START, _CDATA_END, "CDATA section", position
            )
            return Token(TokenType.CDATA, content, position), end

        if source.startswith(_DECLARATION_START, offset):
            content, end = self._read_delimited(
                source, offset, _DECLARATION_START, _DECLARATION_END, "declaration", position
            )
            return Token(TokenType.DECLARATION, content.strip(), position), end

        match = _DOCTYPE.match(source, offset)
        if match:
            return Token(TokenType.DOCTYPE, match.group(0), position), match.end()

        match = _CLOSE_TAG.match(source, offset)
        if match:
            return Token(TokenType.CLOSE_TAG, match.group(1), position), match.end()

        match = _OPEN_TAG.match(source, offset)
        if match:
            name, attribute_string, slash = match.groups()
            attribute_string = (attribute_string or "").rstrip()
            if attribute_string.endswith("/"):
                attribute_string, slash = attribute_string[:-1], "/"
            token_type = TokenType.EMPTY_TAG if slash else TokenType.OPEN_TAG
            attributes = parse_attributes(attribute_string) if attribute_string else []
            return Token(token_type, name, position, attributes), match.end()

        snippet = source[offset:offset + _SNIPPET_LENGTH]
        raise StructuralParseError(
            f"Unrecognized markup: {snippet!r}",
            offset=offset,
            line=position.line,
            column=position.column,
        )

    @staticmethod
    def _read_delimited(
        source: str,
        offset: int,
        start: str,
        end: str,
        description: str,
        position: TokenPosition,
    ) -> Tuple[str, int]:
        content_start = offset + len(start)
        content_end = source.find(end, content_start)
        if content_end == -1:
            raise StructuralParseError(
                f"Unterminated {description}",
                offset=offset,
                line=position.line,
                column=position.column,
            )
        return source[content_start:content_end], content_end + len(end)
