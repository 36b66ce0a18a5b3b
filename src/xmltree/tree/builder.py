"""Tree building from token streams.

The builder keeps a stack of open element frames. Each frame records its
content as an ordered list of child frames and text gaps; comments do not
split a gap. Nodes are only created once the whole stream has been accepted,
from the finished frames.

Structural rules:

* a close tag must name an element that is still open; elements opened
  inside it and never closed are treated as empty elements, and whatever
  followed them moves up to the enclosing element
* at the end of input the same applies to every element still open
* exactly one element may remain at the top level, with only whitespace
  around it
"""

import time
from typing import List, Optional, Tuple, Union

from xmltree.shared import (
    ParseMetrics,
    ParserConfig,
    StructuralParseError,
    get_logger,
)
from xmltree.tokenization import Token, TokenizationResult, TokenType

from .node import XMLNode


class _Frame:
    """Element being assembled from tokens."""

    __slots__ = ("name", "attributes", "items", "text_buffer", "self_closing", "token")

    def __init__(
        self,
        name: Optional[str],
        attributes: List[Tuple[str, str]],
        token: Optional[Token] = None,
        self_closing: bool = False,
    ) -> None:
        self.name = name
        self.attributes = attributes
        self.items: List[Union[str, "_Frame"]] = []
        self.text_buffer: List[str] = []
        self.self_closing = self_closing
        self.token = token

    def flush_text(self) -> None:
        if self.text_buffer:
            self.items.append("".join(self.text_buffer))
            self.text_buffer.clear()

    def has_child_frames(self) -> bool:
        return any(isinstance(item, _Frame) for item in self.items)

    def resolve_text(self) -> Optional[str]:
        """Text for this element according to the gap policy."""
        if self.self_closing:
            return None
        if not self.has_child_frames():
            return "".join(self.items).strip()
        text = None
        for item in self.items:
            if isinstance(item, str) and item.strip():
                text = item.strip()
        return text


class XMLTreeBuilder:
    """Builds an :class:`XMLNode` tree from a token stream."""

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Parser configuration (depth limit)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "xml_tree_builder")
        self.metrics = ParseMetrics()

    def build(
        self,
        tokens: Union[TokenizationResult, List[Token]],
        into: Optional[XMLNode] = None,
    ) -> XMLNode:
        """Build a tree from ``tokens``.

        Args:
            tokens: TokenizationResult or list of tokens
            into: Node to populate; a new root node is created when omitted

        Returns:
            The populated root node

        Raises:
            StructuralParseError: If the tokens do not form a single element
            DuplicateNameError: If an element repeats an attribute name
        """
        start_time = time.time()
        if isinstance(tokens, TokenizationResult):
            token_list = tokens.tokens
        else:
            token_list = tokens

        self.metrics = ParseMetrics(tokens_generated=len(token_list))
        self.logger.debug(
            "Starting tree building",
            extra={"token_count": len(token_list)}
        )

        try:
            root_frame = self._assemble(token_list)
            node = into if into is not None else XMLNode()
            self._materialize(root_frame, node)
        except StructuralParseError as e:
            self.logger.debug(
                "Tree building failed",
                extra={"error": str(e), "offset": e.offset}
            )
            raise

        self.metrics.processing_time_ms = (time.time() - start_time) * 1000
        self.logger.debug(
            "Tree building completed",
            extra={
                "element_count": self.metrics.elements_created,
                "attribute_count": self.metrics.attributes_created,
                "max_depth": self.metrics.max_depth,
                "processing_time_ms": self.metrics.processing_time_ms,
            }
        )
        return node

    def _assemble(self, tokens: List[Token]) -> _Frame:
        """Run the token stream through the element stack."""
        document = _Frame(None, [])
        stack: List[_Frame] = [document]

        for token in tokens:
            if token.type in (TokenType.TEXT, TokenType.CDATA):
                stack[-1].text_buffer.append(token.value)
            elif token.type == TokenType.OPEN_TAG:
                frame = self._open_frame(stack[-1], token, self_closing=False)
                stack.append(frame)
                if len(stack) - 1 > self.config.max_depth:
                    raise self._error(
                        f"Maximum nesting depth {self.config.max_depth} exceeded", token
                    )
            elif token.type == TokenType.EMPTY_TAG:
                self._open_frame(stack[-1], token, self_closing=True)
            elif token.type == TokenType.CLOSE_TAG:
                self._close_frame(stack, token)
            # Declarations, doctypes and comments carry no tree content

        while len(stack) > 1:
            self._flatten(stack.pop(), stack[-1])
        document.flush_text()

        return self._single_root(document)

    @staticmethod
    def _open_frame(parent: _Frame, token: Token, self_closing: bool) -> _Frame:
        parent.flush_text()
        frame = _Frame(token.value, token.attributes, token, self_closing)
        parent.items.append(frame)
        return frame

    def _close_frame(self, stack: List[_Frame], token: Token) -> None:
        index = len(stack) - 1
        while index > 0 and stack[index].name != token.value:
            index -= 1

        if index == 0:
            if len(stack) > 1:
                message = (
                    f"Mismatched closing tag </{token.value}>, "
                    f"expected </{stack[-1].name}>"
                )
            else:
                message = f"Unexpected closing tag </{token.value}>"
            raise self._error(message, token)

        while len(stack) - 1 > index:
            self._flatten(stack.pop(), stack[-1])
        stack.pop().flush_text()

    def _flatten(self, frame: _Frame, parent: _Frame) -> None:
        """Turn an unclosed element into an empty one, moving its content up."""
        position = frame.token.position
        self.logger.warning(
            f"Element <{frame.name}> is never closed; treating it as empty",
            extra={"line": position.line, "column": position.column}
        )
        frame.flush_text()
        parent.items.extend(frame.items)
        frame.items = []
        frame.self_closing = True

    def _single_root(self, document: _Frame) -> _Frame:
        roots = [item for item in document.items if isinstance(item, _Frame)]
        stray_text = [item for item in document.items if isinstance(item, str) and item.strip()]

        if stray_text:
            raise StructuralParseError(
                f"Text outside the root element: {stray_text[0].strip()[:30]!r}"
            )
        if not roots:
            raise StructuralParseError("No root element found")
        if len(roots) > 1:
            raise self._error(
                f"Multiple top-level elements: <{roots[0].name}> and <{roots[1].name}>",
                roots[1].token,
            )
        return roots[0]

    def _materialize(self, root_frame: _Frame, root: XMLNode) -> None:
        """Populate nodes from finished frames without recursion."""
        pending: List[Tuple[_Frame, XMLNode, int]] = [(root_frame, root, 0)]
        while pending:
            frame, node, depth = pending.pop()
            node.set_tag(frame.name)
            for name, value in frame.attributes:
                node.add_attribute(name, value)
            node.set_text(frame.resolve_text())

            self.metrics.elements_created += 1
            self.metrics.attributes_created += len(frame.attributes)
            self.metrics.max_depth = max(self.metrics.max_depth, depth)

            for item in frame.items:
                if isinstance(item, _Frame):
                    pending.append((item, node.add_child(), depth + 1))

    @staticmethod
    def _error(message: str, token: Optional[Token]) -> StructuralParseError:
        if token is None:
            return StructuralParseError(message)
        return StructuralParseError(
            message,
            offset=token.position.offset,
            line=token.position.line,
            column=token.position.column,
        )
