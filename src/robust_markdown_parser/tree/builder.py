"""Core tree building implementation for robust Markdown parsing.

This module implements a recursive-descent tree builder that converts the
tokenizer's flat token sequence into a nested document tree. Ambiguous or
malformed markup never raises: header markers without a valid level or a
following space, and emphasis markers without a partner on the same line,
degrade to literal text and are recorded as :class:`MarkupRecovery` entries.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from robust_markdown_parser.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ParserInvariantError,
    PerformanceMetrics,
    TreeConfig,
    get_logger,
)
from robust_markdown_parser.tokenization import (
    BOLD_MARKER,
    ITALIC_MARKER,
    Token,
    TokenizationResult,
    TokenType,
)

from .cursor import TokenCursor
from .nodes import (
    Bold,
    EndOfLine,
    Header,
    Italic,
    LineSpan,
    Node,
    Paragraph,
    Text,
    UnorderedList,
    Whitespace,
    iter_nodes,
)

HEADER_MARKER = "#"


@dataclass(frozen=True)
class MarkupRecovery:
    """Record of markup that was degraded to literal text."""

    recovery_type: str
    description: str
    line: int
    literal: str

    def __post_init__(self) -> None:
        """Validate recovery information."""
        if not self.recovery_type:
            raise ValueError("Recovery type cannot be empty")
        if not self.description:
            raise ValueError("Recovery description cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recovery_type": self.recovery_type,
            "description": self.description,
            "line": self.line,
            "literal": self.literal,
        }


@dataclass
class ParseResult:
    """Result object for tree building operations.

    Contains the root-level nodes, recovery records, diagnostics and
    performance information following the never-fail philosophy.
    """

    nodes: List[Node] = field(default_factory=list)
    success: bool = True

    # Metadata and diagnostics
    recoveries: List[MarkupRecovery] = field(default_factory=list)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)

    # Source information
    tokens: Optional[List[Token]] = None
    correlation_id: Optional[str] = None

    @property
    def node_count(self) -> int:
        """Total number of nodes in the tree, nested ones included."""
        return sum(1 for _ in iter_nodes(self.nodes))

    @property
    def recovery_count(self) -> int:
        return len(self.recoveries)

    @property
    def has_recoveries(self) -> bool:
        return bool(self.recoveries)

    @property
    def processing_time_ms(self) -> float:
        return self.performance.processing_time_ms

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        line: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            line=line,
            details=details,
            correlation_id=self.correlation_id
        ))

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    @property
    def summary(self) -> Dict[str, Any]:
        """Compact overview suitable for logs and CLI output."""
        block_counts: Dict[str, int] = {}
        for node in self.nodes:
            name = type(node).__name__
            block_counts[name] = block_counts.get(name, 0) + 1
        return {
            "success": self.success,
            "root_node_count": len(self.nodes),
            "node_count": self.node_count,
            "block_counts": block_counts,
            "recovery_count": self.recovery_count,
            "diagnostic_count": len(self.diagnostics),
            "processing_time_ms": self.processing_time_ms,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the tree and its metadata."""
        result: Dict[str, Any] = {
            "success": self.success,
            "nodes": [node.to_dict() for node in self.nodes],
            "recoveries": [recovery.to_dict() for recovery in self.recoveries],
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
            "performance": self.performance.to_dict(),
        }
        if self.tokens is not None:
            result["tokens"] = [token.to_dict() for token in self.tokens]
        if self.correlation_id is not None:
            result["correlation_id"] = self.correlation_id
        return result

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


@dataclass
class _ListFrame:
    """A list item still collecting content while its nested items are parsed."""

    level: int
    start: int
    nodes: List[Node] = field(default_factory=list)
    children: List[UnorderedList] = field(default_factory=list)
    end: int = 0

    def __post_init__(self) -> None:
        self.end = self.start

    def add(self, node: Node) -> None:
        self.nodes.append(node)
        self.end = max(self.end, node.position.end)

    def adopt(self, child: UnorderedList) -> None:
        self.children.append(child)
        self.end = max(self.end, child.position.end)

    def finish(self) -> UnorderedList:
        return UnorderedList(
            self.level, tuple(self.nodes), tuple(self.children), LineSpan(self.start, self.end)
        )


class MarkdownTreeBuilder:
    """Recursive-descent builder turning a token sequence into a document tree."""

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Tree building configuration
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "markdown_tree_builder")

        self._cursor = TokenCursor([])
        self._recoveries: List[MarkupRecovery] = []

    def build(self, tokens: Union[TokenizationResult, Sequence[Token]]) -> ParseResult:
        """Build the document tree from a token sequence.

        The tokens are copied first; header disambiguation rewrites the copy,
        never the caller's sequence.

        Args:
            tokens: Either a TokenizationResult or a sequence of tokens

        Returns:
            ParseResult containing root-level nodes and metadata
        """
        start_time = time.time()
        if isinstance(tokens, TokenizationResult):
            token_list = list(tokens.tokens)
            characters = tokens.character_count
        else:
            token_list = list(tokens)
            characters = 0

        self.logger.debug(
            "Starting tree building",
            extra={"token_count": len(token_list)}
        )

        result = ParseResult(correlation_id=self.correlation_id)
        if not token_list:
            result.add_diagnostic(
                DiagnosticSeverity.INFO,
                "No tokens provided - empty document created",
                "tree_builder",
                details={"input_type": "empty"}
            )

        self._cursor = TokenCursor(token_list)
        self._recoveries = []
        result.nodes = self._parse_document()
        result.recoveries = list(self._recoveries)

        for recovery in result.recoveries:
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                recovery.description,
                "tree_builder",
                line=recovery.line,
                details={"recovery_type": recovery.recovery_type}
            )

        result.performance.processing_time_ms = (time.time() - start_time) * 1000
        result.performance.characters_processed = characters
        result.performance.tokens_generated = len(token_list)
        result.performance.nodes_created = result.node_count
        result.performance.recoveries_applied = result.recovery_count

        self.logger.info(
            "Tree building completed",
            extra={
                "root_node_count": len(result.nodes),
                "recovery_count": result.recovery_count,
                "processing_time_ms": result.performance.processing_time_ms
            }
        )

        return result

    def _record_recovery(
        self, recovery_type: str, description: str, line: int, literal: str
    ) -> None:
        self.logger.debug(
            "Degraded markup to literal text",
            extra={"recovery_type": recovery_type, "line": line, "literal": literal}
        )
        if self.config.record_recoveries:
            self._recoveries.append(
                MarkupRecovery(recovery_type, description, line, literal)
            )

    def _parse_document(self) -> List[Node]:
        nodes: List[Node] = []
        while True:
            token = self._cursor.current()
            if token is None:
                break

            if token.type is TokenType.HEADER:
                nodes.append(self._parse_header())
            elif token.type is TokenType.UNORDERED_LIST:
                nodes.append(self._parse_unordered_list(0))
            elif token.type is TokenType.EOL:
                nodes.append(EndOfLine(LineSpan.single(token.line)))
                self._cursor.take()
            else:
                nodes.append(self._parse_paragraph())
        return nodes

    def _parse_header(self) -> Node:
        """Parse a header, or degrade its marker run to text.

        A run of ``#`` is a header only when it is at most
        ``max_header_level`` long and directly followed by a space.
        """
        cursor = self._cursor
        level = 0
        marker_line = 0
        while True:
            token = cursor.current()
            if token is None or token.type is not TokenType.HEADER:
                break
            level += 1
            marker_line = token.line
            cursor.take()

        following = cursor.current()
        literal = HEADER_MARKER * level
        max_level = self.config.max_header_level

        if following is not None and following.type is TokenType.WHITESPACE:
            if level <= max_level:
                cursor.take()
                body = self._parse_paragraph()
                return Header(level, (body,), LineSpan.single(following.line))
            self._record_recovery(
                "header_level_exceeded",
                f"Header marker run of {level} exceeds level {max_level}",
                marker_line,
                literal,
            )
        elif following is not None and following.type is TokenType.TEXT:
            # '#Header' stays one literal word
            fused = literal + following.value
            cursor.overwrite(Token(TokenType.TEXT, fused, marker_line))
            self._record_recovery(
                "header_fused_text",
                f"Header marker run is not followed by a space: {fused!r}",
                marker_line,
                fused,
            )
            return self._parse_paragraph()
        else:
            self._record_recovery(
                "header_missing_space",
                "Header marker run is not followed by a space",
                marker_line,
                literal,
            )

        cursor.retreat()
        cursor.overwrite(Token(TokenType.TEXT, literal, marker_line))
        return self._parse_paragraph()

    def _parse_unordered_list(self, level: int) -> UnorderedList:
        """Parse one list item and the items nested under it.

        A following line belongs to an open item only when it starts with more
        spaces than that item's level before its own list marker. Equal or
        shallower indentation closes the item, leaving the tokens for the
        enclosing one. Open items are kept on an explicit stack, so nesting
        depth is bounded only by the input.
        """
        cursor = self._cursor
        first = cursor.current()
        if first is None or first.type is not TokenType.UNORDERED_LIST:
            raise ParserInvariantError("List item must start at a list marker")

        stack = [_ListFrame(level, first.line)]
        while True:
            frame = stack[-1]
            token = cursor.current()
            depth: Optional[int] = None
            close = False

            if token is None:
                close = True
            elif token.type is TokenType.UNORDERED_LIST:
                # A marker after content opens a sibling or an ancestor's sibling
                if frame.nodes or frame.children:
                    close = True
                else:
                    cursor.take()
            elif token.type is TokenType.WHITESPACE:
                depth = cursor.peek_list_depth()
                if depth is None:
                    frame.add(Whitespace(LineSpan.single(token.line)))
                    cursor.take()
                elif depth <= frame.level:
                    close = True
            elif token.type is TokenType.EOL:
                cursor.take()
                following = cursor.current()
                if following is not None and following.type is TokenType.WHITESPACE:
                    depth = cursor.peek_list_depth()
                if depth is None or depth <= frame.level:
                    depth = None
                    close = True
            else:
                frame.add(Text(token.value, LineSpan.single(token.line)))
                cursor.take()

            if close:
                item = frame.finish()
                stack.pop()
                if not stack:
                    return item
                stack[-1].adopt(item)
            elif depth is not None:
                for _ in range(depth):
                    cursor.take()
                marker = cursor.current()
                if marker is None or marker.type is not TokenType.UNORDERED_LIST:
                    raise ParserInvariantError("Nested list item must start at a list marker")
                stack.append(_ListFrame(depth, marker.line))

    def _parse_paragraph(self) -> Paragraph:
        nodes = self._parse_line()
        if nodes:
            return Paragraph(
                tuple(nodes),
                LineSpan(nodes[0].position.start, nodes[-1].position.end),
            )

        # Empty body (e.g. '# ' at end of line): use the line just consumed
        previous = self._cursor.previous()
        if previous is None:
            raise ParserInvariantError("Empty paragraph with no preceding token")
        return Paragraph((), LineSpan.single(previous.line))

    def _parse_line(self) -> List[Node]:
        """Convert tokens up to and including the end of line into inline nodes."""
        nodes: List[Node] = []
        while True:
            token = self._cursor.take()
            if token is None or token.type is TokenType.EOL:
                break
            if token.type in (TokenType.ITALIC, TokenType.BOLD):
                nodes.extend(self._parse_emphasis(token))
            else:
                nodes.append(self._inline_node(token))
        return nodes

    def _parse_emphasis(self, opening: Token) -> List[Node]:
        """Parse emphasis content after an already consumed opening marker.

        Without a closing marker of the same kind before the end of the line
        the opening marker becomes literal text ahead of the parsed content.
        """
        cursor = self._cursor
        is_bold = opening.type is TokenType.BOLD
        nodes: List[Node] = []
        closed = False
        end = opening.line

        while True:
            token = cursor.current()
            if token is None or token.type is TokenType.EOL:
                break
            cursor.take()
            end = max(end, token.line)
            if token.type is opening.type:
                closed = True
                break
            nodes.append(self._inline_node(token))

        span = LineSpan(opening.line, end)
        if closed:
            return [Bold(tuple(nodes), span) if is_bold else Italic(tuple(nodes), span)]

        marker = BOLD_MARKER if is_bold else ITALIC_MARKER
        self._record_recovery(
            "unclosed_bold" if is_bold else "unclosed_italic",
            f"Emphasis marker {marker!r} is never closed on its line",
            opening.line,
            marker,
        )
        return [Text(marker, LineSpan.single(opening.line)), *nodes]

    @staticmethod
    def _inline_node(token: Token) -> Node:
        if token.type is TokenType.WHITESPACE:
            return Whitespace(LineSpan.single(token.line))
        return Text(token.value, LineSpan.single(token.line))


def build(tokens: Sequence[Token]) -> List[Node]:
    """Build root-level nodes from tokens without recording recoveries.

    Args:
        tokens: Tokens produced by :func:`~robust_markdown_parser.tokenization.tokenize`

    Returns:
        Ordered root-level nodes
    """
    builder = MarkdownTreeBuilder(TreeConfig(record_recoveries=False))
    return builder.build(tokens).nodes
