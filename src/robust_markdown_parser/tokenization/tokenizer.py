"""Core Markdown tokenization implementation.

This module implements a never-fail tokenizer that drives a character cursor
over the input and classifies each character into a flat, line-annotated
token sequence for the tree builder.

Known non-round-trip: concatenating token values does not reproduce the input.
Tabs, carriage returns and other non-space whitespace are dropped, and the
whitespace character following a ``-`` list marker is absorbed into the marker.
"""

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional

from robust_markdown_parser.character import CharCursor

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Markdown token types produced by the tokenizer."""

    HEADER = auto()                 # #
    TEXT = auto()                   # free-text run
    WHITESPACE = auto()             # single ' '
    EOL = auto()                    # \n
    UNORDERED_LIST = auto()         # "- "
    BLOCK_QUOTE = auto()            # >
    INLINE_CODE = auto()            # `
    BOLD = auto()                   # **
    ITALIC = auto()                 # *
    CURLY_BRACKET_OPEN = auto()     # {
    CURLY_BRACKET_CLOSE = auto()    # }
    COLON = auto()                  # :
    SEMICOLON = auto()              # ;
    SQUARE_BRACKET_OPEN = auto()    # [
    SQUARE_BRACKET_CLOSE = auto()   # ]
    PARENTHESIS_OPEN = auto()       # (
    PARENTHESIS_CLOSE = auto()      # )
    EXCLAMATION = auto()            # !

    # Reserved for future syntax, never emitted yet
    CODE_BLOCK = auto()             # ```
    ANNOTATION = auto()             # ^
    HORIZONTAL_RULE = auto()        # ---
    ALERT_START = auto()            # :::<type>
    ALERT_END = auto()              # :::
    UNKNOWN = auto()


# Single-character markers emitted as-is
PUNCTUATION_TOKENS: Dict[str, TokenType] = {
    "#": TokenType.HEADER,
    ">": TokenType.BLOCK_QUOTE,
    "`": TokenType.INLINE_CODE,
    "!": TokenType.EXCLAMATION,
    "{": TokenType.CURLY_BRACKET_OPEN,
    "}": TokenType.CURLY_BRACKET_CLOSE,
    "[": TokenType.SQUARE_BRACKET_OPEN,
    "]": TokenType.SQUARE_BRACKET_CLOSE,
    "(": TokenType.PARENTHESIS_OPEN,
    ")": TokenType.PARENTHESIS_CLOSE,
    ";": TokenType.SEMICOLON,
    ":": TokenType.COLON,
}

LIST_MARKER = "- "
BOLD_MARKER = "**"
ITALIC_MARKER = "*"


@dataclass(frozen=True)
class Token:
    """A single classified lexical unit and the source line it starts on."""

    type: TokenType
    value: str
    line: int

    def __post_init__(self) -> None:
        """Validate token values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")

    def to_dict(self) -> Dict[str, object]:
        return {"type": self.type.name, "value": self.value, "line": self.line}


@dataclass
class TokenizationResult:
    """Result of tokenization with timing and distribution metadata."""

    tokens: List[Token]
    processing_time: float = 0.0
    character_count: int = 0
    diagnostics: List[str] = field(default_factory=list)

    @property
    def token_count(self) -> int:
        """Get the total number of tokens."""
        return len(self.tokens)

    @property
    def line_count(self) -> int:
        """Number of source lines covered by the tokens."""
        if not self.tokens:
            return 0
        return self.tokens[-1].line

    @property
    def token_type_distribution(self) -> Dict[str, int]:
        """Count tokens per type name."""
        return dict(Counter(token.type.name for token in self.tokens))


def tokenize(text: str) -> List[Token]:
    """Convert Markdown text into a flat sequence of tokens.

    Pure and total: every input produces a (possibly empty) token list.

    Args:
        text: Decoded document source

    Returns:
        Tokens in source order, each stamped with its 1-based line
    """
    cursor = CharCursor(text)
    tokens: List[Token] = []
    line = 1

    while True:
        char = cursor.advance()
        if char is None:
            break

        if char == "\n":
            tokens.append(Token(TokenType.EOL, char, line))
            line += 1
        elif char == " ":
            tokens.append(Token(TokenType.WHITESPACE, char, line))
        elif char in PUNCTUATION_TOKENS:
            tokens.append(Token(PUNCTUATION_TOKENS[char], char, line))
        elif char == "-":
            following = cursor.peek()
            if following is not None and following.isspace():
                tokens.append(Token(TokenType.UNORDERED_LIST, LIST_MARKER, line))
                cursor.advance()
            else:
                _append_run(tokens, cursor, line)
        elif char == "*":
            _append_emphasis_marker(tokens, cursor, line)
        else:
            _append_run(tokens, cursor, line)

    return tokens


def _append_run(tokens: List[Token], cursor: CharCursor, line: int) -> None:
    run = cursor.consume_run()
    if run:
        tokens.append(Token(TokenType.TEXT, run, line))


def _append_emphasis_marker(tokens: List[Token], cursor: CharCursor, line: int) -> None:
    # Collapse pairwise: a second '*' upgrades the Italic just emitted to Bold.
    # A third starts a new Italic, so '***' yields Bold then Italic.
    if (
        cursor.look_back(2) == ITALIC_MARKER
        and tokens
        and tokens[-1].type is TokenType.ITALIC
    ):
        tokens[-1] = Token(TokenType.BOLD, BOLD_MARKER, line)
    else:
        tokens.append(Token(TokenType.ITALIC, ITALIC_MARKER, line))


class MarkdownTokenizer:
    """Tokenizer front end with timing, statistics and structured logging."""

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize the Markdown tokenizer.

        Args:
            correlation_id: Optional correlation ID for tracking requests
        """
        self.correlation_id = correlation_id

    def tokenize(self, text: str) -> TokenizationResult:
        """Tokenize a document.

        Args:
            text: Decoded document source

        Returns:
            TokenizationResult with tokens and metadata
        """
        start_time = time.time()

        logger.debug(
            "Starting tokenization",
            extra={
                "component": "markdown_tokenizer",
                "correlation_id": self.correlation_id,
                "char_count": len(text),
            }
        )

        tokens = tokenize(text)
        result = TokenizationResult(
            tokens=tokens,
            processing_time=time.time() - start_time,
            character_count=len(text),
        )

        logger.debug(
            "Tokenization completed",
            extra={
                "component": "markdown_tokenizer",
                "correlation_id": self.correlation_id,
                "token_count": result.token_count,
                "line_count": result.line_count,
                "processing_time": result.processing_time,
            }
        )

        return result
