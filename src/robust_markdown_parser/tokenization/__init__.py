"""Tokenization engine for robust Markdown parsing.

This module converts decoded text into a flat, line-annotated token sequence
with a single never-fail pass over the characters.

Key Components:
    tokenize: Pure function turning text into a list of tokens
    MarkdownTokenizer: Tokenizer front end with timing and logging
    Token: A classified lexical unit with its source line
    TokenType: Enumeration of all token kinds, including reserved ones
"""

from .tokenizer import (
    BOLD_MARKER,
    ITALIC_MARKER,
    LIST_MARKER,
    PUNCTUATION_TOKENS,
    MarkdownTokenizer,
    Token,
    TokenizationResult,
    TokenType,
    tokenize,
)

__all__ = [
    "BOLD_MARKER",
    "ITALIC_MARKER",
    "LIST_MARKER",
    "PUNCTUATION_TOKENS",
    "MarkdownTokenizer",
    "Token",
    "TokenizationResult",
    "TokenType",
    "tokenize",
]
