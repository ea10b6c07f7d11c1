"""Robust Markdown Parser.

A never-fail parser for a small Markdown subset (ATX headers, paragraphs,
italic and bold emphasis, indented unordered lists). Malformed markup
degrades to literal text instead of raising.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_string(), parse_file()
- Level 2: Configured parser - MarkdownParser class
- Level 3: Pipeline stages - tokenize() and build()
"""

__version__ = "0.1.0"
__author__ = "Robust Markdown Parser Team"

from .api import MarkdownParser, parse, parse_file, parse_string
from .shared.config import ParserConfig
from .tokenization import Token, TokenType, tokenize
from .tree import (
    Bold,
    EndOfLine,
    Header,
    Italic,
    LineSpan,
    Node,
    Paragraph,
    ParseResult,
    Text,
    UnorderedList,
    Whitespace,
    build,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_string",
    "parse_file",

    # Level 2: Configured parser
    "MarkdownParser",
    "ParserConfig",

    # Level 3: Pipeline stages
    "tokenize",
    "build",
    "Token",
    "TokenType",

    # Result objects and document tree
    "ParseResult",
    "Node",
    "LineSpan",
    "Header",
    "Paragraph",
    "UnorderedList",
    "Text",
    "Italic",
    "Bold",
    "Whitespace",
    "EndOfLine",
]
