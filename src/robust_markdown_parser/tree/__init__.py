"""Tree building engine for robust Markdown parsing.

This module provides the recursive-descent builder that turns token sequences
into an immutable, position-annotated document tree.

Key Components:
    MarkdownTreeBuilder: Main tree construction class
    ParseResult: Result object with nodes, recoveries and diagnostics
    TokenCursor: Cursor with lookahead, backtracking and token replacement
    Node: Union of all document node types
"""

from .builder import (
    MarkdownTreeBuilder,
    MarkupRecovery,
    ParseResult,
    build,
)
from .cursor import TokenCursor
from .nodes import (
    BLOCK_NODE_TYPES,
    INLINE_NODE_TYPES,
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
    iter_children,
    iter_nodes,
    node_from_dict,
    tree_to_json,
)

__all__ = [
    "MarkdownTreeBuilder",
    "MarkupRecovery",
    "ParseResult",
    "build",
    "TokenCursor",
    "BLOCK_NODE_TYPES",
    "INLINE_NODE_TYPES",
    "Bold",
    "EndOfLine",
    "Header",
    "Italic",
    "LineSpan",
    "Node",
    "Paragraph",
    "Text",
    "UnorderedList",
    "Whitespace",
    "iter_children",
    "iter_nodes",
    "node_from_dict",
    "tree_to_json",
]
