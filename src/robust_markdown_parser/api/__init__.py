"""Public parsing API for the robust Markdown parser.

Simple module-level functions for one-off parsing and the configurable
:class:`MarkdownParser` for repeated use.
"""

from .parser import (
    InputType,
    MarkdownParser,
    parse,
    parse_file,
    parse_string,
)

__all__ = [
    "InputType",
    "MarkdownParser",
    "parse",
    "parse_file",
    "parse_string",
]
