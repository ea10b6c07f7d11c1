"""Character processing layer for the robust Markdown parser.

This module provides input decoding and the character cursor the tokenizer
drives, following the never-fail philosophy.
"""

from .cursor import CharCursor
from .stream import (
    CharacterStreamResult,
    InputType,
    decode_input,
)

__all__ = [
    "CharCursor",
    "CharacterStreamResult",
    "InputType",
    "decode_input",
]
