"""Input normalization for the character layer.

Turns the different input shapes accepted by the public API (text, bytes,
file-like objects) into a single decoded string plus diagnostics, without
ever failing on undecodable bytes.
"""

import codecs
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, List, TextIO, Union

# Type definitions for input data
InputType = Union[bytes, bytearray, str, BinaryIO, TextIO]

DEFAULT_ENCODING = "utf-8"
REPLACEMENT_CHARACTER = "\ufffd"


@dataclass
class CharacterStreamResult:
    """Decoded character stream with decoding metadata.

    Attributes:
        text: Decoded text handed to the tokenizer
        encoding: Encoding used to decode byte input
        diagnostics: Messages about lossy decoding
        metadata: Input type and size information
    """
    text: str
    encoding: str = DEFAULT_ENCODING
    diagnostics: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def line_count(self) -> int:
        """Number of source lines in the decoded text."""
        if not self.text:
            return 0
        return self.text.count("\n") + (0 if self.text.endswith("\n") else 1)


def decode_input(data: InputType, encoding: str = DEFAULT_ENCODING) -> CharacterStreamResult:
    """Normalize raw input into decoded text.

    Args:
        data: Text, bytes, or a text/binary file-like object
        encoding: Encoding used for byte input

    Returns:
        CharacterStreamResult with the decoded text

    Raises:
        TypeError: If ``data`` is none of the supported input types
        LookupError: If ``encoding`` is not a known codec
    """
    if isinstance(data, str):
        return CharacterStreamResult(
            text=data,
            metadata={"input_type": "str", "input_size": len(data)},
        )
    if isinstance(data, (bytes, bytearray)):
        return _decode_bytes(bytes(data), encoding)
    if hasattr(data, "read"):
        content = data.read()
        if isinstance(content, (bytes, bytearray)):
            return _decode_bytes(bytes(content), encoding)
        if isinstance(content, str):
            return CharacterStreamResult(
                text=content,
                metadata={"input_type": "file", "input_size": len(content)},
            )
        raise TypeError(f"File-like object returned unsupported data: {type(content)}")
    raise TypeError(f"Unsupported input type: {type(data)}")


def _decode_bytes(data: bytes, encoding: str) -> CharacterStreamResult:
    diagnostics = []
    codec = codecs.lookup(encoding)
    # A UTF-8 byte order mark is not document content
    if codec.name == "utf-8" and data.startswith(codecs.BOM_UTF8):
        data = data[len(codecs.BOM_UTF8):]
        diagnostics.append("Stripped UTF-8 byte order mark")

    text = data.decode(codec.name, errors="replace")
    replaced = text.count(REPLACEMENT_CHARACTER) - data.decode(
        codec.name, errors="ignore"
    ).count(REPLACEMENT_CHARACTER)
    if replaced > 0:
        diagnostics.append(
            f"Replaced {replaced} undecodable byte sequence(s) with U+FFFD"
        )

    return CharacterStreamResult(
        text=text,
        encoding=codec.name,
        diagnostics=diagnostics,
        metadata={"input_type": "bytes", "input_size": len(data)},
    )
