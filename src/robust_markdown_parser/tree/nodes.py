"""Document tree node types.

The node family is closed: block nodes (:class:`Header`, :class:`Paragraph`,
:class:`UnorderedList`) own inline nodes (:class:`Text`, :class:`Italic`,
:class:`Bold`, :class:`Whitespace`) and top-level :class:`EndOfLine` nodes mark
blank lines. Every node is frozen and carries its inclusive source
:class:`LineSpan`. Consumers dispatch with ``isinstance`` over :data:`Node`.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Sequence, Tuple, Union

from robust_markdown_parser.shared.config import MAX_HEADER_LEVEL


@dataclass(frozen=True)
class LineSpan:
    """Inclusive 1-based range of source lines."""

    start: int
    end: int

    def __post_init__(self) -> None:
        """Validate line bounds."""
        if self.start < 1:
            raise ValueError("Line number must be >= 1")
        if self.end < self.start:
            raise ValueError(
                f"Span end ({self.end}) must not precede start ({self.start})"
            )

    @classmethod
    def single(cls, line: int) -> "LineSpan":
        """Span covering exactly one line."""
        return cls(line, line)

    def contains(self, other: "LineSpan") -> bool:
        return self.start <= other.start and other.end <= self.end

    def to_dict(self) -> Dict[str, int]:
        return {"start": self.start, "end": self.end}


def _freeze(node: Any, name: str) -> None:
    # Child sequences are always stored as tuples
    object.__setattr__(node, name, tuple(getattr(node, name)))


@dataclass(frozen=True)
class Text:
    """Literal text, including markup degraded to text by recovery."""

    value: str
    position: LineSpan

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Text value cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "Text", "value": self.value, "position": self.position.to_dict()}


@dataclass(frozen=True)
class Whitespace:
    """A single space."""

    position: LineSpan

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "Whitespace", "position": self.position.to_dict()}


@dataclass(frozen=True)
class EndOfLine:
    """A line break that does not belong to any block."""

    position: LineSpan

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "EndOfLine", "position": self.position.to_dict()}


@dataclass(frozen=True)
class Italic:
    """Text enclosed in matching ``*`` markers."""

    nodes: Tuple["Node", ...]
    position: LineSpan

    def __post_init__(self) -> None:
        _freeze(self, "nodes")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "Italic",
            "nodes": [node.to_dict() for node in self.nodes],
            "position": self.position.to_dict(),
        }


@dataclass(frozen=True)
class Bold:
    """Text enclosed in matching ``**`` markers."""

    nodes: Tuple["Node", ...]
    position: LineSpan

    def __post_init__(self) -> None:
        _freeze(self, "nodes")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "Bold",
            "nodes": [node.to_dict() for node in self.nodes],
            "position": self.position.to_dict(),
        }


@dataclass(frozen=True)
class Paragraph:
    """The inline content of one source line."""

    nodes: Tuple["Node", ...]
    position: LineSpan

    def __post_init__(self) -> None:
        _freeze(self, "nodes")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "Paragraph",
            "nodes": [node.to_dict() for node in self.nodes],
            "position": self.position.to_dict(),
        }


@dataclass(frozen=True)
class Header:
    """An ATX header; ``nodes`` holds a single :class:`Paragraph` body."""

    level: int
    nodes: Tuple["Node", ...]
    position: LineSpan

    def __post_init__(self) -> None:
        if not 1 <= self.level <= MAX_HEADER_LEVEL:
            raise ValueError(
                f"Header level must be between 1 and {MAX_HEADER_LEVEL}, got {self.level}"
            )
        _freeze(self, "nodes")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "Header",
            "level": self.level,
            "nodes": [node.to_dict() for node in self.nodes],
            "position": self.position.to_dict(),
        }


@dataclass(frozen=True)
class UnorderedList:
    """One list item with its inline content and nested items.

    ``level`` is the number of leading spaces before the item's marker
    (0 for a root item); nested items in ``children`` always have a
    strictly greater level.
    """

    level: int
    nodes: Tuple["Node", ...]
    children: Tuple["UnorderedList", ...]
    position: LineSpan

    def __post_init__(self) -> None:
        if self.level < 0:
            raise ValueError("List level must be >= 0")
        _freeze(self, "nodes")
        _freeze(self, "children")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "UnorderedList",
            "level": self.level,
            "nodes": [node.to_dict() for node in self.nodes],
            "children": [child.to_dict() for child in self.children],
            "position": self.position.to_dict(),
        }


Node = Union[Header, Paragraph, UnorderedList, Text, Italic, Bold, Whitespace, EndOfLine]

BLOCK_NODE_TYPES = (Header, Paragraph, UnorderedList)
INLINE_NODE_TYPES = (Text, Italic, Bold, Whitespace)

NODE_TYPES: Dict[str, type] = {
    cls.__name__: cls
    for cls in (Header, Paragraph, UnorderedList, Text, Italic, Bold, Whitespace, EndOfLine)
}


def iter_children(node: Node) -> Iterator[Node]:
    """Yield the direct children of a node (inline content, then nested lists)."""
    if isinstance(node, (Header, Paragraph, Italic, Bold)):
        yield from node.nodes
    elif isinstance(node, UnorderedList):
        yield from node.nodes
        yield from node.children


def iter_nodes(nodes: Sequence[Node]) -> Iterator[Node]:
    """Walk a tree depth-first in document order."""
    pending = list(reversed(nodes))
    while pending:
        node = pending.pop()
        yield node
        pending.extend(reversed(tuple(iter_children(node))))


def node_from_dict(data: Dict[str, Any]) -> Node:
    """Rebuild a node from its :meth:`to_dict` representation.

    Raises:
        ValueError: If the type tag is unknown or a field is invalid
        KeyError: If a required field is missing
    """
    type_name = data.get("type")
    if type_name not in NODE_TYPES:
        raise ValueError(f"Unknown node type: {type_name!r}")

    position = LineSpan(data["position"]["start"], data["position"]["end"])
    if type_name == "Text":
        return Text(data["value"], position)
    if type_name == "Whitespace":
        return Whitespace(position)
    if type_name == "EndOfLine":
        return EndOfLine(position)

    nodes = tuple(node_from_dict(child) for child in data.get("nodes", []))
    if type_name == "Header":
        return Header(data["level"], nodes, position)
    if type_name == "UnorderedList":
        children = tuple(node_from_dict(child) for child in data.get("children", []))
        return UnorderedList(data["level"], nodes, children, position)  # type: ignore[arg-type]
    if type_name == "Paragraph":
        return Paragraph(nodes, position)
    if type_name == "Italic":
        return Italic(nodes, position)
    return Bold(nodes, position)


def tree_to_json(nodes: Sequence[Node], indent: int = 2) -> str:
    """Serialize root-level nodes to a JSON array."""
    return json.dumps([node.to_dict() for node in nodes], indent=indent, ensure_ascii=False)
