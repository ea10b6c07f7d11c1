"""Tests for document tree node types."""

import json
from dataclasses import FrozenInstanceError

import pytest

from robust_markdown_parser.tree import (
    Bold,
    EndOfLine,
    Header,
    Italic,
    LineSpan,
    Paragraph,
    Text,
    UnorderedList,
    Whitespace,
    iter_children,
    iter_nodes,
    node_from_dict,
    tree_to_json,
)

LINE_1 = LineSpan.single(1)


class TestLineSpan:
    """Test line span validation."""

    def test_single(self):
        """Test single-line span."""
        span = LineSpan.single(4)
        assert span.start == 4
        assert span.end == 4

    def test_start_must_be_positive(self):
        """Test lines are 1-based."""
        with pytest.raises(ValueError):
            LineSpan(0, 1)

    def test_end_before_start(self):
        """Test reversed spans are rejected."""
        with pytest.raises(ValueError):
            LineSpan(3, 2)

    def test_contains(self):
        """Test span containment."""
        outer = LineSpan(1, 5)
        assert outer.contains(LineSpan(2, 3))
        assert outer.contains(outer)
        assert not outer.contains(LineSpan(4, 6))


class TestNodeValidation:
    """Test node construction rules."""

    def test_text_cannot_be_empty(self):
        """Test empty text is rejected."""
        with pytest.raises(ValueError):
            Text("", LINE_1)

    @pytest.mark.parametrize("level", [0, 7])
    def test_header_level_range(self, level):
        """Test header level bounds."""
        with pytest.raises(ValueError):
            Header(level, (), LINE_1)

    def test_list_level_non_negative(self):
        """Test list levels start at zero."""
        with pytest.raises(ValueError):
            UnorderedList(-1, (), (), LINE_1)

    def test_sequences_are_frozen_to_tuples(self):
        """Test list arguments are stored as tuples."""
        paragraph = Paragraph([Text("a", LINE_1)], LINE_1)
        assert isinstance(paragraph.nodes, tuple)
        item = UnorderedList(0, [], [], LINE_1)
        assert item.nodes == ()
        assert item.children == ()

    def test_nodes_are_immutable(self):
        """Test nodes cannot be modified."""
        text = Text("a", LINE_1)
        with pytest.raises(FrozenInstanceError):
            text.value = "b"

    def test_structural_equality(self):
        """Test nodes compare by value."""
        assert Italic((Text("a", LINE_1),), LINE_1) == Italic([Text("a", LINE_1)], LINE_1)
        assert Italic((), LINE_1) != Bold((), LINE_1)


class TestTraversal:
    """Test tree walking helpers."""

    def test_iter_children_of_list(self):
        """Test list items yield inline content before nested items."""
        child = UnorderedList(1, (Text("b", LineSpan.single(2)),), (), LineSpan.single(2))
        root = UnorderedList(0, (Text("a", LINE_1),), (child,), LineSpan(1, 2))
        assert list(iter_children(root)) == [Text("a", LINE_1), child]

    def test_leaf_has_no_children(self):
        """Test leaf nodes have no children."""
        assert list(iter_children(Whitespace(LINE_1))) == []

    def test_iter_nodes_depth_first(self):
        """Test document-order traversal."""
        text = Text("t", LINE_1)
        paragraph = Paragraph((text,), LINE_1)
        header = Header(1, (paragraph,), LINE_1)
        eol = EndOfLine(LineSpan.single(2))
        assert list(iter_nodes([header, eol])) == [header, paragraph, text, eol]

    def test_iter_nodes_deep_chain(self):
        """Test walking a nesting chain deeper than the interpreter stack."""
        item = UnorderedList(5000, (), (), LINE_1)
        for level in range(4999, -1, -1):
            item = UnorderedList(level, (), (item,), LINE_1)

        levels = [node.level for node in iter_nodes([item])]

        assert levels == list(range(5001))


class TestSerialization:
    """Test dictionary and JSON forms."""

    def test_header_to_dict(self):
        """Test header dictionary layout."""
        header = Header(2, (Paragraph((Text("Hi", LINE_1),), LINE_1),), LINE_1)
        assert header.to_dict() == {
            "type": "Header",
            "level": 2,
            "nodes": [{
                "type": "Paragraph",
                "nodes": [{
                    "type": "Text",
                    "value": "Hi",
                    "position": {"start": 1, "end": 1},
                }],
                "position": {"start": 1, "end": 1},
            }],
            "position": {"start": 1, "end": 1},
        }

    def test_node_from_dict_rebuilds_list(self):
        """Test nested list reconstruction."""
        child = UnorderedList(1, (Text("b", LineSpan.single(2)),), (), LineSpan.single(2))
        root = UnorderedList(
            0, (Text("a", LINE_1), Whitespace(LINE_1)), (child,), LineSpan(1, 2)
        )
        assert node_from_dict(root.to_dict()) == root

    def test_node_from_dict_unknown_type(self):
        """Test unknown type tags are rejected."""
        with pytest.raises(ValueError):
            node_from_dict({"type": "Table", "position": {"start": 1, "end": 1}})

    def test_tree_to_json(self):
        """Test JSON serialization of root nodes."""
        data = json.loads(tree_to_json([EndOfLine(LINE_1), Paragraph((), LINE_1)]))
        assert [node["type"] for node in data] == ["EndOfLine", "Paragraph"]
