"""Tests for the core parser API with progressive disclosure.

Tests the module-level parsing functions and the MarkdownParser class,
ensuring malformed markup never fails a parse and unreadable input is
reported through the result.
"""

import codecs
import io
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from robust_markdown_parser.api.parser import (
    MarkdownParser,
    parse,
    parse_file,
    parse_string,
)
from robust_markdown_parser.shared import DiagnosticSeverity, ParserConfig
from robust_markdown_parser.tree import Header, Paragraph, ParseResult, Text


class TestSimpleParsingFunctions:
    """Test Level 1: Simple module-level parsing functions."""

    def test_parse_string_basic(self):
        """Test basic string parsing functionality."""
        result = parse_string("# Title\n\nBody *text*")

        assert isinstance(result, ParseResult)
        assert result.success is True
        assert isinstance(result.nodes[0], Header)
        assert isinstance(result.nodes[-1], Paragraph)
        assert result.tokens is None

    def test_parse_string_malformed(self):
        """Test malformed markup is recovered, not rejected."""
        result = parse_string("####### deep **open")

        assert result.success is True
        assert result.recovery_count == 2
        assert not result.has_errors()

    def test_parse_string_rejects_bytes(self):
        """Test parse_string is for text only."""
        with pytest.raises(TypeError):
            parse_string(b"# Title")

    def test_parse_string_empty(self):
        """Test empty input is an empty document."""
        result = parse_string("")

        assert result.success is True
        assert result.nodes == []
        assert len(result.diagnostics) == 1

    def test_parse_bytes(self):
        """Test bytes are decoded as UTF-8."""
        result = parse("café".encode("utf-8"))
        assert result.nodes[0].nodes == (Text("café", result.nodes[0].position),)

    def test_parse_bytes_with_bom(self):
        """Test a byte order mark is stripped and reported."""
        result = parse(codecs.BOM_UTF8 + b"# Title")

        assert isinstance(result.nodes[0], Header)
        warnings = result.get_diagnostics_by_severity(DiagnosticSeverity.WARNING)
        assert [w.component for w in warnings] == ["character_stream"]
        assert "byte order mark" in warnings[0].message

    def test_parse_invalid_bytes(self):
        """Test undecodable bytes never fail a parse."""
        result = parse(b"bad \xff byte")
        assert result.success is True
        assert any("U+FFFD" in d.message for d in result.diagnostics)

    def test_parse_file_like(self):
        """Test parsing from text and binary streams."""
        assert isinstance(parse(io.StringIO("# A")).nodes[0], Header)
        assert isinstance(parse(io.BytesIO(b"# A")).nodes[0], Header)

    def test_parse_bytearray(self):
        """Test bytearray input is decoded like bytes."""
        result = parse(bytearray("# café".encode("utf-8")))

        assert result.success is True
        assert result.nodes[0].nodes[0].nodes == (Text("café", result.nodes[0].position),)

    def test_parse_binary_stream_decoding_diagnostics(self):
        """Test binary streams are decoded with byte order mark handling."""
        result = parse(io.BytesIO(codecs.BOM_UTF8 + b"bad \xff"))

        assert result.success is True
        messages = [d.message for d in result.diagnostics]
        assert "Stripped UTF-8 byte order mark" in messages
        assert any("U+FFFD" in message for message in messages)

    def test_parse_stream_with_unsupported_content(self):
        """Test a stream returning neither text nor bytes raises TypeError."""
        stream = MagicMock()
        stream.read.return_value = 42
        with pytest.raises(TypeError):
            parse(stream)

    def test_parse_deeply_nested_list(self):
        """Test a very deep indentation staircase parses without failing."""
        text = "".join(" " * i + "- x\n" for i in range(600))

        result = parse(text)

        assert result.success is True
        assert len(result.nodes) == 1
        assert result.node_count == 1200

    def test_parse_unreadable_stream(self):
        """Test I/O errors become a failed result."""
        stream = MagicMock()
        stream.read.side_effect = OSError("boom")

        result = parse(stream)

        assert result.success is False
        assert result.has_errors()
        critical = result.get_diagnostics_by_severity(DiagnosticSeverity.CRITICAL)
        assert critical[0].message == "Unable to read input: boom"

    def test_parse_unknown_type(self):
        """Test unsupported input types raise TypeError."""
        with pytest.raises(TypeError):
            parse(12345)

    def test_parse_path(self, tmp_path):
        """Test Path input reads the file."""
        path = tmp_path / "doc.md"
        path.write_text("- item\n", encoding="utf-8")

        result = parse(path)

        assert result.success is True
        assert result.nodes[0].level == 0

    def test_correlation_id(self):
        """Test correlation ID reaches the result."""
        result = parse_string("*open", correlation_id="req-42")
        assert result.correlation_id == "req-42"
        assert all(d.correlation_id == "req-42" for d in result.diagnostics)

    def test_metrics_collected(self):
        """Test default parse records performance metrics."""
        result = parse_string("text here")
        assert result.performance.characters_processed == 9
        assert result.performance.tokens_generated == 3
        assert result.performance.processing_time_ms >= 0.0


class TestParseFile:
    """Test file parsing."""

    def test_parse_file(self, tmp_path):
        """Test parsing an existing file."""
        path = tmp_path / "doc.md"
        path.write_text("# Title\n", encoding="utf-8")

        result = parse_file(path)

        assert result.success is True
        assert isinstance(result.nodes[0], Header)
        infos = result.get_diagnostics_by_severity(DiagnosticSeverity.INFO)
        assert infos[-1].message == "File parsed with encoding: utf-8"
        assert infos[-1].details == {"file_path": str(path)}

    def test_parse_file_string_path(self, tmp_path):
        """Test string paths are accepted."""
        path = tmp_path / "doc.md"
        path.write_text("text", encoding="utf-8")
        assert parse_file(str(path)).success is True

    def test_parse_file_encoding_override(self, tmp_path):
        """Test decoding with an explicit encoding."""
        path = tmp_path / "legacy.md"
        path.write_bytes(b"caf\xe9")

        result = parse_file(path, encoding="latin-1")

        assert result.nodes[0].nodes[0].value == "café"

    def test_parse_file_missing(self, tmp_path):
        """Test missing files produce a failed result."""
        result = parse_file(tmp_path / "missing.md")

        assert result.success is False
        assert result.nodes == []
        assert "File not found" in result.diagnostics[0].message
        assert result.diagnostics[0].severity is DiagnosticSeverity.CRITICAL

    def test_parse_file_directory(self, tmp_path):
        """Test directories are rejected."""
        result = parse_file(tmp_path)
        assert result.success is False
        assert "not a file" in result.diagnostics[0].message

    def test_parse_file_unknown_encoding(self, tmp_path):
        """Test unknown encodings produce a failed result."""
        path = tmp_path / "doc.md"
        path.write_text("text", encoding="utf-8")

        result = parse_file(path, encoding="no-such-codec")

        assert result.success is False
        assert result.diagnostics[0].message.startswith("Unknown encoding")


class TestMarkdownParser:
    """Test Level 2: configured parser."""

    def test_default_configuration(self):
        """Test default parser configuration."""
        parser = MarkdownParser()
        assert parser.config.name == "default"
        assert parser.parse("# Title").success is True

    def test_diagnostic_preset_keeps_tokens(self):
        """Test include_tokens keeps the original token stream."""
        parser = MarkdownParser(ParserConfig.diagnostic())
        result = parser.parse("#Header")

        assert result.tokens is not None
        assert [t.value for t in result.tokens] == ["#", "Header"]
        assert "tokens" in result.to_dict()

    def test_minimal_preset(self):
        """Test minimal preset drops recoveries and metrics."""
        parser = MarkdownParser(ParserConfig.minimal())
        result = parser.parse("*open")

        assert result.recoveries == []
        assert result.performance.processing_time_ms == 0.0
        assert result.performance.tokens_generated == 0
        assert result.nodes[0].nodes[0].value == "*"

    def test_header_level_override(self):
        """Test tree configuration reaches the builder."""
        config = ParserConfig().override(tree__max_header_level=2)
        result = MarkdownParser(config).parse("### Title")
        assert isinstance(result.nodes[0], Paragraph)

    def test_default_encoding(self):
        """Test the configured encoding is used for bytes."""
        config = ParserConfig().override(api__default_encoding="latin-1")
        result = MarkdownParser(config).parse(b"caf\xe9")
        assert result.nodes[0].nodes[0].value == "café"

    def test_statistics(self, tmp_path):
        """Test usage statistics accumulate and reset."""
        parser = MarkdownParser(correlation_id="stats")
        parser.parse("*open")
        parser.parse(Path(tmp_path / "missing.md"))

        stats = parser.statistics
        assert stats["total_parses"] == 2
        assert stats["successful_parses"] == 1
        assert stats["success_rate"] == 0.5
        assert stats["total_recoveries"] == 1
        assert stats["correlation_id"] == "stats"

        parser.reset_statistics()
        assert parser.statistics["total_parses"] == 0
        assert parser.statistics["average_processing_time_ms"] == 0.0

    def test_reconfigure(self):
        """Test reconfiguration applies to later parses."""
        parser = MarkdownParser()
        assert parser.parse("x").tokens is None
        parser.reconfigure(ParserConfig.diagnostic())
        assert parser.parse("x").tokens is not None

    def test_correlation_id_override(self):
        """Test per-parse correlation ID."""
        parser = MarkdownParser(correlation_id="base")
        assert parser.parse("x").correlation_id == "base"
        assert parser.parse("x", correlation_id_override="other").correlation_id == "other"
