"""Tests for the CLI main module."""

import io
import json
from unittest.mock import patch

import pytest

from robust_markdown_parser.cli.main import (
    create_argument_parser,
    format_summary,
    load_config,
    main,
)
from robust_markdown_parser.shared import ParserConfig


@pytest.fixture
def markdown_file(tmp_path):
    path = tmp_path / "doc.md"
    path.write_text("# Title\n- item\n *open\n", encoding="utf-8")
    return path


class TestArgumentParser:
    """Test command-line argument parsing."""

    def test_tree_defaults(self):
        """Test tree command defaults."""
        args = create_argument_parser().parse_args(["tree", "a.md"])
        assert args.command == "tree"
        assert args.paths == ["a.md"]
        assert args.format == "json"
        assert args.include_tokens is False
        assert args.preset == "default"
        assert args.config is None

    def test_tokens_format(self):
        """Test tokens command options."""
        args = create_argument_parser().parse_args(["tokens", "-f", "json", "-"])
        assert args.command == "tokens"
        assert args.format == "json"
        assert args.paths == ["-"]

    def test_invalid_format(self):
        """Test unknown formats are rejected by argparse."""
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(["tree", "--format", "xml", "a.md"])

    def test_load_config_preset(self):
        """Test preset resolution."""
        args = create_argument_parser().parse_args(["tree", "--preset", "minimal", "a.md"])
        assert load_config(args) == ParserConfig.minimal()


class TestTreeCommand:
    """Test the tree command."""

    def test_json_output(self, markdown_file, capsys):
        """Test JSON tree output."""
        exit_code = main(["tree", str(markdown_file)])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output[0]["file"] == str(markdown_file)
        assert [n["type"] for n in output[0]["nodes"]] == [
            "Header", "UnorderedList", "Paragraph"
        ]
        assert output[0]["recoveries"][0]["recovery_type"] == "unclosed_italic"
        assert "tokens" not in output[0]

    def test_include_tokens(self, markdown_file, capsys):
        """Test token stream in JSON output."""
        main(["tree", "--include-tokens", str(markdown_file)])
        output = json.loads(capsys.readouterr().out)
        assert output[0]["tokens"][0] == {"type": "HEADER", "value": "#", "line": 1}

    def test_summary_output(self, markdown_file, capsys):
        """Test human-readable summary."""
        exit_code = main(["tree", "--format", "summary", str(markdown_file)])

        assert exit_code == 0
        out = capsys.readouterr().out
        assert "Parsed 1 files, 1 successful" in out
        assert "Header: 1" in out
        assert "Recoveries: 1" in out

    def test_missing_file(self, tmp_path, capsys):
        """Test missing files fail the command."""
        missing = tmp_path / "missing.md"
        exit_code = main(["tree", "--format", "summary", str(missing)])

        assert exit_code == 1
        out = capsys.readouterr().out
        assert "✗" in out
        assert "Unable to read input" in out

    def test_stdin(self, capsys):
        """Test '-' reads standard input."""
        with patch("sys.stdin", io.StringIO("**bold**")):
            exit_code = main(["tree", "-"])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output[0]["file"] == "-"
        assert output[0]["nodes"][0]["nodes"][0]["type"] == "Bold"

    def test_config_file(self, markdown_file, tmp_path, capsys):
        """Test loading configuration from JSON."""
        config_path = tmp_path / "config.json"
        config_path.write_text(ParserConfig.minimal().to_json(), encoding="utf-8")

        exit_code = main(["tree", "--config", str(config_path), str(markdown_file)])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output[0]["recoveries"] == []

    def test_invalid_config_file(self, markdown_file, tmp_path, capsys):
        """Test invalid configuration is reported."""
        config_path = tmp_path / "config.json"
        config_path.write_text('{"tree": {"max_header_level": 9}}', encoding="utf-8")

        exit_code = main(["tree", "--config", str(config_path), str(markdown_file)])

        assert exit_code == 1
        assert "Error loading configuration" in capsys.readouterr().err

    def test_malformed_config_json(self, markdown_file, tmp_path, capsys):
        """Test unparsable configuration files are reported."""
        config_path = tmp_path / "config.json"
        config_path.write_text("{not json", encoding="utf-8")

        assert main(["tree", "--config", str(config_path), str(markdown_file)]) == 1


class TestTokensCommand:
    """Test the tokens command."""

    def test_text_output(self, markdown_file, capsys):
        """Test one line per token."""
        exit_code = main(["tokens", str(markdown_file)])

        assert exit_code == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == f"==> {markdown_file} <=="
        assert "HEADER" in lines[1]
        assert "UNORDERED_LIST" in "\n".join(lines)

    def test_json_output(self, markdown_file, capsys):
        """Test JSON token output."""
        main(["tokens", "--format", "json", str(markdown_file)])
        output = json.loads(capsys.readouterr().out)
        assert output[0]["tokens"][1] == {"type": "WHITESPACE", "value": " ", "line": 1}

    def test_missing_file(self, tmp_path, capsys):
        """Test unreadable files are reported on stderr."""
        exit_code = main(["tokens", str(tmp_path / "missing.md")])
        assert exit_code == 1
        assert "Unable to read input" in capsys.readouterr().err


class TestMain:
    """Test the entry point."""

    def test_no_command(self, capsys):
        """Test help is printed without a command."""
        assert main([]) == 1
        assert "robust-md" in capsys.readouterr().out

    def test_keyboard_interrupt(self, markdown_file, capsys):
        """Test Ctrl-C exit code."""
        with patch("robust_markdown_parser.cli.main.cmd_tree", side_effect=KeyboardInterrupt):
            assert main(["tree", str(markdown_file)]) == 130
        assert "interrupted" in capsys.readouterr().err

    def test_verbose_configures_logging(self, markdown_file):
        """Test --verbose enables debug logging."""
        with patch("robust_markdown_parser.cli.main.logging.basicConfig") as basic_config:
            main(["--verbose", "tree", str(markdown_file)])
        basic_config.assert_called_once()

    def test_format_summary_empty(self):
        """Test summary of no results."""
        assert format_summary([]) == "No results to display."
