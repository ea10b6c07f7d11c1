"""Main CLI entry point for the robust-md command-line tool.

Provides commands to print the document tree or the token stream of one or
more Markdown files.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from robust_markdown_parser.api import MarkdownParser
from robust_markdown_parser.shared import ConfigError, ParserConfig
from robust_markdown_parser.shared.logging import get_logger
from robust_markdown_parser.tree import ParseResult

STDIN_PATH = "-"

PRESETS = {
    "default": ParserConfig.default,
    "diagnostic": ParserConfig.diagnostic,
    "minimal": ParserConfig.minimal,
}


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="robust-md",
        description="Never-fail Markdown parser: inspect document trees and tokens"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Tree command
    tree_parser = subparsers.add_parser("tree", help="Print the parsed document tree")
    tree_parser.add_argument(
        "paths",
        nargs="+",
        help="Markdown files to parse ('-' reads standard input)"
    )
    tree_parser.add_argument(
        "--format", "-f",
        choices=["json", "summary"],
        default="json",
        help="Output format (default: json)"
    )
    tree_parser.add_argument(
        "--include-tokens",
        action="store_true",
        help="Include the token stream in JSON output"
    )
    tree_parser.add_argument(
        "--preset", "-p",
        choices=sorted(PRESETS),
        default="default",
        help="Parser configuration preset"
    )
    tree_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON parser configuration file (overrides --preset)"
    )

    # Tokens command
    tokens_parser = subparsers.add_parser("tokens", help="Print the token stream")
    tokens_parser.add_argument(
        "paths",
        nargs="+",
        help="Markdown files to tokenize ('-' reads standard input)"
    )
    tokens_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)"
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def load_config(args: argparse.Namespace) -> ParserConfig:
    """Resolve the parser configuration from --config or --preset.

    Raises:
        ConfigError: If the configuration values are invalid
        ValueError: If the configuration file is not valid JSON
        OSError: If the configuration file cannot be read
    """
    if getattr(args, "config", None) is not None:
        return ParserConfig.from_json(args.config.read_text(encoding="utf-8"))
    return PRESETS[getattr(args, "preset", "default")]()


def parse_path(parser: MarkdownParser, path: str) -> ParseResult:
    """Parse one command-line path, reading standard input for '-'."""
    if path == STDIN_PATH:
        return parser.parse(sys.stdin.read())
    return parser.parse(Path(path))


def format_summary(results: List[Dict[str, Any]]) -> str:
    """Format per-file summaries as readable text."""
    if not results:
        return "No results to display."

    lines = []
    successful = sum(1 for r in results if r["success"])
    lines.append(f"Parsed {len(results)} files, {successful} successful")
    lines.append("-" * 60)

    for result in results:
        status = "✓" if result["success"] else "✗"
        lines.append(f"{status} {result['file']}")
        if result["success"]:
            blocks = ", ".join(
                f"{name}: {count}" for name, count in sorted(result["block_counts"].items())
            )
            lines.append(f"   Blocks: {blocks or 'none'}")
            lines.append(
                f"   Nodes: {result['node_count']}, Recoveries: {result['recovery_count']}, "
                f"Time: {result['processing_time_ms']:.1f}ms"
            )
        for error in result.get("errors", [])[:3]:
            lines.append(f"   Error: {error}")
        lines.append("")

    return "\n".join(lines)


def cmd_tree(args: argparse.Namespace) -> int:
    """Handle tree command."""
    try:
        config = load_config(args)
    except (ConfigError, OSError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    if args.include_tokens:
        config = config.override(api__include_tokens=True)

    parser = MarkdownParser(config)
    outputs = []
    for path in args.paths:
        result = parse_path(parser, path)
        if args.format == "json":
            outputs.append({"file": path, **result.to_dict()})
        else:
            summary = {"file": path, **result.summary}
            summary["errors"] = [
                diag.message for diag in result.diagnostics
                if diag.severity.name in ("ERROR", "CRITICAL")
            ]
            outputs.append(summary)

    if args.format == "json":
        print(json.dumps(outputs, indent=2, ensure_ascii=False))
    else:
        print(format_summary(outputs))

    return 0 if all(output["success"] for output in outputs) else 1


def cmd_tokens(args: argparse.Namespace) -> int:
    """Handle tokens command."""
    parser = MarkdownParser(ParserConfig.diagnostic())
    exit_code = 0
    outputs = []

    for path in args.paths:
        result = parse_path(parser, path)
        if not result.success:
            for diag in result.diagnostics:
                print(f"{path}: {diag.message}", file=sys.stderr)
            exit_code = 1
            continue

        tokens = result.tokens or []
        if args.format == "json":
            outputs.append({"file": path, "tokens": [token.to_dict() for token in tokens]})
        else:
            print(f"==> {path} <==")
            for token in tokens:
                print(f"{token.line:>4}  {token.type.name:<16} {token.value!r}")

    if args.format == "json":
        print(json.dumps(outputs, indent=2, ensure_ascii=False))

    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    logger = get_logger(__name__, None, "cli")
    logger.debug("Running command", extra={"command": args.command})

    try:
        if args.command == "tree":
            return cmd_tree(args)
        if args.command == "tokens":
            return cmd_tokens(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
