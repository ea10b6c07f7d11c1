"""Core parser API with progressive disclosure for robust Markdown parsing.

This module provides the main parsing API, from simple module-level functions
to the configurable :class:`MarkdownParser`. Malformed markup never fails a
parse; unreadable input (missing files, I/O errors, unknown encodings) yields a
``ParseResult`` with ``success=False`` and a critical diagnostic.
"""

import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from robust_markdown_parser.character import InputType as CharacterInput
from robust_markdown_parser.character import decode_input
from robust_markdown_parser.shared import (
    DiagnosticSeverity,
    ParserConfig,
    PerformanceMetrics,
    get_logger,
)
from robust_markdown_parser.tokenization import MarkdownTokenizer
from robust_markdown_parser.tree import MarkdownTreeBuilder, ParseResult

# Type definitions for input data
InputType = Union[CharacterInput, Path]

MS_PER_SECOND = 1000


def parse(input_data: InputType, correlation_id: Optional[str] = None) -> ParseResult:
    """Parse Markdown from various input sources with automatic type detection.

    ``str`` input is treated as document text, never as a file name; pass a
    :class:`~pathlib.Path` or use :func:`parse_file` to read from disk.

    Args:
        input_data: Markdown as string, bytes, file-like object, or Path
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult containing root-level nodes and metadata

    Raises:
        TypeError: If ``input_data`` is none of the supported input types

    Examples:
        >>> result = parse("# Title")
        >>> type(result.nodes[0]).__name__
        'Header'
    """
    if isinstance(input_data, Path):
        return parse_file(input_data, correlation_id=correlation_id)
    return _parse_input(input_data, ParserConfig.default(), correlation_id)


def parse_string(text: str, correlation_id: Optional[str] = None) -> ParseResult:
    """Parse Markdown from a string.

    Args:
        text: Markdown document text
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult containing root-level nodes and metadata

    Raises:
        TypeError: If ``text`` is not a string
    """
    if not isinstance(text, str):
        raise TypeError(f"parse_string expects str, got {type(text).__name__}")
    return _parse_input(text, ParserConfig.default(), correlation_id)


def parse_file(
    file_path: Union[str, Path],
    encoding: Optional[str] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse Markdown from a file.

    The file is read as bytes and decoded with ``encoding`` (UTF-8 by
    default); undecodable bytes are replaced and reported as diagnostics.

    Args:
        file_path: Path to the Markdown file (string or Path object)
        encoding: Optional encoding override
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult; ``success`` is False if the file cannot be read

    Examples:
        >>> result = parse_file("missing.md")
        >>> result.success
        False
    """
    start_time = time.time()
    logger = get_logger(__name__, correlation_id, "parse_file")
    path_obj = Path(file_path)

    logger.info(
        "Starting file parse operation",
        extra={"file_path": str(path_obj), "encoding_override": encoding}
    )

    error_message = None
    if not path_obj.exists():
        error_message = f"File not found: {path_obj}"
    elif not path_obj.is_file():
        error_message = f"Path is not a file: {path_obj}"

    if error_message:
        logger.warning(error_message)
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        return _create_error_result(error_message, correlation_id, processing_time)

    result = _parse_input(path_obj, ParserConfig.default(), correlation_id, encoding)
    if result.success:
        result.add_diagnostic(
            DiagnosticSeverity.INFO,
            f"File parsed with encoding: {encoding or ParserConfig.default().api.default_encoding}",
            "file_parser",
            details={"file_path": str(path_obj)}
        )
    return result


def _read_input(input_data: InputType) -> CharacterInput:
    """Load file content; every other input shape is decoded as given.

    Raises:
        OSError: If the file cannot be read
    """
    if isinstance(input_data, Path):
        return input_data.read_bytes()
    return input_data


def _parse_input(
    input_data: InputType,
    config: ParserConfig,
    correlation_id: Optional[str],
    encoding: Optional[str] = None
) -> ParseResult:
    """Run the decode, tokenize and build pipeline for one input."""
    start_time = time.time()
    logger = get_logger(__name__, correlation_id, "parse_input")

    try:
        content = _read_input(input_data)
        stream = decode_input(content, encoding or config.api.default_encoding)
    except OSError as e:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        logger.error("Unable to read input", extra={"error": str(e)})
        return _create_error_result(
            f"Unable to read input: {e}", correlation_id, processing_time
        )
    except LookupError as e:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        logger.error("Unknown encoding", extra={"encoding": encoding}, exc_info=False)
        return _create_error_result(
            f"Unknown encoding: {e}", correlation_id, processing_time
        )

    tokenization_result = MarkdownTokenizer(correlation_id).tokenize(stream.text)
    builder = MarkdownTreeBuilder(config.tree, correlation_id)
    result = builder.build(tokenization_result)

    for message in stream.diagnostics:
        result.add_diagnostic(
            DiagnosticSeverity.WARNING,
            message,
            "character_stream",
            details={"encoding": stream.encoding}
        )

    if config.api.include_tokens:
        result.tokens = list(tokenization_result.tokens)

    processing_time = (time.time() - start_time) * MS_PER_SECOND
    if config.api.collect_metrics:
        result.performance.processing_time_ms = processing_time
    else:
        result.performance = PerformanceMetrics()

    logger.info(
        "Parse completed",
        extra={
            "input_type": type(input_data).__name__,
            "root_node_count": len(result.nodes),
            "recovery_count": result.recovery_count,
            "processing_time_ms": processing_time
        }
    )

    return result


def _create_error_result(
    error_message: str,
    correlation_id: Optional[str],
    processing_time: float
) -> ParseResult:
    """Create a failed result carrying a critical diagnostic.

    Args:
        error_message: Error description
        correlation_id: Optional correlation ID
        processing_time: Processing time in milliseconds

    Returns:
        ParseResult with no nodes and ``success`` set to False
    """
    result = ParseResult(correlation_id=correlation_id)
    result.success = False
    result.performance.processing_time_ms = processing_time

    result.add_diagnostic(
        DiagnosticSeverity.CRITICAL,
        error_message,
        "api_parser"
    )

    return result


class MarkdownParser:
    """Configurable Markdown parser for repeated use.

    Attributes:
        config: Current parser configuration
        correlation_id: Correlation ID for request tracking

    Examples:
        >>> parser = MarkdownParser(ParserConfig.diagnostic())
        >>> result = parser.parse("**bold")
        >>> result.recovery_count
        1
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the parser.

        Args:
            config: Parser configuration (defaults to ``ParserConfig.default()``)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig.default()
        self.correlation_id = correlation_id

        self.logger = get_logger(__name__, self.correlation_id, "markdown_parser")

        self._parse_count = 0
        self._total_processing_time = 0.0
        self._successful_parses = 0
        self._total_recoveries = 0

        self.logger.info(
            "MarkdownParser initialized",
            extra={"config_name": self.config.name}
        )

    def parse(
        self,
        input_data: InputType,
        correlation_id_override: Optional[str] = None
    ) -> ParseResult:
        """Parse Markdown with this parser's configuration.

        Args:
            input_data: Markdown as string, bytes, file-like object, or Path
            correlation_id_override: Optional correlation ID for this parse only

        Returns:
            ParseResult with nodes and metadata
        """
        start_time = time.time()
        effective_correlation_id = correlation_id_override or self.correlation_id

        result = _parse_input(input_data, self.config, effective_correlation_id)

        processing_time = (time.time() - start_time) * MS_PER_SECOND
        self._parse_count += 1
        self._total_processing_time += processing_time
        self._total_recoveries += result.recovery_count
        if result.success:
            self._successful_parses += 1

        self.logger.debug(
            "Configured parse completed",
            extra={
                "success": result.success,
                "processing_time_ms": processing_time,
                "total_parses": self._parse_count
            }
        )

        return result

    def reconfigure(self, config: ParserConfig) -> None:
        """Replace the parser configuration for subsequent parses."""
        self.config = config
        self.logger.info(
            "Parser reconfigured",
            extra={"config_name": config.name}
        )

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_recoveries": self._total_recoveries,
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._total_processing_time = 0.0
        self._successful_parses = 0
        self._total_recoveries = 0

        self.logger.info("Parser statistics reset")
