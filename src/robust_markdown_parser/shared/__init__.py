"""Shared utilities for robust Markdown parsing.

This module provides configuration objects, result types, exceptions and
logging helpers used across all processing layers.
"""

from .config import (
    MAX_HEADER_LEVEL,
    ApiConfig,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    TreeConfig,
)
from .exceptions import ParserInvariantError
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)

__all__ = [
    "MAX_HEADER_LEVEL",
    "ApiConfig",
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "TreeConfig",
    "ParserInvariantError",
    "CorrelationLogger",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
]
