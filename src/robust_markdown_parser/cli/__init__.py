"""Command-line interface module for the robust Markdown parser.

This module provides the ``robust-md`` tool for printing document trees and
token streams.
"""

from .main import main

__all__ = ["main"]
