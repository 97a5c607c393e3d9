"""Output formatters for tablelayout.

This module provides formatters for solve results:
- JsonFormatter: JSON output for scripts
- TableFormatter: Rich text table for terminals
"""

from tablelayout.formatters.base import Formatter
from tablelayout.formatters.json_formatter import JsonFormatter
from tablelayout.formatters.table_formatter import TableFormatter

__all__ = [
    "Formatter",
    "JsonFormatter",
    "TableFormatter",
]
