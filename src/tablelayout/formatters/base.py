"""Abstract base class for solve result formatters.

A formatter turns the result of solving a layout document into text for the
command line. The result is a plain dictionary:

    {
        "width": 320.0,
        "height": 240.0,
        "rows": 2,
        "columns": 3,
        "column_widths": [...],
        "row_heights": [...],
        "overconstrained": [{"axis": "width", "shortfall": 12.0}],
        "cells": [{"name": "a", "x": 0.0, "y": 0.0, "width": 64.0, "height": 64.0}],
    }

Profiled runs add a "timing" mapping of layout name to timing statistics.
"""

from abc import ABC, abstractmethod
from typing import Any


class Formatter(ABC):
    """Base class for output formatters.

    Class Attributes:
        name: Identifier used to select this formatter (e.g., "json")
        display_name: Human-readable name
        file_extension: Default file extension for this format

    Example:
        class CsvFormatter(Formatter):
            name = "csv"
            file_extension = ".csv"

            def format(self, data: dict[str, Any]) -> str:
                return "\\n".join(
                    f"{c['name']},{c['x']},{c['y']}" for c in data["cells"]
                )
    """

    name: str = ""
    display_name: str = ""
    file_extension: str = ".txt"

    def __init__(self) -> None:
        self.config: dict[str, Any] = {}

    def initialize(self, config: dict[str, Any] | None = None) -> None:
        """Apply formatter-specific configuration.

        Args:
            config: Formatter configuration dict
        """
        if config:
            self.config = dict(config)

    @abstractmethod
    def format(self, data: dict[str, Any]) -> str:
        """Format a solve result as a string.

        Args:
            data: Dictionary describing the solved layout

        Returns:
            Formatted string representation of the data
        """
        ...
