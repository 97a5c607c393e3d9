"""Rich table formatter for solve results."""

from __future__ import annotations

from io import StringIO
from typing import Any

from rich.console import Console
from rich.table import Table

from tablelayout.formatters.base import Formatter

# Render width used when the caller does not ask for one
DEFAULT_WIDTH = 100


def _number(value: Any) -> str:
    return f"{value:g}" if isinstance(value, float) else str(value)


class TableFormatter(Formatter):
    """Render cell rectangles as a plain-text table for terminals."""

    name: str = "table"
    display_name: str = "Table Formatter"
    file_extension: str = ".txt"

    def __init__(self, width: int = DEFAULT_WIDTH) -> None:
        super().__init__()
        self.width = width

    def initialize(self, config: dict[str, Any] | None = None) -> None:
        super().initialize(config)
        if config:
            self.width = config.get("width", self.width)

    def build_table(self, data: dict[str, Any]) -> Table:
        """Build the rich Table for a solve result."""
        title = (
            f"{_number(data.get('width', 0))} x {_number(data.get('height', 0))}: "
            f"{data.get('rows', 0)} rows, {data.get('columns', 0)} columns"
        )
        table = Table(title=title, title_justify="left")
        table.add_column("Cell")
        for heading in ("X", "Y", "Width", "Height"):
            table.add_column(heading, justify="right")

        for cell in data.get("cells", []):
            table.add_row(
                str(cell["name"]),
                _number(cell["x"]),
                _number(cell["y"]),
                _number(cell["width"]),
                _number(cell["height"]),
            )
        return table

    def format(self, data: dict[str, Any]) -> str:
        """Format a solve result as a text table.

        Over-constrained axes are listed below the table.
        """
        buffer = StringIO()
        console = Console(file=buffer, width=self.width, color_system=None, highlight=False)
        console.print(self.build_table(data))
        for entry in data.get("overconstrained", []):
            console.print(
                f"warning: {entry['axis']} over-constrained, "
                f"short by {_number(entry['shortfall'])}"
            )
        return buffer.getvalue().rstrip("\n")
