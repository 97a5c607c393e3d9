"""Runner for the tablelayout command line.

This module provides the implementation behind the CLI commands:
- Logging setup from the logging config section
- Solving a layout document and collecting every cell's rectangle
- Output formatting

The runner coordinates between layout documents, the solver, the profiler
and the formatters to produce CLI output.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from tablelayout.config import Config, LoggingConfig
from tablelayout.formatters import Formatter, JsonFormatter, TableFormatter
from tablelayout.layout import LayoutDocument, SolveReport, load_document
from tablelayout.models import PositioningFn
from tablelayout.performance import get_profiler, profile_solve

console = Console(stderr=True)

# Handler installed by configure_logging, replaced on every call
_log_handler: logging.Handler | None = None

Rect = tuple[float, float, float, float]


def configure_logging(config: LoggingConfig, debug: bool = False) -> None:
    """Attach a handler to the package logger.

    Warnings (such as over-constrained layouts) always reach stderr. When
    logging is enabled the configured level applies, and records go to the
    configured file instead of stderr if one is set.

    Args:
        config: Logging configuration section
        debug: Force DEBUG level regardless of the config
    """
    global _log_handler
    package_logger = logging.getLogger("tablelayout")
    if _log_handler is not None:
        package_logger.removeHandler(_log_handler)
        _log_handler.close()

    if debug:
        level = logging.DEBUG
    elif config.enabled:
        level = getattr(logging, config.level)
    else:
        level = logging.WARNING

    handler: logging.Handler
    if config.enabled and config.file:
        handler = logging.FileHandler(Path(config.file).expanduser(), encoding="utf-8")
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    else:
        handler = RichHandler(console=console, show_time=False, show_path=False)

    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    _log_handler = handler


def get_formatter(format_name: str, config: Config) -> Formatter:
    """Get a formatter by name.

    Args:
        format_name: The format name (json, table)
        config: Application configuration

    Returns:
        Initialized formatter

    Raises:
        ValueError: If format is not recognized
    """
    if format_name == "json":
        pretty_print = config.output.pretty_print
        formatter: Formatter = JsonFormatter(pretty_print=pretty_print)
        formatter.initialize({"pretty_print": pretty_print})
        return formatter
    elif format_name == "table":
        formatter = TableFormatter()
        formatter.initialize()
        return formatter
    else:
        available = ", ".join(
            f"{cls.name} ({cls.display_name})" for cls in (JsonFormatter, TableFormatter)
        )
        raise ValueError(f"Unknown format: {format_name}. Available: {available}")


def build_result(
    report: SolveReport,
    names: list[str],
    placements: dict[int, Rect],
    width: float,
    height: float,
    decimal_places: int = 3,
) -> dict[str, Any]:
    """Assemble the printable result of a solve.

    Args:
        report: Report returned by the solve
        names: Cell names in declaration order
        placements: Rectangles delivered to each cell, keyed by declaration index
        width: Available width the layout was solved for
        height: Available height the layout was solved for
        decimal_places: Rounding applied to coordinates

    Returns:
        Dictionary consumed by the formatters
    """

    def rounded(value: float) -> float:
        return round(value, decimal_places)

    cells = []
    for index, name in enumerate(names):
        if index not in placements:
            continue
        x, y, w, h = placements[index]
        cells.append(
            {
                "name": name,
                "x": rounded(x),
                "y": rounded(y),
                "width": rounded(w),
                "height": rounded(h),
            }
        )

    return {
        "width": width,
        "height": height,
        "rows": report.rows,
        "columns": report.columns,
        "column_widths": [rounded(v) for v in report.column_widths],
        "row_heights": [rounded(v) for v in report.row_heights],
        "overconstrained": [
            {"axis": entry.axis, "shortfall": rounded(entry.shortfall)}
            for entry in report.overconstrained
        ],
        "cells": cells,
    }


def solve_document(
    document: LayoutDocument,
    width: float,
    height: float,
    config: Config,
    repeat: int = 1,
    layout_name: str = "layout",
) -> dict[str, Any]:
    """Solve a layout document and collect the result.

    Args:
        document: Validated layout document
        width: Available width
        height: Available height
        config: Application configuration
        repeat: Number of times to solve; the last solve is reported
        layout_name: Name the profiler records timings under

    Returns:
        Dictionary consumed by the formatters
    """
    placements: dict[int, Rect] = {}

    def record(index: int, name: str) -> PositioningFn:
        def place(x: float, y: float, w: float, h: float) -> None:
            placements[index] = (x, y, w, h)

        return place

    layout = document.build(settings=config.solver, callback_factory=record)
    timed_solve = profile_solve(layout_name)(layout.solve)

    report = SolveReport()
    for _ in range(max(repeat, 1)):
        report = timed_solve(width, height)

    return build_result(
        report,
        document.cell_names(),
        placements,
        width,
        height,
        config.output.decimal_places,
    )


def run_solve(
    layout_path: Path,
    width: float,
    height: float,
    config: Config,
    format_name: str | None = None,
    repeat: int = 1,
    debug: bool = False,
) -> str:
    """Load, solve and format a layout document.

    Args:
        layout_path: Path to the YAML layout document
        width: Available width
        height: Available height
        config: Application configuration
        format_name: Output format; defaults to config.output.default_format
        repeat: Number of times to solve
        debug: Profile the solves, add their timings to the result and print
            the timing report to stderr

    Returns:
        The formatted result

    Raises:
        FileNotFoundError: If the layout file does not exist
        ConfigError: If the layout document is invalid
        ValueError: If the format is not recognized
    """
    formatter = get_formatter(format_name or config.output.default_format, config)
    document = load_document(layout_path)

    profiler = get_profiler()
    if debug:
        profiler.enable()

    try:
        result = solve_document(
            document,
            width,
            height,
            config,
            repeat=repeat,
            layout_name=layout_path.stem,
        )
        if debug:
            result["timing"] = profiler.get_summary()["layouts"]
            console.print(profiler.format_report(), highlight=False)
    finally:
        if debug:
            profiler.disable()

    return formatter.format(result)


def run_check(layout_path: Path, config: Config) -> tuple[int, int, int]:
    """Validate a layout document without solving it.

    Returns:
        Tuple of (cell count, rows, columns)
    """
    document = load_document(layout_path)
    layout = document.build(settings=config.solver)
    rows, columns = layout.rows_columns()
    return len(document.cell_names()), rows, columns
