"""Command-line interface for tablelayout.

This module provides:
- Typer-based CLI application
- Config file loading with CLI overrides
- The solve and check commands

Usage:
    tablelayout solve LAYOUT --width W --height H   # Solve and print rectangles
    tablelayout check LAYOUT                        # Validate a layout document

Examples:
    # Print every cell's rectangle as JSON
    tablelayout solve examples/barebones.yaml --width 320 --height 240

    # Print a table instead
    tablelayout solve examples/barebones.yaml -w 320 -h 240 --format table

    # Time 1000 solves
    tablelayout solve examples/barebones.yaml -w 320 -h 240 --repeat 1000 --debug
"""

from enum import Enum
from pathlib import Path
from typing import Annotated, Any

from rich.console import Console
import typer

from tablelayout import __version__
from tablelayout.cli_runner import configure_logging, run_check, run_solve
from tablelayout.config import Config, ConfigError, load_config

# Create the main Typer app
app = typer.Typer(
    name="tablelayout",
    help="Constraint-based table layout solver",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# Console for rich output
console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    """Output format options for the solve command."""

    JSON = "json"
    TABLE = "table"


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        console.print(f"tablelayout version {__version__}")
        raise typer.Exit()


def build_cli_overrides(
    format_: OutputFormat | None = None,
    pretty: bool | None = None,
    debug: bool = False,
) -> dict[str, Any]:
    """Build config override dict from CLI flags.

    Args:
        format_: Output format
        pretty: Pretty-print JSON output
        debug: Enable debug logging and solver tracing

    Returns:
        Dictionary of config overrides
    """
    overrides: dict[str, Any] = {}

    output_overrides: dict[str, Any] = {}
    if format_ is not None:
        output_overrides["default_format"] = format_.value
    if pretty is not None:
        output_overrides["pretty_print"] = pretty
    if output_overrides:
        overrides["output"] = output_overrides

    if debug:
        overrides["solver"] = {"trace": True}

    return overrides


def _load(config: Path | None, overrides: dict[str, Any]) -> Config:
    try:
        config_path = str(config) if config else None
        return load_config(config_path=config_path, cli_overrides=overrides)
    except FileNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1) from e


# Common options
ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to custom config file",
        envvar="TABLELAYOUT_CONFIG_PATH",
        exists=False,  # We handle existence check ourselves
    ),
]

LayoutArgument = Annotated[
    Path,
    typer.Argument(help="Path to a YAML layout document"),
]

WidthOption = Annotated[
    float,
    typer.Option("--width", "-w", help="Available width", min=0),
]

HeightOption = Annotated[
    float,
    typer.Option("--height", "-h", help="Available height", min=0),
]

FormatOption = Annotated[
    OutputFormat | None,
    typer.Option(
        "--format",
        "-f",
        help="Output format (default from config: json)",
        case_sensitive=False,
    ),
]

PrettyOption = Annotated[
    bool | None,
    typer.Option(
        "--pretty/--no-pretty",
        help="Pretty-print JSON output (default: True)",
    ),
]

RepeatOption = Annotated[
    int,
    typer.Option(
        "--repeat",
        "-r",
        help="Solve this many times (for timing with --debug)",
        min=1,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Enable solve profiling and debug output",
    ),
]

VersionOption = Annotated[
    bool | None,
    typer.Option(
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
]


@app.callback()
def main(version: VersionOption = None) -> None:
    """tablelayout - Constraint-based table layout solver.

    Describe a table of cells in YAML and compute each cell's rectangle
    for a given area.

    Examples:

        tablelayout solve dialog.yaml -w 640 -h 480

        tablelayout check dialog.yaml
    """


@app.command("solve")
def solve_command(
    layout: LayoutArgument,
    width: WidthOption,
    height: HeightOption,
    format_: FormatOption = None,
    pretty: PrettyOption = None,
    config: ConfigOption = None,
    repeat: RepeatOption = 1,
    debug: DebugOption = False,
) -> None:
    """Solve a layout document and print every cell's rectangle."""
    overrides = build_cli_overrides(format_=format_, pretty=pretty, debug=debug)
    cfg = _load(config, overrides)
    configure_logging(cfg.logging, debug=debug)

    try:
        output = run_solve(
            layout,
            width,
            height,
            cfg,
            repeat=repeat,
            debug=debug,
        )
    except FileNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigError as e:
        err_console.print(f"[red]Layout error:[/red] {e}")
        raise typer.Exit(1) from e

    print(output)


@app.command("check")
def check_command(
    layout: LayoutArgument,
    config: ConfigOption = None,
) -> None:
    """Validate a layout document and print its grid dimensions."""
    cfg = _load(config, {})
    configure_logging(cfg.logging)

    try:
        cells, rows, columns = run_check(layout, cfg)
    except FileNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigError as e:
        err_console.print(f"[red]Layout error:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(
        f"[green]✓[/green] {layout}: {cells} cells in {rows} rows x {columns} columns",
        soft_wrap=True,
    )


def cli_main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli_main()
