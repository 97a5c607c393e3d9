"""Tests for tablelayout CLI."""

from collections.abc import Iterator
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from tablelayout import __version__
from tablelayout.__main__ import main
from tablelayout.cli import OutputFormat, app, build_cli_overrides
from tablelayout.cli_runner import run_solve
from tablelayout.config import Config, OutputConfig
from tablelayout.performance import get_profiler, reset_profiler

runner = CliRunner()

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"
BAREBONES = EXAMPLES / "barebones.yaml"


@pytest.fixture(autouse=True)
def fresh_profiler() -> Iterator[None]:
    reset_profiler()
    yield
    reset_profiler()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """An empty config file, so the user's own config is never read."""
    path = tmp_path / "config.yaml"
    path.write_text("")
    return path


def _solve(config_file: Path, *args: str):
    return runner.invoke(
        app,
        ["solve", str(BAREBONES), "--width", "320", "--height", "240", "--config", str(config_file)]
        + list(args),
    )


class TestBuildCliOverrides:
    """Tests for CLI override building."""

    def test_no_overrides(self) -> None:
        """Test empty overrides when no flags."""
        assert build_cli_overrides() == {}

    def test_format_override(self) -> None:
        """Test format override."""
        overrides = build_cli_overrides(format_=OutputFormat.TABLE)
        assert overrides == {"output": {"default_format": "table"}}

    def test_pretty_override(self) -> None:
        """Test pretty-print override, including an explicit False."""
        assert build_cli_overrides(pretty=False) == {"output": {"pretty_print": False}}

    def test_debug_enables_trace(self) -> None:
        """Test --debug turns on solver tracing."""
        assert build_cli_overrides(debug=True) == {"solver": {"trace": True}}


class TestVersion:
    """Tests for the version flag."""

    def test_version_flag(self) -> None:
        """Test --version shows version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_version_short_flag(self) -> None:
        """Test -V shows version."""
        result = runner.invoke(app, ["-V"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestSolveCommand:
    """Tests for the solve command."""

    def test_json_output(self, config_file: Path) -> None:
        """Test solving prints every cell as JSON."""
        result = _solve(config_file)
        assert result.exit_code == 0

        parsed = json.loads(result.stdout)
        assert parsed["rows"] == 2
        assert parsed["columns"] == 3
        assert parsed["column_widths"] == [64, 128, 128]
        assert parsed["row_heights"] == [64, 176]
        assert parsed["overconstrained"] == []
        assert [cell["name"] for cell in parsed["cells"]] == ["left", "middle", "right", "footer"]
        assert parsed["cells"][3] == {
            "name": "footer",
            "x": 0,
            "y": 176,
            "width": 320,
            "height": 64,
        }

    def test_compact_json(self, config_file: Path) -> None:
        """Test --no-pretty prints a single line."""
        result = _solve(config_file, "--no-pretty")
        assert result.exit_code == 0
        assert result.stdout.strip().count("\n") == 0
        assert json.loads(result.stdout)["columns"] == 3

    def test_table_output(self, config_file: Path) -> None:
        """Test --format table prints a table of cells."""
        result = _solve(config_file, "--format", "table")
        assert result.exit_code == 0
        for name in ("left", "middle", "right", "footer"):
            assert name in result.stdout
        assert "2 rows, 3 columns" in result.stdout

    def test_format_from_config(self, tmp_path: Path) -> None:
        """Test the default format comes from the config file."""
        config = tmp_path / "config.yaml"
        config.write_text("output:\n  default_format: table\n")
        result = _solve(config)
        assert result.exit_code == 0
        assert "footer" in result.stdout
        assert not result.stdout.lstrip().startswith("{")

    def test_decimal_places(self, tmp_path: Path) -> None:
        """Test coordinates are rounded to the configured precision."""
        layout = tmp_path / "thirds.yaml"
        layout.write_text(
            "rows:\n"
            "  - - {name: a, flags: [expand_horizontal, fill_horizontal]}\n"
            "    - {name: b, flags: [expand_horizontal, fill_horizontal]}\n"
            "    - {name: c, flags: [expand_horizontal, fill_horizontal]}\n"
        )
        config = tmp_path / "config.yaml"
        config.write_text("output:\n  decimal_places: 1\n")
        result = runner.invoke(
            app,
            ["solve", str(layout), "-w", "100", "-h", "10", "--config", str(config)],
        )
        assert result.exit_code == 0
        cells = json.loads(result.stdout)["cells"]
        assert [cell["width"] for cell in cells] == [33.3, 33.3, 33.3]
        assert cells[1]["x"] == 33.3

    def test_overconstrained_reported(self, tmp_path: Path, config_file: Path) -> None:
        """Test an over-constrained layout is reported but still solved."""
        layout = tmp_path / "tight.yaml"
        layout.write_text("rows:\n  - - {name: big, minimum: [100, 10], preferred: [100, 10]}\n")
        result = runner.invoke(
            app,
            [
                "solve",
                str(layout),
                "-w",
                "50",
                "-h",
                "10",
                "--format",
                "table",
                "--config",
                str(config_file),
            ],
        )
        assert result.exit_code == 0
        assert "over-constrained" in result.output

    def test_repeat_and_debug(self, config_file: Path) -> None:
        """Test --debug prints the timing report."""
        result = _solve(config_file, "--repeat", "5", "--debug")
        assert result.exit_code == 0
        assert "Solve Timing" in result.output
        assert "n=5" in result.output

    def test_debug_adds_timing_to_json(self) -> None:
        """Test debug runs add per-layout timings to the JSON result."""
        config = Config(output=OutputConfig(pretty_print=False))
        output = run_solve(BAREBONES, 320, 240, config, repeat=3, debug=True)
        timing = json.loads(output)["timing"]
        assert set(timing) == {"barebones"}
        assert timing["barebones"]["count"] == 3

    def test_debug_profiling_stops_after_solve(self, config_file: Path) -> None:
        """Test the profiler is switched off once the command finishes."""
        result = _solve(config_file, "--debug")
        assert result.exit_code == 0
        assert not get_profiler().enabled

    def test_no_timing_without_debug(self, config_file: Path) -> None:
        """Test timings are left out of normal output."""
        result = _solve(config_file)
        assert "timing" not in json.loads(result.stdout)

    def test_missing_layout(self, tmp_path: Path, config_file: Path) -> None:
        """Test a missing layout file is an error."""
        result = runner.invoke(
            app,
            [
                "solve",
                str(tmp_path / "nope.yaml"),
                "-w",
                "10",
                "-h",
                "10",
                "--config",
                str(config_file),
            ],
        )
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_invalid_layout(self, tmp_path: Path, config_file: Path) -> None:
        """Test an invalid layout document is an error."""
        layout = tmp_path / "bad.yaml"
        layout.write_text("rows:\n  - - {flags: [sideways]}\n")
        result = runner.invoke(
            app,
            ["solve", str(layout), "-w", "10", "-h", "10", "--config", str(config_file)],
        )
        assert result.exit_code == 1
        assert "Layout error" in result.output

    def test_missing_config(self, tmp_path: Path) -> None:
        """Test a missing config file is an error."""
        result = runner.invoke(
            app,
            [
                "solve",
                str(BAREBONES),
                "-w",
                "10",
                "-h",
                "10",
                "--config",
                str(tmp_path / "missing.yaml"),
            ],
        )
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_invalid_config(self, tmp_path: Path) -> None:
        """Test an invalid config file is an error."""
        config = tmp_path / "config.yaml"
        config.write_text("solver:\n  trace: sometimes\n")
        result = _solve(config)
        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_width_required(self, config_file: Path) -> None:
        """Test the available width must be given."""
        result = runner.invoke(
            app, ["solve", str(BAREBONES), "--height", "10", "--config", str(config_file)]
        )
        assert result.exit_code != 0


class TestCheckCommand:
    """Tests for the check command."""

    def test_check_valid(self, config_file: Path) -> None:
        """Test check reports the grid dimensions."""
        result = runner.invoke(app, ["check", str(BAREBONES), "--config", str(config_file)])
        assert result.exit_code == 0
        assert "4 cells in 2 rows x 3 columns" in result.stdout

    def test_check_invalid(self, tmp_path: Path, config_file: Path) -> None:
        """Test check fails for an invalid document."""
        layout = tmp_path / "bad.yaml"
        layout.write_text("colums: []\n")
        result = runner.invoke(app, ["check", str(layout), "--config", str(config_file)])
        assert result.exit_code == 1


class TestMain:
    """Tests for the console entry point."""

    def test_main_returns_exit_code(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test main maps a clean exit to 0."""
        monkeypatch.setattr("sys.argv", ["tablelayout", "--version"])
        assert main() == 0

    def test_main_maps_interrupt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test main maps KeyboardInterrupt to 130."""

        def interrupt() -> None:
            raise KeyboardInterrupt

        monkeypatch.setattr("tablelayout.__main__.cli_main", interrupt)
        assert main() == 130
