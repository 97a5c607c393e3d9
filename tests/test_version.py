"""Tests for package metadata and the public API surface."""

from pathlib import Path
import tomllib

import tablelayout

PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


def test_version_matches_pyproject() -> None:
    """Test __version__ agrees with the packaged version."""
    with PYPROJECT.open("rb") as f:
        project = tomllib.load(f)["project"]
    assert tablelayout.__version__ == project["version"]


def test_public_names_resolve() -> None:
    """Test every name in __all__ is importable from the package root."""
    for name in tablelayout.__all__:
        assert getattr(tablelayout, name) is not None


def test_solver_entry_points_exported() -> None:
    """Test a layout can be built from root imports alone."""
    layout = tablelayout.TableLayout()
    layout.add_cell(tablelayout.CellProperties().preferred_size(tablelayout.Size(4, 4)))
    report = layout.solve(8, 8)
    assert isinstance(report, tablelayout.SolveReport)
    assert report.column_widths == (4,)
