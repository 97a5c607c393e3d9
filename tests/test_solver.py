"""Tests for the solver phases."""

import logging
import math
import struct

import pytest

from tablelayout.layout.solver import (
    Negotiation,
    SolveReport,
    Track,
    aggregate_tracks,
    measure_grid,
    negotiate,
    place_cells,
    solve,
    to_single,
)
from tablelayout.models import ROW_BREAK, CellFlags, CellProperties, Size


def _cell(width: float = 10, height: float = 10, **kwargs) -> CellProperties:
    return CellProperties(**kwargs).preferred_size(Size(width, height))


class Recorder:
    """Collects rectangles delivered to positioning callbacks."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[float, float, float, float]]] = []

    def __call__(self, name: str):
        def place(x: float, y: float, w: float, h: float) -> None:
            self.calls.append((name, (x, y, w, h)))

        return place

    def rect(self, name: str) -> tuple[float, float, float, float]:
        return next(rect for n, rect in self.calls if n == name)


class TestToSingle:
    """Tests for 32-bit float narrowing."""

    def test_exact_values_unchanged(self) -> None:
        """Test values representable in 32 bits pass through."""
        assert to_single(64.0) == 64.0
        assert to_single(0.5) == 0.5

    def test_narrows_precision(self) -> None:
        """Test 1/3 is rounded to the nearest single precision value."""
        expected = struct.unpack("<f", struct.pack("<f", 1 / 3))[0]
        assert to_single(1 / 3) == expected
        assert to_single(1 / 3) != 1 / 3

    def test_infinity(self) -> None:
        """Test infinities survive narrowing."""
        assert to_single(math.inf) == math.inf
        assert to_single(-math.inf) == -math.inf

    def test_overflow_becomes_infinity(self) -> None:
        """Test values beyond the single range become infinite."""
        assert to_single(1e300) == math.inf
        assert to_single(-1e300) == -math.inf


class TestMeasureGrid:
    """Tests for row and column counting."""

    def test_empty(self) -> None:
        """Test an empty operation list has no rows or columns."""
        assert measure_grid([]) == (0, 0)

    def test_single_row(self) -> None:
        """Test cells without a break form one row."""
        assert measure_grid([_cell(), _cell(), _cell()]) == (1, 3)

    def test_colspan_counts_columns(self) -> None:
        """Test column count is the widest row's total colspan."""
        ops = [_cell(), _cell(), ROW_BREAK, _cell(colspan=3)]
        assert measure_grid(ops) == (2, 3)

    def test_trailing_row_break_adds_no_row(self) -> None:
        """Test a break after the last cell does not open a row."""
        assert measure_grid([_cell(), ROW_BREAK]) == (1, 1)

    def test_leading_row_break_adds_empty_row(self) -> None:
        """Test a break before any cell leaves an empty first row."""
        assert measure_grid([ROW_BREAK, _cell()]) == (2, 1)

    def test_ghost_cells_occupy_no_column(self) -> None:
        """Test colspan 0 cells do not count."""
        assert measure_grid([_cell(colspan=0)]) == (0, 0)
        assert measure_grid([_cell(), _cell(colspan=0)]) == (1, 1)


class TestAggregateTracks:
    """Tests for joining cell constraints into tracks."""

    def test_column_takes_largest_preferred(self) -> None:
        """Test a column's preferred width is the widest cell in it."""
        ops = [_cell(10, 5), ROW_BREAK, _cell(30, 5)]
        tracks = aggregate_tracks(ops, 2, 1)
        assert tracks.columns[0].preferred.width == 30

    def test_row_takes_largest_preferred(self) -> None:
        """Test a row's preferred height is the tallest cell in it."""
        ops = [_cell(10, 5), _cell(10, 25)]
        tracks = aggregate_tracks(ops, 1, 2)
        assert tracks.rows[0].preferred.height == 25

    def test_spanning_cell_spreads_width(self) -> None:
        """Test a spanning cell shares its width across its columns."""
        ops = [_cell(90, 40, colspan=3)]
        tracks = aggregate_tracks(ops, 1, 3)
        assert [c.preferred.width for c in tracks.columns] == [30, 30, 30]

    def test_spanning_cell_keeps_full_height(self) -> None:
        """Test the row receives the spanning cell's undivided height."""
        ops = [_cell(90, 40, colspan=3)]
        tracks = aggregate_tracks(ops, 1, 3)
        assert tracks.rows[0].preferred.height == 40

    def test_expand_horizontal_marks_every_spanned_column(self) -> None:
        """Test expand horizontal marks all columns a cell covers."""
        ops = [_cell(), ROW_BREAK, _cell(colspan=2).expand_horizontal()]
        tracks = aggregate_tracks(ops, 2, 2)
        assert tracks.expand_columns == [True, True]
        assert tracks.expand_rows == [False, False]

    def test_expand_vertical_marks_row(self) -> None:
        """Test expand vertical marks the cell's row only."""
        ops = [_cell(), ROW_BREAK, _cell().expand_vertical()]
        tracks = aggregate_tracks(ops, 2, 1)
        assert tracks.expand_rows == [False, True]
        assert tracks.expand_columns == [False]

    def test_ghost_cells_contribute_nothing(self) -> None:
        """Test colspan 0 cells leave tracks untouched."""
        ops = [_cell(10, 10), _cell(500, 500, colspan=0).expand()]
        tracks = aggregate_tracks(ops, 1, 1)
        assert tracks.columns[0].preferred == Size(10, 10)
        assert tracks.rows[0].preferred == Size(10, 10)
        assert tracks.expand_columns == [False]
        assert tracks.expand_rows == [False]

    def test_track_views(self) -> None:
        """Test column and row tracks expose the right axis."""
        cell = _cell(20, 30).minimum_size(Size(5, 6)).expand_horizontal()
        tracks = aggregate_tracks([cell], 1, 1)
        assert tracks.column_tracks() == [Track(20, 5, True)]
        assert tracks.row_tracks() == [Track(30, 6, False)]


class TestNegotiate:
    """Tests for fitting tracks into available space."""

    def test_exact_fit_unchanged(self) -> None:
        """Test preferred sizes that fit exactly are kept."""
        result = negotiate([Track(40, 0), Track(60, 0)], 100)
        assert result == Negotiation((40, 60))

    def test_surplus_shared_among_expanding_tracks(self) -> None:
        """Test surplus is split equally between expanding tracks."""
        result = negotiate([Track(64, 0), Track(64, 0, True), Track(64, 0, True)], 320)
        assert result.sizes == (64, 128, 128)
        assert not result.overconstrained

    def test_surplus_unused_without_expanding_tracks(self) -> None:
        """Test surplus is left unused when nothing expands."""
        result = negotiate([Track(10, 0), Track(20, 0)], 100)
        assert result.sizes == (10, 20)

    def test_deficit_shrinks_proportionally_to_slack(self) -> None:
        """Test each track gives up space in proportion to its slack."""
        result = negotiate([Track(64, 0), Track(64, 0)], 32)
        assert result.sizes == (16, 16)

    def test_deficit_spares_tracks_without_slack(self) -> None:
        """Test a track at its minimum keeps its size."""
        result = negotiate([Track(32, 0), Track(32, 32)], 32)
        assert result.sizes == (0, 32)
        assert not result.overconstrained

    def test_overconstrained(self) -> None:
        """Test tracks stop at their minimum and the shortfall is reported."""
        result = negotiate([Track(64, 48), Track(64, 48)], 64, warn=False)
        assert result.sizes == (48, 48)
        assert result.shortfall == pytest.approx(32)
        assert result.overconstrained

    def test_overconstrained_without_any_slack(self) -> None:
        """Test zero total slack leaves preferred sizes and reports the deficit."""
        result = negotiate([Track(50, 50), Track(50, 50)], 60, warn=False)
        assert result.sizes == (50, 50)
        assert result.shortfall == pytest.approx(40)
        assert all(not math.isnan(size) for size in result.sizes)

    def test_negative_slack_treated_as_zero(self) -> None:
        """Test a minimum above preferred gives no slack."""
        result = negotiate([Track(10, 20), Track(40, 0)], 30, warn=False)
        assert result.sizes == (20, 20)

    def test_minimum_above_preferred_reports_overflow(self) -> None:
        """Test a track raised to its minimum counts toward the shortfall."""
        result = negotiate([Track(10, 20), Track(40, 0)], 30, warn=False)
        assert math.fsum(result.sizes) > 30
        assert result.overconstrained
        assert result.shortfall == pytest.approx(10)

    def test_surplus_leaves_non_expanding_tracks(self) -> None:
        """Test surplus never changes a non-expanding track, even below its minimum."""
        result = negotiate([Track(10, 20), Track(40, 0, True)], 100)
        assert result.sizes == (10, 50)
        assert not result.overconstrained

    def test_overconstrained_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test an over-constrained axis logs a warning naming the axis."""
        with caplog.at_level(logging.WARNING, logger="tablelayout.layout.solver"):
            negotiate([Track(50, 50)], 10, axis="height")
        assert any(
            record.levelno == logging.WARNING and "height" in record.getMessage()
            for record in caplog.records
        )

    def test_warning_can_be_disabled(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test warn=False suppresses the warning."""
        with caplog.at_level(logging.WARNING, logger="tablelayout.layout.solver"):
            negotiate([Track(50, 50)], 10, warn=False)
        assert not caplog.records

    def test_trace_logs_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test trace mode logs negotiation steps at debug level."""
        with caplog.at_level(logging.DEBUG, logger="tablelayout.layout.solver"):
            negotiate([Track(10, 0, True)], 100, trace=True)
        assert any("Surplus" in record.getMessage() for record in caplog.records)

    def test_no_tracks(self) -> None:
        """Test negotiating no tracks yields no sizes."""
        assert negotiate([], 100).sizes == ()


class TestPlaceCells:
    """Tests for placement and callback dispatch."""

    def test_cursor_advances_by_column_widths(self) -> None:
        """Test cells are placed left to right, rows top to bottom."""
        rec = Recorder()
        ops = [
            _cell().callback(rec("a")),
            _cell().callback(rec("b")),
            ROW_BREAK,
            _cell().callback(rec("c")),
        ]
        placed = place_cells(ops, [10, 20], [10, 30])
        assert placed == 3
        assert rec.rect("a") == (0, 0, 10, 10)
        assert rec.rect("b") == (10, 0, 10, 10)
        assert rec.rect("c") == (0, 10, 10, 10)

    def test_spanning_cell_gets_summed_width(self) -> None:
        """Test a spanning cell's area covers all its columns."""
        rec = Recorder()
        ops = [_cell(colspan=3).fill_horizontal().callback(rec("wide"))]
        place_cells(ops, [10, 20, 30], [10])
        assert rec.rect("wide") == (0, 0, 60, 10)

    def test_cells_without_callback_still_advance(self) -> None:
        """Test a cell without a callback still takes up its columns."""
        rec = Recorder()
        ops = [_cell(), _cell().callback(rec("b"))]
        placed = place_cells(ops, [25, 25], [10])
        assert placed == 1
        assert rec.rect("b")[0] == 25

    def test_ghost_cell_receives_empty_rect(self) -> None:
        """Test a colspan 0 cell is placed at the cursor with no size."""
        rec = Recorder()
        ops = [
            _cell().callback(rec("a")),
            _cell(50, 50, colspan=0).callback(rec("ghost")),
            _cell().callback(rec("b")),
        ]
        place_cells(ops, [10, 10], [10])
        assert rec.rect("ghost") == (10, 0, 0, 0)
        assert rec.rect("b") == (10, 0, 10, 10)

    def test_callbacks_fire_in_declaration_order(self) -> None:
        """Test callbacks are invoked exactly once each, in order."""
        rec = Recorder()
        names = ["a", "b", "c", "d"]
        ops = [
            _cell().callback(rec("a")),
            _cell(colspan=0).callback(rec("b")),
            ROW_BREAK,
            _cell().callback(rec("c")),
            _cell().callback(rec("d")),
        ]
        place_cells(ops, [10, 10], [10, 10])
        assert [name for name, _ in rec.calls] == names

    def test_single_precision_narrowing(self) -> None:
        """Test delivered values are narrowed to 32-bit floats by default."""
        rec = Recorder()
        ops = [_cell(0, 0).fill_horizontal().callback(rec("a"))]
        place_cells(ops, [1 / 3], [10])
        assert rec.rect("a")[2] == to_single(1 / 3)

        rec = Recorder()
        ops = [_cell(0, 0).fill_horizontal().callback(rec("a"))]
        place_cells(ops, [1 / 3], [10], single_precision=False)
        assert rec.rect("a")[2] == 1 / 3


class TestSolve:
    """Tests for the full solve pipeline."""

    def test_empty_layout(self) -> None:
        """Test solving nothing is a no-op."""
        report = solve([], 100, 100)
        assert report == SolveReport()
        assert report.is_empty

    def test_only_ghost_cells(self) -> None:
        """Test a layout without columns invokes no callbacks."""
        rec = Recorder()
        report = solve([_cell(colspan=0).callback(rec("ghost"))], 100, 100)
        assert report.is_empty
        assert report.placed == 0
        assert rec.calls == []

    def test_report_contents(self) -> None:
        """Test the report describes the negotiated grid."""
        ops = [_cell(64, 64), _cell(64, 64).expand_horizontal()]
        report = solve(ops, 200, 64)
        assert report.rows == 1
        assert report.columns == 2
        assert report.column_widths == (64, 136)
        assert report.row_heights == (64,)
        assert report.placed == 0
        assert report.overconstrained == ()

    def test_overconstrained_report(self) -> None:
        """Test over-constrained axes are listed in the report."""
        cell = _cell(64, 64).minimum_size(Size(48, 48))
        report = solve([cell, cell.clone()], 64, 64, warn_overconstrained=False)
        assert [entry.axis for entry in report.overconstrained] == ["width"]
        assert report.overconstrained[0].shortfall == pytest.approx(32)

    def test_overconstrained_both_axes(self) -> None:
        """Test both axes are reported when neither fits."""
        cell = _cell(64, 64).minimum_size(Size(64, 64))
        report = solve([cell], 10, 10, warn_overconstrained=False)
        assert [entry.axis for entry in report.overconstrained] == ["width", "height"]

    def test_trace_logs_matrix(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test trace mode logs the grid size."""
        with caplog.at_level(logging.DEBUG, logger="tablelayout.layout.solver"):
            solve([_cell(), ROW_BREAK, _cell()], 100, 100, trace=True)
        assert any("2x1" in record.getMessage() for record in caplog.records)

    def test_legacy_vertical_center(self) -> None:
        """Test the legacy switch centers vertically on the horizontal flag."""
        rec = Recorder()
        ops = [_cell(32, 32).expand().anchor_horizontal_center().callback(rec("a"))]
        solve(ops, 64, 64)
        solve(ops, 64, 64, legacy_vertical_center=True)
        assert rec.calls[0][1] == (16, 0, 32, 32)
        assert rec.calls[1][1] == (16, 16, 32, 32)
