"""Size negotiation and placement for table layouts.

The solve runs four strictly sequential phases over a layout's operation list:

1. Grid sizing: count rows and columns, then aggregate every cell's size
   constraints into per-row and per-column tracks.
2. Width negotiation: reconcile the preferred column widths with the
   available width.
3. Height negotiation: the same procedure applied to row heights.
4. Placement: box-fit every cell into its allocated area and invoke its
   positioning callback in declaration order.

Surplus space goes in equal shares to tracks that some cell asked to expand.
A deficit is taken from every track in proportion to its slack (preferred
minus minimum size), and no track shrinks below its minimum. When the
deficit exceeds the total slack the axis is over-constrained: the solver
still produces a layout, reports the shortfall and logs a warning.

The solver keeps no state between calls; every call builds and discards its
own working tables.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import logging
import math
import struct
from typing import NamedTuple

from tablelayout.models.base import CellFlags, LayoutOp, RowBreak, Size, SizeGrouping

logger = logging.getLogger(__name__)

# Deficits this close to the available slack count as fully absorbed
_EPSILON = 1e-6

_SINGLE = struct.Struct("<f")


def to_single(value: float) -> float:
    """Round ``value`` to the nearest IEEE-754 single precision float."""
    try:
        return _SINGLE.unpack(_SINGLE.pack(value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


class Track(NamedTuple):
    """One row or column as seen by the negotiation step."""

    preferred: float
    minimum: float
    expand: bool = False


@dataclass(frozen=True)
class Negotiation:
    """Outcome of negotiating one axis.

    Attributes:
        sizes: Negotiated size of every track, in track order
        shortfall: Part of the deficit no track could absorb (0 if none)
    """

    sizes: tuple[float, ...]
    shortfall: float = 0.0

    @property
    def overconstrained(self) -> bool:
        return self.shortfall > 0.0


@dataclass(frozen=True)
class Overconstraint:
    """An axis whose tracks could not shrink enough to fit."""

    axis: str
    shortfall: float


@dataclass(frozen=True)
class SolveReport:
    """Summary of one solve.

    Attributes:
        rows: Number of rows in the grid
        columns: Number of columns in the grid
        column_widths: Negotiated width of every column
        row_heights: Negotiated height of every row
        placed: Number of positioning callbacks invoked
        overconstrained: Axes that could not be shrunk to fit
    """

    rows: int = 0
    columns: int = 0
    column_widths: tuple[float, ...] = ()
    row_heights: tuple[float, ...] = ()
    placed: int = 0
    overconstrained: tuple[Overconstraint, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True when the layout had no columns and nothing was placed."""
        return self.columns == 0


@dataclass
class GridTracks:
    """Aggregated constraints of every row and column of a grid."""

    columns: list[SizeGrouping] = field(default_factory=list)
    rows: list[SizeGrouping] = field(default_factory=list)
    expand_columns: list[bool] = field(default_factory=list)
    expand_rows: list[bool] = field(default_factory=list)

    def column_tracks(self) -> list[Track]:
        """Width constraints of every column."""
        return [
            Track(group.preferred.width, group.minimum.width, expand)
            for group, expand in zip(self.columns, self.expand_columns)
        ]

    def row_tracks(self) -> list[Track]:
        """Height constraints of every row."""
        return [
            Track(group.preferred.height, group.minimum.height, expand)
            for group, expand in zip(self.rows, self.expand_rows)
        ]


def measure_grid(operations: Sequence[LayoutOp]) -> tuple[int, int]:
    """Calculate the number of rows and columns of a layout.

    Every row break closes a row. Cells after the last break form one more
    row, unless they all have a colspan of 0.

    Args:
        operations: The layout's operation list

    Returns:
        Tuple of (row_count, column_count)
    """
    rows = 0
    columns = 0
    cursor = 0

    for op in operations:
        if isinstance(op, RowBreak):
            columns = max(columns, cursor)
            cursor = 0
            rows += 1
        else:
            cursor += op.colspan

    if cursor > 0:
        columns = max(columns, cursor)
        rows += 1

    return rows, columns


def aggregate_tracks(operations: Sequence[LayoutOp], rows: int, columns: int) -> GridTracks:
    """Join every cell's size constraints into its row and column tracks.

    A cell spanning several columns contributes its widths divided evenly
    across them; its row receives the undivided grouping. Cells with a
    colspan of 0 contribute nothing.

    Args:
        operations: The layout's operation list
        rows: Row count from measure_grid
        columns: Column count from measure_grid

    Returns:
        The aggregated tracks and their expansion flags
    """
    tracks = GridTracks(
        columns=[SizeGrouping() for _ in range(columns)],
        rows=[SizeGrouping() for _ in range(rows)],
        expand_columns=[False] * columns,
        expand_rows=[False] * rows,
    )

    row = 0
    col = 0
    for op in operations:
        if isinstance(op, RowBreak):
            row += 1
            col = 0
            continue
        if op.colspan == 0:
            continue

        share = op.size.spread(op.colspan)
        tracks.rows[row] = tracks.rows[row].join(op.size)
        if CellFlags.EXPAND_VERTICAL in op.flags:
            tracks.expand_rows[row] = True

        for _ in range(op.colspan):
            tracks.columns[col] = tracks.columns[col].join(share)
            if CellFlags.EXPAND_HORIZONTAL in op.flags:
                tracks.expand_columns[col] = True
            col += 1

    return tracks


def negotiate(
    tracks: Sequence[Track],
    available: float,
    *,
    axis: str = "width",
    warn: bool = True,
    trace: bool = False,
) -> Negotiation:
    """Fit the preferred sizes of ``tracks`` into ``available`` space.

    Args:
        tracks: Preferred size, minimum size and expansion flag per track
        available: Space available along this axis
        axis: Axis name used in log messages
        warn: Log a warning when the axis is over-constrained
        trace: Log every negotiation step at debug level

    Returns:
        The negotiated sizes and any unabsorbed shortfall
    """
    sizes = [track.preferred for track in tracks]
    error = available - math.fsum(sizes)

    if error > 0:
        expanding = [i for i, track in enumerate(tracks) if track.expand]
        if trace:
            logger.debug(f"Surplus {axis} {error} across {len(expanding)} expanding tracks")
        if expanding:
            share = error / len(expanding)
            for i in expanding:
                sizes[i] += share
        return Negotiation(tuple(sizes))

    if error < 0:
        deficit = -error
        slack = [max(track.preferred - track.minimum, 0.0) for track in tracks]
        total_slack = math.fsum(slack)
        if trace:
            logger.debug(f"Deficit {axis} {deficit} against total slack {total_slack}")

        for i, track in enumerate(tracks):
            reduction = deficit * (slack[i] / total_slack) if total_slack > 0 else 0.0
            sizes[i] = max(track.minimum, track.preferred - reduction, 0.0)

        # Tracks raised to a minimum above their preferred size add to the overflow
        shortfall = math.fsum(sizes) - available
        if shortfall > _EPSILON:
            if warn:
                logger.warning(
                    f"Layout over-constrained along {axis}: {shortfall:.3f} "
                    f"more than the tracks can shrink"
                )
            return Negotiation(tuple(sizes), shortfall)

    return Negotiation(tuple(sizes))


def place_cells(
    operations: Sequence[LayoutOp],
    column_widths: Sequence[float],
    row_heights: Sequence[float],
    *,
    legacy_vertical_center: bool = False,
    single_precision: bool = True,
) -> int:
    """Box-fit every cell into its allocation and invoke its callback.

    Cells with a colspan of 0 are fitted into an empty area at the current
    cursor, so their callback receives ``(x, y, 0, 0)`` and the cursor does
    not move.

    Args:
        operations: The layout's operation list
        column_widths: Negotiated column widths
        row_heights: Negotiated row heights
        legacy_vertical_center: Forwarded to SizeGrouping.box_fit
        single_precision: Narrow delivered values to 32-bit floats

    Returns:
        Number of callbacks invoked
    """
    x = 0.0
    y = 0.0
    row = 0
    col = 0
    placed = 0

    for op in operations:
        height = row_heights[row] if row < len(row_heights) else 0.0

        if isinstance(op, RowBreak):
            x = 0.0
            y += height
            row += 1
            col = 0
            continue

        if op.colspan == 0:
            area = Size(0.0, 0.0)
        else:
            area = Size(math.fsum(column_widths[col : col + op.colspan]), height)
            col += op.colspan

        if op.on_position is not None:
            bx, by, bw, bh = op.size.box_fit(
                area, op.flags, legacy_vertical_center=legacy_vertical_center
            )
            rect = (x + bx, y + by, bw, bh)
            if single_precision:
                rect = tuple(to_single(value) for value in rect)
            op.on_position(*rect)
            placed += 1

        x += area.width

    return placed


def solve(
    operations: Sequence[LayoutOp],
    width: float,
    height: float,
    *,
    legacy_vertical_center: bool = False,
    single_precision: bool = True,
    warn_overconstrained: bool = True,
    trace: bool = False,
) -> SolveReport:
    """Lay out ``operations`` within a ``width`` x ``height`` area.

    Args:
        operations: Cells and row breaks in declaration order
        width: Available width
        height: Available height
        legacy_vertical_center: Forwarded to SizeGrouping.box_fit
        single_precision: Narrow delivered values to 32-bit floats
        warn_overconstrained: Log a warning for over-constrained axes
        trace: Log grid size and negotiation steps at debug level

    Returns:
        A SolveReport summarising the negotiated grid
    """
    rows, columns = measure_grid(operations)
    if columns == 0:
        logger.debug("Nothing to lay out: layout has no columns")
        return SolveReport(rows=rows)

    if trace:
        logger.debug(f"Imposing matrix: {rows}x{columns}")

    tracks = aggregate_tracks(operations, rows, columns)
    widths = negotiate(
        tracks.column_tracks(), width, axis="width", warn=warn_overconstrained, trace=trace
    )
    heights = negotiate(
        tracks.row_tracks(), height, axis="height", warn=warn_overconstrained, trace=trace
    )

    placed = place_cells(
        operations,
        widths.sizes,
        heights.sizes,
        legacy_vertical_center=legacy_vertical_center,
        single_precision=single_precision,
    )

    overconstrained = tuple(
        Overconstraint(axis, result.shortfall)
        for axis, result in (("width", widths), ("height", heights))
        if result.overconstrained
    )
    return SolveReport(
        rows=rows,
        columns=columns,
        column_widths=widths.sizes,
        row_heights=heights.sizes,
        placed=placed,
        overconstrained=overconstrained,
    )
