"""Core data types for tablelayout.

This module defines the value types every layout is built from:
- Size: A width/height pair
- SizeGrouping: Minimum, preferred and maximum sizes for a cell or track
- CellFlags: Placement directives (expand, fill, anchor, uniform)
- CellProperties: One cell's full contract, with a fluent builder
- RowBreak / LayoutOp: The instruction list a TableLayout records
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Flag
import math
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from tablelayout.layout.table import TableLayout

PositioningFn = Callable[[float, float, float, float], None]
"""Receives the solved ``x``, ``y``, ``width`` and ``height`` of one cell."""


@dataclass(frozen=True)
class Size:
    """Individual size constraint for a cell.

    Attributes:
        width: Horizontal extent
        height: Vertical extent
    """

    width: float = 0.0
    height: float = 0.0

    def max(self, other: Size) -> Size:
        """Component-wise maximum of two sizes."""
        return Size(max(self.width, other.width), max(self.height, other.height))

    def min(self, other: Size) -> Size:
        """Component-wise minimum of two sizes."""
        return Size(min(self.width, other.width), min(self.height, other.height))

    def spread(self, divisions: float) -> Size:
        """Divide the width across ``divisions`` columns.

        Column spans only split a cell horizontally, so the height is
        returned unchanged.

        Args:
            divisions: Number of columns sharing this size

        Returns:
            A new Size with the width divided

        Raises:
            ValueError: If divisions is not positive
        """
        if divisions <= 0:
            raise ValueError(f"Cannot spread a size across {divisions} columns")
        return Size(self.width / divisions, self.height)

    def within(self, other: Size) -> bool:
        """Return whether this size fits strictly inside ``other``."""
        return other.width > self.width and other.height > self.height

    def as_tuple(self) -> tuple[float, float]:
        return (self.width, self.height)


UNBOUNDED = Size(math.inf, math.inf)


@dataclass(frozen=True)
class SizeGrouping:
    """Combines the minimum, preferred and maximum sizes for a cell.

    The solver assumes ``minimum <= preferred <= maximum`` component-wise
    but does not enforce it.
    """

    minimum: Size = field(default_factory=Size)
    preferred: Size = field(default_factory=Size)
    maximum: Size = UNBOUNDED

    def join(self, other: SizeGrouping) -> SizeGrouping:
        """Aggregate two groupings sharing a track.

        The joined grouping takes the larger minimum and preferred sizes and
        the smaller maximum size.
        """
        return SizeGrouping(
            minimum=self.minimum.max(other.minimum),
            preferred=self.preferred.max(other.preferred),
            maximum=self.maximum.min(other.maximum),
        )

    def spread(self, divisions: float) -> SizeGrouping:
        """Share this grouping across ``divisions`` columns (widths only)."""
        return SizeGrouping(
            minimum=self.minimum.spread(divisions),
            preferred=self.preferred.spread(divisions),
            maximum=self.maximum.spread(divisions),
        )

    def box_fit(
        self,
        area: Size,
        flags: CellFlags,
        *,
        legacy_vertical_center: bool = False,
    ) -> tuple[float, float, float, float]:
        """Fit a box with these constraints into ``area``.

        Fill flags let the box grow up to its maximum size, otherwise it keeps
        its preferred size; either way it never exceeds the area. Anchor flags
        then choose where the box sits inside the area.

        Args:
            area: The track area allocated to the cell
            flags: The cell's placement flags
            legacy_vertical_center: Test AnchorHorizontalCenter instead of
                AnchorVerticalCenter when centering vertically

        Returns:
            Tuple of (x offset, y offset, width, height) relative to the area
        """
        if CellFlags.FILL_HORIZONTAL in flags:
            width = min(self.maximum.width, area.width)
        else:
            width = min(self.preferred.width, area.width)

        if CellFlags.FILL_VERTICAL in flags:
            height = min(self.maximum.height, area.height)
        else:
            height = min(self.preferred.height, area.height)

        if CellFlags.ANCHOR_RIGHT in flags:
            x = area.width - width
        elif CellFlags.ANCHOR_HORIZONTAL_CENTER in flags:
            x = (area.width - width) / 2.0
        else:
            x = 0.0

        vertical_center = (
            CellFlags.ANCHOR_HORIZONTAL_CENTER
            if legacy_vertical_center
            else CellFlags.ANCHOR_VERTICAL_CENTER
        )
        if CellFlags.ANCHOR_BOTTOM in flags:
            y = area.height - height
        elif vertical_center in flags:
            y = (area.height - height) / 2.0
        else:
            y = 0.0

        return (x, y, width, height)


class CellFlags(Flag):
    """Placement directives for a cell.

    Expand flags mark the cell's tracks as wanting surplus space. Fill flags
    let the cell's own box grow inside its track. Anchor flags position the
    box when it is smaller than its track; top and left are the default.
    """

    NONE = 0
    EXPAND_HORIZONTAL = 0x0001
    EXPAND_VERTICAL = 0x0002
    FILL_HORIZONTAL = 0x0004
    FILL_VERTICAL = 0x0008
    ANCHOR_TOP = 0x0010
    ANCHOR_BOTTOM = 0x0020
    ANCHOR_LEFT = 0x0040
    ANCHOR_RIGHT = 0x0080
    ANCHOR_HORIZONTAL_CENTER = 0x0100
    ANCHOR_VERTICAL_CENTER = 0x0200
    # Reserved for equal sizing; the solver ignores it.
    UNIFORM = 0x0400

    EXPAND = 0x0003
    FILL = 0x000C
    ANCHOR_CENTER = 0x0300


@dataclass(eq=False)
class CellProperties:
    """Encapsulates all properties for a cell.

    The positioning callback is owned by exactly one cell. Copying a
    CellProperties (``clone()``, ``copy.copy`` or ``copy.deepcopy``) always
    drops it, so defaults templates can never carry a callback.

    Attributes:
        size: Desired sizes for this cell
        flags: Placement flags
        colspan: Number of columns occupied; 0 makes an inert cell
        on_position: Callback receiving the solved rectangle
    """

    size: SizeGrouping = field(default_factory=SizeGrouping)
    flags: CellFlags = CellFlags.NONE
    colspan: int = 1
    on_position: PositioningFn | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.colspan < 0:
            raise ValueError(f"colspan must be non-negative, got {self.colspan}")

    @classmethod
    def with_defaults(cls, layout: TableLayout) -> CellProperties:
        """Inherit the defaults for the next cell added to ``layout``.

        Column defaults win over row defaults, which win over the global
        cell defaults. The result is only meaningful if the cell is added
        next and the defaults are not changed in between.
        """
        return layout.next_cell()

    def clone(self) -> CellProperties:
        """Copy these properties without the positioning callback."""
        return CellProperties(size=self.size, flags=self.flags, colspan=self.colspan)

    def __copy__(self) -> CellProperties:
        return self.clone()

    def __deepcopy__(self, memo: dict[int, object]) -> CellProperties:
        return self.clone()

    @property
    def is_ghost(self) -> bool:
        """True when the cell occupies no column."""
        return self.colspan == 0

    # Fluent builder

    def minimum_size(self, minimum: Size) -> CellProperties:
        self.size = replace(self.size, minimum=minimum)
        return self

    def maximum_size(self, maximum: Size) -> CellProperties:
        self.size = replace(self.size, maximum=maximum)
        return self

    def preferred_size(self, preferred: Size) -> CellProperties:
        self.size = replace(self.size, preferred=preferred)
        return self

    def with_flags(self, flags: CellFlags) -> CellProperties:
        """OR ``flags`` into this cell's flags."""
        self.flags |= flags
        return self

    def expand(self) -> CellProperties:
        return self.with_flags(CellFlags.EXPAND)

    def expand_horizontal(self) -> CellProperties:
        return self.with_flags(CellFlags.EXPAND_HORIZONTAL)

    def expand_vertical(self) -> CellProperties:
        return self.with_flags(CellFlags.EXPAND_VERTICAL)

    def fill(self) -> CellProperties:
        return self.with_flags(CellFlags.FILL)

    def fill_horizontal(self) -> CellProperties:
        return self.with_flags(CellFlags.FILL_HORIZONTAL)

    def fill_vertical(self) -> CellProperties:
        return self.with_flags(CellFlags.FILL_VERTICAL)

    def anchor_top(self) -> CellProperties:
        return self.with_flags(CellFlags.ANCHOR_TOP)

    def anchor_bottom(self) -> CellProperties:
        return self.with_flags(CellFlags.ANCHOR_BOTTOM)

    def anchor_left(self) -> CellProperties:
        return self.with_flags(CellFlags.ANCHOR_LEFT)

    def anchor_right(self) -> CellProperties:
        return self.with_flags(CellFlags.ANCHOR_RIGHT)

    def anchor_center(self) -> CellProperties:
        return self.with_flags(CellFlags.ANCHOR_CENTER)

    def anchor_horizontal_center(self) -> CellProperties:
        return self.with_flags(CellFlags.ANCHOR_HORIZONTAL_CENTER)

    def anchor_vertical_center(self) -> CellProperties:
        return self.with_flags(CellFlags.ANCHOR_VERTICAL_CENTER)

    def uniform(self) -> CellProperties:
        return self.with_flags(CellFlags.UNIFORM)

    def span(self, columns: int) -> CellProperties:
        """Set how many columns this cell occupies."""
        if columns < 0:
            raise ValueError(f"colspan must be non-negative, got {columns}")
        self.colspan = columns
        return self

    def callback(self, fn: PositioningFn) -> CellProperties:
        """Register the positioning callback for this cell."""
        self.on_position = fn
        return self


class RowBreak:
    """Ends the current row of a layout."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "RowBreak()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RowBreak)

    def __hash__(self) -> int:
        return hash(RowBreak)


ROW_BREAK = RowBreak()

LayoutOp = Union[CellProperties, RowBreak]
"""One entry of a layout's append-only instruction list."""
