"""Table layout description and solving.

A TableLayout records an append-only list of cells and row breaks together
with a cursor tracking where the next cell would land. Solving it computes a
rectangle for every cell and hands each one to the cell's callback.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from tablelayout.config.loader import SolverConfig
from tablelayout.layout.solver import SolveReport, measure_grid, solve
from tablelayout.models.base import ROW_BREAK, CellProperties, LayoutOp


class LayoutBusyError(RuntimeError):
    """Raised when a layout is modified from inside one of its own callbacks."""

    pass


@dataclass
class CellDefaults:
    """Default cell properties looked up by grid position.

    Lookups try the column tier first, then the row tier, then the global
    cell template. Templates are stored and returned as clones, so no
    positioning callback is ever shared.

    Attributes:
        cell: Fallback template for every position
        rows: Templates keyed by row index
        columns: Templates keyed by column index
    """

    cell: CellProperties = field(default_factory=CellProperties)
    rows: dict[int, CellProperties] = field(default_factory=dict)
    columns: dict[int, CellProperties] = field(default_factory=dict)

    def lookup(self, row: int, column: int) -> CellProperties:
        """Return a fresh copy of the defaults for ``(row, column)``."""
        template = self.columns.get(column)
        if template is None:
            template = self.rows.get(row, self.cell)
        return template.clone()

    def set_cell(self, properties: CellProperties) -> None:
        self.cell = properties.clone()

    def set_row(self, row: int, properties: CellProperties) -> None:
        self.rows[row] = properties.clone()

    def set_column(self, column: int, properties: CellProperties) -> None:
        self.columns[column] = properties.clone()

    def reset(self) -> None:
        """Restore factory defaults for all three tiers."""
        self.cell = CellProperties()
        self.rows.clear()
        self.columns.clear()


class TableLayout:
    """Declarative table of cells, solved into rectangles on demand.

    Example:
        ```python
        layout = TableLayout()
        layout.add_cell(CellProperties().preferred_size(Size(64, 64)).callback(place))
        layout.add_row()
        layout.add_cell(CellProperties().span(2).fill_horizontal().callback(place))
        layout.solve(320, 240)
        ```
    """

    def __init__(
        self,
        settings: SolverConfig | None = None,
        defaults: CellDefaults | None = None,
    ) -> None:
        """Initialize an empty layout.

        Args:
            settings: Solver switches; defaults to SolverConfig()
            defaults: Default cell templates; a fresh CellDefaults if omitted
        """
        self.settings = settings if settings is not None else SolverConfig()
        self.defaults = defaults if defaults is not None else CellDefaults()
        self._operations: list[LayoutOp] = []
        self._row = 0
        self._column = 0
        self._solving = False

    @property
    def operations(self) -> tuple[LayoutOp, ...]:
        """The recorded cells and row breaks (read-only view)."""
        return tuple(self._operations)

    @property
    def row(self) -> int:
        """Row the next cell would be added to."""
        return self._row

    @property
    def column(self) -> int:
        """Column the next cell would start at."""
        return self._column

    def __len__(self) -> int:
        return len(self._operations)

    def __iter__(self) -> Iterator[LayoutOp]:
        return iter(self._operations)

    def _check_not_solving(self) -> None:
        if self._solving:
            raise LayoutBusyError("Cannot modify a layout while it is being solved")

    def add_cell(self, properties: CellProperties) -> TableLayout:
        """Hand a cell off to the layout.

        The layout records a copy of ``properties`` and moves the callback
        into it, leaving ``properties`` without one. Adding the same object
        again therefore adds a cell with no callback, and later changes to
        ``properties`` do not affect the recorded cell.

        Args:
            properties: The cell; the layout takes ownership of its callback

        Returns:
            This layout, for chaining
        """
        self._check_not_solving()
        if not isinstance(properties, CellProperties):
            raise TypeError(f"Expected CellProperties, got {type(properties).__name__}")
        cell = properties.clone()
        cell.on_position, properties.on_position = properties.on_position, None
        self._operations.append(cell)
        self._column += cell.colspan
        return self

    def add_row(self) -> TableLayout:
        """Start a new row."""
        self._check_not_solving()
        self._operations.append(ROW_BREAK)
        self._row += 1
        self._column = 0
        return self

    def clear(self) -> None:
        """Remove all cells and rows. Row and column defaults are kept."""
        self._check_not_solving()
        self._operations.clear()
        self._row = 0
        self._column = 0

    def full_clear(self) -> None:
        """Remove all cells and rows and reset every default to factory values."""
        self.clear()
        self.defaults.reset()

    def next_cell(self) -> CellProperties:
        """Defaults for a cell added at the current cursor position."""
        return self.defaults.lookup(self._row, self._column)

    def rows_columns(self) -> tuple[int, int]:
        """Number of rows and columns in this layout."""
        return measure_grid(self._operations)

    def solve(self, width: float, height: float) -> SolveReport:
        """Compute every cell's rectangle within ``width`` x ``height``.

        Callbacks run synchronously, in declaration order, on the calling
        thread. The solve starts from scratch each time, so repeated calls
        with the same input produce the same output.

        Args:
            width: Available width
            height: Available height

        Returns:
            SolveReport describing the negotiated grid
        """
        self._check_not_solving()
        self._solving = True
        try:
            return solve(
                self._operations,
                width,
                height,
                legacy_vertical_center=self.settings.legacy_vertical_center,
                single_precision=self.settings.single_precision,
                warn_overconstrained=self.settings.warn_overconstrained,
                trace=self.settings.trace,
            )
        finally:
            self._solving = False
