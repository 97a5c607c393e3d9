"""tablelayout - Constraint-based table layout solver.

Cells are added to a TableLayout row by row with a size contract (minimum,
preferred and maximum size), placement flags and a column span. Solving the
layout for an available area negotiates column widths and row heights and
hands every cell its rectangle through a positioning callback.
"""

from tablelayout.layout import CellDefaults, LayoutBusyError, SolveReport, TableLayout
from tablelayout.models import (
    ROW_BREAK,
    UNBOUNDED,
    CellFlags,
    CellProperties,
    Size,
    SizeGrouping,
)

__version__ = "0.1.0"

__all__ = [
    "CellDefaults",
    "CellFlags",
    "CellProperties",
    "LayoutBusyError",
    "ROW_BREAK",
    "Size",
    "SizeGrouping",
    "SolveReport",
    "TableLayout",
    "UNBOUNDED",
    "__version__",
]
