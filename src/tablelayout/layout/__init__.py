"""Layout components for tablelayout.

This module provides:
- TableLayout: The cell/row instruction list and its solve entry point
- CellDefaults: Column, row and global default cell templates
- The solver phases (grid sizing, negotiation, placement) and SolveReport
- LayoutDocument: YAML layout descriptions for the command line
"""

from tablelayout.layout.document import LayoutDocument, load_document, parse_document
from tablelayout.layout.solver import (
    GridTracks,
    Negotiation,
    Overconstraint,
    SolveReport,
    Track,
    aggregate_tracks,
    measure_grid,
    negotiate,
    place_cells,
    solve,
)
from tablelayout.layout.table import CellDefaults, LayoutBusyError, TableLayout

__all__ = [
    "CellDefaults",
    "GridTracks",
    "LayoutBusyError",
    "LayoutDocument",
    "Negotiation",
    "Overconstraint",
    "SolveReport",
    "TableLayout",
    "Track",
    "aggregate_tracks",
    "load_document",
    "measure_grid",
    "negotiate",
    "parse_document",
    "place_cells",
    "solve",
]
