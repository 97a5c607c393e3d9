"""Data models for tablelayout.

This module exports the value types layouts are built from:
- Size, SizeGrouping: Size constraints for cells and tracks
- CellFlags: Placement directives
- CellProperties: A cell's full contract plus its fluent builder
- RowBreak, ROW_BREAK, LayoutOp: Entries of a layout's instruction list
"""

from tablelayout.models.base import (
    ROW_BREAK,
    UNBOUNDED,
    CellFlags,
    CellProperties,
    LayoutOp,
    PositioningFn,
    RowBreak,
    Size,
    SizeGrouping,
)

__all__ = [
    "CellFlags",
    "CellProperties",
    "LayoutOp",
    "PositioningFn",
    "ROW_BREAK",
    "RowBreak",
    "Size",
    "SizeGrouping",
    "UNBOUNDED",
]
