"""YAML layout documents.

A layout document declares a table as rows of cell specs, plus optional
default templates:

    defaults:
      cell: {preferred: [32, 32]}
      columns: {0: {flags: [anchor_right]}}
    rows:
      - - {name: a, preferred: [64, 64], flags: [anchor_right]}
        - {name: b, preferred: [64, 64], flags: [expand_horizontal]}
      - - {name: footer, colspan: 2, flags: [expand_vertical, fill_horizontal]}

Fields a cell spec leaves out are inherited from the defaults that apply at
the cell's position (column, then row, then the global template).
"""

from __future__ import annotations

from collections.abc import Callable
from functools import reduce
import operator
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tablelayout.config.loader import SolverConfig, format_validation_error, read_yaml
from tablelayout.layout.table import CellDefaults, TableLayout
from tablelayout.models.base import CellFlags, CellProperties, PositioningFn, Size

# Flag names accepted in documents, including the combined builder shortcuts
FLAG_NAMES: dict[str, CellFlags] = {
    name.lower(): member for name, member in CellFlags.__members__.items() if name != "NONE"
}

VALID_DOCUMENT_KEYS: dict[tuple[str, ...], set[str]] = {
    (): {"defaults", "rows"},
    ("defaults",): {"cell", "rows", "columns"},
}

Pair = tuple[float, float]


class CellSpec(BaseModel):
    """One cell as written in a layout document."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    minimum: Pair | None = None
    preferred: Pair | None = None
    maximum: Pair | None = None
    flags: list[str] | None = None
    colspan: int | None = Field(default=None, ge=0)

    @field_validator("flags")
    @classmethod
    def validate_flags(cls, v: list[str] | None) -> list[str] | None:
        """Normalize flag names and reject unknown ones."""
        if v is None:
            return v
        normalized = [name.strip().lower().replace("-", "_") for name in v]
        unknown = [name for name in normalized if name not in FLAG_NAMES]
        if unknown:
            raise ValueError(
                f"Unknown flag(s) {', '.join(unknown)}; "
                f"expected any of: {', '.join(sorted(FLAG_NAMES))}"
            )
        return normalized

    def cell_flags(self) -> CellFlags:
        members = (FLAG_NAMES[name] for name in self.flags or ())
        return reduce(operator.or_, members, CellFlags.NONE)

    def apply(self, base: CellProperties) -> CellProperties:
        """Overlay the fields set in this spec onto ``base``."""
        if self.minimum is not None:
            base.minimum_size(Size(*self.minimum))
        if self.preferred is not None:
            base.preferred_size(Size(*self.preferred))
        if self.maximum is not None:
            base.maximum_size(Size(*self.maximum))
        if self.flags is not None:
            base.flags = self.cell_flags()
        if self.colspan is not None:
            base.span(self.colspan)
        return base


class DefaultsSpec(BaseModel):
    """Default templates of a layout document."""

    model_config = ConfigDict(extra="forbid")

    cell: CellSpec | None = None
    rows: dict[int, CellSpec] = Field(default_factory=dict)
    columns: dict[int, CellSpec] = Field(default_factory=dict)

    def build(self) -> CellDefaults:
        defaults = CellDefaults()
        if self.cell is not None:
            defaults.set_cell(self.cell.apply(CellProperties()))
        for row, spec in self.rows.items():
            defaults.set_row(row, spec.apply(CellProperties()))
        for column, spec in self.columns.items():
            defaults.set_column(column, spec.apply(CellProperties()))
        return defaults


class LayoutDocument(BaseModel):
    """A whole table: defaults plus rows of cells."""

    model_config = ConfigDict(extra="forbid")

    defaults: DefaultsSpec = Field(default_factory=DefaultsSpec)
    rows: list[list[CellSpec]] = Field(default_factory=list)

    def cell_names(self) -> list[str]:
        """Names of all cells in declaration order.

        Unnamed cells are called ``cell<N>`` after their declaration index.
        """
        names: list[str] = []
        for row in self.rows:
            for spec in row:
                names.append(spec.name or f"cell{len(names)}")
        return names

    def build(
        self,
        settings: SolverConfig | None = None,
        callback_factory: Callable[[int, str], PositioningFn] | None = None,
    ) -> TableLayout:
        """Create a TableLayout from this document.

        Args:
            settings: Solver switches for the new layout
            callback_factory: Called with each cell's declaration index and
                name; the returned function becomes the cell's callback

        Returns:
            The populated layout
        """
        layout = TableLayout(settings=settings, defaults=self.defaults.build())
        names = self.cell_names()
        index = 0
        for row_index, row in enumerate(self.rows):
            if row_index > 0:
                layout.add_row()
            for spec in row:
                cell = spec.apply(layout.next_cell())
                if callback_factory is not None:
                    cell.callback(callback_factory(index, names[index]))
                layout.add_cell(cell)
                index += 1
        return layout


def parse_document(data: dict[str, Any], file_path: str | None = None) -> LayoutDocument:
    """Validate raw document data.

    Raises:
        ConfigValidationError: If the data does not describe a valid layout
    """
    try:
        return LayoutDocument.model_validate(data)
    except ValidationError as e:
        raise format_validation_error(e, data, file_path, VALID_DOCUMENT_KEYS) from e


def load_document(path: str | Path) -> LayoutDocument:
    """Read and validate a layout document from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigSyntaxError: If the file is not valid YAML
        ConfigValidationError: If the file does not describe a valid layout
    """
    path = Path(path).expanduser()
    return parse_document(read_yaml(path), str(path))
