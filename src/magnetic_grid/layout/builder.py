"""Fluent builder API for composing layouts."""

from __future__ import annotations

from dataclasses import dataclass

from magnetic_grid.exceptions import LayoutDefinitionError, LayoutValidationError
from magnetic_grid.grid.collision import find_next_available_position
from magnetic_grid.grid.constants import GRID, FieldWidth, GridConstants
from magnetic_grid.grid.geometry import normalized_x, row_y
from magnetic_grid.grid.models import FieldPlacement, Layout
from magnetic_grid.layout.validator import validate_layout


@dataclass
class _PendingField:
    field_id: str
    width: float
    row: int | None = None
    column: int | None = None
    hidden: bool = False


class LayoutBuilder:
    """Fluent API for building layouts step by step.

    Fields given an explicit row are placed first; the rest are placed
    in declaration order on the first free slot, scanning rows top-down
    and columns left to right.

    Usage:
        layout = (
            LayoutBuilder()
            .field("name", "full")
            .field("email", "half")
            .field("phone", "half")
            .field("notes", "two_thirds", row=3, column=0)
            .hidden("fax")
            .build()
        )
    """

    def __init__(self, grid: GridConstants = GRID):
        self._grid = grid
        self._fields: list[_PendingField] = []

    def _width(self, size: FieldWidth | str | float) -> float:
        if isinstance(size, (int, float)):
            return float(size)
        try:
            return self._grid.width_for(size)
        except (ValueError, KeyError) as e:
            valid = ", ".join(w.value for w in FieldWidth)
            raise LayoutDefinitionError(f"Unknown width '{size}'. Must be one of: {valid}") from e

    def field(
        self,
        field_id: str,
        size: FieldWidth | str | float = FieldWidth.FULL,
        *,
        row: int | None = None,
        column: int | None = None,
    ) -> LayoutBuilder:
        """Add a field; ``row``/``column`` pin it, otherwise it is auto-placed."""
        if column is not None and row is None:
            raise LayoutDefinitionError(f"Field '{field_id}': column given without row")
        self._fields.append(_PendingField(field_id, self._width(size), row, column))
        return self

    def row(self, *fields: tuple[str, FieldWidth | str | float]) -> LayoutBuilder:
        """Add fields side by side on the row after the last pinned row."""
        row = 1 + max((f.row for f in self._fields if f.row is not None), default=-1)
        column = 0
        for field_id, size in fields:
            width = self._width(size)
            self._fields.append(_PendingField(field_id, width, row, column))
            column += round(width * self._grid.columns)
        return self

    def hidden(self, field_id: str) -> LayoutBuilder:
        """Register a field that starts toggled off."""
        self._fields.append(_PendingField(field_id, 0.0, hidden=True))
        return self

    def build(self, validate: bool = True) -> Layout:
        """Place all fields and return the layout.

        Raises:
            LayoutDefinitionError: duplicate ids or a bad pin.
            LayoutValidationError: the resulting layout overlaps or leaves the grid.
        """
        ids = [f.field_id for f in self._fields]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise LayoutDefinitionError(f"Duplicate field ids: {', '.join(duplicates)}")

        layout: Layout = {}
        for f in self._fields:
            if f.hidden:
                layout[f.field_id] = FieldPlacement.hidden(f.field_id)
            elif f.row is not None:
                layout[f.field_id] = FieldPlacement.at(
                    f.field_id,
                    x=normalized_x(f.column or 0, self._grid),
                    y=row_y(f.row, self._grid),
                    width=f.width,
                )

        for f in self._fields:
            if f.hidden or f.row is not None:
                continue
            position = find_next_available_position(f.width, layout, f.field_id, grid=self._grid)
            layout[f.field_id] = FieldPlacement.at(f.field_id, x=position.x, y=position.y, width=f.width)

        ordered_layout = {fid: layout[fid] for fid in ids}
        if validate:
            result = validate_layout(ordered_layout, self._grid)
            if not result.valid:
                raise LayoutValidationError(result.errors)
        return ordered_layout


def demo_layout() -> Layout:
    """Five-field contact form used by the CLI ``init`` command and tests."""
    return (
        LayoutBuilder()
        .field("field1", "full", row=0)
        .row(("field2", "half"), ("field3", "third"))
        .row(("field4", "two_thirds"), ("field5", "third"))
        .build()
    )
