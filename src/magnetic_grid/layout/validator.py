"""Validation for committed layouts.

Checks that widths come from the discrete set, fields stay inside the
grid, rows are aligned, and no two visible fields in a row overlap.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from magnetic_grid.grid.collision import first_collision
from magnetic_grid.grid.constants import GRID, GridConstants
from magnetic_grid.grid.geometry import describe, is_allowed_width, row_of
from magnetic_grid.grid.models import Layout, ordered


@dataclass
class ValidationResult:
    """Result of layout validation."""

    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)
        self.valid = False

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_layout(layout: Layout, grid: GridConstants = GRID) -> ValidationResult:
    """Validate a committed layout.

    Args:
        layout: Mapping of field id to placement.
        grid: Grid constants to validate against.

    Returns:
        ValidationResult with errors and warnings.
    """
    result = ValidationResult()
    reported: set[frozenset[str]] = set()

    for placement in ordered(layout):
        prefix = f"Field '{placement.id}'"

        if placement.id not in layout or layout[placement.id] is not placement:
            result.add_error(f"{prefix}: stored under a different key.")

        if not placement.is_visible:
            result.add_warning(f"{prefix}: hidden.")
            continue

        if not is_allowed_width(placement.width, grid):
            result.add_error(f"{prefix}: width {placement.width:.4f} is not an allowed width.")

        if placement.right > 1.0 + grid.epsilon:
            result.add_error(f"{prefix}: extends beyond the grid (x + width = {placement.right:.4f}).")

        rows = placement.position.y / grid.row_height
        if abs(rows - round(rows)) > grid.width_tolerance:
            result.add_error(f"{prefix}: y={placement.position.y} is not aligned to the row height.")

        if round(rows) > grid.max_rows - 1:
            result.add_error(f"{prefix}: row {round(rows)} exceeds the last row ({grid.max_rows - 1}).")

        other = first_collision(placement, layout, placement.id, grid)
        if other is not None:
            pair = frozenset((placement.id, other))
            if pair not in reported:
                reported.add(pair)
                result.add_error(
                    f"{prefix}: overlaps '{other}' in row {row_of(placement.position.y, grid)} "
                    f"({describe(placement, grid)})."
                )

    return result
