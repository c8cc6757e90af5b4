"""Process-wide grid constants.

The grid has a fixed column count, rows of fixed height and a small set
of allowed field widths. Positions are normalized horizontally (x in
[0, 1)) and measured in pointer units vertically (y = row * row_height).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FieldWidth(str, Enum):
    """Named field widths on the 6-column grid."""

    THIRD = "third"  # 2 cols
    HALF = "half"  # 3 cols
    TWO_THIRDS = "two_thirds"  # 4 cols
    FULL = "full"  # 6 cols


FIELD_WIDTH_COLUMNS: dict[FieldWidth, int] = {
    FieldWidth.THIRD: 2,
    FieldWidth.HALF: 3,
    FieldWidth.TWO_THIRDS: 4,
    FieldWidth.FULL: 6,
}


@dataclass(frozen=True)
class GridConstants:
    columns: int = 6
    row_height: float = 70.0
    max_rows: int = 12
    # Ascending; resize steps walk this list
    widths: tuple[float, ...] = (2 / 6, 3 / 6, 4 / 6, 6 / 6)

    # Pointer distance (pixels) before a press turns into a drag
    drag_threshold: float = 40.0
    # Pointer distance (pixels) for snapping a free position to a grid slot
    magnetic_snap_threshold: float = 30.0
    # Fraction of container width a resize drag must accumulate per step
    accumulation_threshold: float = 0.1
    # Normalized distance within which a resized edge snaps to a neighbour
    resize_snap_distance: float = 0.15
    # Row free space (fraction) worth filling during auto-expand
    significant_gap_threshold: float = 0.05
    # Width changes smaller than this are ignored
    width_change_threshold: float = 0.01
    # Tolerance when matching a float width against the discrete set
    width_tolerance: float = 1e-3
    epsilon: float = 1e-9

    @property
    def column_width(self) -> float:
        return 1.0 / self.columns

    @property
    def full_width(self) -> float:
        return self.widths[-1]

    def width_for(self, size: FieldWidth | str) -> float:
        """Normalized width for a named size."""
        return FIELD_WIDTH_COLUMNS[FieldWidth(size)] / self.columns


GRID = GridConstants()
