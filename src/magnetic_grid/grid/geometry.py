"""Conversions between normalized layout coordinates and grid cells.

All functions are pure and total: out-of-range input is clamped, never
rejected.
"""

from __future__ import annotations

import math
from typing import NamedTuple

from magnetic_grid.grid.constants import GRID, GridConstants
from magnetic_grid.grid.models import FieldPlacement, Position


class GridCell(NamedTuple):
    row: int
    column: int


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def row_of(y: float, grid: GridConstants = GRID) -> int:
    """Row index containing pixel offset ``y``."""
    if not math.isfinite(y):
        return 0
    return _clamp(math.floor(y / grid.row_height + grid.epsilon), 0, grid.max_rows - 1)


def column_of(x: float, grid: GridConstants = GRID) -> int:
    """Column index containing normalized offset ``x``."""
    if not math.isfinite(x):
        return 0
    return _clamp(math.floor(x * grid.columns + grid.epsilon), 0, grid.columns - 1)


def column_span(width: float, start_column: int = 0, grid: GridConstants = GRID) -> int:
    """Number of columns a field of ``width`` covers from ``start_column``."""
    if not math.isfinite(width) or width <= 0:
        return 1
    span = math.ceil(width * grid.columns - grid.width_tolerance)
    start_column = _clamp(start_column, 0, grid.columns - 1)
    return _clamp(span, 1, grid.columns - start_column)


def normalized_x(column: int, grid: GridConstants = GRID) -> float:
    return _clamp(column, 0, grid.columns) / grid.columns


def row_y(row: int, grid: GridConstants = GRID) -> float:
    return _clamp(row, 0, grid.max_rows - 1) * grid.row_height


def grid_cell(position: Position, grid: GridConstants = GRID) -> GridCell:
    return GridCell(row=row_of(position.y, grid), column=column_of(position.x, grid))


def width_index(width: float, grid: GridConstants = GRID) -> int | None:
    """Index of ``width`` in the discrete width set, or None if it is not one."""
    for i, candidate in enumerate(grid.widths):
        if abs(candidate - width) <= grid.width_tolerance:
            return i
    return None


def is_allowed_width(width: float, grid: GridConstants = GRID) -> bool:
    return width_index(width, grid) is not None


def snap_width(width: float, grid: GridConstants = GRID) -> float:
    """Nearest discrete width; the narrower one wins a tie."""
    closest = grid.widths[0]
    best = abs(width - closest)
    for candidate in grid.widths:
        diff = abs(width - candidate)
        if diff < best - grid.epsilon:
            best = diff
            closest = candidate
    return closest


def largest_width_at_most(limit: float, grid: GridConstants = GRID, *, exclude: float | None = None) -> float | None:
    """Widest discrete width that is <= ``limit`` (optionally != ``exclude``)."""
    for candidate in reversed(grid.widths):
        if candidate > limit + grid.width_tolerance:
            continue
        if exclude is not None and abs(candidate - exclude) <= grid.width_tolerance:
            continue
        return candidate
    return None


def magnetic_snap_position(position: Position, grid: GridConstants = GRID) -> Position:
    """Nearest grid slot to a free-floating position (rounded row and column)."""
    row = _clamp(round(position.y / grid.row_height), 0, grid.max_rows - 1)
    column = _clamp(round(position.x * grid.columns), 0, grid.columns - 1)
    return Position(x=column / grid.columns, y=row * grid.row_height)


def describe(placement: FieldPlacement, grid: GridConstants = GRID) -> str:
    """Human-readable grid location, e.g. 'Row 1, Columns 0-2, Width 50%'."""
    if not placement.is_visible:
        return "hidden"
    row = row_of(placement.position.y, grid)
    start = column_of(placement.position.x, grid)
    span = column_span(placement.width, start, grid)
    return f"Row {row}, Columns {start}-{start + span - 1}, Width {int(round(placement.width * 100))}%"
