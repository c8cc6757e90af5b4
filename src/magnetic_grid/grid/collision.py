"""Overlap detection and row occupancy queries.

Overlap is decided on real coordinate intervals, not on rounded column
indices, so two fields whose edges touch (``a.x + a.width == b.x``) never
collide.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from magnetic_grid.grid.constants import GRID, GridConstants
from magnetic_grid.grid.geometry import column_of, column_span, normalized_x, row_of, row_y
from magnetic_grid.grid.models import FieldPlacement, Layout, Position

logger = logging.getLogger(__name__)


def intervals_overlap(a_start: float, a_end: float, b_start: float, b_end: float, eps: float = GRID.epsilon) -> bool:
    return not (a_end <= b_start + eps or a_start >= b_end - eps)


def overlaps(
    candidate: FieldPlacement,
    placements: Mapping[str, FieldPlacement],
    exclude_id: str | None = None,
    grid: GridConstants = GRID,
) -> bool:
    """True if ``candidate`` overlaps any visible placement in its row."""
    return first_collision(candidate, placements, exclude_id, grid) is not None


def first_collision(
    candidate: FieldPlacement,
    placements: Mapping[str, FieldPlacement],
    exclude_id: str | None = None,
    grid: GridConstants = GRID,
) -> str | None:
    """Id of the first placement ``candidate`` collides with, if any."""
    if not candidate.is_visible:
        return None
    row = row_of(candidate.position.y, grid)
    start, end = candidate.position.x, candidate.right
    for field_id in sorted(placements):
        if field_id == exclude_id:
            continue
        other = placements[field_id]
        if not other.is_visible or row_of(other.position.y, grid) != row:
            continue
        if intervals_overlap(start, end, other.position.x, other.right, grid.epsilon):
            return field_id
    return None


def fields_in_row(row: int, layout: Layout, exclude_id: str | None = None, grid: GridConstants = GRID) -> list[FieldPlacement]:
    """Visible placements in ``row``, left to right."""
    found = [
        p
        for fid, p in layout.items()
        if fid != exclude_id and p.is_visible and row_of(p.position.y, grid) == row
    ]
    return sorted(found, key=lambda p: (p.position.x, p.id))


def group_by_row(layout: Layout, exclude_id: str | None = None, grid: GridConstants = GRID) -> dict[int, list[FieldPlacement]]:
    """Visible placements keyed by row (rows ascending, fields left to right)."""
    rows: dict[int, list[FieldPlacement]] = {}
    for fid, p in layout.items():
        if fid == exclude_id or not p.is_visible:
            continue
        rows.setdefault(row_of(p.position.y, grid), []).append(p)
    return {r: sorted(rows[r], key=lambda p: (p.position.x, p.id)) for r in sorted(rows)}


def row_occupied_width(row: int, layout: Layout, exclude_id: str | None = None, grid: GridConstants = GRID) -> float:
    return sum(p.width for p in fields_in_row(row, layout, exclude_id, grid))


def row_available_space(row: int, layout: Layout, exclude_id: str | None = None, grid: GridConstants = GRID) -> float:
    return max(0.0, min(1.0, 1.0 - row_occupied_width(row, layout, exclude_id, grid)))


def occupied_columns(row: int, layout: Layout, exclude_id: str | None = None, grid: GridConstants = GRID) -> list[bool]:
    """Column occupancy mask for ``row``."""
    mask = [False] * grid.columns
    for p in fields_in_row(row, layout, exclude_id, grid):
        start = column_of(p.position.x, grid)
        for col in range(start, start + column_span(p.width, start, grid)):
            mask[col] = True
    return mask


def is_row_full(row: int, layout: Layout, exclude_id: str | None = None, grid: GridConstants = GRID) -> bool:
    return all(occupied_columns(row, layout, exclude_id, grid))


def max_occupied_row(layout: Layout, grid: GridConstants = GRID) -> int:
    """Last row holding a visible field, or -1 for an empty layout."""
    rows = [row_of(p.position.y, grid) for p in layout.values() if p.is_visible]
    return max(rows, default=-1)


def find_available_position_in_row(
    row: int,
    width: float,
    layout: Layout,
    exclude_id: str | None = None,
    grid: GridConstants = GRID,
) -> Position | None:
    """First grid-aligned position in ``row`` where ``width`` fits without overlap."""
    span = column_span(width, 0, grid)
    for start in range(grid.columns - span + 1):
        probe = FieldPlacement.at(
            exclude_id or "__probe__",
            x=normalized_x(start, grid),
            y=row_y(row, grid),
            width=width,
        )
        if not overlaps(probe, layout, exclude_id, grid):
            return probe.position
    return None


def find_next_available_position(
    width: float,
    layout: Layout,
    exclude_id: str | None = None,
    *,
    start_row: int = 0,
    grid: GridConstants = GRID,
) -> Position:
    """First free slot scanning rows top-down; falls back below the last row."""
    for row in range(max(0, start_row), grid.max_rows):
        position = find_available_position_in_row(row, width, layout, exclude_id, grid)
        if position is not None:
            return position

    others = {fid: p for fid, p in layout.items() if fid != exclude_id}
    bottom = max_occupied_row(others, grid) + 1
    if bottom > grid.max_rows - 1:
        logger.warning("Grid is full (%d rows); placing %s on the last row", grid.max_rows, exclude_id)
    return Position(x=0.0, y=row_y(bottom, grid))
