"""Placement planner for dragged fields.

Given a dragged field and the row it hovers over, decide how the field
lands and produce the full candidate layout:

1. If every column of the row is taken by other fields, push down.
2. Otherwise try to resize the field to the widest discrete width that
   fits the row's free space (and differs from its current width).
3. Otherwise place it at its current width in the first free slot.
4. Otherwise push down.

Push-down always succeeds, so callers always get a layout back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from magnetic_grid.grid.collision import (
    find_available_position_in_row,
    group_by_row,
    is_row_full,
    overlaps,
    row_available_space,
)
from magnetic_grid.grid.constants import GRID, GridConstants
from magnetic_grid.grid.geometry import column_of, column_span, largest_width_at_most, normalized_x, row_y
from magnetic_grid.grid.models import FieldPlacement, Layout, Position

logger = logging.getLogger(__name__)


class PlacementStrategy(str, Enum):
    """How a dragged field was fitted into its target row."""

    RESIZE = "resize"
    DIRECT = "direct"
    PUSH_DOWN = "push_down"


@dataclass(frozen=True)
class PlacementPlan:
    """A resolved preview: where the dragged field goes and the full layout."""

    strategy: PlacementStrategy
    field_id: str
    target_row: int
    start_column: int
    column_span: int
    width: float
    position: Position
    layout: Layout

    @property
    def is_push_down(self) -> bool:
        return self.strategy is PlacementStrategy.PUSH_DOWN

    @property
    def resized(self) -> bool:
        return self.strategy is PlacementStrategy.RESIZE

    def summary(self) -> str:
        return (
            f"{self.field_id} -> row {self.target_row}, "
            f"columns {self.start_column}-{self.start_column + self.column_span - 1} "
            f"({self.strategy.value})"
        )


def plan_preview(dragged_id: str, target_row: int, layout: Layout, grid: GridConstants = GRID) -> Layout:
    """Candidate layout for dropping ``dragged_id`` on ``target_row``.

    An unknown or hidden dragged field yields an unchanged copy.
    """
    plan = plan_placement(dragged_id, target_row, layout, grid)
    if plan is None:
        return dict(layout)
    return plan.layout


def plan_placement(
    dragged_id: str,
    target_row: int,
    layout: Layout,
    grid: GridConstants = GRID,
) -> PlacementPlan | None:
    """Resolve the placement strategy and candidate layout, or None if
    ``dragged_id`` is not a visible field of ``layout``."""
    dragged = layout.get(dragged_id)
    if dragged is None or not dragged.is_visible:
        logger.debug("No visible field %s to plan for", dragged_id)
        return None

    target_row = max(0, min(grid.max_rows - 1, target_row))

    if is_row_full(target_row, layout, dragged_id, grid):
        logger.debug("Row %d is full, pushing down for %s", target_row, dragged_id)
        return _push_down(dragged, target_row, layout, grid)

    plan = _auto_resize(dragged, target_row, layout, grid)
    if plan is not None:
        return plan

    position = find_available_position_in_row(target_row, dragged.width, layout, dragged_id, grid)
    if position is not None:
        placed = dragged.with_position(position.x, position.y)
        return _plan(PlacementStrategy.DIRECT, placed, target_row, _replace(layout, placed), grid)

    return _push_down(dragged, target_row, layout, grid)


def _auto_resize(dragged: FieldPlacement, target_row: int, layout: Layout, grid: GridConstants) -> PlacementPlan | None:
    free = row_available_space(target_row, layout, dragged.id, grid)
    if free <= 0:
        return None

    width = largest_width_at_most(free, grid, exclude=dragged.width)
    if width is None:
        return None

    span = column_span(width, 0, grid)
    for start in range(grid.columns - span + 1):
        candidate = dragged.moved_to(x=normalized_x(start, grid), y=row_y(target_row, grid), width=width)
        if not overlaps(candidate, layout, dragged.id, grid):
            logger.debug(
                "Auto-resizing %s from %.3f to %.3f at row %d column %d",
                dragged.id, dragged.width, width, target_row, start,
            )
            return _plan(PlacementStrategy.RESIZE, candidate, target_row, _replace(layout, candidate), grid)
    return None


def _push_down(dragged: FieldPlacement, target_row: int, layout: Layout, grid: GridConstants) -> PlacementPlan:
    placed = dragged.with_position(0.0, row_y(target_row, grid))
    result: Layout = {}
    last_row = grid.max_rows - 1

    for row, placements in group_by_row(layout, dragged.id, grid).items():
        new_row = row + 1 if row >= target_row else row
        if new_row > last_row:
            logger.warning(
                "Push-down past the last row (%d); clamping %d field(s) to row %d",
                grid.max_rows, len(placements), last_row,
            )
            new_row = last_row
        for p in placements:
            result[p.id] = p if new_row == row else p.with_position(p.position.x, new_row * grid.row_height)

    for fid, p in layout.items():
        if fid not in result and fid != dragged.id:
            result[fid] = p  # hidden fields ride along untouched
    result[dragged.id] = placed
    return _plan(PlacementStrategy.PUSH_DOWN, placed, target_row, result, grid)


def _replace(layout: Layout, placement: FieldPlacement) -> Layout:
    result = dict(layout)
    result[placement.id] = placement
    return result


def _plan(strategy: PlacementStrategy, placed: FieldPlacement, target_row: int, layout: Layout, grid: GridConstants) -> PlacementPlan:
    start = column_of(placed.position.x, grid)
    return PlacementPlan(
        strategy=strategy,
        field_id=placed.id,
        target_row=target_row,
        start_column=start,
        column_span=column_span(placed.width, start, grid),
        width=placed.width,
        position=placed.position,
        layout=layout,
    )

