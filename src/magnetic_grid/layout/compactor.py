"""Post-commit layout normalization.

Two passes run after every committed drag:

- ``pull_up`` removes empty rows by renumbering occupied rows
  consecutively from 0.
- ``auto_expand`` fills leftover horizontal space in each row by growing
  or redistributing the fields already there.

Both preserve the no-overlap invariant: rows keep their field sets, and
growth only ever goes into space confirmed empty.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from magnetic_grid.grid.collision import group_by_row, overlaps
from magnetic_grid.grid.constants import GRID, GridConstants
from magnetic_grid.grid.geometry import largest_width_at_most, row_y, snap_width
from magnetic_grid.grid.models import FieldPlacement, Layout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Gap:
    """Empty horizontal span in a row."""

    start: float
    size: float

    @property
    def end(self) -> float:
        return self.start + self.size

    @property
    def midpoint(self) -> float:
        return self.start + self.size / 2


@dataclass
class RowExpansion:
    """What auto-expand decided for one row."""

    row: int
    strategy: str  # "single", "equal", "gap_fill" or "none"
    free_space: float
    updates: dict[str, FieldPlacement] = field(default_factory=dict)


def pull_up(layout: Layout, grid: GridConstants = GRID) -> Layout:
    """Renumber occupied rows 0, 1, 2, ... keeping each field's x and width."""
    result = dict(layout)
    for target_row, (source_row, placements) in enumerate(group_by_row(layout, grid=grid).items()):
        if source_row == target_row:
            continue
        logger.debug("Pulling row %d up to %d (%d fields)", source_row, target_row, len(placements))
        for p in placements:
            result[p.id] = p.with_position(p.position.x, row_y(target_row, grid))
    return result


def auto_expand(layout: Layout, threshold: float | None = None, grid: GridConstants = GRID) -> Layout:
    """Grow fields so rows with significant free space are filled."""
    result = dict(layout)
    for expansion in expansion_plan(layout, threshold, grid):
        result.update(expansion.updates)
    return result


def compact(layout: Layout, grid: GridConstants = GRID) -> Layout:
    """Pull-up followed by auto-expand."""
    return auto_expand(pull_up(layout, grid), grid=grid)


def expansion_plan(layout: Layout, threshold: float | None = None, grid: GridConstants = GRID) -> list[RowExpansion]:
    """Per-row auto-expand decisions for rows with free space above ``threshold``."""
    threshold = grid.significant_gap_threshold if threshold is None else threshold
    plan: list[RowExpansion] = []

    for row, placements in group_by_row(layout, grid=grid).items():
        free = max(0.0, 1.0 - sum(p.width for p in placements))
        if free <= threshold:
            continue

        if len(placements) == 1:
            expansion = _expand_single(row, placements[0], free, grid)
        elif _equal_widths(placements, threshold):
            expansion = _distribute_equally(row, placements, free, grid)
        else:
            expansion = _fill_largest_gap(row, placements, free, layout, threshold, grid)

        expansion.updates = {
            fid: p
            for fid, p in expansion.updates.items()
            if not p.same_geometry(layout[fid], grid.width_change_threshold)
        }
        if expansion.updates:
            logger.debug("Row %d: %s expansion of %d field(s)", row, expansion.strategy, len(expansion.updates))
        plan.append(expansion)
    return plan


def find_gaps(placements: list[FieldPlacement], threshold: float = GRID.significant_gap_threshold) -> list[Gap]:
    """Empty spans of a row's left-to-right sorted placements."""
    gaps: list[Gap] = []
    if not placements:
        return gaps

    first = placements[0]
    if first.position.x > threshold:
        gaps.append(Gap(0.0, first.position.x))

    for left, right in zip(placements, placements[1:]):
        size = right.position.x - left.right
        if size > threshold:
            gaps.append(Gap(left.right, size))

    last_end = placements[-1].right
    if last_end < 1.0 - threshold:
        gaps.append(Gap(last_end, 1.0 - last_end))
    return gaps


def _equal_widths(placements: list[FieldPlacement], tolerance: float) -> bool:
    avg = sum(p.width for p in placements) / len(placements)
    return all(abs(p.width - avg) < tolerance for p in placements)


def _expand_single(row: int, placement: FieldPlacement, free: float, grid: GridConstants) -> RowExpansion:
    expanded = placement.moved_to(x=0.0, y=row_y(row, grid), width=grid.full_width)
    return RowExpansion(row=row, strategy="single", free_space=free, updates={placement.id: expanded})


def _distribute_equally(row: int, placements: list[FieldPlacement], free: float, grid: GridConstants) -> RowExpansion:
    width = 1.0 / len(placements)
    updates = {
        p.id: p.moved_to(x=i * width, y=row_y(row, grid), width=width)
        for i, p in enumerate(placements)
    }
    return RowExpansion(row=row, strategy="equal", free_space=free, updates=updates)


def _fill_largest_gap(
    row: int,
    placements: list[FieldPlacement],
    free: float,
    layout: Layout,
    threshold: float,
    grid: GridConstants,
) -> RowExpansion:
    expansion = RowExpansion(row=row, strategy="gap_fill", free_space=free)
    gaps = find_gaps(placements, threshold)
    if not gaps:
        return expansion

    # First of equal-sized gaps wins, matching left-to-right reading order
    gap = max(gaps, key=lambda g: (g.size, -g.start))
    closest = min(placements, key=lambda p: (abs(p.position.x + p.width / 2 - gap.midpoint), p.position.x))

    grown = _grow_into(closest, gap, snap_width(min(1.0, closest.width + gap.size), grid), grid)
    if grown is not None and overlaps(grown, layout, closest.id, grid):
        fallback = largest_width_at_most(closest.width + gap.size, grid)
        grown = _grow_into(closest, gap, fallback, grid) if fallback is not None else None
        if grown is not None and overlaps(grown, layout, closest.id, grid):
            grown = None

    if grown is None or grown.width <= closest.width + grid.epsilon:
        expansion.strategy = "none"
        return expansion

    expansion.updates[closest.id] = grown
    return expansion


def _grow_into(placement: FieldPlacement, gap: Gap, width: float | None, grid: GridConstants) -> FieldPlacement | None:
    if width is None:
        return None
    if gap.start >= placement.right - grid.epsilon:
        x = placement.position.x
    else:
        x = placement.right - width
    x = max(0.0, min(1.0 - width, x))
    return placement.moved_to(x=x, width=width)
