"""Edge-drag resizing in discrete width steps.

Pointer deltas accumulate per gesture until they exceed a fraction of
the container width; each time they do, the field steps to the next
wider or narrower allowed width with the opposite edge held in place.
Intermediate steps may overlap neighbours. When the gesture ends the
field is resolved to a non-overlapping configuration, preferring a
magnetic snap to an adjacent edge, then the nearest smaller fit, then
the configuration the gesture started from.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from magnetic_grid.grid.collision import fields_in_row, find_next_available_position, overlaps
from magnetic_grid.grid.constants import GRID, GridConstants
from magnetic_grid.grid.geometry import row_of, width_index
from magnetic_grid.grid.models import FieldPlacement, Layout, ResizeEdge

logger = logging.getLogger(__name__)


class ResizeOutcome(str, Enum):
    """How a finished resize was resolved."""

    MAGNETIC = "magnetic"  # aligned to a neighbour's edge
    KEPT = "kept"  # final state was already valid
    FITTED = "fitted"  # shrunk/moved to the nearest valid configuration
    REVERTED = "reverted"  # back to the gesture-start snapshot
    RELOCATED = "relocated"  # snapshot itself collided; moved to a free slot


@dataclass
class ResizeGesture:
    field_id: str
    edge: ResizeEdge
    snapshot: FieldPlacement
    accumulated: float = 0.0


@dataclass(frozen=True)
class ResizeResolution:
    placement: FieldPlacement
    outcome: ResizeOutcome

    @property
    def reverted(self) -> bool:
        return self.outcome in (ResizeOutcome.REVERTED, ResizeOutcome.RELOCATED)


def step_width(
    placement: FieldPlacement,
    edge: ResizeEdge,
    expanding: bool,
    grid: GridConstants = GRID,
) -> FieldPlacement | None:
    """One discrete width step from ``edge``, or None if no step is possible."""
    index = width_index(placement.width, grid)
    if index is None:
        return None

    new_index = index + 1 if expanding else index - 1
    if not 0 <= new_index < len(grid.widths):
        return None
    width = grid.widths[new_index]

    if edge is ResizeEdge.RIGHT:
        if placement.position.x + width > 1.0 + grid.epsilon:
            return None
        x = placement.position.x
    else:
        x = max(0.0, min(1.0 - width, placement.right - width))
    return placement.moved_to(x=x, width=width)


class ResizeController:
    """Tracks active resize gestures and resolves them on release.

    Usage:
        controller = ResizeController()
        controller.start("email", ResizeEdge.RIGHT, layout)
        stepped = controller.move("email", 45.0, layout, container_width=400)
        resolution = controller.end("email", layout_with_stepped)
    """

    def __init__(self, grid: GridConstants = GRID, snap_distance: float | None = None):
        self.grid = grid
        self.snap_distance = grid.resize_snap_distance if snap_distance is None else snap_distance
        self._gestures: dict[str, ResizeGesture] = {}

    def active(self, field_id: str) -> bool:
        return field_id in self._gestures

    def gesture(self, field_id: str) -> ResizeGesture | None:
        return self._gestures.get(field_id)

    def start(self, field_id: str, edge: ResizeEdge, layout: Layout) -> ResizeGesture | None:
        placement = layout.get(field_id)
        if placement is None or not placement.is_visible:
            logger.debug("Ignoring resize start for missing field %s", field_id)
            return None
        gesture = ResizeGesture(field_id=field_id, edge=ResizeEdge(edge), snapshot=placement)
        self._gestures[field_id] = gesture
        return gesture

    def cancel(self, field_id: str) -> FieldPlacement | None:
        """Drop the gesture; returns its snapshot."""
        gesture = self._gestures.pop(field_id, None)
        return gesture.snapshot if gesture else None

    def move(self, field_id: str, delta: float, layout: Layout, container_width: float) -> FieldPlacement | None:
        """Feed a pointer delta; returns the stepped placement when a step fires."""
        gesture = self._gestures.get(field_id)
        placement = layout.get(field_id)
        if gesture is None or placement is None:
            return None

        gesture.accumulated += delta
        if abs(gesture.accumulated) < container_width * self.grid.accumulation_threshold:
            return None

        expanding = (gesture.edge is ResizeEdge.RIGHT) == (gesture.accumulated > 0)
        stepped = step_width(placement, gesture.edge, expanding, self.grid)
        if stepped is None:
            return None

        gesture.accumulated = 0.0
        logger.debug(
            "Resize step for %s (%s edge): width %.3f -> %.3f",
            field_id, gesture.edge.value, placement.width, stepped.width,
        )
        return stepped

    def end(self, field_id: str, layout: Layout) -> ResizeResolution | None:
        """Finish the gesture and resolve the field to a non-overlapping state."""
        gesture = self._gestures.pop(field_id, None)
        current = layout.get(field_id)
        if current is None:
            return None
        snapshot = gesture.snapshot if gesture else current

        magnetic = self.magnetic_snap(current, layout)
        if magnetic is not None and not magnetic.same_geometry(current):
            return ResizeResolution(magnetic, ResizeOutcome.MAGNETIC)

        if not overlaps(current, layout, field_id, self.grid):
            return ResizeResolution(current, ResizeOutcome.KEPT)

        fitted = self.best_fit(current, layout)
        if fitted is not None:
            return ResizeResolution(fitted, ResizeOutcome.FITTED)

        if not overlaps(snapshot, layout, field_id, self.grid):
            logger.info("Resize of %s reverted to its starting configuration", field_id)
            return ResizeResolution(snapshot, ResizeOutcome.REVERTED)

        position = find_next_available_position(snapshot.width, layout, field_id, grid=self.grid)
        logger.warning("Resize start state of %s collides; relocating to a free slot", field_id)
        return ResizeResolution(snapshot.with_position(position.x, position.y), ResizeOutcome.RELOCATED)

    def magnetic_snap(self, current: FieldPlacement, layout: Layout) -> FieldPlacement | None:
        """Align ``current`` to a neighbour's edge within the snap distance."""
        grid = self.grid
        row = row_of(current.position.y, grid)

        for neighbour in fields_in_row(row, layout, current.id, grid):
            after = neighbour.right
            if abs(current.position.x - after) < self.snap_distance:
                for width in reversed(grid.widths):
                    if width > 1.0 - after + grid.epsilon:
                        continue
                    candidate = current.moved_to(x=after, width=width)
                    if not overlaps(candidate, layout, current.id, grid):
                        return candidate

            before = neighbour.position.x - current.width
            if abs(current.position.x - before) < self.snap_distance and before >= -grid.epsilon:
                candidate = current.moved_to(x=max(0.0, before))
                if not overlaps(candidate, layout, current.id, grid):
                    return candidate
        return None

    def best_fit(self, current: FieldPlacement, layout: Layout) -> FieldPlacement | None:
        """Nearest non-overlapping configuration at a smaller width."""
        index = width_index(current.width, self.grid)
        if index is None:
            return None
        for i in range(index - 1, -1, -1):
            for candidate in self._variants(current, self.grid.widths[i]):
                if not overlaps(candidate, layout, current.id, self.grid):
                    return candidate
        return None

    def _variants(self, current: FieldPlacement, width: float) -> list[FieldPlacement]:
        grid = self.grid
        variants: list[FieldPlacement] = []
        if current.position.x + width <= 1.0 + grid.epsilon:
            variants.append(current.with_width(width))

        left = current.right - width
        if left >= -grid.epsilon:
            variants.append(current.moved_to(x=max(0.0, left), width=width))

        nearby = [
            col / grid.columns
            for col in range(grid.columns)
            if col / grid.columns + width <= 1.0 + grid.epsilon
            and abs(col / grid.columns - current.position.x) <= 0.5
        ]
        nearby.sort(key=lambda gx: abs(gx - current.position.x))
        variants.extend(current.moved_to(x=gx, width=width) for gx in nearby)
        return variants
