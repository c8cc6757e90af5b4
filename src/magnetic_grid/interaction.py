"""Interaction orchestrator: the stateful owner of the current layout.

Pointer events come in, the planner/compactor/resize controller decide
where things go, and the animation engine moves the layout there.

Drag:   IDLE -> DRAGGING -> PREVIEW_ACTIVE -> COMMITTING -> IDLE
Resize: IDLE -> RESIZING -> SNAP_EVALUATING -> IDLE

Everything runs on the caller's thread. Animation only progresses when
the host calls ``tick(dt)``; ``settle()`` jumps every running animation
to its end.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from magnetic_grid.animation import COMMIT, PREVIEW, REVERT, AnimationEngine
from magnetic_grid.config import MagneticGridSettings, get_settings
from magnetic_grid.exceptions import StorageError, UnknownFieldError
from magnetic_grid.grid.collision import find_next_available_position, max_occupied_row, overlaps
from magnetic_grid.grid.constants import GRID, GridConstants
from magnetic_grid.grid.geometry import describe, magnetic_snap_position, row_of
from magnetic_grid.grid.models import FieldDescriptor, FieldPlacement, Layout, Point, Position, ResizeEdge, ordered
from magnetic_grid.layout.compactor import compact, pull_up
from magnetic_grid.layout.planner import PlacementPlan, plan_placement
from magnetic_grid.layout.resize import ResizeController, ResizeResolution
from magnetic_grid.storage import LayoutRepository

LayoutCallback = Callable[[Layout], None]
ValueCallback = Callable[[str, Any, dict[str, Any]], None]


class InteractionState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    PREVIEW_ACTIVE = "preview_active"
    COMMITTING = "committing"
    RESIZING = "resizing"
    SNAP_EVALUATING = "snap_evaluating"


@dataclass
class DragSession:
    """One drag gesture, from press to release or cancel."""

    field_id: str
    pointer_start: Point
    field_start: Position
    layout_at_start: Layout
    moved_past_threshold: bool = False


@dataclass
class PreviewState:
    """The preview shown while a drag hovers a row.

    ``baseline_layout`` is the layout before any preview of the current
    drag; every replan starts from it.
    """

    active: bool = False
    dragged_field_id: str | None = None
    target_row: int | None = None
    preview_layout: Layout = field(default_factory=dict)
    baseline_layout: Layout = field(default_factory=dict)
    plan: PlacementPlan | None = None

    @classmethod
    def initial(cls) -> PreviewState:
        return cls()


class InteractionOrchestrator:
    """Owns the layout and turns pointer events into layout changes.

    Usage:
        orchestrator = InteractionOrchestrator(fields, default_layout, repository=repo)
        orchestrator.load()
        orchestrator.drag_start("email", Point(10, 80))
        orchestrator.drag_move("email", Point(10, 10))
        orchestrator.drag_end("email")
        orchestrator.settle()
    """

    def __init__(
        self,
        fields: Iterable[FieldDescriptor] = (),
        default_layout: Layout | None = None,
        *,
        repository: LayoutRepository | None = None,
        storage_key: str | None = None,
        container_width: float | None = None,
        settings: MagneticGridSettings | None = None,
        engine: AnimationEngine | None = None,
        grid: GridConstants = GRID,
        logger: logging.Logger | None = None,
        on_layout_changed: LayoutCallback | None = None,
        on_value_changed: ValueCallback | None = None,
    ):
        settings = settings or get_settings()
        self.grid = grid
        self.fields: dict[str, FieldDescriptor] = {f.id: f for f in fields}
        self.default_layout: Layout = dict(default_layout or {})
        self.layout: Layout = dict(self.default_layout)
        self.repository = repository
        self.storage_key = storage_key or settings.storage_key
        self.container_width = container_width or settings.container_width
        self.frame_interval = settings.frame_interval
        self.engine = engine or AnimationEngine()
        self.log = logger or logging.getLogger(__name__)
        self.on_layout_changed = on_layout_changed
        self.on_value_changed = on_value_changed

        self.state = InteractionState.IDLE
        self.selected_field_id: str | None = None
        self.drag: DragSession | None = None
        self.preview = PreviewState.initial()
        self.resizer = ResizeController(grid)
        self._resize_target: FieldPlacement | None = None
        self.values: dict[str, Any] = {
            f.id: f.default_value for f in self.fields.values() if f.default_value is not None
        }

    # -- persistence -------------------------------------------------------

    def load(self) -> Layout:
        """Load the persisted layout, falling back to the default layout."""
        stored: Layout | None = None
        if self.repository is not None:
            try:
                stored = self.repository.load(self.storage_key)
            except StorageError as e:
                self.log.warning("Could not load layout '%s', using defaults: %s", self.storage_key, e)
        if stored:
            self.layout = dict(stored)
            self.log.debug("Loaded %d field(s) from '%s'", len(stored), self.storage_key)
        else:
            self.layout = dict(self.default_layout)
        self._notify_layout()
        return self.layout

    def save(self) -> bool:
        """Persist the current layout. Failures are logged, never raised."""
        if self.repository is None:
            return False
        try:
            self.repository.save(self.storage_key, self.layout)
        except StorageError as e:
            self.log.error("Failed to save layout: %s", e)
            return False
        return True

    # -- queries -----------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self.state is not InteractionState.IDLE

    def visible_fields(self) -> list[str]:
        """Ids of visible fields in reading order."""
        return [p.id for p in ordered(self.layout) if p.is_visible]

    # -- drag --------------------------------------------------------------

    def drag_start(self, field_id: str, pointer: Point) -> bool:
        if not self._ready_for_gesture("drag", field_id):
            return False

        placement = self.layout[field_id]
        self.drag = DragSession(
            field_id=field_id,
            pointer_start=pointer,
            field_start=placement.position,
            layout_at_start=dict(self.layout),
        )
        self.selected_field_id = field_id
        self.preview = PreviewState.initial()
        self.state = InteractionState.DRAGGING
        self.log.debug("Drag start: %s at %s", field_id, describe(placement, self.grid))
        return True

    def drag_move(self, field_id: str, pointer: Point) -> None:
        session = self.drag
        if session is None or session.field_id != field_id:
            self.log.debug("Ignoring drag move for %s without a drag session", field_id)
            return

        if not session.moved_past_threshold and pointer.distance_to(session.pointer_start) > self.grid.drag_threshold:
            session.moved_past_threshold = True
            self.state = InteractionState.PREVIEW_ACTIVE

        current = self.layout[field_id]
        delta = pointer - session.pointer_start
        x = session.field_start.x + delta.x / self.container_width
        y = session.field_start.y + delta.y
        x = max(0.0, min(1.0 - current.width, x))
        y = max(0.0, min((self.grid.max_rows - 1) * self.grid.row_height, y))
        self.layout = {**self.layout, field_id: current.with_position(x, y)}

        if session.moved_past_threshold:
            row = row_of(y, self.grid)
            if row != self.preview.target_row:
                self._show_preview(session, row)

    def drag_end(self, field_id: str) -> None:
        session = self.drag
        if session is None or session.field_id != field_id:
            self.log.debug("Ignoring drag end for %s without a drag session", field_id)
            return
        self.drag = None
        preview, self.preview = self.preview, PreviewState.initial()
        self.state = InteractionState.COMMITTING

        if preview.active and preview.plan is not None:
            self.log.info("Committing preview: %s", preview.plan.summary())
            self.engine.tween(
                self.layout,
                preview.plan.layout,
                COMMIT,
                on_frame=self._apply_frame,
                on_done=self._compact_after_commit,
            )
            return

        current = self.layout[field_id]
        snapped = magnetic_snap_position(current.position, self.grid)
        candidate = current.with_position(snapped.x, snapped.y)
        if overlaps(candidate, self.layout, field_id, self.grid):
            position = find_next_available_position(current.width, self.layout, field_id, grid=self.grid)
            candidate = current.with_position(position.x, position.y)
        self.log.debug("Drop without preview: %s -> %s", field_id, describe(candidate, self.grid))

        target = pull_up({**self.layout, field_id: candidate}, self.grid)
        self.engine.tween(self.layout, target, COMMIT, on_frame=self._apply_frame, on_done=self._finish_commit)

    def drag_cancel(self) -> None:
        """Abort the drag and animate back to where it started."""
        session = self.drag
        if session is None:
            return
        self.drag = None
        self.preview = PreviewState.initial()
        self.state = InteractionState.COMMITTING
        self.log.debug("Drag cancelled: %s", session.field_id)
        self.engine.tween(
            self.layout,
            session.layout_at_start,
            REVERT,
            on_frame=self._apply_frame,
            on_done=self._finish_revert,
        )

    def _show_preview(self, session: DragSession, row: int) -> None:
        baseline = session.layout_at_start
        plan = plan_placement(session.field_id, row, baseline, self.grid)
        if plan is None:
            return

        self.preview = PreviewState(
            active=True,
            dragged_field_id=session.field_id,
            target_row=row,
            preview_layout=plan.layout,
            baseline_layout=baseline,
            plan=plan,
        )
        self.log.debug("Preview: %s", plan.summary())

        # The dragged field follows the pointer, not the tween
        others = {fid: p for fid, p in plan.layout.items() if fid != session.field_id}
        self.engine.tween(self.layout, others, PREVIEW, on_frame=self._apply_frame)

    def _compact_after_commit(self) -> None:
        target = compact(self.layout, self.grid)
        self.engine.tween(self.layout, target, COMMIT, on_frame=self._apply_frame, on_done=self._finish_commit)

    def _finish_commit(self) -> None:
        self.state = InteractionState.IDLE
        self.save()
        self._notify_layout()

    def _finish_revert(self) -> None:
        self.state = InteractionState.IDLE

    # -- resize ------------------------------------------------------------

    def resize_start(self, field_id: str, edge: ResizeEdge | str) -> bool:
        if not self._ready_for_gesture("resize", field_id):
            return False
        gesture = self.resizer.start(field_id, ResizeEdge(edge), self.layout)
        if gesture is None:
            return False
        self._resize_target = gesture.snapshot
        self.selected_field_id = field_id
        self.state = InteractionState.RESIZING
        return True

    def resize_move(self, field_id: str, edge: ResizeEdge | str, delta: float) -> FieldPlacement | None:
        """Feed a horizontal pointer delta; returns the new placement when the width steps."""
        gesture = self.resizer.gesture(field_id)
        if self.state is not InteractionState.RESIZING or gesture is None or self._resize_target is None:
            self.log.debug("Ignoring resize move for %s without a resize gesture", field_id)
            return None
        if ResizeEdge(edge) is not gesture.edge:
            self.log.debug("Resize move edge %s differs from gesture edge %s", edge, gesture.edge.value)

        basis = {**self.layout, field_id: self._resize_target}
        stepped = self.resizer.move(field_id, delta, basis, self.container_width)
        if stepped is None:
            return None
        self._resize_target = stepped
        self.engine.tween(self.layout, {field_id: stepped}, PREVIEW, on_frame=self._apply_frame)
        return stepped

    def resize_end(self, field_id: str, edge: ResizeEdge | str) -> ResizeResolution | None:
        if self.state is not InteractionState.RESIZING or not self.resizer.active(field_id):
            self.log.debug("Ignoring resize end for %s without a resize gesture", field_id)
            return None
        self.state = InteractionState.SNAP_EVALUATING

        basis = dict(self.layout)
        if self._resize_target is not None:
            basis[field_id] = self._resize_target
        self._resize_target = None

        resolution = self.resizer.end(field_id, basis)
        if resolution is None:
            self.state = InteractionState.IDLE
            return None

        self.log.info(
            "Resize of %s (%s edge) resolved as %s: %s",
            field_id, ResizeEdge(edge).value, resolution.outcome.value, describe(resolution.placement, self.grid),
        )
        profile = REVERT if resolution.reverted else COMMIT
        target = {**basis, field_id: resolution.placement}
        self.engine.tween(self.layout, target, profile, on_frame=self._apply_frame, on_done=self._finish_commit)
        return resolution

    # -- selection and registry --------------------------------------------

    def tap(self, field_id: str) -> None:
        placement = self.layout.get(field_id)
        if placement is None or not placement.is_visible:
            self.log.debug("Ignoring tap on unknown or hidden field %s", field_id)
            return
        self.selected_field_id = field_id

    def deselect(self) -> None:
        self.selected_field_id = None

    def toggle_field(self, field_id: str) -> bool:
        """Hide a visible field or show a hidden one. Returns the new visibility.

        Raises:
            UnknownFieldError: ``field_id`` is neither registered nor laid out.
        """
        self._require_known(field_id)
        self.settle()

        placement = self.layout.get(field_id)
        if placement is not None and placement.is_visible:
            layout = {**self.layout, field_id: FieldPlacement.hidden(field_id)}
            self.layout = pull_up(layout, self.grid)
            if self.selected_field_id == field_id:
                self.selected_field_id = None
            self.log.info("Field %s hidden", field_id)
            visible_now = False
        else:
            self.layout = {**self.layout, field_id: self._appended(field_id)}
            self.log.info("Field %s shown at %s", field_id, describe(self.layout[field_id], self.grid))
            visible_now = True

        self.save()
        self._notify_layout()
        return visible_now

    def add_field(self, field_id: str) -> FieldPlacement:
        """Show ``field_id`` at full width below the last occupied row.

        A field that is already visible is left where it is.
        """
        self._require_known(field_id)
        self.settle()

        placement = self.layout.get(field_id)
        if placement is not None and placement.is_visible:
            return placement

        placement = self._appended(field_id)
        self.layout = {**self.layout, field_id: placement}
        self.save()
        self._notify_layout()
        return placement

    def set_value(self, field_id: str, value: Any) -> None:
        """Record a form value and forward it to ``on_value_changed``."""
        self._require_known(field_id)
        self.values[field_id] = value
        if self.on_value_changed is not None:
            self.on_value_changed(field_id, value, dict(self.values))

    # -- animation ---------------------------------------------------------

    def tick(self, dt: float) -> None:
        self.engine.tick(dt)

    def play(self) -> int:
        """Tick at the configured frame rate until nothing is animating.

        For hosts without a frame source of their own. Returns the number
        of frames played.
        """
        return self.engine.run_until_idle(self.frame_interval)

    def settle(self) -> None:
        """Finish every running animation, including commit follow-ups."""
        self.engine.finish()

    # -- helpers -----------------------------------------------------------

    def _ready_for_gesture(self, kind: str, field_id: str) -> bool:
        if self.state in (InteractionState.COMMITTING, InteractionState.SNAP_EVALUATING):
            self.settle()
        if self.busy:
            self.log.warning("Ignoring %s start on %s while %s", kind, field_id, self.state.value)
            return False
        placement = self.layout.get(field_id)
        if placement is None or not placement.is_visible:
            self.log.warning("Ignoring %s start on unknown or hidden field %s", kind, field_id)
            return False
        self.settle()
        return True

    def _appended(self, field_id: str) -> FieldPlacement:
        others = {fid: p for fid, p in self.layout.items() if fid != field_id}
        start_row = max_occupied_row(others, self.grid) + 1
        position = find_next_available_position(
            self.grid.full_width, self.layout, field_id, start_row=start_row, grid=self.grid
        )
        return FieldPlacement.at(field_id, x=position.x, y=position.y, width=self.grid.full_width)

    def _require_known(self, field_id: str) -> None:
        if field_id not in self.fields and field_id not in self.layout:
            raise UnknownFieldError(field_id, sorted(set(self.fields) | set(self.layout)))

    def _apply_frame(self, frame: Layout) -> None:
        self.layout = {**self.layout, **frame}

    def _notify_layout(self) -> None:
        if self.on_layout_changed is not None:
            self.on_layout_changed(dict(self.layout))
