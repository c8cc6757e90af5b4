"""Frame-driven interpolation between layouts.

The engine owns no clock. The host calls ``tick(dt)`` from whatever frame
source it has (a UI frame callback, a timer loop, a test) and every
running tween advances by ``dt`` seconds.

All fields in one ``tween`` call share a single progress timeline, so
they arrive together. Starting a tween cancels any running tween that
animates one of the same fields, which keeps a field to one writer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from magnetic_grid.grid.models import FieldPlacement, Layout, Position

logger = logging.getLogger(__name__)

Curve = Callable[[float], float]
FrameCallback = Callable[[Layout], None]
DoneCallback = Callable[[], None]


def linear(t: float) -> float:
    return t


def ease_in_out(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    return 1 - (-2 * t + 2) ** 3 / 2


def ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


def ease_out_quart(t: float) -> float:
    return 1 - (1 - t) ** 4


CURVES: dict[str, Curve] = {
    "linear": linear,
    "ease_in_out": ease_in_out,
    "ease_out_cubic": ease_out_cubic,
    "ease_out_quart": ease_out_quart,
}


@dataclass(frozen=True)
class AnimationProfile:
    """Duration (seconds) and easing curve for one kind of motion."""

    duration: float
    curve: Curve = ease_out_cubic


PREVIEW = AnimationProfile(duration=0.150, curve=ease_out_quart)
COMMIT = AnimationProfile(duration=0.300, curve=ease_out_cubic)
REVERT = AnimationProfile(duration=0.200, curve=ease_in_out)
DEFAULT = AnimationProfile(duration=0.300, curve=ease_out_cubic)


def _lerp(a: float, b: float, t: float) -> float:
    if t <= 0:
        return a
    if t >= 1:
        return b
    return a + (b - a) * t


def lerp_placement(a: FieldPlacement, b: FieldPlacement, t: float) -> FieldPlacement:
    """Interpolate position (componentwise) and width; t=1 yields ``b`` exactly."""
    if t >= 1:
        return b
    return FieldPlacement(
        id=a.id,
        width=max(0.0, _lerp(a.width, b.width, t)),
        position=Position(x=_lerp(a.position.x, b.position.x, t), y=_lerp(a.position.y, b.position.y, t)),
    )


def lerp_layout(a: Layout, b: Layout, t: float) -> Layout:
    """Interpolate every field present in both layouts."""
    return {fid: lerp_placement(a[fid], b[fid], t) for fid in a if fid in b}


class TweenState(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Tween:
    """One running interpolation between two layouts."""

    def __init__(
        self,
        from_layout: Layout,
        to_layout: Layout,
        profile: AnimationProfile,
        on_frame: FrameCallback | None = None,
        on_done: DoneCallback | None = None,
    ):
        self.field_ids = frozenset(fid for fid in from_layout if fid in to_layout)
        self._from = {fid: from_layout[fid] for fid in self.field_ids}
        self._to = {fid: to_layout[fid] for fid in self.field_ids}
        self.profile = profile
        self.elapsed = 0.0
        self.state = TweenState.RUNNING
        self._on_frame = on_frame
        self._on_done = on_done

    @property
    def progress(self) -> float:
        if self.profile.duration <= 0:
            return 1.0
        return min(1.0, self.elapsed / self.profile.duration)

    @property
    def running(self) -> bool:
        return self.state is TweenState.RUNNING

    @property
    def target(self) -> Layout:
        return dict(self._to)

    @property
    def is_noop(self) -> bool:
        return all(self._from[fid].same_geometry(self._to[fid]) for fid in self.field_ids)

    def frame(self) -> Layout:
        """Interpolated layout at the current progress."""
        return lerp_layout(self._from, self._to, self.profile.curve(self.progress))

    def advance(self, dt: float) -> None:
        if not self.running:
            return
        self.elapsed += max(0.0, dt)
        if self._on_frame is not None:
            self._on_frame(self.frame())
        if self.progress >= 1.0:
            self._complete()

    def finish(self) -> None:
        """Jump to the end: emit the final frame, then complete."""
        if not self.running:
            return
        self.elapsed = self.profile.duration
        if self._on_frame is not None:
            self._on_frame(dict(self._to))
        self._complete()

    def cancel(self) -> None:
        if self.running:
            self.state = TweenState.CANCELLED

    def _complete(self) -> None:
        self.state = TweenState.COMPLETED
        if self._on_done is not None:
            self._on_done()


class AnimationEngine:
    """Runs tweens against an externally supplied frame clock.

    Usage:
        engine = AnimationEngine()
        engine.tween(before, after, COMMIT, on_frame=apply, on_done=save)
        while engine.running:
            engine.tick(1 / 60)
    """

    # Bound on completion cascades in finish(); each on_done may start another tween
    MAX_FINISH_ROUNDS = 32

    def __init__(self) -> None:
        self._tweens: list[Tween] = []

    def tween(
        self,
        from_layout: Layout,
        to_layout: Layout,
        profile: AnimationProfile = DEFAULT,
        *,
        on_frame: FrameCallback | None = None,
        on_done: DoneCallback | None = None,
        duration: float | None = None,
        curve: Curve | None = None,
    ) -> Tween:
        """Start interpolating ``from_layout`` toward ``to_layout``.

        ``duration``/``curve`` override the profile. Fields missing from
        either side are not animated. A zero-length or no-op tween
        completes immediately with a single final frame.
        """
        if duration is not None or curve is not None:
            profile = AnimationProfile(
                duration=profile.duration if duration is None else duration,
                curve=profile.curve if curve is None else curve,
            )
        tween = Tween(from_layout, to_layout, profile, on_frame, on_done)
        self.cancel(tween.field_ids)

        if profile.duration <= 0 or not tween.field_ids or tween.is_noop:
            tween.finish()
            return tween

        self._tweens.append(tween)
        return tween

    def tick(self, dt: float) -> None:
        """Advance every running tween by ``dt`` seconds."""
        for tween in list(self._tweens):
            tween.advance(dt)
        self._prune()

    def cancel(self, field_ids: Iterable[str] | None = None) -> int:
        """Cancel running tweens touching ``field_ids`` (all when None)."""
        wanted = None if field_ids is None else frozenset(field_ids)
        cancelled = 0
        for tween in self._tweens:
            if tween.running and (wanted is None or tween.field_ids & wanted):
                tween.cancel()
                cancelled += 1
        self._prune()
        if cancelled:
            logger.debug("Cancelled %d running tween(s)", cancelled)
        return cancelled

    def finish(self, field_ids: Iterable[str] | None = None) -> None:
        """Complete running tweens immediately, including any they start."""
        wanted = None if field_ids is None else frozenset(field_ids)
        for _ in range(self.MAX_FINISH_ROUNDS):
            targets = [t for t in self._tweens if t.running and (wanted is None or t.field_ids & wanted)]
            if not targets:
                break
            for tween in targets:
                tween.finish()
            self._prune()
        else:
            logger.warning("Tween completions kept scheduling new tweens; cancelling the rest")
            self.cancel(wanted)

    @property
    def running(self) -> list[Tween]:
        return [t for t in self._tweens if t.running]

    def is_animating(self, field_id: str) -> bool:
        return any(field_id in t.field_ids for t in self.running)

    def run_until_idle(self, frame_dt: float = 1 / 60, max_frames: int = 10_000) -> int:
        """Tick until nothing is running; returns the number of frames."""
        frames = 0
        while self.running and frames < max_frames:
            self.tick(frame_dt)
            frames += 1
        return frames

    def _prune(self) -> None:
        self._tweens = [t for t in self._tweens if t.running]
