"""Tests for the animation engine."""

from __future__ import annotations

import pytest

from magnetic_grid.animation import (
    COMMIT,
    CURVES,
    DEFAULT,
    PREVIEW,
    REVERT,
    AnimationEngine,
    AnimationProfile,
    TweenState,
    ease_out_quart,
    lerp_layout,
    lerp_placement,
    linear,
)
from magnetic_grid.grid.models import FieldPlacement


@pytest.fixture
def before():
    return {
        "a": FieldPlacement.at("a", x=0.0, y=0.0, width=0.5),
        "b": FieldPlacement.at("b", x=0.5, y=0.0, width=0.5),
    }


@pytest.fixture
def after():
    return {
        "a": FieldPlacement.at("a", x=0.0, y=70.0, width=1.0),
        "b": FieldPlacement.at("b", x=0.0, y=0.0, width=1.0),
    }


class TestCurves:
    @pytest.mark.parametrize("name", sorted(CURVES))
    def test_endpoints(self, name):
        curve = CURVES[name]
        assert curve(0.0) == pytest.approx(0.0)
        assert curve(1.0) == pytest.approx(1.0)

    def test_ease_out_is_front_loaded(self):
        assert ease_out_quart(0.5) == pytest.approx(0.9375)
        assert ease_out_quart(0.5) > linear(0.5)

    def test_profiles(self):
        assert PREVIEW.duration == 0.150
        assert COMMIT.duration == 0.300
        assert REVERT.duration == 0.200
        assert DEFAULT.duration == 0.300


class TestLerp:
    def test_midpoint(self, before, after):
        mid = lerp_placement(before["b"], after["b"], 0.5)
        assert mid.x == pytest.approx(0.25)
        assert mid.width == pytest.approx(0.75)

    def test_end_is_exact(self, before, after):
        assert lerp_placement(before["a"], after["a"], 1.0) is after["a"]

    def test_start_is_exact(self, before, after):
        assert lerp_placement(before["a"], after["a"], 0.0) == before["a"]

    def test_layout_only_shared_fields(self, before):
        partial = lerp_layout(before, {"a": before["a"]}, 0.5)
        assert list(partial) == ["a"]


class TestEngine:
    def test_frames_then_done_once(self, before, after):
        engine = AnimationEngine()
        frames, done = [], []
        engine.tween(before, after, DEFAULT, on_frame=frames.append, on_done=lambda: done.append(True))

        engine.tick(0.1)
        assert len(frames) == 1
        assert done == []
        assert 0.0 < frames[0]["a"].y < 70.0

        engine.run_until_idle(frame_dt=0.1)
        assert done == [True]
        assert frames[-1] == after
        assert engine.running == []

    def test_shared_timeline(self, before, after):
        engine = AnimationEngine()
        tween = engine.tween(before, after, AnimationProfile(duration=1.0, curve=linear))
        engine.tick(0.25)
        frame = tween.frame()
        assert frame["a"].y == pytest.approx(17.5)
        assert frame["b"].x == pytest.approx(0.375)

    def test_new_tween_cancels_overlapping(self, before, after):
        engine = AnimationEngine()
        done = []
        first = engine.tween(before, after, on_done=lambda: done.append("first"))
        second = engine.tween(before, {"a": after["a"]}, on_done=lambda: done.append("second"))
        assert first.state is TweenState.CANCELLED
        engine.run_until_idle()
        assert done == ["second"]
        assert second.state is TweenState.COMPLETED

    def test_disjoint_tweens_run_together(self, before, after):
        engine = AnimationEngine()
        engine.tween({"a": before["a"]}, {"a": after["a"]})
        engine.tween({"b": before["b"]}, {"b": after["b"]})
        assert len(engine.running) == 2
        assert engine.is_animating("a")
        assert engine.is_animating("b")

    def test_zero_duration_completes_immediately(self, before, after):
        engine = AnimationEngine()
        frames, done = [], []
        engine.tween(before, after, duration=0.0, on_frame=frames.append, on_done=lambda: done.append(True))
        assert frames == [after]
        assert done == [True]
        assert engine.running == []

    def test_identical_layouts_complete_immediately(self, before):
        engine = AnimationEngine()
        done = []
        engine.tween(before, dict(before), on_done=lambda: done.append(True))
        assert done == [True]
        assert not engine.is_animating("a")

    def test_curve_override(self, before, after):
        engine = AnimationEngine()
        tween = engine.tween(before, after, COMMIT, curve=linear)
        assert tween.profile.duration == COMMIT.duration
        assert tween.profile.curve is linear

    def test_cancel(self, before, after):
        engine = AnimationEngine()
        done = []
        engine.tween(before, after, on_done=lambda: done.append(True))
        assert engine.cancel(["b"]) == 1
        engine.run_until_idle()
        assert done == []

    def test_finish_jumps_to_end(self, before, after):
        engine = AnimationEngine()
        frames = []
        engine.tween(before, after, on_frame=frames.append)
        engine.finish()
        assert frames[-1] == after
        assert engine.running == []

    def test_finish_runs_chained_tweens(self, before, after):
        engine = AnimationEngine()
        frames, done = [], []

        def chain():
            engine.tween(after, before, on_frame=frames.append, on_done=lambda: done.append("second"))

        engine.tween(before, after, on_frame=frames.append, on_done=chain)
        engine.finish()
        assert done == ["second"]
        assert frames[-1] == before

    def test_finish_only_selected_fields(self, before, after):
        engine = AnimationEngine()
        engine.tween({"a": before["a"]}, {"a": after["a"]})
        engine.tween({"b": before["b"]}, {"b": after["b"]})
        engine.finish(["a"])
        assert not engine.is_animating("a")
        assert engine.is_animating("b")
