"""Tests for grid models."""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from magnetic_grid.grid.models import FieldDescriptor, FieldPlacement, Point, Position, layout_from, ordered, visible


class TestFieldPlacement:
    def test_at(self):
        p = FieldPlacement.at("a", x=0.5, y=70.0, width=0.5)
        assert p.position == Position(x=0.5, y=70.0)
        assert p.right == 1.0
        assert p.is_visible

    def test_hidden(self):
        p = FieldPlacement.hidden("a")
        assert p.width == 0.0
        assert (p.x, p.y) == (-100.0, -100.0)
        assert not p.is_visible

    def test_negative_position_is_hidden(self):
        assert not FieldPlacement.at("a", x=-0.1, y=0.0, width=0.5).is_visible

    def test_frozen(self):
        p = FieldPlacement.at("a")
        with pytest.raises(ValidationError):
            p.width = 0.5

    @pytest.mark.parametrize("width", [1.5, -0.1, math.inf])
    def test_rejects_bad_width(self, width):
        with pytest.raises(ValidationError):
            FieldPlacement.at("a", width=width)

    def test_rejects_nan_coordinate(self):
        with pytest.raises(ValidationError):
            Position(x=math.nan, y=0.0)

    def test_copies_leave_original(self):
        p = FieldPlacement.at("a", x=0.0, y=0.0, width=0.5)
        moved = p.moved_to(y=140.0)
        assert moved.y == 140.0
        assert moved.width == 0.5
        assert p.y == 0.0
        assert p.with_width(1.0).width == 1.0
        assert p.with_position(0.5, 70.0).position == Position(x=0.5, y=70.0)

    def test_same_geometry(self):
        p = FieldPlacement.at("a", x=0.5, y=0.0, width=0.5)
        assert p.same_geometry(p.moved_to(x=0.5 + 1e-12))
        assert not p.same_geometry(p.moved_to(x=0.6))
        assert p.same_geometry(p.moved_to(width=0.505), tolerance=0.01)


class TestLayoutHelpers:
    def test_layout_from(self):
        layout = layout_from([FieldPlacement.at("a"), FieldPlacement.at("b", y=70.0)])
        assert list(layout) == ["a", "b"]

    def test_layout_from_duplicate(self):
        with pytest.raises(ValueError, match="Duplicate"):
            layout_from([FieldPlacement.at("a"), FieldPlacement.at("a")])

    def test_ordered_reading_order(self):
        layout = {
            "c": FieldPlacement.at("c", x=0.0, y=70.0, width=0.5),
            "b": FieldPlacement.at("b", x=0.5, y=0.0, width=0.5),
            "a": FieldPlacement.at("a", x=0.0, y=0.0, width=0.5),
        }
        assert [p.id for p in ordered(layout)] == ["a", "b", "c"]

    def test_visible(self):
        layout = {"a": FieldPlacement.at("a"), "h": FieldPlacement.hidden("h")}
        assert list(visible(layout)) == ["a"]


class TestFieldDescriptor:
    def test_render_excluded_from_dump(self):
        d = FieldDescriptor(id="email", label="Email", render=lambda: "x")
        assert "render" not in d.model_dump()
        assert d.render() == "x"


class TestPoint:
    def test_subtract(self):
        assert Point(10, 20) - Point(4, 5) == Point(6, 15)

    def test_distance(self):
        assert Point(0, 0).distance_to(Point(3, 4)) == 5.0
