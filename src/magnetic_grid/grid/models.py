"""Core data models for grid layouts.

A layout is a plain ``dict`` mapping field id to an immutable
``FieldPlacement``. Operations in this package never mutate a layout
they receive; they build and return a new one.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from magnetic_grid.grid.constants import GRID


class ResizeEdge(str, Enum):
    """Edge of a field being dragged during a resize."""

    LEFT = "left"
    RIGHT = "right"


class Position(BaseModel):
    """Top-left corner of a field: normalized x, pixel y."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0

    @field_validator("x", "y")
    @classmethod
    def validate_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError(f"coordinate must be finite, got {v}")
        return v


class FieldPlacement(BaseModel):
    """Where a field sits on the grid and how wide it is."""

    model_config = ConfigDict(frozen=True)

    id: str
    width: float = 1.0
    position: Position = Field(default_factory=Position)

    @field_validator("width")
    @classmethod
    def validate_width(cls, v: float) -> float:
        if not math.isfinite(v) or not 0.0 <= v <= 1.0 + GRID.width_tolerance:
            raise ValueError(f"width must be within 0-1, got {v}")
        return v

    @classmethod
    def at(cls, field_id: str, *, x: float = 0.0, y: float = 0.0, width: float = 1.0) -> FieldPlacement:
        return cls(id=field_id, width=width, position=Position(x=x, y=y))

    @classmethod
    def hidden(cls, field_id: str) -> FieldPlacement:
        """Canonical placement for a field toggled off."""
        return cls(id=field_id, width=0.0, position=Position(x=-100.0, y=-100.0))

    @property
    def x(self) -> float:
        return self.position.x

    @property
    def y(self) -> float:
        return self.position.y

    @property
    def right(self) -> float:
        return self.position.x + self.width

    @property
    def is_visible(self) -> bool:
        return self.width > 0 and self.position.x >= 0 and self.position.y >= 0

    def with_width(self, width: float) -> FieldPlacement:
        return self.model_copy(update={"width": width})

    def with_position(self, x: float, y: float) -> FieldPlacement:
        return self.model_copy(update={"position": Position(x=x, y=y)})

    def moved_to(self, *, x: float | None = None, y: float | None = None, width: float | None = None) -> FieldPlacement:
        """Copy with any of x, y, width replaced."""
        return FieldPlacement(
            id=self.id,
            width=self.width if width is None else width,
            position=Position(
                x=self.position.x if x is None else x,
                y=self.position.y if y is None else y,
            ),
        )

    def same_geometry(self, other: FieldPlacement, tolerance: float = GRID.epsilon) -> bool:
        return (
            abs(self.width - other.width) <= tolerance
            and abs(self.position.x - other.position.x) <= tolerance
            and abs(self.position.y - other.position.y) <= tolerance
        )


Layout = dict[str, FieldPlacement]


class FieldDescriptor(BaseModel):
    """A field registered by the host application.

    The engine only ever looks at ``id``; ``render`` is an opaque hook the
    host uses to draw the field content.
    """

    id: str
    label: str = ""
    mandatory: bool = False
    default_value: Any = None
    render: Callable[..., Any] | None = Field(default=None, exclude=True, repr=False)


@dataclass(frozen=True)
class Point:
    """Pointer position in pixels."""

    x: float
    y: float

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


def layout_from(placements: Iterable[FieldPlacement]) -> Layout:
    """Build a layout from placements, rejecting duplicate ids."""
    layout: Layout = {}
    for placement in placements:
        if placement.id in layout:
            raise ValueError(f"Duplicate field id: {placement.id}")
        layout[placement.id] = placement
    return layout


def ordered(layout: Layout) -> list[FieldPlacement]:
    """Placements in reading order: top to bottom, left to right, then id."""
    return sorted(layout.values(), key=lambda p: (p.position.y, p.position.x, p.id))


def visible(layout: Layout) -> Layout:
    return {fid: p for fid, p in layout.items() if p.is_visible}
