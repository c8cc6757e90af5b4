"""Placement planning, compaction, resizing, validation and serialization."""

from magnetic_grid.layout.builder import LayoutBuilder
from magnetic_grid.layout.compactor import auto_expand, compact, pull_up
from magnetic_grid.layout.planner import PlacementPlan, PlacementStrategy, plan_placement, plan_preview
from magnetic_grid.layout.resize import ResizeController, ResizeOutcome
from magnetic_grid.layout.serializer import LayoutSerializer
from magnetic_grid.layout.validator import ValidationResult, validate_layout

__all__ = [
    "LayoutBuilder",
    "LayoutSerializer",
    "PlacementPlan",
    "PlacementStrategy",
    "ResizeController",
    "ResizeOutcome",
    "ValidationResult",
    "auto_expand",
    "compact",
    "plan_placement",
    "plan_preview",
    "pull_up",
    "validate_layout",
]
