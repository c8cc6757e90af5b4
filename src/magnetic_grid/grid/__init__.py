"""Grid constants, placement models, geometry and collision detection."""

from magnetic_grid.grid.collision import overlaps
from magnetic_grid.grid.constants import GRID, GridConstants
from magnetic_grid.grid.models import FieldPlacement, Layout, Position

__all__ = ["GRID", "FieldPlacement", "GridConstants", "Layout", "Position", "overlaps"]
