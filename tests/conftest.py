"""Shared test fixtures for magnetic-grid tests."""

from __future__ import annotations

import logging

import pytest

from magnetic_grid.config import reset_settings
from magnetic_grid.grid.models import FieldPlacement, Layout
from magnetic_grid.layout.builder import demo_layout


@pytest.fixture(autouse=True)
def _reset_settings():
    """Reset settings singleton between tests."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo the CLI's rich handler so caplog sees package records."""
    yield
    logger = logging.getLogger("magnetic_grid")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def demo() -> Layout:
    """field1 full on row 0; field2 half + field3 third on row 1;
    field4 two-thirds + field5 third on row 2."""
    return demo_layout()


@pytest.fixture
def stacked() -> Layout:
    """A full width on row 0, B half width on row 1."""
    return {
        "A": FieldPlacement.at("A", x=0.0, y=0.0, width=1.0),
        "B": FieldPlacement.at("B", x=0.0, y=70.0, width=0.5),
    }
