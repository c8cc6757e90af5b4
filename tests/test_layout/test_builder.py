"""Tests for the layout builder."""

from __future__ import annotations

import pytest

from magnetic_grid.exceptions import LayoutDefinitionError, LayoutValidationError
from magnetic_grid.grid.constants import FieldWidth
from magnetic_grid.layout.builder import LayoutBuilder, demo_layout


class TestAutoPlacement:
    def test_full_then_two_halves(self):
        layout = LayoutBuilder().field("a", "full").field("b", "half").field("c", "half").build()
        assert (layout["a"].x, layout["a"].y) == (0.0, 0.0)
        assert (layout["b"].x, layout["b"].y) == (0.0, 70.0)
        assert (layout["c"].x, layout["c"].y) == (0.5, 70.0)

    def test_pinned_fields_placed_first(self):
        layout = LayoutBuilder().field("b", "half").field("a", "half", row=0, column=3).build()
        assert layout["a"].x == 0.5
        assert (layout["b"].x, layout["b"].y) == (0.0, 0.0)

    def test_declaration_order_kept(self):
        layout = LayoutBuilder().field("b", "half").field("a", "half", row=0, column=3).build()
        assert list(layout) == ["b", "a"]

    def test_enum_and_float_sizes(self):
        layout = LayoutBuilder().field("a", FieldWidth.TWO_THIRDS).field("b", 2 / 6).build()
        assert layout["a"].width == pytest.approx(4 / 6)
        assert layout["b"].x == pytest.approx(4 / 6)

    def test_default_size_is_full(self):
        assert LayoutBuilder().field("a").build()["a"].width == 1.0


class TestRows:
    def test_row_places_side_by_side(self):
        layout = LayoutBuilder().row(("a", "third"), ("b", "third"), ("c", "third")).build()
        assert [layout[f].x for f in "abc"] == pytest.approx([0.0, 2 / 6, 4 / 6])
        assert all(layout[f].y == 0.0 for f in "abc")

    def test_rows_stack(self):
        layout = LayoutBuilder().row(("a", "half"), ("b", "half")).row(("c", "full")).build()
        assert layout["c"].y == 70.0


class TestHidden:
    def test_hidden_field(self):
        layout = LayoutBuilder().field("a").hidden("h").build()
        assert not layout["h"].is_visible


class TestErrors:
    def test_unknown_width(self):
        with pytest.raises(LayoutDefinitionError, match="Unknown width 'quarter'"):
            LayoutBuilder().field("a", "quarter")

    def test_column_without_row(self):
        with pytest.raises(LayoutDefinitionError, match="column given without row"):
            LayoutBuilder().field("a", "half", column=3)

    def test_duplicate_ids(self):
        with pytest.raises(LayoutDefinitionError, match="Duplicate field ids: a"):
            LayoutBuilder().field("a").field("a").build()

    def test_overlapping_pins(self):
        builder = LayoutBuilder().field("a", "two_thirds", row=0, column=0).field("b", "half", row=0, column=3)
        with pytest.raises(LayoutValidationError):
            builder.build()

    def test_skip_validation(self):
        builder = LayoutBuilder().field("a", "two_thirds", row=0, column=0).field("b", "half", row=0, column=3)
        layout = builder.build(validate=False)
        assert set(layout) == {"a", "b"}


def test_demo_layout():
    layout = demo_layout()
    assert list(layout) == ["field1", "field2", "field3", "field4", "field5"]
    assert layout["field1"].width == 1.0
    assert (layout["field3"].x, layout["field3"].y) == (0.5, 70.0)
    assert layout["field4"].y == 140.0
    assert layout["field5"].x == pytest.approx(4 / 6)
