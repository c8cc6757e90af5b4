"""Tests for pull-up and auto-expand."""

from __future__ import annotations

import pytest

from magnetic_grid.grid.models import FieldPlacement
from magnetic_grid.layout.compactor import Gap, auto_expand, compact, expansion_plan, find_gaps, pull_up
from magnetic_grid.layout.validator import validate_layout


def _field(field_id: str, row: int, col: int, cols: int) -> FieldPlacement:
    return FieldPlacement.at(field_id, x=col / 6, y=row * 70.0, width=cols / 6)


def _row(p: FieldPlacement) -> int:
    return round(p.y / 70.0)


class TestPullUp:
    @pytest.fixture
    def sparse(self):
        return {
            "A": _field("A", 0, 0, 6),
            "B": _field("B", 2, 0, 3),
            "C": _field("C", 2, 3, 3),
            "D": _field("D", 5, 2, 2),
        }

    def test_rows_renumbered(self, sparse):
        pulled = pull_up(sparse)
        assert {_row(p) for p in pulled.values()} == {0, 1, 2}
        assert _row(pulled["B"]) == _row(pulled["C"]) == 1
        assert _row(pulled["D"]) == 2

    def test_columns_and_widths_preserved(self, sparse):
        pulled = pull_up(sparse)
        for fid, p in sparse.items():
            assert pulled[fid].x == p.x
            assert pulled[fid].width == p.width

    def test_idempotent(self, sparse):
        once = pull_up(sparse)
        assert pull_up(once) == once

    def test_unchanged_rows_keep_identity(self, sparse):
        assert pull_up(sparse)["A"] is sparse["A"]

    def test_hidden_fields_untouched(self, sparse):
        layout = {**sparse, "H": FieldPlacement.hidden("H")}
        assert pull_up(layout)["H"] == layout["H"]

    def test_input_not_mutated(self, sparse):
        before = dict(sparse)
        pull_up(sparse)
        assert sparse == before


class TestAutoExpand:
    def test_single_field_goes_full_width(self):
        expanded = auto_expand({"A": _field("A", 0, 3, 3)})
        assert expanded["A"].width == 1.0
        assert expanded["A"].x == 0.0

    def test_two_halves_untouched(self):
        layout = {"A": _field("A", 0, 0, 3), "B": _field("B", 0, 3, 3)}
        assert auto_expand(layout) == layout

    def test_three_thirds_untouched(self):
        layout = {"A": _field("A", 0, 0, 2), "B": _field("B", 0, 2, 2), "C": _field("C", 0, 4, 2)}
        assert auto_expand(layout) == layout

    def test_equal_widths_redistributed(self):
        layout = {"A": _field("A", 0, 0, 2), "B": _field("B", 0, 2, 2)}
        expanded = auto_expand(layout)
        assert expanded["A"].width == 0.5
        assert expanded["B"].width == 0.5
        assert (expanded["A"].x, expanded["B"].x) == (0.0, 0.5)

    def test_gap_fill_grows_closest_field(self):
        # Trailing gap of one column; B's centre is closest to it
        layout = {"A": _field("A", 0, 0, 2), "B": _field("B", 0, 2, 3)}
        expanded = auto_expand(layout)
        assert expanded["A"] == layout["A"]
        assert expanded["B"].x == pytest.approx(2 / 6)
        assert expanded["B"].width == pytest.approx(4 / 6)

    def test_gap_fill_grows_left_into_leading_gap(self):
        layout = {"A": _field("A", 0, 1, 2), "B": _field("B", 0, 3, 3)}
        expanded = auto_expand(layout)
        assert expanded["A"].x == 0.0
        assert expanded["A"].width == 0.5
        assert expanded["B"] == layout["B"]

    def test_gap_fill_never_overlaps(self, demo):
        expanded = auto_expand(demo)
        assert validate_layout(expanded).valid

    def test_custom_threshold_skips_small_gaps(self):
        layout = {"A": _field("A", 0, 0, 2), "B": _field("B", 0, 2, 3)}
        assert auto_expand(layout, threshold=0.2) == layout

    def test_rows_handled_independently(self):
        layout = {"A": _field("A", 0, 0, 3), "B": _field("B", 1, 0, 2)}
        expanded = auto_expand(layout)
        assert expanded["A"].width == 1.0
        assert expanded["B"].width == 1.0
        assert expanded["B"].y == 70.0


class TestExpansionPlan:
    def test_describes_strategies(self, demo):
        plan = {e.row: e for e in expansion_plan(demo)}
        assert plan[1].strategy == "gap_fill"
        assert list(plan[1].updates) == ["field3"]
        assert 0 not in plan

    def test_single_strategy(self):
        (expansion,) = expansion_plan({"A": _field("A", 0, 0, 3)})
        assert expansion.strategy == "single"
        assert expansion.free_space == pytest.approx(0.5)


class TestFindGaps:
    def test_leading_between_trailing(self):
        placements = [_field("A", 0, 1, 1), _field("B", 0, 3, 1)]
        gaps = find_gaps(placements)
        assert [round(g.start * 6) for g in gaps] == [0, 2, 4]
        assert gaps[-1].size == pytest.approx(2 / 6)

    def test_midpoint(self):
        assert Gap(start=0.5, size=0.5).midpoint == 0.75

    def test_empty(self):
        assert find_gaps([]) == []


class TestCompact:
    def test_pull_up_then_expand(self):
        layout = {"A": _field("A", 0, 0, 6), "B": _field("B", 3, 3, 3)}
        result = compact(layout)
        assert _row(result["B"]) == 1
        assert result["B"].width == 1.0
        assert result["B"].x == 0.0

    def test_demo_stays_valid(self, demo):
        result = compact(demo)
        assert validate_layout(result).valid
        assert result["field3"].width == 0.5
