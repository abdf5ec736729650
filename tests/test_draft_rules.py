"""Tests for snake turn order and rejection reasons."""

from collections import Counter

import pytest

from src.draft_manager.draft_rules import (
    AlreadyDrafted,
    DraftActionError,
    NotInitialized,
    current_drafter,
    draft_order,
    on_the_clock,
    round_for_index,
    seat_order,
)
from src.draft_manager.draft_state import Drafter


# ── Helpers ──────────────────────────────────────────────────────────

def _make_drafters(names):
    return [Drafter(id=name.lower(), name=name, order=i) for i, name in enumerate(names, 1)]


# ── Snake order ──────────────────────────────────────────────────────

class TestSnakeOrder:
    def test_three_drafters_two_rounds(self):
        drafters = _make_drafters(["X", "Y", "Z"])
        assert [d.name for d in draft_order(drafters, 2)] == ["X", "Y", "Z", "Z", "Y", "X"]

    def test_third_round_runs_forward_again(self):
        drafters = _make_drafters(["X", "Y"])
        assert [d.name for d in draft_order(drafters, 3)] == ["X", "Y", "Y", "X", "X", "Y"]

    @pytest.mark.parametrize("n,rounds", [(1, 1), (2, 5), (3, 4), (7, 3), (4, 200)])
    def test_each_drafter_picks_once_per_round(self, n, rounds):
        drafters = _make_drafters([f"D{i}" for i in range(n)])
        order = list(draft_order(drafters, rounds))

        counts = Counter(d.id for d in order)
        assert all(count == rounds for count in counts.values())
        assert len(counts) == n

        for r in range(rounds):
            block = [d.order for d in order[r * n:(r + 1) * n]]
            expected = sorted(block) if r % 2 == 0 else sorted(block, reverse=True)
            assert block == expected

    def test_uses_order_not_list_position(self):
        drafters = list(reversed(_make_drafters(["X", "Y", "Z"])))
        assert current_drafter(drafters, 1, 0).name == "X"
        assert [d.name for d in seat_order(drafters)] == ["X", "Y", "Z"]


class TestOutOfRange:
    def test_no_drafters(self):
        assert current_drafter([], 3, 0) is None

    def test_index_past_last_slot(self):
        drafters = _make_drafters(["X", "Y", "Z"])
        assert current_drafter(drafters, 2, 6) is None

    def test_negative_index(self):
        drafters = _make_drafters(["X", "Y", "Z"])
        assert current_drafter(drafters, 2, -1) is None

    def test_on_the_clock_after_completion(self, xyz_state):
        xyz_state.current_pick_index = xyz_state.total_slots
        assert on_the_clock(xyz_state) is None


class TestRoundForIndex:
    def test_rounds_are_one_based(self):
        assert round_for_index(0, 3) == 1
        assert round_for_index(2, 3) == 1
        assert round_for_index(3, 3) == 2


# ── Errors ───────────────────────────────────────────────────────────

class TestErrorTaxonomy:
    def test_reason_tags(self):
        error = AlreadyDrafted("A has already been drafted.")
        assert isinstance(error, DraftActionError)
        assert error.to_dict() == {
            "success": False,
            "reason": "AlreadyDrafted",
            "error": "A has already been drafted.",
        }

    def test_not_initialized_default_message(self):
        assert "not been initialized" in str(NotInitialized())
