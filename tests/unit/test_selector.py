"""
Unit tests for the three-tier HandSelector.

The draw is pinned through fixed_draw_rng so each tier can be exercised
directly; uniform picks still come from a seeded generator.
"""

import pytest
from conftest import fixed_draw_rng, freqs, make_table

from src.trainer.hands import ALL_HANDS
from src.trainer.scheduler import RepetitionStore
from src.trainer.selector import (
    HandSelector,
    SelectionMode,
    SelectionTier,
    SelectorConfig,
    SessionSettings,
    boundary_slice_size,
)
from src.trainer.strategy_deck import StrategyIndex

T = 1_700_000_000_000
DUE_NOW = T + 60_000

BOUNDARY = SessionSettings.create(mode="boundary")
RANDOM = SessionSettings.create(mode="random")
REVIEW = SessionSettings.create(mode="review")


@pytest.fixture
def repetitions(state_store):
    return RepetitionStore(state_store)


def selector_for(index, repetitions, draw, seed=7):
    return HandSelector(index, repetitions, rng=fixed_draw_rng(draw, seed))


class TestSessionSettings:
    def test_empty_positions_means_all(self):
        assert BOUNDARY.active_positions(["RFI_BTN", "RFI_CO"]) == ["RFI_BTN", "RFI_CO"]

    def test_enabled_positions_in_table_order(self):
        settings = SessionSettings.create(enabled_positions=["RFI_CO", "RFI_SB", "RFI_BTN"])
        assert settings.active_positions(["RFI_BTN", "RFI_CO"]) == ["RFI_BTN", "RFI_CO", "RFI_SB"]

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            SessionSettings.create(mode="turbo")

    def test_settings_are_immutable(self):
        with pytest.raises(AttributeError):
            BOUNDARY.mode = SelectionMode.RANDOM


class TestBoundarySliceSize:
    @pytest.mark.parametrize(
        "pool_size, expected",
        [(0, 20), (10, 20), (100, 20), (104, 20), (105, 21), (500, 100), (1183, 236)],
    )
    def test_slice_size(self, pool_size, expected):
        assert boundary_slice_size(pool_size) == expected

    def test_custom_config(self):
        config = SelectorConfig(boundary_slice_fraction=0.5, boundary_min_slice=5)
        assert boundary_slice_size(4, config) == 5
        assert boundary_slice_size(30, config) == 15


class TestDueReviewTier:
    def test_due_item_picked_in_due_range(self, index, repetitions):
        repetitions.record_answer("RFI_CO", "A5o", False, T)

        pick = selector_for(index, repetitions, 0.1).select_next(BOUNDARY, DUE_NOW)

        assert pick.tier is SelectionTier.DUE_REVIEW
        assert (pick.position, pick.hand) == ("RFI_CO", "A5o")

    def test_not_due_yet_falls_through(self, index, repetitions):
        repetitions.record_answer("RFI_CO", "A5o", False, T)

        pick = selector_for(index, repetitions, 0.1).select_next(BOUNDARY, DUE_NOW - 1)

        assert pick.tier is SelectionTier.BOUNDARY

    def test_due_item_outside_active_positions_ignored(self, index, repetitions):
        repetitions.record_answer("RFI_CO", "A5o", False, T)
        settings = SessionSettings.create(enabled_positions=["RFI_BTN"])

        pick = selector_for(index, repetitions, 0.1).select_next(settings, DUE_NOW)

        assert pick.tier is SelectionTier.BOUNDARY
        assert pick.position == "RFI_BTN"

    def test_draw_above_due_weight_skips_due(self, index, repetitions):
        repetitions.record_answer("RFI_CO", "A5o", False, T)

        pick = selector_for(index, repetitions, 0.5).select_next(BOUNDARY, DUE_NOW)

        assert pick.tier is SelectionTier.BOUNDARY

    def test_unresolvable_due_item_never_returned(self, index, repetitions):
        # KK is not in the table for RFI_BTN
        repetitions.record_answer("RFI_BTN", "KK", False, T)

        for seed in range(200):
            pick = selector_for(index, repetitions, 0.1, seed).select_next(BOUNDARY, DUE_NOW)
            assert pick is not None
            assert pick.hand != "KK"
            assert pick.tier is not SelectionTier.DUE_REVIEW

    def test_due_pick_is_uniform_over_relevant(self, index, repetitions):
        repetitions.record_answer("RFI_BTN", "AA", False, T)
        repetitions.record_answer("RFI_CO", "72o", False, T)

        seen = {
            selector_for(index, repetitions, 0.0, seed).select_next(BOUNDARY, DUE_NOW).hand
            for seed in range(50)
        }
        assert seen == {"AA", "72o"}


class TestBoundaryTier:
    def test_small_pool_uses_every_candidate(self, index, repetitions):
        picks = {
            (p.position, p.hand)
            for p in (
                selector_for(index, repetitions, 0.5, seed).select_next(BOUNDARY, T)
                for seed in range(300)
            )
        }
        # 9 candidates < 20 minimum slice, so every pair is reachable
        assert len(picks) == 9

    def test_boundary_range_draw(self, index, repetitions):
        pick = selector_for(index, repetitions, 0.5).select_next(BOUNDARY, T)
        assert pick.tier is SelectionTier.BOUNDARY

    def test_large_pool_only_top_slice(self, repetitions):
        # 100 hands with strictly decreasing boundary scores
        hands = {
            hand: freqs(raise_=0.5 + i / 200, fold=0.5 - i / 200)
            for i, hand in enumerate(ALL_HANDS[:100])
        }
        index = StrategyIndex(make_table({"RFI_BTN": hands}))
        top = set(ALL_HANDS[:20])

        for seed in range(200):
            pick = selector_for(index, repetitions, 0.5, seed).select_next(BOUNDARY, T)
            assert pick.hand in top

    def test_boundary_mode_forces_boundary_over_random_draw(self, index, repetitions):
        pick = selector_for(index, repetitions, 0.95).select_next(BOUNDARY, T)
        assert pick.tier is SelectionTier.BOUNDARY

    def test_pool_spans_active_positions(self, index, repetitions):
        settings = SessionSettings.create(enabled_positions=["RFI_CO"])
        for seed in range(50):
            pick = selector_for(index, repetitions, 0.5, seed).select_next(settings, T)
            assert pick.position == "RFI_CO"


class TestRandomTier:
    def test_random_mode_skips_boundary(self, index, repetitions):
        pick = selector_for(index, repetitions, 0.5).select_next(RANDOM, T)
        assert pick.tier is SelectionTier.RANDOM

    def test_random_mode_keeps_due_priority(self, index, repetitions):
        repetitions.record_answer("RFI_BTN", "Q5s", False, T)

        pick = selector_for(index, repetitions, 0.1).select_next(RANDOM, DUE_NOW)

        assert pick.tier is SelectionTier.DUE_REVIEW
        assert pick.hand == "Q5s"

    def test_random_reaches_trivial_hands(self, index, repetitions):
        hands = {
            selector_for(index, repetitions, 0.95, seed).select_next(RANDOM, T).hand
            for seed in range(300)
        }
        assert "72o" in hands
        assert "AA" in hands

    def test_position_without_hands_is_no_candidates(self, repetitions):
        index = StrategyIndex(make_table({"RFI_BTN": {"AA": freqs(raise_=1.0)}, "RFI_SB": {}}))
        settings = SessionSettings.create(enabled_positions=["RFI_SB"], mode="random")

        assert selector_for(index, repetitions, 0.95).select_next(settings, T) is None

    def test_empty_pool_in_boundary_mode_is_no_candidates(self, repetitions):
        index = StrategyIndex(make_table({"RFI_SB": {}}))
        assert selector_for(index, repetitions, 0.5).select_next(BOUNDARY, T) is None

    def test_enabled_position_missing_from_table(self, index, repetitions):
        settings = SessionSettings.create(enabled_positions=["RFI_UTG"])
        assert selector_for(index, repetitions, 0.5).select_next(settings, T) is None


class TestReviewMode:
    def test_nothing_seen_is_no_candidates(self, index, repetitions):
        assert selector_for(index, repetitions, 0.5).select_next(REVIEW, T) is None

    def test_due_tier_runs_regardless_of_draw(self, index, repetitions):
        repetitions.record_answer("RFI_CO", "A5o", False, T)

        pick = selector_for(index, repetitions, 0.95).select_next(REVIEW, DUE_NOW)

        assert pick.tier is SelectionTier.DUE_REVIEW
        assert pick.hand == "A5o"

    @pytest.mark.parametrize("draw", [0.1, 0.5, 0.95])
    def test_only_seen_hands_offered(self, index, repetitions, draw):
        repetitions.record_answer("RFI_BTN", "72o", True, T)
        repetitions.record_answer("RFI_CO", "AA", True, T)

        for seed in range(50):
            pick = selector_for(index, repetitions, draw, seed).select_next(REVIEW, T)
            assert (pick.position, pick.hand) in {("RFI_BTN", "72o"), ("RFI_CO", "AA")}

    def test_random_tier_skips_positions_without_seen_hands(self, index, repetitions):
        repetitions.record_answer("RFI_CO", "72o", True, T)

        for seed in range(30):
            pick = selector_for(index, repetitions, 0.95, seed).select_next(REVIEW, T)
            assert (pick.position, pick.hand) == ("RFI_CO", "72o")
            assert pick.tier is SelectionTier.RANDOM


class TestSingleHandTable:
    @pytest.fixture
    def single(self):
        return StrategyIndex(make_table({"RFI_BTN": {"AA": freqs(raise_=1.0)}}))

    @pytest.mark.parametrize("draw", [0.0, 0.1, 0.19, 0.2, 0.5, 0.89, 0.9, 0.99])
    @pytest.mark.parametrize("settings", [BOUNDARY, RANDOM])
    def test_always_picks_only_candidate(self, single, repetitions, draw, settings):
        pick = selector_for(single, repetitions, draw).select_next(settings, T)

        assert (pick.position, pick.hand) == ("RFI_BTN", "AA")
        assert pick.evaluation.boundary_score == 0

    @pytest.mark.parametrize("draw", [0.0, 0.5, 0.99])
    def test_due_and_review_also_pick_it(self, single, repetitions, draw):
        repetitions.record_answer("RFI_BTN", "AA", False, T)

        for settings in (BOUNDARY, RANDOM, REVIEW):
            pick = selector_for(single, repetitions, draw).select_next(settings, DUE_NOW)
            assert (pick.position, pick.hand) == ("RFI_BTN", "AA")
