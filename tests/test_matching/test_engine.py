"""
Tests for carbon_advisor/matching/engine.py.

What we test
------------
recommend():
  - Empty input / unknown industry -> kind none, no items.
  - No goal: top 5 by system share desc, ties by carbon impact desc.
  - Goal met by the best measure -> single + up to 2 alternatives of
    other measure types.
  - Goal not met -> greedy combo: distinct-type pass, then fallback pass.
  - Placeholder measure types ("" / "0") and non-positive impacts are never
    returned.
  - Energy path uses MWh x 1000 (kWh).
  - Determinism and non-mutation of inputs.

build_combo() / distinct_type_pass() / fallback_pass():
  - Each pass tested independently.
"""

from __future__ import annotations

import pytest

from carbon_advisor.matching.engine import (
    active_path,
    build_combo,
    compute_target_gap,
    distinct_type_pass,
    fallback_pass,
    filter_actions,
    rank_by_footprint,
    rank_by_impact,
    recommend,
)
from carbon_advisor.models.goal import Goal
from carbon_advisor.taxonomy.goal_taxonomy import GoalPath, RecommendationKind, TargetType

ELECTRONICS = "electronics"


def _carbon_goal(target_value, baseline=1000, target_type="percentage") -> Goal:
    return Goal(
        path="carbon", baseline=baseline, target_type=target_type, target_value=target_value,
    )


# ── Documented scenarios ──────────────────────────────────────────────────────

class TestScenarios:
    def test_empty_records_no_goal(self):
        result = recommend([], ELECTRONICS, None)
        assert result.kind == RecommendationKind.NONE
        assert result.items == ()
        assert result.target_gap == 0.0
        assert result.total_impact is None

    def test_no_goal_sorted_by_share(self, electronics_records):
        result = recommend(electronics_records, ELECTRONICS, None)
        assert result.kind == RecommendationKind.NO_GOAL
        assert [r.system_share for r in result.items] == [60, 40, 10]
        assert result.target_gap == 0.0

    def test_percentage_goal_met_by_single_measure(self, electronics_records):
        result = recommend(electronics_records, ELECTRONICS, _carbon_goal(10))
        assert result.target_gap == pytest.approx(100.0)
        assert result.kind == RecommendationKind.SINGLE
        assert result.items[0].carbon_reduction_median == 120

    def test_combo_exhausts_records_when_gap_too_large(self, electronics_records):
        result = recommend(electronics_records, ELECTRONICS, _carbon_goal(50))
        assert result.target_gap == pytest.approx(500.0)
        assert result.kind == RecommendationKind.COMBO
        assert len(result.items) == 3
        assert result.total_impact == pytest.approx(200.0)
        assert [r.carbon_reduction_median for r in result.items] == [120, 50, 30]

    def test_zero_measure_type_never_selected(self, electronics_records, make_record):
        records = electronics_records + [make_record(measure_type="0", carbon=10_000, share=99)]
        for goal in (None, _carbon_goal(10), _carbon_goal(90)):
            result = recommend(records, ELECTRONICS, goal)
            assert all(r.measure_type != "0" for r in result.items)

    def test_malformed_share_sorts_last(self, electronics_records, make_record):
        bad = make_record(measure_type="heat-pump", carbon=500, share="abc%")
        result = recommend(electronics_records + [bad], ELECTRONICS, None)
        assert bad.system_share == 0.0
        assert result.items[-1] is bad


# ── Filtering ────────────────────────────────────────────────────────────────

class TestFiltering:
    def test_unknown_industry_returns_none_with_gap(self, electronics_records):
        result = recommend(electronics_records, "textiles", _carbon_goal(10))
        assert result.kind == RecommendationKind.NONE
        assert result.items == ()
        assert result.target_gap == pytest.approx(100.0)

    def test_other_industries_excluded(self, electronics_records, make_record):
        other = make_record(measure_type="boiler", carbon=900, share=90, industry="textiles")
        result = recommend(electronics_records + [other], ELECTRONICS, None)
        assert other not in result.items
        assert all(r.industry == ELECTRONICS for r in result.items)

    def test_empty_measure_type_excluded(self, make_record):
        records = [make_record(measure_type="", carbon=100)]
        assert recommend(records, ELECTRONICS, None).kind == RecommendationKind.NONE

    def test_zero_impact_excluded(self, make_record):
        records = [make_record(measure_type="a", carbon=0), make_record(measure_type="b", carbon=5)]
        result = recommend(records, ELECTRONICS, None)
        assert [r.measure_type for r in result.items] == ["b"]

    def test_energy_path_filters_on_energy(self, make_record):
        carbon_only = make_record(measure_type="a", carbon=100, energy_mwh=0)
        energy_only = make_record(measure_type="b", carbon=0, energy_mwh=2)
        goal = Goal(path="energy", baseline=0, target_type="absolute", target_value=1000)
        result = recommend([carbon_only, energy_only], ELECTRONICS, goal)
        assert list(result.items) == [energy_only]

    def test_no_goal_filters_on_carbon(self, make_record):
        energy_only = make_record(measure_type="b", carbon=0, energy_mwh=2)
        assert recommend([energy_only], ELECTRONICS, None).kind == RecommendationKind.NONE

    def test_filter_actions_keeps_input_order(self, electronics_records):
        kept = filter_actions(electronics_records, ELECTRONICS, GoalPath.CARBON)
        assert kept == electronics_records


# ── Target gap ────────────────────────────────────────────────────────────────

class TestTargetGap:
    def test_no_goal_is_zero(self):
        assert compute_target_gap(None) == 0.0

    def test_percentage(self):
        goal = Goal(path="carbon", baseline=2000, target_type="percentage", target_value=25)
        assert compute_target_gap(goal) == pytest.approx(500.0)

    def test_absolute(self):
        goal = Goal(path="carbon", baseline=2000, target_type="absolute", target_value=75)
        assert compute_target_gap(goal) == pytest.approx(75.0)

    def test_unparseable_values_are_zero(self):
        goal = Goal(path="carbon", baseline="n/a", target_type="percentage", target_value="")
        assert compute_target_gap(goal) == 0.0

    def test_active_path(self):
        assert active_path(None) == GoalPath.CARBON
        assert active_path(Goal(path="energy")) == GoalPath.ENERGY


# ── No-goal branch ────────────────────────────────────────────────────────────

class TestNoGoal:
    def test_limited_to_five(self, make_record):
        records = [make_record(measure_type=f"m{i}", carbon=10 + i, share=i) for i in range(8)]
        result = recommend(records, ELECTRONICS, None)
        assert len(result.items) == 5
        assert [r.system_share for r in result.items] == [7, 6, 5, 4, 3]

    def test_share_ties_broken_by_impact(self, make_record):
        low  = make_record(measure_type="low", carbon=5, share=50)
        high = make_record(measure_type="high", carbon=80, share=50)
        result = recommend([low, high], ELECTRONICS, None)
        assert list(result.items) == [high, low]

    def test_full_ties_keep_input_order(self, make_record):
        first  = make_record(measure_type="first", carbon=10, share=20)
        second = make_record(measure_type="second", carbon=10, share=20)
        result = recommend([first, second], ELECTRONICS, None)
        assert result.items[0] is first
        assert result.items[1] is second

    def test_custom_limit(self, electronics_records):
        result = recommend(electronics_records, ELECTRONICS, None, no_goal_limit=1)
        assert len(result.items) == 1

    def test_rank_by_footprint(self, electronics_records):
        ranked = rank_by_footprint(electronics_records, GoalPath.CARBON)
        assert [r.measure_type for r in ranked] == ["chiller", "vfd", "lighting"]


# ── Single branch ─────────────────────────────────────────────────────────────

class TestSingle:
    def test_alternatives_skip_primary_measure_type(self, make_record):
        primary = make_record(measure_type="chiller", carbon=200)
        twin    = make_record(measure_type="chiller", carbon=150)
        alt_a   = make_record(measure_type="vfd", carbon=100)
        alt_b   = make_record(measure_type="led", carbon=50)
        alt_c   = make_record(measure_type="boiler", carbon=40)
        goal = _carbon_goal(100, target_type="absolute")
        result = recommend([alt_c, twin, primary, alt_b, alt_a], ELECTRONICS, goal)
        assert result.kind == RecommendationKind.SINGLE
        assert list(result.items) == [primary, alt_a, alt_b]
        assert result.total_impact is None

    def test_primary_equal_to_gap_is_single(self, electronics_records):
        result = recommend(electronics_records, ELECTRONICS, _carbon_goal(120, target_type="absolute"))
        assert result.kind == RecommendationKind.SINGLE

    def test_zero_gap_is_single(self, electronics_records):
        goal = _carbon_goal(10, baseline=0)
        result = recommend(electronics_records, ELECTRONICS, goal)
        assert result.target_gap == 0.0
        assert result.kind == RecommendationKind.SINGLE

    def test_negative_target_is_single(self, electronics_records):
        result = recommend(electronics_records, ELECTRONICS, _carbon_goal(-5, target_type="absolute"))
        assert result.kind == RecommendationKind.SINGLE

    def test_fewer_alternatives_when_only_one_type(self, make_record):
        records = [make_record(measure_type="same", carbon=c) for c in (90, 80, 70)]
        result = recommend(records, ELECTRONICS, _carbon_goal(10, target_type="absolute"))
        assert len(result.items) == 1

    def test_impact_sort_is_stable(self, make_record):
        first  = make_record(measure_type="a", carbon=100)
        second = make_record(measure_type="b", carbon=100)
        result = recommend([first, second], ELECTRONICS, _carbon_goal(1, target_type="absolute"))
        assert result.items[0] is first


# ── Combo branch ──────────────────────────────────────────────────────────────

class TestCombo:
    def test_stops_once_gap_is_met(self, make_record):
        records = [
            make_record(measure_type="a", carbon=60),
            make_record(measure_type="b", carbon=50),
            make_record(measure_type="c", carbon=40),
        ]
        result = recommend(records, ELECTRONICS, _carbon_goal(100, target_type="absolute"))
        assert result.kind == RecommendationKind.COMBO
        assert [r.measure_type for r in result.items] == ["a", "b"]
        assert result.total_impact == pytest.approx(110.0)

    def test_prefers_new_measure_types(self, make_record):
        a1 = make_record(measure_type="a", carbon=60)
        a2 = make_record(measure_type="a", carbon=55)
        b1 = make_record(measure_type="b", carbon=30)
        c1 = make_record(measure_type="c", carbon=20)
        result = recommend([a1, a2, b1, c1], ELECTRONICS, _carbon_goal(110, target_type="absolute"))
        # distinct pass: a1, b1, c1 -> 110; a2 never needed
        assert list(result.items) == [a1, b1, c1]
        assert result.total_impact == pytest.approx(110.0)

    def test_fallback_adds_duplicate_types(self, make_record):
        a1 = make_record(measure_type="a", carbon=60)
        a2 = make_record(measure_type="a", carbon=55)
        b1 = make_record(measure_type="b", carbon=30)
        result = recommend([a1, a2, b1], ELECTRONICS, _carbon_goal(120, target_type="absolute"))
        assert list(result.items) == [a1, b1, a2]
        assert result.total_impact == pytest.approx(145.0)

    def test_total_impact_matches_items(self, make_record):
        records = [make_record(measure_type=t, carbon=c) for t, c in
                   [("a", 40), ("a", 35), ("b", 20), ("c", 10), ("b", 5)]]
        result = recommend(records, ELECTRONICS, _carbon_goal(1000, target_type="absolute"))
        assert result.total_impact == pytest.approx(sum(r.carbon_reduction_median for r in result.items))
        assert len(result.items) == len(records)

    def test_identical_records_both_added_in_fallback(self, make_record):
        a1 = make_record(measure_type="a", carbon=10)
        a2 = make_record(measure_type="a", carbon=10)
        assert a1 == a2 and a1 is not a2
        result = recommend([a1, a2], ELECTRONICS, _carbon_goal(100, target_type="absolute"))
        assert len(result.items) == 2
        assert result.total_impact == pytest.approx(20.0)

    def test_energy_combo_uses_kwh(self, make_record):
        records = [
            make_record(measure_type="a", carbon=0, energy_mwh=1.5),
            make_record(measure_type="b", carbon=0, energy_mwh=1.0),
        ]
        goal = Goal(path="energy", baseline=50_000, target_type="percentage", target_value=5)
        result = recommend(records, ELECTRONICS, goal)
        assert result.target_gap == pytest.approx(2500.0)
        assert result.kind == RecommendationKind.COMBO
        assert result.total_impact == pytest.approx(2500.0)
        assert result.path == GoalPath.ENERGY


class TestComboPasses:
    def test_build_combo_starts_with_primary(self, electronics_records):
        ranked = rank_by_impact(electronics_records, GoalPath.CARBON)
        combo, total = build_combo(ranked, 150.0, GoalPath.CARBON)
        assert combo[0] is ranked[0]
        assert total == pytest.approx(170.0)

    def test_distinct_type_pass_skips_seen_types(self, make_record):
        primary = make_record(measure_type="a", carbon=10)
        dup     = make_record(measure_type="a", carbon=9)
        fresh   = make_record(measure_type="b", carbon=8)
        combo = [primary]
        total = distinct_type_pass(combo, 10.0, [dup, fresh], 100.0, GoalPath.CARBON)
        assert combo == [primary, fresh]
        assert total == pytest.approx(18.0)

    def test_distinct_type_pass_never_repeats_a_type(self, make_record):
        candidates = [make_record(measure_type=t, carbon=5) for t in "abcabc"]
        combo = [make_record(measure_type="z", carbon=5)]
        distinct_type_pass(combo, 5.0, candidates, 1000.0, GoalPath.CARBON)
        types = [r.measure_type for r in combo]
        assert len(types) == len(set(types))

    def test_fallback_pass_skips_present_records(self, make_record):
        primary = make_record(measure_type="a", carbon=10)
        other   = make_record(measure_type="a", carbon=9)
        combo = [primary]
        total = fallback_pass(combo, 10.0, [primary, other], 100.0, GoalPath.CARBON)
        assert combo == [primary, other]
        assert combo[1] is other
        assert total == pytest.approx(19.0)

    def test_fallback_pass_noop_when_gap_met(self, make_record):
        combo = [make_record(measure_type="a", carbon=10)]
        total = fallback_pass(combo, 10.0, [make_record(measure_type="b")], 5.0, GoalPath.CARBON)
        assert len(combo) == 1
        assert total == 10.0


# ── Properties ────────────────────────────────────────────────────────────────

class TestProperties:
    def test_deterministic(self, electronics_records):
        goal = _carbon_goal(50)
        assert recommend(electronics_records, ELECTRONICS, goal) == recommend(
            electronics_records, ELECTRONICS, goal
        )

    def test_inputs_not_mutated(self, electronics_records):
        snapshot = [r.model_dump() for r in electronics_records]
        order = list(electronics_records)
        recommend(electronics_records, ELECTRONICS, _carbon_goal(50))
        recommend(electronics_records, ELECTRONICS, None)
        assert electronics_records == order
        assert [r.model_dump() for r in electronics_records] == snapshot

    def test_accepts_generator_input(self, electronics_records):
        result = recommend((r for r in electronics_records), ELECTRONICS, None)
        assert len(result.items) == 3

    @pytest.mark.parametrize("target_type", list(TargetType))
    def test_returned_items_pass_filter(self, make_record, target_type):
        records = [
            make_record(measure_type="a", carbon=30),
            make_record(measure_type="0", carbon=300),
            make_record(measure_type="", carbon=300),
            make_record(measure_type="b", carbon=0),
            make_record(measure_type="c", carbon=20, industry="other"),
            make_record(measure_type="d", carbon=10),
        ]
        goal = Goal(path="carbon", baseline=1000, target_type=target_type, target_value=90)
        result = recommend(records, ELECTRONICS, goal)
        for r in result.items:
            assert r.industry == ELECTRONICS
            assert r.measure_type not in {"", "0"}
            assert r.carbon_reduction_median > 0
