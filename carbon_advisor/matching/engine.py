"""
Goal-gap matching engine: selects and ranks benchmark measures for a company.

``recommend(records, industry, goal)`` is a pure function — no I/O, no
caching, no mutation of its inputs.  Callers recompute on every change of
industry, goal or record source.

Algorithm
---------
1. Filter to the requested industry, drop placeholder measure types
   (``""`` / ``"0"``) and measures with no positive impact on the active
   path (``carbon`` without a goal, ``goal.path`` otherwise).
2. Target gap: ``baseline * pct / 100`` or the absolute target; 0 without goal.
3a. No goal: sort by system share desc, ties by impact desc; top 5.
3b. Goal: sort by impact desc.  If the best measure alone closes the gap,
    return it plus up to two alternatives of a different measure type
    (``single``).  Otherwise build a greedy combination (``combo``):
      - pass 1 adds measures of measure types not yet in the combination,
      - pass 2 (only if the gap is still open) adds any remaining measure.
    Both passes stop as soon as the gap is met.

Sorting is stable, so equal impacts keep input order.  The combination is a
greedy heuristic: it can overshoot the gap and is not minimal.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from carbon_advisor.models.action import ActionRecord
from carbon_advisor.models.goal import Goal
from carbon_advisor.models.result import RecommendationResult
from carbon_advisor.taxonomy.goal_taxonomy import GoalPath, RecommendationKind

logger = logging.getLogger(__name__)

NO_GOAL_LIMIT = 5
ALTERNATIVES_LIMIT = 2


def recommend(
    records:            Iterable[ActionRecord],
    industry:           str,
    goal:               Optional[Goal] = None,
    no_goal_limit:      int = NO_GOAL_LIMIT,
    alternatives_limit: int = ALTERNATIVES_LIMIT,
) -> RecommendationResult:
    """Recommend reduction measures for ``industry`` against an optional goal.

    Args:
        records:            All benchmark records (any industries).
        industry:           Industry segment to match exactly.
        goal:               Reduction goal, or ``None`` for the no-goal view.
        no_goal_limit:      Max items returned without a goal.
        alternatives_limit: Max alternatives shown after a sufficient measure.

    Returns:
        A ``RecommendationResult``; ``kind=none`` with no items when nothing
        usable exists.  Never raises for empty or non-matching input.
    """
    path       = active_path(goal)
    target_gap = compute_target_gap(goal)

    candidates = filter_actions(records, industry, path)
    if not candidates:
        result = RecommendationResult(
            kind=RecommendationKind.NONE, items=(), target_gap=target_gap, path=path,
        )
    elif goal is None:
        result = RecommendationResult(
            kind=RecommendationKind.NO_GOAL,
            items=tuple(rank_by_footprint(candidates, path)[:no_goal_limit]),
            target_gap=0.0,
            path=path,
        )
    else:
        ranked  = rank_by_impact(candidates, path)
        primary = ranked[0]

        if primary.impact(path) >= target_gap:
            alternatives = _alternatives(ranked, primary, alternatives_limit)
            result = RecommendationResult(
                kind=RecommendationKind.SINGLE,
                items=(primary, *alternatives),
                target_gap=target_gap,
                path=path,
            )
        else:
            combo, total = build_combo(ranked, target_gap, path)
            result = RecommendationResult(
                kind=RecommendationKind.COMBO,
                items=tuple(combo),
                target_gap=target_gap,
                total_impact=total,
                path=path,
            )

    logger.debug(
        "Recommendation for industry=%r: %s with %d of %d candidates",
        industry, result.kind, len(result.items), len(candidates),
        extra=_log_context(industry, result, len(candidates)),
    )
    return result


def _log_context(
    industry:   str,
    result:     RecommendationResult,
    candidates: int,
) -> dict:
    """Structured fields for the JSON log formatter."""
    return {
        "industry":     industry,
        "path":         str(result.path),
        "kind":         str(result.kind),
        "candidates":   candidates,
        "items":        len(result.items),
        "target_gap":   result.target_gap,
        "total_impact": result.total_impact,
    }


# ── Steps ─────────────────────────────────────────────────────────────────────

def active_path(goal: Optional[Goal]) -> GoalPath:
    """Metric used for filtering and impact: carbon unless a goal says otherwise."""
    return goal.path if goal is not None else GoalPath.CARBON


def compute_target_gap(goal: Optional[Goal]) -> float:
    """Absolute reduction the goal requires; 0 without a goal."""
    if goal is None:
        return 0.0
    return goal.target_gap


def filter_actions(
    records:  Iterable[ActionRecord],
    industry: str,
    path:     GoalPath,
) -> list[ActionRecord]:
    """Records of ``industry`` with a real measure type and positive impact."""
    return [
        r for r in records
        if r.industry == industry and r.is_valid_measure and r.impact(path) > 0
    ]


def rank_by_footprint(
    records: Sequence[ActionRecord],
    path:    GoalPath,
) -> list[ActionRecord]:
    """Sort by system share descending, ties by impact descending."""
    return sorted(records, key=lambda r: (-r.system_share, -r.impact(path)))


def rank_by_impact(
    records: Sequence[ActionRecord],
    path:    GoalPath,
) -> list[ActionRecord]:
    """Sort by impact descending; equal impacts keep input order."""
    return sorted(records, key=lambda r: -r.impact(path))


def build_combo(
    ranked:     Sequence[ActionRecord],
    target_gap: float,
    path:       GoalPath,
) -> tuple[list[ActionRecord], float]:
    """Greedy combination starting from ``ranked[0]``.

    Returns:
        ``(combo, total_impact)``.
    """
    primary    = ranked[0]
    combo      = [primary]
    total      = primary.impact(path)
    candidates = [r for r in ranked if r is not primary]

    total = distinct_type_pass(combo, total, candidates, target_gap, path)
    if total < target_gap:
        total = fallback_pass(combo, total, candidates, target_gap, path)
    return combo, total


def distinct_type_pass(
    combo:      list[ActionRecord],
    total:      float,
    candidates: Sequence[ActionRecord],
    target_gap: float,
    path:       GoalPath,
) -> float:
    """Append candidates whose measure type is new to ``combo`` until the gap closes.

    Mutates ``combo`` in place and returns the updated total.
    """
    seen_types = {r.measure_type for r in combo}
    for cand in candidates:
        if total >= target_gap:
            break
        if cand.measure_type not in seen_types:
            combo.append(cand)
            seen_types.add(cand.measure_type)
            total += cand.impact(path)
    return total


def fallback_pass(
    combo:      list[ActionRecord],
    total:      float,
    candidates: Sequence[ActionRecord],
    target_gap: float,
    path:       GoalPath,
) -> float:
    """Append any candidate not already in ``combo`` (by identity) until the gap closes.

    Mutates ``combo`` in place and returns the updated total.
    """
    present = {id(r) for r in combo}
    for cand in candidates:
        if total >= target_gap:
            break
        if id(cand) not in present:
            combo.append(cand)
            present.add(id(cand))
            total += cand.impact(path)
    return total


def _alternatives(
    ranked:  Sequence[ActionRecord],
    primary: ActionRecord,
    limit:   int,
) -> list[ActionRecord]:
    return [r for r in ranked if r.measure_type != primary.measure_type][:limit]
