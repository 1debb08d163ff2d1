"""
ASCII terminal formatters for CLI output.

All formatters accept engine results / record lists and return plain
multi-line strings suitable for ``typer.echo()``.

Number display rules (``format_value``)
---------------------------------------
  - 0 or NaN                    -> "0"
  - |value| >= 1000, or forced  -> rounded integer with thousands separators
  - otherwise                   -> up to 2 decimals, trailing zeros dropped

Units are a pure function of the goal path: tCO2e for carbon (and for the
no-goal view), kWh for energy.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from carbon_advisor.matching.industry import SystemShare
from carbon_advisor.models.goal import Goal
from carbon_advisor.models.result import RecommendationResult
from carbon_advisor.taxonomy.goal_taxonomy import PATH_UNITS, GoalPath, RecommendationKind

FAST_PAYBACK_YEARS = 3.0

_HEADLINES: dict[RecommendationKind, str] = {
    RecommendationKind.NONE:    "No Recommendation",
    RecommendationKind.NO_GOAL: "Top Potential",
    RecommendationKind.SINGLE:  "Single Path",
    RecommendationKind.COMBO:   "Combo Strategy",
}


# ── Values and units ──────────────────────────────────────────────────────────


def format_value(value: float, force_integer: bool = False) -> str:
    """Format a metric for display.

    Examples::

        format_value(0)          -> "0"
        format_value(12.345)     -> "12.35"
        format_value(12.0)       -> "12"
        format_value(123456.7)   -> "123,457"
        format_value(42.6, True) -> "43"
    """
    if value == 0 or math.isnan(value):
        return "0"
    if force_integer or abs(value) >= 1000:
        return f"{round(value):,}"
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def unit_for_path(path: Optional[GoalPath]) -> str:
    """Display unit for a goal path; the no-goal view uses carbon units."""
    return PATH_UNITS[path or GoalPath.CARBON]


# ── Recommendation ────────────────────────────────────────────────────────────


def format_recommendation(
    result:   RecommendationResult,
    goal:     Optional[Goal],
    industry: str,
) -> str:
    """Format an engine result as a ranked ASCII table.

    Layout::

        === Combo Strategy ===
          Industry:    electronics
          Target gap:  500 tCO2e
          Coverage:    40%

          Rank  System            Measure                 Impact (tCO2e/yr)  Payback
          ------------------------------------------------------------------------------
             1  HVAC              Maglev chiller                        120      2.8 *

    ``*`` marks a fast payback (under three years).

    Args:
        result:   Output of ``recommend()``.
        goal:     The goal the result was computed for, or ``None``.
        industry: Industry name (header).

    Returns:
        Multi-line string.
    """
    unit = goal.unit if goal is not None else unit_for_path(None)
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== {_HEADLINES[result.kind]} ===")
    lines.append(f"  Industry:    {industry}")

    if goal is not None:
        lines.append(f"  Target gap:  {format_value(result.target_gap)} {unit}")
        if result.kind == RecommendationKind.COMBO:
            coverage = result.coverage_pct
            coverage_str = "n/a" if coverage is None else f"{coverage}%"
            lines.append(
                f"  Combined:    {format_value(result.total_impact or 0.0)} {unit}"
                f"  (coverage {coverage_str})"
            )

    if result.is_empty:
        lines.append("")
        lines.append("  (no benchmark data for this industry / goal combination)")
        return "\n".join(lines)

    impact_col = f"Impact ({unit}/yr)"
    header = (
        f"    {'Rank':>4}  {'System':<20}  {'Measure':<28}  "
        f"{impact_col:>20}  {'Payback':>8}"
    )
    lines.append("")
    lines.append(header)
    lines.append("    " + "-" * (len(header) - 4))

    for rank, record in enumerate(result.items, start=1):
        payback = record.payback_years_median
        flag = " *" if 0 < payback < FAST_PAYBACK_YEARS else "  "
        lines.append(
            f"    {rank:>4}  {record.system[:20]:<20}  {record.display_name[:28]:<28}  "
            f"{format_value(record.impact(result.path)):>20}  "
            f"{format_value(payback):>6}{flag}"
        )

    return "\n".join(lines)


# ── System distribution ───────────────────────────────────────────────────────


def format_system_distribution(
    shares:   Sequence[SystemShare],
    industry: str,
) -> str:
    """Format per-system footprint shares as an ASCII table."""
    lines: list[str] = []
    lines.append("")
    lines.append("=== System Share Distribution ===")
    lines.append(f"  Industry: {industry}")

    if not shares:
        lines.append("")
        lines.append("  (no system share data for this industry)")
        return "\n".join(lines)

    lines.append("")
    header = f"    {'System':<30}  {'Share':>8}"
    lines.append(header)
    lines.append("    " + "-" * (len(header) - 4))
    for s in shares:
        lines.append(f"    {s.name[:30]:<30}  {format_value(s.share) + '%':>8}")
    return "\n".join(lines)
