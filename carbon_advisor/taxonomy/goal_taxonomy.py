"""
Goal taxonomy for the reduction advisor.

Three small enums describe every recommendation request and its outcome:
  - ``GoalPath``           — which metric drives matching (carbon or energy)?
  - ``TargetType``         — how is the target value expressed?
  - ``RecommendationKind`` — which branch of the matching engine produced the result?

``PATH_UNITS`` maps each path to the display unit of its impact values.
Energy impact is reported in kWh even though the benchmark sheet stores MWh;
the conversion factor lives in ``MWH_TO_KWH``.

This module has NO imports from any other ``carbon_advisor`` package.
"""

from enum import StrEnum


class GoalPath(StrEnum):
    """Metric a company wants to reduce."""

    CARBON = "carbon"
    """Annual carbon reduction in tonnes CO2e."""

    ENERGY = "energy"
    """Annual energy saving in kWh."""


class TargetType(StrEnum):
    """Interpretation of ``Goal.target_value``."""

    PERCENTAGE = "percentage"
    """Share of the company baseline, e.g. ``10`` means 10% of baseline."""

    ABSOLUTE = "absolute"
    """Absolute amount in the path unit."""


class RecommendationKind(StrEnum):
    """Branch taken by the matching engine."""

    NONE = "none"
    """No usable benchmark record for the industry / path."""

    NO_GOAL = "no_goal"
    """No goal set: highest-footprint systems first."""

    SINGLE = "single"
    """One measure alone closes the target gap."""

    COMBO = "combo"
    """Several measures combined to approach or close the gap."""


PATH_UNITS: dict[GoalPath, str] = {
    GoalPath.CARBON: "tCO2e",
    GoalPath.ENERGY: "kWh",
}

MWH_TO_KWH = 1000.0
