"""
Company reduction goal model.

A ``Goal`` is what the user states on the goal-input step: the metric to
reduce, the current annual baseline and a target expressed either as a
percentage of that baseline or as an absolute amount.

``baseline`` and ``target_value`` accept the same display-formatted strings
as benchmark cells (``"12,000"``); unparseable input becomes ``0.0``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from carbon_advisor.taxonomy.goal_taxonomy import PATH_UNITS, GoalPath, TargetType
from carbon_advisor.utils.parsing import parse_metric


class Goal(BaseModel):
    """A company's annual reduction objective.

    Attributes:
        path: Metric to reduce (``carbon`` in tCO2e, ``energy`` in kWh).
        baseline: Current annual value in the path unit.
        target_type: ``percentage`` of baseline or ``absolute`` amount.
        target_value: Target in the unit implied by ``target_type``.
    """

    model_config = ConfigDict(frozen=True)

    path: GoalPath = GoalPath.CARBON
    baseline: float = 0.0
    target_type: TargetType = TargetType.PERCENTAGE
    target_value: float = 0.0

    @field_validator("baseline", "target_value", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> float:
        return parse_metric(v)

    @property
    def target_gap(self) -> float:
        """Absolute reduction needed, in the path unit."""
        if self.target_type == TargetType.PERCENTAGE:
            return self.baseline * (self.target_value / 100.0)
        return self.target_value

    @property
    def unit(self) -> str:
        return PATH_UNITS[self.path]
