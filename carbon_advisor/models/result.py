"""
Matching engine output model.

``RecommendationResult`` is the only thing the presentation layer needs:
the branch taken (``kind``), the ordered measures to show, the target gap
and, for combinations, their summed impact.  A result with no items is a
valid outcome ("no benchmark data for this industry / goal"), not an error.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from carbon_advisor.models.action import ActionRecord
from carbon_advisor.taxonomy.goal_taxonomy import GoalPath, RecommendationKind


class RecommendationResult(BaseModel):
    """Ranked recommendation for one (industry, goal) request.

    Attributes:
        kind: Engine branch: ``none``, ``no_goal``, ``single`` or ``combo``.
        items: Measures in presentation order.
        target_gap: Reduction needed in the path unit; ``0`` without a goal.
        total_impact: Summed impact of ``items``; set only for ``combo``.
        path: Metric the impact values refer to.
    """

    model_config = ConfigDict(frozen=True)

    kind: RecommendationKind = RecommendationKind.NONE
    items: tuple[ActionRecord, ...] = ()
    target_gap: float = 0.0
    total_impact: Optional[float] = None
    path: GoalPath = GoalPath.CARBON

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def coverage_pct(self) -> Optional[int]:
        """Share of the target gap the combination covers, capped at 100.

        ``None`` unless this is a ``combo`` result with a positive gap.
        """
        if self.kind != RecommendationKind.COMBO or self.total_impact is None:
            return None
        if self.target_gap <= 0:
            return None
        if self.total_impact > self.target_gap:
            return 100
        return round(self.total_impact / self.target_gap * 100)
