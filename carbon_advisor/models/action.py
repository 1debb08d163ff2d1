"""
Benchmark action record model.

``ActionRecord`` is one row of the industry benchmark sheet: a single
(industry, system, measure) combination with the median outcomes observed
across adopting companies.

Numeric columns arrive as display-formatted strings (``"1,234"``, ``"40%"``)
or as already-typed numbers.  Field validators run ``parse_metric`` before
type coercion, so a record can always be constructed from a raw CSV row —
malformed numbers become ``0.0`` rather than validation errors.

Units
-----
``carbon_reduction_median`` is tCO2e/yr.  ``energy_potential_median`` is
**MWh**/yr as stored in the sheet; ``energy_potential_kwh`` applies the ×1000
conversion used everywhere an energy impact is compared or displayed.

The model is frozen: the matching engine and presentation layer never
mutate benchmark records.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from carbon_advisor.taxonomy.goal_taxonomy import MWH_TO_KWH, GoalPath
from carbon_advisor.utils.parsing import parse_metric, parse_percentage

# Sheet header → model field.  Headers not listed here end up in ``extra``.
COLUMN_MAP: dict[str, str] = {
    "案例公司產業別":            "industry",
    "系統名稱":                  "system",
    "措施類型":                  "measure_type",
    "措施名稱":                  "measure_name",
    "企業問題":                  "problem_statement",
    "a_系統佔比(同產業)":        "system_share",
    "b_措施佔比(同產業×系統)":   "measure_share",
    "c_碳減量中位數":            "carbon_reduction_median",
    "c_節能潛力中位數":          "energy_potential_median",
    "c_投資成本中位數":          "investment_cost_median",
    "c_年節省成本中位數":        "annual_saving_median",
    "c_回收年限中位數":          "payback_years_median",
    "c_單位減碳成本中位數":      "unit_carbon_cost_median",
}

INVALID_MEASURE_TYPES: frozenset[str] = frozenset({"", "0"})

_TEXT_FIELDS = ("industry", "system", "measure_type", "measure_name", "problem_statement")
_METRIC_FIELDS = (
    "carbon_reduction_median",
    "energy_potential_median",
    "investment_cost_median",
    "annual_saving_median",
    "payback_years_median",
    "unit_carbon_cost_median",
)


class ActionRecord(BaseModel):
    """One benchmark reduction measure for an industry and energy system.

    Attributes:
        industry: Industry segment the benchmark companies belong to.
        system: Energy system category, e.g. HVAC or compressed air.
        measure_type: Measure / technology identifier. ``""`` or ``"0"``
            marks a placeholder row that is never recommended.
        measure_name: Optional display name for the measure.
        problem_statement: Optional pain point the measure addresses.
        system_share: This system's share (0–100) of the industry footprint.
        measure_share: This measure's share (0–100) within industry × system.
        carbon_reduction_median: Median annual carbon reduction, tCO2e.
        energy_potential_median: Median annual energy saving, MWh.
        investment_cost_median: Median investment cost.
        annual_saving_median: Median annual cost saving.
        payback_years_median: Median payback period in years.
        unit_carbon_cost_median: Median cost per tonne of carbon reduced.
        extra: Unmapped sheet columns, kept verbatim.
    """

    model_config = ConfigDict(frozen=True)

    industry: str = ""
    system: str = ""
    measure_type: str = ""
    measure_name: str = ""
    problem_statement: str = ""
    system_share: float = 0.0
    measure_share: float = 0.0
    carbon_reduction_median: float = 0.0
    energy_potential_median: float = 0.0
    investment_cost_median: float = 0.0
    annual_saving_median: float = 0.0
    payback_years_median: float = 0.0
    unit_carbon_cost_median: float = 0.0
    extra: dict[str, str] = Field(default_factory=dict)

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("system_share", "measure_share", mode="before")
    @classmethod
    def coerce_percentage(cls, v: Any) -> float:
        return parse_percentage(v)

    @field_validator(*_METRIC_FIELDS, mode="before")
    @classmethod
    def coerce_metric(cls, v: Any) -> float:
        return parse_metric(v)

    # ── Derived values ────────────────────────────────────────────────────────

    @property
    def energy_potential_kwh(self) -> float:
        """Energy saving potential converted from MWh to kWh."""
        return self.energy_potential_median * MWH_TO_KWH

    @property
    def is_valid_measure(self) -> bool:
        """False for placeholder rows (empty or ``"0"`` measure type)."""
        return self.measure_type not in INVALID_MEASURE_TYPES

    @property
    def display_name(self) -> str:
        return self.measure_name or self.measure_type

    def impact(self, path: GoalPath) -> float:
        """Impact of this measure on ``path``: tCO2e for carbon, kWh for energy."""
        if path == GoalPath.ENERGY:
            return self.energy_potential_kwh
        return self.carbon_reduction_median

    # ── Construction ──────────────────────────────────────────────────────────

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ActionRecord":
        """Build a record from a raw sheet row keyed by the sheet headers.

        Known headers map onto typed fields; every other non-empty header is
        kept in ``extra``.  Missing headers take the field defaults.
        """
        fields: dict[str, Any] = {}
        extra: dict[str, str] = {}
        for header, value in row.items():
            if header is None:
                continue
            key = header.strip()
            target = COLUMN_MAP.get(key)
            if target is not None:
                fields[target] = value
            elif key:
                extra[key] = "" if value is None else str(value)
        return cls(**fields, extra=extra)
