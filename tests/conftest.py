"""
Shared pytest fixtures for the Carbon Advisor test suite.

Provides:
  - ``make_record``: factory for ``ActionRecord`` with sensible defaults.
  - ``electronics_records``: three electronics measures with carbon
    reductions 50 / 120 / 30 and system shares 40 / 60 / 10.
  - ``sample_csv_text``: a small benchmark sheet export using the sheet's
    column headers, including a placeholder row and a second industry.
"""

from __future__ import annotations

from typing import Callable

import pytest

from carbon_advisor.models.action import ActionRecord

ELECTRONICS = "electronics"

SAMPLE_CSV_TEXT = (
    "案例公司產業別,系統名稱,措施類型,措施名稱,a_系統佔比(同產業),b_措施佔比(同產業×系統),"
    "c_碳減量中位數,c_節能潛力中位數,c_投資成本中位數,c_年節省成本中位數,"
    "c_回收年限中位數,c_單位減碳成本中位數,企業問題\n"
    "電子零組件製造業,空調系統,磁懸浮冰機,磁懸浮離心式冰機汰換,60%,35%,"
    "\"1,200\",\"2,400\",\"5,500\",\"1,960\",2.8,458,空調老舊\n"
    "電子零組件製造業,空調系統,冷卻塔變頻,冷卻塔變頻優化控制,60%,20%,45,90,120,80,1.5,267,\n"
    "電子零組件製造業,空壓系統,高效空壓機,雙段壓縮高效空壓機,25%,50%,55,110,180,72,2.5,327,\n"
    "電子零組件製造業,照明系統,0,,5%,0%,999,999,0,0,0,0,\n"
    "\n"
    "紡織染整業,熱能回收,廢水熱交換,高溫廢水多段式熱交換,55%,60%,110,0,350,100,3.5,318,\n"
)


@pytest.fixture
def make_record() -> Callable[..., ActionRecord]:
    """Return a factory building ``ActionRecord`` objects for tests."""

    def _make(
        measure_type: str = "measure-a",
        carbon: float = 10.0,
        energy_mwh: float = 0.0,
        share: float = 10.0,
        industry: str = ELECTRONICS,
        system: str = "HVAC",
        payback: float = 2.0,
        **extra_fields,
    ) -> ActionRecord:
        return ActionRecord(
            industry=industry,
            system=system,
            measure_type=measure_type,
            system_share=share,
            carbon_reduction_median=carbon,
            energy_potential_median=energy_mwh,
            payback_years_median=payback,
            **extra_fields,
        )

    return _make


@pytest.fixture
def electronics_records(make_record) -> list[ActionRecord]:
    """Carbon reductions [50, 120, 30] with system shares [40, 60, 10]."""
    return [
        make_record(measure_type="vfd", carbon=50, share=40, system="Compressed air"),
        make_record(measure_type="chiller", carbon=120, share=60, system="HVAC"),
        make_record(measure_type="lighting", carbon=30, share=10, system="Lighting"),
    ]


@pytest.fixture
def sample_csv_text() -> str:
    return SAMPLE_CSV_TEXT
