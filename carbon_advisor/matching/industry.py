"""
Industry catalogue helpers: which industries exist, search suggestions, and
the per-system footprint distribution of one industry.

All functions are pure and work on the same record collection the matching
engine consumes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from carbon_advisor.models.action import ActionRecord


@dataclass(frozen=True)
class SystemShare:
    """Footprint share of one energy system within an industry.

    Attributes:
        name:  System name, e.g. ``"空調系統"``.
        share: Share of the industry footprint, 0–100.
    """

    name:  str
    share: float


def list_industries(records: Iterable[ActionRecord]) -> list[str]:
    """Distinct non-empty industry names, sorted."""
    return sorted({r.industry for r in records if r.industry})


def is_known_industry(records: Iterable[ActionRecord], name: str) -> bool:
    """True if ``name`` (trimmed) exactly matches an industry in ``records``."""
    wanted = name.strip()
    return bool(wanted) and any(r.industry == wanted for r in records)


def suggest_industries(
    industries: Sequence[str],
    query:      str,
    limit:      int = 10,
) -> list[str]:
    """Case-insensitive substring search over industry names.

    An empty query returns the first ``limit`` industries unfiltered.
    """
    needle = query.strip().lower()
    if not needle:
        return list(industries[:limit])
    return [ind for ind in industries if needle in ind.lower()][:limit]


def system_distribution(
    records:  Iterable[ActionRecord],
    industry: str,
) -> list[SystemShare]:
    """Footprint share per system for ``industry``, largest first.

    Each system appears once with the maximum positive share seen across its
    rows; systems with no positive share are omitted.
    """
    shares: dict[str, float] = {}
    for r in records:
        if r.industry != industry or r.system_share <= 0:
            continue
        shares[r.system] = max(shares.get(r.system, 0.0), r.system_share)

    return [
        SystemShare(name=name, share=share)
        for name, share in sorted(shares.items(), key=lambda kv: -kv[1])
    ]


def top_systems(
    records:  Iterable[ActionRecord],
    industry: str,
    n:        int = 5,
) -> list[SystemShare]:
    """The ``n`` largest systems from ``system_distribution``."""
    return system_distribution(records, industry)[:n]
