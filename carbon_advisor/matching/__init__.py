"""
Matching layer: turns benchmark records plus an optional goal into ranked
reduction measures.

Modules
-------
engine   : recommend() + the filter / rank / combo steps — pure functions.
industry : list_industries(), suggest_industries(), system_distribution().
"""

from carbon_advisor.matching.engine import recommend

__all__ = ["recommend"]
