"""
Advisor flow: the linear profile → goal → results progression around the
stateless matching engine.

Phases
------
  PROFILE     — company enters industry, tax ID and phone.
  GOAL_CHOICE — company decides whether to state a reduction goal.
  GOAL_INPUT  — company enters path, baseline and target.
  RESULTS     — recommendations are shown (recomputed on every request).

Transitions
-----------
  PROFILE     --submit_profile-->   GOAL_CHOICE
  GOAL_CHOICE --choose_no_goal-->   RESULTS      (goal = None)
  GOAL_CHOICE --choose_set_goal-->  GOAL_INPUT
  GOAL_INPUT  --confirm_goal-->     RESULTS      (goal set)
  GOAL_INPUT  --cancel_goal-->      GOAL_CHOICE
  RESULTS     --edit_goal-->        GOAL_CHOICE  (goal cleared)
  any         --reset-->            PROFILE      (everything cleared)

From RESULTS, ``quote_request_url(record)`` builds the hand-off link to the
quote-request form for one recommended measure.

``AdvisorSession`` is frozen; every transition returns a new session and
raises ``FlowError`` when called from the wrong phase or with invalid input.
"""

from __future__ import annotations

import logging
import re
from enum import StrEnum
from typing import Iterable, Optional, Sequence
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict

from carbon_advisor.config import ProfileConfig, QuoteConfig, RecommendConfig
from carbon_advisor.matching.engine import recommend
from carbon_advisor.models.action import ActionRecord
from carbon_advisor.models.goal import Goal
from carbon_advisor.models.result import RecommendationResult

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"\D")


class AdvisorPhase(StrEnum):
    """Step of the advisor flow."""

    PROFILE = "profile"
    GOAL_CHOICE = "goal_choice"
    GOAL_INPUT = "goal_input"
    RESULTS = "results"


class FlowError(RuntimeError):
    """Raised on an illegal transition or invalid profile input.

    Attributes:
        phase: Phase the session was in when the transition was attempted.
    """

    def __init__(self, phase: AdvisorPhase, message: str) -> None:
        self.phase = phase
        super().__init__(f"[{phase}] {message}")


class CompanyProfile(BaseModel):
    """Company identification entered on the profile step."""

    model_config = ConfigDict(frozen=True)

    industry: str = ""
    tax_id: str = ""
    phone: str = ""

    def problems(
        self,
        industries: Sequence[str],
        rules: ProfileConfig = ProfileConfig(),
    ) -> list[str]:
        """Return a list of human-readable validation problems (empty = valid)."""
        issues: list[str] = []
        if self.industry.strip() not in industries:
            issues.append(f"Unknown industry '{self.industry}'.")
        if not is_valid_tax_id(self.tax_id, rules):
            issues.append(f"Tax ID must be exactly {rules.tax_id_length} digits.")
        if not is_valid_phone(self.phone, rules):
            issues.append(
                f"Phone must start with '{rules.phone_prefix}' and have "
                f"{rules.phone_length} digits."
            )
        return issues

    def normalized(self, rules: ProfileConfig = ProfileConfig()) -> "CompanyProfile":
        """Trimmed industry; tax ID and phone reduced to their digits, truncated."""
        return CompanyProfile(
            industry=self.industry.strip(),
            tax_id=normalize_digits(self.tax_id, rules.tax_id_length),
            phone=normalize_digits(self.phone, rules.phone_length),
        )


def normalize_digits(value: str, max_length: Optional[int] = None) -> str:
    """Strip non-digits (and optionally truncate), as the input fields do."""
    digits = _DIGITS.sub("", value)
    return digits[:max_length] if max_length is not None else digits


def is_valid_tax_id(tax_id: str, rules: ProfileConfig = ProfileConfig()) -> bool:
    return tax_id.isdigit() and len(tax_id) == rules.tax_id_length


def is_valid_phone(phone: str, rules: ProfileConfig = ProfileConfig()) -> bool:
    return (
        phone.isdigit()
        and phone.startswith(rules.phone_prefix)
        and len(phone) == rules.phone_length
    )


def quote_request_url(
    profile: CompanyProfile,
    record:  ActionRecord,
    quote:   QuoteConfig = QuoteConfig(),
) -> str:
    """Build the quote-request link for ``record`` on behalf of ``profile``.

    Query parameters, in order: ``source``, ``industry``, ``taxId``,
    ``action`` (measure name, falling back to measure type) and ``system``.
    Values are form-encoded, so spaces become ``+``.
    """
    params = {
        "source":   quote.source_tag,
        "industry": profile.industry,
        "taxId":    profile.tax_id,
        "action":   record.display_name,
        "system":   record.system,
    }
    return f"{quote.base_url}?{urlencode(params)}"


class AdvisorSession(BaseModel):
    """Immutable snapshot of one company's advisor flow.

    Attributes:
        phase:   Current step.
        profile: Submitted profile; ``None`` until PROFILE is completed.
        goal:    Confirmed goal; ``None`` for the no-goal view or before input.
    """

    model_config = ConfigDict(frozen=True)

    phase: AdvisorPhase = AdvisorPhase.PROFILE
    profile: Optional[CompanyProfile] = None
    goal: Optional[Goal] = None

    # ── Transitions ───────────────────────────────────────────────────────────

    def submit_profile(
        self,
        profile: CompanyProfile,
        industries: Sequence[str],
        rules: ProfileConfig = ProfileConfig(),
    ) -> "AdvisorSession":
        self._require(AdvisorPhase.PROFILE, "submit_profile")
        normalized = profile.normalized(rules)
        issues = normalized.problems(industries, rules)
        if issues:
            raise FlowError(self.phase, " ".join(issues))
        logger.info("Profile accepted for industry=%r", normalized.industry)
        return self.model_copy(
            update={"phase": AdvisorPhase.GOAL_CHOICE, "profile": normalized, "goal": None}
        )

    def choose_no_goal(self) -> "AdvisorSession":
        self._require(AdvisorPhase.GOAL_CHOICE, "choose_no_goal")
        return self.model_copy(update={"phase": AdvisorPhase.RESULTS, "goal": None})

    def choose_set_goal(self) -> "AdvisorSession":
        self._require(AdvisorPhase.GOAL_CHOICE, "choose_set_goal")
        return self.model_copy(update={"phase": AdvisorPhase.GOAL_INPUT})

    def confirm_goal(self, goal: Goal) -> "AdvisorSession":
        self._require(AdvisorPhase.GOAL_INPUT, "confirm_goal")
        return self.model_copy(update={"phase": AdvisorPhase.RESULTS, "goal": goal})

    def cancel_goal(self) -> "AdvisorSession":
        self._require(AdvisorPhase.GOAL_INPUT, "cancel_goal")
        return self.model_copy(update={"phase": AdvisorPhase.GOAL_CHOICE})

    def edit_goal(self) -> "AdvisorSession":
        self._require(AdvisorPhase.RESULTS, "edit_goal")
        return self.model_copy(update={"phase": AdvisorPhase.GOAL_CHOICE, "goal": None})

    def reset(self) -> "AdvisorSession":
        return AdvisorSession()

    # ── Results ───────────────────────────────────────────────────────────────

    def recommendation(
        self,
        records: Iterable[ActionRecord],
        limits: RecommendConfig = RecommendConfig(),
    ) -> RecommendationResult:
        """Run the matching engine for this session's industry and goal."""
        self._require(AdvisorPhase.RESULTS, "recommendation")
        assert self.profile is not None
        return recommend(
            records,
            self.profile.industry,
            self.goal,
            no_goal_limit=limits.no_goal_limit,
            alternatives_limit=limits.alternatives_limit,
        )

    def quote_request_url(
        self,
        record: ActionRecord,
        quote: QuoteConfig = QuoteConfig(),
    ) -> str:
        """Link to the quote-request form for one recommended measure."""
        self._require(AdvisorPhase.RESULTS, "quote_request_url")
        assert self.profile is not None
        return quote_request_url(self.profile, record, quote)

    def _require(self, phase: AdvisorPhase, action: str) -> None:
        if self.phase != phase:
            raise FlowError(self.phase, f"'{action}' is only allowed in phase '{phase}'.")
