"""Attach location-matched investors to an externally sourced deal."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import AliasChoices, BaseModel, Field
from pydantic.config import ConfigDict

from leadmatch.config.settings import attach_cap
from leadmatch.matching.engine import LOCATION_ONLY_SCORES, MatchEngine, MatchResult
from leadmatch.models import InvestorProfile, Lead, parse_lead


logger = logging.getLogger(__name__)

MAX_LOCATION_SCORE = max(LOCATION_ONLY_SCORES.values())


class AttachmentError(RuntimeError):
    """Raised when an investor cannot be attached to a deal."""


class DealRecord(BaseModel):
    """Deal as received from the sourcing pipeline."""

    deal_id: str = Field(..., min_length=1, validation_alias=AliasChoices("deal_id", "dealId"))
    deal_name: str = Field(default="", validation_alias=AliasChoices("deal_name", "dealName"))
    state: str
    zip_code: str = Field(..., validation_alias=AliasChoices("zip_code", "zipCode"))
    property_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("property_type", "propertyType")
    )
    condition: Optional[str] = None
    year_built: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("year_built", "yearBuilt")
    )
    ask_price: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("ask_price", "askPrice")
    )
    investors_requested: int = Field(
        default_factory=attach_cap,
        ge=1,
        validation_alias=AliasChoices("investors_requested", "investorsRequested"),
    )

    model_config = ConfigDict(frozen=True)

    def to_lead(self) -> Lead:
        """Derive the lead to match; raises InvalidLead on a bad state or zip."""

        return parse_lead(
            {
                "state": self.state,
                "zip_code": self.zip_code,
                "ask_price": self.ask_price,
                "year_built": self.year_built,
                "property_type": self.property_type,
                "condition": self.condition,
            }
        )


@dataclass(frozen=True)
class LeadAssignment:
    deal_id: str
    investor_id: str
    match_quality_score: int
    calculated_score: int
    score_overridden: bool
    match_reasons: tuple[str, ...]
    location_specificity: str
    attached_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "deal_id": self.deal_id,
            "investor_id": self.investor_id,
            "match_quality_score": self.match_quality_score,
            "calculated_score": self.calculated_score,
            "score_overridden": self.score_overridden,
            "match_reasons": list(self.match_reasons),
            "location_specificity": self.location_specificity,
            "attached_at": self.attached_at.isoformat(),
        }


@dataclass(frozen=True)
class DealCompletion:
    deal_id: str
    investors_requested: int
    investors_attached: int
    partial_match_reason: Optional[str]


class DealMatchingSession:
    """Tracks which candidates an operator attaches to one deal."""

    def __init__(
        self,
        deal: DealRecord,
        results: Sequence[MatchResult],
        *,
        cap: Optional[int] = None,
    ) -> None:
        self.deal = deal
        self.results: List[MatchResult] = list(results)
        self.cap = cap if cap is not None else deal.investors_requested
        self._by_investor: Dict[str, MatchResult] = {
            result.investor_id: result for result in self.results
        }
        self._assignments: List[LeadAssignment] = []

    @classmethod
    def from_profiles(
        cls,
        deal: DealRecord,
        profiles: Iterable[InvestorProfile],
        *,
        engine: MatchEngine | None = None,
        cap: Optional[int] = None,
    ) -> "DealMatchingSession":
        engine = engine or MatchEngine()
        results = engine.match(deal.to_lead(), profiles, mode="locationOnly")
        return cls(deal, results, cap=cap)

    @property
    def assignments(self) -> List[LeadAssignment]:
        return list(self._assignments)

    @property
    def remaining_slots(self) -> int:
        return max(0, self.cap - len(self._assignments))

    def candidates(self) -> List[MatchResult]:
        """Ranked results not yet attached."""

        attached = {assignment.investor_id for assignment in self._assignments}
        return [result for result in self.results if result.investor_id not in attached]

    def attach(self, investor_id: str, *, override_score: Optional[int] = None) -> LeadAssignment:
        result = self._by_investor.get(investor_id)
        if result is None:
            raise AttachmentError(f"Investor {investor_id} is not a candidate for deal {self.deal.deal_id}")
        if any(assignment.investor_id == investor_id for assignment in self._assignments):
            raise AttachmentError(f"Investor {investor_id} is already attached to deal {self.deal.deal_id}")
        if self.remaining_slots == 0:
            raise AttachmentError(f"Deal {self.deal.deal_id} already has {self.cap} investors attached")
        if override_score is not None and not 0 <= override_score <= MAX_LOCATION_SCORE:
            raise AttachmentError(f"override_score must be between 0 and {MAX_LOCATION_SCORE}")

        chosen_score = result.score if override_score is None else override_score
        assignment = LeadAssignment(
            deal_id=self.deal.deal_id,
            investor_id=investor_id,
            match_quality_score=chosen_score,
            calculated_score=result.score,
            score_overridden=chosen_score != result.score,
            match_reasons=tuple(result.reasons),
            location_specificity=result.location_specificity,
            attached_at=datetime.now(timezone.utc),
        )
        self._assignments.append(assignment)
        logger.info(
            "Attached investor %s to deal %s (score=%s, calculated=%s%s)",
            investor_id,
            self.deal.deal_id,
            chosen_score,
            result.score,
            ", overridden" if assignment.score_overridden else "",
        )
        return assignment

    def complete(self) -> DealCompletion:
        attached = len(self._assignments)
        requested = self.cap
        reason = None
        if attached < requested:
            reason = f"Only {attached} of {requested} investors available"
        return DealCompletion(
            deal_id=self.deal.deal_id,
            investors_requested=requested,
            investors_attached=attached,
            partial_match_reason=reason,
        )


__all__ = [
    "AttachmentError",
    "DealCompletion",
    "DealMatchingSession",
    "DealRecord",
    "LeadAssignment",
]
