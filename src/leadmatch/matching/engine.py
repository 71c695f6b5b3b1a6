"""Lead-to-investor matching and scoring.

Both call sites share one engine. ``weighted`` mode scores every populated
lead criterion as a percentage; ``locationOnly`` mode reduces coverage to the
coarse 0-3 score used when attaching investors to a deal. Location is
resolved once, by :func:`resolve_location`, for both modes.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Mapping, Optional, Sequence

from leadmatch.config.settings import NATIONAL_STATE_THRESHOLD_DEFAULT
from leadmatch.models import BuyBox, InvestorProfile, Lead, Market, parse_lead
from leadmatch.models.records import CRITERIA_ORDER

from .normalize import normalize_condition, normalize_property_type, normalized_set


logger = logging.getLogger(__name__)

MatchMode = Literal["weighted", "locationOnly"]
MATCH_MODES: tuple[str, ...] = ("weighted", "locationOnly")

LocationSpecificity = Literal["zip", "state", "national", "none"]
LOCATION_ONLY_SCORES: Mapping[str, int] = {"zip": 3, "state": 2, "national": 1, "none": 0}

_STATE_CODE = re.compile(r"^[A-Z]{2}$")
_MARKET_LABELS = {
    "primary": "Primary market",
    "secondary": "Primary market",
    "direct_purchase": "Direct purchase market",
}


@dataclass(frozen=True)
class LocationMatch:
    specificity: LocationSpecificity
    reason: str

    @property
    def matched(self) -> bool:
        return self.specificity != "none"


@dataclass(frozen=True)
class CriterionOutcome:
    name: str
    matched: bool
    reason: str


@dataclass(frozen=True)
class MatchResult:
    """Ranked outcome for one investor."""

    investor_id: str
    company_name: str
    tier: int
    score: int
    match_count: int
    total_criteria: Optional[int]
    location_specificity: LocationSpecificity
    matched_criteria: Mapping[str, bool] = field(default_factory=dict)
    reasons: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "investor_id": self.investor_id,
            "company_name": self.company_name,
            "tier": self.tier,
            "score": self.score,
            "match_count": self.match_count,
            "total_criteria": self.total_criteria,
            "location_specificity": self.location_specificity,
            "matched_criteria": dict(self.matched_criteria),
            "reasons": list(self.reasons),
        }


def _clean_state(value: str) -> str:
    return value.strip().upper() if value else ""


def _clean_zip(value: str) -> str:
    return value.strip() if value else ""


def full_coverage_states(markets: Iterable[Market]) -> frozenset[str]:
    """Distinct well-formed state codes across every full_coverage market."""

    states: set[str] = set()
    for market in markets:
        if not market.is_full_coverage:
            continue
        for raw in market.states:
            code = _clean_state(raw)
            if _STATE_CODE.match(code):
                states.add(code)
    return frozenset(states)


def resolve_location(
    lead: Lead,
    markets: Sequence[Market],
    *,
    national_threshold: int = NATIONAL_STATE_THRESHOLD_DEFAULT,
) -> LocationMatch:
    """Classify coverage for a lead: zip, then state, then national; first match wins."""

    zip_code = _clean_zip(lead.zip_code)
    state = _clean_state(lead.state)

    for market in markets:
        if not market.is_zip_scoped:
            continue
        if any(_clean_zip(candidate) == zip_code for candidate in market.zip_codes):
            label = _MARKET_LABELS.get(market.market_type, "Market")
            return LocationMatch("zip", f"{label} covers zip {zip_code}")

    covered_states = full_coverage_states(markets)
    if state in covered_states:
        return LocationMatch("state", f"Full coverage in {state}")

    if len(covered_states) >= national_threshold:
        return LocationMatch(
            "national", f"National coverage ({len(covered_states)} full-coverage states)"
        )

    return LocationMatch("none", f"No coverage for {zip_code}, {state}")


def _money(value: float) -> str:
    return f"${value:,.0f}"


def _evaluate_price(lead: Lead, buy_box: Optional[BuyBox]) -> CriterionOutcome:
    price = float(lead.ask_price or 0.0)
    if buy_box is None:
        return CriterionOutcome("price", True, "No buy box on file; price not restricted")
    if buy_box.price_min is None and buy_box.price_max is None:
        return CriterionOutcome("price", True, "Buy box has no price limits")
    low, high = buy_box.price_bounds()
    upper = "no max" if math.isinf(high) else _money(high)
    window = f"{_money(low)} - {upper}"
    if low <= price <= high:
        return CriterionOutcome("price", True, f"Ask price {_money(price)} within {window}")
    return CriterionOutcome("price", False, f"Ask price {_money(price)} outside {window}")


def _evaluate_year_built(lead: Lead, buy_box: Optional[BuyBox]) -> CriterionOutcome:
    year = int(lead.year_built or 0)
    if buy_box is None:
        return CriterionOutcome("year_built", True, "No buy box on file; year built not restricted")
    if buy_box.year_built_min is None and buy_box.year_built_max is None:
        return CriterionOutcome("year_built", True, "Buy box has no year built limits")
    low, high = buy_box.year_bounds()
    window = f"{low}-{high}"
    if low <= year <= high:
        return CriterionOutcome("year_built", True, f"Year built {year} within {window}")
    return CriterionOutcome("year_built", False, f"Year built {year} outside {window}")


def _evaluate_label(
    name: str,
    title: str,
    value: str,
    accepted: Sequence[str],
    buy_box: Optional[BuyBox],
) -> CriterionOutcome:
    if name == "condition":
        label = normalize_condition(value)
    else:
        label = normalize_property_type(value)
    if buy_box is None:
        return CriterionOutcome(name, True, f"No buy box on file; {title.lower()} not restricted")
    allowed = normalized_set(accepted, kind=name)
    if not allowed:
        return CriterionOutcome(name, True, f"Buy box accepts any {title.lower()}")
    if label.casefold() in allowed:
        return CriterionOutcome(name, True, f"{title} {label} accepted")
    return CriterionOutcome(name, False, f"{title} {label} not in buy box")


def _evaluate_secondary(
    lead: Lead,
    buy_box: Optional[BuyBox],
    criteria: Sequence[str],
) -> list[CriterionOutcome]:
    outcomes: list[CriterionOutcome] = []
    for name in criteria:
        if name == "price":
            outcomes.append(_evaluate_price(lead, buy_box))
        elif name == "year_built":
            outcomes.append(_evaluate_year_built(lead, buy_box))
        elif name == "property_type":
            outcomes.append(
                _evaluate_label(
                    name,
                    "Property type",
                    lead.property_type or "",
                    buy_box.property_types if buy_box else (),
                    buy_box,
                )
            )
        elif name == "condition":
            outcomes.append(
                _evaluate_label(
                    name,
                    "Condition",
                    lead.condition or "",
                    buy_box.condition_types if buy_box else (),
                    buy_box,
                )
            )
    return outcomes


def _percentage(match_count: int, total_criteria: int) -> int:
    # half-up, so ties never depend on banker's rounding
    return int(math.floor(100 * match_count / total_criteria + 0.5))


def _ordered_reasons(outcomes: Sequence[CriterionOutcome]) -> tuple[str, ...]:
    matched = [outcome.reason for outcome in outcomes if outcome.matched]
    unmatched = [outcome.reason for outcome in outcomes if not outcome.matched]
    return tuple(matched + unmatched)


def rank_results(results: Iterable[MatchResult]) -> list[MatchResult]:
    """Best score first, then lower tier, then investor id for a stable total order."""

    return sorted(results, key=lambda result: (-result.score, result.tier, result.investor_id))


class MatchEngine:
    """Scores one lead against a snapshot of investor profiles."""

    def __init__(self, *, national_threshold: int = NATIONAL_STATE_THRESHOLD_DEFAULT) -> None:
        if national_threshold < 1:
            raise ValueError("national_threshold must be at least 1")
        self.national_threshold = national_threshold

    def locate(self, lead: Lead, profile: InvestorProfile) -> LocationMatch:
        return resolve_location(
            lead, profile.markets, national_threshold=self.national_threshold
        )

    def score(
        self,
        lead: Lead,
        profile: InvestorProfile,
        *,
        mode: MatchMode = "weighted",
        criteria: Sequence[str] | None = None,
    ) -> Optional[MatchResult]:
        """Score a single profile; returns None when the investor is not a match."""

        if mode not in MATCH_MODES:
            raise ValueError(f"Unknown match mode {mode!r}; expected one of {MATCH_MODES}")
        investor = profile.investor
        if not investor.is_matchable:
            return None

        location = self.locate(lead, profile)
        if not location.matched:
            return None

        location_outcome = CriterionOutcome("location", True, location.reason)

        if mode == "locationOnly":
            score = LOCATION_ONLY_SCORES[location.specificity]
            return MatchResult(
                investor_id=investor.id,
                company_name=investor.company_name,
                tier=investor.tier,
                score=score,
                match_count=1,
                total_criteria=None,
                location_specificity=location.specificity,
                matched_criteria={"location": True},
                reasons=(location.reason,),
            )

        if criteria is None:
            criteria = lead.populated_criteria()
        secondary = [name for name in criteria if name != "location"]
        outcomes = [location_outcome, *_evaluate_secondary(lead, profile.buy_box, secondary)]
        total_criteria = len(outcomes)
        match_count = sum(1 for outcome in outcomes if outcome.matched)
        if match_count == 0:
            return None

        return MatchResult(
            investor_id=investor.id,
            company_name=investor.company_name,
            tier=investor.tier,
            score=_percentage(match_count, total_criteria),
            match_count=match_count,
            total_criteria=total_criteria,
            location_specificity=location.specificity,
            matched_criteria={outcome.name: outcome.matched for outcome in outcomes},
            reasons=_ordered_reasons(outcomes),
        )

    def match(
        self,
        lead: Lead | Mapping[str, Any],
        profiles: Iterable[InvestorProfile],
        *,
        mode: MatchMode = "weighted",
    ) -> list[MatchResult]:
        """Return matching investors ranked best-first; an empty list means no matches."""

        if mode not in MATCH_MODES:
            raise ValueError(f"Unknown match mode {mode!r}; expected one of {MATCH_MODES}")
        lead = parse_lead(lead)
        criteria = lead.populated_criteria()

        results: list[MatchResult] = []
        considered = 0
        for profile in profiles:
            if profile.investor.is_matchable:
                considered += 1
            result = self.score(lead, profile, mode=mode, criteria=criteria)
            if result is not None and result.score > 0:
                results.append(result)

        ranked = rank_results(results)
        logger.debug(
            "Matched %s of %s eligible investors for %s %s (mode=%s, criteria=%s)",
            len(ranked),
            considered,
            lead.state,
            lead.zip_code,
            mode,
            ",".join(criteria),
        )
        return ranked


def match_investors(
    lead: Lead | Mapping[str, Any],
    profiles: Iterable[InvestorProfile],
    *,
    mode: MatchMode = "weighted",
    national_threshold: int = NATIONAL_STATE_THRESHOLD_DEFAULT,
) -> list[MatchResult]:
    """Convenience wrapper around :class:`MatchEngine`."""

    return MatchEngine(national_threshold=national_threshold).match(lead, profiles, mode=mode)


__all__ = [
    "CRITERIA_ORDER",
    "LOCATION_ONLY_SCORES",
    "LocationMatch",
    "LocationSpecificity",
    "MATCH_MODES",
    "MatchEngine",
    "MatchMode",
    "MatchResult",
    "full_coverage_states",
    "match_investors",
    "rank_results",
    "resolve_location",
]
