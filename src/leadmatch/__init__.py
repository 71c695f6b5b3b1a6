"""Route property leads to the investors whose buy boxes and markets fit them."""

from leadmatch.matching import MatchEngine, MatchResult, match_investors
from leadmatch.models import InvalidLead, InvestorProfile, Lead

__all__ = [
    "InvalidLead",
    "InvestorProfile",
    "Lead",
    "MatchEngine",
    "MatchResult",
    "match_investors",
]
