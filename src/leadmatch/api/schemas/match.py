from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel


class MatchRequest(BaseModel):
    lead: Dict[str, Any]
    mode: Literal["weighted", "locationOnly"] = "weighted"


class MatchResultResponse(BaseModel):
    investor_id: str
    company_name: str
    tier: int
    score: int
    match_count: int
    total_criteria: int | None = None
    location_specificity: str
    matched_criteria: Dict[str, bool]
    reasons: List[str]


class MatchResponse(BaseModel):
    mode: str
    total_criteria: int | None = None
    results: List[MatchResultResponse]
