from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from .match import MatchResultResponse


class AttachmentSelection(BaseModel):
    investor_id: str
    override_score: int | None = Field(default=None, ge=0, le=3)


class DealMatchRequest(BaseModel):
    deal: Dict[str, Any]
    selections: List[AttachmentSelection] = Field(default_factory=list)


class LeadAssignmentResponse(BaseModel):
    deal_id: str
    investor_id: str
    match_quality_score: int
    calculated_score: int
    score_overridden: bool
    match_reasons: List[str]
    location_specificity: str
    attached_at: datetime


class DealCompletionResponse(BaseModel):
    deal_id: str
    investors_requested: int
    investors_attached: int
    partial_match_reason: str | None = None


class DealMatchResponse(BaseModel):
    deal_id: str
    candidates: List[MatchResultResponse]
    assignments: List[LeadAssignmentResponse]
    completion: DealCompletionResponse
