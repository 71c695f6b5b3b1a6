"""Pydantic models for API I/O."""

from .match import MatchRequest, MatchResponse, MatchResultResponse
from .deal import (
    AttachmentSelection,
    DealCompletionResponse,
    DealMatchRequest,
    DealMatchResponse,
    LeadAssignmentResponse,
)

__all__ = [
    "AttachmentSelection",
    "DealCompletionResponse",
    "DealMatchRequest",
    "DealMatchResponse",
    "LeadAssignmentResponse",
    "MatchRequest",
    "MatchResponse",
    "MatchResultResponse",
]
