"""Deal-to-investor attachment workflow built on location-only matching."""

from .session import (
    AttachmentError,
    DealCompletion,
    DealMatchingSession,
    DealRecord,
    LeadAssignment,
)

__all__ = [
    "AttachmentError",
    "DealCompletion",
    "DealMatchingSession",
    "DealRecord",
    "LeadAssignment",
]
