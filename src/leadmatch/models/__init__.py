"""Normalized record models consumed by the match engine."""

from .records import (
    CRITERIA_ORDER,
    BuyBox,
    InvalidLead,
    Investor,
    InvestorProfile,
    Lead,
    Market,
    parse_lead,
    select_buy_box,
)

__all__ = [
    "CRITERIA_ORDER",
    "BuyBox",
    "InvalidLead",
    "Investor",
    "InvestorProfile",
    "Lead",
    "Market",
    "parse_lead",
    "select_buy_box",
]
