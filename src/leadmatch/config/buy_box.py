"""Canonical buy-box labels and the synonym tables that map onto them."""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Tuple


PROPERTY_TYPES: Tuple[str, ...] = (
    "Single Family Residence",
    "Condominiums",
    "Townhomes",
    "Multi-Family (2-4 units)",
    "Multi-Family (5+ units)",
    "Land",
    "Mobile Home",
)

CONDITION_TYPES: Tuple[str, ...] = (
    "Move in Ready with newer finishes",
    "Move in Ready with Older Finishes",
    "Needs Few Repairs",
    "Needs Major Repairs",
)

PROPERTY_TYPE_ALIAS_GROUPS: Dict[str, Tuple[str, ...]] = {
    "Single Family Residence": (
        "SFR",
        "SFH",
        "Single Family",
        "Single-Family",
        "Single Family Home",
        "Single Family Residential",
        "House",
    ),
    "Condominiums": ("Condo", "Condos", "Condominium"),
    "Townhomes": ("Townhome", "Townhouse", "Townhouses", "Row Home"),
    "Multi-Family (2-4 units)": (
        "Multi Family",
        "Multi-Family",
        "Multifamily",
        "Duplex",
        "Triplex",
        "Quadplex",
        "Fourplex",
        "Multi-Family Residential (Duplex - Quadplex)",
    ),
    "Multi-Family (5+ units)": (
        "Fiveplex",
        "Fiveplex+",
        "Apartment",
        "Apartments",
        "Apartment Complex",
        "Multi-Family Commercial (Fiveplex+)",
    ),
    "Land": ("Lot", "Lots", "Vacant Land", "Raw Land"),
    "Mobile Home": (
        "Mobile Homes",
        "Mobile Home (with Land)",
        "Mobile Home (without Land)",
        "Manufactured Home",
        "Manufactured",
        "Manufactured Housing",
    ),
}

CONDITION_ALIAS_GROUPS: Dict[str, Tuple[str, ...]] = {
    "Move in Ready with newer finishes": (
        "Move-in Ready with Newer Finishes",
        "Move in Ready with Modern Finishes",
        "Move-in Ready with Modern Finishes",
        "Turnkey",
        "Excellent",
    ),
    "Move in Ready with Older Finishes": (
        "Move-in Ready with Older Finishes",
        "Move in Ready",
        "Dated",
        "Good",
    ),
    "Needs Few Repairs": (
        "Needs Some Repairs",
        "Needs a Few Repairs",
        "Needs Minor Repairs",
        "Minor Repairs",
        "Light Rehab",
        "Cosmetic",
        "Fair",
    ),
    "Needs Major Repairs": (
        "Needs Many Repairs",
        "Major Repairs",
        "Heavy Rehab",
        "Full Gut",
        "Distressed",
        "Poor",
    ),
}


def alias_token(value: str) -> str:
    """Lookup key for a label: lower-cased, punctuation and spacing collapsed."""

    return re.sub(r"[^a-z0-9+]+", " ", value.lower()).strip()


def _build_alias_lookup(
    canonical: Iterable[str],
    groups: Mapping[str, Iterable[str]],
) -> Mapping[str, str]:
    lookup: Dict[str, str] = {}
    for label in canonical:
        lookup[alias_token(label)] = label
    for label, variants in groups.items():
        for variant in variants:
            key = alias_token(variant)
            if key:
                lookup.setdefault(key, label)
    return MappingProxyType(lookup)


PROPERTY_TYPE_LOOKUP: Mapping[str, str] = _build_alias_lookup(
    PROPERTY_TYPES, PROPERTY_TYPE_ALIAS_GROUPS
)
CONDITION_LOOKUP: Mapping[str, str] = _build_alias_lookup(
    CONDITION_TYPES, CONDITION_ALIAS_GROUPS
)


__all__ = [
    "CONDITION_ALIAS_GROUPS",
    "CONDITION_LOOKUP",
    "CONDITION_TYPES",
    "PROPERTY_TYPE_ALIAS_GROUPS",
    "PROPERTY_TYPE_LOOKUP",
    "PROPERTY_TYPES",
    "alias_token",
]
