"""Canonicalize free-text property type and condition labels."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from leadmatch.config.buy_box import CONDITION_LOOKUP, PROPERTY_TYPE_LOOKUP, alias_token


def _canonical_label(value: Optional[str], lookup: Mapping[str, str]) -> str:
    if not value:
        return ""
    token = alias_token(value)
    if token in lookup:
        return lookup[token]
    # Unknown labels pass through so they can still match themselves.
    return " ".join(value.split())


def normalize_property_type(value: Optional[str]) -> str:
    """Map a property type onto its canonical label (idempotent)."""

    return _canonical_label(value, PROPERTY_TYPE_LOOKUP)


def normalize_condition(value: Optional[str]) -> str:
    """Map a condition description onto its canonical label (idempotent)."""

    return _canonical_label(value, CONDITION_LOOKUP)


def normalized_set(values: Iterable[str], *, kind: str) -> frozenset[str]:
    """Case-folded canonical labels for membership tests."""

    normalizer = normalize_condition if kind == "condition" else normalize_property_type
    return frozenset(
        label.casefold() for label in (normalizer(value) for value in values) if label
    )


__all__ = ["normalize_condition", "normalize_property_type", "normalized_set"]
