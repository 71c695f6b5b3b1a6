"""Configuration helpers for buy-box vocabularies and runtime settings."""

from .buy_box import (
    CONDITION_LOOKUP,
    CONDITION_TYPES,
    PROPERTY_TYPE_LOOKUP,
    PROPERTY_TYPES,
    alias_token,
)
from .settings import attach_cap, national_state_threshold, snapshot_path

__all__ = [
    "CONDITION_LOOKUP",
    "CONDITION_TYPES",
    "PROPERTY_TYPE_LOOKUP",
    "PROPERTY_TYPES",
    "alias_token",
    "attach_cap",
    "national_state_threshold",
    "snapshot_path",
]
