"""Lead-to-investor matching engine, label normalization and export."""

from .engine import (
    LOCATION_ONLY_SCORES,
    MATCH_MODES,
    LocationMatch,
    MatchEngine,
    MatchResult,
    match_investors,
    rank_results,
    resolve_location,
)
from .export import export_results_to_csv
from .normalize import normalize_condition, normalize_property_type

__all__ = [
    "LOCATION_ONLY_SCORES",
    "MATCH_MODES",
    "LocationMatch",
    "MatchEngine",
    "MatchResult",
    "export_results_to_csv",
    "match_investors",
    "normalize_condition",
    "normalize_property_type",
    "rank_results",
    "resolve_location",
]
