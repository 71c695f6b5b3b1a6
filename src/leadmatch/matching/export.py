"""CSV export for ranked match results."""

from __future__ import annotations

import csv
from io import StringIO
from typing import Sequence

from .engine import MatchResult


EXPORT_HEADERS: tuple[str, ...] = (
    "rank",
    "investor_id",
    "company_name",
    "tier",
    "score",
    "match_count",
    "total_criteria",
    "location_specificity",
    "matched_criteria",
    "reasons",
)


def _criteria_cell(result: MatchResult) -> str:
    return " ".join(
        f"{name}={'yes' if matched else 'no'}"
        for name, matched in result.matched_criteria.items()
    )


def export_results_to_csv(results: Sequence[MatchResult]) -> str:
    """Render ranked results as CSV text, one row per investor in ranked order."""

    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_HEADERS)

    for rank, result in enumerate(results, start=1):
        writer.writerow([
            rank,
            result.investor_id,
            result.company_name,
            result.tier,
            result.score,
            result.match_count,
            "" if result.total_criteria is None else result.total_criteria,
            result.location_specificity,
            _criteria_cell(result),
            " | ".join(result.reasons),
        ])

    return buffer.getvalue()


__all__ = ["EXPORT_HEADERS", "export_results_to_csv"]
