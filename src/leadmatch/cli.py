"""Command-line interface for matching a lead against an investor snapshot."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from leadmatch.config import national_state_threshold
from leadmatch.ingest import UpstreamUnavailable, load_snapshot
from leadmatch.matching import MATCH_MODES, MatchEngine, export_results_to_csv
from leadmatch.models import InvalidLead, parse_lead


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rank investors for a property lead")
    parser.add_argument("snapshot", type=Path, help="Path to investor snapshot JSON")
    parser.add_argument("--state", required=True, help="Two-letter state code of the lead")
    parser.add_argument("--zip", dest="zip_code", required=True, help="Five-digit zip code of the lead")
    parser.add_argument("--price", type=float, default=None, help="Asking price")
    parser.add_argument("--year-built", type=int, default=None, help="Year the property was built")
    parser.add_argument("--property-type", default=None, help="Property type (aliases such as 'condo' accepted)")
    parser.add_argument("--condition", default=None, help="Property condition")
    parser.add_argument(
        "--mode",
        choices=MATCH_MODES,
        default="weighted",
        help="weighted percentage score or locationOnly 0-3 score",
    )
    parser.add_argument(
        "--national-threshold",
        type=int,
        default=None,
        help="Full-coverage states needed for national coverage (default from environment or 26)",
    )
    parser.add_argument("--output", type=Path, default=Path("matches.csv"), help="Output CSV path")
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Optional path to write the snapshot data-quality report JSON",
    )
    parser.add_argument("--top", type=int, default=10, help="Number of matches to print")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)

    try:
        lead = parse_lead(
            {
                "state": args.state,
                "zip_code": args.zip_code,
                "ask_price": args.price,
                "year_built": args.year_built,
                "property_type": args.property_type,
                "condition": args.condition,
            }
        )
    except InvalidLead as exc:
        raise SystemExit(f"Invalid lead: {exc}") from exc

    try:
        profiles, report = load_snapshot(args.snapshot)
    except UpstreamUnavailable as exc:
        raise SystemExit(f"Investor data unavailable: {exc}") from exc

    print(
        f"Loaded {report.total_investors} investors ({report.matchable_investors} matchable)"
    )
    if report.anomalies:
        preview = ", ".join(f"{a.investor_id}:{a.kind}" for a in report.anomalies[:5])
        more = len(report.anomalies) - 5
        suffix = f", +{more} more" if more > 0 else ""
        print(f"Data anomalies: {preview}{suffix}")
    if args.report:
        args.report.write_text(json.dumps(report.to_dict(), indent=2), encoding="utf-8")
        print(f"Wrote data-quality report to {args.report}")

    threshold = args.national_threshold or national_state_threshold()
    engine = MatchEngine(national_threshold=threshold)
    results = engine.match(lead, profiles, mode=args.mode)

    if not results:
        print(f"No investors match {lead.state} {lead.zip_code}")
    else:
        print(f"{len(results)} investors match {lead.state} {lead.zip_code} ({args.mode}):")
        for rank, result in enumerate(results[: max(args.top, 0)], start=1):
            print(
                f"{rank:>3}. {result.company_name} (tier {result.tier}) "
                f"score={result.score} location={result.location_specificity}"
            )

    args.output.write_text(export_results_to_csv(results), encoding="utf-8")
    print(f"Wrote {len(results)} matches to {args.output}")


def serve(argv: list[str] | None = None) -> None:
    """Run the HTTP API with uvicorn."""

    parser = argparse.ArgumentParser(description="Serve the lead matching API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    import uvicorn

    uvicorn.run("leadmatch.api:create_app", factory=True, host=args.host, port=args.port)


if __name__ == "__main__":
    main(sys.argv[1:])
