"""Lightweight REST client for the leadmatch API."""

from __future__ import annotations

import argparse
import json

import httpx


def build_lead(args: argparse.Namespace) -> dict[str, object]:
    lead: dict[str, object] = {"state": args.state, "zip_code": args.zip_code}
    if args.price is not None:
        lead["ask_price"] = args.price
    if args.year_built is not None:
        lead["year_built"] = args.year_built
    if args.property_type:
        lead["property_type"] = args.property_type
    if args.condition:
        lead["condition"] = args.condition
    return lead


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the leadmatch REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--state", required=True)
    parser.add_argument("--zip", dest="zip_code", required=True)
    parser.add_argument("--price", type=float, default=None)
    parser.add_argument("--year-built", type=int, default=None)
    parser.add_argument("--property-type", default=None)
    parser.add_argument("--condition", default=None)
    parser.add_argument("--mode", choices=["weighted", "locationOnly"], default="weighted")
    parser.add_argument("--deal-id", help="Match as a deal (locationOnly) instead of a free-text search")
    parser.add_argument(
        "--attach",
        nargs="*",
        default=[],
        metavar="INVESTOR_ID[=SCORE]",
        help="Investors to attach to the deal, optionally with an override score",
    )
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url) as client:
        if args.deal_id:
            selections = []
            for entry in args.attach:
                investor_id, _, score = entry.partition("=")
                selections.append(
                    {"investor_id": investor_id, "override_score": int(score) if score else None}
                )
            deal = {"deal_id": args.deal_id, **build_lead(args)}
            resp = client.post("/deals/match", json={"deal": deal, "selections": selections})
        else:
            resp = client.post("/match", json={"lead": build_lead(args), "mode": args.mode})
        if resp.status_code in {400, 503}:
            raise SystemExit(f"{resp.status_code}: {resp.json().get('detail')}")
        resp.raise_for_status()
        print(json.dumps(resp.json(), indent=2))


if __name__ == "__main__":
    main()
