"""Load investor/buy-box/market snapshots and assemble matchable profiles."""

from __future__ import annotations

import json
import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Sequence, Tuple

from pydantic import ValidationError

from leadmatch.models import BuyBox, Investor, InvestorProfile, Market, select_buy_box


logger = logging.getLogger(__name__)

_STATE_CODE = re.compile(r"^[A-Z]{2}$")
_ZIP_CODE = re.compile(r"^\d{5}$")


class UpstreamUnavailable(RuntimeError):
    """Raised when investor data cannot be loaded."""


@dataclass(frozen=True)
class DataAnomaly:
    """Non-fatal data-quality finding; logged and reported, never raised."""

    investor_id: str
    kind: str
    detail: str

    def to_dict(self) -> dict[str, str]:
        return {"investor_id": self.investor_id, "kind": self.kind, "detail": self.detail}


@dataclass(frozen=True)
class SnapshotReport:
    total_investors: int
    matchable_investors: int
    anomalies: List[DataAnomaly] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_investors": self.total_investors,
            "matchable_investors": self.matchable_investors,
            "anomalies": [anomaly.to_dict() for anomaly in self.anomalies],
        }


def _row_id(row: Mapping[str, Any], key: str = "id") -> str:
    value = row.get(key)
    return str(value) if value is not None else ""


def _record(anomalies: list[DataAnomaly], investor_id: str, kind: str, detail: str) -> None:
    anomaly = DataAnomaly(investor_id=investor_id, kind=kind, detail=detail)
    logger.warning("Data anomaly for investor %s (%s): %s", investor_id or "?", kind, detail)
    anomalies.append(anomaly)


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    error = errors[0]
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error.get('msg', 'invalid value')}"


def _audit_market(market: Market, anomalies: list[DataAnomaly]) -> None:
    investor_id = market.investor_id
    if market.is_full_coverage and not market.states:
        _record(anomalies, investor_id, "invalid_coverage", f"full_coverage market {market.id or '?'} has no states")
    if market.is_zip_scoped and not market.zip_codes:
        _record(
            anomalies,
            investor_id,
            "invalid_coverage",
            f"{market.market_type} market {market.id or '?'} has no zip codes",
        )
    if market.market_type == "secondary":
        logger.info("Investor %s still uses legacy secondary market %s", investor_id, market.id or "?")

    bad_states = [state for state in market.states if not _STATE_CODE.match(state.strip().upper())]
    if bad_states:
        _record(anomalies, investor_id, "invalid_state_code", f"Invalid state codes: {', '.join(bad_states)}")
    bad_zips = [code for code in market.zip_codes if not _ZIP_CODE.match(code.strip())]
    if bad_zips:
        _record(anomalies, investor_id, "invalid_zip_code", f"Invalid zip codes found ({len(bad_zips)} codes)")


def build_profiles(
    investor_rows: Iterable[Mapping[str, Any]],
    buy_box_rows: Iterable[Mapping[str, Any]] = (),
    market_rows: Iterable[Mapping[str, Any]] = (),
) -> Tuple[List[InvestorProfile], SnapshotReport]:
    """Group a full snapshot by investor in one pass and resolve each buy box."""

    anomalies: list[DataAnomaly] = []

    investors: dict[str, Investor] = {}
    for row in investor_rows:
        try:
            investor = Investor.model_validate(dict(row))
        except ValidationError as exc:
            _record(anomalies, _row_id(row), "invalid_record", f"investor skipped ({_first_error(exc)})")
            continue
        investors[investor.id] = investor

    buy_boxes: dict[str, list[BuyBox]] = defaultdict(list)
    for row in buy_box_rows:
        try:
            buy_box = BuyBox.model_validate(dict(row))
        except ValidationError as exc:
            _record(anomalies, _row_id(row, "investor_id"), "invalid_record", f"buy box skipped ({_first_error(exc)})")
            continue
        if buy_box.investor_id not in investors:
            _record(anomalies, buy_box.investor_id, "orphan_record", f"buy box {buy_box.id} has no investor")
            continue
        buy_boxes[buy_box.investor_id].append(buy_box)

    markets: dict[str, list[Market]] = defaultdict(list)
    for row in market_rows:
        try:
            market = Market.model_validate(dict(row))
        except ValidationError as exc:
            _record(anomalies, _row_id(row, "investor_id"), "invalid_record", f"market skipped ({_first_error(exc)})")
            continue
        if market.investor_id not in investors:
            _record(anomalies, market.investor_id, "orphan_record", f"market {market.id or '?'} has no investor")
            continue
        _audit_market(market, anomalies)
        markets[market.investor_id].append(market)

    profiles: list[InvestorProfile] = []
    for investor_id, investor in investors.items():
        candidates = buy_boxes.get(investor_id, [])
        if len(candidates) > 1:
            chosen = select_buy_box(candidates)
            _record(
                anomalies,
                investor_id,
                "duplicate_buy_box",
                f"{len(candidates)} buy box records found; using {chosen.id if chosen else '?'}",
            )
        investor_markets = markets.get(investor_id, [])
        if investor.is_matchable and not investor_markets:
            _record(anomalies, investor_id, "no_markets", "No market records exist")
        profiles.append(
            InvestorProfile.from_records(investor, buy_boxes=candidates, markets=investor_markets)
        )

    report = SnapshotReport(
        total_investors=len(profiles),
        matchable_investors=sum(1 for profile in profiles if profile.investor.is_matchable),
        anomalies=anomalies,
    )
    logger.info(
        "Loaded %s investors (%s matchable, %s anomalies)",
        report.total_investors,
        report.matchable_investors,
        len(anomalies),
    )
    return profiles, report


def profiles_from_payload(payload: Mapping[str, Any]) -> Tuple[List[InvestorProfile], SnapshotReport]:
    """Build profiles from a decoded snapshot document."""

    if not isinstance(payload, Mapping):
        raise UpstreamUnavailable("snapshot must be a JSON object")

    def _rows(key: str) -> Sequence[Mapping[str, Any]]:
        rows = payload.get(key) or []
        if not isinstance(rows, list):
            raise UpstreamUnavailable(f"snapshot field {key!r} must be a list")
        return [row for row in rows if isinstance(row, Mapping)]

    return build_profiles(_rows("investors"), _rows("buy_boxes"), _rows("markets"))


def load_snapshot(path: Path) -> Tuple[List[InvestorProfile], SnapshotReport]:
    """Read a JSON snapshot from disk; unreadable data raises UpstreamUnavailable."""

    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise UpstreamUnavailable(f"cannot read snapshot {path}: {exc}") from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise UpstreamUnavailable(f"snapshot {path} is not valid JSON: {exc}") from exc
    return profiles_from_payload(payload)


__all__ = [
    "DataAnomaly",
    "SnapshotReport",
    "UpstreamUnavailable",
    "build_profiles",
    "load_snapshot",
    "profiles_from_payload",
]
