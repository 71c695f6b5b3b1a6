import json
import logging

import pytest

from leadmatch.ingest import UpstreamUnavailable, build_profiles, load_snapshot


def _investor(investor_id: str, **extra) -> dict:
    row = {"id": investor_id, "company_name": f"{investor_id} LLC", "tier": 1}
    row.update(extra)
    return row


def _kinds(report) -> list[tuple[str, str]]:
    return [(anomaly.investor_id, anomaly.kind) for anomaly in report.anomalies]


def test_build_profiles_groups_records_by_investor():
    profiles, report = build_profiles(
        [_investor("i1"), _investor("i2", status="paused")],
        [{"id": "b1", "investor_id": "i1", "property_types": ["Condominiums"]}],
        [
            {"id": "m1", "investor_id": "i1", "market_type": "primary", "zip_codes": ["75001"]},
            {"id": "m2", "investor_id": "i2", "market_type": "full_coverage", "states": ["TX"]},
        ],
    )

    by_id = {profile.investor.id: profile for profile in profiles}
    assert by_id["i1"].buy_box.id == "b1"
    assert [market.id for market in by_id["i1"].markets] == ["m1"]
    assert by_id["i2"].buy_box is None
    assert report.total_investors == 2
    assert report.matchable_investors == 1
    assert report.anomalies == []


def test_duplicate_buy_boxes_use_latest_and_are_reported(caplog):
    caplog.set_level(logging.WARNING, logger="leadmatch.ingest.snapshot")

    profiles, report = build_profiles(
        [_investor("i1")],
        [
            {"id": "old", "investor_id": "i1", "updated_at": "2023-01-01T00:00:00Z"},
            {"id": "new", "investor_id": "i1", "updated_at": "2024-03-01T00:00:00Z"},
        ],
        [{"investor_id": "i1", "market_type": "full_coverage", "states": ["TX"]}],
    )

    assert profiles[0].buy_box.id == "new"
    assert _kinds(report) == [("i1", "duplicate_buy_box")]
    assert report.anomalies[0].detail == "2 buy box records found; using new"
    assert "duplicate_buy_box" in caplog.text


def test_coverage_anomalies_are_reported_not_raised():
    profiles, report = build_profiles(
        [_investor("i1"), _investor("i2")],
        [],
        [
            {"investor_id": "i1", "market_type": "full_coverage", "states": ["TX", "Texas"]},
            {"investor_id": "i1", "market_type": "primary", "zip_codes": ["7500", "75001"]},
            {"investor_id": "i1", "market_type": "direct_purchase", "zip_codes": []},
        ],
    )

    assert len(profiles) == 2
    assert _kinds(report) == [
        ("i1", "invalid_state_code"),
        ("i1", "invalid_zip_code"),
        ("i1", "invalid_coverage"),
        ("i2", "no_markets"),
    ]
    assert report.anomalies[0].detail == "Invalid state codes: Texas"


def test_invalid_and_orphan_rows_are_skipped():
    profiles, report = build_profiles(
        [_investor("i1"), {"id": "bad", "company_name": "Bad", "tier": 0}],
        [{"id": "b9", "investor_id": "ghost"}],
        [
            {"investor_id": "i1", "market_type": "full_coverage", "states": ["TX"]},
            {"investor_id": "i1", "market_type": "regional"},
        ],
    )

    assert [profile.investor.id for profile in profiles] == ["i1"]
    assert _kinds(report) == [
        ("bad", "invalid_record"),
        ("ghost", "orphan_record"),
        ("i1", "invalid_record"),
    ]


def test_inactive_investor_without_markets_is_not_flagged():
    _, report = build_profiles([_investor("i1", status="inactive")])

    assert report.anomalies == []


def test_load_snapshot_reads_json(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(
        json.dumps(
            {
                "investors": [_investor("i1")],
                "markets": [{"investor_id": "i1", "market_type": "full_coverage", "states": ["TX"]}],
            }
        ),
        encoding="utf-8",
    )

    profiles, report = load_snapshot(path)

    assert profiles[0].investor.id == "i1"
    assert report.to_dict() == {"total_investors": 1, "matchable_investors": 1, "anomalies": []}


def test_load_snapshot_missing_file_is_upstream_failure(tmp_path):
    with pytest.raises(UpstreamUnavailable):
        load_snapshot(tmp_path / "missing.json")


@pytest.mark.parametrize("content", ["{not json", "[]", '{"investors": "i1"}'])
def test_load_snapshot_malformed_document(tmp_path, content):
    path = tmp_path / "snapshot.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(UpstreamUnavailable):
        load_snapshot(path)
