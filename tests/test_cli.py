import csv
import json

import pytest

from leadmatch.cli import main


def _write_snapshot(path):
    path.write_text(
        json.dumps(
            {
                "investors": [
                    {"id": "A", "company_name": "Alpha Homes", "tier": 2},
                    {"id": "B", "company_name": "Bravo Capital", "tier": 1},
                    {"id": "C", "company_name": "Charlie Buys", "tier": 1},
                ],
                "buy_boxes": [
                    {"id": "bA", "investor_id": "A", "property_types": ["Condominiums"]},
                ],
                "markets": [
                    {"investor_id": "A", "market_type": "primary", "zip_codes": ["75001"]},
                    {"investor_id": "B", "market_type": "full_coverage", "states": ["TX"]},
                ],
            }
        ),
        encoding="utf-8",
    )


def test_cli_writes_ranked_csv_and_report(tmp_path, capsys):
    snapshot = tmp_path / "snapshot.json"
    output = tmp_path / "matches.csv"
    report = tmp_path / "report.json"
    _write_snapshot(snapshot)

    main(
        [
            str(snapshot),
            "--state",
            "TX",
            "--zip",
            "75001",
            "--property-type",
            "condo",
            "--output",
            str(output),
            "--report",
            str(report),
        ]
    )

    with output.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert [row["investor_id"] for row in rows] == ["B", "A"]

    anomalies = json.loads(report.read_text(encoding="utf-8"))["anomalies"]
    assert [(item["investor_id"], item["kind"]) for item in anomalies] == [("C", "no_markets")]

    out = capsys.readouterr().out
    assert "Loaded 3 investors (3 matchable)" in out
    assert "2 investors match TX 75001 (weighted)" in out


def test_cli_location_only_mode(tmp_path, capsys):
    snapshot = tmp_path / "snapshot.json"
    output = tmp_path / "matches.csv"
    _write_snapshot(snapshot)

    main([str(snapshot), "--state", "TX", "--zip", "75001", "--mode", "locationOnly", "--output", str(output)])

    with output.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert [(row["investor_id"], row["score"]) for row in rows] == [("A", "3"), ("B", "2")]


def test_cli_reports_no_matches(tmp_path, capsys):
    snapshot = tmp_path / "snapshot.json"
    _write_snapshot(snapshot)

    main([str(snapshot), "--state", "CA", "--zip", "90210", "--output", str(tmp_path / "out.csv")])

    assert "No investors match CA 90210" in capsys.readouterr().out


def test_cli_rejects_invalid_lead(tmp_path):
    snapshot = tmp_path / "snapshot.json"
    _write_snapshot(snapshot)

    with pytest.raises(SystemExit, match="Invalid lead"):
        main([str(snapshot), "--state", "Texas", "--zip", "75001"])


def test_cli_missing_snapshot(tmp_path):
    with pytest.raises(SystemExit, match="Investor data unavailable"):
        main([str(tmp_path / "missing.json"), "--state", "TX", "--zip", "75001"])
