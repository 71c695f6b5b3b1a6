import csv
import json
from io import StringIO

import pytest
from httpx import ASGITransport, AsyncClient

from leadmatch.api import create_app
from leadmatch.models import BuyBox, Investor, InvestorProfile, Market


@pytest.fixture
def anyio_backend():
    return "asyncio"


def _profiles() -> list[InvestorProfile]:
    return [
        InvestorProfile(
            investor=Investor(id="A", company_name="Alpha Homes", tier=2),
            buy_box=BuyBox(
                id="bA",
                investor_id="A",
                price_min=100000,
                price_max=200000,
                property_types=["Condominiums"],
            ),
            markets=[Market(investor_id="A", market_type="primary", zip_codes=["75001"])],
        ),
        InvestorProfile(
            investor=Investor(id="B", company_name="Bravo Capital", tier=1),
            markets=[Market(investor_id="B", market_type="full_coverage", states=["TX"])],
        ),
        InvestorProfile(
            investor=Investor(id="P", company_name="Paused Partners", tier=1, status="paused"),
            markets=[Market(investor_id="P", market_type="full_coverage", states=["TX"])],
        ),
    ]


@pytest.fixture
async def client():
    app = create_app(_profiles())
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


_LEAD = {"state": "TX", "zipCode": "75001", "askPrice": 150000, "propertyType": "Condo"}


@pytest.mark.anyio
async def test_health(client):
    resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.anyio
async def test_match_ranks_investors(client):
    resp = await client.post("/match", json={"lead": _LEAD})

    assert resp.status_code == 200
    body = resp.json()
    assert body["mode"] == "weighted"
    assert body["total_criteria"] == 3
    assert [(item["investor_id"], item["score"]) for item in body["results"]] == [("B", 100), ("A", 100)]
    assert body["results"][1]["matched_criteria"] == {
        "location": True,
        "price": True,
        "property_type": True,
    }


@pytest.mark.anyio
async def test_match_location_only(client):
    resp = await client.post("/match", json={"lead": _LEAD, "mode": "locationOnly"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["total_criteria"] is None
    assert [(item["investor_id"], item["score"]) for item in body["results"]] == [("A", 3), ("B", 2)]


@pytest.mark.anyio
async def test_match_without_coverage_is_empty(client):
    resp = await client.post("/match", json={"lead": {"state": "CA", "zip_code": "90210"}})

    assert resp.status_code == 200
    assert resp.json()["results"] == []


@pytest.mark.anyio
async def test_match_rejects_invalid_lead(client):
    resp = await client.post("/match", json={"lead": {"state": "TX", "zip_code": "75"}})

    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Invalid lead:")


@pytest.mark.anyio
async def test_match_rejects_unknown_mode(client):
    resp = await client.post("/match", json={"lead": _LEAD, "mode": "fuzzy"})

    assert resp.status_code == 422


@pytest.mark.anyio
async def test_match_export_csv(client):
    resp = await client.post("/match/export.csv", json={"lead": _LEAD})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    rows = list(csv.DictReader(StringIO(resp.text)))
    assert [row["investor_id"] for row in rows] == ["B", "A"]


@pytest.mark.anyio
async def test_deal_match_attaches_with_override(client, monkeypatch):
    monkeypatch.delenv("LEADMATCH_ATTACH_CAP", raising=False)
    payload = {
        "deal": {"deal_id": "D-7", "state": "TX", "zip_code": "75001"},
        "selections": [
            {"investor_id": "A"},
            {"investor_id": "B", "override_score": 3},
        ],
    }

    resp = await client.post("/deals/match", json=payload)

    assert resp.status_code == 200
    body = resp.json()
    assert [item["investor_id"] for item in body["candidates"]] == ["A", "B"]
    first, second = body["assignments"]
    assert (first["match_quality_score"], first["score_overridden"]) == (3, False)
    assert (second["match_quality_score"], second["calculated_score"]) == (3, 2)
    assert second["score_overridden"] is True
    assert body["completion"] == {
        "deal_id": "D-7",
        "investors_requested": 3,
        "investors_attached": 2,
        "partial_match_reason": "Only 2 of 3 investors available",
    }


@pytest.mark.anyio
async def test_deal_match_honours_camel_case_investors_requested(client):
    payload = {
        "deal": {"dealId": "D-1", "state": "TX", "zipCode": "75001", "investorsRequested": 1},
        "selections": [{"investor_id": "A"}, {"investor_id": "B"}],
    }

    resp = await client.post("/deals/match", json=payload)

    assert resp.status_code == 400
    assert "already has 1" in resp.json()["detail"]


@pytest.mark.anyio
async def test_deal_match_cap_defaults_from_environment(client, monkeypatch):
    monkeypatch.setenv("LEADMATCH_ATTACH_CAP", "1")
    payload = {
        "deal": {"deal_id": "D-2", "state": "TX", "zip_code": "75001"},
        "selections": [{"investor_id": "A"}],
    }

    resp = await client.post("/deals/match", json=payload)

    assert resp.status_code == 200
    assert resp.json()["completion"]["investors_requested"] == 1
    assert resp.json()["completion"]["partial_match_reason"] is None


@pytest.mark.anyio
async def test_deal_match_rejects_non_candidate(client):
    payload = {
        "deal": {"deal_id": "D-7", "state": "TX", "zip_code": "75001"},
        "selections": [{"investor_id": "P"}],
    }

    resp = await client.post("/deals/match", json=payload)

    assert resp.status_code == 400
    assert "not a candidate" in resp.json()["detail"]


@pytest.mark.anyio
async def test_deal_match_rejects_invalid_deal(client):
    resp = await client.post("/deals/match", json={"deal": {"state": "TX", "zip_code": "75001"}})

    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Invalid deal:")


@pytest.mark.anyio
async def test_unreadable_snapshot_returns_503(tmp_path):
    app = create_app(snapshot=tmp_path / "missing.json")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        resp = await async_client.post("/match", json={"lead": _LEAD})

    assert resp.status_code == 503


@pytest.mark.anyio
async def test_snapshot_is_read_per_request(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps({"investors": []}), encoding="utf-8")
    app = create_app(snapshot=path)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        empty = await async_client.post("/match", json={"lead": _LEAD})
        path.write_text(
            json.dumps(
                {
                    "investors": [{"id": "N", "company_name": "New", "tier": 1}],
                    "markets": [{"investor_id": "N", "market_type": "full_coverage", "states": ["TX"]}],
                }
            ),
            encoding="utf-8",
        )
        refreshed = await async_client.post("/match", json={"lead": _LEAD})

    assert empty.json()["results"] == []
    assert [item["investor_id"] for item in refreshed.json()["results"]] == ["N"]
