"""REST API for the lead matching engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Sequence

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from pydantic import ValidationError

from leadmatch.api.schemas import (
    DealCompletionResponse,
    DealMatchRequest,
    DealMatchResponse,
    LeadAssignmentResponse,
    MatchRequest,
    MatchResponse,
    MatchResultResponse,
)
from leadmatch.config import national_state_threshold, snapshot_path
from leadmatch.deals import AttachmentError, DealMatchingSession, DealRecord
from leadmatch.ingest import UpstreamUnavailable, load_snapshot
from leadmatch.matching import MatchEngine, MatchResult, export_results_to_csv
from leadmatch.models import InvalidLead, InvestorProfile, Lead, parse_lead


logger = logging.getLogger(__name__)

ProfileLoader = Callable[[], List[InvestorProfile]]


def _result_to_response(result: MatchResult) -> MatchResultResponse:
    return MatchResultResponse.model_validate(result.to_dict())


def _snapshot_loader(path: Path | None) -> ProfileLoader:
    def load() -> List[InvestorProfile]:
        resolved = path or snapshot_path()
        if resolved is None:
            raise UpstreamUnavailable("no investor snapshot configured")
        profiles, _ = load_snapshot(resolved)
        return profiles

    return load


def _parse_lead_or_400(payload: dict) -> Lead:
    try:
        return parse_lead(payload)
    except InvalidLead as exc:
        raise HTTPException(status_code=400, detail=f"Invalid lead: {exc}") from exc


def create_app(
    profiles: Sequence[InvestorProfile] | None = None,
    *,
    snapshot: Path | str | None = None,
    national_threshold: int | None = None,
) -> FastAPI:
    app = FastAPI(title="leadmatch")

    if profiles is not None:
        fixed = list(profiles)

        def loader() -> List[InvestorProfile]:
            return fixed
    else:
        loader = _snapshot_loader(Path(snapshot) if snapshot else None)

    engine = MatchEngine(national_threshold=national_threshold or national_state_threshold())
    app.state.engine = engine
    app.state.load_profiles = loader

    def _load_or_503() -> List[InvestorProfile]:
        try:
            return app.state.load_profiles()
        except UpstreamUnavailable as exc:
            logger.error("Investor data unavailable: %s", exc)
            raise HTTPException(status_code=503, detail=str(exc)) from exc

    def _run_match(request: MatchRequest) -> tuple[Lead, List[MatchResult]]:
        lead = _parse_lead_or_400(request.lead)
        profiles_snapshot = _load_or_503()
        return lead, engine.match(lead, profiles_snapshot, mode=request.mode)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/match", response_model=MatchResponse)
    async def match(request: MatchRequest) -> MatchResponse:
        lead, results = _run_match(request)
        total = len(lead.populated_criteria()) if request.mode == "weighted" else None
        return MatchResponse(
            mode=request.mode,
            total_criteria=total,
            results=[_result_to_response(result) for result in results],
        )

    @app.post("/match/export.csv")
    async def match_export(request: MatchRequest) -> Response:
        _, results = _run_match(request)
        return Response(
            content=export_results_to_csv(results),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="matches.csv"'},
        )

    @app.post("/deals/match", response_model=DealMatchResponse)
    async def deal_match(request: DealMatchRequest) -> DealMatchResponse:
        try:
            deal = DealRecord.model_validate(request.deal)
            lead = deal.to_lead()
        except (ValidationError, InvalidLead) as exc:
            raise HTTPException(status_code=400, detail=f"Invalid deal: {exc}") from exc

        results = engine.match(lead, _load_or_503(), mode="locationOnly")
        session = DealMatchingSession(deal, results)
        for selection in request.selections:
            try:
                session.attach(selection.investor_id, override_score=selection.override_score)
            except AttachmentError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc

        completion = session.complete()
        return DealMatchResponse(
            deal_id=deal.deal_id,
            candidates=[_result_to_response(result) for result in results],
            assignments=[
                LeadAssignmentResponse.model_validate(assignment.to_dict())
                for assignment in session.assignments
            ],
            completion=DealCompletionResponse(
                deal_id=completion.deal_id,
                investors_requested=completion.investors_requested,
                investors_attached=completion.investors_attached,
                partial_match_reason=completion.partial_match_reason,
            ),
        )

    return app


__all__ = ["create_app"]
