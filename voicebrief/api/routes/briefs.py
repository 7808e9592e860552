"""Session and daily brief endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from voicebrief.api.dependencies import get_coordinator
from voicebrief.api.errors import to_http_exception
from voicebrief.api.models import (
    CountersResponse,
    DailyBriefRequest,
    DailyBriefResponse,
    DailySummaryResponse,
    ForegroundRequest,
    ForegroundResponse,
    SessionSummaryResponse,
)
from voicebrief.errors import IntelligenceError
from voicebrief.intelligence.coordinator import RefreshCoordinator
from voicebrief.intelligence.models import DailySummary

router = APIRouter()

CoordinatorDep = Annotated[RefreshCoordinator, Depends(get_coordinator)]


def _daily(summary: DailySummary | None) -> DailySummaryResponse | None:
    return DailySummaryResponse.model_validate(summary) if summary else None


@router.post("/api/foreground", response_model=ForegroundResponse)
async def foreground(body: ForegroundRequest, coordinator: CoordinatorDep) -> ForegroundResponse:
    """Signal that the app came to the foreground.

    Always succeeds when local storage is reachable; a failed daily brief is
    reported in ``daily_error``.
    """
    outcome = await coordinator.on_app_foregrounded(body.now, force=body.force)
    return ForegroundResponse(
        session=SessionSummaryResponse.model_validate(outcome.session),
        session_refreshed=outcome.session_refreshed,
        daily=_daily(outcome.daily),
        daily_error=outcome.daily_error,
    )


@router.post("/api/daily-brief/check", response_model=DailyBriefResponse)
async def check_daily_brief(
    body: DailyBriefRequest, coordinator: CoordinatorDep
) -> DailyBriefResponse:
    """Generate the daily brief if none exists for the date yet."""
    today = body.date or coordinator.now().date()
    try:
        summary = await coordinator.check_daily_brief(today)
    except IntelligenceError as exc:
        raise to_http_exception(exc) from exc
    return DailyBriefResponse(brief_date=today, daily=_daily(summary))


@router.post("/api/daily-brief/regenerate", response_model=DailyBriefResponse)
async def regenerate_daily_brief(
    body: DailyBriefRequest, coordinator: CoordinatorDep
) -> DailyBriefResponse:
    """Regenerate the daily brief even if one exists (manual retry)."""
    today = body.date or coordinator.now().date()
    try:
        summary = await coordinator.regenerate_daily_brief(today)
    except IntelligenceError as exc:
        raise to_http_exception(exc) from exc
    return DailyBriefResponse(brief_date=today, daily=_daily(summary))


@router.get("/api/counters", response_model=CountersResponse)
async def counters(coordinator: CoordinatorDep) -> CountersResponse:
    return CountersResponse.model_validate(coordinator.counters)
