"""
Mood analytics endpoints.

All read the session's local snapshot; none require connectivity.

Endpoints:
- GET /trend?range=week|month: Mood points ascending by date
- GET /factors: Factor impact ranked by |net|
- GET /weekly: Average mood per (ISO week, month)
- GET /insights: Textual insights
- GET /consistency: Stability score for the current week
- GET /summary: All of the above from one snapshot
"""

from fastapi import APIRouter, Depends, Query

from moodjournal.models.analytics import (
    AnalyticsSummary,
    ConsistencyResponse,
    FactorImpactEntry,
    MoodTrendPoint,
    TrendRange,
    WeeklyAverageEntry,
)
from moodjournal.routers.dependencies import get_journal_session
from moodjournal.services.analytics_service import stability_label
from moodjournal.services.journal_session import JournalSession

router = APIRouter()


@router.get("/trend", response_model=list[MoodTrendPoint])
async def get_trend(
    range_: TrendRange = Query(TrendRange.WEEK, alias="range"),
    session: JournalSession = Depends(get_journal_session),
) -> list[MoodTrendPoint]:
    return session.analytics.trend(range_)


@router.get("/factors", response_model=list[FactorImpactEntry])
async def get_factor_impact(
    session: JournalSession = Depends(get_journal_session),
) -> list[FactorImpactEntry]:
    return session.analytics.factor_impact()


@router.get("/weekly", response_model=list[WeeklyAverageEntry])
async def get_weekly_averages(
    session: JournalSession = Depends(get_journal_session),
) -> list[WeeklyAverageEntry]:
    return session.analytics.weekly_averages()


@router.get("/insights", response_model=list[str])
async def get_insights(session: JournalSession = Depends(get_journal_session)) -> list[str]:
    return session.analytics.insights()


@router.get("/consistency", response_model=ConsistencyResponse)
async def get_consistency(
    session: JournalSession = Depends(get_journal_session),
) -> ConsistencyResponse:
    value = session.analytics.consistency()
    return ConsistencyResponse(consistency=value, label=stability_label(value))


@router.get("/summary", response_model=AnalyticsSummary)
async def get_summary(session: JournalSession = Depends(get_journal_session)) -> AnalyticsSummary:
    return session.analytics.summary()
