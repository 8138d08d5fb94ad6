"""Unit tests for analytics endpoints."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from moodjournal.models.analytics import (
    AnalyticsSummary,
    FactorImpactEntry,
    MoodTrendPoint,
    TrendRange,
    WeeklyAverageEntry,
)
from moodjournal.routers.analytics import (
    get_consistency,
    get_factor_impact,
    get_insights,
    get_summary,
    get_trend,
    get_weekly_averages,
)


@pytest.fixture
def session():
    return MagicMock()


class TestAnalyticsEndpoints:
    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_trend_passes_range(self, session):
        point = MoodTrendPoint(date=datetime(2026, 2, 11, tzinfo=timezone.utc), mood_level=7.0)
        session.analytics.trend.return_value = [point]

        result = await get_trend(TrendRange.MONTH, session)

        assert result == [point]
        session.analytics.trend.assert_called_once_with(TrendRange.MONTH)

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_factor_impact(self, session):
        session.analytics.factor_impact.return_value = [
            FactorImpactEntry(name="Exercise", positive=2)
        ]

        result = await get_factor_impact(session)

        assert result[0].net == 2

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_weekly_averages(self, session):
        week = WeeklyAverageEntry(week=7, month=2, label="W7 Feb", average=6.0, count=2)
        session.analytics.weekly_averages.return_value = [week]

        assert await get_weekly_averages(session) == [week]

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_insights(self, session):
        session.analytics.insights.return_value = ["Top positive factors: Exercise (2)"]

        assert await get_insights(session) == ["Top positive factors: Exercise (2)"]

    @pytest.mark.asyncio
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value, label",
        [(0.0, None), (0.5, "moderately stable"), (0.8, "very stable")],
    )
    async def test_consistency_carries_label(self, session, value, label):
        session.analytics.consistency.return_value = value

        result = await get_consistency(session)

        assert result.consistency == value
        assert result.label == label

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_summary(self, session):
        session.analytics.summary.return_value = AnalyticsSummary(consistency=1.0)

        result = await get_summary(session)

        assert result.consistency == 1.0
        assert result.week_trend == []
