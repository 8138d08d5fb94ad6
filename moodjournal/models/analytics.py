"""
Analytics models derived from the entry history.

Covers:
- Mood trend points (week / month ranges)
- Factor impact and weekly averages
- Insights, consistency and the combined summary
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field


class TrendRange(str, Enum):
    """Window for the mood trend chart."""

    WEEK = "week"  # Monday 00:00 through Sunday 23:59 of the current week
    MONTH = "month"  # trailing 30 days, inclusive


class MoodTrendPoint(BaseModel):
    """A single (date, mood) point, ascending by date in a trend."""

    date: datetime
    mood_level: float


class FactorImpactEntry(BaseModel):
    """Positive/negative occurrence counts for one factor."""

    name: str
    positive: int = 0
    negative: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def net(self) -> int:
        return self.positive - self.negative


class WeeklyAverageEntry(BaseModel):
    """Average mood for one (ISO week, month) group."""

    week: int
    month: int
    label: str  # e.g. "W7 Feb"
    average: float
    count: int


class ConsistencyResponse(BaseModel):
    """Mood stability over the current week."""

    consistency: float
    label: Optional[str] = None


class AnalyticsSummary(BaseModel):
    """Everything the analytics screen shows, from one snapshot."""

    week_trend: list[MoodTrendPoint] = Field(default_factory=list)
    month_trend: list[MoodTrendPoint] = Field(default_factory=list)
    factor_impact: list[FactorImpactEntry] = Field(default_factory=list)
    weekly_averages: list[WeeklyAverageEntry] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)
    consistency: float = 0.0
    stability: Optional[str] = None
    weekly_change: Optional[float] = None
