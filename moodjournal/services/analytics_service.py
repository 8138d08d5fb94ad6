"""
Mood analytics over an entry snapshot.

Every function here is pure: it takes the entries and "now" and fully
recomputes. AnalyticsService binds them to a session's EntryStore and clock.
Analytics read the local snapshot regardless of connectivity; only entry
mutations are gated.

Tie order in factor_impact: factors with equal |net| keep alphabetical order.
"""

import logging
import statistics
from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Callable, Optional, Sequence

from moodjournal.core.constants import (
    CONSISTENCY_MIN_POINTS,
    CONSISTENCY_STDDEV_DIVISOR,
    MONTH_TREND_DAYS,
    STABILITY_MODERATE_ABOVE,
    STABILITY_VERY_STABLE_ABOVE,
    WEEK_AVERAGE_MIN_POINTS,
    WEEKLY_CHANGE_CURRENT_DAYS,
    WEEKLY_CHANGE_PREVIOUS_DAYS,
)
from moodjournal.models.analytics import (
    AnalyticsSummary,
    FactorImpactEntry,
    MoodTrendPoint,
    TrendRange,
    WeeklyAverageEntry,
)
from moodjournal.models.entry import FactorImpact, MoodEntry
from moodjournal.services.entry_store import EntryStore, calendar_day

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)  # fmt: skip


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


# =============================================================================
# Pure computations
# =============================================================================


def week_bounds(now: datetime, tz: tzinfo) -> tuple[datetime, datetime]:
    """Start of Monday and start of the following Monday for now's local week."""
    today = calendar_day(now, tz)
    monday = today - timedelta(days=today.weekday())
    start = datetime.combine(monday, time.min, tzinfo=tz)
    return start, start + timedelta(days=7)


def trend(
    entries: Sequence[MoodEntry], range_: TrendRange, now: datetime, tz: tzinfo
) -> list[MoodTrendPoint]:
    """Mood points in the range, ascending by date."""
    if range_ == TrendRange.WEEK:
        start, end = week_bounds(now, tz)
        selected = [e for e in entries if start <= e.date < end]
    else:
        today = calendar_day(now, tz)
        selected = [
            e for e in entries if 0 <= (today - calendar_day(e.date, tz)).days <= MONTH_TREND_DAYS
        ]

    return [
        MoodTrendPoint(date=e.date, mood_level=e.mood_level)
        for e in sorted(selected, key=lambda e: e.date)
    ]


def factor_counts(entries: Sequence[MoodEntry]) -> dict[str, FactorImpactEntry]:
    """Positive/negative occurrence counts per factor name."""
    counts: dict[str, FactorImpactEntry] = {}
    for entry in entries:
        for name, impact in entry.factors.items():
            current = counts.setdefault(name, FactorImpactEntry(name=name))
            if impact == FactorImpact.POSITIVE:
                current.positive += 1
            else:
                current.negative += 1
    return counts


def factor_impact(entries: Sequence[MoodEntry]) -> list[FactorImpactEntry]:
    """Factors ranked by |positive - negative|, largest first."""
    counts = factor_counts(entries)
    alphabetical = [counts[name] for name in sorted(counts)]
    return sorted(alphabetical, key=lambda f: abs(f.net), reverse=True)


def weekly_averages(entries: Sequence[MoodEntry], tz: tzinfo) -> list[WeeklyAverageEntry]:
    """Average mood per (ISO week, month of the entry), ascending by that key."""
    groups: dict[tuple[int, int], list[float]] = defaultdict(list)
    for entry in entries:
        day = calendar_day(entry.date, tz)
        groups[(day.isocalendar()[1], day.month)].append(entry.mood_level)

    return [
        WeeklyAverageEntry(
            week=week,
            month=month,
            label=f"W{week} {MONTH_ABBREVIATIONS[month - 1]}",
            average=_mean(moods),
            count=len(moods),
        )
        for (week, month), moods in sorted(groups.items())
    ]


def _top_factors(counts: dict[str, FactorImpactEntry], attr: str) -> list[str]:
    best = max((getattr(c, attr) for c in counts.values()), default=0)
    if best <= 0:
        return []
    return [f"{name} ({best})" for name in sorted(counts) if getattr(counts[name], attr) == best]


def insights(entries: Sequence[MoodEntry], now: datetime, tz: tzinfo) -> list[str]:
    """
    Textual insights, in order:
    top positive factor(s), top negative factor(s), and the current week's
    average once the week has at least 7 entries.
    """
    result = []
    counts = factor_counts(entries)

    top_positive = _top_factors(counts, "positive")
    if top_positive:
        result.append(f"Top positive factors: {', '.join(top_positive)}")

    top_negative = _top_factors(counts, "negative")
    if top_negative:
        result.append(f"Top negative factors: {', '.join(top_negative)}")

    week = trend(entries, TrendRange.WEEK, now, tz)
    if len(week) >= WEEK_AVERAGE_MIN_POINTS:
        average = _mean([p.mood_level for p in week])
        result.append(f"Your average mood for the past week is {average:.1f}")

    return result


def consistency(entries: Sequence[MoodEntry], now: datetime, tz: tzinfo) -> float:
    """1 - (stddev of this week's moods / 3), clamped to [0, 1]; 0 with under 2 points."""
    week = trend(entries, TrendRange.WEEK, now, tz)
    if len(week) < CONSISTENCY_MIN_POINTS:
        return 0.0

    deviation = statistics.pstdev([p.mood_level for p in week])
    normalized = max(0.0, min(1.0, deviation / CONSISTENCY_STDDEV_DIVISOR))
    return 1.0 - normalized


def stability_label(value: float) -> Optional[str]:
    if value <= 0:
        return None
    if value > STABILITY_VERY_STABLE_ABOVE:
        return "very stable"
    if value > STABILITY_MODERATE_ABOVE:
        return "moderately stable"
    return "fluctuated significantly"


def weekly_change(entries: Sequence[MoodEntry], now: datetime, tz: tzinfo) -> Optional[float]:
    """Average of the last 7 days minus the average of the 7 days before."""
    today = calendar_day(now, tz)
    current, previous = [], []
    for entry in entries:
        age = (today - calendar_day(entry.date, tz)).days
        if 0 <= age <= WEEKLY_CHANGE_CURRENT_DAYS:
            current.append(entry.mood_level)
        elif WEEKLY_CHANGE_CURRENT_DAYS < age <= WEEKLY_CHANGE_PREVIOUS_DAYS:
            previous.append(entry.mood_level)

    if not current or not previous:
        return None
    return _mean(current) - _mean(previous)


# =============================================================================
# Service
# =============================================================================


class AnalyticsService:
    """Read-only analytics bound to a session's EntryStore."""

    def __init__(self, store: EntryStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def tz(self) -> tzinfo:
        return self.store.tz

    def trend(self, range_: TrendRange) -> list[MoodTrendPoint]:
        return trend(self.store.snapshot(), range_, self.clock(), self.tz)

    def factor_impact(self) -> list[FactorImpactEntry]:
        return factor_impact(self.store.snapshot())

    def weekly_averages(self) -> list[WeeklyAverageEntry]:
        return weekly_averages(self.store.snapshot(), self.tz)

    def insights(self) -> list[str]:
        return insights(self.store.snapshot(), self.clock(), self.tz)

    def consistency(self) -> float:
        return consistency(self.store.snapshot(), self.clock(), self.tz)

    def weekly_change(self) -> Optional[float]:
        return weekly_change(self.store.snapshot(), self.clock(), self.tz)

    def entry_for(self, day: date) -> Optional[MoodEntry]:
        return self.store.entry_for(day)

    def summary(self) -> AnalyticsSummary:
        """All analytics computed against a single snapshot."""
        entries = self.store.snapshot()
        now = self.clock()
        stability = consistency(entries, now, self.tz)
        return AnalyticsSummary(
            week_trend=trend(entries, TrendRange.WEEK, now, self.tz),
            month_trend=trend(entries, TrendRange.MONTH, now, self.tz),
            factor_impact=factor_impact(entries),
            weekly_averages=weekly_averages(entries, self.tz),
            insights=insights(entries, now, self.tz),
            consistency=stability,
            stability=stability_label(stability),
            weekly_change=weekly_change(entries, now, self.tz),
        )
