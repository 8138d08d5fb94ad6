"""
Streak and achievement service.

Each achievement type is a one-way state machine (locked -> unlocked)
re-evaluated synchronously after every successful EntryStore change:
- first_log: the store holds exactly one entry
- streak: a run of 7+ entries on consecutive calendar days
- factor_use: the Exercise factor has ever been selected
- mood_variety: every mood band has been observed

Unlocking queues a "just unlocked" notification that expires on its own
after a fixed delay; nothing waits for the presentation layer to read it.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Iterable, Optional, Sequence

from moodjournal.core.constants import (
    EXERCISE_FACTOR,
    FIRST_LOG_ENTRY_COUNT,
    MOOD_BAND_UPPER_BOUNDS,
    MOOD_LEVEL_MIN,
    STREAK_ACHIEVEMENT_DAYS,
)
from moodjournal.models.achievement import (
    ACHIEVEMENT_CATALOG,
    Achievement,
    AchievementNotification,
    AchievementStatus,
    AchievementType,
)
from moodjournal.models.entry import MoodEntry
from moodjournal.services.entry_store import EntryStore, calendar_day

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Streaks and bands
# =============================================================================


def streak_runs(entries: Sequence[MoodEntry], tz: tzinfo) -> list[int]:
    """
    Run counter after each entry, scanning ascending by date.

    The counter grows when an entry falls exactly one calendar day after the
    previous one and resets to 1 otherwise.
    """
    runs: list[int] = []
    previous = None
    for entry in sorted(entries, key=lambda e: e.date):
        day = calendar_day(entry.date, tz)
        if previous is not None and (day - previous).days == 1:
            runs.append(runs[-1] + 1)
        else:
            runs.append(1)
        previous = day
    return runs


def current_streak(entries: Sequence[MoodEntry], tz: tzinfo) -> int:
    """Length of the run ending at the most recent entry (0 when empty)."""
    runs = streak_runs(entries, tz)
    return runs[-1] if runs else 0


def mood_band(level: float) -> Optional[int]:
    """Band index 0-4 for a mood level, or None when off the scale."""
    if level < MOOD_LEVEL_MIN:
        return None
    for index, upper in enumerate(MOOD_BAND_UPPER_BOUNDS):
        if level <= upper:
            return index
    return None


# =============================================================================
# Service
# =============================================================================


class AchievementService:
    """Tracks unlocked achievements and used factors for one session."""

    def __init__(
        self,
        store: EntryStore,
        clock: Optional[Clock] = None,
        notification_seconds: float = 3.0,
        on_unlock: Optional[Callable[[Achievement], None]] = None,
        catalog: Optional[list[Achievement]] = None,
    ) -> None:
        self.store = store
        self.clock = clock or _utcnow
        self.notification_ttl = timedelta(seconds=notification_seconds)
        self.on_unlock = on_unlock
        self.catalog = catalog if catalog is not None else list(ACHIEVEMENT_CATALOG)

        self._lock = threading.Lock()
        self._unlocked: set[str] = set()
        self._used_factors: set[str] = set()
        self._notifications: list[AchievementNotification] = []
        self.streak_count = 0

        self._evaluators: dict[AchievementType, Callable[[Sequence[MoodEntry]], bool]] = {
            AchievementType.FIRST_LOG: self._first_log_reached,
            AchievementType.STREAK: self._streak_reached,
            AchievementType.FACTOR_USE: self._factor_used,
            AchievementType.MOOD_VARIETY: self._all_bands_seen,
        }

    # =========================================================================
    # Public API
    # =========================================================================

    @property
    def unlocked_ids(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._unlocked)

    @property
    def used_factors(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._used_factors)

    def record_factors(self, names: Iterable[str]) -> None:
        """Add factor names to the append-only used set."""
        with self._lock:
            self._used_factors.update(names)

    def evaluate(self) -> list[Achievement]:
        """Re-check every achievement type. Returns the ones unlocked by this call."""
        entries = self.store.snapshot()
        self.streak_count = current_streak(entries, self.store.tz)

        newly_unlocked = []
        for achievement_type, reached in self._evaluators.items():
            if reached(entries):
                achievement = self.unlock(achievement_type)
                if achievement is not None:
                    newly_unlocked.append(achievement)
        return newly_unlocked

    def unlock(self, achievement_type: AchievementType) -> Optional[Achievement]:
        """
        Unlock the catalog slot for a type.

        Idempotent: returns None if the slot is already unlocked.
        """
        achievement = self._slot_for(achievement_type)
        if achievement is None:
            return None

        now = self.clock()
        with self._lock:
            if achievement.id in self._unlocked:
                return None
            self._unlocked.add(achievement.id)
            self._notifications.append(
                AchievementNotification(
                    achievement=achievement,
                    unlocked_at=now,
                    expires_at=now + self.notification_ttl,
                )
            )

        logger.info("Unlocking achievement: %s", achievement.title)
        if self.on_unlock is not None:
            self.on_unlock(achievement)
        return achievement

    def statuses(self) -> list[AchievementStatus]:
        unlocked = self.unlocked_ids
        return [AchievementStatus(achievement=a, unlocked=a.id in unlocked) for a in self.catalog]

    def pending_notifications(self) -> list[AchievementNotification]:
        """Unexpired notifications, oldest first; expired ones are dropped."""
        now = self.clock()
        with self._lock:
            self._notifications = [n for n in self._notifications if n.expires_at > now]
            return list(self._notifications)

    def consume_notifications(self) -> list[AchievementNotification]:
        """Return unexpired notifications and clear the queue."""
        now = self.clock()
        with self._lock:
            pending = [n for n in self._notifications if n.expires_at > now]
            self._notifications = []
        return pending

    def reset(self) -> None:
        with self._lock:
            self._unlocked.clear()
            self._used_factors.clear()
            self._notifications.clear()
        self.streak_count = 0

    # =========================================================================
    # Evaluators
    # =========================================================================

    def _slot_for(self, achievement_type: AchievementType) -> Optional[Achievement]:
        # Types sharing several catalog items (7- and 30-day streaks) use the first
        for achievement in self.catalog:
            if achievement.type == achievement_type:
                return achievement
        return None

    def _first_log_reached(self, entries: Sequence[MoodEntry]) -> bool:
        return len(entries) == FIRST_LOG_ENTRY_COUNT

    def _streak_reached(self, entries: Sequence[MoodEntry]) -> bool:
        runs = streak_runs(entries, self.store.tz)
        return bool(runs) and max(runs) >= STREAK_ACHIEVEMENT_DAYS

    def _factor_used(self, entries: Sequence[MoodEntry]) -> bool:
        return EXERCISE_FACTOR in self.used_factors

    def _all_bands_seen(self, entries: Sequence[MoodEntry]) -> bool:
        bands = {mood_band(e.mood_level) for e in entries}
        bands.discard(None)
        return len(bands) == len(MOOD_BAND_UPPER_BOUNDS)
