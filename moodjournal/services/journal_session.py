"""
Per-user journal session.

A JournalSession owns one EntryStore and passes it explicitly to the sync,
analytics and achievement services. SessionRegistry keeps one session per
signed-in user for the API process.
"""

import logging
import threading
import time
from datetime import datetime, timezone, tzinfo
from typing import Callable, Optional

from moodjournal.core.config import get_settings
from moodjournal.core.connectivity import ConnectivityGate
from moodjournal.core.constants import EVENT_ACHIEVEMENT_UNLOCKED
from moodjournal.core.posthog import capture as posthog_capture
from moodjournal.models.achievement import Achievement
from moodjournal.models.entry import (
    EntriesResponse,
    FetchResult,
    MoodEntryCreate,
    SubmitResult,
)
from moodjournal.services.achievement_service import AchievementService
from moodjournal.services.analytics_service import AnalyticsService
from moodjournal.services.entry_repository import EntryRepository
from moodjournal.services.entry_store import EntryStore
from moodjournal.services.sync_service import SyncService

logger = logging.getLogger(__name__)


class JournalSession:
    """Entry state and services for one signed-in user."""

    def __init__(
        self,
        user_id: str,
        gate: ConnectivityGate,
        repository: Optional[EntryRepository] = None,
        tz: Optional[tzinfo] = None,
        clock: Optional[Callable[[], datetime]] = None,
        notification_seconds: Optional[float] = None,
    ) -> None:
        settings = get_settings()
        self.user_id: Optional[str] = user_id
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.loaded = False

        self.store = EntryStore(tz or settings.tz)
        self.achievements = AchievementService(
            self.store,
            clock=self.clock,
            notification_seconds=(
                notification_seconds
                if notification_seconds is not None
                else settings.achievement_notification_seconds
            ),
            on_unlock=self._announce_unlock,
        )
        self.sync = SyncService(
            self.store,
            repository or EntryRepository(),
            gate,
            current_user_id=lambda: self.user_id,
            achievements=self.achievements,
            clock=self.clock,
        )
        self.analytics = AnalyticsService(self.store, clock=self.clock)

    def refresh(self) -> FetchResult:
        """Reload all entries from the remote store."""
        result = self.sync.fetch_all()
        self.loaded = True
        return result

    def log_mood(self, request: MoodEntryCreate) -> SubmitResult:
        """Submit today's mood. Loads the history first if it never loaded."""
        if not self.loaded:
            self.refresh()
        return self.sync.submit_entry(request.to_entry(self.clock()))

    def entries(self) -> EntriesResponse:
        return EntriesResponse(entries=list(self.store.snapshot()), pending=self.sync.pending)

    def sign_out(self) -> None:
        """Forget the user and all local state."""
        self.sync.reset()
        self.user_id = None
        self.loaded = False

    def _announce_unlock(self, achievement: Achievement) -> None:
        if self.user_id:
            posthog_capture(
                user_id=self.user_id,
                event=EVENT_ACHIEVEMENT_UNLOCKED,
                properties={"achievement_id": achievement.id},
            )


class SessionRegistry:
    """
    One JournalSession per user id, created on first use.

    Sessions unused for idle_seconds are dropped on the next lookup, so the
    registry holds at most the users active within that window.
    """

    def __init__(
        self,
        gate: ConnectivityGate,
        session_factory: Optional[Callable[[str, ConnectivityGate], JournalSession]] = None,
        idle_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.gate = gate
        self._factory = session_factory or (lambda user_id, g: JournalSession(user_id, g))
        self.idle_seconds = idle_seconds
        self._clock = clock
        self._sessions: dict[str, JournalSession] = {}
        self._last_used: dict[str, float] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> JournalSession:
        now = self._clock()
        with self._lock:
            self._evict_idle(now, keep=user_id)
            session = self._sessions.get(user_id)
            if session is None:
                session = self._factory(user_id, self.gate)
                self._sessions[user_id] = session
                logger.debug("Created journal session", extra={"user_id": user_id})
            self._last_used[user_id] = now
        return session

    def discard(self, user_id: str) -> None:
        """Sign the session out, then drop it. A failed sign-out leaves it registered."""
        with self._lock:
            session = self._sessions.get(user_id)
        if session is None:
            return
        session.sign_out()
        with self._lock:
            if self._sessions.get(user_id) is session:
                del self._sessions[user_id]
                self._last_used.pop(user_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _evict_idle(self, now: float, keep: str) -> None:
        if self.idle_seconds is None:
            return
        stale = [
            user_id
            for user_id, last_used in self._last_used.items()
            if user_id != keep and now - last_used > self.idle_seconds
        ]
        for user_id in stale:
            del self._sessions[user_id]
            del self._last_used[user_id]
            logger.debug("Evicted idle journal session", extra={"user_id": user_id})
