"""
Entry sync service.

Reconciles new submissions against the session's EntryStore and the remote
store so that each calendar day holds at most one entry.

Flow:
- submit_entry: day is free -> write, append, COMMITTED.
  Day taken -> PENDING_CONFLICT, nothing changes until the user decides.
- confirm_replace: write the candidate first, then delete the old entry.
  If that delete fails the new write is rolled back, so the store never
  loses the day's entry.
- cancel_replace: drop the candidate; no remote calls.

submit/confirm/cancel/fetch form one transaction per session: a second
mutation while one is in flight raises SyncInProgressError, and a submit
while a replace decision is pending raises ConflictPendingError.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from moodjournal.core.connectivity import ConnectivityGate
from moodjournal.core.constants import EVENT_ENTRY_COMMITTED, EVENT_ENTRY_REPLACED
from moodjournal.core.posthog import capture as posthog_capture
from moodjournal.models.entry import (
    AuthRequiredError,
    ConflictPendingError,
    FetchResult,
    MoodEntry,
    NoPendingConflictError,
    RemoteDeleteError,
    ReplaceResult,
    SubmitResult,
    SubmitStatus,
    SyncInProgressError,
)
from moodjournal.services.achievement_service import AchievementService
from moodjournal.services.entry_repository import EntryRepository
from moodjournal.services.entry_store import EntryStore

logger = logging.getLogger(__name__)

CurrentUserId = Callable[[], Optional[str]]


class SyncService:
    """Owns entry mutation for one user session."""

    def __init__(
        self,
        store: EntryStore,
        repository: EntryRepository,
        gate: ConnectivityGate,
        current_user_id: CurrentUserId,
        achievements: Optional[AchievementService] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.repository = repository
        self.gate = gate
        self.current_user_id = current_user_id
        self.achievements = achievements
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        self._transaction_lock = threading.Lock()
        self._pending: Optional[MoodEntry] = None

    @property
    def pending(self) -> Optional[MoodEntry]:
        """Candidate awaiting confirm/cancel, if any."""
        return self._pending

    # =========================================================================
    # Public API
    # =========================================================================

    def submit_entry(self, candidate: MoodEntry) -> SubmitResult:
        """
        Submit a new entry for its calendar day.

        Raises:
            NetworkUnavailableError: Gate is closed
            AuthRequiredError: No signed-in user
            SyncInProgressError: Another mutation is in flight
            ConflictPendingError: A replace decision is still pending
            RemoteWriteError: The store rejected the write (nothing changed)
        """
        user_id = self._preflight()
        with self._transaction():
            if self._pending is not None:
                raise ConflictPendingError(self._pending)

            existing = self.store.entry_for(self.store.day_of(candidate))
            if existing is not None:
                self._pending = candidate
                logger.info(
                    "Entry already exists for %s, awaiting replace decision",
                    self.store.day_of(candidate),
                    extra={"user_id": user_id},
                )
                return SubmitResult(
                    status=SubmitStatus.PENDING_CONFLICT, entry=candidate, existing=existing
                )

            committed = self._write(user_id, candidate)
            self.store.append(committed)
            self._after_mutation([committed])

        posthog_capture(
            user_id=user_id,
            event=EVENT_ENTRY_COMMITTED,
            properties={"mood_level": committed.mood_level, "factor_count": len(committed.factors)},
        )
        return SubmitResult(status=SubmitStatus.COMMITTED, entry=committed)

    def confirm_replace(self) -> ReplaceResult:
        """
        Replace the day's existing entry with the pending candidate.

        The most recent same-day entry is the one replaced; older legacy
        duplicates on that day are cleaned up too.

        Raises:
            NoPendingConflictError: Nothing to confirm
            RemoteWriteError: Candidate write failed (pending is kept for retry)
            RemoteDeleteError: Old entry could not be deleted (new write rolled back)
        """
        user_id = self._preflight()
        with self._transaction():
            candidate = self._pending
            if candidate is None:
                raise NoPendingConflictError()

            same_day = sorted(
                (e for e in self.store.entries_on(self.store.day_of(candidate)) if e.id),
                key=lambda e: e.date,
                reverse=True,
            )

            committed = self._write(user_id, candidate)
            replaced = self._delete_replaced(user_id, same_day, committed)

            self._pending = None
            self.store.remove(e.id for e in same_day if e.id)
            self.store.append(committed)
            self._after_mutation([committed])

        logger.info(
            "Replaced %d entr%s for %s",
            len(replaced),
            "y" if len(replaced) == 1 else "ies",
            self.store.day_of(committed),
            extra={"user_id": user_id},
        )
        posthog_capture(
            user_id=user_id,
            event=EVENT_ENTRY_REPLACED,
            properties={"mood_level": committed.mood_level, "replaced_count": len(replaced)},
        )
        return ReplaceResult(entry=committed, replaced=replaced)

    def cancel_replace(self) -> MoodEntry:
        """
        Discard the pending candidate. Local only; the existing entry is untouched.

        Returns the discarded candidate.
        """
        with self._transaction():
            candidate = self._pending
            if candidate is None:
                raise NoPendingConflictError()
            self._pending = None
        logger.debug("Pending entry replacement cancelled")
        return candidate

    def fetch_all(self) -> FetchResult:
        """
        Replace the EntryStore wholesale from the remote store.

        Malformed records are skipped and logged. On RemoteReadError the
        store is left unchanged.
        """
        user_id = self._preflight()
        with self._transaction():
            entries, skipped = self.repository.list_entries(user_id)
            self.store.replace_all(entries)
            self._after_mutation(entries)

        logger.info(
            "Fetched %d mood entries (%d skipped)",
            len(entries),
            skipped,
            extra={"user_id": user_id},
        )
        return FetchResult(loaded=len(entries), skipped=skipped)

    def reset(self) -> None:
        """Drop local state (sign-out)."""
        with self._transaction():
            self._pending = None
            self.store.clear()
            if self.achievements is not None:
                self.achievements.reset()

    # =========================================================================
    # Private helpers
    # =========================================================================

    def _preflight(self) -> str:
        self.gate.require_online()
        user_id = self.current_user_id()
        if not user_id:
            raise AuthRequiredError()
        return user_id

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        if not self._transaction_lock.acquire(blocking=False):
            raise SyncInProgressError()
        try:
            yield
        finally:
            self._transaction_lock.release()

    def _write(self, user_id: str, entry: MoodEntry) -> MoodEntry:
        entry_id = self.repository.write_entry(user_id, entry)
        return entry.with_id(entry_id)

    def _delete_replaced(
        self, user_id: str, same_day: list[MoodEntry], committed: MoodEntry
    ) -> list[MoodEntry]:
        replaced: list[MoodEntry] = []
        for index, old in enumerate(same_day):
            assert old.id is not None
            try:
                self.repository.delete_entry(user_id, old.id)
            except RemoteDeleteError:
                if index == 0:
                    self._roll_back(user_id, committed)
                    raise
                # Stale duplicate: the replacement itself already succeeded
                logger.warning(
                    "Could not delete duplicate entry %s", old.id, extra={"user_id": user_id}
                )
                continue
            replaced.append(old)
        return replaced

    def _roll_back(self, user_id: str, committed: MoodEntry) -> None:
        assert committed.id is not None
        try:
            self.repository.delete_entry(user_id, committed.id)
        except RemoteDeleteError:
            logger.error(
                "Rollback failed, entry %s left as a same-day duplicate",
                committed.id,
                extra={"user_id": user_id},
            )

    def _after_mutation(self, changed: list[MoodEntry]) -> None:
        if self.achievements is None:
            return
        for entry in changed:
            self.achievements.record_factors(entry.factors)
        self.achievements.evaluate()
