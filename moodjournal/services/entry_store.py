"""
Canonical in-memory entry collection for one user session.

Entries are kept ascending by date. Readers get immutable snapshots (tuples),
so analytics can run while a sync operation is in flight.
"""

import bisect
import threading
from datetime import date, datetime, tzinfo
from typing import Iterable, Optional

from moodjournal.models.entry import MoodEntry


def calendar_day(when: datetime, tz: tzinfo) -> date:
    """Truncate a timestamp to its local calendar day."""
    return when.astimezone(tz).date()


class EntryStore:
    """Ordered, thread-safe collection of a user's mood entries."""

    def __init__(self, tz: tzinfo, entries: Optional[Iterable[MoodEntry]] = None) -> None:
        self.tz = tz
        self._lock = threading.Lock()
        self._entries: list[MoodEntry] = sorted(entries or [], key=lambda e: e.date)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def snapshot(self) -> tuple[MoodEntry, ...]:
        """Current entries, ascending by date."""
        with self._lock:
            return tuple(self._entries)

    def day_of(self, entry: MoodEntry) -> date:
        return calendar_day(entry.date, self.tz)

    def entries_on(self, day: date) -> list[MoodEntry]:
        """All entries on a calendar day (more than one only for legacy duplicates)."""
        return [e for e in self.snapshot() if self.day_of(e) == day]

    def entry_for(self, day: date) -> Optional[MoodEntry]:
        """Most recent entry on a calendar day, if any."""
        same_day = self.entries_on(day)
        if not same_day:
            return None
        return max(same_day, key=lambda e: e.date)

    def append(self, entry: MoodEntry) -> None:
        with self._lock:
            keys = [e.date for e in self._entries]
            self._entries.insert(bisect.bisect_right(keys, entry.date), entry)

    def remove(self, entry_ids: Iterable[str]) -> int:
        """Remove entries by id. Returns how many were removed."""
        ids = set(entry_ids)
        with self._lock:
            before = len(self._entries)
            self._entries = [e for e in self._entries if e.id not in ids]
            return before - len(self._entries)

    def replace_all(self, entries: Iterable[MoodEntry]) -> None:
        """Swap in a freshly fetched collection, normalized to ascending order."""
        ordered = sorted(entries, key=lambda e: e.date)
        with self._lock:
            self._entries = ordered

    def clear(self) -> None:
        with self._lock:
            self._entries = []
