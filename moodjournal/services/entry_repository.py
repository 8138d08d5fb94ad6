"""
Supabase-backed remote document store for mood entries.

Rows live in one table keyed by user_id:
  id, user_id, entry_date (ISO timestamp), mood_level, factors (JSON), note

Store errors are wrapped in RemoteWriteError / RemoteDeleteError /
RemoteReadError. Decoding is per record so one bad row cannot fail a fetch.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError
from supabase import Client

from moodjournal.core.config import get_settings
from moodjournal.core.database import get_supabase
from moodjournal.models.entry import (
    EntryDecodeError,
    FactorImpact,
    MoodEntry,
    RemoteDeleteError,
    RemoteReadError,
    RemoteWriteError,
)

logger = logging.getLogger(__name__)


def encode_entry(user_id: str, entry: MoodEntry) -> dict[str, Any]:
    """Build the row inserted for an entry (id is assigned by the store)."""
    return {
        "user_id": user_id,
        "entry_date": entry.date.isoformat(),
        "mood_level": entry.mood_level,
        "factors": {name: impact.value for name, impact in entry.factors.items()},
        "note": entry.note,
    }


def _decode_impact(raw: Any) -> FactorImpact:
    # Unknown polarity strings fall back to positive
    if isinstance(raw, str) and raw.lower() == FactorImpact.NEGATIVE.value:
        return FactorImpact.NEGATIVE
    return FactorImpact.POSITIVE


def decode_entry(row: dict[str, Any]) -> MoodEntry:
    """
    Decode a stored row into a MoodEntry.

    Raises:
        EntryDecodeError: If a required field is missing or malformed
    """
    record_id = row.get("id")
    if record_id is None:
        raise EntryDecodeError(None, "missing id")

    raw_date = row.get("entry_date")
    if not isinstance(raw_date, str):
        raise EntryDecodeError(str(record_id), "missing entry_date")
    try:
        when = datetime.fromisoformat(raw_date.replace("Z", "+00:00"))
    except ValueError:
        raise EntryDecodeError(str(record_id), f"bad entry_date '{raw_date}'")

    raw_factors = row.get("factors") or {}
    if not isinstance(raw_factors, dict):
        raise EntryDecodeError(str(record_id), "factors is not an object")

    note = row.get("note")
    if not isinstance(note, str):
        raise EntryDecodeError(str(record_id), "missing note")

    try:
        return MoodEntry(
            id=str(record_id),
            date=when,
            mood_level=row.get("mood_level"),
            factors={str(k): _decode_impact(v) for k, v in raw_factors.items()},
            note=note,
        )
    except ValidationError as e:
        raise EntryDecodeError(str(record_id), str(e.errors()[0]["msg"])) from e


class EntryRepository:
    """Remote store for a user's entry collection."""

    def __init__(self, supabase: Optional[Client] = None, table: Optional[str] = None):
        self._supabase = supabase
        self.table = table or get_settings().entries_table

    @property
    def supabase(self) -> Client:
        if self._supabase is None:
            self._supabase = get_supabase()
        return self._supabase

    def write_entry(self, user_id: str, entry: MoodEntry) -> str:
        """Insert an entry. Returns the store-assigned id."""
        try:
            result = self.supabase.table(self.table).insert(encode_entry(user_id, entry)).execute()
        except Exception as e:
            raise RemoteWriteError(f"Error saving entry: {e}") from e

        if not result.data or not result.data[0].get("id"):
            raise RemoteWriteError("Error saving entry: no id returned")
        return str(result.data[0]["id"])

    def delete_entry(self, user_id: str, entry_id: str) -> None:
        try:
            (
                self.supabase.table(self.table)
                .delete()
                .eq("id", entry_id)
                .eq("user_id", user_id)
                .execute()
            )
        except Exception as e:
            raise RemoteDeleteError(f"Error deleting entry {entry_id}: {e}") from e

    def list_rows(self, user_id: str) -> list[dict[str, Any]]:
        """Raw rows, newest first."""
        try:
            result = (
                self.supabase.table(self.table)
                .select("*")
                .eq("user_id", user_id)
                .order("entry_date", desc=True)
                .execute()
            )
        except Exception as e:
            raise RemoteReadError(f"Error fetching mood entries: {e}") from e
        return list(result.data or [])

    def list_entries(self, user_id: str) -> tuple[list[MoodEntry], int]:
        """
        Decoded entries, newest first, plus the number of skipped records.

        Malformed rows are logged and skipped.
        """
        entries: list[MoodEntry] = []
        skipped = 0
        for row in self.list_rows(user_id):
            try:
                entries.append(decode_entry(row))
            except EntryDecodeError as e:
                skipped += 1
                logger.warning("Skipping mood entry: %s", e, extra={"user_id": user_id})
        return entries, skipped
