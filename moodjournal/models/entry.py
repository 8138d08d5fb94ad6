"""
Pydantic models for mood entries and the entry sync flow.

A MoodEntry is immutable: the remote store assigns its id on first write
(returned as a copy), and replacing a day's entry is delete + insert.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from moodjournal.core.constants import (
    FACTOR_NAME_MAX_LENGTH,
    MOOD_LEVEL_MAX,
    MOOD_LEVEL_MIN,
    NOTE_MAX_LENGTH,
)

# =============================================================================
# Enums
# =============================================================================


class FactorImpact(str, Enum):
    """Polarity of a factor's effect on the day's mood."""

    POSITIVE = "positive"
    NEGATIVE = "negative"


class SubmitStatus(str, Enum):
    """Outcome of a submission that did not fail."""

    COMMITTED = "committed"
    PENDING_CONFLICT = "pending_conflict"


# =============================================================================
# Entry Models
# =============================================================================


class MoodEntry(BaseModel):
    """A single day's mood record."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    date: datetime
    mood_level: float = Field(..., ge=MOOD_LEVEL_MIN, le=MOOD_LEVEL_MAX)
    factors: dict[str, FactorImpact] = Field(default_factory=dict)
    note: str = Field("", max_length=NOTE_MAX_LENGTH)

    @field_validator("date")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        # Naive timestamps are treated as UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("factors")
    @classmethod
    def validate_factor_names(cls, v: dict[str, FactorImpact]) -> dict[str, FactorImpact]:
        cleaned: dict[str, FactorImpact] = {}
        for name, impact in v.items():
            key = name.strip()
            if not key:
                raise ValueError("Factor names must not be empty")
            if len(key) > FACTOR_NAME_MAX_LENGTH:
                raise ValueError(f"Factor name too long: '{key[:20]}...'")
            if key in cleaned:
                raise ValueError(f"Duplicate factor: '{key}'")
            cleaned[key] = impact
        return cleaned

    def with_id(self, entry_id: str) -> "MoodEntry":
        """Return a persisted copy carrying the store-assigned id."""
        return self.model_copy(update={"id": entry_id})


class MoodEntryCreate(BaseModel):
    """Request to log today's mood."""

    mood_level: float = Field(5.0, ge=MOOD_LEVEL_MIN, le=MOOD_LEVEL_MAX)
    factors: dict[str, FactorImpact] = Field(default_factory=dict)
    note: str = Field("", max_length=NOTE_MAX_LENGTH)

    def to_entry(self, when: datetime) -> MoodEntry:
        """Build the candidate entry stamped with the submission time."""
        try:
            return MoodEntry(
                date=when,
                mood_level=self.mood_level,
                factors=self.factors,
                note=self.note,
            )
        except ValidationError as e:
            raise EntryValidationError(str(e.errors()[0]["msg"])) from e


# =============================================================================
# Result Models
# =============================================================================


class SubmitResult(BaseModel):
    """Result of submit_entry: committed, or waiting on a replace decision."""

    status: SubmitStatus
    entry: MoodEntry  # the committed entry, or the pending candidate
    existing: Optional[MoodEntry] = None  # same-day entry that caused the conflict


class ReplaceResult(BaseModel):
    """Result of confirm_replace."""

    entry: MoodEntry
    replaced: list[MoodEntry] = Field(default_factory=list)


class FetchResult(BaseModel):
    """Result of a full reload from the remote store."""

    loaded: int
    skipped: int


class EntriesResponse(BaseModel):
    """Current entry snapshot plus any pending replace candidate."""

    entries: list[MoodEntry]
    pending: Optional[MoodEntry] = None


# =============================================================================
# Exceptions
# =============================================================================


class JournalError(Exception):
    """Base exception for mood journal errors."""

    pass


class NetworkUnavailableError(JournalError):
    """Connectivity gate is closed; nothing was changed."""

    def __init__(self, message: str = "No internet connection"):
        super().__init__(message)


class AuthRequiredError(JournalError):
    """No signed-in user."""

    def __init__(self, message: str = "No logged-in user"):
        super().__init__(message)


class RemoteWriteError(JournalError):
    """The remote store rejected or failed a write."""

    pass


class RemoteDeleteError(JournalError):
    """The remote store rejected or failed a delete."""

    pass


class RemoteReadError(JournalError):
    """The remote store could not be read."""

    pass


class EntryDecodeError(JournalError):
    """A remote record could not be decoded into a MoodEntry."""

    def __init__(self, record_id: Optional[str], reason: str):
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Malformed entry {record_id or '<no id>'}: {reason}")


class EntryValidationError(JournalError):
    """Entry fields failed validation."""

    pass


class ConflictPendingError(JournalError):
    """A replace decision is pending; confirm or cancel it first."""

    def __init__(self, pending: MoodEntry):
        self.pending = pending
        super().__init__("An entry replacement is awaiting confirmation")


class SyncInProgressError(JournalError):
    """Another entry mutation is still in flight for this session."""

    def __init__(self, message: str = "Another entry change is in progress"):
        super().__init__(message)


class NoPendingConflictError(JournalError):
    """confirm/cancel called with no pending replacement."""

    def __init__(self, message: str = "No entry replacement is pending"):
        super().__init__(message)
