"""Pydantic models for the Mood Journal API."""

from moodjournal.models.achievement import (
    ACHIEVEMENT_CATALOG,
    Achievement,
    AchievementNotification,
    AchievementStatus,
    AchievementType,
)
from moodjournal.models.entry import (
    AuthRequiredError,
    ConflictPendingError,
    EntryDecodeError,
    EntryValidationError,
    FactorImpact,
    JournalError,
    MoodEntry,
    MoodEntryCreate,
    NetworkUnavailableError,
    NoPendingConflictError,
    RemoteDeleteError,
    RemoteReadError,
    RemoteWriteError,
    SubmitResult,
    SubmitStatus,
    SyncInProgressError,
)

__all__ = [
    # Entry models
    "FactorImpact",
    "MoodEntry",
    "MoodEntryCreate",
    "SubmitResult",
    "SubmitStatus",
    # Achievement models
    "ACHIEVEMENT_CATALOG",
    "Achievement",
    "AchievementNotification",
    "AchievementStatus",
    "AchievementType",
    # Errors
    "AuthRequiredError",
    "ConflictPendingError",
    "EntryDecodeError",
    "EntryValidationError",
    "JournalError",
    "NetworkUnavailableError",
    "NoPendingConflictError",
    "RemoteDeleteError",
    "RemoteReadError",
    "RemoteWriteError",
    "SyncInProgressError",
]
