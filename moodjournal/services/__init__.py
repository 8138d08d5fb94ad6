"""Journal services: entry sync, analytics and achievements."""

from moodjournal.services.achievement_service import AchievementService
from moodjournal.services.analytics_service import AnalyticsService
from moodjournal.services.entry_store import EntryStore
from moodjournal.services.journal_session import JournalSession, SessionRegistry
from moodjournal.services.sync_service import SyncService

__all__ = [
    "AchievementService",
    "AnalyticsService",
    "EntryStore",
    "JournalSession",
    "SessionRegistry",
    "SyncService",
]
