"""
Achievement endpoints.

Endpoints:
- GET /: Catalog with unlocked flags and the current streak
- GET /notifications: Consume unexpired "just unlocked" notifications
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from moodjournal.models.achievement import AchievementNotification, AchievementStatus
from moodjournal.routers.dependencies import get_journal_session
from moodjournal.services.journal_session import JournalSession

router = APIRouter()


class AchievementsResponse(BaseModel):
    achievements: list[AchievementStatus]
    streak: int


@router.get("", response_model=AchievementsResponse)
async def list_achievements(
    session: JournalSession = Depends(get_journal_session),
) -> AchievementsResponse:
    return AchievementsResponse(
        achievements=session.achievements.statuses(),
        streak=session.achievements.streak_count,
    )


@router.get("/notifications", response_model=list[AchievementNotification])
async def consume_notifications(
    session: JournalSession = Depends(get_journal_session),
) -> list[AchievementNotification]:
    """Each notification is returned once, and only until it expires."""
    return session.achievements.consume_notifications()
