"""
Achievement models.

The catalog is static; the unlocked flag lives in AchievementService and is
monotonic (never re-locked).
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class AchievementType(str, Enum):
    """Closed set of achievement categories."""

    FIRST_LOG = "first_log"
    STREAK = "streak"
    FACTOR_USE = "factor_use"
    MOOD_VARIETY = "mood_variety"


class Achievement(BaseModel):
    """Static catalog item."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    icon: str
    type: AchievementType
    color: str  # hex RGB


class AchievementStatus(BaseModel):
    """Catalog item with the session's unlocked flag."""

    achievement: Achievement
    unlocked: bool = False


class AchievementNotification(BaseModel):
    """Transient "just unlocked" token for the presentation layer."""

    achievement: Achievement
    unlocked_at: datetime
    expires_at: datetime


ACHIEVEMENT_CATALOG: list[Achievement] = [
    Achievement(
        id="first_step",
        title="First Step",
        description="Log your first mood entry",
        icon="star.fill",
        type=AchievementType.FIRST_LOG,
        color="#FFD700",
    ),
    Achievement(
        id="week_warrior",
        title="Week Warrior",
        description="Complete a 7-day logging streak",
        icon="flame.fill",
        type=AchievementType.STREAK,
        color="#FF8C00",
    ),
    Achievement(
        id="monthly_master",
        title="Monthly Master",
        description="Complete a 30-day logging streak",
        icon="crown.fill",
        type=AchievementType.STREAK,
        color="#FFA500",
    ),
    Achievement(
        id="exercise_explorer",
        title="Exercise Explorer",
        description="Use the Exercise factor for the first time",
        icon="figure.run",
        type=AchievementType.FACTOR_USE,
        color="#32CD32",
    ),
    Achievement(
        id="mood_range",
        title="Mood Range",
        description="Experience the full range of moods",
        icon="chart.bar.fill",
        type=AchievementType.MOOD_VARIETY,
        color="#4682B4",
    ),
]
