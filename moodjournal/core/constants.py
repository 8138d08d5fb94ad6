"""
Application constants for the mood journal.

Centralizes mood scale bounds, analytics windows and achievement thresholds.
"""

# Mood scale
MOOD_LEVEL_MIN = 1.0
MOOD_LEVEL_MAX = 10.0
NOTE_MAX_LENGTH = 2000
FACTOR_NAME_MAX_LENGTH = 50

# Mood bands (upper bounds, inclusive). The first band is closed at MOOD_LEVEL_MIN:
# [1, 2], (2, 4], (4, 6], (6, 8], (8, 10]
MOOD_BAND_UPPER_BOUNDS = [2.0, 4.0, 6.0, 8.0, 10.0]

# Trend windows
MONTH_TREND_DAYS = 30
WEEKLY_CHANGE_CURRENT_DAYS = 7
WEEKLY_CHANGE_PREVIOUS_DAYS = 14

# Insights
WEEK_AVERAGE_MIN_POINTS = 7  # current week needs this many entries for the average insight

# Consistency (1 - stddev / divisor, clamped to [0, 1])
CONSISTENCY_MIN_POINTS = 2
CONSISTENCY_STDDEV_DIVISOR = 3.0
STABILITY_VERY_STABLE_ABOVE = 0.7
STABILITY_MODERATE_ABOVE = 0.4

# Achievements
STREAK_ACHIEVEMENT_DAYS = 7
EXERCISE_FACTOR = "Exercise"
FIRST_LOG_ENTRY_COUNT = 1

# PostHog event names
EVENT_ENTRY_COMMITTED = "mood_entry_committed"
EVENT_ENTRY_REPLACED = "mood_entry_replaced"
EVENT_ACHIEVEMENT_UNLOCKED = "achievement_unlocked"
