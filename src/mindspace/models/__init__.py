"""Data models for the user data document."""

from mindspace.models._base import IsoDay, MindspaceBaseModel, normalize_fields
from mindspace.models.cbt import ActivityPlan, CBTProgress, ThoughtRecord
from mindspace.models.crisis import CrisisContact, SafetyPlan
from mindspace.models.goals import Goal, GoalCategory, Habit, HabitFrequency, Milestone
from mindspace.models.journal import JournalEntry
from mindspace.models.mood import MAX_MOOD_SCORE, MIN_MOOD_SCORE, MoodEntry
from mindspace.models.profile import Profile
from mindspace.models.user_data import UserData, default_document, migrate_document

__all__ = [
    "MAX_MOOD_SCORE",
    "MIN_MOOD_SCORE",
    "ActivityPlan",
    "CBTProgress",
    "CrisisContact",
    "Goal",
    "GoalCategory",
    "Habit",
    "HabitFrequency",
    "IsoDay",
    "JournalEntry",
    "MindspaceBaseModel",
    "Milestone",
    "MoodEntry",
    "Profile",
    "SafetyPlan",
    "ThoughtRecord",
    "UserData",
    "default_document",
    "migrate_document",
    "normalize_fields",
]
