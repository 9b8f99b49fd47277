"""Goals, milestones and habits."""

from __future__ import annotations

import enum

from pydantic import Field

from mindspace.models._base import MindspaceBaseModel, OptionalIsoDay


class GoalCategory(enum.StrEnum):
    WELLNESS = "wellness"
    HEALTH = "health"
    SOCIAL = "social"
    REFLECTION = "reflection"
    LEARNING = "learning"


class HabitFrequency(enum.StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Milestone(MindspaceBaseModel):
    id: str
    title: str
    completed: bool = False
    date: OptionalIsoDay = None


class Goal(MindspaceBaseModel):
    """A wellness goal with percentage progress."""

    id: str
    title: str
    description: str = ""
    category: GoalCategory = GoalCategory.WELLNESS
    target_date: OptionalIsoDay = None
    completed: bool = False
    progress: int = Field(default=0, ge=0, le=100)
    milestones: list[Milestone] = Field(default_factory=list)


class Habit(MindspaceBaseModel):
    """A recurring habit. ``streak`` counts consecutive completed periods."""

    id: str
    title: str
    description: str = ""
    frequency: HabitFrequency = HabitFrequency.DAILY
    streak: int = Field(default=0, ge=0)
    last_completed: OptionalIsoDay = None
    reminders: bool = False
