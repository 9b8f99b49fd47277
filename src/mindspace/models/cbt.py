"""Cognitive behavioural therapy exercise progress."""

from __future__ import annotations

from pydantic import Field

from mindspace.models._base import IsoDay, MindspaceBaseModel, OptionalTimestamp
from mindspace.models.mood import MAX_MOOD_SCORE, MIN_MOOD_SCORE


class ThoughtRecord(MindspaceBaseModel):
    """Seven-column thought record."""

    id: str
    date: IsoDay
    situation: str = ""
    thoughts: str = ""
    emotions: str = ""
    behaviors: str = ""
    evidence_for: str = ""
    evidence_against: str = ""
    balanced_thought: str = ""


class ActivityPlan(MindspaceBaseModel):
    """Behavioural activation plan.

    ``completed`` is the subset of ``activities`` that was actually done;
    ``mood_after`` is filled in once the plan has been carried out.
    """

    id: str
    date: IsoDay
    activities: list[str] = Field(default_factory=list)
    completed: list[str] = Field(default_factory=list)
    mood_before: int = Field(ge=MIN_MOOD_SCORE, le=MAX_MOOD_SCORE)
    mood_after: int | None = Field(default=None, ge=MIN_MOOD_SCORE, le=MAX_MOOD_SCORE)


class CBTProgress(MindspaceBaseModel):
    completed_exercises: list[str] = Field(default_factory=list)
    thought_records: list[ThoughtRecord] = Field(default_factory=list)
    activity_plans: list[ActivityPlan] = Field(default_factory=list)
    last_activity: OptionalTimestamp = None
