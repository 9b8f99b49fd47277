"""Mood check-in entries."""

from __future__ import annotations

from pydantic import Field

from mindspace.models._base import IsoDay, MindspaceBaseModel

MIN_MOOD_SCORE = 1
MAX_MOOD_SCORE = 10


class MoodEntry(MindspaceBaseModel):
    """A single mood check-in."""

    id: str
    date: IsoDay
    mood: str
    score: int = Field(ge=MIN_MOOD_SCORE, le=MAX_MOOD_SCORE)
    notes: str | None = None
    activities: list[str] | None = None
