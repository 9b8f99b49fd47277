"""Journal entries."""

from __future__ import annotations

from pydantic import Field

from mindspace.models._base import IsoDay, MindspaceBaseModel


class JournalEntry(MindspaceBaseModel):
    """A free-text journal entry with keyword-derived insights."""

    id: str
    date: IsoDay
    content: str
    mood: str | None = None
    tags: list[str] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)
    prompt: str | None = None
