"""Read-only summaries over the mood history and journal."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence

from mindspace.models.journal import JournalEntry
from mindspace.models.mood import MoodEntry

#: Entries considered for trend and average (the chart's 30-day window).
TREND_WINDOW = 30
_TREND_SPAN = 7
_TREND_THRESHOLD = 0.5


class MoodTrend(enum.StrEnum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class MoodBand(enum.StrEnum):
    """Five display bands over the 1-10 score range."""

    GREAT = "great"
    GOOD = "good"
    OKAY = "okay"
    LOW = "low"
    VERY_LOW = "very_low"


def _mean(scores: Sequence[int]) -> float:
    return sum(scores) / len(scores)


def mood_trend(history: Sequence[MoodEntry]) -> MoodTrend:
    """Compare the newest week of entries with the week before it.

    *history* is newest-first, as stored. Fewer than two entries, or no
    entries before the newest seven, is reported as stable.
    """
    window = history[:TREND_WINDOW]
    if len(window) < 2:
        return MoodTrend.STABLE
    recent = [entry.score for entry in window[:_TREND_SPAN]]
    older = [entry.score for entry in window[_TREND_SPAN : 2 * _TREND_SPAN]]
    if not older:
        return MoodTrend.STABLE

    recent_avg = _mean(recent)
    older_avg = _mean(older)
    if recent_avg > older_avg + _TREND_THRESHOLD:
        return MoodTrend.IMPROVING
    if recent_avg < older_avg - _TREND_THRESHOLD:
        return MoodTrend.DECLINING
    return MoodTrend.STABLE


def average_mood(history: Sequence[MoodEntry]) -> float:
    """Average score of the newest :data:`TREND_WINDOW` entries, one decimal."""
    window = history[:TREND_WINDOW]
    if not window:
        return 0.0
    return round(_mean([entry.score for entry in window]), 1)


def mood_band(score: int) -> MoodBand:
    if score >= 8:
        return MoodBand.GREAT
    if score >= 6:
        return MoodBand.GOOD
    if score >= 4:
        return MoodBand.OKAY
    if score >= 2:
        return MoodBand.LOW
    return MoodBand.VERY_LOW


def filter_journal_entries(
    entries: Iterable[JournalEntry],
    *,
    search: str = "",
    tags: Iterable[str] = (),
    mood: str | None = None,
) -> list[JournalEntry]:
    """Filter entries by case-insensitive content search, any-of tags and mood."""
    needle = search.lower()
    wanted_tags = set(tags)
    result: list[JournalEntry] = []
    for entry in entries:
        if needle and needle not in entry.content.lower():
            continue
        if wanted_tags and wanted_tags.isdisjoint(entry.tags):
            continue
        if mood and entry.mood != mood:
            continue
        result.append(entry)
    return result
