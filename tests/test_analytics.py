from __future__ import annotations

from datetime import date

import pytest

from mindspace.analytics import (
    MoodBand,
    MoodTrend,
    average_mood,
    filter_journal_entries,
    mood_band,
    mood_trend,
)
from mindspace.models import JournalEntry, MoodEntry


def _history(*scores: int) -> list[MoodEntry]:
    """Newest-first history with the given scores."""
    return [MoodEntry(id=str(i), date=date(2024, 1, 1), mood="m", score=score) for i, score in enumerate(scores)]


class TestMoodTrend:
    def test_short_history_is_stable(self) -> None:
        assert mood_trend(_history(9)) is MoodTrend.STABLE
        assert mood_trend(_history(9, 1, 1)) is MoodTrend.STABLE

    def test_improving(self) -> None:
        assert mood_trend(_history(*([8] * 7 + [4] * 7))) is MoodTrend.IMPROVING

    def test_declining(self) -> None:
        assert mood_trend(_history(*([3] * 7 + [7] * 7))) is MoodTrend.DECLINING

    def test_within_threshold_is_stable(self) -> None:
        assert mood_trend(_history(6, 6, 6, 6, 6, 6, 6, 6, 6, 5)) is MoodTrend.STABLE

    def test_older_week_may_be_partial(self) -> None:
        assert mood_trend(_history(*([8] * 7 + [2]))) is MoodTrend.IMPROVING


class TestAverageMood:
    def test_empty(self) -> None:
        assert average_mood([]) == 0.0

    def test_rounded_to_one_decimal(self) -> None:
        assert average_mood(_history(7, 8, 8)) == 7.7

    def test_only_newest_thirty_count(self) -> None:
        assert average_mood(_history(*([10] * 30 + [1] * 10))) == 10.0


@pytest.mark.parametrize(
    ("score", "band"),
    [(10, MoodBand.GREAT), (8, MoodBand.GREAT), (7, MoodBand.GOOD), (4, MoodBand.OKAY), (2, MoodBand.LOW), (1, MoodBand.VERY_LOW)],
)
def test_mood_band(score: int, band: MoodBand) -> None:
    assert mood_band(score) is band


class TestFilterJournalEntries:
    ENTRIES = [
        JournalEntry(id="1", date=date(2024, 1, 1), content="Busy day at Work", mood="neutral", tags=["work"]),
        JournalEntry(id="2", date=date(2024, 1, 2), content="Picnic with friends", mood="great", tags=["social"]),
        JournalEntry(id="3", date=date(2024, 1, 3), content="Quiet evening", tags=[]),
    ]

    def test_no_filters_returns_all(self) -> None:
        assert [e.id for e in filter_journal_entries(self.ENTRIES)] == ["1", "2", "3"]

    def test_search_is_case_insensitive(self) -> None:
        assert [e.id for e in filter_journal_entries(self.ENTRIES, search="work")] == ["1"]

    def test_any_tag_matches(self) -> None:
        assert [e.id for e in filter_journal_entries(self.ENTRIES, tags=["social", "sleep"])] == ["2"]

    def test_mood(self) -> None:
        assert [e.id for e in filter_journal_entries(self.ENTRIES, mood="great")] == ["2"]
