"""Keyword heuristics for journal entries.

These are plain substring scans, not a language model. They produce the
short insight strings stored alongside each journal entry.
"""

from __future__ import annotations

CRISIS_KEYWORDS: tuple[str, ...] = (
    "suicide",
    "kill myself",
    "end it all",
    "not worth living",
    "better off dead",
    "hurt myself",
    "self harm",
    "cut myself",
    "overdose",
    "jump off",
    "hang myself",
    "want to die",
    "die",
    "death",
    "hopeless",
    "helpless",
    "worthless",
    "burden",
)

CRISIS_INSIGHT = "⚠️ We detected concerning content. Please consider reaching out for immediate support."
DEFAULT_INSIGHT = "New entry added"

# (keywords, insight) pairs, reported in this order.
_THEMES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("grateful", "thankful"), "Gratitude practice detected"),
    (("anxious", "worried"), "Anxiety patterns noted"),
    (("sleep", "tired"), "Sleep-related concerns identified"),
    (("friend", "family"), "Social connections mentioned"),
    (("work", "job"), "Work-related reflections"),
    (("exercise", "walk"), "Physical activity noted"),
)


def detect_crisis(text: str) -> bool:
    """Return ``True`` when *text* contains any crisis keyword."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in CRISIS_KEYWORDS)


def generate_insights(text: str) -> list[str]:
    """Derive insight strings from journal *text*.

    A crisis match short-circuits to the single crisis warning. Otherwise
    every matching theme contributes one insight; with no match the
    result is ``[DEFAULT_INSIGHT]``.
    """
    if detect_crisis(text):
        return [CRISIS_INSIGHT]

    lowered = text.lower()
    insights = [insight for keywords, insight in _THEMES if any(k in lowered for k in keywords)]
    return insights or [DEFAULT_INSIGHT]
