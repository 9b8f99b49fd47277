from __future__ import annotations

import pytest

from mindspace.insights import CRISIS_INSIGHT, DEFAULT_INSIGHT, detect_crisis, generate_insights


@pytest.mark.parametrize("text", ["I want to DIE", "feeling worthless", "I am a burden to everyone"])
def test_detect_crisis(text: str) -> None:
    assert detect_crisis(text)


def test_no_crisis_in_plain_text() -> None:
    assert not detect_crisis("Had a calm morning")


def test_crisis_short_circuits_other_themes() -> None:
    assert generate_insights("So tired, everything feels hopeless") == [CRISIS_INSIGHT]


def test_themes_in_fixed_order() -> None:
    text = "Went for a walk with family after work, feeling thankful"
    assert generate_insights(text) == [
        "Gratitude practice detected",
        "Social connections mentioned",
        "Work-related reflections",
        "Physical activity noted",
    ]


def test_default_insight() -> None:
    assert generate_insights("") == [DEFAULT_INSIGHT]
