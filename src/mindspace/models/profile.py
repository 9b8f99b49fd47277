"""User profile preferences."""

from __future__ import annotations

from mindspace.models._base import MindspaceBaseModel


class Profile(MindspaceBaseModel):
    """Display preferences. The two mode flags only affect presentation."""

    name: str = "Guest"
    preferred_language: str = "en"
    accessibility_mode: bool = False
    anonymous_mode: bool = True
