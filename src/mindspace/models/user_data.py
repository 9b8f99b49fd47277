"""Root user data document and its format migrations."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import Any

from pydantic import Field

from mindspace._constants import SCHEMA_VERSION
from mindspace.models._base import MindspaceBaseModel
from mindspace.models.cbt import CBTProgress
from mindspace.models.crisis import CrisisContact, SafetyPlan
from mindspace.models.goals import Goal, Habit
from mindspace.models.journal import JournalEntry
from mindspace.models.mood import MoodEntry
from mindspace.models.profile import Profile

_logger = logging.getLogger(__name__)

_VERSION_KEY = "schemaVersion"


class UserData(MindspaceBaseModel):
    """The single persisted document holding all of a user's data."""

    schema_version: int = SCHEMA_VERSION
    profile: Profile = Field(default_factory=Profile)
    mood_history: list[MoodEntry] = Field(default_factory=list)
    journal_entries: list[JournalEntry] = Field(default_factory=list)
    cbt_progress: CBTProgress = Field(default_factory=CBTProgress)
    goals: list[Goal] = Field(default_factory=list)
    habits: list[Habit] = Field(default_factory=list)
    crisis_contacts: list[CrisisContact] = Field(default_factory=list)
    safety_plan: SafetyPlan = Field(default_factory=SafetyPlan)


def default_document() -> dict[str, Any]:
    """Return the default document as a camelCase JSON-compatible dict."""
    return UserData().to_document()


# ------------------------------------------------------------------
# Migrations
# ------------------------------------------------------------------


def _migrate_v0(document: dict[str, Any]) -> dict[str, Any]:
    """Untagged documents written before ``schemaVersion`` existed.

    They used ``""`` as "not set" for ``cbtProgress.lastActivity`` and
    ``goals[].targetDate``; both become ``null``.
    """
    cbt = document.get("cbtProgress")
    if isinstance(cbt, dict) and cbt.get("lastActivity") == "":
        cbt["lastActivity"] = None
    goals = document.get("goals")
    if isinstance(goals, list):
        for goal in goals:
            if isinstance(goal, dict) and goal.get("targetDate") == "":
                goal["targetDate"] = None
    return document


_MIGRATIONS: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    0: _migrate_v0,
}


def document_version(document: dict[str, Any]) -> int:
    version = document.get(_VERSION_KEY, document.get("schema_version", 0))
    if isinstance(version, bool) or not isinstance(version, int) or version < 0:
        return 0
    return version


def migrate_document(document: dict[str, Any]) -> dict[str, Any]:
    """Upgrade a raw camelCase document to :data:`SCHEMA_VERSION`.

    Returns a new dict; the input is not modified. Documents tagged with
    a newer version than this library knows are returned unchanged.
    """
    migrated = copy.deepcopy(document)
    version = document_version(migrated)
    if version > SCHEMA_VERSION:
        _logger.warning(
            "User data document has schema version %d, newer than supported version %d",
            version,
            SCHEMA_VERSION,
        )
        return migrated

    while version < SCHEMA_VERSION:
        step = _MIGRATIONS.get(version)
        if step is not None:
            _logger.debug("Migrating user data document from schema version %d", version)
            migrated = step(migrated)
        version += 1

    migrated.pop("schema_version", None)
    migrated[_VERSION_KEY] = SCHEMA_VERSION
    return migrated
