"""Masking of personal text for DEBUG logs.

The user data document is mostly personal free text. Each entity type
declares which of its fields are personal; those are replaced by a
length marker so a log still shows which fields were filled in without
showing what they say.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel

from mindspace.models import (
    CrisisContact,
    JournalEntry,
    MoodEntry,
    Profile,
    SafetyPlan,
    ThoughtRecord,
)

_PERSONAL_FIELDS: dict[type[BaseModel], frozenset[str]] = {
    Profile: frozenset({"name"}),
    MoodEntry: frozenset({"notes"}),
    JournalEntry: frozenset({"content", "prompt"}),
    ThoughtRecord: frozenset(ThoughtRecord.model_fields) - {"id", "date"},
    CrisisContact: frozenset({"name", "phone", "relationship"}),
    SafetyPlan: frozenset(SafetyPlan.model_fields),
}


def _mask(value: Any) -> Any:
    if value is None or value == "":
        return value
    if isinstance(value, str):
        return f"<redacted {len(value)} chars>"
    return "<redacted>"


def redact_for_log(value: Any, *, max_string: int = 256) -> Any:
    """Return a JSON-ready copy of *value* with personal fields masked.

    Models are rendered with their camelCase aliases. Strings outside
    personal fields are truncated to *max_string* characters.
    """
    if isinstance(value, BaseModel):
        personal = _PERSONAL_FIELDS.get(type(value), frozenset())
        rendered: dict[str, Any] = {}
        for name, info in type(value).model_fields.items():
            field_value = getattr(value, name)
            if name in personal:
                rendered[info.alias or name] = _mask(field_value)
            else:
                rendered[info.alias or name] = redact_for_log(field_value, max_string=max_string)
        return rendered

    if isinstance(value, (list, tuple)):
        return [redact_for_log(item, max_string=max_string) for item in value]

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return str(value)

    if isinstance(value, date):
        return value.isoformat()

    return value
