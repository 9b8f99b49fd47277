"""Base model and shared field types for the user data document.

Every document model inherits from :class:`MindspaceBaseModel` which
provides:

* ``alias_generator=to_camel`` so the camelCase keys of the stored JSON
  document map automatically to snake_case fields.
* ``frozen=True``: mutations go through ``model_copy`` / re-validation,
  so a snapshot handed to a caller is never changed behind its back.
* Day and timestamp field types that read a blank string as "unset";
  older documents store ``""`` for an unset target date.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _day_only(value: Any) -> Any:
    """Accept a full ISO timestamp where a calendar day is expected."""
    value = _blank_to_none(value)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    return value


IsoDay = Annotated[date, BeforeValidator(_day_only)]
"""Calendar day, serialized as ``YYYY-MM-DD``."""

OptionalIsoDay = Annotated[date | None, BeforeValidator(_day_only)]
OptionalTimestamp = Annotated[datetime | None, BeforeValidator(_blank_to_none)]


class MindspaceBaseModel(BaseModel):
    """Base for all user data document models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_document(self) -> dict[str, Any]:
        """Dump as a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


def normalize_fields(model_cls: type[BaseModel], values: Mapping[str, Any] | BaseModel) -> dict[str, Any]:
    """Map camelCase or snake_case keys of *values* onto *model_cls* field names.

    Raises :class:`ValueError` for keys that are not fields of the model.
    Model instances are dumped first, so a ``MoodEntry`` can be passed
    wherever a mapping is accepted.
    """
    if isinstance(values, BaseModel):
        values = values.model_dump()

    lookup: dict[str, str] = {}
    for name, info in model_cls.model_fields.items():
        lookup[name] = name
        if info.alias:
            lookup[info.alias] = name

    normalized: dict[str, Any] = {}
    unknown: list[str] = []
    for key, value in values.items():
        name = lookup.get(key)
        if name is None:
            unknown.append(key)
            continue
        normalized[name] = value
    if unknown:
        raise ValueError(f"unknown {model_cls.__name__} field(s): {', '.join(sorted(unknown))}")
    return normalized
