"""Persistent user data store.

This is the only component allowed to read or write the storage key.
Every mutation loads the full document, changes one aggregate, writes
the full document back and returns it, so callers never construct the
document by hand.
"""

from __future__ import annotations

import copy
import json
import logging
import secrets
from collections.abc import Callable, Mapping
from datetime import UTC, date, datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mindspace._constants import (
    EXPORT_FILENAME_TEMPLATE,
    EXPORT_INDENT,
    MOOD_HISTORY_LIMIT,
    SCHEMA_VERSION,
    STORAGE_KEY,
)
from mindspace._ids import new_id
from mindspace._redact import redact_for_log
from mindspace.backends import StorageBackend
from mindspace.events import ChangeKind, ChangeListener, StorageChangeEvent, StorageEvents
from mindspace.exceptions import DocumentValidationError, StorageError
from mindspace.insights import generate_insights
from mindspace.models import (
    ActivityPlan,
    CrisisContact,
    Goal,
    Habit,
    JournalEntry,
    MoodEntry,
    Profile,
    SafetyPlan,
    ThoughtRecord,
    UserData,
    default_document,
    migrate_document,
    normalize_fields,
)
from mindspace.models.user_data import document_version

_logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

EntityPayload = Mapping[str, Any] | BaseModel


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ------------------------------------------------------------------
# Results
# ------------------------------------------------------------------


class SaveResult(BaseModel):
    """Outcome of a write to the backend."""

    model_config = ConfigDict(frozen=True)

    saved: bool
    error: str | None = None


class MutationResult(BaseModel):
    """Full post-mutation document plus what happened to it.

    ``changed`` is ``False`` for no-op updates (unknown id, exercise
    already completed); the document is then returned unchanged and not
    rewritten. ``saved`` is ``False`` when the write failed, in which case
    ``data`` is the intended document and storage still holds the old one.
    """

    model_config = ConfigDict(frozen=True)

    data: UserData
    saved: bool = True
    changed: bool = True
    error: str | None = None
    entity_id: str | None = None


class ImportResult(BaseModel):
    """Outcome of :meth:`UserDataStore.import_data`. Truthy on success."""

    model_config = ConfigDict(frozen=True)

    success: bool
    error: str | None = None
    errors: list[str] = Field(default_factory=list)
    data: UserData | None = None

    def __bool__(self) -> bool:
        return self.success


# ------------------------------------------------------------------
# Document helpers
# ------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *overlay* over *base* recursively.

    Nested objects gain keys they are missing; lists and scalars in the
    overlay replace the base value verbatim.
    """
    merged = copy.deepcopy(base)
    for key, value in overlay.items():
        existing = merged.get(key)
        if isinstance(existing, dict) and isinstance(value, Mapping):
            merged[key] = _deep_merge(existing, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _format_error(error: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "<document>"
    return f"{location}: {error.get('msg', 'invalid value')}"


def _lookup(document: Any, path: tuple[Any, ...]) -> Any:
    current = document
    for part in path:
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, list) and isinstance(part, int) and 0 <= part < len(current):
            current = current[part]
        else:
            return None
    return current


def _repair_document(document: dict[str, Any], exc: ValidationError) -> dict[str, Any]:
    """Drop or reset the parts of *document* that failed validation.

    An invalid entity inside a list is dropped from that list; any other
    invalid value is reset to its default so the rest of the document
    survives.
    """
    repaired = copy.deepcopy(document)
    defaults = default_document()
    removals: dict[tuple[Any, ...], set[int]] = {}
    resets: set[tuple[Any, ...]] = set()

    for error in exc.errors():
        loc = tuple(error.get("loc", ()))
        indices = [pos for pos, part in enumerate(loc) if isinstance(part, int)]
        if indices:
            last = indices[-1]
            removals.setdefault(loc[:last], set()).add(loc[last])
            continue
        # Walk the defaults as far as the location goes.
        path: tuple[Any, ...] = ()
        node: Any = defaults
        for part in loc:
            if not isinstance(node, dict) or part not in node:
                break
            path = (*path, part)
            node = node[part]
        if path:
            resets.add(path)

    for path in sorted(resets, key=len):
        parent = _lookup(repaired, path[:-1])
        if isinstance(parent, dict):
            parent[path[-1]] = copy.deepcopy(_lookup(defaults, path))

    for path in sorted(removals, key=len, reverse=True):
        items = _lookup(repaired, path)
        if not isinstance(items, list):
            continue
        for index in sorted(removals[path], reverse=True):
            if 0 <= index < len(items):
                del items[index]
    return repaired


def _build(model_cls: type[M], payload: EntityPayload, **generated: Any) -> M:
    fields = normalize_fields(model_cls, payload)
    fields.update(generated)
    return model_cls.model_validate(fields)


def _merged(model: M, updates: EntityPayload, **fixed: Any) -> M:
    fields = {**model.model_dump(), **normalize_fields(type(model), updates), **fixed}
    return type(model).model_validate(fields)


def _replace_by_id(items: list[M], item_id: str, updates: EntityPayload) -> list[M] | None:
    """Return *items* with the entity *item_id* updated, or ``None`` if absent."""
    for index, item in enumerate(items):
        if getattr(item, "id", None) == item_id:
            updated = _merged(item, updates, id=item_id)
            return [*items[:index], updated, *items[index + 1 :]]
    return None


# ------------------------------------------------------------------
# Store
# ------------------------------------------------------------------


class UserDataStore:
    """Sole owner of the user data storage key.

    Parameters
    ----------
    backend : StorageBackend
        Key/value storage holding the serialized document.
    key : str
        Storage key of the document.
    mood_history_limit : int
        Mood entries kept; the oldest are dropped on overflow.
    export_indent : int
        Indentation of :meth:`export_data` output.
    id_factory : callable
        Produces entity ids.
    clock : callable
        Returns the current aware datetime; used for dates and
        ``cbt_progress.last_activity``.
    events : StorageEvents or None
        Change notification hub. Pass the same hub to every store that
        shares *backend* so they observe each other's writes.
    """

    def __init__(
        self,
        backend: StorageBackend,
        *,
        key: str = STORAGE_KEY,
        mood_history_limit: int = MOOD_HISTORY_LIMIT,
        export_indent: int = EXPORT_INDENT,
        id_factory: Callable[[], str] = new_id,
        clock: Callable[[], datetime] = _utcnow,
        events: StorageEvents | None = None,
    ) -> None:
        if mood_history_limit < 1:
            raise ValueError(f"mood_history_limit must be positive, got {mood_history_limit}")
        self._backend = backend
        self._key = key
        self._mood_history_limit = mood_history_limit
        self._export_indent = export_indent
        self._id_factory = id_factory
        self._clock = clock
        self._events = events if events is not None else StorageEvents()
        self.instance_id = secrets.token_hex(4)

    @property
    def key(self) -> str:
        return self._key

    @property
    def events(self) -> StorageEvents:
        return self._events

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Listen for committed changes to this store's key from any store on the hub."""

        def _filtered(event: StorageChangeEvent) -> None:
            if event.key == self._key:
                listener(event)

        return self._events.subscribe(_filtered)

    def _publish(self, kind: ChangeKind) -> None:
        self._events.publish(StorageChangeEvent(key=self._key, kind=kind, origin=self.instance_id))

    def _today(self) -> date:
        return self._clock().astimezone(UTC).date()

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def default_data(self) -> UserData:
        """Return a fresh default document."""
        return UserData()

    def _read_raw(self) -> dict[str, Any] | None:
        try:
            stored = self._backend.get_item(self._key)
        except StorageError as exc:
            _logger.error("Error loading user data: %s", exc)
            return None
        if stored is None:
            return None
        try:
            parsed = json.loads(stored)
        except json.JSONDecodeError as exc:
            _logger.error("Error loading user data: stored document is not valid JSON (%s)", exc)
            return None
        if not isinstance(parsed, dict):
            _logger.error("Error loading user data: stored document is a %s, not an object", type(parsed).__name__)
            return None
        return parsed

    def load_user_data(self) -> UserData:
        """Read the stored document, falling back to defaults.

        The stored object is migrated and deep-merged over the default
        structure, so older documents always come back complete. Entities
        that no longer validate are dropped and logged; the rest of the
        document is kept. Absent, unreadable or malformed storage yields
        the defaults. This method never raises for storage conditions.
        """
        raw = self._read_raw()
        if raw is None:
            return self.default_data()

        document = _deep_merge(default_document(), migrate_document(raw))
        try:
            return self._trim_mood_history(UserData.model_validate(document))
        except ValidationError as exc:
            _logger.warning(
                "Stored user data has %d invalid value(s); dropping them: %s",
                exc.error_count(),
                "; ".join(_format_error(e) for e in exc.errors()),
            )
            repaired = _repair_document(document, exc)
        try:
            return self._trim_mood_history(UserData.model_validate(repaired))
        except ValidationError:
            _logger.error("Stored user data could not be repaired; using defaults", exc_info=True)
            return self.default_data()

    def _trim_mood_history(self, data: UserData) -> UserData:
        """Keep only the newest ``mood_history_limit`` mood entries."""
        if len(data.mood_history) <= self._mood_history_limit:
            return data
        _logger.warning(
            "Dropping %d mood entries beyond the limit of %d",
            len(data.mood_history) - self._mood_history_limit,
            self._mood_history_limit,
        )
        return data.model_copy(update={"mood_history": data.mood_history[: self._mood_history_limit]})

    def _write(self, data: UserData, kind: ChangeKind) -> SaveResult:
        payload = json.dumps(data.to_document(), ensure_ascii=False)
        try:
            self._backend.set_item(self._key, payload)
        except StorageError as exc:
            _logger.error("Error saving user data: %s", exc)
            return SaveResult(saved=False, error=str(exc))
        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug("Saved user data (%d characters): %s", len(payload), redact_for_log(data))
        self._publish(kind)
        return SaveResult(saved=True)

    def save_user_data(self, data: UserData | Mapping[str, Any]) -> SaveResult:
        """Serialize and write the full document.

        Storage failures (quota exceeded, disabled storage) are logged
        and reported through the result, never raised.
        """
        if not isinstance(data, UserData):
            data = UserData.model_validate(data)
        return self._write(data, ChangeKind.SAVED)

    def _commit(self, data: UserData, *, entity_id: str | None = None) -> MutationResult:
        result = self._write(data, ChangeKind.SAVED)
        return MutationResult(data=data, saved=result.saved, error=result.error, entity_id=entity_id)

    @staticmethod
    def _unchanged(data: UserData) -> MutationResult:
        return MutationResult(data=data, changed=False)

    # ------------------------------------------------------------------
    # Whole sections
    # ------------------------------------------------------------------

    def update_user_data(self, updates: Mapping[str, Any]) -> MutationResult:
        """Replace whole top-level sections, e.g. ``{"habits": [...]}``."""
        data = self.load_user_data()
        data = _merged(data, updates)
        return self._commit(data)

    def update_profile(self, updates: EntityPayload) -> MutationResult:
        data = self.load_user_data()
        profile: Profile = _merged(data.profile, updates)
        return self._commit(data.model_copy(update={"profile": profile}))

    # ------------------------------------------------------------------
    # Mood and journal
    # ------------------------------------------------------------------

    def add_mood_entry(self, entry: EntityPayload) -> MutationResult:
        """Prepend a mood entry, keeping only the newest ``mood_history_limit``."""
        data = self.load_user_data()
        new_entry = _build(MoodEntry, entry, id=self._id_factory())
        history = [new_entry, *data.mood_history][: self._mood_history_limit]
        return self._commit(data.model_copy(update={"mood_history": history}), entity_id=new_entry.id)

    def add_journal_entry(self, entry: EntityPayload) -> MutationResult:
        """Prepend a journal entry dated today.

        Insights are derived from the content when the caller supplies none.
        """
        data = self.load_user_data()
        fields = normalize_fields(JournalEntry, entry)
        if not fields.get("insights"):
            fields["insights"] = generate_insights(str(fields.get("content", "")))
        new_entry = _build(JournalEntry, fields, id=self._id_factory(), date=self._today())
        entries = [new_entry, *data.journal_entries]
        return self._commit(data.model_copy(update={"journal_entries": entries}), entity_id=new_entry.id)

    # ------------------------------------------------------------------
    # CBT progress
    # ------------------------------------------------------------------

    def add_thought_record(self, record: EntityPayload) -> MutationResult:
        data = self.load_user_data()
        new_record = _build(ThoughtRecord, record, id=self._id_factory(), date=self._today())
        cbt = data.cbt_progress.model_copy(
            update={
                "thought_records": [new_record, *data.cbt_progress.thought_records],
                "last_activity": self._clock(),
            }
        )
        return self._commit(data.model_copy(update={"cbt_progress": cbt}), entity_id=new_record.id)

    def add_activity_plan(self, plan: EntityPayload) -> MutationResult:
        data = self.load_user_data()
        new_plan = _build(ActivityPlan, plan, id=self._id_factory(), date=self._today())
        cbt = data.cbt_progress.model_copy(
            update={
                "activity_plans": [new_plan, *data.cbt_progress.activity_plans],
                "last_activity": self._clock(),
            }
        )
        return self._commit(data.model_copy(update={"cbt_progress": cbt}), entity_id=new_plan.id)

    def complete_exercise(self, exercise_id: str) -> MutationResult:
        """Mark a CBT exercise completed. Completing it again is a no-op."""
        exercise_id = exercise_id.strip()
        if not exercise_id:
            raise ValueError("exercise_id must be non-empty")
        data = self.load_user_data()
        if exercise_id in data.cbt_progress.completed_exercises:
            return self._unchanged(data)
        cbt = data.cbt_progress.model_copy(
            update={
                "completed_exercises": [*data.cbt_progress.completed_exercises, exercise_id],
                "last_activity": self._clock(),
            }
        )
        return self._commit(data.model_copy(update={"cbt_progress": cbt}))

    # ------------------------------------------------------------------
    # Goals and habits
    # ------------------------------------------------------------------

    def add_goal(self, goal: EntityPayload) -> MutationResult:
        data = self.load_user_data()
        new_goal = _build(Goal, goal, id=self._id_factory())
        return self._commit(data.model_copy(update={"goals": [new_goal, *data.goals]}), entity_id=new_goal.id)

    def update_goal(self, goal_id: str, updates: EntityPayload) -> MutationResult:
        """Shallow-merge *updates* into the goal *goal_id*; unknown ids are a no-op."""
        data = self.load_user_data()
        goals = _replace_by_id(data.goals, goal_id, updates)
        if goals is None:
            _logger.debug("update_goal: no goal with id %s", goal_id)
            return self._unchanged(data)
        return self._commit(data.model_copy(update={"goals": goals}), entity_id=goal_id)

    def add_habit(self, habit: EntityPayload) -> MutationResult:
        data = self.load_user_data()
        new_habit = _build(Habit, habit, id=self._id_factory())
        return self._commit(data.model_copy(update={"habits": [new_habit, *data.habits]}), entity_id=new_habit.id)

    def update_habit(self, habit_id: str, updates: EntityPayload) -> MutationResult:
        """Shallow-merge *updates* into the habit *habit_id*; unknown ids are a no-op."""
        data = self.load_user_data()
        habits = _replace_by_id(data.habits, habit_id, updates)
        if habits is None:
            _logger.debug("update_habit: no habit with id %s", habit_id)
            return self._unchanged(data)
        return self._commit(data.model_copy(update={"habits": habits}), entity_id=habit_id)

    # ------------------------------------------------------------------
    # Crisis support
    # ------------------------------------------------------------------

    def add_crisis_contact(self, contact: EntityPayload) -> MutationResult:
        data = self.load_user_data()
        new_contact = _build(CrisisContact, contact, id=self._id_factory())
        contacts = [new_contact, *data.crisis_contacts]
        return self._commit(data.model_copy(update={"crisis_contacts": contacts}), entity_id=new_contact.id)

    def update_safety_plan(self, updates: EntityPayload) -> MutationResult:
        data = self.load_user_data()
        plan: SafetyPlan = _merged(data.safety_plan, updates)
        return self._commit(data.model_copy(update={"safety_plan": plan}))

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------

    def clear_all_data(self) -> SaveResult:
        """Remove the storage key; the next load returns defaults."""
        try:
            self._backend.remove_item(self._key)
        except StorageError as exc:
            _logger.error("Error clearing user data: %s", exc)
            return SaveResult(saved=False, error=str(exc))
        _logger.info("Cleared user data stored under %s", self._key)
        self._publish(ChangeKind.CLEARED)
        return SaveResult(saved=True)

    def export_data(self) -> str:
        """Return the current document as pretty-printed JSON."""
        return json.dumps(self.load_user_data().to_document(), indent=self._export_indent, ensure_ascii=False)

    def export_filename(self, day: date | None = None) -> str:
        """File name offered for an export, e.g. ``mindspace-data-export-2024-01-31.json``."""
        return EXPORT_FILENAME_TEMPLATE.format(day=(day or self._today()).isoformat())

    @staticmethod
    def parse_document(text: str | bytes) -> UserData:
        """Parse and fully validate an exported document.

        Raises :class:`DocumentValidationError` for invalid JSON, a JSON
        value that is not an object, missing top-level sections, a newer
        schema version, or entities that fail validation.
        """
        try:
            parsed = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as exc:
            raise DocumentValidationError(f"Import is not valid JSON: {exc}") from exc

        if not isinstance(parsed, dict):
            raise DocumentValidationError(f"Import must be a JSON object, got {type(parsed).__name__}")

        version = document_version(parsed)
        if version > SCHEMA_VERSION:
            raise DocumentValidationError(
                f"Import has schema version {version}; this version supports up to {SCHEMA_VERSION}"
            )

        missing = [
            info.alias or name
            for name, info in UserData.model_fields.items()
            if name != "schema_version" and name not in parsed and (info.alias or name) not in parsed
        ]
        if missing:
            raise DocumentValidationError(
                "Import is missing required sections",
                errors=[f"{section}: missing section" for section in missing],
            )

        try:
            return UserData.model_validate(migrate_document(parsed))
        except ValidationError as exc:
            errors = [_format_error(e) for e in exc.errors()]
            raise DocumentValidationError(
                f"Import does not match the user data schema ({len(errors)} error(s))",
                errors=errors,
            ) from exc

    def import_data(self, text: str | bytes) -> ImportResult:
        """Validate *text* as a full document and replace storage with it.

        Mood history beyond ``mood_history_limit`` is cut to the newest
        entries before writing. Storage is left untouched when
        :meth:`parse_document` rejects the text or the write fails.
        """
        try:
            data = self.parse_document(text)
        except DocumentValidationError as exc:
            _logger.error("Error importing data: %s", "; ".join([str(exc), *exc.errors]))
            return ImportResult(success=False, error=str(exc), errors=exc.errors)

        data = self._trim_mood_history(data)
        result = self._write(data, ChangeKind.IMPORTED)
        if not result.saved:
            return ImportResult(success=False, error=result.error)
        _logger.info("Imported user data into %s", self._key)
        return ImportResult(success=True, data=data)
