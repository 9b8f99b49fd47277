"""Application state controller.

Holds the in-memory snapshot of the user data document for the UI and
serializes every mutation through :meth:`AppController.dispatch`: the
reducer calls the matching store operation and replaces the snapshot
with the document the store returns.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mindspace._constants import LOAD_ERROR_MESSAGE
from mindspace.events import StorageChangeEvent
from mindspace.models import UserData
from mindspace.store import EntityPayload, ImportResult, MutationResult, UserDataStore

_logger = logging.getLogger(__name__)


class ActionType(StrEnum):
    SET_LOADING = "SET_LOADING"
    SET_ERROR = "SET_ERROR"
    LOAD_USER_DATA = "LOAD_USER_DATA"
    UPDATE_PROFILE = "UPDATE_PROFILE"
    ADD_MOOD_ENTRY = "ADD_MOOD_ENTRY"
    ADD_JOURNAL_ENTRY = "ADD_JOURNAL_ENTRY"
    ADD_THOUGHT_RECORD = "ADD_THOUGHT_RECORD"
    ADD_ACTIVITY_PLAN = "ADD_ACTIVITY_PLAN"
    COMPLETE_EXERCISE = "COMPLETE_EXERCISE"
    ADD_GOAL = "ADD_GOAL"
    UPDATE_GOAL = "UPDATE_GOAL"
    ADD_HABIT = "ADD_HABIT"
    UPDATE_HABIT = "UPDATE_HABIT"
    ADD_CRISIS_CONTACT = "ADD_CRISIS_CONTACT"
    UPDATE_SAFETY_PLAN = "UPDATE_SAFETY_PLAN"
    CLEAR_ALL_DATA = "CLEAR_ALL_DATA"


@dataclass(frozen=True)
class EntityUpdate:
    """Payload of the ``UPDATE_GOAL`` / ``UPDATE_HABIT`` actions."""

    id: str
    updates: Mapping[str, Any]


@dataclass(frozen=True)
class Action:
    type: ActionType
    payload: Any = None


class AppState(BaseModel):
    """Snapshot observed by the UI.

    ``error`` is only set when the initial load fails. ``save_error``
    carries the reason the latest mutation could not be persisted and is
    cleared by the next successful one.
    """

    model_config = ConfigDict(frozen=True)

    user_data: UserData = Field(default_factory=UserData)
    is_loading: bool = True
    error: str | None = None
    save_error: str | None = None


StateListener = Callable[[AppState], None]

_MUTATIONS: dict[ActionType, Callable[[UserDataStore, Any], MutationResult]] = {
    ActionType.UPDATE_PROFILE: lambda store, payload: store.update_profile(payload),
    ActionType.ADD_MOOD_ENTRY: lambda store, payload: store.add_mood_entry(payload),
    ActionType.ADD_JOURNAL_ENTRY: lambda store, payload: store.add_journal_entry(payload),
    ActionType.ADD_THOUGHT_RECORD: lambda store, payload: store.add_thought_record(payload),
    ActionType.ADD_ACTIVITY_PLAN: lambda store, payload: store.add_activity_plan(payload),
    ActionType.COMPLETE_EXERCISE: lambda store, payload: store.complete_exercise(payload),
    ActionType.ADD_GOAL: lambda store, payload: store.add_goal(payload),
    ActionType.UPDATE_GOAL: lambda store, payload: store.update_goal(payload.id, payload.updates),
    ActionType.ADD_HABIT: lambda store, payload: store.add_habit(payload),
    ActionType.UPDATE_HABIT: lambda store, payload: store.update_habit(payload.id, payload.updates),
    ActionType.ADD_CRISIS_CONTACT: lambda store, payload: store.add_crisis_contact(payload),
    ActionType.UPDATE_SAFETY_PLAN: lambda store, payload: store.update_safety_plan(payload),
}


def reduce(store: UserDataStore, state: AppState, action: Action) -> AppState:
    """Return the state after *action*.

    Mutating actions run the store operation synchronously and take the
    store's post-mutation document as the new snapshot. Unknown action
    types leave *state* unchanged.
    """
    if action.type == ActionType.SET_LOADING:
        return state.model_copy(update={"is_loading": bool(action.payload)})
    if action.type == ActionType.SET_ERROR:
        return state.model_copy(update={"error": action.payload})
    if action.type == ActionType.LOAD_USER_DATA:
        return state.model_copy(update={"user_data": action.payload, "is_loading": False})
    if action.type == ActionType.CLEAR_ALL_DATA:
        cleared = store.clear_all_data()
        return state.model_copy(update={"user_data": store.default_data(), "save_error": cleared.error})

    mutation = _MUTATIONS.get(action.type)
    if mutation is None:
        _logger.warning("Ignoring unknown action type %r", action.type)
        return state
    result = mutation(store, action.payload)
    if not result.changed:
        if result.data == state.user_data:
            return state
        return state.model_copy(update={"user_data": result.data})
    return state.model_copy(update={"user_data": result.data, "save_error": result.error})


class AppController:
    """In-memory cache of the user data document for one session.

    Usage::

        async with AppController(store) as app:
            app.add_mood_entry({"date": "2024-01-01", "mood": "good", "score": 7})
            print(app.state.user_data.mood_history[0].score)

    The state starts as ``{loading, default data}``. :meth:`initialize`
    loads the document once; a failure there sets ``error`` and clears
    ``is_loading`` while keeping the default data. Nothing moves the
    state back to loading afterwards.

    When another store on the same :class:`~mindspace.events.StorageEvents`
    hub writes the key, the controller reloads its snapshot.
    """

    def __init__(self, store: UserDataStore, *, follow_external_changes: bool = True) -> None:
        self._store = store
        self._state = AppState()
        self._listeners: list[StateListener] = []
        self._unsubscribe_store: Callable[[], None] | None = None
        if follow_external_changes:
            self._unsubscribe_store = store.subscribe(self._on_storage_change)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> AppController:
        await self.initialize()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.close()

    async def initialize(self) -> AppState:
        """Load the stored document off the event loop thread."""
        if not self._state.is_loading:
            return self._state
        try:
            user_data = await asyncio.to_thread(self._store.load_user_data)
        except Exception:
            _logger.error("Failed to load user data", exc_info=True)
            self.dispatch(Action(ActionType.SET_ERROR, LOAD_ERROR_MESSAGE))
            return self.dispatch(Action(ActionType.SET_LOADING, False))
        return self.dispatch(Action(ActionType.LOAD_USER_DATA, user_data))

    def close(self) -> None:
        if self._unsubscribe_store is not None:
            self._unsubscribe_store()
            self._unsubscribe_store = None

    # ------------------------------------------------------------------
    # State and dispatch
    # ------------------------------------------------------------------

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def store(self) -> UserDataStore:
        return self._store

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* with the new state after every change."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def dispatch(self, action: Action) -> AppState:
        previous = self._state
        self._state = reduce(self._store, previous, action)
        if self._state is not previous:
            self._notify()
        return self._state

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                _logger.warning("State listener failed", exc_info=True)

    def _on_storage_change(self, event: StorageChangeEvent) -> None:
        if event.origin == self._store.instance_id or self._state.is_loading:
            return
        _logger.debug("Reloading user data after %s by another session", event.kind)
        self.refresh()

    def refresh(self) -> AppState:
        """Replace the snapshot with the currently stored document."""
        return self.dispatch(Action(ActionType.LOAD_USER_DATA, self._store.load_user_data()))

    # ------------------------------------------------------------------
    # Convenience operations
    # ------------------------------------------------------------------

    def update_profile(self, updates: EntityPayload) -> AppState:
        return self.dispatch(Action(ActionType.UPDATE_PROFILE, updates))

    def add_mood_entry(self, entry: EntityPayload) -> AppState:
        return self.dispatch(Action(ActionType.ADD_MOOD_ENTRY, entry))

    def add_journal_entry(self, entry: EntityPayload) -> AppState:
        return self.dispatch(Action(ActionType.ADD_JOURNAL_ENTRY, entry))

    def add_thought_record(self, record: EntityPayload) -> AppState:
        return self.dispatch(Action(ActionType.ADD_THOUGHT_RECORD, record))

    def add_activity_plan(self, plan: EntityPayload) -> AppState:
        return self.dispatch(Action(ActionType.ADD_ACTIVITY_PLAN, plan))

    def complete_exercise(self, exercise_id: str) -> AppState:
        return self.dispatch(Action(ActionType.COMPLETE_EXERCISE, exercise_id))

    def add_goal(self, goal: EntityPayload) -> AppState:
        return self.dispatch(Action(ActionType.ADD_GOAL, goal))

    def update_goal(self, goal_id: str, updates: Mapping[str, Any]) -> AppState:
        return self.dispatch(Action(ActionType.UPDATE_GOAL, EntityUpdate(goal_id, updates)))

    def add_habit(self, habit: EntityPayload) -> AppState:
        return self.dispatch(Action(ActionType.ADD_HABIT, habit))

    def update_habit(self, habit_id: str, updates: Mapping[str, Any]) -> AppState:
        return self.dispatch(Action(ActionType.UPDATE_HABIT, EntityUpdate(habit_id, updates)))

    def add_crisis_contact(self, contact: EntityPayload) -> AppState:
        return self.dispatch(Action(ActionType.ADD_CRISIS_CONTACT, contact))

    def update_safety_plan(self, updates: EntityPayload) -> AppState:
        return self.dispatch(Action(ActionType.UPDATE_SAFETY_PLAN, updates))

    def clear_all_data(self) -> AppState:
        return self.dispatch(Action(ActionType.CLEAR_ALL_DATA))

    def export_data(self) -> str:
        return self._store.export_data()

    def export_filename(self) -> str:
        return self._store.export_filename()

    def import_data(self, text: str | bytes) -> ImportResult:
        """Import *text*; on success the snapshot is reloaded from storage."""
        result = self._store.import_data(text)
        if result:
            self.refresh()
        return result
