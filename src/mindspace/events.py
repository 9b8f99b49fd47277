"""Storage change notifications.

Stores that share a backend also share a :class:`StorageEvents` hub.
Every successful write, import or clear is published there, so another
session holding a stale snapshot can reload instead of silently
overwriting newer data on its next write.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

_logger = logging.getLogger(__name__)


class ChangeKind(StrEnum):
    SAVED = "saved"
    IMPORTED = "imported"
    CLEARED = "cleared"


class StorageChangeEvent(BaseModel):
    """A committed change to one storage key."""

    model_config = ConfigDict(frozen=True)

    key: str
    kind: ChangeKind
    origin: str = Field(..., description="Instance id of the store that wrote the change")
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


ChangeListener = Callable[[StorageChangeEvent], None]


class StorageEvents:
    """Synchronous publish/subscribe hub for :class:`StorageChangeEvent`."""

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, event: StorageChangeEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                _logger.warning("Storage change listener failed for %s", event.key, exc_info=True)

    def __len__(self) -> int:
        return len(self._listeners)
