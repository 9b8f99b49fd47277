"""Custom exception hierarchy for mindspace."""

from __future__ import annotations


class MindspaceError(Exception):
    """Base exception for all mindspace errors."""


class MindspaceConfigError(MindspaceError):
    """Invalid or missing configuration."""


class StorageError(MindspaceError):
    """Key/value storage failure (read, write or remove)."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class StorageUnavailableError(StorageError):
    """Storage is disabled or cannot be reached at all.

    The browser equivalent is local storage in private mode; for the
    file backend it is a missing or unreadable storage directory.
    """


class StorageWriteError(StorageError):
    """A write or remove was attempted and failed."""


class StorageQuotaError(StorageWriteError):
    """The serialized document does not fit in the backend's quota."""


class DocumentValidationError(MindspaceError):
    """A document payload does not match the user data schema.

    Raised while importing or loading. ``errors`` carries the flattened
    pydantic error list so callers can render a descriptive message.
    """

    def __init__(self, message: str, *, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)
