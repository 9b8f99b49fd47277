"""Store configuration for mindspace."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from mindspace._constants import EXPORT_INDENT, MOOD_HISTORY_LIMIT, STORAGE_KEY
from mindspace.backends import FileBackend, MemoryBackend, StorageBackend
from mindspace.exceptions import MindspaceConfigError
from mindspace.store import UserDataStore


def _env_int(env_key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise MindspaceConfigError(f"{env_key} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class MindspaceConfig:
    """Store configuration.

    Parameters
    ----------
    storage_key : str
        Key the user data document is stored under.
    storage_dir : str or None
        Directory for the file backend. ``None`` keeps the document in
        memory only, which is what tests and previews want.
    mood_history_limit : int
        Maximum number of mood entries kept; older entries are dropped.
    export_indent : int
        Indentation of exported JSON.
    """

    storage_key: str = STORAGE_KEY
    storage_dir: str | None = None
    mood_history_limit: int = MOOD_HISTORY_LIMIT
    export_indent: int = EXPORT_INDENT

    def __post_init__(self) -> None:
        if not self.storage_key.strip():
            raise MindspaceConfigError("storage_key must be non-empty")
        if self.mood_history_limit < 1:
            raise MindspaceConfigError(f"mood_history_limit must be positive, got {self.mood_history_limit}")
        if self.export_indent < 0:
            raise MindspaceConfigError(f"export_indent must not be negative, got {self.export_indent}")

    @classmethod
    def from_env(cls, **overrides: Any) -> MindspaceConfig:
        """Create configuration from ``MINDSPACE_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        key_env = env.get("MINDSPACE_STORAGE_KEY")
        if key_env is not None:
            config_kwargs["storage_key"] = key_env

        dir_env = env.get("MINDSPACE_STORAGE_DIR")
        if dir_env:
            config_kwargs["storage_dir"] = dir_env

        limit_env = env.get("MINDSPACE_MOOD_HISTORY_LIMIT")
        if limit_env is not None and "mood_history_limit" not in overrides:
            config_kwargs["mood_history_limit"] = _env_int("MINDSPACE_MOOD_HISTORY_LIMIT", limit_env)

        indent_env = env.get("MINDSPACE_EXPORT_INDENT")
        if indent_env is not None and "export_indent" not in overrides:
            config_kwargs["export_indent"] = _env_int("MINDSPACE_EXPORT_INDENT", indent_env)

        config_kwargs.update(overrides)
        return cls(**config_kwargs)

    def build_backend(self) -> StorageBackend:
        if self.storage_dir is None:
            return MemoryBackend()
        return FileBackend(self.storage_dir)

    def build_store(self, backend: StorageBackend | None = None) -> UserDataStore:
        """Create a :class:`UserDataStore` wired to this configuration."""
        return UserDataStore(
            backend if backend is not None else self.build_backend(),
            key=self.storage_key,
            mood_history_limit=self.mood_history_limit,
            export_indent=self.export_indent,
        )
