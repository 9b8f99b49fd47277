"""Key/value storage backends.

The store only needs the three browser ``localStorage`` primitives, so
each backend implements :class:`StorageBackend`: ``get_item``,
``set_item`` and ``remove_item`` over string keys and string values.
Failures surface as :class:`~mindspace.exceptions.StorageError`
subclasses; the store decides how to report them.
"""

from __future__ import annotations

import contextlib
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from mindspace.exceptions import StorageError, StorageQuotaError, StorageUnavailableError, StorageWriteError

_logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


@runtime_checkable
class StorageBackend(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryBackend:
    """Dict-backed storage for tests and throwaway sessions.

    Parameters
    ----------
    quota : int or None
        Maximum total characters across all stored values. Writes that
        would exceed it raise :class:`StorageQuotaError` and leave the
        previous value in place.
    available : bool
        When ``False`` every operation raises
        :class:`StorageUnavailableError`, like local storage that the
        host has disabled.
    """

    def __init__(self, *, quota: int | None = None, available: bool = True) -> None:
        self._items: dict[str, str] = {}
        self.quota = quota
        self.available = available

    def _require_available(self, key: str) -> None:
        if not self.available:
            raise StorageUnavailableError("Storage is disabled", key=key)

    def get_item(self, key: str) -> str | None:
        self._require_available(key)
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._require_available(key)
        if self.quota is not None:
            used = sum(len(v) for k, v in self._items.items() if k != key)
            if used + len(value) > self.quota:
                raise StorageQuotaError(
                    f"Storage quota of {self.quota} characters exceeded",
                    key=key,
                )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._require_available(key)
        self._items.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._items


class FileBackend:
    """One UTF-8 file per key inside *directory*.

    Writes go to a temporary file in the same directory which then
    replaces the target, so a crash mid-write never leaves a truncated
    document behind.
    """

    def __init__(self, directory: str | os.PathLike[str], *, create: bool = True) -> None:
        self._directory = Path(directory)
        self._create = create

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        if not key:
            raise ValueError("storage key must be non-empty")
        return self._directory / f"{_SAFE_KEY.sub('_', key)}.json"

    def _ensure_directory(self, key: str) -> None:
        if self._directory.is_dir():
            return
        if not self._create:
            raise StorageUnavailableError(f"Storage directory {self._directory} does not exist", key=key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot create storage directory {self._directory}: {exc}", key=key) from exc

    def get_item(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Cannot read {path}: {exc}", key=key) from exc

    def set_item(self, key: str, value: str) -> None:
        self._ensure_directory(key)
        path = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}-", suffix=".tmp", dir=self._directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise StorageWriteError(f"Cannot write {path}: {exc}", key=key) from exc
        _logger.debug("Wrote %d characters to %s", len(value), path)

    def remove_item(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageWriteError(f"Cannot remove {path}: {exc}", key=key) from exc
