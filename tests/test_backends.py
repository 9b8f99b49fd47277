from __future__ import annotations

from pathlib import Path

import pytest

from mindspace.backends import FileBackend, MemoryBackend, StorageBackend
from mindspace.exceptions import StorageError, StorageQuotaError, StorageUnavailableError, StorageWriteError
from mindspace.store import UserDataStore


class TestMemoryBackend:
    def test_get_set_remove(self) -> None:
        backend = MemoryBackend()
        assert backend.get_item("k") is None
        backend.set_item("k", "v")
        assert backend.get_item("k") == "v"
        backend.remove_item("k")
        assert backend.get_item("k") is None
        # Removing an absent key is fine.
        backend.remove_item("k")

    def test_quota_keeps_previous_value(self) -> None:
        backend = MemoryBackend(quota=5)
        backend.set_item("k", "abc")
        with pytest.raises(StorageQuotaError) as excinfo:
            backend.set_item("k", "abcdef")
        assert excinfo.value.key == "k"
        assert backend.get_item("k") == "abc"

    def test_quota_counts_other_keys(self) -> None:
        backend = MemoryBackend(quota=5)
        backend.set_item("a", "abc")
        with pytest.raises(StorageQuotaError):
            backend.set_item("b", "abc")

    def test_unavailable(self) -> None:
        backend = MemoryBackend(available=False)
        with pytest.raises(StorageUnavailableError):
            backend.get_item("k")
        with pytest.raises(StorageUnavailableError):
            backend.set_item("k", "v")

    def test_is_storage_backend(self) -> None:
        assert isinstance(MemoryBackend(), StorageBackend)


class TestFileBackend:
    def test_round_trip(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path / "data")
        assert backend.get_item("mindspace_user_data") is None

        backend.set_item("mindspace_user_data", '{"ok": true}')

        path = backend.path_for("mindspace_user_data")
        assert path == tmp_path / "data" / "mindspace_user_data.json"
        assert path.read_text(encoding="utf-8") == '{"ok": true}'
        assert backend.get_item("mindspace_user_data") == '{"ok": true}'
        assert list(path.parent.glob("*.tmp")) == []

    def test_remove(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path)
        backend.set_item("k", "v")
        backend.remove_item("k")
        backend.remove_item("k")
        assert backend.get_item("k") is None

    def test_unsafe_key_characters_are_replaced(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path)
        assert backend.path_for("../escape/key").parent == tmp_path

    def test_missing_directory_without_create(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path / "missing", create=False)
        with pytest.raises(StorageUnavailableError):
            backend.set_item("k", "v")

    def test_write_into_file_path_fails(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        backend = FileBackend(blocker)
        with pytest.raises(StorageError):
            backend.set_item("k", "v")

    def test_unreadable_entry_raises_storage_error(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path)
        backend.path_for("k").mkdir()
        with pytest.raises(StorageError):
            backend.get_item("k")
        with pytest.raises(StorageWriteError):
            backend.remove_item("k")

    def test_store_persists_across_instances(self, tmp_path: Path) -> None:
        UserDataStore(FileBackend(tmp_path)).add_mood_entry({"date": "2024-01-01", "mood": "good", "score": 7})
        data = UserDataStore(FileBackend(tmp_path)).load_user_data()
        assert data.mood_history[0].score == 7
