from __future__ import annotations

from pathlib import Path

import pytest

from mindspace.backends import FileBackend, MemoryBackend
from mindspace.config import MindspaceConfig
from mindspace.exceptions import MindspaceConfigError


def test_defaults() -> None:
    config = MindspaceConfig()
    assert config.storage_key == "mindspace_user_data"
    assert config.storage_dir is None
    assert config.mood_history_limit == 100
    assert config.export_indent == 2
    assert isinstance(config.build_backend(), MemoryBackend)


def test_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MINDSPACE_STORAGE_KEY", "journal")
    monkeypatch.setenv("MINDSPACE_STORAGE_DIR", str(tmp_path))
    monkeypatch.setenv("MINDSPACE_MOOD_HISTORY_LIMIT", "20")
    monkeypatch.setenv("MINDSPACE_EXPORT_INDENT", "4")

    config = MindspaceConfig.from_env()

    assert config.storage_key == "journal"
    assert config.storage_dir == str(tmp_path)
    assert config.mood_history_limit == 20
    assert config.export_indent == 4
    assert isinstance(config.build_backend(), FileBackend)


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MINDSPACE_MOOD_HISTORY_LIMIT", "20")
    config = MindspaceConfig.from_env(mood_history_limit=5)
    assert config.mood_history_limit == 5


def test_invalid_env_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MINDSPACE_MOOD_HISTORY_LIMIT", "lots")
    with pytest.raises(MindspaceConfigError):
        MindspaceConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [{"storage_key": " "}, {"mood_history_limit": 0}, {"export_indent": -1}],
)
def test_invalid_values(kwargs: dict) -> None:
    with pytest.raises(MindspaceConfigError):
        MindspaceConfig(**kwargs)


def test_build_store_uses_config(tmp_path: Path) -> None:
    config = MindspaceConfig(storage_key="journal", storage_dir=str(tmp_path), mood_history_limit=2, export_indent=4)
    store = config.build_store()
    for score in (3, 5, 7):
        store.add_mood_entry({"date": "2024-01-01", "mood": "good", "score": score})

    assert store.key == "journal"
    assert (tmp_path / "journal.json").exists()
    assert [entry.score for entry in store.load_user_data().mood_history] == [7, 5]
    assert store.export_data().startswith("{\n    ")
