"""Tests for the keyed storage backends."""

from pathlib import Path

import pytest

from herd_health.adapters.storage import InMemoryKeyValueStore, JsonFileKeyValueStore


@pytest.fixture(params=["memory", "file"])
def storage(request: pytest.FixtureRequest, tmp_path: Path):
    if request.param == "memory":
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(tmp_path / "kv")


def test_missing_key_returns_none(storage) -> None:
    assert storage.get("absent") is None


def test_set_get_delete(storage) -> None:
    storage.set("notification-storage", '{"notifications": []}')
    assert storage.get("notification-storage") == '{"notifications": []}'

    storage.set("notification-storage", "{}")
    assert storage.get("notification-storage") == "{}"

    storage.delete("notification-storage")
    assert storage.get("notification-storage") is None


def test_delete_missing_key_is_noop(storage) -> None:
    storage.delete("never-written")


def test_file_store_survives_new_instance(tmp_path: Path) -> None:
    JsonFileKeyValueStore(tmp_path).set("farm", '{"a": 1}')

    assert JsonFileKeyValueStore(tmp_path).get("farm") == '{"a": 1}'
    assert (tmp_path / "farm.json").exists()
    assert not list(tmp_path.glob("*.tmp"))


@pytest.mark.parametrize("key", ["../escape", "a/b", "", "spaces here"])
def test_file_store_rejects_unsafe_keys(tmp_path: Path, key: str) -> None:
    with pytest.raises(ValueError, match="Invalid storage key"):
        JsonFileKeyValueStore(tmp_path).set(key, "{}")
