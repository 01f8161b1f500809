"""Tests for the storage backends"""

import json

import pytest

from cogsage.storage import JsonFileStorage, MemoryStorage, StorageError


def test_memory_storage_copies_data():
    storage = MemoryStorage()
    records = [{"key": "a", "value": {"n": 1}}]
    storage.save("fact", records)
    records[0]["value"]["n"] = 2

    loaded = storage.load("fact")
    assert loaded == [{"key": "a", "value": {"n": 1}}]
    loaded.append({"key": "b"})
    assert len(storage.load("fact")) == 1
    assert storage.load("missing") == []


def test_json_storage_round_trip(tmp_path):
    storage = JsonFileStorage(tmp_path / "knowledge")
    storage.save("vocabulary", [{"key": "café", "value": {"definition": "a small restaurant"}}])

    assert (tmp_path / "knowledge" / "vocabulary.json").exists()
    assert JsonFileStorage(tmp_path / "knowledge").load("vocabulary")[0]["key"] == "café"


def test_json_storage_missing_namespace(tmp_path):
    assert JsonFileStorage(tmp_path).load("fact") == []


def test_json_storage_corrupt_file(tmp_path):
    (tmp_path / "fact.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileStorage(tmp_path).load("fact")


def test_json_storage_rejects_non_list(tmp_path):
    (tmp_path / "fact.json").write_text(json.dumps({"key": "pi"}), encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileStorage(tmp_path).load("fact")


def test_json_storage_unserializable(tmp_path):
    with pytest.raises(StorageError):
        JsonFileStorage(tmp_path).save("fact", [{"key": object()}])
