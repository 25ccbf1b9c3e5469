"""Tests for the JSON-backed analysis history."""

import json

import pytest

from errors import StorageError
from services.history_store import HistoryStore


def test_empty_when_file_missing(tmp_path):
    store = HistoryStore(tmp_path / "history.json")
    assert store.load() == []
    assert len(store) == 0


def test_appends_persist_in_insertion_order(tmp_path, make_entry):
    path = tmp_path / "data" / "history.json"
    store = HistoryStore(path, key="resumeAnalysisHistory")
    store.load()
    names = ["Ann", "Bob", "Cid", "Dee"]
    for i, name in enumerate(names, start=1):
        store.append(make_entry(1000 + i, name=name))

    reloaded = HistoryStore(path, key="resumeAnalysisHistory").load()
    assert [e.personal_details["name"] for e in reloaded] == names
    assert [e.id for e in reloaded] == [1001, 1002, 1003, 1004]

    doc = json.loads(path.read_text(encoding="utf-8"))
    assert list(doc) == ["resumeAnalysisHistory"]
    assert doc["resumeAnalysisHistory"][0]["fileName"] == "ann.pdf"
    assert "personalDetails" in doc["resumeAnalysisHistory"][0]


def test_append_without_explicit_load_keeps_existing_entries(tmp_path, make_entry):
    path = tmp_path / "history.json"
    HistoryStore(path).append(make_entry(1, name="Ann"))
    HistoryStore(path).append(make_entry(2, name="Bob"))
    assert [e.id for e in HistoryStore(path).load()] == [1, 2]


def test_clear_removes_everything(tmp_path, make_entry):
    path = tmp_path / "history.json"
    store = HistoryStore(path)
    store.append(make_entry(1))
    store.append(make_entry(2))
    store.clear()
    assert store.entries == []
    assert not path.exists()
    assert HistoryStore(path).load() == []


def test_clear_leaves_other_keys_untouched(tmp_path, make_entry):
    path = tmp_path / "history.json"
    path.write_text(json.dumps({"otherKey": [1, 2]}), encoding="utf-8")
    store = HistoryStore(path, key="resumeAnalysisHistory")
    store.append(make_entry(1))
    store.clear()
    assert json.loads(path.read_text(encoding="utf-8")) == {"otherKey": [1, 2]}


def test_corrupt_file_loads_as_empty(tmp_path, make_entry):
    path = tmp_path / "history.json"
    path.write_text("{not json", encoding="utf-8")
    store = HistoryStore(path)
    assert store.load() == []
    store.append(make_entry(5))
    assert [e.id for e in HistoryStore(path).load()] == [5]


def test_invalid_entries_are_skipped(tmp_path, make_entry):
    path = tmp_path / "history.json"
    valid = make_entry(9).to_record()
    path.write_text(json.dumps({"resumeAnalysisHistory": [{"rating": 3}, valid]}), encoding="utf-8")
    assert [e.id for e in HistoryStore(path).load()] == [9]


def test_entries_is_a_copy(tmp_path, make_entry):
    store = HistoryStore(tmp_path / "history.json")
    store.append(make_entry(1))
    store.entries.clear()
    assert len(store) == 1


def test_next_id_is_monotonic(tmp_path, make_entry):
    store = HistoryStore(tmp_path / "history.json")
    far_future = 10 ** 15
    store.append(make_entry(far_future))
    assert store.next_id() == far_future + 1


def test_failed_write_leaves_history_unchanged(tmp_path, make_entry):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    store = HistoryStore(blocker / "history.json")
    with pytest.raises(StorageError, match="Could not save history"):
        store.append(make_entry(1))
    assert store.entries == []
    assert len(store) == 0


def test_failed_second_append_keeps_first_entry(tmp_path, make_entry, monkeypatch):
    path = tmp_path / "history.json"
    store = HistoryStore(path, key="resumeAnalysisHistory")
    store.append(make_entry(1, name="Ann"))

    def fail_replace(src, dst):
        raise PermissionError("read-only")

    monkeypatch.setattr("services.history_store.os.replace", fail_replace)
    with pytest.raises(StorageError):
        store.append(make_entry(2, name="Bob"))
    assert [e.id for e in store.entries] == [1]
    assert [e["id"] for e in json.loads(path.read_text())["resumeAnalysisHistory"]] == [1]
    assert list(tmp_path.iterdir()) == [path]
