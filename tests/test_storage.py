"""Tests for storage.load_json, storage.save_json and the key-value stores."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from moodpad.errors import StorageError
from moodpad.storage import JsonKeyValueStore, MemoryKeyValueStore, load_json, save_json


@pytest.fixture()
def tmp_json(tmp_path: Path) -> Path:
    return tmp_path / "data.json"


# ---- save_json ----


def test_save_writes_valid_json(tmp_json):
    save_json(tmp_json, {"moodpad_theme": "dark", "moodpad_moods": []})
    data = json.loads(tmp_json.read_text(encoding="utf-8"))
    assert data == {"moodpad_theme": "dark", "moodpad_moods": []}


def test_save_keeps_emoji_readable(tmp_json):
    save_json(tmp_json, {"e": "😊"})
    assert "😊" in tmp_json.read_text(encoding="utf-8")


def test_save_creates_parent_dirs(tmp_path):
    deep = tmp_path / "a" / "b" / "data.json"
    save_json(deep, {"x": 1})
    assert deep.exists()


def test_save_is_atomic_no_tmp_left(tmp_json):
    save_json(tmp_json, {"x": 1})
    assert not tmp_json.with_name(tmp_json.name + ".tmp").exists()


def test_save_sets_permissions(tmp_json):
    save_json(tmp_json, {})
    assert oct(os.stat(tmp_json).st_mode & 0o777) == "0o600"


# ---- load_json ----


def test_load_missing_returns_empty_and_creates_file(tmp_json):
    assert load_json(tmp_json) == {}
    assert tmp_json.exists()


def test_load_empty_file_returns_empty_dict(tmp_json):
    tmp_json.write_text("", encoding="utf-8")
    assert load_json(tmp_json) == {}


def test_load_corrupt_returns_empty_and_backs_up(tmp_json):
    tmp_json.write_text("not valid json {{{{", encoding="utf-8")
    assert load_json(tmp_json) == {}
    backups = list(tmp_json.parent.glob("*.corrupt-*.json"))
    assert len(backups) == 1
    assert backups[0].read_text(encoding="utf-8") == "not valid json {{{{"


def test_load_non_dict_json_returns_empty(tmp_json):
    tmp_json.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    assert load_json(tmp_json) == {}


def test_load_corrupt_strict_raises_and_keeps_file(tmp_json):
    tmp_json.write_text("not valid json", encoding="utf-8")
    with pytest.raises(StorageError):
        load_json(tmp_json, strict=True)
    assert tmp_json.read_text(encoding="utf-8") == "not valid json"


def test_load_non_dict_strict_raises(tmp_json):
    tmp_json.write_text("[]", encoding="utf-8")
    with pytest.raises(StorageError):
        load_json(tmp_json, strict=True)


def test_roundtrip(tmp_json):
    original = {"moodpad_moods": [{"date": "2024-12-08", "emoji": "😊", "note": "", "tags": []}]}
    save_json(tmp_json, original)
    assert load_json(tmp_json) == original


# ---- JsonKeyValueStore ----


def test_json_kv_set_get_remove(tmp_json):
    kv = JsonKeyValueStore(tmp_json)
    assert kv.get("moodpad_theme") is None
    assert kv.get("moodpad_theme", "dark") == "dark"
    kv.set("moodpad_theme", "light")
    assert JsonKeyValueStore(tmp_json).get("moodpad_theme") == "light"
    kv.remove("moodpad_theme")
    assert kv.get("moodpad_theme") is None


def test_json_kv_keys_independent(tmp_json):
    kv = JsonKeyValueStore(tmp_json)
    kv.set("a", [1])
    kv.set("b", "x")
    kv.remove("a")
    assert kv.get("b") == "x"


def test_json_kv_strict_corrupt_raises(tmp_json):
    tmp_json.write_text("{{", encoding="utf-8")
    with pytest.raises(StorageError):
        JsonKeyValueStore(tmp_json, strict=True).get("a")


def test_json_kv_unwritable_raises_storage_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    kv = JsonKeyValueStore(blocker / "data.json")
    with pytest.raises(StorageError):
        kv.set("a", 1)


# ---- MemoryKeyValueStore ----


def test_memory_kv_returns_copies():
    kv = MemoryKeyValueStore()
    kv.set("l", [1, 2])
    got = kv.get("l")
    got.append(3)
    assert kv.get("l") == [1, 2]


def test_memory_kv_failure_switches():
    kv = MemoryKeyValueStore()
    kv.fail_writes = True
    with pytest.raises(StorageError):
        kv.set("a", 1)
    kv.fail_writes = False
    kv.fail_reads = True
    with pytest.raises(StorageError):
        kv.get("a")
