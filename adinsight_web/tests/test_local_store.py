from __future__ import annotations

import json
from pathlib import Path

import pytest

from adinsight_web.repositories.local_store import LocalKeyValueStore, LocalStoreError


def test_get_on_missing_file_is_none(tmp_path: Path):
    store = LocalKeyValueStore(tmp_path / "store.json")
    assert store.get("anything") is None


def test_set_get_remove(tmp_path: Path):
    path = tmp_path / "nested" / "store.json"
    store = LocalKeyValueStore(path)

    store.set("a", [{"title": "광고 성과 분석"}])
    store.set("b", {"url": "u", "key": "k"})

    assert store.get("a") == [{"title": "광고 성과 분석"}]
    assert json.loads(path.read_text(encoding="utf-8"))["b"] == {"url": "u", "key": "k"}

    store.remove("a")
    assert store.get("a") is None
    assert store.get("b") == {"url": "u", "key": "k"}


def test_remove_missing_key_is_noop(tmp_path: Path):
    store = LocalKeyValueStore(tmp_path / "store.json")
    store.remove("nope")
    assert not (tmp_path / "store.json").exists()


def test_buckets_survive_a_new_instance(tmp_path: Path):
    path = tmp_path / "store.json"
    LocalKeyValueStore(path).set("k", [1, 2, 3])
    assert LocalKeyValueStore(path).get("k") == [1, 2, 3]


def test_corrupt_file_raises_on_read(tmp_path: Path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(LocalStoreError):
        LocalKeyValueStore(path).get("k")


def test_unwritable_location_raises(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    # parent "directory" is a regular file
    store = LocalKeyValueStore(blocker / "store.json")
    with pytest.raises(LocalStoreError):
        store.set("k", 1)


def test_unserialisable_value_leaves_previous_contents(tmp_path: Path):
    path = tmp_path / "store.json"
    store = LocalKeyValueStore(path)
    store.set("k", "before")

    with pytest.raises(LocalStoreError):
        store.set("k", object())

    assert store.get("k") == "before"
    assert [p.name for p in tmp_path.iterdir()] == ["store.json"]


def test_set_on_corrupt_file_raises_and_keeps_bytes(tmp_path: Path):
    path = tmp_path / "store.json"
    original = '{"adinsight_reports": [{"id": "old-1", "title": "keep me"}], "adinsight_supabase_config": {"url": "u", "key": "k"},'
    path.write_text(original, encoding="utf-8")
    store = LocalKeyValueStore(path)

    with pytest.raises(LocalStoreError):
        store.set("adinsight_reports", [])
    with pytest.raises(LocalStoreError):
        store.remove("adinsight_supabase_config")

    assert path.read_text(encoding="utf-8") == original
