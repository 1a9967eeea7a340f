"""Tests for the local key-value store."""

import json

import pytest

from journal_sync.exceptions import StorageFailure
from journal_sync.storage.local_store import POSTS_KEY, LocalStore


class TestKeyValue:
    def test_missing_key_reads_none(self, local_store):
        assert local_store.get_item("nothing") is None

    def test_set_and_get(self, local_store):
        local_store.set_item("prefs", {"theme": "dark"})
        assert local_store.get_item("prefs") == {"theme": "dark"}
        assert (local_store.root / "prefs.json").exists()

    def test_remove_is_idempotent(self, local_store):
        local_store.set_item("prefs", 1)
        local_store.remove_item("prefs")
        local_store.remove_item("prefs")
        assert local_store.get_item("prefs") is None

    def test_invalid_key(self, local_store):
        with pytest.raises(StorageFailure):
            local_store.set_item("../escape", 1)

    def test_unserializable_value(self, local_store):
        with pytest.raises(StorageFailure, match="serialize"):
            local_store.set_item("bad", {"when": object()})

    def test_quota_exceeded(self, tmp_path):
        store = LocalStore(tmp_path, quota_bytes=32)
        with pytest.raises(StorageFailure, match="Quota"):
            store.set_item("big", "x" * 100)
        assert store.get_item("big") is None

    def test_no_temp_files_left_behind(self, local_store):
        local_store.set_item("a", [1, 2, 3])
        assert [p.name for p in local_store.root.iterdir()] == ["a.json"]


class TestCollection:
    def test_read_empty(self, local_store):
        assert local_store.read() is None
        assert local_store.read_raw() == []

    def test_write_then_read(self, local_store, sample_posts):
        local_store.write(sample_posts)
        assert local_store.read() == sample_posts

    def test_stored_as_json_array_under_blog_posts(self, local_store, sample_posts):
        local_store.write(sample_posts)
        raw = json.loads((local_store.root / f"{POSTS_KEY}.json").read_text(encoding="utf-8"))
        assert [p["slug"] for p in raw] == ["first-post", "second-post", "third-post"]

    def test_clear(self, local_store, sample_posts):
        local_store.write(sample_posts)
        local_store.clear()
        assert local_store.read() is None

    def test_corrupt_data_raises_storage_failure(self, local_store):
        local_store.root.mkdir(parents=True, exist_ok=True)
        (local_store.root / f"{POSTS_KEY}.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageFailure, match="Corrupt"):
            local_store.read()

    def test_wrong_shape_raises_storage_failure(self, local_store):
        local_store.set_item(POSTS_KEY, {"posts": []})
        with pytest.raises(StorageFailure):
            local_store.read()
