"""Tests for the JSON key/value store."""

import pytest

from sparkskool.storage.local_store import LocalStore


class TestLocalStore:
    def test_missing_key_returns_default(self, store):
        assert store.get("nothing") is None
        assert store.get("nothing", {"a": 1}) == {"a": 1}

    def test_set_and_get(self, store):
        store.set("materials:teacher123", [{"id": "m1"}])

        assert store.get("materials:teacher123") == [{"id": "m1"}]
        assert store.keys() == ["materials_teacher123"]

    def test_unreadable_value_reads_as_default(self, store):
        store.set("broken", [])
        (store.root / "broken.json").write_text("{not json", encoding="utf-8")

        assert store.get_list("broken") == []

    def test_non_list_reads_as_empty_list(self, store):
        store.set("key", {"a": 1})
        assert store.get_list("key") == []

    def test_delete(self, store):
        store.set("key", 1)

        assert store.delete("key")
        assert not store.delete("key")
        assert store.get("key") is None

    def test_no_temp_files_left(self, store):
        store.set("key", [1, 2, 3])
        assert [p.name for p in store.root.iterdir()] == ["key.json"]

    def test_default_dir_from_environment(self, tmp_path):
        assert LocalStore().root == tmp_path / "data" / "store"


class TestUpdateList:
    def test_applies_function_and_stores_result(self, store):
        store.set("items", [1, 2])

        result = store.update_list("items", lambda items: items + [3])

        assert result == [1, 2, 3]
        assert store.get("items") == [1, 2, 3]

    def test_missing_key_starts_empty(self, store):
        store.update_list("new", lambda items: items + ["a"])

        assert store.get("new") == ["a"]

    def test_concurrent_updates_are_not_lost(self, store, run_concurrently):
        run_concurrently(lambda n: store.update_list("counter", lambda items: items + [n]))

        assert sorted(store.get("counter")) == list(range(16))

    def test_error_in_function_leaves_value(self, store):
        store.set("items", [1])

        def explode(items):
            raise ValueError("bad")

        with pytest.raises(ValueError):
            store.update_list("items", explode)

        assert store.get("items") == [1]
