"""Tests for cache module."""

import shutil
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from dustpan import cache
from dustpan.cache import (
    CACHE_VALIDITY_SECONDS,
    clear_cache,
    get_cache_info,
    load_cache,
    save_cache,
)
from dustpan.models import Category


def make_existing(tmp_path, make_item, *names):
    items = []
    for idx, name in enumerate(names):
        path = tmp_path / name / "node_modules"
        path.mkdir(parents=True)
        items.append(make_item(path, size=(idx + 1) * 100))
    return items


def later(seconds: float) -> datetime:
    return datetime.now(timezone.utc) + timedelta(seconds=seconds)


class TestSaveAndLoad:
    def test_round_trip(self, tmp_path, make_item):
        items = make_existing(tmp_path, make_item, "a", "b")
        assert save_cache(tmp_path, 10, items)

        loaded = load_cache(tmp_path, 10)
        assert loaded == items
        assert [i.size for i in loaded] == [100, 200]
        assert all(i.category == Category.NODE_MODULES for i in loaded)

    def test_missing_file(self, tmp_path):
        assert load_cache(tmp_path, 10) is None

    def test_path_mismatch(self, tmp_path, make_item):
        save_cache(tmp_path / "a", 10, [])
        assert load_cache(tmp_path / "b", 10) is None

    def test_depth_mismatch(self, tmp_path, make_item):
        save_cache(tmp_path, 10, [])
        assert load_cache(tmp_path, 5) is None

    def test_relative_path_matches_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        save_cache(".", 3, [])
        assert load_cache(tmp_path, 3) == []

    def test_fresh_within_window(self, tmp_path, make_item):
        items = make_existing(tmp_path, make_item, "a")
        save_cache(tmp_path, 10, items)
        assert load_cache(tmp_path, 10, now=later(CACHE_VALIDITY_SECONDS - 1)) == items

    def test_stale_after_window(self, tmp_path, make_item):
        items = make_existing(tmp_path, make_item, "a")
        save_cache(tmp_path, 10, items)
        assert load_cache(tmp_path, 10, now=later(CACHE_VALIDITY_SECONDS + 1)) is None

    def test_deleted_paths_are_dropped(self, tmp_path, make_item):
        items = make_existing(tmp_path, make_item, "a", "b", "c")
        save_cache(tmp_path, 10, items)
        shutil.rmtree(items[1].path)

        loaded = load_cache(tmp_path, 10)
        assert [i.path for i in loaded] == [items[0].path, items[2].path]

    def test_corrupt_json(self, tmp_path, isolate_storage):
        isolate_storage.write_text("{not json")
        assert load_cache(tmp_path, 10) is None

    def test_wrong_schema(self, tmp_path, isolate_storage):
        isolate_storage.write_text('{"items": 3}')
        assert load_cache(tmp_path, 10) is None

    def test_save_overwrites_previous(self, tmp_path, make_item):
        save_cache(tmp_path / "a", 10, [])
        save_cache(tmp_path / "b", 10, [])
        assert load_cache(tmp_path / "a", 10) is None
        assert load_cache(tmp_path / "b", 10) == []

    def test_save_failure_returns_false(self, tmp_path):
        unwritable = tmp_path / "missing-dir" / "cache.json"
        with patch.object(cache, "get_cache_path", return_value=unwritable):
            assert save_cache(tmp_path, 10, []) is False

    def test_invalid_depth_is_not_saved(self, tmp_path, isolate_storage):
        assert save_cache(tmp_path, -1, []) is False
        assert not isolate_storage.exists()


class TestClearCache:
    def test_clear_removes_file(self, tmp_path, isolate_storage):
        save_cache(tmp_path, 10, [])
        assert isolate_storage.exists()
        clear_cache()
        assert not isolate_storage.exists()

    def test_clear_is_idempotent(self):
        clear_cache()
        clear_cache()


class TestCacheInfo:
    def test_no_cache(self, isolate_storage):
        info = get_cache_info()
        assert info.location == isolate_storage
        assert not info.exists
        assert not info.is_fresh

    def test_fresh_cache(self, tmp_path, make_item):
        items = make_existing(tmp_path, make_item, "a", "b")
        save_cache(tmp_path, 7, items)

        info = get_cache_info()
        assert info.exists
        assert info.readable
        assert info.item_count == 2
        assert info.max_depth == 7
        assert info.is_fresh
        assert info.size_bytes > 0

    def test_stale_cache(self, tmp_path):
        save_cache(tmp_path, 7, [])
        info = get_cache_info(now=later(CACHE_VALIDITY_SECONDS + 60))
        assert info.exists
        assert not info.is_fresh
        assert info.age_seconds > CACHE_VALIDITY_SECONDS

    def test_unreadable_cache(self, isolate_storage):
        isolate_storage.write_text("garbage")
        info = get_cache_info()
        assert info.exists
        assert not info.readable
