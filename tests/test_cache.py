"""Tests for the two-level cache."""

import pytest

from docstore.cache import Cache


@pytest.fixture
def cache() -> Cache:
    return Cache()


class TestCache:
    def test_get_missing(self, cache: Cache):
        assert cache.get("file", "a.json") is None
        assert cache.get("nope", "a.json") is None

    def test_set_and_get(self, cache: Cache):
        cache.set("file", "a.json", {"x": 1})
        assert cache.get("file", "a.json") == {"x": 1}

    def test_namespaces_are_separate(self, cache: Cache):
        cache.set("file", "k", 1)
        cache.set("query", "k", 2)
        assert cache.get("file", "k") == 1
        assert cache.get("query", "k") == 2

    def test_remove(self, cache: Cache):
        cache.set("file", "a", 1)
        cache.remove("file", "a")
        assert cache.get("file", "a") is None
        # Removing twice, or from an unknown namespace, is fine
        cache.remove("file", "a")
        cache.remove("unknown", "a")

    def test_count_items(self, cache: Cache):
        assert cache.count_items("file") == 0
        cache.set("file", "a", 1)
        cache.set("file", "b", 2)
        assert cache.count_items("file") == 2

    def test_reset(self, cache: Cache):
        cache.set("file", "a", 1)
        cache.set("query", "a", 1)
        cache.reset("file")
        assert cache.count_items("file") == 0
        assert cache.count_items("query") == 1
