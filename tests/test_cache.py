"""Tests for the key/value store and the persisted library cache."""

from __future__ import annotations

import logging

import pytest

from kjvreader.db.store import KeyValueStore
from kjvreader.sources.cache import LibraryCache, cache_key
from kjvreader.sources.models import Book, Library
from kjvreader.sources.repository import ScriptureRepository


def _library() -> Library:
    book = Book(id="ruth", name="Ruth", chapters={1: {1: "And it came to passe"}})
    return Library(books=["Ruth"], book_data={"Ruth": book}, origin="resource")


class TestKeyValueStore:
    def test_set_and_get(self, store):
        store.set("alpha", b"\x00\x01")
        assert store.get("alpha") == b"\x00\x01"

    def test_missing_key(self, store):
        assert store.get("missing") is None
        assert store.get_json("missing", default=[]) == []

    def test_overwrite(self, store):
        store.set_json("flag", True)
        store.set_json("flag", False)
        assert store.get_json("flag") is False

    def test_delete(self, store):
        store.set("alpha", b"1")
        assert store.delete("alpha")
        assert not store.delete("alpha")
        assert store.get("alpha") is None

    def test_keys_by_prefix_is_literal(self, store):
        store.set("cachedBibleData-KJV-1611", b"1")
        store.set("cachedBibleData-RV-1602", b"1")
        store.set("cachedXBibleData", b"1")
        store.set("useModernEnglish", b"1")

        assert store.keys("cachedBibleData-") == [
            "cachedBibleData-KJV-1611",
            "cachedBibleData-RV-1602",
        ]
        assert store.keys("cached_") == []

    def test_unicode_json(self, store):
        store.set_json("text", {"book": "Génesis"})
        assert store.get_json("text") == {"book": "Génesis"}

    def test_undecodable_json_returns_default(self, store, caplog):
        store.set("bad", b"{not json")
        with caplog.at_level(logging.WARNING, logger="kjvreader.db.store"):
            assert store.get_json("bad", default="fallback") == "fallback"
        assert "bad" in caplog.text

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "kv.db"
        KeyValueStore(path).set_json("selectedBibleVersion", "RV-1602")
        assert KeyValueStore(path).get_json("selectedBibleVersion") == "RV-1602"


class TestLibraryCache:
    def test_round_trip(self, store):
        cache = LibraryCache(store)
        cache.save("KJV-1611", _library())

        loaded = cache.load("KJV-1611")

        assert loaded is not None
        assert loaded.origin == "cache"
        assert loaded.same_content(_library())

    def test_key_format(self, store):
        LibraryCache(store).save("KJV-1611", _library())
        assert store.get(cache_key("KJV-1611")) is not None
        assert cache_key("KJV-1611") == "cachedBibleData-KJV-1611"

    def test_absent_entry(self, store):
        assert LibraryCache(store).load("KJV-1611") is None

    @pytest.mark.parametrize(
        "raw",
        [
            b"{not json",
            b"[1, 2, 3]",
            b'{"books": ["Ruth"], "bookData": {"Ruth": {"chapters": {}}}}',
            b'{"books": ["Ruth"], "bookData": {"Ruth": {"name": "Ruth", "chapters": {"one": {}}}}}',
            b'{"books": [], "bookData": {}}',
        ],
    )
    def test_unusable_entries_ignored(self, store, raw):
        store.set(cache_key("KJV-1611"), raw)
        assert LibraryCache(store).load("KJV-1611") is None

    def test_invalidate(self, store):
        cache = LibraryCache(store)
        cache.save("KJV-1611", _library())

        assert cache.invalidate("KJV-1611")
        assert cache.load("KJV-1611") is None
        assert not cache.invalidate("KJV-1611")

    def test_cached_editions(self, store):
        cache = LibraryCache(store)
        cache.save("KJV-1611", _library())
        cache.save("RV-1602", _library())
        assert cache.cached_editions() == ["KJV-1611", "RV-1602"]


class TestCacheFirstLoading:
    """A cached edition loads without touching the resource source."""

    def test_second_repository_reads_cache_only(
        self, catalog, resource_source, store, counting_source, load_timeout
    ):
        with ScriptureRepository(
            catalog=catalog, source=resource_source, cache=LibraryCache(store)
        ) as first:
            original = first.ensure_loaded("KJV-1611", timeout=load_timeout)

        source = counting_source()
        with ScriptureRepository(
            catalog=catalog, source=source, cache=LibraryCache(store)
        ) as second:
            cached = second.ensure_loaded("KJV-1611", timeout=load_timeout)

        assert source.calls == []
        assert cached.origin == "cache"
        assert cached.same_content(original)
        assert cached.books == ("Genesis", "John", "Tobit", "Odes")

    def test_corrupt_cache_falls_through_to_source(
        self, catalog, resource_source, store, load_timeout
    ):
        store.set(cache_key("KJV-1611"), b"\x80garbage")

        with ScriptureRepository(
            catalog=catalog, source=resource_source, cache=LibraryCache(store)
        ) as repo:
            library = repo.ensure_loaded("KJV-1611", timeout=load_timeout)

        assert library.origin == "resource"
        assert LibraryCache(store).load("KJV-1611") is not None
