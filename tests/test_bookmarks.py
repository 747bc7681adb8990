"""Tests for the bookmark store."""

from __future__ import annotations

import pytest

from kjvreader.bookmarks import BOOKMARKS_KEY, Bookmark, BookmarkStore


@pytest.fixture
def bookmarks(store):
    return BookmarkStore(store)


class TestBookmarkStore:
    def test_empty(self, bookmarks):
        assert bookmarks.all() == []

    def test_add_keeps_insertion_order(self, bookmarks):
        bookmarks.add("John", 3, 16, "For God so loued the world")
        bookmarks.add("Genesis", 1, 1, "In the beginning")

        assert [b.reference for b in bookmarks.all()] == ["John 3:16", "Genesis 1:1"]

    def test_duplicate_verse_rejected(self, bookmarks):
        first = bookmarks.add("John", 3, 16, "text")
        second = bookmarks.add("John", 3, 16, "other text")

        assert first is not None
        assert second is None
        assert len(bookmarks.all()) == 1

    def test_persists_across_instances(self, bookmarks, store):
        added = bookmarks.add("Psalms", 23, 1, "The Lord is my shepheard")

        reloaded = BookmarkStore(store).get(added.id)

        assert reloaded == added

    def test_remove(self, bookmarks):
        added = bookmarks.add("John", 3, 16, "text")
        assert bookmarks.remove(added.id)
        assert not bookmarks.remove(added.id)
        assert bookmarks.all() == []

    def test_remove_many(self, bookmarks):
        ids = [bookmarks.add("Genesis", 1, v, "t").id for v in (1, 2, 3)]
        assert bookmarks.remove_many([ids[0], ids[2], "missing"]) == 2
        assert [b.verse for b in bookmarks.all()] == [2]

    def test_clear(self, bookmarks):
        bookmarks.add("Genesis", 1, 1, "t")
        bookmarks.add("Genesis", 1, 2, "t")
        assert bookmarks.clear() == 2
        assert bookmarks.all() == []

    def test_malformed_entries_dropped(self, bookmarks, store):
        good = Bookmark(book="Ruth", chapter=1, verse=1, text="t")
        store.set_json(BOOKMARKS_KEY, [good.to_dict(), {"book": "Ruth"}, "junk"])

        assert bookmarks.all() == [good]

    def test_non_list_value_ignored(self, bookmarks, store):
        store.set_json(BOOKMARKS_KEY, {"not": "a list"})
        assert bookmarks.all() == []


class TestBookmark:
    def test_to_dict(self):
        bookmark = Bookmark(book="Ruth", chapter=1, verse=16, text="Whither thou goest")
        data = bookmark.to_dict()

        assert data["book"] == "Ruth"
        assert data["chapter"] == 1
        assert data["verse"] == 16
        assert Bookmark.from_dict(data) == bookmark

    def test_unique_ids(self):
        a = Bookmark(book="Ruth", chapter=1, verse=1, text="")
        b = Bookmark(book="Ruth", chapter=1, verse=1, text="")
        assert a.id != b.id
