"""Bookmarks persisted as a JSON list in the key/value store."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from kjvreader.db.store import KeyValueStore

logger = logging.getLogger(__name__)

BOOKMARKS_KEY = "bookmarks"


@dataclass(frozen=True)
class Bookmark:
    """A saved verse."""

    book: str
    chapter: int
    verse: int
    text: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def reference(self) -> str:
        return f"{self.book} {self.chapter}:{self.verse}"

    def same_verse(self, book: str, chapter: int, verse: int) -> bool:
        return (self.book, self.chapter, self.verse) == (book, chapter, verse)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "book": self.book,
            "chapter": self.chapter,
            "verse": self.verse,
            "text": self.text,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Bookmark":
        return cls(
            id=data["id"],
            book=data["book"],
            chapter=int(data["chapter"]),
            verse=int(data["verse"]),
            text=data.get("text", ""),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


class BookmarkStore:
    """Ordered bookmark list with duplicate suppression per verse."""

    def __init__(self, store: KeyValueStore):
        self._store = store
        self._lock = threading.Lock()

    def all(self) -> list[Bookmark]:
        """Bookmarks in the order they were added."""
        raw = self._store.get_json(BOOKMARKS_KEY, [])
        if not isinstance(raw, list):
            logger.warning("Stored bookmarks are not a list; ignoring them")
            return []
        bookmarks = []
        for entry in raw:
            try:
                bookmarks.append(Bookmark.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Dropping malformed bookmark {entry!r}: {e}")
        return bookmarks

    def get(self, bookmark_id: str) -> Bookmark | None:
        return next((b for b in self.all() if b.id == bookmark_id), None)

    def add(self, book: str, chapter: int, verse: int, text: str) -> Bookmark | None:
        """Add a bookmark. Returns None if that verse is already bookmarked."""
        with self._lock:
            bookmarks = self.all()
            if any(b.same_verse(book, chapter, verse) for b in bookmarks):
                return None
            bookmark = Bookmark(book=book, chapter=chapter, verse=verse, text=text)
            bookmarks.append(bookmark)
            self._save(bookmarks)
        logger.info(f"Bookmarked {bookmark.reference}")
        return bookmark

    def remove(self, bookmark_id: str) -> bool:
        return self.remove_many([bookmark_id]) > 0

    def remove_many(self, bookmark_ids: Iterable[str]) -> int:
        """Remove bookmarks by id. Returns how many were removed."""
        ids = set(bookmark_ids)
        with self._lock:
            bookmarks = self.all()
            kept = [b for b in bookmarks if b.id not in ids]
            removed = len(bookmarks) - len(kept)
            if removed:
                self._save(kept)
        return removed

    def clear(self) -> int:
        with self._lock:
            count = len(self.all())
            self._save([])
        return count

    def _save(self, bookmarks: list[Bookmark]) -> None:
        self._store.set_json(BOOKMARKS_KEY, [b.to_dict() for b in bookmarks])
