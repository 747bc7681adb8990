"""Persisted cache of parsed libraries, one entry per edition."""

from __future__ import annotations

import logging

from kjvreader.db.store import KeyValueStore
from kjvreader.sources.models import Library

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "cachedBibleData-"


def cache_key(edition_id: str) -> str:
    return f"{CACHE_KEY_PREFIX}{edition_id}"


class LibraryCache:
    """Reads and writes serialized Library blobs in the key/value store."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def load(self, edition_id: str) -> Library | None:
        """Return the cached library, or None when absent or unusable."""
        data = self._store.get_json(cache_key(edition_id))
        if data is None:
            return None
        try:
            library = Library.from_dict(data, origin="cache")
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring corrupt cache entry for {edition_id}: {e}")
            return None
        if library.is_empty:
            return None
        return library

    def save(self, edition_id: str, library: Library) -> None:
        self._store.set_json(cache_key(edition_id), library.to_dict())
        logger.debug(f"Cached {len(library)} books for {edition_id}")

    def invalidate(self, edition_id: str) -> bool:
        return self._store.delete(cache_key(edition_id))

    def cached_editions(self) -> list[str]:
        return [
            key[len(CACHE_KEY_PREFIX):] for key in self._store.keys(CACHE_KEY_PREFIX)
        ]
