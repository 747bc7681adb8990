"""Local persistence (SQLite key/value store)."""

from kjvreader.db.store import KeyValueStore

__all__ = ["KeyValueStore"]
