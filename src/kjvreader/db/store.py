"""Key/value blob store backed by SQLite.

Holds everything the reader persists locally: parsed library cache entries,
preference flags and the bookmark list. Values are opaque bytes; callers
choose their own serialization (JSON throughout this package).
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from kjvreader.db.connection import get_connection, init_db

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Persistent string-keyed blob store.

    A connection is opened per operation so the store can be shared between
    the loader worker thread and callers. Writes are serialized by a lock.
    """

    def __init__(self, db_path: Path | str):
        self._db_path = Path(db_path)
        self._write_lock = threading.Lock()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = get_connection(self._db_path)
        try:
            init_db(conn)
        finally:
            conn.close()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def get(self, key: str) -> bytes | None:
        """Return the stored blob for key, or None."""
        conn = get_connection(self._db_path)
        try:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        value = row["value"]
        return value.encode("utf-8") if isinstance(value, str) else bytes(value)

    def set(self, key: str, value: bytes) -> None:
        """Store a blob under key, replacing any previous value."""
        now = datetime.now(timezone.utc).isoformat()
        with self._write_lock:
            conn = get_connection(self._db_path)
            try:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, now),
                )
                conn.commit()
            finally:
                conn.close()
        logger.debug(f"Stored {len(value)} bytes under {key}")

    def delete(self, key: str) -> bool:
        """Remove key. Returns True if something was deleted."""
        with self._write_lock:
            conn = get_connection(self._db_path)
            try:
                cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                conn.commit()
                return cursor.rowcount > 0
            finally:
                conn.close()

    def keys(self, prefix: str = "") -> list[str]:
        """List stored keys, optionally filtered by prefix."""
        conn = get_connection(self._db_path)
        try:
            rows = conn.execute(
                "SELECT key FROM kv_store WHERE key LIKE ? ESCAPE '\\' ORDER BY key",
                (prefix.replace("%", r"\%").replace("_", r"\_") + "%",),
            ).fetchall()
        finally:
            conn.close()
        return [row["key"] for row in rows]

    def get_json(self, key: str, default: Any = None) -> Any:
        """Decode a JSON value. Undecodable values are logged and return default."""
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Discarding undecodable value for {key}: {e}")
            return default

    def set_json(self, key: str, value: Any) -> None:
        """Encode value as JSON and store it."""
        self.set(key, json.dumps(value, ensure_ascii=False).encode("utf-8"))
