"""SQLite connection management."""

import sqlite3
from pathlib import Path


def get_connection(db_path: Path) -> sqlite3.Connection:
    """
    Get a SQLite connection with row factory and WAL mode.

    WAL (Write-Ahead Logging) mode lets readers proceed while a cache
    entry is being written from the loader thread.
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Initialize database schema."""
    conn.executescript("""
        -- kv_store: opaque blobs keyed by name (cache entries, preferences, bookmarks)
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value BLOB NOT NULL,
            updated_at TEXT NOT NULL
        );
    """)
    conn.commit()
