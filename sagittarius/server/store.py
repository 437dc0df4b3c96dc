"""
SQLite aggregation store.

Two tables:
  events   — one counter row per event_name, only ever incremented
  metadata — first_sync (set once) and last_sync (every merge)

Each call opens its own connection. A merge runs in one BEGIN IMMEDIATE
transaction: all rows and last/first_sync commit together or not at all.
The upsert adds to the stored count in SQL, so concurrent merges on the
same event_name never lose an increment. A sum past the 64-bit range would
become a REAL; the column CHECK rejects it and the merge rolls back.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Mapping

from sagittarius.classifier import CLICK, KEY, WHEEL, event_type

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    event_name TEXT NOT NULL UNIQUE,
    event_type TEXT NOT NULL CHECK(event_type IN ('KEY', 'CLICK', 'WHEEL', 'OTHER')),
    count INTEGER NOT NULL DEFAULT 0 CHECK(typeof(count) = 'integer' AND count >= 0),
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_events_type ON events(event_type);
CREATE INDEX IF NOT EXISTS idx_events_count ON events(count);
"""

UPSERT_EVENT = """
INSERT INTO events (event_name, event_type, count)
VALUES (?, ?, ?)
ON CONFLICT(event_name) DO UPDATE SET
    count = count + excluded.count,
    updated_at = CURRENT_TIMESTAMP
"""

UPSERT_LAST_SYNC = """
INSERT INTO metadata (key, value, updated_at)
VALUES ('last_sync', datetime('now'), datetime('now'))
ON CONFLICT(key) DO UPDATE SET
    value = datetime('now'),
    updated_at = datetime('now')
"""

INSERT_FIRST_SYNC = """
INSERT OR IGNORE INTO metadata (key, value, updated_at)
VALUES ('first_sync', datetime('now'), datetime('now'))
"""

_TOTAL_KEYS = {KEY: "total_keys", CLICK: "total_clicks", WHEEL: "total_wheels"}


class StoreError(Exception):
    """A store operation failed; any open transaction was rolled back."""


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


class StatsStore:
    """Counter rows + sync metadata in one SQLite file."""

    def __init__(self, db_path: str, timeout: float = 30.0) -> None:
        self.db_path = db_path
        self.timeout = timeout

    def _get_conn(self) -> sqlite3.Connection:
        # Autocommit mode; transactions are opened explicitly
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = dict_factory
        return conn

    def init_schema(self) -> None:
        """Create tables and indexes. Raises StoreError if the database is unusable."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open database {self.db_path}: {e}") from e
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot initialise schema: {e}") from e
        finally:
            conn.close()
        logger.info("Database initialised at %s", self.db_path)

    def merge(self, events: Mapping[str, int]) -> int:
        """
        Add every (event_name, delta) into the counters and stamp the sync
        metadata, atomically. Returns the number of identifiers merged.
        """
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        try:
            conn.execute("BEGIN IMMEDIATE")
            for event_name, delta in events.items():
                conn.execute(UPSERT_EVENT, (event_name, event_type(event_name), delta))
            conn.execute(UPSERT_LAST_SYNC)
            conn.execute(INSERT_FIRST_SYNC)
            conn.execute("COMMIT")
        except (sqlite3.Error, OverflowError) as e:
            if conn.in_transaction:
                conn.rollback()
            logger.error("Merge rolled back: %s", e)
            raise StoreError(str(e)) from e
        finally:
            conn.close()
        return len(events)

    def get_sync(self, conn: sqlite3.Connection, key: str) -> str | None:
        row = conn.execute("SELECT value FROM metadata WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def aggregate(self) -> dict[str, Any]:
        """All counters ordered by count desc, with totals recomputed per category."""
        totals = {"total_keys": 0, "total_clicks": 0, "total_wheels": 0}
        events = []
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        try:
            rows = conn.execute(
                """
                SELECT event_name, event_type, count
                FROM events
                ORDER BY count DESC, event_name ASC
                """
            ).fetchall()
            last_sync = self.get_sync(conn, "last_sync")
            first_sync = self.get_sync(conn, "first_sync")
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        finally:
            conn.close()

        for row in rows:
            total_key = _TOTAL_KEYS.get(row["event_type"])
            if total_key:
                totals[total_key] += row["count"]
            events.append(
                {"name": row["event_name"], "type": row["event_type"], "count": row["count"]}
            )

        return {**totals, "last_sync": last_sync, "first_sync": first_sync, "events": events}

    def dump(self) -> dict[str, list[dict[str, Any]]]:
        """Raw rows of both tables."""
        conn = self._get_conn()
        try:
            return {
                "events": conn.execute("SELECT * FROM events ORDER BY id").fetchall(),
                "metadata": conn.execute("SELECT * FROM metadata ORDER BY key").fetchall(),
            }
        finally:
            conn.close()

