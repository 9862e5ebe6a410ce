"""Persistent key-value store for cache entries and quota counters.

The access layer only ever sees string keys and text values. JSON encoding
happens at this boundary (``get_json``/``set_json``), so the cache and the
quota tracker never handle raw blobs and the backing store can be swapped
(memory for tests, SQLite file for a real client) without touching them.
"""

import json
import logging
import sqlite3
import time
from abc import ABC, abstractmethod

from errors import SerializationError

logger = logging.getLogger(__name__)

_CREATE_TABLES = """
CREATE TABLE IF NOT EXISTS kv_store (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    updated_at REAL NOT NULL
);
"""


class KeyValueStore(ABC):
    """Port: string-keyed get/set/remove over text values."""

    @abstractmethod
    def get(self, key):
        """Return the stored text, or None if missing."""
        ...

    @abstractmethod
    def set(self, key, value):
        """Store text under key, replacing any previous value."""
        ...

    @abstractmethod
    def remove(self, key):
        """Delete key; missing keys are ignored."""
        ...

    @abstractmethod
    def keys(self, prefix=""):
        """Return every stored key starting with prefix."""
        ...

    def get_json(self, key):
        """Decode the JSON value under key, or None if missing."""
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Corrupt value under {key!r}: {e}") from e

    def set_json(self, key, value):
        """Encode value as JSON and store it under key."""
        try:
            blob = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot serialize value for {key!r}: {e}") from e
        self.set(key, blob)

    def remove_prefix(self, prefix):
        """Remove every key under prefix. Returns how many were removed."""
        removed = 0
        for key in self.keys(prefix):
            self.remove(key)
            removed += 1
        return removed


class MemoryStore(KeyValueStore):
    """In-process store; state is lost with the process."""

    def __init__(self):
        self._data = {}

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = value

    def remove(self, key):
        self._data.pop(key, None)

    def keys(self, prefix=""):
        return [k for k in self._data if k.startswith(prefix)]


class SqliteStore(KeyValueStore):
    """File-backed store. Use ":memory:" for a throwaway database."""

    def __init__(self, db_path="flight_state.db"):
        self.db_path = str(db_path)
        # One long-lived connection so ":memory:" keeps its data
        self._conn = sqlite3.connect(self.db_path, timeout=5, check_same_thread=False)
        if self.db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_CREATE_TABLES)

    def get(self, key):
        row = self._conn.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        return row[0] if row else None

    def set(self, key, value):
        self._conn.execute(
            """INSERT INTO kv_store (key, value, updated_at)
               VALUES (?, ?, ?)
               ON CONFLICT(key) DO UPDATE SET
                   value = excluded.value,
                   updated_at = excluded.updated_at""",
            (key, value, time.time()),
        )
        self._conn.commit()

    def remove(self, key):
        self._conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        self._conn.commit()

    # substr() rather than LIKE: LIKE is case-insensitive and treats "_" as a wildcard

    def keys(self, prefix=""):
        rows = self._conn.execute(
            "SELECT key FROM kv_store WHERE substr(key, 1, ?) = ?",
            (len(prefix), prefix),
        ).fetchall()
        return [r[0] for r in rows]

    def remove_prefix(self, prefix):
        cursor = self._conn.execute(
            "DELETE FROM kv_store WHERE substr(key, 1, ?) = ?",
            (len(prefix), prefix),
        )
        self._conn.commit()
        if cursor.rowcount:
            logger.info(f"Removed {cursor.rowcount} stored entries under '{prefix}'")
        return cursor.rowcount

    def close(self):
        self._conn.close()
