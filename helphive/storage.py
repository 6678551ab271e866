"""Storage backends for the persisted usage/cache blob."""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol
import sqlite3


USAGE_KEY = "helphive_usage_v1"


class UsageStore(Protocol):
    """Key-value persistence surface."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> bool:
        ...

    def keys(self) -> List[str]:
        ...


class InMemoryUsageStore:
    """In-memory storage backend (default)."""

    def __init__(self):
        self._values: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> bool:
        if key in self._values:
            del self._values[key]
            return True
        return False

    def keys(self) -> List[str]:
        return list(self._values)


class SQLiteUsageStore:
    """SQLite-backed storage backend."""

    def __init__(self, db_path: str = "helphive.db"):
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._init_schema()

    def _init_schema(self) -> None:
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
        self._conn.commit()

    def get(self, key: str) -> Optional[str]:
        row = self._conn.execute(
            "SELECT value FROM kv WHERE key = ?",
            (key,),
        ).fetchone()
        if not row:
            return None
        return row["value"]

    def set(self, key: str, value: str) -> None:
        self._conn.execute(
            """
            INSERT INTO kv (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, value),
        )
        self._conn.commit()

    def delete(self, key: str) -> bool:
        cur = self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self._conn.commit()
        return cur.rowcount > 0

    def keys(self) -> List[str]:
        rows = self._conn.execute("SELECT key FROM kv ORDER BY key ASC").fetchall()
        return [row["key"] for row in rows]

    def close(self) -> None:
        self._conn.close()
