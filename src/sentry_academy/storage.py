"""
storage.py — Key-value persistence for learner state
====================================================
The progress store only needs three synchronous calls:

  get(key)            → str | None
  set(key, value)     write / overwrite
  remove(key)         delete (no-op when absent)

Two implementations:

- **InMemoryStorage** — a dict; used by tests and the demo.
- **SqliteStorage** — a single ``kv_store`` table in a SQLite file.  Same
  connection idiom as the rest of the stack: one short-lived connection per
  call, ``row_factory`` set, WAL journal mode so a reader never blocks the
  writer.  The database file path comes from ``ACADEMY_DB_PATH``.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional, Protocol


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...


class InMemoryStorage:
    """Dict-backed storage; contents live as long as the instance."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class SqliteStorage:
    """Single-table SQLite key-value store."""

    def __init__(self, db_path: Optional[str] = None) -> None:
        if db_path is None:
            from sentry_academy.config import get_settings
            db_path = get_settings().storage.db_path
        self._db_path = str(Path(db_path))
        self.init_db()

    def _get_conn(self) -> sqlite3.Connection:
        """Return a connection with row_factory set."""
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def init_db(self) -> None:
        """Create the table if it doesn't exist."""
        conn = self._get_conn()
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key        TEXT PRIMARY KEY,
                value      TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            );
        """)
        conn.commit()
        conn.close()

    def get(self, key: str) -> Optional[str]:
        conn = self._get_conn()
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        conn.close()
        return None if row is None else row["value"]

    def set(self, key: str, value: str) -> None:
        conn = self._get_conn()
        conn.execute(
            """
            INSERT INTO kv_store (key, value, updated_at)
            VALUES (?, ?, datetime('now'))
            ON CONFLICT(key) DO UPDATE SET
                value      = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, value),
        )
        conn.commit()
        conn.close()

    def remove(self, key: str) -> None:
        conn = self._get_conn()
        conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        conn.commit()
        conn.close()
