from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Protocol

from .errors import StorageError


class KeyValueStore(Protocol):
    def kv_get(self, k: str) -> str | None: ...

    def kv_set(self, k: str, v: str) -> None: ...


class SqliteKeyValueStore:
    """Durable string store kept in a single `kv` table of state.db."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            # The bridge loop runs in its own thread; every call is made from that loop.
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._init_schema()
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Unable to open settings database {db_path}: {exc}") from exc

    def close(self) -> None:
        self._conn.close()

    def _init_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
              k TEXT PRIMARY KEY,
              v TEXT NOT NULL
            );
            """
        )
        self._conn.commit()

    def kv_get(self, k: str) -> str | None:
        try:
            cur = self._conn.cursor()
            row = cur.execute("SELECT v FROM kv WHERE k=?", (k,)).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Unable to read {k!r}: {exc}") from exc
        return row[0] if row else None

    def kv_set(self, k: str, v: str) -> None:
        try:
            cur = self._conn.cursor()
            cur.execute(
                "INSERT INTO kv(k, v) VALUES(?, ?) ON CONFLICT(k) DO UPDATE SET v=excluded.v",
                (k, v),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Unable to write {k!r}: {exc}") from exc


class MemoryKeyValueStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def kv_get(self, k: str) -> str | None:
        return self.values.get(k)

    def kv_set(self, k: str, v: str) -> None:
        self.values[k] = v
