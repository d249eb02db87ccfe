"""
SQLite-backed session store.

Each session is one row: the full record as JSON plus indexed `updated_at`
and `created_at` columns. `INSERT OR REPLACE` keeps upserts whole.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Optional

from retouch.errors import StorageError
from retouch.storage.base import PersistenceBackend, Record

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

SCHEMA = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL,
    record TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_sessions_updated_at ON sessions(updated_at);
"""


class SqliteBackend(PersistenceBackend):
    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    def _init_db(self) -> None:
        if str(self.db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            cursor = self._conn.cursor()
            cursor.executescript(SCHEMA)
            cursor.execute("SELECT version FROM schema_version")
            row = cursor.fetchone()
            if row is None:
                cursor.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
                self._conn.commit()
                logger.info(f"Session database initialized with schema version {SCHEMA_VERSION}")
            elif row[0] != SCHEMA_VERSION:
                logger.warning(f"Schema version mismatch: expected {SCHEMA_VERSION}, got {row[0]}")
        except sqlite3.Error as e:
            raise StorageError(f"Failed to open session database {self.db_path}: {e}") from e

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError("Database connection not initialized")
        return self._conn

    def _execute(self, sql: str, params: tuple = (), fetch: bool = False) -> list[tuple]:
        try:
            with self._lock:
                cursor = self.conn.cursor()
                cursor.execute(sql, params)
                if fetch:
                    return cursor.fetchall()
                self.conn.commit()
                return []
        except sqlite3.Error as e:
            logger.error(f"Session database error: {e}")
            raise StorageError(f"Session database error: {e}") from e

    async def get(self, key: str) -> Optional[Record]:
        rows = await asyncio.to_thread(
            self._execute, "SELECT record FROM sessions WHERE id = ?", (key,), True,
        )
        return json.loads(rows[0][0]) if rows else None

    async def upsert(self, key: str, record: Record) -> None:
        await asyncio.to_thread(
            self._execute,
            "INSERT OR REPLACE INTO sessions (id, created_at, updated_at, record) VALUES (?, ?, ?, ?)",
            (key, record.get("createdAt", 0), record.get("updatedAt", 0), json.dumps(record, sort_keys=True)),
        )

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._execute, "DELETE FROM sessions WHERE id = ?", (key,))

    async def list(self) -> list[Record]:
        rows = await asyncio.to_thread(
            self._execute, "SELECT record FROM sessions ORDER BY updated_at DESC", (), True,
        )
        return [json.loads(row[0]) for row in rows]

    async def close(self) -> None:
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None
