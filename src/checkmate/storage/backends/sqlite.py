"""SQLite storage backend.

Keys and JSON-encoded values live in a single ``kv_store`` table. Data
survives process restarts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import aiosqlite

from checkmate.storage.base import StorageBackend

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS kv_store (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""


class SQLiteStorage(StorageBackend):
    """Awaitable store backed by ``aiosqlite``.

    The connection is opened lazily on first use and kept until
    :meth:`aclose`.

    Example:
        >>> storage = SQLiteStorage("./checkmate.db")
        >>> await storage.set("checkmate_options", {"theme": "dark"})
        >>> await storage.aclose()
    """

    def __init__(self, path: str | Path = "./checkmate.db") -> None:
        self.path = str(Path(path).expanduser()) if str(path) != ":memory:" else ":memory:"
        self._db: aiosqlite.Connection | None = None

    async def _connection(self) -> aiosqlite.Connection:
        if self._db is None:
            if self.path != ":memory:":
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            self._db = await aiosqlite.connect(self.path)
            await self._db.execute(_CREATE_TABLE)
            await self._db.commit()
        return self._db

    async def get(self, key: str) -> Any | None:
        db = await self._connection()
        async with db.execute("SELECT value FROM kv_store WHERE key = ?", (key,)) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    async def set(self, key: str, value: Any) -> None:
        db = await self._connection()
        await db.execute(
            """
            INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
            """,
            (key, json.dumps(value, separators=(",", ":"))),
        )
        await db.commit()

    async def clear(self) -> None:
        db = await self._connection()
        await db.execute("DELETE FROM kv_store")
        await db.commit()

    async def aclose(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None

    def __repr__(self) -> str:
        return f"SQLiteStorage(path={self.path!r})"
