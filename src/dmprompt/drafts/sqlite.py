"""SQLite key-value backend.

Persists values as JSON text in a single table. Uses aiosqlite for
async access.
"""

import json
import sqlite3
from pathlib import Path
from typing import Any

import aiosqlite

from ..errors import StorageError
from .base import KeyValueStore


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed key-value store.

    Survives process restarts, which is what lets an unsent draft come
    back in the next session.
    """

    def __init__(self, path: str | Path = "./dmprompt_drafts.db", table: str = "cache"):
        if not table.isidentifier():
            raise ValueError(f"Invalid table name: {table!r}")
        self._db_path = Path(path)
        self._table = table
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database file and create the table."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = await aiosqlite.connect(self._db_path)
            await self._connection.execute(f"""
                CREATE TABLE IF NOT EXISTS {self._table} (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            await self._connection.commit()
        except (OSError, sqlite3.Error) as e:
            raise StorageError(str(e), backend="sqlite") from e

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise StorageError("store is not connected", backend="sqlite")
        return self._connection

    async def get(self, key: str) -> dict[str, Any] | None:
        conn = self._require_connection()
        try:
            async with conn.execute(
                f"SELECT value FROM {self._table} WHERE key = ?",
                (key,)
            ) as cursor:
                row = await cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(str(e), backend="sqlite") from e

        if row is None:
            return None
        try:
            return json.loads(row[0])
        except ValueError as e:
            raise StorageError(f"corrupt value for key {key!r}: {e}", backend="sqlite") from e

    async def put(self, key: str, value: dict[str, Any]) -> None:
        conn = self._require_connection()
        try:
            await conn.execute(f"""
                INSERT INTO {self._table} (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """, (key, json.dumps(value, ensure_ascii=False)))
            await conn.commit()
        except sqlite3.Error as e:
            raise StorageError(str(e), backend="sqlite") from e

    async def delete(self, key: str) -> None:
        conn = self._require_connection()
        try:
            await conn.execute(f"DELETE FROM {self._table} WHERE key = ?", (key,))
            await conn.commit()
        except sqlite3.Error as e:
            raise StorageError(str(e), backend="sqlite") from e

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
