"""SQLite history backend.

Provides persistent exchange history using a SQLite database.
Uses aiosqlite for async access.
"""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from ..errors import StorageError
from .base import HistoryStore
from .models import ExchangeRecord, HistoryPage


class SQLiteHistoryStore(HistoryStore):
    """SQLite-backed history store.

    time_stamp is indexed but not unique: records sharing a millisecond
    are all kept, and deleting that timestamp removes all of them.
    """

    def __init__(self, path: str | Path = "./dmprompt_history.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = await aiosqlite.connect(self._db_path)
            await self._create_schema()
        except (OSError, sqlite3.Error) as e:
            raise StorageError(str(e), backend="sqlite") from e

    async def _create_schema(self) -> None:
        """Create database tables."""
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS conversations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                time_stamp INTEGER NOT NULL,
                user_input TEXT NOT NULL,
                ai_response TEXT,
                created_at TEXT NOT NULL
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_conversations_time_stamp
            ON conversations(time_stamp)
        """)

        await self._connection.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise StorageError("history store is not connected", backend="sqlite")
        return self._connection

    async def list(self, page: int = 1, limit: int = 20) -> HistoryPage:
        """List records most-recent-first."""
        self._check_paging(page, limit)
        conn = self._require_connection()
        offset = (page - 1) * limit

        try:
            async with conn.execute(
                """
                SELECT time_stamp, user_input, ai_response, created_at
                FROM conversations
                ORDER BY time_stamp DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (limit, offset)
            ) as cursor:
                rows = await cursor.fetchall()

            async with conn.execute("SELECT COUNT(*) FROM conversations") as cursor:
                (total,) = await cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(str(e), backend="sqlite") from e

        records = [
            ExchangeRecord(
                timestamp=time_stamp,
                user_input=user_input,
                ai_response=ai_response,
                created_at=created_at
            )
            for time_stamp, user_input, ai_response, created_at in rows
        ]
        return HistoryPage(records=records, total=total, page=page, limit=limit)

    async def append(self, record: ExchangeRecord) -> None:
        """Insert one record."""
        conn = self._require_connection()
        created_at = record.created_at or datetime.now(timezone.utc).isoformat()
        try:
            await conn.execute("""
                INSERT INTO conversations (time_stamp, user_input, ai_response, created_at)
                VALUES (?, ?, ?, ?)
            """, (record.timestamp, record.user_input, record.ai_response, created_at))
            await conn.commit()
        except sqlite3.Error as e:
            raise StorageError(str(e), backend="sqlite") from e

    async def delete_by_timestamp(self, timestamp: int) -> bool:
        """Delete records by timestamp."""
        conn = self._require_connection()
        try:
            cursor = await conn.execute(
                "DELETE FROM conversations WHERE time_stamp = ?",
                (timestamp,)
            )
            deleted = cursor.rowcount
            await cursor.close()
            await conn.commit()
        except sqlite3.Error as e:
            raise StorageError(str(e), backend="sqlite") from e
        return deleted > 0

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
