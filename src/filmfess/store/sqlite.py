"""Async SQLite record store for confessions.

Wraps aiosqlite to provide the list/insert contract against a local
database file. Each insert commits immediately; no transaction is held
across ``await`` boundaries.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from filmfess.exceptions import StoreError
from filmfess.models import ConfessionQuery, ConfessionRecord, NewConfession

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS confessions (
    id TEXT PRIMARY KEY,
    message TEXT NOT NULL,
    recipient TEXT NOT NULL,
    recipient_lower TEXT NOT NULL,
    movie_id INTEGER NOT NULL,
    movie_title TEXT NOT NULL,
    movie_poster_path TEXT,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_confessions_created ON confessions(created_at);
CREATE INDEX IF NOT EXISTS idx_confessions_movie ON confessions(movie_id);
"""

_SELECT_COLUMNS = """id, message, recipient, recipient_lower, movie_id,
                     movie_title, movie_poster_path, created_at"""


class SqliteConfessionStore:
    """Confession store backed by a local SQLite file.

    Usage::

        async with SqliteConfessionStore("data/filmfess.db") as store:
            record = await store.insert_confession(confession)
            latest = await store.list_confessions(ConfessionQuery(limit=50))
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection and make sure the schema exists."""
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row
        if self.db_path != ":memory:":
            await self._db.execute("PRAGMA journal_mode=WAL")
        await self._db.executescript(SCHEMA_SQL)
        await self._db.commit()

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def __aenter__(self) -> SqliteConfessionStore:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    def _ensure_connected(self) -> aiosqlite.Connection:
        if self._db is None:
            raise RuntimeError("Not connected -- use 'async with' or call connect()")
        return self._db

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat(timespec="microseconds")

    # ------------------------------------------------------------------
    # Store contract
    # ------------------------------------------------------------------

    async def list_confessions(self, query: ConfessionQuery) -> list[ConfessionRecord]:
        """Return confessions matching ``query``, newest first.

        The recipient term is matched with ``instr`` rather than ``LIKE`` so
        ``%`` and ``_`` in a typed name are literal characters.
        """
        db = self._ensure_connected()

        clauses: list[str] = []
        params: list[object] = []
        if query.recipient_contains:
            clauses.append("instr(recipient_lower, ?) > 0")
            params.append(query.recipient_contains)
        if query.movie_id is not None:
            clauses.append("movie_id = ?")
            params.append(query.movie_id)

        sql = f"SELECT {_SELECT_COLUMNS} FROM confessions"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY created_at DESC, rowid DESC"
        if query.limit is not None:
            sql += " LIMIT ?"
            params.append(query.limit)

        try:
            cursor = await db.execute(sql, params)
            rows = await cursor.fetchall()
        except sqlite3.Error as exc:
            raise StoreError("list", str(exc)) from exc
        return [ConfessionRecord.from_row(dict(row)) for row in rows]

    async def insert_confession(self, confession: NewConfession) -> ConfessionRecord:
        """Insert one confession and return it with ``id``/``created_at`` set."""
        db = self._ensure_connected()
        row = confession.to_row()
        row["id"] = str(uuid.uuid4())
        row["created_at"] = self._now_iso()

        try:
            await db.execute(
                """INSERT INTO confessions(id, message, recipient, recipient_lower,
                                          movie_id, movie_title, movie_poster_path,
                                          created_at)
                   VALUES (:id, :message, :recipient, :recipient_lower,
                           :movie_id, :movie_title, :movie_poster_path,
                           :created_at)""",
                row,
            )
            await db.commit()
        except sqlite3.Error as exc:
            await db.rollback()
            raise StoreError("insert", str(exc)) from exc

        logger.info("Stored confession %s for movie %s", row["id"], row["movie_id"])
        return ConfessionRecord.from_row(row)

    async def count(self) -> int:
        """Total number of stored confessions."""
        db = self._ensure_connected()
        cursor = await db.execute("SELECT COUNT(*) FROM confessions")
        (total,) = await cursor.fetchone()
        return int(total)
