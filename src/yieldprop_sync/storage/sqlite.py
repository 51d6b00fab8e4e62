"""SQLite implementation of the StateStore protocol."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from yieldprop_sync.models.records import (
    ActivityRecord,
    RegistrationAttempt,
    RegistrationRecord,
)

SCHEMA = """
-- Last scanned block for log resumption
CREATE TABLE IF NOT EXISTS cursor (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    last_block INTEGER NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);

-- Notifications and lifecycle messages
CREATE TABLE IF NOT EXISTS activity_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    level TEXT NOT NULL,
    message TEXT NOT NULL,
    link TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_activity_created ON activity_log(created_at);

-- Settled holder registration attempts
CREATE TABLE IF NOT EXISTS registrations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    holder TEXT NOT NULL,
    outcome TEXT NOT NULL,
    tx_hash TEXT,
    error TEXT,
    settled_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_registrations_holder ON registrations(holder);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteStateStore:
    """SQLite-backed implementation of the StateStore protocol."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        if self._db is not None:
            return
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self._db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(SCHEMA)
        await self._db.commit()

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        assert self._db is not None, "Store not initialized. Call initialize() first."
        return self._db

    # ── Cursor ─────────────────────────────────────────────

    async def get_cursor(self) -> int | None:
        async with self.db.execute("SELECT last_block FROM cursor WHERE id=1") as cur:
            row = await cur.fetchone()
            return row["last_block"] if row else None

    async def set_cursor(self, block: int) -> None:
        await self.db.execute(
            "INSERT INTO cursor (id, last_block, updated_at) VALUES (1, ?, ?)"
            " ON CONFLICT(id) DO UPDATE SET last_block=excluded.last_block,"
            " updated_at=excluded.updated_at",
            (block, _now()),
        )
        await self.db.commit()

    # ── Activity log ───────────────────────────────────────

    async def log_activity(self, level: str, message: str, link: str | None = None) -> None:
        await self.db.execute(
            "INSERT INTO activity_log (level, message, link, created_at) VALUES (?, ?, ?, ?)",
            (level, message, link, _now()),
        )
        await self.db.commit()

    async def get_recent_activity(self, limit: int = 50) -> list[ActivityRecord]:
        async with self.db.execute(
            "SELECT * FROM activity_log ORDER BY id DESC LIMIT ?", (limit,)
        ) as cur:
            return [_row_to_activity(row) async for row in cur]

    # ── Registrations ──────────────────────────────────────

    async def save_registration(self, attempt: RegistrationAttempt) -> None:
        await self.db.execute(
            "INSERT INTO registrations (holder, outcome, tx_hash, error, settled_at)"
            " VALUES (?, ?, ?, ?, ?)",
            (attempt.key, attempt.state.value, attempt.tx_hash, attempt.error, _now()),
        )
        await self.db.commit()

    async def get_registrations(self, limit: int = 50) -> list[RegistrationRecord]:
        async with self.db.execute(
            "SELECT * FROM registrations ORDER BY id DESC LIMIT ?", (limit,)
        ) as cur:
            return [_row_to_registration(row) async for row in cur]


# ── Row converters ─────────────────────────────────────────


def _row_to_activity(row: aiosqlite.Row) -> ActivityRecord:
    return ActivityRecord(
        id=row["id"],
        level=row["level"],
        message=row["message"],
        link=row["link"],
        created_at=row["created_at"],
    )


def _row_to_registration(row: aiosqlite.Row) -> RegistrationRecord:
    return RegistrationRecord(
        id=row["id"],
        holder=row["holder"],
        outcome=row["outcome"],
        tx_hash=row["tx_hash"],
        error=row["error"],
        settled_at=row["settled_at"],
    )
