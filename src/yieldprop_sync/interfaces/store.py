"""StateStore protocol - persists cursor, activity and registration history."""

from __future__ import annotations

from typing import Protocol

from yieldprop_sync.models.records import ActivityRecord, RegistrationAttempt, RegistrationRecord


class StateStore(Protocol):
    """Persists daemon state for restarts and operator inspection."""

    # ── Lifecycle ──────────────────────────────────────────

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        ...

    async def close(self) -> None:
        """Close the database connection."""
        ...

    # ── Cursor ─────────────────────────────────────────────

    async def get_cursor(self) -> int | None:
        ...

    async def set_cursor(self, block: int) -> None:
        ...

    # ── Activity log ───────────────────────────────────────

    async def log_activity(self, level: str, message: str, link: str | None = None) -> None:
        ...

    async def get_recent_activity(self, limit: int = 50) -> list[ActivityRecord]:
        ...

    # ── Registrations ──────────────────────────────────────

    async def save_registration(self, attempt: RegistrationAttempt) -> None:
        """Record a settled registration attempt."""
        ...

    async def get_registrations(self, limit: int = 50) -> list[RegistrationRecord]:
        ...
