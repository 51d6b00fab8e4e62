"""Notification sink - logs operator messages and records them in the activity log."""

from __future__ import annotations

import logging

from yieldprop_sync.interfaces.store import StateStore
from yieldprop_sync.models.records import NotifyLevel

log = logging.getLogger(__name__)

_LOG_LEVELS = {
    NotifyLevel.INFO: logging.INFO,
    NotifyLevel.SUCCESS: logging.INFO,
    NotifyLevel.ERROR: logging.ERROR,
}


class ActivityNotifier:
    """Writes every notification to the log and, when given, the state store."""

    def __init__(self, store: StateStore | None = None) -> None:
        self._store = store

    async def notify(self, level: NotifyLevel, message: str, link: str | None = None) -> None:
        suffix = f" ({link})" if link else ""
        log.log(_LOG_LEVELS.get(level, logging.INFO), "[%s] %s%s", level.value, message, suffix)
        if self._store is not None:
            await self._store.log_activity(level.value, message, link)
