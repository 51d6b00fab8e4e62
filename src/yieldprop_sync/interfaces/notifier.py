"""NotificationSink protocol - user-visible messages."""

from __future__ import annotations

from typing import Protocol

from yieldprop_sync.models.records import NotifyLevel


class NotificationSink(Protocol):
    """Receives success/info/error messages destined for the operator."""

    async def notify(self, level: NotifyLevel, message: str, link: str | None = None) -> None:
        ...
