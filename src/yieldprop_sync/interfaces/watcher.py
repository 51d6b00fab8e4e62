"""LogWatcher protocol - delivers decoded contract logs in batches."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol

from yieldprop_sync.models.events import WatchedEvent

LogHandler = Callable[[list[WatchedEvent]], Awaitable[None]]
Unsubscribe = Callable[[], None]


class LogWatcher(Protocol):
    """Subscribes to one contract event and delivers log batches to a handler.

    Reconnection and backlog replay are the watcher's responsibility.
    """

    def watch(
        self,
        contract_id: str,
        address: str,
        abi: list[dict[str, Any]],
        event_name: str,
        on_logs: LogHandler,
    ) -> Unsubscribe:
        """Start delivering ``event_name`` logs emitted by ``address``."""
        ...


class PollingLogWatcher(LogWatcher, Protocol):
    """A LogWatcher driven by the daemon loop with a resumable block cursor."""

    @property
    def cursor(self) -> int | None:
        """Next block to scan."""
        ...

    def set_cursor(self, block: int) -> None:
        ...

    async def poll(self) -> int:
        """Deliver the next range of logs. Returns the number delivered."""
        ...
