"""ReadCache protocol - shared cache of on-chain reads."""

from __future__ import annotations

from typing import Protocol


class ReadCache(Protocol):
    """Cache of contract reads that can be marked stale by scope."""

    def invalidate(self, scope_key: str) -> None:
        """Mark every entry under ``scope_key`` stale."""
        ...
