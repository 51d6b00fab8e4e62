"""Shared read cache and the bus that invalidates it."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Hashable, Sequence

from yieldprop_sync.interfaces.cache import ReadCache
from yieldprop_sync.interfaces.reader import ContractReader

log = logging.getLogger(__name__)

# Scope covering every on-chain-sourced read.
READ_CONTRACT_SCOPE = "readContract"

CacheKey = tuple[Hashable, ...]


@dataclass
class _Entry:
    value: Any
    fetched_at: float
    stale: bool = False


class QueryCache:
    """In-memory cache of contract reads keyed by tuples.

    The first element of every key is its scope, so ``invalidate(scope)``
    marks a whole family of reads stale at once. Stale entries keep their
    last value for ``peek`` but are refetched on the next ``get``.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: CacheKey, fetch: Callable[[], Awaitable[Any]]) -> Any:
        """Return a fresh cached value, refetching when missing or stale."""
        entry = self._entries.get(key)
        if entry is not None and not entry.stale:
            return entry.value
        value = await fetch()
        self._entries[key] = _Entry(value=value, fetched_at=time.monotonic())
        return value

    def peek(self, key: CacheKey) -> Any | None:
        entry = self._entries.get(key)
        return entry.value if entry else None

    def is_stale(self, key: CacheKey) -> bool:
        entry = self._entries.get(key)
        return entry is None or entry.stale

    def drop(self, key: CacheKey) -> None:
        self._entries.pop(key, None)

    def invalidate(self, scope_key: str) -> None:
        for key, entry in self._entries.items():
            if key and key[0] == scope_key:
                entry.stale = True


class CachedContractReader:
    """ContractReader front that serves repeat reads from a QueryCache.

    Failed reads (``None``) are not cached.
    """

    def __init__(self, reader: ContractReader, cache: QueryCache) -> None:
        self._reader = reader
        self._cache = cache

    async def read(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> Any | None:
        key: CacheKey = (READ_CONTRACT_SCOPE, address.lower(), function_name, *args)
        value = await self._cache.get(
            key, lambda: self._reader.read(address, abi, function_name, args),
        )
        if value is None:
            self._cache.drop(key)
        return value


class CacheInvalidationBus:
    """Marks every on-chain read stale. Idempotent and safe to call often."""

    def __init__(self, cache: ReadCache) -> None:
        self._cache = cache
        self._invalidations = 0

    @property
    def invalidations(self) -> int:
        return self._invalidations

    def invalidate_all(self) -> None:
        self._cache.invalidate(READ_CONTRACT_SCOPE)
        self._invalidations += 1
        log.debug("Read cache invalidated (#%d)", self._invalidations)
