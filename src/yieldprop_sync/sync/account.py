"""Active account holder - every cached read is scoped to it."""

from __future__ import annotations

import logging

from yieldprop_sync.sync.cache import CacheInvalidationBus

log = logging.getLogger(__name__)


class ActiveAccount:
    """The address controlling the session, or None.

    Switching from one account to another flushes the read cache; the
    first assignment does not.
    """

    def __init__(self, bus: CacheInvalidationBus, address: str | None = None) -> None:
        self._bus = bus
        self._address = address
        self._seen = address is not None

    @property
    def address(self) -> str | None:
        return self._address

    def set(self, address: str | None) -> None:
        previous = self._address
        self._address = address
        if self._seen and _normalize(previous) != _normalize(address):
            log.info("Active account changed: %s -> %s", previous, address)
            self._bus.invalidate_all()
        self._seen = True


def _normalize(address: str | None) -> str | None:
    return address.lower() if address else None
