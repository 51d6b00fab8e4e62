"""Transaction confirmation tracker - invalidates reads once a write lands."""

from __future__ import annotations

import logging
from collections import OrderedDict

from yieldprop_sync.interfaces.receipts import ReceiptProvider
from yieldprop_sync.models.records import ReceiptResult
from yieldprop_sync.sync.cache import CacheInvalidationBus

log = logging.getLogger(__name__)


class TransactionConfirmationTracker:
    """Waits for a submitted transaction and flushes the cache on success.

    Invalidation happens on confirmed inclusion only, never on submission,
    and at most once per transaction hash. Only the most recent
    ``max_tracked`` confirmed hashes are remembered.
    """

    def __init__(
        self,
        receipts: ReceiptProvider,
        bus: CacheInvalidationBus,
        max_tracked: int = 1024,
    ) -> None:
        self._receipts = receipts
        self._bus = bus
        self._max_tracked = max_tracked
        self._confirmed: OrderedDict[str, None] = OrderedDict()

    def __len__(self) -> int:
        return len(self._confirmed)

    def is_confirmed(self, tx_hash: str | None) -> bool:
        return bool(tx_hash) and tx_hash.lower() in self._confirmed

    async def wait(self, tx_hash: str) -> ReceiptResult:
        """Await the receipt and apply the confirmation side effect."""
        result = await self._receipts.wait_for_receipt(tx_hash)
        key = tx_hash.lower()
        if result.success and key not in self._confirmed:
            self._confirmed[key] = None
            while len(self._confirmed) > self._max_tracked:
                self._confirmed.popitem(last=False)
            log.info("Tx %s confirmed in block %s", tx_hash[:18], result.block_number)
            self._bus.invalidate_all()
        elif not result.success:
            log.warning("Tx %s did not confirm: %s", tx_hash[:18], result.error)
        return result

    async def track(self, tx_hash: str | None) -> bool:
        """Return the confirmation flag for ``tx_hash``; inert when None."""
        if not tx_hash:
            return False
        if self.is_confirmed(tx_hash):
            return True
        result = await self.wait(tx_hash)
        return result.success
