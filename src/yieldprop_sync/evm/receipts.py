"""Transaction receipts through AsyncWeb3."""

from __future__ import annotations

import logging

from web3 import AsyncWeb3
from web3.exceptions import TimeExhausted

from yieldprop_sync.models.records import ReceiptResult

log = logging.getLogger(__name__)


class Web3ReceiptProvider:
    """Polls for a receipt; status 1 is success, anything else a failure."""

    def __init__(self, w3: AsyncWeb3, timeout: int = 300, poll_latency: float = 2.0) -> None:
        self._w3 = w3
        self._timeout = timeout
        self._poll_latency = poll_latency

    async def wait_for_receipt(self, tx_hash: str) -> ReceiptResult:
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._timeout, poll_latency=self._poll_latency,
            )
        except TimeExhausted:
            log.warning("No receipt for %s after %ds", tx_hash[:18], self._timeout)
            return ReceiptResult(success=False, tx_hash=tx_hash, error="receipt_timeout")
        except Exception as exc:
            log.error("Receipt lookup for %s failed: %s", tx_hash[:18], exc)
            return ReceiptResult(success=False, tx_hash=tx_hash, error=str(exc))

        ok = receipt["status"] == 1
        return ReceiptResult(
            success=ok,
            tx_hash=tx_hash,
            block_number=receipt["blockNumber"],
            error=None if ok else "transaction reverted",
        )
