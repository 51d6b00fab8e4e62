"""ReceiptProvider protocol - awaits transaction inclusion."""

from __future__ import annotations

from typing import Protocol

from yieldprop_sync.models.records import ReceiptResult


class ReceiptProvider(Protocol):
    """Waits for the terminal on-chain outcome of a transaction."""

    async def wait_for_receipt(self, tx_hash: str) -> ReceiptResult:
        ...
