"""ContractWriter protocol - submits state-changing contract calls."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from yieldprop_sync.models.records import WriteResult


class ContractWriter(Protocol):
    """Builds, signs and submits a contract write.

    Returns as soon as the transaction is accepted by the node; the
    terminal outcome is observed through a ReceiptProvider.
    """

    async def write(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> WriteResult:
        ...
