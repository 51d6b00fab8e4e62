"""Contract reads through AsyncWeb3 view calls."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from web3 import AsyncWeb3, Web3

log = logging.getLogger(__name__)


class Web3ContractReader:
    """Read-only view calls. Returns None on any failure."""

    def __init__(self, w3: AsyncWeb3) -> None:
        self._w3 = w3

    async def read(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> Any | None:
        try:
            contract = self._w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
            fn = getattr(contract.functions, function_name)(*args)
            return await fn.call()
        except Exception as exc:
            log.warning("%s() on %s failed: %s", function_name, address[:10], exc)
            return None
