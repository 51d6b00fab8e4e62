"""Contract writes - simulate, sign with the daemon key, submit."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

from eth_account import Account
from web3 import AsyncWeb3, Web3
from web3.exceptions import ContractLogicError

from yieldprop_sync.models.records import WriteResult

log = logging.getLogger(__name__)


class Web3ContractWriter:
    """Submits transactions signed by a local private key.

    Every write is simulated with ``eth_call`` first so reverts surface
    before gas is spent. Nonce allocation and submission are serialized.
    """

    def __init__(self, w3: AsyncWeb3, private_key: str, chain_id: int) -> None:
        self._w3 = w3
        self._account = Account.from_key(private_key)
        self._chain_id = chain_id
        self._lock = asyncio.Lock()

    @property
    def address(self) -> str:
        return self._account.address

    async def write(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> WriteResult:
        log.info("Submitting %s on %s", function_name, address[:10])
        contract = self._w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
        fn = getattr(contract.functions, function_name)(*args)

        try:
            await fn.call({"from": self.address})
        except ContractLogicError as exc:
            log.warning("%s simulation reverted: %s", function_name, exc)
            return WriteResult(success=False, error=f"simulation_failed: {exc}")
        except Exception as exc:
            log.error("%s simulation failed: %s", function_name, exc)
            return WriteResult(success=False, error=str(exc))

        try:
            async with self._lock:
                nonce = await self._w3.eth.get_transaction_count(self.address, "pending")
                tx = await fn.build_transaction({
                    "from": self.address,
                    "nonce": nonce,
                    "chainId": self._chain_id,
                })
                signed = self._account.sign_transaction(tx)
                raw_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as exc:
            log.error("%s submission failed: %s", function_name, exc)
            return WriteResult(success=False, error=str(exc))

        tx_hash = Web3.to_hex(raw_hash)
        log.info("%s submitted (tx=%s)", function_name, tx_hash[:18])
        return WriteResult(success=True, tx_hash=tx_hash)
