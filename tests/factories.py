"""Test data factories for building events and addresses."""

from __future__ import annotations

from typing import Any

from yieldprop_sync.abis import ZERO_ADDRESS
from yieldprop_sync.models.events import WatchedEvent

# Contract addresses of the Sepolia demo deployment
TOKEN_ADDRESS = "0x071eB7911Cf4D28a4E558eF0EF6EaAF2C77c596F"
PRICE_MANAGER_ADDRESS = "0xA775Fd6f8240f8F79fbdE07E7246cc077445d5cB"
DISTRIBUTOR_ADDRESS = "0xdFE830ce59c3e66c9E6DC8D8F30a23b02998Da00"
SALE_ADDRESS = "0x5570c6df7efb4F1B0A5637a344d8f6A6215BF099"

HOLDER_A = "0x" + "aa" * 20
HOLDER_C = "0xCcCCccccCCCCcCCCCCCcCcCccCcCCCcCcccccccC"

_CONTRACT_ADDRESSES = {
    "PropertyToken": TOKEN_ADDRESS,
    "PriceManager": PRICE_MANAGER_ADDRESS,
    "YieldDistributor": DISTRIBUTOR_ADDRESS,
    "PropertySale": SALE_ADDRESS,
}


def make_event(
    contract_id: str,
    event_name: str,
    block_number: int = 100,
    log_index: int = 0,
    **payload: Any,
) -> WatchedEvent:
    """Build a decoded contract event."""
    return WatchedEvent(
        contract_id=contract_id,
        event_name=event_name,
        payload=payload,
        address=_CONTRACT_ADDRESSES[contract_id],
        block_number=block_number,
        tx_hash=f"0x{block_number:032x}{log_index:032x}",
        log_index=log_index,
    )


def make_transfer_event(
    to: str = HOLDER_A,
    from_: str = ZERO_ADDRESS,
    value: int = 10**18,
    block_number: int = 100,
    log_index: int = 0,
) -> WatchedEvent:
    """Build a PropertyToken Transfer event."""
    return make_event(
        "PropertyToken",
        "Transfer",
        block_number=block_number,
        log_index=log_index,
        **{"from": from_, "to": to, "value": value},
    )
