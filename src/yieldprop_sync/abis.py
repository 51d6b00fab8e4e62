"""Minimal ABI fragments for the YieldProp property contracts.

Only the events the daemon watches and the functions it calls are listed.
Full ABIs synced from the contracts build can replace these through the
``abi_dir`` setting (see ``load_abis``).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from yieldprop_sync.models.config import CONTRACT_IDS

log = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

Abi = list[dict[str, Any]]


def _arg(name: str, type_: str, indexed: bool | None = None) -> dict[str, Any]:
    entry: dict[str, Any] = {"name": name, "type": type_, "internalType": type_}
    if indexed is not None:
        entry["indexed"] = indexed
    return entry


def _event(name: str, *inputs: dict[str, Any]) -> dict[str, Any]:
    return {"anonymous": False, "inputs": list(inputs), "name": name, "type": "event"}


def _view(name: str, inputs: list[dict[str, Any]], output_type: str) -> dict[str, Any]:
    return {
        "inputs": inputs,
        "name": name,
        "outputs": [_arg("", output_type)],
        "stateMutability": "view",
        "type": "function",
    }


def _write(name: str, inputs: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "inputs": inputs,
        "name": name,
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    }


PROPERTY_TOKEN_ABI: Abi = [
    _event(
        "Transfer",
        _arg("from", "address", True),
        _arg("to", "address", True),
        _arg("value", "uint256", False),
    ),
    _event(
        "WhitelistUpdated",
        _arg("account", "address", True),
        _arg("status", "bool", False),
    ),
]

PRICE_MANAGER_ABI: Abi = [
    _event(
        "RecommendationSubmitted",
        _arg("recommendationId", "uint256", True),
        _arg("recommendedPrice", "uint256", False),
        _arg("confidence", "uint256", False),
        _arg("reasoning", "string", False),
        _arg("submitter", "address", True),
    ),
    _event(
        "RecommendationAccepted",
        _arg("recommendationId", "uint256", True),
        _arg("newPrice", "uint256", False),
        _arg("acceptedBy", "address", True),
    ),
    _event(
        "RecommendationRejected",
        _arg("recommendationId", "uint256", True),
        _arg("rejectedBy", "address", True),
    ),
    _event(
        "RentalPriceUpdated",
        _arg("oldPrice", "uint256", False),
        _arg("newPrice", "uint256", False),
    ),
]

YIELD_DISTRIBUTOR_ABI: Abi = [
    _event(
        "RentalPaymentReceived",
        _arg("amount", "uint256", False),
        _arg("timestamp", "uint256", False),
        _arg("payer", "address", True),
    ),
    _event(
        "YieldsDistributed",
        _arg("totalAmount", "uint256", False),
        _arg("holderCount", "uint256", False),
        _arg("timestamp", "uint256", False),
    ),
    _event(
        "YieldTransferred",
        _arg("holder", "address", True),
        _arg("amount", "uint256", False),
    ),
    _view("PROPERTY_MANAGER_ROLE", [], "bytes32"),
    _view("hasRole", [_arg("role", "bytes32"), _arg("account", "address")], "bool"),
    _view("isRegisteredHolder", [_arg("holder", "address")], "bool"),
    _write("registerHolder", [_arg("holder", "address")]),
]

PROPERTY_SALE_ABI: Abi = [
    _event(
        "TokensPurchased",
        _arg("buyer", "address", True),
        _arg("amount", "uint256", False),
        _arg("cost", "uint256", False),
    ),
]

ABIS: dict[str, Abi] = {
    "PropertyToken": PROPERTY_TOKEN_ABI,
    "PriceManager": PRICE_MANAGER_ABI,
    "YieldDistributor": YIELD_DISTRIBUTOR_ABI,
    "PropertySale": PROPERTY_SALE_ABI,
}


def load_abis(abi_dir: str | Path | None = None) -> dict[str, Abi]:
    """Return the ABI table, overriding fragments with ``<Contract>.json`` files.

    A file may hold either a bare ABI list or a build artifact with an
    ``abi`` key.
    """
    abis = dict(ABIS)
    if not abi_dir:
        return abis

    root = Path(abi_dir).expanduser()
    for contract_id in CONTRACT_IDS:
        p = root / f"{contract_id}.json"
        if not p.exists():
            continue
        with open(p) as f:
            data = json.load(f)
        abi = data.get("abi") if isinstance(data, dict) else data
        if not isinstance(abi, list):
            log.warning("Ignoring %s: no ABI list found", p)
            continue
        abis[contract_id] = abi
        log.debug("Loaded %s ABI from %s", contract_id, p)
    return abis
