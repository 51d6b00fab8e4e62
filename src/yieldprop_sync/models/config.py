"""Configuration models for the sync daemon."""

from __future__ import annotations

from dataclasses import dataclass, field

CONTRACT_IDS = ("PropertyToken", "PriceManager", "YieldDistributor", "PropertySale")


@dataclass
class ContractSet:
    """Deployed contract addresses for one tokenized property."""

    PropertyToken: str = ""
    PriceManager: str = ""
    YieldDistributor: str = ""
    PropertySale: str = ""

    def address_of(self, contract_id: str) -> str:
        if contract_id not in CONTRACT_IDS:
            raise KeyError(f"Unknown contract: {contract_id}")
        return getattr(self, contract_id)

    def missing(self) -> list[str]:
        return [cid for cid in CONTRACT_IDS if not getattr(self, cid)]


@dataclass
class DaemonConfig:
    """Complete daemon configuration."""

    # Daemon
    poll_interval: int = 4  # seconds
    error_backoff: int = 15  # seconds
    log_level: str = "info"
    registration_timeout: int = 600  # seconds, 0 disables the watchdog
    skip_registered: bool = True

    # Chain
    network: str = "sepolia"
    rpc_url: str = "https://rpc.sepolia.org"
    chain_id: int = 11155111
    private_key: str = ""  # loaded from env var YIELDPROP_SYNC_SECRET
    start_block: int | None = None  # None = start at latest block
    explorer_url: str = "https://sepolia.etherscan.io"
    receipt_timeout: int = 300  # seconds
    log_chunk_size: int = 2000  # max blocks per eth_getLogs call

    # Contracts
    property_id: str = "default"
    properties_path: str = ""
    abi_dir: str = ""
    contracts: ContractSet = field(default_factory=ContractSet)

    # Storage
    db_path: str = "~/.yieldprop_sync/state.db"
