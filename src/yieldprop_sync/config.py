"""Configuration loading: TOML file + environment variables + properties.json."""

from __future__ import annotations

import json
import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from yieldprop_sync.models.config import CONTRACT_IDS, ContractSet, DaemonConfig


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "YIELDPROP_SYNC_",
) -> DaemonConfig:
    """Load daemon configuration from TOML file, env vars, and properties.json.

    Priority (highest wins):
        1. Environment variables (YIELDPROP_SYNC_SECRET, etc.)
        2. TOML config file
        3. Defaults from DaemonConfig

    Contract addresses come from the ``[contracts]`` table when it names
    any; otherwise from the entry matching ``property_id`` in the
    properties file.
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = DaemonConfig()

    # ── Daemon section ─────────────────────────────────────
    daemon = raw.get("daemon", {})
    if v := daemon.get("poll_interval"):
        cfg.poll_interval = int(v)
    if v := daemon.get("error_backoff"):
        cfg.error_backoff = int(v)
    if v := daemon.get("log_level"):
        cfg.log_level = str(v)
    if (v := daemon.get("registration_timeout")) is not None:
        cfg.registration_timeout = int(v)
    if (v := daemon.get("skip_registered")) is not None:
        cfg.skip_registered = bool(v)

    # ── Chain section ──────────────────────────────────────
    chain = raw.get("chain", {})
    if v := chain.get("network"):
        cfg.network = str(v)
    if v := chain.get("rpc_url"):
        cfg.rpc_url = str(v)
    if v := chain.get("chain_id"):
        cfg.chain_id = int(v)
    if v := chain.get("private_key"):
        cfg.private_key = str(v)
    if (v := chain.get("start_block")) is not None:
        cfg.start_block = int(v)
    if v := chain.get("explorer_url"):
        cfg.explorer_url = str(v)
    if v := chain.get("receipt_timeout"):
        cfg.receipt_timeout = int(v)
    if v := chain.get("log_chunk_size"):
        cfg.log_chunk_size = int(v)

    # ── Contracts section ──────────────────────────────────
    contracts = raw.get("contracts", {})
    if v := contracts.get("property_id"):
        cfg.property_id = str(v)
    if v := contracts.get("properties_path"):
        cfg.properties_path = str(v)
    if v := contracts.get("abi_dir"):
        cfg.abi_dir = str(v)
    for contract_id in CONTRACT_IDS:
        if v := contracts.get(contract_id):
            setattr(cfg.contracts, contract_id, str(v))

    # ── Storage section ────────────────────────────────────
    storage = raw.get("storage", {})
    if v := storage.get("db_path"):
        cfg.db_path = str(v)

    # ── Environment variable overrides (highest priority) ──
    if secret := os.environ.get(f"{env_prefix}SECRET"):
        cfg.private_key = secret
    if rpc := os.environ.get(f"{env_prefix}RPC_URL"):
        cfg.rpc_url = rpc
    if chain_id := os.environ.get(f"{env_prefix}CHAIN_ID"):
        cfg.chain_id = int(chain_id)
    if prop := os.environ.get(f"{env_prefix}PROPERTY_ID"):
        cfg.property_id = prop
    if path := os.environ.get(f"{env_prefix}PROPERTIES_PATH"):
        cfg.properties_path = path
    if db := os.environ.get(f"{env_prefix}DB_PATH"):
        cfg.db_path = db

    # Fall back to the properties file when no address was given explicitly
    if cfg.properties_path and len(cfg.contracts.missing()) == len(CONTRACT_IDS):
        _load_properties(cfg, cfg.properties_path)

    # Expand ~ in paths
    if cfg.db_path != ":memory:":
        cfg.db_path = str(Path(cfg.db_path).expanduser())

    return cfg


def _load_properties(cfg: DaemonConfig, properties_path: str) -> None:
    """Load contract addresses for ``cfg.property_id`` from a properties JSON array.

    Each entry looks like ``{"id": "prop-1", "name": ..., "contracts": {...}}``.
    When no entry matches, the first one is used.
    """
    p = Path(properties_path).expanduser()
    if not p.is_absolute():
        # Try relative to CWD
        p = Path.cwd() / p
    if not p.exists():
        return

    with open(p) as f:
        data = json.load(f)
    if not isinstance(data, list) or not data:
        return

    entry = next((e for e in data if e.get("id") == cfg.property_id), data[0])
    cfg.property_id = str(entry.get("id", cfg.property_id))
    addresses = entry.get("contracts", {})
    cfg.contracts = ContractSet(**{
        cid: str(addresses.get(cid, "")) for cid in CONTRACT_IDS
    })
