"""Contract event models decoded from the EVM log stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class WatchedEvent:
    """A single decoded log for a watched (contract, event) pair.

    Produced by the log watcher, consumed once by a handler, then dropped.
    """

    contract_id: str  # logical contract name, e.g. "PropertyToken"
    event_name: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    address: str = ""
    block_number: int | None = None
    tx_hash: str | None = None
    log_index: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    @property
    def recipient(self) -> str | None:
        """The ``to`` argument of a transfer-shaped event, if present."""
        to = self.payload.get("to")
        return str(to) if to else None
