"""EVM log watcher - polls eth_getLogs for watched contract events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from web3 import AsyncWeb3, Web3

from yieldprop_sync.interfaces.notifier import NotificationSink
from yieldprop_sync.interfaces.watcher import LogHandler, Unsubscribe
from yieldprop_sync.models.events import WatchedEvent
from yieldprop_sync.models.records import NotifyLevel

log = logging.getLogger(__name__)


def event_topic(abi: list[dict[str, Any]], event_name: str) -> str:
    """Compute topic0 for ``event_name`` from its ABI entry."""
    for entry in abi:
        if entry.get("type") == "event" and entry.get("name") == event_name:
            types = ",".join(i["type"] for i in entry.get("inputs", []))
            return Web3.to_hex(Web3.keccak(text=f"{event_name}({types})"))
    raise KeyError(f"Event {event_name} not in ABI")


@dataclass
class _Subscription:
    contract_id: str
    address: str
    event_name: str
    topic: str
    contract: Any
    on_logs: LogHandler


class Web3LogWatcher:
    """Delivers decoded logs for every registered (contract, event) pair.

    All subscriptions share one block cursor. Each ``poll()`` scans the next
    block range and hands each subscription the batch of logs it matched.
    A failed fetch raises and leaves the cursor untouched, so the same
    range is scanned again on the next poll. A failing handler does not
    hold the cursor back; the failure goes to ``notifier`` when given.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        start_block: int | None = None,
        chunk_size: int = 2000,
        notifier: NotificationSink | None = None,
    ) -> None:
        self._w3 = w3
        self._notifier = notifier
        self._cursor: int | None = start_block
        self._chunk_size = chunk_size
        self._subs: list[_Subscription] = []

    @property
    def cursor(self) -> int | None:
        """Next block to scan."""
        return self._cursor

    def set_cursor(self, block: int) -> None:
        """Restore cursor from persisted state."""
        self._cursor = block

    def watch(
        self,
        contract_id: str,
        address: str,
        abi: list[dict[str, Any]],
        event_name: str,
        on_logs: LogHandler,
    ) -> Unsubscribe:
        checksum = Web3.to_checksum_address(address)
        sub = _Subscription(
            contract_id=contract_id,
            address=checksum,
            event_name=event_name,
            topic=event_topic(abi, event_name),
            contract=self._w3.eth.contract(address=checksum, abi=abi),
            on_logs=on_logs,
        )
        self._subs.append(sub)

        def unsubscribe() -> None:
            if sub in self._subs:
                self._subs.remove(sub)

        return unsubscribe

    async def poll(self) -> int:
        """Scan the next block range. Returns the number of events delivered."""
        latest = await self._w3.eth.block_number
        if self._cursor is None:
            self._cursor = latest
            log.info("No cursor, starting from latest block %d", latest)
        if self._cursor > latest:
            return 0

        from_block = self._cursor
        to_block = min(latest, from_block + self._chunk_size - 1)

        batches: list[tuple[_Subscription, list[WatchedEvent]]] = []
        for sub in list(self._subs):
            raw_logs = await self._w3.eth.get_logs({
                "fromBlock": from_block,
                "toBlock": to_block,
                "address": sub.address,
                "topics": [sub.topic],
            })
            events = [e for e in (self._decode(sub, raw) for raw in raw_logs) if e is not None]
            if events:
                batches.append((sub, events))

        delivered = 0
        for sub, events in batches:
            try:
                await sub.on_logs(events)
                delivered += len(events)
            except Exception as exc:
                log.error(
                    "Handler for %s.%s failed: %s",
                    sub.contract_id, sub.event_name, exc, exc_info=True,
                )
                if self._notifier is not None:
                    await self._notifier.notify(
                        NotifyLevel.ERROR,
                        f"Handling {len(events)} {sub.contract_id}.{sub.event_name} event(s) failed: {exc}",
                    )

        self._cursor = to_block + 1
        if delivered:
            log.info("Delivered %d events from blocks %d-%d", delivered, from_block, to_block)
        return delivered

    def _decode(self, sub: _Subscription, raw: Any) -> WatchedEvent | None:
        try:
            decoded = getattr(sub.contract.events, sub.event_name)().process_log(raw)
        except Exception as exc:
            log.warning("Could not decode %s.%s log: %s", sub.contract_id, sub.event_name, exc)
            return None
        return WatchedEvent(
            contract_id=sub.contract_id,
            event_name=sub.event_name,
            payload=dict(decoded["args"]),
            address=sub.address,
            block_number=decoded["blockNumber"],
            tx_hash=Web3.to_hex(decoded["transactionHash"]),
            log_index=decoded["logIndex"],
        )
