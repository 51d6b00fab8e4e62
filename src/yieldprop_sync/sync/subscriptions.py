"""Event subscription manager - one watch per (contract, event), routed by kind."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from yieldprop_sync.abis import Abi
from yieldprop_sync.interfaces.notifier import NotificationSink
from yieldprop_sync.interfaces.watcher import LogHandler, LogWatcher, Unsubscribe
from yieldprop_sync.models.config import ContractSet
from yieldprop_sync.models.events import WatchedEvent
from yieldprop_sync.models.records import HandlerKind, NotifyLevel
from yieldprop_sync.sync.cache import CacheInvalidationBus
from yieldprop_sync.sync.registration import RegistrationCoordinator

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class WatchSpec:
    """One row of the subscription table."""

    contract_id: str
    event_name: str
    kind: HandlerKind
    message: str | None = None
    level: NotifyLevel = NotifyLevel.INFO


_NOTIFY = HandlerKind.INVALIDATE_AND_NOTIFY

WATCH_TABLE: list[WatchSpec] = [
    # PriceManager
    WatchSpec("PriceManager", "RecommendationSubmitted", _NOTIFY, "New AI recommendation received"),
    WatchSpec("PriceManager", "RecommendationAccepted", _NOTIFY, "Rental price updated", NotifyLevel.SUCCESS),
    WatchSpec("PriceManager", "RecommendationRejected", _NOTIFY, "Recommendation rejected"),
    WatchSpec("PriceManager", "RentalPriceUpdated", _NOTIFY, "Rental price updated", NotifyLevel.SUCCESS),
    # YieldDistributor
    WatchSpec("YieldDistributor", "RentalPaymentReceived", _NOTIFY, "Rental payment received"),
    WatchSpec(
        "YieldDistributor", "YieldsDistributed", _NOTIFY,
        "Yields distributed to token holders", NotifyLevel.SUCCESS,
    ),
    WatchSpec("YieldDistributor", "YieldTransferred", HandlerKind.INVALIDATE_ONLY),
    # PropertyToken
    WatchSpec("PropertyToken", "WhitelistUpdated", _NOTIFY, "Whitelist updated"),
    WatchSpec("PropertyToken", "Transfer", HandlerKind.INVALIDATE_AND_MAYBE_REGISTER),
    # PropertySale (buyer is registered on-chain by the sale contract)
    WatchSpec("PropertySale", "TokensPurchased", _NOTIFY, "Property tokens purchased"),
]


class EventSubscriptionManager:
    """Keeps one live subscription per (contract address, event name).

    Every delivered event flushes the read cache. Depending on the table
    row it may also notify, or hand the transfer recipient to the
    registration coordinator. Handlers do not depend on order within a
    batch.
    """

    def __init__(
        self,
        watcher: LogWatcher,
        contracts: ContractSet,
        abis: dict[str, Abi],
        bus: CacheInvalidationBus,
        notifier: NotificationSink,
        coordinator: RegistrationCoordinator,
        table: list[WatchSpec] | None = None,
    ) -> None:
        self._watcher = watcher
        self._contracts = contracts
        self._abis = abis
        self._bus = bus
        self._notifier = notifier
        self._coordinator = coordinator
        self._table = table if table is not None else WATCH_TABLE
        self._subscriptions: dict[tuple[str, str], Unsubscribe] = {}

    @property
    def subscriptions(self) -> list[tuple[str, str]]:
        return list(self._subscriptions)

    def start(self) -> int:
        """Subscribe to every table row. Returns the number of live subscriptions."""
        for spec in self._table:
            self.subscribe(spec.contract_id, spec.event_name, self._handler_for(spec))
        log.info("Watching %d contract events", len(self._subscriptions))
        return len(self._subscriptions)

    def stop(self) -> None:
        for unsubscribe in self._subscriptions.values():
            unsubscribe()
        self._subscriptions.clear()

    def subscribe(self, contract_id: str, event_name: str, handler: LogHandler) -> bool:
        """Subscribe once per (contract, event). Returns False for a duplicate."""
        address = self._contracts.address_of(contract_id)
        if not address:
            log.warning("No %s address configured, not watching %s", contract_id, event_name)
            return False
        key = (address.lower(), event_name)
        if key in self._subscriptions:
            return False
        self._subscriptions[key] = self._watcher.watch(
            contract_id, address, self._abis[contract_id], event_name, handler,
        )
        log.debug("Subscribed to %s.%s at %s", contract_id, event_name, address)
        return True

    def _handler_for(self, spec: WatchSpec) -> LogHandler:
        handlers: dict[HandlerKind, Callable[[WatchSpec], LogHandler]] = {
            HandlerKind.INVALIDATE_ONLY: self._invalidate_only,
            HandlerKind.INVALIDATE_AND_NOTIFY: self._invalidate_and_notify,
            HandlerKind.INVALIDATE_AND_MAYBE_REGISTER: self._invalidate_and_maybe_register,
        }
        return handlers[spec.kind](spec)

    def _invalidate_only(self, spec: WatchSpec) -> LogHandler:
        async def handle(events: list[WatchedEvent]) -> None:
            for _ in events:
                self._bus.invalidate_all()
            log.debug("%s.%s: %d log(s)", spec.contract_id, spec.event_name, len(events))

        return handle

    def _invalidate_and_notify(self, spec: WatchSpec) -> LogHandler:
        async def handle(events: list[WatchedEvent]) -> None:
            if not events:
                return
            for _ in events:
                self._bus.invalidate_all()
            log.info("%s.%s: %d log(s)", spec.contract_id, spec.event_name, len(events))
            await self._notifier.notify(spec.level, spec.message or spec.event_name)

        return handle

    def _invalidate_and_maybe_register(self, spec: WatchSpec) -> LogHandler:
        async def handle(events: list[WatchedEvent]) -> None:
            for _ in events:
                self._bus.invalidate_all()
            for event in events:
                await self._coordinator.consider(event.recipient)

        return handle
