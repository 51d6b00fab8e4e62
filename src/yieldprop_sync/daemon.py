"""Main daemon loop - wires all components together."""

from __future__ import annotations

import asyncio
import logging
import signal

from eth_account import Account
from web3 import AsyncWeb3

from yieldprop_sync.abis import load_abis
from yieldprop_sync.evm.client import close_web3, make_web3
from yieldprop_sync.evm.reader import Web3ContractReader
from yieldprop_sync.evm.receipts import Web3ReceiptProvider
from yieldprop_sync.evm.watcher import Web3LogWatcher
from yieldprop_sync.evm.writer import Web3ContractWriter
from yieldprop_sync.interfaces import (
    ContractReader,
    ContractWriter,
    PollingLogWatcher,
    ReceiptProvider,
    StateStore,
)
from yieldprop_sync.models.config import DaemonConfig
from yieldprop_sync.notify.sink import ActivityNotifier
from yieldprop_sync.storage.sqlite import SQLiteStateStore
from yieldprop_sync.sync.account import ActiveAccount
from yieldprop_sync.sync.cache import CacheInvalidationBus, CachedContractReader, QueryCache
from yieldprop_sync.sync.confirmation import TransactionConfirmationTracker
from yieldprop_sync.sync.errors import describe_error
from yieldprop_sync.sync.registration import HolderRegistry, RegistrationCoordinator
from yieldprop_sync.sync.roles import RoleGate
from yieldprop_sync.sync.subscriptions import EventSubscriptionManager

log = logging.getLogger(__name__)


class SyncDaemon:
    """Chain-event sync and holder auto-registration daemon.

    Subscribes to the property contracts' events, keeps the shared read
    cache honest, and registers new token holders for yields when the
    configured account is a property manager. Collaborators default to
    the web3 implementations and can be injected for tests.
    """

    def __init__(
        self,
        cfg: DaemonConfig,
        *,
        watcher: PollingLogWatcher | None = None,
        reader: ContractReader | None = None,
        writer: ContractWriter | None = None,
        receipts: ReceiptProvider | None = None,
        store: StateStore | None = None,
        registry: HolderRegistry | None = None,
    ) -> None:
        self._cfg = cfg
        self._running = False

        if writer is None and not cfg.private_key:
            raise ValueError("A private key is required to sign registration transactions")

        self._w3: AsyncWeb3 | None = None
        if watcher is None or reader is None or writer is None or receipts is None:
            self._w3 = make_web3(cfg.rpc_url)

        account_address = Account.from_key(cfg.private_key).address if cfg.private_key else None
        abis = load_abis(cfg.abi_dir)
        distributor = cfg.contracts.YieldDistributor

        # Chain collaborators
        self.store = store or SQLiteStateStore(cfg.db_path)
        self.notifier = ActivityNotifier(self.store)
        self.watcher = watcher or Web3LogWatcher(
            self._w3, cfg.start_block, cfg.log_chunk_size, notifier=self.notifier,
        )
        self.reader = reader or Web3ContractReader(self._w3)
        self.writer = writer or Web3ContractWriter(self._w3, cfg.private_key, cfg.chain_id)
        self.receipts = receipts or Web3ReceiptProvider(self._w3, cfg.receipt_timeout)

        # Core components
        self.cache = QueryCache()
        self.bus = CacheInvalidationBus(self.cache)
        self.account = ActiveAccount(self.bus, account_address)
        self.role_gate = RoleGate(
            self.reader, distributor, abis["YieldDistributor"],
            role_reader=CachedContractReader(self.reader, self.cache),
        )
        self.tracker = TransactionConfirmationTracker(self.receipts, self.bus)
        self.coordinator = RegistrationCoordinator(
            distributor_address=distributor,
            distributor_abi=abis["YieldDistributor"],
            account=self.account,
            role_gate=self.role_gate,
            reader=self.reader,
            writer=self.writer,
            tracker=self.tracker,
            notifier=self.notifier,
            registry=registry,
            store=self.store,
            explorer_url=cfg.explorer_url,
            settle_timeout=cfg.registration_timeout,
            skip_registered=cfg.skip_registered,
        )
        self.subscriptions = EventSubscriptionManager(
            self.watcher, cfg.contracts, abis, self.bus, self.notifier, self.coordinator,
        )

    @property
    def is_running(self) -> bool:
        return self._running

    def set_active_account(self, address: str | None) -> None:
        """Switch the session account. Flushes every cached read."""
        self.account.set(address)

    async def start(self) -> None:
        """Initialize components and run the main loop."""
        log.info("Starting yieldprop_sync daemon")
        log.info("  Property: %s", self._cfg.property_id)
        log.info("  Account: %s", self.account.address or "(none)")
        log.info("  Distributor: %s", self._cfg.contracts.YieldDistributor)
        log.info("  RPC: %s", self._cfg.rpc_url)

        await self.store.initialize()

        # Restore cursor from last run
        saved_block = await self.store.get_cursor()
        if saved_block is not None:
            self.watcher.set_cursor(saved_block)
            log.info("Restored cursor: block %d", saved_block)

        self.subscriptions.start()
        self._running = True
        await self.store.log_activity("info", "Sync daemon started")

        try:
            await self._main_loop()
        finally:
            self._running = False
            self.subscriptions.stop()
            await self.coordinator.cancel_all()
            await self.store.log_activity("info", "Sync daemon stopped")
            await self.store.close()
            if self._w3 is not None:
                await close_web3(self._w3)
            log.info("Daemon shut down cleanly")

    async def stop(self) -> None:
        """Signal the daemon to stop gracefully."""
        log.info("Stop requested")
        self._running = False

    async def poll_once(self) -> int:
        """Deliver one block range of events and persist the cursor."""
        delivered = await self.watcher.poll()
        cursor = self.watcher.cursor
        if cursor is not None:
            await self.store.set_cursor(cursor)
        return delivered

    async def _main_loop(self) -> None:
        while self._running:
            try:
                await self.poll_once()
                await asyncio.sleep(self._cfg.poll_interval)

            except asyncio.CancelledError:
                log.info("Main loop cancelled")
                break
            except Exception as exc:
                log.error("Main loop error: %s", exc, exc_info=True)
                await self.store.log_activity("error", describe_error(exc))
                await asyncio.sleep(self._cfg.error_backoff)


async def run_daemon(cfg: DaemonConfig) -> None:
    """Entry point for running the daemon."""
    daemon = SyncDaemon(cfg)

    loop = asyncio.get_running_loop()

    def _signal_handler():
        asyncio.ensure_future(daemon.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    await daemon.start()
