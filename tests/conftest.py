"""Shared fixtures for yieldprop_sync tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key

from yieldprop_sync.abis import YIELD_DISTRIBUTOR_ABI
from yieldprop_sync.daemon import SyncDaemon
from yieldprop_sync.models.config import ContractSet, DaemonConfig
from yieldprop_sync.storage.sqlite import SQLiteStateStore
from yieldprop_sync.sync.account import ActiveAccount
from yieldprop_sync.sync.cache import CacheInvalidationBus, QueryCache
from yieldprop_sync.sync.confirmation import TransactionConfirmationTracker
from yieldprop_sync.sync.registration import RegistrationCoordinator
from yieldprop_sync.sync.roles import RoleGate

from tests.factories import (
    DISTRIBUTOR_ADDRESS,
    PRICE_MANAGER_ADDRESS,
    SALE_ADDRESS,
    TOKEN_ADDRESS,
)
from tests.mocks import (
    MockReader,
    MockReceipts,
    MockWatcher,
    MockWriter,
    RecordingNotifier,
)

# Well-known development key (anvil / hardhat account #0)
TEST_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ACCOUNT = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

EXPLORER_BASE = "https://sepolia.etherscan.io"


def etherscan_link(kind: str, id: str, label: str | None = None) -> str:
    """Build an HTML anchor to Etherscan for the report."""
    url = f"{EXPLORER_BASE}/{kind}/{id}"
    text = label or f"{id[:8]}...{id[-4:]}"
    return f'<a href="{url}" target="_blank">{text}</a>'


# ── Report metadata & explorer links ─────────────────────────────


def pytest_configure(config):
    """Add network info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = "Sepolia"
    meta["PropertyToken"] = TOKEN_ADDRESS
    meta["YieldDistributor"] = DISTRIBUTOR_ADDRESS
    meta["Manager Account"] = TEST_ACCOUNT


def pytest_html_results_summary(prefix, summary, postfix):
    """Inject clickable Etherscan links into the report summary."""
    prefix.append(
        '<div style="margin:8px 0;padding:10px;background:#f8f9fa;border:1px solid #dee2e6;'
        'border-radius:4px;font-family:monospace;font-size:13px;">'
        "<strong>Sepolia Explorer Links</strong><br/>"
        f'Token: {etherscan_link("address", TOKEN_ADDRESS, TOKEN_ADDRESS)}<br/>'
        f'Distributor: {etherscan_link("address", DISTRIBUTOR_ADDRESS, DISTRIBUTOR_ADDRESS)}<br/>'
        f'Manager Account: {etherscan_link("address", TEST_ACCOUNT, TEST_ACCOUNT)}'
        "</div>"
    )


def make_contracts() -> ContractSet:
    return ContractSet(
        PropertyToken=TOKEN_ADDRESS,
        PriceManager=PRICE_MANAGER_ADDRESS,
        YieldDistributor=DISTRIBUTOR_ADDRESS,
        PropertySale=SALE_ADDRESS,
    )


def make_test_config(**overrides) -> DaemonConfig:
    """Build a DaemonConfig suitable for testing."""
    defaults = dict(
        poll_interval=1,
        error_backoff=1,
        rpc_url="http://127.0.0.1:8545",
        chain_id=31337,
        private_key=TEST_KEY,
        registration_timeout=5,
        property_id="prop-test",
        contracts=make_contracts(),
        db_path=":memory:",
    )
    defaults.update(overrides)
    return DaemonConfig(**defaults)


@pytest.fixture
def test_config():
    """Default DaemonConfig for tests."""
    return make_test_config()


@pytest.fixture
async def store():
    """Initialized in-memory SQLiteStateStore."""
    s = SQLiteStateStore(":memory:")
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def mock_watcher():
    return MockWatcher()


@pytest.fixture
def mock_reader():
    return MockReader(managers={TEST_ACCOUNT})


@pytest.fixture
def mock_writer():
    return MockWriter(succeed=True)


@pytest.fixture
def mock_receipts():
    return MockReceipts(succeed=True)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def cache():
    return QueryCache()


@pytest.fixture
def bus(cache):
    return CacheInvalidationBus(cache)


@pytest.fixture
def account(bus):
    return ActiveAccount(bus, TEST_ACCOUNT)


@pytest.fixture
def role_gate(mock_reader):
    return RoleGate(mock_reader, DISTRIBUTOR_ADDRESS, YIELD_DISTRIBUTOR_ABI)


@pytest.fixture
def tracker(mock_receipts, bus):
    return TransactionConfirmationTracker(mock_receipts, bus)


def make_coordinator(
    *, account, role_gate, reader, writer, tracker, notifier, **overrides,
) -> RegistrationCoordinator:
    """Build a RegistrationCoordinator pointed at the test distributor."""
    kwargs = dict(
        distributor_address=DISTRIBUTOR_ADDRESS,
        distributor_abi=YIELD_DISTRIBUTOR_ABI,
        account=account,
        role_gate=role_gate,
        reader=reader,
        writer=writer,
        tracker=tracker,
        notifier=notifier,
        explorer_url=EXPLORER_BASE,
        settle_timeout=5,
    )
    kwargs.update(overrides)
    return RegistrationCoordinator(**kwargs)


@pytest.fixture
async def coordinator(account, role_gate, mock_reader, mock_writer, tracker, notifier):
    """RegistrationCoordinator wired to mocks. Cancels leftovers on teardown."""
    c = make_coordinator(
        account=account,
        role_gate=role_gate,
        reader=mock_reader,
        writer=mock_writer,
        tracker=tracker,
        notifier=notifier,
    )
    yield c
    await c.cancel_all()


@pytest.fixture
async def daemon(test_config, store, mock_watcher, mock_reader, mock_writer, mock_receipts):
    """Fully wired SyncDaemon with mocked chain components."""
    d = SyncDaemon(
        test_config,
        watcher=mock_watcher,
        reader=mock_reader,
        writer=mock_writer,
        receipts=mock_receipts,
        store=store,
    )
    yield d
    await d.coordinator.cancel_all()
