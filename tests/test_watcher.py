"""Log watcher against a fake JSON-RPC eth namespace."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from web3 import Web3

from yieldprop_sync.abis import PROPERTY_TOKEN_ABI, ZERO_ADDRESS
from yieldprop_sync.evm.watcher import Web3LogWatcher, event_topic
from yieldprop_sync.models.records import NotifyLevel

from tests.factories import HOLDER_A, TOKEN_ADDRESS
from tests.mocks import RecordingNotifier

TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"


def _pad(address: str) -> bytes:
    return bytes(12) + bytes.fromhex(address[2:])


def transfer_log(to: str, value: int = 5, block: int = 10, log_index: int = 0) -> dict:
    return {
        "address": TOKEN_ADDRESS,
        "topics": [bytes.fromhex(TRANSFER_TOPIC[2:]), _pad(ZERO_ADDRESS), _pad(to)],
        "data": value.to_bytes(32, "big"),
        "blockNumber": block,
        "transactionHash": bytes.fromhex("ab" * 32),
        "transactionIndex": 0,
        "blockHash": bytes(32),
        "logIndex": log_index,
    }


class FakeEth:
    """Just enough of AsyncEth for the watcher."""

    def __init__(self, latest: int = 10) -> None:
        self.latest = latest
        self.logs: list[dict] = []
        self.fail = False
        self.get_logs_calls: list[dict] = []
        self._decoder = Web3()

    @property
    def block_number(self):
        async def _latest():
            return self.latest

        return _latest()

    async def get_logs(self, params: dict) -> list[dict]:
        self.get_logs_calls.append(params)
        if self.fail:
            raise ConnectionError("rpc down")
        return [
            log for log in self.logs
            if log["address"].lower() == params["address"].lower()
            and params["fromBlock"] <= log["blockNumber"] <= params["toBlock"]
        ]

    def contract(self, address: str, abi: list) -> object:
        return self._decoder.eth.contract(address=address, abi=abi)


class Collector:
    def __init__(self) -> None:
        self.batches = []

    async def __call__(self, events) -> None:
        self.batches.append(events)


@pytest.fixture
def eth():
    return FakeEth()


@pytest.fixture
def watcher(eth):
    return Web3LogWatcher(SimpleNamespace(eth=eth), chunk_size=100)


def test_event_topic_matches_erc20_transfer():
    assert event_topic(PROPERTY_TOKEN_ABI, "Transfer") == TRANSFER_TOPIC


def test_event_topic_unknown_event():
    with pytest.raises(KeyError):
        event_topic(PROPERTY_TOKEN_ABI, "Approval")


async def test_first_poll_starts_at_latest_block(watcher, eth):
    collector = Collector()
    watcher.watch("PropertyToken", TOKEN_ADDRESS, PROPERTY_TOKEN_ABI, "Transfer", collector)
    eth.logs.append(transfer_log(HOLDER_A, value=7, block=10))

    assert await watcher.poll() == 1

    [[event]] = collector.batches
    assert event.contract_id == "PropertyToken"
    assert event.event_name == "Transfer"
    assert event.recipient.lower() == HOLDER_A
    assert event.payload["value"] == 7
    assert event.tx_hash == "0x" + "ab" * 32
    assert eth.get_logs_calls[0]["fromBlock"] == 10
    assert eth.get_logs_calls[0]["topics"] == [TRANSFER_TOPIC]
    assert watcher.cursor == 11


async def test_cursor_ahead_of_chain_is_a_noop(watcher, eth):
    watcher.watch("PropertyToken", TOKEN_ADDRESS, PROPERTY_TOKEN_ABI, "Transfer", Collector())
    watcher.set_cursor(11)

    assert await watcher.poll() == 0
    assert eth.get_logs_calls == []
    assert watcher.cursor == 11


async def test_block_range_is_chunked(eth):
    watcher = Web3LogWatcher(SimpleNamespace(eth=eth), start_block=0, chunk_size=4)
    watcher.watch("PropertyToken", TOKEN_ADDRESS, PROPERTY_TOKEN_ABI, "Transfer", Collector())

    await watcher.poll()

    assert eth.get_logs_calls[0]["fromBlock"] == 0
    assert eth.get_logs_calls[0]["toBlock"] == 3
    assert watcher.cursor == 4


async def test_fetch_failure_keeps_cursor(watcher, eth):
    watcher.watch("PropertyToken", TOKEN_ADDRESS, PROPERTY_TOKEN_ABI, "Transfer", Collector())
    watcher.set_cursor(5)
    eth.fail = True

    with pytest.raises(ConnectionError):
        await watcher.poll()
    assert watcher.cursor == 5


async def test_unsubscribe_stops_delivery(watcher, eth):
    collector = Collector()
    unsubscribe = watcher.watch("PropertyToken", TOKEN_ADDRESS, PROPERTY_TOKEN_ABI, "Transfer", collector)
    unsubscribe()
    unsubscribe()
    eth.logs.append(transfer_log(HOLDER_A))

    assert await watcher.poll() == 0
    assert eth.get_logs_calls == []
    assert collector.batches == []


async def test_failing_handler_does_not_block_others(watcher, eth):
    async def broken(events):
        raise RuntimeError("boom")

    collector = Collector()
    watcher.watch("PropertyToken", TOKEN_ADDRESS, PROPERTY_TOKEN_ABI, "Transfer", broken)
    watcher.watch("PropertyToken", TOKEN_ADDRESS, PROPERTY_TOKEN_ABI, "Transfer", collector)
    eth.logs.append(transfer_log(HOLDER_A))

    assert await watcher.poll() == 1
    assert len(collector.batches) == 1
    assert watcher.cursor == 11


async def test_undecodable_log_is_skipped(watcher, eth):
    collector = Collector()
    watcher.watch("PropertyToken", TOKEN_ADDRESS, PROPERTY_TOKEN_ABI, "Transfer", collector)
    bad = transfer_log(HOLDER_A)
    bad["topics"] = bad["topics"][:2]
    eth.logs.extend([bad, transfer_log(HOLDER_A, log_index=1)])

    assert await watcher.poll() == 1
    [[event]] = collector.batches
    assert event.log_index == 1


async def test_handler_failure_reaches_notifier(eth):
    async def broken(events):
        raise RuntimeError("boom")

    notifier = RecordingNotifier()
    watcher = Web3LogWatcher(SimpleNamespace(eth=eth), chunk_size=100, notifier=notifier)
    watcher.watch("PropertyToken", TOKEN_ADDRESS, PROPERTY_TOKEN_ABI, "Transfer", broken)
    eth.logs.append(transfer_log(HOLDER_A))

    assert await watcher.poll() == 0

    [note] = notifier.notifications
    assert note.level == NotifyLevel.ERROR
    assert "PropertyToken.Transfer" in note.message
    assert "boom" in note.message
