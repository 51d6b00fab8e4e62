"""SQLite state store."""

from __future__ import annotations

from yieldprop_sync.models.records import AttemptState, RegistrationAttempt
from yieldprop_sync.storage.sqlite import SQLiteStateStore

from tests.factories import HOLDER_A, HOLDER_C


async def test_cursor_roundtrip(store):
    assert await store.get_cursor() is None
    await store.set_cursor(100)
    await store.set_cursor(250)
    assert await store.get_cursor() == 250


async def test_recent_activity_newest_first(store):
    await store.log_activity("info", "Sync daemon started")
    await store.log_activity("success", "Rental price updated", "https://sepolia.etherscan.io/tx/0x01")
    await store.log_activity("error", "No funds in distribution pool.")

    entries = await store.get_recent_activity(2)

    assert [e.level for e in entries] == ["error", "success"]
    assert entries[1].link == "https://sepolia.etherscan.io/tx/0x01"
    assert entries[0].link is None


async def test_registrations_recorded(store):
    confirmed = RegistrationAttempt(
        holder=HOLDER_C, key=HOLDER_C.lower(), state=AttemptState.CONFIRMED, tx_hash="0xabc",
    )
    failed = RegistrationAttempt(
        holder=HOLDER_A, key=HOLDER_A, state=AttemptState.FAILED, error="transaction reverted",
    )
    await store.save_registration(confirmed)
    await store.save_registration(failed)

    records = await store.get_registrations()

    assert [r.outcome for r in records] == ["failed", "confirmed"]
    assert records[1].holder == HOLDER_C.lower()
    assert records[1].tx_hash == "0xabc"
    assert records[0].error == "transaction reverted"


async def test_file_store_creates_parent_dir(tmp_path):
    s = SQLiteStateStore(str(tmp_path / "nested" / "state.db"))
    await s.initialize()
    try:
        await s.set_cursor(7)
    finally:
        await s.close()

    reopened = SQLiteStateStore(str(tmp_path / "nested" / "state.db"))
    await reopened.initialize()
    try:
        assert await reopened.get_cursor() == 7
    finally:
        await reopened.close()


async def test_initialize_twice_keeps_connection(store):
    await store.set_cursor(9)
    await store.initialize()
    assert await store.get_cursor() == 9
