"""Protocol interfaces for yieldprop_sync collaborators."""

from yieldprop_sync.interfaces.watcher import LogHandler, LogWatcher, PollingLogWatcher, Unsubscribe
from yieldprop_sync.interfaces.reader import ContractReader
from yieldprop_sync.interfaces.writer import ContractWriter
from yieldprop_sync.interfaces.receipts import ReceiptProvider
from yieldprop_sync.interfaces.cache import ReadCache
from yieldprop_sync.interfaces.notifier import NotificationSink
from yieldprop_sync.interfaces.store import StateStore

__all__ = [
    "LogHandler", "LogWatcher", "PollingLogWatcher", "Unsubscribe",
    "ContractReader",
    "ContractWriter",
    "ReceiptProvider",
    "ReadCache",
    "NotificationSink",
    "StateStore",
]
