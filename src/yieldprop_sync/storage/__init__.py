"""State persistence."""

from yieldprop_sync.storage.sqlite import SQLiteStateStore

__all__ = ["SQLiteStateStore"]
