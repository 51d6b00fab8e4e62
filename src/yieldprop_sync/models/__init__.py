"""Data models for the yieldprop_sync daemon."""

from yieldprop_sync.models.events import WatchedEvent
from yieldprop_sync.models.records import (
    ActivityRecord,
    AttemptState,
    HandlerKind,
    Notification,
    NotifyLevel,
    ReceiptResult,
    RegistrationAttempt,
    RegistrationRecord,
    WriteResult,
)
from yieldprop_sync.models.config import CONTRACT_IDS, ContractSet, DaemonConfig

__all__ = [
    "WatchedEvent",
    "ActivityRecord", "AttemptState", "HandlerKind", "Notification", "NotifyLevel",
    "ReceiptResult", "RegistrationAttempt", "RegistrationRecord", "WriteResult",
    "CONTRACT_IDS", "ContractSet", "DaemonConfig",
]
