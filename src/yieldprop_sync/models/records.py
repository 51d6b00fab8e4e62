"""Internal record types for registration state, results and persistence."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AttemptState(str, Enum):
    """Lifecycle of a holder registration attempt."""

    IDLE = "idle"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    SKIPPED = "skipped"  # holder already registered on-chain


class HandlerKind(str, Enum):
    """What an event handler does beyond invalidating the read cache."""

    INVALIDATE_ONLY = "invalidate_only"
    INVALIDATE_AND_NOTIFY = "invalidate_and_notify"
    INVALIDATE_AND_MAYBE_REGISTER = "invalidate_and_maybe_register"


class NotifyLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class RegistrationAttempt:
    """One in-flight or settled registerHolder() attempt."""

    holder: str  # address as seen in the event
    key: str  # lower-cased dedup key
    state: AttemptState = AttemptState.PENDING
    tx_hash: str | None = None
    error: str | None = None


@dataclass
class WriteResult:
    """Result of submitting a contract write."""

    success: bool
    tx_hash: str | None = None
    error: str | None = None


@dataclass
class ReceiptResult:
    """Terminal on-chain outcome of a submitted transaction."""

    success: bool
    tx_hash: str
    block_number: int | None = None
    error: str | None = None


@dataclass
class Notification:
    """A user-visible message routed to the notification sink."""

    level: NotifyLevel
    message: str
    link: str | None = None


@dataclass
class ActivityRecord:
    """A single activity log entry."""

    id: int
    level: str
    message: str
    link: str | None
    created_at: str


@dataclass
class RegistrationRecord:
    """A settled registration attempt as persisted in the state store."""

    id: int
    holder: str
    outcome: str  # "confirmed", "failed", "skipped"
    tx_hash: str | None
    error: str | None
    settled_at: str
