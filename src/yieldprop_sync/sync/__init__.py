"""Chain-event synchronization and holder auto-registration engine."""

from yieldprop_sync.sync.account import ActiveAccount
from yieldprop_sync.sync.cache import CacheInvalidationBus, CachedContractReader, QueryCache
from yieldprop_sync.sync.confirmation import TransactionConfirmationTracker
from yieldprop_sync.sync.registration import HolderRegistry, RegistrationCoordinator
from yieldprop_sync.sync.roles import RoleGate
from yieldprop_sync.sync.subscriptions import WATCH_TABLE, EventSubscriptionManager, WatchSpec

__all__ = [
    "ActiveAccount",
    "CacheInvalidationBus", "CachedContractReader", "QueryCache",
    "TransactionConfirmationTracker",
    "HolderRegistry", "RegistrationCoordinator",
    "RoleGate",
    "WATCH_TABLE", "EventSubscriptionManager", "WatchSpec",
]
