"""Operator notifications."""

from yieldprop_sync.notify.sink import ActivityNotifier

__all__ = ["ActivityNotifier"]
