"""
Adaptive entry watcher.

Usage:
    from entry_alert.watch import SubscriptionRegistry, WatchRequest

    registry = SubscriptionRegistry.from_settings(settings, provider)
    sub = await registry.create(WatchRequest(player_name="Jane Doe", team="Glendale Desert Dogs"))
    registry.list_all()
    registry.stop(sub.id)
"""

from entry_alert.watch.detector import (
    SIMULATION_GAME_PK,
    EntryStatus,
    detect_entry,
    simulated_status,
)
from entry_alert.watch.engine import PollIntervals, Subscription, Watcher
from entry_alert.watch.registry import SubscriptionRegistry, WatchRequest
from entry_alert.watch.resolver import EventResolver

__all__ = [
    "SIMULATION_GAME_PK",
    "EntryStatus",
    "detect_entry",
    "simulated_status",
    "PollIntervals",
    "Subscription",
    "Watcher",
    "SubscriptionRegistry",
    "WatchRequest",
    "EventResolver",
]
