"""Shared singletons for the entry alert service.

Singleton-by-import pattern: main.py and routers import from this module to
share the same provider and subscription registry.
"""

from typing import Optional

from entry_alert.config import get_settings
from entry_alert.providers import DataProvider, MLBStatsProvider
from entry_alert.watch import EventResolver, SubscriptionRegistry

_provider: Optional[DataProvider] = None
_registry: Optional[SubscriptionRegistry] = None


def get_provider() -> DataProvider:
    """Get or create the shared live data provider."""
    global _provider
    if _provider is None:
        _provider = MLBStatsProvider()
    return _provider


def get_registry() -> SubscriptionRegistry:
    """Get or create the process-wide subscription registry."""
    global _registry
    if _registry is None:
        _registry = SubscriptionRegistry.from_settings(get_settings(), get_provider())
    return _registry


def get_resolver() -> EventResolver:
    return get_registry().resolver


async def close_state() -> None:
    """Stop all watchers and close the provider (application shutdown)."""
    global _provider, _registry
    if _registry is not None:
        await _registry.shutdown()
        _registry = None
    if _provider is not None:
        await _provider.close()
        _provider = None
