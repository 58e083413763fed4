"""Live game data providers."""

from entry_alert.providers.base import (
    DataProvider,
    GameSnapshot,
    GroupData,
    ProviderError,
    RosterEntry,
    ScheduledGame,
)
from entry_alert.providers.mlb_stats import MLBStatsProvider

__all__ = [
    "DataProvider",
    "GameSnapshot",
    "GroupData",
    "ProviderError",
    "RosterEntry",
    "ScheduledGame",
    "MLBStatsProvider",
]
