"""Resolve a team name + date to a gamePk."""

import logging
from datetime import date, timedelta
from typing import Optional

from entry_alert.errors import NoEventFoundError, ResolutionError
from entry_alert.providers.base import DataProvider, GroupData, ScheduledGame
from entry_alert.watch.detector import SIMULATION_GAME_PK

logger = logging.getLogger(__name__)


def match_group(groups: list[GroupData], team_name: str) -> Optional[GroupData]:
    """
    Pick a team by name.

    Priority: exact full name, exact short name, then full-name substring.
    All comparisons are case-insensitive. First hit in provider order wins
    within each step.
    """
    needle = team_name.strip().lower()
    if not needle:
        return None
    for group in groups:
        if group.name.lower() == needle:
            return group
    for group in groups:
        if (group.short_name or "").lower() == needle:
            return group
    for group in groups:
        if needle in group.name.lower():
            return group
    return None


def search_dates(target: date, window_days: int) -> list[date]:
    """Exact day, then past days most recent first, then future days soonest first."""
    past = [target - timedelta(days=i) for i in range(1, window_days + 1)]
    future = [target + timedelta(days=i) for i in range(1, window_days + 1)]
    return [target, *past, *future]


class EventResolver:
    """Maps a team name and date to the game to watch."""

    def __init__(self, provider: DataProvider, season: int, window_days: int = 3):
        self.provider = provider
        self.season = season
        self.window_days = window_days

    async def resolve_group_id(self, team_name: str) -> int:
        groups = await self.provider.list_groups(self.season, active_only=True)
        group = match_group(groups, team_name)
        if group is None:
            raise ResolutionError(
                f'Could not resolve team id for "{team_name}". '
                "Try entering a gamePk or enable Simulation Mode."
            )
        logger.debug(f"[RESOLVE] {team_name!r} -> team {group.external_id} ({group.name})")
        return group.external_id

    async def find_game(self, team_name: str, target: Optional[date] = None) -> ScheduledGame:
        """
        Find the nearest scheduled game within the search window.

        Raises:
            ResolutionError: team name did not match.
            NoEventFoundError: nothing scheduled inside the window.
            ProviderError: lookups failed.
        """
        target = target or date.today()
        group_id = await self.resolve_group_id(team_name)

        for day in search_dates(target, self.window_days):
            game = await self.provider.schedule_on(group_id, day)
            if game is not None:
                if day != target:
                    logger.info(f"[RESOLVE] No game on {target} for {team_name!r}, using {day} (gamePk={game.game_pk})")
                return game

        raise NoEventFoundError(
            f"No game found for {team_name!r} within +/-{self.window_days} days of {target.isoformat()}"
        )

    async def resolve(
        self,
        team_name: str,
        target: Optional[date] = None,
        game_pk: Optional[str] = None,
        simulate: bool = False,
    ) -> str:
        """Return the gamePk to watch; no network call when simulating or given one."""
        if simulate:
            return SIMULATION_GAME_PK
        if game_pk:
            return str(game_pk)
        game = await self.find_game(team_name, target)
        return str(game.game_pk)
