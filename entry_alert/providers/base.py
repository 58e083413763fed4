"""Abstract base class for live game data providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from entry_alert.errors import ProviderError  # noqa: F401 (re-exported)


@dataclass
class GroupData:
    """Data transfer object for a team (the group whose schedule is queried)."""

    external_id: int
    name: str
    short_name: str = ""  # MLB Stats API: teams[].teamName (e.g. "Desert Dogs")


@dataclass
class ScheduledGame:
    """First game found on a team's schedule for one date."""

    game_pk: int
    status: str  # detailedState, "Scheduled" when the provider omits it
    date: date


@dataclass
class RosterEntry:
    """One boxscore player entry."""

    full_name: str
    batting_order: Optional[str] = None
    position: Optional[str] = None  # abbreviation, e.g. "2B"
    batting: dict = field(default_factory=dict)
    fielding: dict = field(default_factory=dict)
    pitching: dict = field(default_factory=dict)


@dataclass
class GameSnapshot:
    """
    One live feed fetch.

    home_players/away_players are None until the provider populates the
    boxscore (pre-game), which is distinct from an empty roster.
    """

    game_pk: str
    state: str
    home_team_name: str = ""
    away_team_name: str = ""
    home_players: Optional[list[RosterEntry]] = None
    away_players: Optional[list[RosterEntry]] = None
    plays: list[str] = field(default_factory=list)

    @property
    def boxscore_available(self) -> bool:
        return self.home_players is not None and self.away_players is not None


class DataProvider(ABC):
    """Abstract base class for live game data providers."""

    @abstractmethod
    async def list_groups(self, season: int, active_only: bool = True) -> list[GroupData]:
        """
        Fetch the teams playing in a season.

        Args:
            season: The season year.
            active_only: Only return currently active teams.

        Returns:
            List of GroupData objects.
        """
        pass

    @abstractmethod
    async def schedule_on(self, group_id: int, on_date: date) -> Optional[ScheduledGame]:
        """
        Fetch the first game scheduled for a team on one date.

        Returns:
            ScheduledGame or None if the team has no game that day.
        """
        pass

    @abstractmethod
    async def snapshot(self, game_pk: str) -> GameSnapshot:
        """
        Fetch the current live state of a game.

        Raises:
            ProviderError: the feed could not be fetched or parsed.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass
