"""Shared fakes for watcher, resolver and API tests."""

from datetime import date
from typing import Optional

import pytest

from entry_alert.providers.base import (
    DataProvider,
    GameSnapshot,
    GroupData,
    RosterEntry,
    ScheduledGame,
)


def make_snapshot(
    state: str = "In Progress",
    home: Optional[list] = None,
    away: Optional[list] = None,
    plays: Optional[list] = None,
    game_pk: str = "776001",
    boxscore: bool = True,
    home_team: str = "Glendale Desert Dogs",
    away_team: str = "Scottsdale Scorpions",
) -> GameSnapshot:
    return GameSnapshot(
        game_pk=game_pk,
        state=state,
        home_team_name=home_team,
        away_team_name=away_team,
        home_players=(home or []) if boxscore else None,
        away_players=(away or []) if boxscore else None,
        plays=plays or [],
    )


def bench(name: str) -> RosterEntry:
    """Rostered player with no activity yet."""
    return RosterEntry(
        full_name=name,
        position="P",
        batting={"atBats": 0, "hits": 0},
        fielding={"putOuts": 0},
        pitching={"inningsPitched": "0.0"},
    )


def in_lineup(name: str, order: str = "300") -> RosterEntry:
    return RosterEntry(full_name=name, batting_order=order, position="SS")


class FakeProvider(DataProvider):
    """In-memory DataProvider. Snapshots are served in order; the last one repeats."""

    def __init__(self, groups=None, schedule=None, snapshots=None):
        self.groups = groups or []
        self.schedule = schedule or {}
        self.snapshots = list(snapshots or [])
        self.schedule_calls: list[date] = []
        self.snapshot_calls = 0
        self.group_calls = 0
        self.closed = False

    async def list_groups(self, season: int, active_only: bool = True) -> list[GroupData]:
        self.group_calls += 1
        return list(self.groups)

    async def schedule_on(self, group_id: int, on_date: date) -> Optional[ScheduledGame]:
        self.schedule_calls.append(on_date)
        return self.schedule.get((group_id, on_date))

    async def snapshot(self, game_pk: str) -> GameSnapshot:
        self.snapshot_calls += 1
        if not self.snapshots:
            return make_snapshot(state="Scheduled", boxscore=False, game_pk=game_pk)
        item = self.snapshots.pop(0) if len(self.snapshots) > 1 else self.snapshots[0]
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


AFL_GROUPS = [
    GroupData(external_id=4131, name="Scottsdale Scorpions", short_name="Scorpions"),
    GroupData(external_id=4132, name="Glendale Desert Dogs", short_name="Desert Dogs"),
    GroupData(external_id=4133, name="Mesa Solar Sox", short_name="Solar Sox"),
    GroupData(external_id=4134, name="Salt River Rafters", short_name="Rafters"),
]
