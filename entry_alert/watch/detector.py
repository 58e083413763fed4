"""
Entry detection from one live feed snapshot.

Two independent heuristics, OR-combined:
1. Participation: the player's boxscore entry has a batting-order slot or any
   activity counter above zero.
2. Narrative: a play description names the player together with a
   substitution phrase. Catches players announced in before any counter moves.

Name matching in the narrative heuristic is plain substring containment of the
full name, so a name contained in another player's name also matches.
"""

from dataclasses import dataclass
from typing import Optional

from entry_alert.errors import PlayerNotFoundError, TeamMismatchError
from entry_alert.providers.base import GameSnapshot, RosterEntry

SIMULATION_GAME_PK = "(simulation)"

BOXSCORE_UNAVAILABLE = "Boxscore not available yet"

BATTING_COUNTERS = ("atBats", "plateAppearances", "hits", "runs", "rbi")
FIELDING_COUNTERS = ("putOuts", "assists", "chances")
PITCHING_COUNTERS = ("battersFaced", "pitchesThrown")
ZERO_INNINGS = "0.0"

SUBSTITUTION_PHRASES = (
    "defensive substitution",
    "pinch-hits",
    "pinch hits",
    "pinch-running",
    "pinch runs",
    "enters the game",
    "replaces",
)


@dataclass
class EntryStatus:
    """Detector output for one snapshot."""

    player: str
    in_game: bool
    raw_game_state: str
    side: Optional[str] = None  # "home" | "away" | None (not on a roster)
    batting_order: Optional[str] = None
    position: Optional[str] = None
    reason: Optional[str] = None
    simulated: bool = False

    def to_dict(self) -> dict:
        payload = {
            "player": self.player,
            "inGame": self.in_game,
            "side": self.side,
            "battingOrder": self.batting_order,
            "position": self.position,
            "rawGameState": self.raw_game_state,
        }
        if self.reason:
            payload["reason"] = self.reason
        if self.simulated:
            payload["simulated"] = True
        return payload


def simulated_status(player_name: str) -> EntryStatus:
    """Fixed "entered" status used in simulation mode."""
    return EntryStatus(
        player=player_name or "Sample Player",
        in_game=True,
        raw_game_state="In Progress (Simulated)",
        side="home",
        batting_order="501",
        position="2B",
        simulated=True,
    )


def _counter_positive(stats: dict, keys: tuple) -> bool:
    for key in keys:
        try:
            if float(stats.get(key) or 0) > 0:
                return True
        except (TypeError, ValueError):
            continue
    return False


def appeared_in_boxscore(entry: Optional[RosterEntry]) -> bool:
    """Participation heuristic."""
    if entry is None:
        return False
    if entry.batting_order:
        return True
    if _counter_positive(entry.batting, BATTING_COUNTERS):
        return True
    if _counter_positive(entry.fielding, FIELDING_COUNTERS):
        return True
    if _counter_positive(entry.pitching, PITCHING_COUNTERS):
        return True
    innings = entry.pitching.get("inningsPitched")
    return bool(innings) and innings != ZERO_INNINGS


def appeared_in_plays(plays: list[str], player_name: str) -> bool:
    """Narrative heuristic."""
    if not plays or not player_name:
        return False
    needle = player_name.lower()
    for description in plays:
        text = (description or "").lower()
        if needle not in text:
            continue
        if any(phrase in text for phrase in SUBSTITUTION_PHRASES):
            return True
    return False


def find_roster_entry(
    snapshot: GameSnapshot, player_name: str
) -> tuple[Optional[str], Optional[RosterEntry]]:
    """Home roster first, then away; first case-insensitive full-name match wins."""
    needle = player_name.lower()
    for side, players in (("home", snapshot.home_players), ("away", snapshot.away_players)):
        for entry in players or []:
            if entry.full_name.lower() == needle:
                return side, entry
    return None, None


def check_team(snapshot: GameSnapshot, team: str) -> None:
    """Raise TeamMismatchError if team is a substring of neither side's name."""
    needle = team.lower()
    if needle in snapshot.home_team_name.lower() or needle in snapshot.away_team_name.lower():
        return
    raise TeamMismatchError(
        f'Team mismatch: "{team}" not found in this game.',
        home=snapshot.home_team_name,
        away=snapshot.away_team_name,
    )


def detect_entry(
    snapshot: GameSnapshot, player_name: str, require_roster: bool = False
) -> EntryStatus:
    """
    Classify one snapshot.

    Args:
        snapshot: Parsed live feed.
        player_name: Full name to look for.
        require_roster: Raise PlayerNotFoundError when the boxscore is populated
            but the player is on neither roster (one-shot queries). The watcher
            passes False so the narrative heuristic alone decides.
    """
    if not snapshot.boxscore_available:
        return EntryStatus(
            player=player_name,
            in_game=False,
            raw_game_state=snapshot.state,
            reason=BOXSCORE_UNAVAILABLE,
        )

    side, entry = find_roster_entry(snapshot, player_name)
    if entry is None and require_roster:
        raise PlayerNotFoundError(
            f'Player "{player_name}" not listed on either roster for gamePk {snapshot.game_pk}.',
            game_state=snapshot.state,
            home=snapshot.home_team_name,
            away=snapshot.away_team_name,
        )

    entered = appeared_in_boxscore(entry) or appeared_in_plays(snapshot.plays, player_name)
    return EntryStatus(
        player=player_name,
        in_game=entered,
        raw_game_state=snapshot.state,
        side=side,
        batting_order=entry.batting_order if entry else None,
        position=entry.position if entry else None,
    )
