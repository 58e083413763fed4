"""Unit tests for entry detection: participation + narrative heuristics."""

import pytest

from entry_alert.errors import PlayerNotFoundError, TeamMismatchError
from entry_alert.providers.base import RosterEntry
from entry_alert.watch.detector import (
    BOXSCORE_UNAVAILABLE,
    appeared_in_boxscore,
    appeared_in_plays,
    check_team,
    detect_entry,
    find_roster_entry,
    simulated_status,
)
from tests.conftest import bench, in_lineup, make_snapshot


# ---------------------------------------------------------------------------
# Participation heuristic
# ---------------------------------------------------------------------------

class TestAppearedInBoxscore:

    def test_batting_order_alone_is_active(self):
        entry = bench("Jane Doe")
        entry.batting_order = "501"
        assert appeared_in_boxscore(entry) is True

    def test_all_counters_zero_is_not_active(self):
        assert appeared_in_boxscore(bench("Jane Doe")) is False

    def test_missing_stat_blocks_is_not_active(self):
        assert appeared_in_boxscore(RosterEntry(full_name="Jane Doe")) is False

    @pytest.mark.parametrize(
        "block,key",
        [
            ("batting", "atBats"),
            ("batting", "plateAppearances"),
            ("batting", "hits"),
            ("batting", "runs"),
            ("batting", "rbi"),
            ("fielding", "putOuts"),
            ("fielding", "assists"),
            ("fielding", "chances"),
            ("pitching", "battersFaced"),
            ("pitching", "pitchesThrown"),
        ],
    )
    def test_each_counter_activates(self, block, key):
        entry = RosterEntry(full_name="Jane Doe")
        getattr(entry, block)[key] = 1
        assert appeared_in_boxscore(entry) is True

    def test_unlisted_counter_does_not_activate(self):
        entry = RosterEntry(full_name="Jane Doe", batting={"leftOnBase": 3})
        assert appeared_in_boxscore(entry) is False

    def test_innings_pitched(self):
        assert appeared_in_boxscore(RosterEntry(full_name="A", pitching={"inningsPitched": "0.0"})) is False
        assert appeared_in_boxscore(RosterEntry(full_name="A", pitching={"inningsPitched": "0.1"})) is True

    def test_none_entry(self):
        assert appeared_in_boxscore(None) is False


# ---------------------------------------------------------------------------
# Narrative heuristic
# ---------------------------------------------------------------------------

class TestAppearedInPlays:

    def test_substitution_phrase_with_name(self):
        plays = ["Offensive Substitution: Pinch-hitter Jane Doe replaces John Roe."]
        assert appeared_in_plays(plays, "Jane Doe") is True

    def test_case_insensitive(self):
        plays = ["JANE DOE ENTERS THE GAME as pitcher."]
        assert appeared_in_plays(plays, "jane doe") is True

    def test_name_without_phrase(self):
        plays = ["Jane Doe singles on a line drive to left fielder."]
        assert appeared_in_plays(plays, "Jane Doe") is False

    def test_phrase_for_someone_else(self):
        plays = ["Defensive Substitution: Sam Poe replaces John Roe, playing 2B."]
        assert appeared_in_plays(plays, "Jane Doe") is False

    def test_empty_inputs(self):
        assert appeared_in_plays([], "Jane Doe") is False
        assert appeared_in_plays(["Jane Doe pinch hits"], "") is False

    def test_substring_names_match(self):
        # Plain containment: "Jo Smith" is inside "Jo Smithson"
        plays = ["Pinch-runner Jo Smithson replaces Al Kay."]
        assert appeared_in_plays(plays, "Jo Smith") is True


# ---------------------------------------------------------------------------
# Roster lookup + full detection
# ---------------------------------------------------------------------------

class TestDetectEntry:

    def test_home_checked_before_away(self):
        snap = make_snapshot(home=[bench("Jane Doe")], away=[in_lineup("Jane Doe")])
        side, entry = find_roster_entry(snap, "jane doe")
        assert side == "home"
        assert entry.batting_order is None

    def test_active_from_lineup(self):
        snap = make_snapshot(away=[in_lineup("Jane Doe", order="501")])
        status = detect_entry(snap, "Jane Doe")
        assert status.in_game is True
        assert status.side == "away"
        assert status.batting_order == "501"
        assert status.position == "SS"
        assert status.raw_game_state == "In Progress"

    def test_zero_counters_no_plays_not_active(self):
        snap = make_snapshot(home=[bench("Jane Doe")], plays=["John Roe strikes out swinging."])
        status = detect_entry(snap, "Jane Doe")
        assert status.in_game is False
        assert status.side == "home"

    def test_narrative_rescues_zero_counters(self):
        snap = make_snapshot(
            home=[bench("Jane Doe")],
            plays=["Pitching Change: Jane Doe replaces John Roe."],
        )
        assert detect_entry(snap, "Jane Doe").in_game is True

    def test_not_on_roster_raises_when_required(self):
        snap = make_snapshot(home=[bench("John Roe")], away=[bench("Sam Poe")], state="Final")
        with pytest.raises(PlayerNotFoundError) as exc_info:
            detect_entry(snap, "Jane Doe", require_roster=True)
        assert exc_info.value.game_state == "Final"
        assert exc_info.value.home == "Glendale Desert Dogs"

    def test_not_on_roster_uses_narrative_when_not_required(self):
        snap = make_snapshot(plays=["Jane Doe enters the game as pinch-runner."])
        status = detect_entry(snap, "Jane Doe")
        assert status.in_game is True
        assert status.side is None

    def test_boxscore_unavailable(self):
        snap = make_snapshot(state="Scheduled", boxscore=False)
        status = detect_entry(snap, "Jane Doe", require_roster=True)
        assert status.in_game is False
        assert status.reason == BOXSCORE_UNAVAILABLE
        assert status.to_dict()["reason"] == BOXSCORE_UNAVAILABLE


class TestTeamCheckAndSimulation:

    def test_team_substring_accepted(self):
        check_team(make_snapshot(), "desert dogs")

    def test_team_mismatch(self):
        with pytest.raises(TeamMismatchError):
            check_team(make_snapshot(), "Solar Sox")

    def test_simulated_status(self):
        payload = simulated_status("Jane Doe").to_dict()
        assert payload["inGame"] is True
        assert payload["battingOrder"] == "501"
        assert payload["position"] == "2B"
        assert payload["simulated"] is True
        assert simulated_status("").player == "Sample Player"
