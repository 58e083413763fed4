"""MLB Stats API data provider implementation (statsapi.mlb.com)."""

import asyncio
import logging
import time
from datetime import date
from typing import Optional

import httpx

from entry_alert.config import get_settings
from entry_alert.providers.base import (
    DataProvider,
    GameSnapshot,
    GroupData,
    ProviderError,
    RosterEntry,
    ScheduledGame,
)
from entry_alert.telemetry import record_provider_request

logger = logging.getLogger(__name__)

PROVIDER_NAME = "mlb_stats"


class MLBStatsProvider(DataProvider):
    """MLB Stats API provider with bounded retries (no API key required)."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        settings = get_settings()
        self.BASE_URL = settings.MLB_API_BASE_URL.rstrip("/")
        self.sport_id = settings.MLB_SPORT_ID
        self.max_retries = max(1, settings.PROVIDER_MAX_RETRIES)
        self.retry_delay = settings.PROVIDER_RETRY_DELAY_SECONDS
        self.client = client or httpx.AsyncClient(
            timeout=settings.PROVIDER_TIMEOUT_SECONDS,
            headers={"Accept": "application/json"},
        )

    async def _request(self, path: str, params: dict = None, endpoint: str = "") -> dict:
        """
        GET a JSON document, retrying rate limits, 5xx and transport errors.

        Args:
            path: Path below BASE_URL (e.g. "v1/teams").
            params: Query parameters.
            endpoint: Low-cardinality endpoint label for telemetry.

        Raises:
            ProviderError: retries exhausted, non-retryable status, or a non-JSON body.
        """
        url = f"{self.BASE_URL}/{path}"
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            start_time = time.time()
            try:
                response = await self.client.get(url, params=params)
                latency_ms = (time.time() - start_time) * 1000

                if response.status_code == 429 or response.status_code >= 500:
                    record_provider_request(
                        PROVIDER_NAME, endpoint, response.status_code, latency_ms,
                        error_code="rate_limit" if response.status_code == 429 else "http_5xx",
                    )
                    last_error = ProviderError(f"{endpoint}: HTTP {response.status_code}")
                    logger.warning(f"[PROVIDER] {endpoint} returned {response.status_code} (attempt {attempt + 1})")
                    if attempt < self.max_retries - 1:
                        await asyncio.sleep(self.retry_delay * (2**attempt))
                    continue

                if response.status_code >= 400:
                    record_provider_request(
                        PROVIDER_NAME, endpoint, response.status_code, latency_ms, error_code="http_4xx"
                    )
                    raise ProviderError(f"{endpoint}: HTTP {response.status_code}")

                try:
                    data = response.json()
                except ValueError as e:
                    record_provider_request(
                        PROVIDER_NAME, endpoint, response.status_code, latency_ms, error_code="malformed"
                    )
                    raise ProviderError(f"{endpoint}: malformed JSON response") from e

                if not isinstance(data, dict):
                    record_provider_request(
                        PROVIDER_NAME, endpoint, response.status_code, latency_ms, error_code="malformed"
                    )
                    raise ProviderError(f"{endpoint}: unexpected payload type {type(data).__name__}")

                record_provider_request(PROVIDER_NAME, endpoint, response.status_code, latency_ms)
                return data

            except httpx.TimeoutException as e:
                latency_ms = (time.time() - start_time) * 1000
                record_provider_request(PROVIDER_NAME, endpoint, 0, latency_ms, error_code="timeout")
                logger.warning(f"[PROVIDER] Timeout on {endpoint}: {e}")
                last_error = e

            except httpx.RequestError as e:
                latency_ms = (time.time() - start_time) * 1000
                record_provider_request(PROVIDER_NAME, endpoint, 0, latency_ms, error_code="request_error")
                logger.warning(f"[PROVIDER] Request error on {endpoint}: {e}")
                last_error = e

            if attempt < self.max_retries - 1:
                await asyncio.sleep(self.retry_delay * (2**attempt))

        if isinstance(last_error, ProviderError):
            raise last_error
        raise ProviderError(f"{endpoint}: {last_error}") from last_error

    async def list_groups(self, season: int, active_only: bool = True) -> list[GroupData]:
        params = {"sportId": self.sport_id, "season": season}
        if active_only:
            params["activeStatus"] = "Y"
        data = await self._request("v1/teams", params=params, endpoint="teams")
        try:
            return self._parse_groups(data)
        except (AttributeError, TypeError, KeyError) as e:
            raise ProviderError(f"teams: malformed payload ({e})") from e

    async def schedule_on(self, group_id: int, on_date: date) -> Optional[ScheduledGame]:
        params = {"sportId": self.sport_id, "teamId": group_id, "date": on_date.isoformat()}
        data = await self._request("v1/schedule", params=params, endpoint="schedule")
        try:
            return self._parse_schedule(data, on_date)
        except (AttributeError, TypeError, KeyError, IndexError) as e:
            raise ProviderError(f"schedule: malformed payload ({e})") from e

    async def snapshot(self, game_pk: str) -> GameSnapshot:
        data = await self._request(f"v1.1/game/{game_pk}/feed/live", endpoint="feed/live")
        try:
            return self._parse_snapshot(str(game_pk), data)
        except (AttributeError, TypeError, KeyError) as e:
            raise ProviderError(f"feed/live: malformed payload ({e})") from e

    def _parse_groups(self, data: dict) -> list[GroupData]:
        groups = []
        for team in data.get("teams") or []:
            if team.get("id") is None or not team.get("name"):
                continue
            groups.append(
                GroupData(
                    external_id=team["id"],
                    name=team["name"],
                    short_name=team.get("teamName") or "",
                )
            )
        return groups

    def _parse_schedule(self, data: dict, on_date: date) -> Optional[ScheduledGame]:
        dates = data.get("dates") or []
        games = (dates[0].get("games") or []) if dates else []
        if not games:
            return None

        game = games[0]
        if game.get("gamePk") is None:
            return None
        return ScheduledGame(
            game_pk=game["gamePk"],
            status=(game.get("status") or {}).get("detailedState") or "Scheduled",
            date=on_date,
        )

    def _parse_snapshot(self, game_pk: str, data: dict) -> GameSnapshot:
        """Parse a live feed document into a GameSnapshot."""
        game_data = data.get("gameData") or {}
        live_data = data.get("liveData") or {}
        teams = game_data.get("teams") or {}
        box_teams = (live_data.get("boxscore") or {}).get("teams") or {}

        home_box = box_teams.get("home")
        away_box = box_teams.get("away")
        home_players = away_players = None
        # Both sides must be present; a half-populated boxscore counts as not available
        if home_box and away_box:
            home_players = self._parse_roster(home_box)
            away_players = self._parse_roster(away_box)

        plays = []
        for play in (live_data.get("plays") or {}).get("allPlays") or []:
            description = ((play or {}).get("result") or {}).get("description")
            if description:
                plays.append(description)

        return GameSnapshot(
            game_pk=game_pk,
            state=(game_data.get("status") or {}).get("detailedState") or "Unknown",
            home_team_name=(teams.get("home") or {}).get("name") or "",
            away_team_name=(teams.get("away") or {}).get("name") or "",
            home_players=home_players,
            away_players=away_players,
            plays=plays,
        )

    def _parse_roster(self, side: dict) -> list[RosterEntry]:
        entries = []
        for player in (side.get("players") or {}).values():
            full_name = ((player or {}).get("person") or {}).get("fullName")
            if not full_name:
                continue
            stats = player.get("stats") or {}
            batting_order = player.get("battingOrder")
            entries.append(
                RosterEntry(
                    full_name=full_name,
                    batting_order=str(batting_order) if batting_order else None,
                    position=(player.get("position") or {}).get("abbreviation"),
                    batting=stats.get("batting") or {},
                    fielding=stats.get("fielding") or {},
                    pitching=stats.get("pitching") or {},
                )
            )
        return entries

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
