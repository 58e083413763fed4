"""HTTP surface tests with the shared provider/registry swapped for fakes."""

from datetime import date
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

import entry_alert.state as state
from entry_alert.errors import NotifierError, ProviderError
from entry_alert.main import app
from entry_alert.providers.base import ScheduledGame
from entry_alert.providers.mlb_stats import MLBStatsProvider
from entry_alert.security import limiter
from entry_alert.watch.engine import PollIntervals
from entry_alert.watch.registry import SubscriptionRegistry
from entry_alert.watch.resolver import EventResolver
from tests.conftest import AFL_GROUPS, FakeProvider, bench, in_lineup, make_snapshot

TARGET = date(2025, 10, 15)


@pytest.fixture
def provider():
    return FakeProvider(
        groups=AFL_GROUPS,
        schedule={(4132, TARGET): ScheduledGame(game_pk=776001, status="Pre-Game", date=TARGET)},
        snapshots=[
            make_snapshot(
                state="In Progress",
                home=[in_lineup("Jane Doe", order="501"), bench("Sam Poe")],
                away=[bench("Al Kay")],
            )
        ],
    )


@pytest.fixture
def notifier():
    return AsyncMock()


@pytest.fixture
def client(monkeypatch, provider, notifier):
    registry = SubscriptionRegistry(
        provider,
        EventResolver(provider, season=2025),
        intervals=PollIntervals(fast=5, slow=30, final=60),
        notifier=notifier,
    )
    monkeypatch.setattr(state, "_provider", provider)
    monkeypatch.setattr(state, "_registry", registry)
    monkeypatch.setattr(limiter, "enabled", False)
    with TestClient(app) as test_client:
        yield test_client


class TestCore:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "active_watchers": 0}

    def test_metrics_open_without_token(self, client):
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "watch_active_subscriptions" in response.text

    def test_unknown_api_path_is_404(self, client):
        assert client.get("/api/nope").status_code == 404


class TestGameLookup:

    def test_found(self, client):
        response = client.get("/api/afl/gamePk", params={"team": "Desert Dogs", "date": "2025-10-15"})
        assert response.status_code == 200
        assert response.json() == {"gamePk": 776001, "status": "Pre-Game", "date": "2025-10-15"}

    def test_not_found_is_not_an_error(self, client):
        response = client.get("/api/afl/gamePk", params={"team": "Solar Sox", "date": "2025-10-15"})
        assert response.status_code == 200
        body = response.json()
        assert body["gamePk"] is None
        assert body["status"] == "No game found in +/-3 days"

    def test_unknown_team(self, client):
        response = client.get("/api/afl/gamePk", params={"team": "Nowhere", "date": "2025-10-15"})
        assert response.status_code == 404
        assert response.json()["code"] == "TEAM_NOT_RESOLVED"


class TestPlayerStatus:

    def test_in_game(self, client):
        response = client.get("/api/playerStatus", params={"gamePk": "776001", "playerName": "jane doe"})
        assert response.status_code == 200
        body = response.json()
        assert body["inGame"] is True
        assert body["side"] == "home"
        assert body["battingOrder"] == "501"
        assert body["rawGameState"] == "In Progress"

    def test_simulate_skips_provider(self, client, provider):
        response = client.get("/api/playerStatus", params={"simulate": "true", "playerName": "Jane Doe"})
        assert response.status_code == 200
        assert response.json()["simulated"] is True
        assert provider.snapshot_calls == 0

    def test_missing_params(self, client):
        response = client.get("/api/playerStatus", params={"playerName": "Jane Doe"})
        assert response.status_code == 400

    def test_player_not_in_game(self, client):
        response = client.get("/api/playerStatus", params={"gamePk": "776001", "playerName": "Nobody"})
        assert response.status_code == 404
        body = response.json()
        assert body["code"] == "PLAYER_NOT_IN_GAME"
        assert body["rawGameState"] == "In Progress"
        assert body["gameTeams"] == {"home": "Glendale Desert Dogs", "away": "Scottsdale Scorpions"}

    def test_team_mismatch(self, client):
        response = client.get(
            "/api/playerStatus",
            params={"gamePk": "776001", "playerName": "Jane Doe", "team": "Mesa Solar Sox"},
        )
        assert response.status_code == 409
        assert response.json()["code"] == "TEAM_MISMATCH"

    def test_provider_failure(self, client, provider):
        provider.snapshots = [ProviderError("feed/live: HTTP 503")]
        response = client.get("/api/playerStatus", params={"gamePk": "776001", "playerName": "Jane Doe"})
        assert response.status_code == 502
        assert response.json()["code"] == "PROVIDER_ERROR"


class TestMalformedUpstream:
    """Wrong-shaped MLB payloads map to PROVIDER_ERROR, not a 500."""

    @pytest.fixture
    def mlb(self, client, monkeypatch):
        payloads = {
            "/api/v1/teams": {"teams": ["Glendale Desert Dogs"]},
            "/api/v1.1/game/1/feed/live": {"gameData": "oops"},
        }
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payloads[request.url.path]))
        )
        mlb = MLBStatsProvider(client=http_client)
        mlb.BASE_URL = "https://statsapi.mlb.com/api"
        monkeypatch.setattr(state, "_provider", mlb)
        monkeypatch.setattr(state._registry.resolver, "provider", mlb)
        return mlb

    def test_player_status(self, client, mlb):
        response = client.get("/api/playerStatus", params={"gamePk": "1", "playerName": "Jane Doe"})
        assert response.status_code == 502
        assert response.json()["code"] == "PROVIDER_ERROR"

    def test_game_lookup(self, client, mlb):
        response = client.get("/api/afl/gamePk", params={"team": "Desert Dogs", "date": "2025-10-15"})
        assert response.status_code == 502
        assert response.json()["code"] == "PROVIDER_ERROR"

    def test_watch_start(self, client, mlb):
        response = client.post(
            "/api/watch/start", json={"playerName": "Jane Doe", "team": "Desert Dogs", "date": "2025-10-15"}
        )
        assert response.status_code == 400
        assert response.json()["code"] == "PROVIDER_ERROR"
        assert client.get("/api/watch").json() == {"watchers": []}


class TestWatchLifecycle:

    def test_start_list_stop(self, client):
        response = client.post(
            "/api/watch/start",
            json={"playerName": "Sam Poe", "gamePk": 776001, "stopAfterAlert": False, "cooldownSec": 60},
        )
        assert response.status_code == 200
        started = response.json()
        assert started["gamePk"] == "776001"

        watchers = client.get("/api/watch").json()["watchers"]
        assert len(watchers) == 1
        assert watchers[0]["id"] == started["id"]
        assert watchers[0]["cooldownSec"] == 60
        assert watchers[0]["team"] == "Glendale Desert Dogs"

        assert client.post("/api/watch/stop", json={"id": started["id"]}).json() == {"ok": True}
        assert client.post("/api/watch/stop", json={"id": started["id"]}).json() == {"ok": False}
        assert client.get("/api/watch").json() == {"watchers": []}

    def test_start_by_team_and_date(self, client):
        response = client.post(
            "/api/watch/start",
            json={"playerName": "Sam Poe", "team": "Desert Dogs", "date": "2025-10-15", "stopAfterAlert": False},
        )
        assert response.status_code == 200
        assert response.json()["gamePk"] == "776001"

    def test_email_to_is_accepted_as_destination(self, client):
        client.post(
            "/api/watch/start",
            json={"playerName": "Sam Poe", "gamePk": "776001", "emailTo": "fan@example.com", "stopAfterAlert": False},
        )
        assert client.get("/api/watch").json()["watchers"][0]["notifyTo"] == "fan@example.com"

    def test_missing_player(self, client):
        response = client.post("/api/watch/start", json={"simulate": True})
        assert response.status_code == 400
        assert response.json()["error"] == "playerName is required"

    def test_resolution_failure(self, client):
        response = client.post(
            "/api/watch/start",
            json={"playerName": "Jane Doe", "team": "Solar Sox", "date": "2025-10-15"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "NO_GAME_FOUND"
        assert client.get("/api/watch").json() == {"watchers": []}

    def test_negative_cooldown_rejected(self, client):
        response = client.post("/api/watch/start", json={"playerName": "Jane Doe", "simulate": True, "cooldownSec": -1})
        assert response.status_code == 422

    def test_stop_requires_id(self, client):
        assert client.post("/api/watch/stop", json={}).status_code == 400


class TestEmail:

    def test_missing_recipient(self, client):
        assert client.post("/api/test/email", json={}).status_code == 400

    def test_sends(self, client, monkeypatch):
        send = AsyncMock()
        monkeypatch.setattr("entry_alert.routes.api.send_email", send)
        response = client.post("/api/test/email", json={"to": "fan@example.com"})
        assert response.json() == {"ok": True}
        assert send.await_args.args[0] == "fan@example.com"

    def test_smtp_failure(self, client, monkeypatch):
        monkeypatch.setattr(
            "entry_alert.routes.api.send_email", AsyncMock(side_effect=NotifierError("SMTP not configured"))
        )
        response = client.post("/api/test/email", json={"to": "fan@example.com"})
        assert response.status_code == 400
        assert response.json()["error"] == "SMTP not configured"
