"""Public API: game lookup, one-shot player status, watcher control, test email.

Wire names are camelCase to match the web client.
"""

import logging
from datetime import date
from typing import Optional, Union

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from entry_alert.alerting import send_email
from entry_alert.config import get_settings
from entry_alert.errors import EntryAlertError, NoEventFoundError, NotifierError
from entry_alert.security import limiter
from entry_alert.state import get_provider, get_registry, get_resolver
from entry_alert.watch import WatchRequest, detect_entry, simulated_status
from entry_alert.watch.detector import check_team

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/api", tags=["api"])

TRUTHY = {"1", "true", "yes", "on"}


class WatchStartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    player_name: Optional[str] = Field(None, alias="playerName")
    team: str = Field(default_factory=lambda: get_settings().DEFAULT_TEAM_NAME)
    target_date: Optional[date] = Field(None, alias="date")
    game_pk: Optional[Union[int, str]] = Field(None, alias="gamePk")
    simulate: bool = False
    notify_to: Optional[str] = Field(None, alias="notifyTo")
    email_to: Optional[str] = Field(None, alias="emailTo")
    cooldown_sec: Optional[float] = Field(None, alias="cooldownSec", ge=0)
    stop_after_alert: Optional[bool] = Field(None, alias="stopAfterAlert")


class WatchStopRequest(BaseModel):
    id: Optional[Union[int, str]] = None


class EmailTestRequest(BaseModel):
    to: Optional[str] = None
    subject: Optional[str] = None
    html: Optional[str] = None


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


@router.get("/afl/gamePk")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def lookup_game(
    request: Request,
    team: Optional[str] = Query(None),
    date_: Optional[date] = Query(None, alias="date"),
):
    """Nearest game for a team within the search window around a date (default today)."""
    team = team or settings.DEFAULT_TEAM_NAME
    base_date = date_ or date.today()
    resolver = get_resolver()

    try:
        game = await resolver.find_game(team, base_date)
    except NoEventFoundError:
        return {
            "gamePk": None,
            "status": f"No game found in +/-{resolver.window_days} days",
            "date": base_date.isoformat(),
        }
    return {"gamePk": game.game_pk, "status": game.status, "date": game.date.isoformat()}


@router.get("/playerStatus")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def player_status(
    request: Request,
    game_pk: Optional[str] = Query(None, alias="gamePk"),
    player_name: Optional[str] = Query(None, alias="playerName"),
    team: Optional[str] = Query(None),
    simulate: Optional[str] = Query(None),
):
    """
    One-shot entry check without creating a subscription.

    404 PLAYER_NOT_IN_GAME when the player is on neither roster, 409
    TEAM_MISMATCH when `team` plays on neither side.
    """
    if (simulate or "").lower() in TRUTHY:
        return simulated_status(player_name or "").to_dict()

    if not game_pk or not player_name:
        return _error(400, "gamePk and playerName are required (or use simulate=1)")

    snapshot = await get_provider().snapshot(game_pk)
    if team:
        check_team(snapshot, team)
    status = detect_entry(snapshot, player_name, require_roster=True)
    return status.to_dict()


@router.post("/watch/start")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def start_watch(request: Request, body: WatchStartRequest):
    """Resolve the game and start an adaptive watcher."""
    if not body.player_name or not body.player_name.strip():
        return _error(400, "playerName is required")

    watch_request = WatchRequest(
        player_name=body.player_name,
        team=body.team,
        target_date=body.target_date,
        game_pk=str(body.game_pk) if body.game_pk else None,
        simulate=body.simulate,
        notify_to=body.notify_to or body.email_to,
        cooldown_seconds=body.cooldown_sec,
        stop_after_alert=body.stop_after_alert,
    )
    try:
        subscription = await get_registry().create(watch_request)
    except EntryAlertError as e:
        logger.info(f"[API] watch/start rejected: {e}")
        return _error(400, str(e), code=e.code)

    return {"id": subscription.id, "gamePk": subscription.game_pk}


@router.post("/watch/stop")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def stop_watch(request: Request, body: WatchStopRequest):
    if body.id is None or str(body.id) == "":
        return _error(400, "id is required")
    return {"ok": get_registry().stop(str(body.id))}


@router.get("/watch")
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def list_watches(request: Request):
    return {"watchers": get_registry().list_all()}


@router.post("/test/email")
@limiter.limit("10/minute")
async def send_test_email(request: Request, body: EmailTestRequest):
    """Send a test email through the configured SMTP transport."""
    if not body.to:
        return _error(400, 'Missing "to" email address')

    subject = body.subject or "Test Email from Player Alert System"
    text = "Test Email\n\nThis is a test from the Player Alert System."
    html = body.html or "<h2>Test Email</h2><p>This is a test from the Player Alert System.</p>"
    try:
        await send_email(body.to, subject, text, html=html)
    except NotifierError as e:
        return _error(400, str(e))
    return {"ok": True}
