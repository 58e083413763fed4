"""Channel routing and alert text for entry notifications."""

import logging
from datetime import datetime

from entry_alert.alerting.email import send_email
from entry_alert.alerting.sms import send_sms
from entry_alert.errors import NotifierError
from entry_alert.telemetry import record_notifier_failure

logger = logging.getLogger(__name__)


def channel_for(destination: str) -> str:
    """Email addresses contain '@'; anything else is treated as a phone number."""
    return "email" if "@" in destination else "sms"


async def send_notification(destination: str, subject: str, body: str) -> None:
    """
    Deliver a message to an email address or phone number.

    Raises:
        NotifierError: delivery failed (callers in the watcher log and continue).
    """
    if not destination:
        raise NotifierError("No notification destination")

    channel = channel_for(destination)
    try:
        if channel == "email":
            await send_email(destination, subject, body)
        else:
            await send_sms(destination, f"{subject}\n{body}")
    except NotifierError:
        record_notifier_failure(channel)
        raise


def build_entry_alert(team: str, player_name: str, game_pk: str, status, now: datetime = None) -> tuple[str, str]:
    """Build subject and body for an entry alert from an EntryStatus."""
    when = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    subject = f"ALERT: {player_name} just entered the game"
    body = (
        f"Team: {team}\n"
        f"GamePk: {game_pk}\n"
        f"When: {when}\n"
        f"Side: {status.side or '-'}\n"
        f"Batting Order: {status.batting_order or '-'}\n"
        f"Position: {status.position or '-'}\n"
        f"State: {status.raw_game_state or '-'}"
    )
    return subject, body
