"""SMS delivery through the Twilio Messages REST endpoint."""

import logging

import httpx

from entry_alert.config import get_settings
from entry_alert.errors import NotifierError

logger = logging.getLogger(__name__)

# Twilio rejects bodies above 1600 characters
MAX_SMS_LENGTH = 1600


async def send_sms(to_number: str, body: str, client: httpx.AsyncClient = None) -> None:
    """
    Send one SMS.

    Raises:
        NotifierError: Twilio unconfigured, request failed, or non-2xx response.
    """
    settings = get_settings()
    if not (settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN and settings.TWILIO_FROM):
        raise NotifierError("Twilio is not configured")

    url = f"{settings.TWILIO_API_BASE_URL.rstrip('/')}/Accounts/{settings.TWILIO_ACCOUNT_SID}/Messages.json"
    form = {"To": to_number, "From": settings.TWILIO_FROM, "Body": body[:MAX_SMS_LENGTH]}
    auth = (settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)

    try:
        if client is not None:
            response = await client.post(url, data=form, auth=auth)
        else:
            async with httpx.AsyncClient(timeout=15.0) as own_client:
                response = await own_client.post(url, data=form, auth=auth)
    except httpx.HTTPError as e:
        raise NotifierError(f"Twilio request failed: {e}") from e

    if response.status_code >= 400:
        try:
            detail = response.json().get("message", response.text)
        except ValueError:
            detail = response.text
        raise NotifierError(f"Twilio returned {response.status_code}: {detail}")

    logger.info(f"[ALERT] SMS sent to {to_number}")
