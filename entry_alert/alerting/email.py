"""
Email delivery over SMTP.

smtplib is blocking, so sends run in the default executor.
"""

import asyncio
import html as html_lib
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from entry_alert.config import get_settings
from entry_alert.errors import NotifierError

logger = logging.getLogger(__name__)


def render_html(subject: str, body: str) -> str:
    """Wrap a plain-text alert body the way alert emails are rendered."""
    return f"<h2>{html_lib.escape(subject)}</h2><pre>{html_lib.escape(body)}</pre>"


async def send_email(to_email: str, subject: str, body: str, html: Optional[str] = None) -> None:
    """
    Send one email.

    Args:
        to_email: Recipient address.
        subject: Subject line.
        body: Plain-text body.
        html: Optional HTML alternative; rendered from body when omitted.

    Raises:
        NotifierError: SMTP disabled/unconfigured or the send failed.
    """
    settings = get_settings()

    if not settings.SMTP_ENABLED or not settings.SMTP_FROM_EMAIL:
        raise NotifierError("SMTP is not configured")

    try:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None,
            _send_smtp_email,
            settings.SMTP_HOST,
            settings.SMTP_PORT,
            settings.SMTP_USERNAME,
            settings.SMTP_PASSWORD,
            settings.SMTP_FROM_EMAIL,
            to_email,
            subject,
            body,
            html or render_html(subject, body),
        )
    except (smtplib.SMTPException, OSError) as e:
        raise NotifierError(f"SMTP send failed: {e}") from e

    logger.info(f"[ALERT] Email sent to {to_email}: {subject}")


def _send_smtp_email(
    host: str,
    port: int,
    username: str,
    password: str,
    from_email: str,
    to_email: str,
    subject: str,
    body: str,
    html: str,
) -> None:
    """Synchronous SMTP send (runs in executor)."""
    msg = MIMEMultipart("alternative")
    msg["From"] = from_email
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.attach(MIMEText(body, "plain"))
    msg.attach(MIMEText(html, "html"))

    with smtplib.SMTP(host, port, timeout=30) as server:
        server.starttls()
        if username:
            server.login(username, password)
        server.sendmail(from_email, to_email, msg.as_string())
