"""Rate limiting and metrics token check.

Callers are not authenticated; the public API is only rate limited per client IP.
"""

import logging
from typing import Optional

from slowapi import Limiter
from slowapi.util import get_remote_address

from entry_alert.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# Rate limiter using client IP
limiter = Limiter(key_func=get_remote_address)


def verify_metrics_token(authorization: Optional[str]) -> Optional[str]:
    """
    Check a "Bearer <token>" header against METRICS_BEARER_TOKEN.

    Returns None when access is allowed, otherwise the reason it was refused.
    An empty METRICS_BEARER_TOKEN leaves /metrics open.
    """
    expected_token = settings.METRICS_BEARER_TOKEN
    if not expected_token:
        return None
    if not authorization:
        return "Missing Authorization header"
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return "Invalid Authorization format"
    if parts[1] != expected_token:
        logger.warning("Invalid metrics token attempt")
        return "Invalid token"
    return None
