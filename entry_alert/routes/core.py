"""Core routes: health and metrics.

- /health: public, rate limited
- /metrics: Bearer token when METRICS_BEARER_TOKEN is set
"""

from fastapi import APIRouter, Header, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from entry_alert.security import limiter, verify_metrics_token
from entry_alert.state import get_registry
from entry_alert.telemetry import get_metrics_text

router = APIRouter(tags=["core"])


class HealthResponse(BaseModel):
    status: str
    active_watchers: int


@router.get("/health", response_model=HealthResponse)
@limiter.limit("120/minute")
async def health_check(request: Request):
    """Health check endpoint."""
    return HealthResponse(status="ok", active_watchers=len(get_registry()))


@router.get("/metrics")
async def prometheus_metrics(
    authorization: str = Header(None, alias="Authorization"),
):
    """Prometheus metrics: provider requests, watcher polls, alerts, notifier failures."""
    refused = verify_metrics_token(authorization)
    if refused:
        return PlainTextResponse(
            content=f"# Unauthorized: {refused}\n",
            status_code=401,
            media_type="text/plain",
        )

    content, content_type = get_metrics_text()
    return PlainTextResponse(content=content, media_type=content_type)
