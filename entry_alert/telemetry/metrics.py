"""
Prometheus metrics for the entry watcher.

Design principles:
- Low cardinality (controlled labels)
- Best-effort (never block main flow)

=============================================================================
CARDINALITY CONTROL
=============================================================================

ALLOWED LABELS (bounded sets):
- provider:     "mlb_stats"
- endpoint:     "teams", "schedule", "feed/live"
- status_code:  "200", "404", "429", "500", "0"
- error_code:   "timeout", "request_error", "http_5xx", "malformed"
- outcome:      "ok", "provider_error", "timeout", "error"
- channel:      "email", "sms", "none"

FORBIDDEN AS LABELS: subscription ids, gamePk, player or team names, URLs.
Use logs for those.
=============================================================================
"""

import logging

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

logger = logging.getLogger(__name__)

# =============================================================================
# PROVIDER METRICS
# =============================================================================

provider_requests_total = Counter(
    "entry_alert_provider_requests_total",
    "Total requests to the live data provider",
    ["provider", "endpoint", "status_code"],
)

provider_errors_total = Counter(
    "entry_alert_provider_errors_total",
    "Total errors from the live data provider",
    ["provider", "endpoint", "error_code"],
)

provider_latency_ms = Histogram(
    "entry_alert_provider_latency_ms",
    "Provider request latency in milliseconds",
    ["provider", "endpoint"],
    buckets=[25, 50, 100, 250, 500, 1000, 2500, 5000, 10000],
)

# =============================================================================
# WATCHER METRICS
# =============================================================================

watch_polls_total = Counter(
    "entry_alert_watch_polls_total",
    "Watcher polls by outcome",
    ["outcome"],
)

watch_alerts_total = Counter(
    "entry_alert_watch_alerts_total",
    "Entry alerts delivered",
    ["channel"],
)

notifier_failures_total = Counter(
    "entry_alert_notifier_failures_total",
    "Notification deliveries that failed",
    ["channel"],
)

watch_active_subscriptions = Gauge(
    "entry_alert_watch_active_subscriptions",
    "Subscriptions currently registered",
)


# =============================================================================
# HELPERS (best-effort)
# =============================================================================

def record_provider_request(
    provider: str,
    endpoint: str,
    status_code: int,
    latency_ms: float,
    error_code: str = None,
) -> None:
    """Record one provider request; error_code also bumps the error counter."""
    try:
        provider_requests_total.labels(
            provider=provider, endpoint=endpoint, status_code=str(status_code)
        ).inc()
        provider_latency_ms.labels(provider=provider, endpoint=endpoint).observe(latency_ms)
        if error_code:
            provider_errors_total.labels(
                provider=provider, endpoint=endpoint, error_code=error_code
            ).inc()
    except Exception as e:
        logger.debug(f"Failed to record provider metrics: {e}")


def record_watch_poll(outcome: str) -> None:
    try:
        watch_polls_total.labels(outcome=outcome).inc()
    except Exception as e:
        logger.debug(f"Failed to record poll metric: {e}")


def record_watch_alert(channel: str) -> None:
    try:
        watch_alerts_total.labels(channel=channel).inc()
    except Exception as e:
        logger.debug(f"Failed to record alert metric: {e}")


def record_notifier_failure(channel: str) -> None:
    try:
        notifier_failures_total.labels(channel=channel).inc()
    except Exception as e:
        logger.debug(f"Failed to record notifier metric: {e}")


def set_active_subscriptions(count: int) -> None:
    try:
        watch_active_subscriptions.set(count)
    except Exception as e:
        logger.debug(f"Failed to set subscriptions gauge: {e}")


def get_metrics_text() -> tuple[str, str]:
    """Return (payload, content_type) for the /metrics endpoint."""
    return generate_latest().decode("utf-8"), CONTENT_TYPE_LATEST
