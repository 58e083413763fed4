"""
Telemetry: Prometheus metrics and Sentry error tracking.

Labels stay low-cardinality; see metrics.py for the allowed label sets.
"""

from entry_alert.telemetry.metrics import (
    provider_requests_total,
    provider_errors_total,
    provider_latency_ms,
    watch_polls_total,
    watch_alerts_total,
    notifier_failures_total,
    watch_active_subscriptions,
    record_provider_request,
    record_watch_poll,
    record_watch_alert,
    record_notifier_failure,
    set_active_subscriptions,
    get_metrics_text,
)

__all__ = [
    "provider_requests_total",
    "provider_errors_total",
    "provider_latency_ms",
    "watch_polls_total",
    "watch_alerts_total",
    "notifier_failures_total",
    "watch_active_subscriptions",
    "record_provider_request",
    "record_watch_poll",
    "record_watch_alert",
    "record_notifier_failure",
    "set_active_subscriptions",
    "get_metrics_text",
]
