"""Metric names and the exporter's own operational metrics."""

from __future__ import annotations

from shared.metrics import get_counter, get_gauge, get_histogram

from .registry import MetricsRegistry

STREAMING_MINUTES_VIEWED = "cloudflare_streaming_minutes_viewed"
STREAMING_MINUTES_VIEWED_HELP = "Number of minutes viewed by a user"
ACCOUNT_LABEL = "account"

SERVICE_PREFIX = "stream_exporter"


class PollerMetrics:
    """Self-observability for the polling loop, registered on ``registry``."""

    def __init__(self, registry: MetricsRegistry):
        reg = registry.collector_registry
        self.cycles = get_counter(
            "poll_cycles_total",
            "Polling cycles by outcome.",
            registry=reg,
            service=SERVICE_PREFIX,
            labelnames=("outcome",),
        )
        self.fetch_errors = get_counter(
            "account_fetch_errors_total",
            "Per-account analytics fetches that failed or returned no buckets.",
            registry=reg,
            service=SERVICE_PREFIX,
        )
        self.cycle_seconds = get_histogram(
            "poll_cycle_seconds",
            "Wall time of one complete polling cycle.",
            registry=reg,
            service=SERVICE_PREFIX,
            buckets=[0.5, 1, 2.5, 5, 10, 30, 60, 120],
        )
        self.last_success = get_gauge(
            "last_successful_cycle_timestamp_seconds",
            "Unix time the last polling cycle completed.",
            registry=reg,
            service=SERVICE_PREFIX,
        )


def declare_published_metrics(registry: MetricsRegistry) -> None:
    registry.declare_gauge(
        STREAMING_MINUTES_VIEWED,
        STREAMING_MINUTES_VIEWED_HELP,
        labelnames=(ACCOUNT_LABEL,),
    )
