"""Periodic fetch-aggregate-publish loop."""

from __future__ import annotations

import asyncio
import time
from typing import Iterable, Optional, Sequence

from shared.utils.concurrency import run_blocking
from stream_exporter.core.errors import EmptyWindowError, ExporterError
from stream_exporter.core.logger import get_logger
from stream_exporter.domain.models import Account, PollerState
from stream_exporter.infrastructure.cloudflare.client import CloudflareClient
from stream_exporter.metrics.aggregator import aggregate
from stream_exporter.metrics.definitions import (
    ACCOUNT_LABEL,
    STREAMING_MINUTES_VIEWED,
    PollerMetrics,
    declare_published_metrics,
)
from stream_exporter.metrics.registry import MetricsRegistry

logger = get_logger("exporter.poller")


def select_accounts(
    accounts: Iterable[Account], include_ids: Sequence[str]
) -> list[Account]:
    """Apply the inclusion allow-list; an empty list keeps every account."""
    if not include_ids:
        return list(accounts)
    wanted = set(include_ids)
    return [a for a in accounts if a.id in wanted]


class StreamPoller:
    """Drives one cycle per tick: list accounts, then fetch and publish each.

    Cycles run back to back with ``interval_seconds`` of idle time between
    them and never overlap. Failures for a single account leave that
    account's gauge at its previous value. Failing to list accounts is fatal
    and propagates out of ``run_forever``.
    """

    def __init__(
        self,
        client: CloudflareClient,
        registry: MetricsRegistry,
        include_accounts: Sequence[str] = (),
        interval_seconds: float = 60.0,
        window_minutes: int = 30,
        metrics: Optional[PollerMetrics] = None,
    ):
        self.client = client
        self.registry = registry
        self.include_accounts = list(include_accounts)
        self.interval_seconds = interval_seconds
        self.window_minutes = window_minutes
        self.metrics = metrics or PollerMetrics(registry)
        self.state = PollerState.IDLE
        declare_published_metrics(registry)

    async def run_cycle(self) -> int:
        """Run one full cycle; returns how many accounts were published."""
        self.state = PollerState.RUNNING
        started = time.perf_counter()
        try:
            accounts = await run_blocking(self.client.list_accounts)
            selected = select_accounts(accounts, self.include_accounts)
            logger.info(
                "poll_cycle_started",
                extra={
                    "accounts_total": len(accounts),
                    "accounts_selected": len(selected),
                },
            )
            published = 0
            for account in selected:
                if await self._poll_account(account):
                    published += 1
            self.metrics.last_success.set_to_current_time()
            logger.info(
                "poll_cycle_completed",
                extra={
                    "published": published,
                    "skipped": len(selected) - published,
                    "duration_s": round(time.perf_counter() - started, 3),
                },
            )
            return published
        finally:
            self.metrics.cycle_seconds.observe(time.perf_counter() - started)
            self.state = PollerState.IDLE

    async def _poll_account(self, account: Account) -> bool:
        logger.info(
            "fetching_streaming_analytics",
            extra={"account": account.name, "account_id": account.id},
        )
        try:
            samples = await run_blocking(
                self.client.fetch_trailing_window, account.id, self.window_minutes
            )
            value = aggregate(samples)
        except EmptyWindowError:
            self.metrics.fetch_errors.inc()
            logger.warning(
                "no_buckets_reported",
                extra={"account": account.name, "account_id": account.id},
            )
            return False
        except ExporterError as e:
            self.metrics.fetch_errors.inc()
            logger.error(
                "account_fetch_failed",
                extra={
                    "account": account.name,
                    "account_id": account.id,
                    **e.as_log_extra(),
                },
            )
            return False

        self.registry.set_gauge(
            STREAMING_MINUTES_VIEWED, {ACCOUNT_LABEL: account.name}, value
        )
        logger.debug(
            "gauge_published",
            extra={"account": account.name, "value": value, "buckets": len(samples)},
        )
        return True

    async def run_forever(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Tick immediately, then every ``interval_seconds`` until stopped."""
        stop_event = stop_event or asyncio.Event()
        logger.info(
            "poller_started",
            extra={
                "interval_s": self.interval_seconds,
                "window_minutes": self.window_minutes,
                "include_accounts": self.include_accounts,
            },
        )
        while not stop_event.is_set():
            try:
                await self.run_cycle()
                self.metrics.cycles.labels(outcome="success").inc()
            except ExporterError as e:
                # Only account enumeration errors escape run_cycle.
                self.metrics.cycles.labels(outcome="fatal").inc()
                logger.error("account_enumeration_failed", extra=e.as_log_extra())
                raise
            except Exception:  # noqa: BLE001
                self.metrics.cycles.labels(outcome="error").inc()
                logger.exception("poll_cycle_crashed")

            try:
                await asyncio.wait_for(stop_event.wait(), self.interval_seconds)
            except asyncio.TimeoutError:
                pass
        logger.info("poller_stopped")
