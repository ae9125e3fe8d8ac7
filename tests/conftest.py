from datetime import datetime, timedelta, timezone

import pytest

from stream_exporter.domain.models import Account, TimeBucketSample
from stream_exporter.metrics.registry import MetricsRegistry

WINDOW_END = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeCloudflareClient:
    """In-memory stand-in for CloudflareClient used by poller tests."""

    def __init__(self, accounts, samples_by_id=None, failures=None, list_error=None):
        self.accounts = list(accounts)
        self.samples_by_id = samples_by_id or {}
        self.failures = failures or {}
        self.list_error = list_error
        self.list_calls = 0
        self.fetched: list[str] = []

    def list_accounts(self):
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return list(self.accounts)

    def fetch_trailing_window(self, account_id, minutes=30, now=None):
        self.fetched.append(account_id)
        if account_id in self.failures:
            raise self.failures[account_id]
        return list(self.samples_by_id.get(account_id, []))


@pytest.fixture
def registry():
    """Fresh registry without process collectors so output is deterministic."""
    return MetricsRegistry(include_process_metrics=False)


@pytest.fixture
def make_samples():
    def _make(*counts: int) -> list[TimeBucketSample]:
        return [
            TimeBucketSample(
                timestamp=WINDOW_END - timedelta(minutes=5 * (i + 1)),
                minutes_viewed=count,
            )
            for i, count in enumerate(counts)
        ]

    return _make


@pytest.fixture
def accounts_abc():
    return [
        Account(id="A", name="Alpha"),
        Account(id="B", name="Beta"),
        Account(id="C", name="Gamma"),
    ]


@pytest.fixture
def fake_client_factory():
    return FakeCloudflareClient
