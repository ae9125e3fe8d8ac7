"""Synchronous Cloudflare API client.

Account listing goes through the v4 REST API, Stream analytics through the
GraphQL analytics endpoint. Each call is attempted exactly once; callers
decide whether a failure is fatal.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import requests
from pydantic import ValidationError

from stream_exporter.core.errors import AuthenticationError, RemoteError
from stream_exporter.core.logger import get_logger
from stream_exporter.domain.models import Account, AnalyticsWindow, TimeBucketSample

from .queries import STREAM_MINUTES_VIEWED_QUERY
from .schemas import AccountsEnvelope, StreamAnalyticsEnvelope

logger = get_logger("exporter.cloudflare")

DEFAULT_API_BASE_URL = "https://api.cloudflare.com/client/v4"
DEFAULT_GRAPHQL_ENDPOINT = "https://api.cloudflare.com/client/v4/graphql/"


def format_graphql_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class CloudflareClient:
    def __init__(
        self,
        api_token: str,
        api_base_url: str = DEFAULT_API_BASE_URL,
        graphql_endpoint: str = DEFAULT_GRAPHQL_ENDPOINT,
        timeout: float = 30.0,
        page_size: int = 50,
        session: Optional[requests.Session] = None,
    ):
        self.api_token = api_token
        self.api_base_url = api_base_url.rstrip("/")
        self.graphql_endpoint = graphql_endpoint
        self.timeout = timeout
        self.page_size = page_size
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def _request(
        self,
        service: str,
        method: str,
        url: str,
        reject_is_auth: bool = False,
        **kwargs,
    ) -> Any:
        try:
            resp = self.session.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise RemoteError(service, str(e), details={"url": url}) from e

        if reject_is_auth and resp.status_code in (401, 403):
            raise AuthenticationError(
                "Cloudflare rejected the API token",
                details={"status": resp.status_code, "url": url},
            )
        if resp.status_code >= 400:
            raise RemoteError(
                service,
                f"HTTP {resp.status_code}",
                details={"status": resp.status_code, "url": url},
            )
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteError(
                service, "response is not JSON", details={"url": url}
            ) from e

    def list_accounts(self) -> list[Account]:
        """Return every account visible to the token, in provider order."""
        if not self.api_token:
            raise AuthenticationError("No Cloudflare API token configured")

        url = f"{self.api_base_url}/accounts"
        accounts: list[Account] = []
        page = 1
        while True:
            payload = self._request(
                "accounts",
                "GET",
                url,
                reject_is_auth=True,
                params={"page": page, "per_page": self.page_size},
            )
            try:
                envelope = AccountsEnvelope.model_validate(payload)
            except ValidationError as e:
                raise RemoteError("accounts", "unexpected response shape") from e
            if not envelope.success:
                messages = "; ".join(m.message for m in envelope.errors) or "unknown"
                raise RemoteError(
                    "accounts",
                    messages,
                    details={"codes": [m.code for m in envelope.errors]},
                )
            accounts.extend(envelope.result or [])

            info = envelope.result_info
            if info is None or page >= info.total_pages:
                break
            page += 1

        logger.debug("accounts_listed", extra={"count": len(accounts)})
        return accounts

    def fetch_window(
        self, account_id: str, window_start: datetime, window_end: datetime
    ) -> list[TimeBucketSample]:
        """Run the minutes-viewed query for ``[window_start, window_end)``."""
        body = {
            "query": STREAM_MINUTES_VIEWED_QUERY,
            "variables": {
                "accountID": account_id,
                "mintime": format_graphql_time(window_start),
                "maxtime": format_graphql_time(window_end),
            },
        }
        payload = self._request("graphql", "POST", self.graphql_endpoint, json=body)
        try:
            envelope = StreamAnalyticsEnvelope.model_validate(payload)
        except ValidationError as e:
            raise RemoteError(
                "graphql",
                "unexpected response shape",
                details={"account_id": account_id},
            ) from e
        if envelope.errors:
            raise RemoteError(
                "graphql",
                "; ".join(err.message for err in envelope.errors),
                details={"account_id": account_id},
            )
        return envelope.samples()

    def fetch_trailing_window(
        self, account_id: str, minutes: int = 30, now: Optional[datetime] = None
    ) -> list[TimeBucketSample]:
        window = AnalyticsWindow.trailing(minutes, now)
        return self.fetch_window(account_id, window.start, window.end)

    def close(self) -> None:
        self.session.close()
