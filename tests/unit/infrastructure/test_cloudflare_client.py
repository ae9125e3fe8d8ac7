from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from stream_exporter.core.errors import AuthenticationError, RemoteError
from stream_exporter.domain.models import Account
from stream_exporter.infrastructure.cloudflare.client import (
    CloudflareClient,
    format_graphql_time,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_response(status_code=200, payload=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


def accounts_page(accounts, page=1, total_pages=1):
    return {
        "success": True,
        "errors": [],
        "messages": [],
        "result": [
            {"id": i, "name": n, "type": "standard", "settings": {}}
            for i, n in accounts
        ],
        "result_info": {
            "page": page,
            "per_page": 50,
            "total_pages": total_pages,
            "count": len(accounts),
            "total_count": len(accounts),
        },
    }


def analytics_payload(*counts):
    groups = [
        {
            "sum": {"minutesViewed": c},
            "dimensions": {"ts": f"2024-05-01T11:{30 + 5 * i:02d}:00Z"},
        }
        for i, c in enumerate(counts)
    ]
    return {
        "data": {
            "viewer": {"accounts": [{"streamMinutesViewedAdaptiveGroups": groups}]}
        },
        "errors": None,
    }


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return CloudflareClient("test-token", session=session)


class TestListAccounts:
    def test_returns_accounts_in_order(self, client, session):
        session.request.return_value = make_response(
            payload=accounts_page([("1", "Acme"), ("2", "Globex")])
        )

        accounts = client.list_accounts()

        assert accounts == [
            Account(id="1", name="Acme"),
            Account(id="2", name="Globex"),
        ]
        method, url = session.request.call_args.args
        assert method == "GET"
        assert url == "https://api.cloudflare.com/client/v4/accounts"
        headers = session.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer test-token"

    def test_follows_pagination(self, client, session):
        session.request.side_effect = [
            make_response(payload=accounts_page([("1", "Acme")], 1, 2)),
            make_response(payload=accounts_page([("2", "Globex")], 2, 2)),
        ]

        accounts = client.list_accounts()

        assert [a.id for a in accounts] == ["1", "2"]
        pages = [c.kwargs["params"]["page"] for c in session.request.call_args_list]
        assert pages == [1, 2]

    def test_missing_token_fails_without_network(self, session):
        client = CloudflareClient("", session=session)
        with pytest.raises(AuthenticationError):
            client.list_accounts()
        session.request.assert_not_called()

    @pytest.mark.parametrize("status", [401, 403])
    def test_rejected_token(self, client, session, status):
        session.request.return_value = make_response(status, {"success": False})
        with pytest.raises(AuthenticationError):
            client.list_accounts()

    def test_server_error(self, client, session):
        session.request.return_value = make_response(500, {})
        with pytest.raises(RemoteError) as exc:
            client.list_accounts()
        assert exc.value.details["status"] == 500

    def test_unsuccessful_envelope(self, client, session):
        session.request.return_value = make_response(
            payload={
                "success": False,
                "errors": [{"code": 9109, "message": "Invalid access token"}],
                "result": None,
            }
        )
        with pytest.raises(RemoteError, match="Invalid access token"):
            client.list_accounts()

    def test_transport_failure(self, client, session):
        session.request.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(RemoteError, match="connection refused"):
            client.list_accounts()

    def test_non_json_body(self, client, session):
        resp = make_response()
        resp.json.side_effect = ValueError("no json")
        session.request.return_value = resp
        with pytest.raises(RemoteError):
            client.list_accounts()


class TestFetchWindow:
    def test_parses_buckets(self, client, session):
        session.request.return_value = make_response(payload=analytics_payload(10, 20))

        samples = client.fetch_window("acct-1", NOW.replace(minute=0), NOW)

        assert [s.minutes_viewed for s in samples] == [10, 20]
        assert samples[0].timestamp == datetime(2024, 5, 1, 11, 30, tzinfo=timezone.utc)

    def test_posts_query_with_variables(self, client, session):
        session.request.return_value = make_response(payload=analytics_payload(1))

        start = datetime(2024, 5, 1, 11, 30, tzinfo=timezone.utc)
        client.fetch_window("acct-1", start, NOW)

        method, url = session.request.call_args.args
        assert method == "POST"
        assert url == "https://api.cloudflare.com/client/v4/graphql/"
        body = session.request.call_args.kwargs["json"]
        assert "streamMinutesViewedAdaptiveGroups" in body["query"]
        assert "limit: 1000" in body["query"]
        assert body["variables"] == {
            "accountID": "acct-1",
            "mintime": "2024-05-01T11:30:00Z",
            "maxtime": "2024-05-01T12:00:00Z",
        }

    def test_trailing_window_is_thirty_minutes(self, client, session):
        session.request.return_value = make_response(payload=analytics_payload(1))

        client.fetch_trailing_window("acct-1", now=NOW)

        variables = session.request.call_args.kwargs["json"]["variables"]
        assert variables["mintime"] == "2024-05-01T11:30:00Z"
        assert variables["maxtime"] == "2024-05-01T12:00:00Z"

    def test_no_groups_returns_empty_list(self, client, session):
        session.request.return_value = make_response(payload=analytics_payload())
        assert client.fetch_window("acct-1", NOW, NOW) == []

    def test_graphql_errors(self, client, session):
        session.request.return_value = make_response(
            payload={"data": None, "errors": [{"message": "quota exceeded"}]}
        )
        with pytest.raises(RemoteError, match="quota exceeded") as exc:
            client.fetch_window("acct-1", NOW, NOW)
        assert exc.value.details["account_id"] == "acct-1"

    def test_forbidden_is_remote_error(self, client, session):
        session.request.return_value = make_response(403, {})
        with pytest.raises(RemoteError):
            client.fetch_window("acct-1", NOW, NOW)

    def test_malformed_payload(self, client, session):
        broken = {"streamMinutesViewedAdaptiveGroups": [{"sum": {}}]}
        session.request.return_value = make_response(
            payload={"data": {"viewer": {"accounts": [broken]}}}
        )
        with pytest.raises(RemoteError, match="unexpected response shape"):
            client.fetch_window("acct-1", NOW, NOW)

    def test_timeout(self, client, session):
        session.request.side_effect = requests.Timeout("read timed out")
        with pytest.raises(RemoteError):
            client.fetch_window("acct-1", NOW, NOW)


def test_format_graphql_time_treats_naive_as_utc():
    assert format_graphql_time(datetime(2024, 5, 1, 8, 5, 9)) == "2024-05-01T08:05:09Z"


def test_close_closes_session(client, session):
    client.close()
    session.close.assert_called_once()
