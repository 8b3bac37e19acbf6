"""
Local handler tests using mocks.

These tests drive the router end to end with a mocked ClickHouse client, so
no store or AWS access is needed.

Run with: pytest tests/unit/test_handlers_local.py -v
"""

import json
from unittest.mock import MagicMock

import pytest
from clickhouse_connect.driver.exceptions import DatabaseError

from config.settings import Settings
from repositories.clickhouse_repo import ClickHouseRepository

EDGE_COLUMNS = [
    "asn", "asOrganization", "colo", "httpProtocol", "tlsVersion", "tlsCipher",
    "requestPriority", "edgeRequestKeepAliveStatus", "country", "isEUCountry",
    "continent", "city", "postalCode", "latitude", "longitude", "timezone",
    "region", "regionCode", "metroCode", "hostMetadata", "clientAcceptEncoding",
]


@pytest.fixture
def client():
    """Mocked clickhouse_connect client shared by every handler."""
    return MagicMock()


@pytest.fixture(autouse=True)
def repository(monkeypatch, client):
    from handlers import health_check, ingest, query

    repo = ClickHouseRepository(
        client=client,
        settings=Settings(clickhouse_url="https://ch.example:8443"),
    )
    for module in (health_check, ingest, query):
        monkeypatch.setattr(module, "_get_repository", lambda: repo)
    return repo


class TestQueryRoute:
    """Test the bounded read path."""

    def test_non_numeric_limit_uses_default(self, client, make_event):
        from handlers.main import lambda_handler

        client.query.return_value.named_results.return_value = iter([{"host": "a"}])
        resp = lambda_handler(make_event("/query", query={"limit": "abc"}), None)

        client.query.assert_called_once_with("SELECT * FROM default.request LIMIT 1000")
        assert resp["statusCode"] == 200
        assert resp["headers"]["Content-Type"] == "application/json"
        assert json.loads(resp["body"]) == [{"host": "a"}]

    def test_oversized_limit_is_clamped(self, client, make_event):
        from handlers.main import lambda_handler

        client.query.return_value.named_results.return_value = iter([])
        resp = lambda_handler(make_event("/query", query={"limit": "999999"}), None)

        client.query.assert_called_once_with("SELECT * FROM default.request LIMIT 10000")
        assert json.loads(resp["body"]) == []

    def test_missing_limit_uses_default(self, client, make_event):
        from handlers.main import lambda_handler

        client.query.return_value.named_results.return_value = iter([])
        lambda_handler(make_event("/query"), None)

        client.query.assert_called_once_with("SELECT * FROM default.request LIMIT 1000")

    def test_injection_attempt_never_reaches_sql(self, client, make_event):
        from handlers.main import lambda_handler

        client.query.return_value.named_results.return_value = iter([])
        lambda_handler(make_event("/query", query={"limit": "5; DROP TABLE request"}), None)

        client.query.assert_called_once_with("SELECT * FROM default.request LIMIT 5")

    def test_fixed_string_bytes_are_decoded(self, client, make_event):
        from handlers.main import lambda_handler

        client.query.return_value.named_results.return_value = iter([{"country": b"GB"}])
        resp = lambda_handler(make_event("/query"), None)
        assert json.loads(resp["body"]) == [{"country": "GB"}]

    def test_rows_with_dates_are_serialized(self, client, make_event):
        from datetime import datetime
        from handlers.main import lambda_handler

        client.query.return_value.named_results.return_value = iter(
            [{"seen": datetime(2024, 1, 2, 3, 4, 5)}]
        )
        resp = lambda_handler(make_event("/query"), None)
        assert json.loads(resp["body"]) == [{"seen": "2024-01-02 03:04:05"}]

    def test_query_failure_returns_500(self, client, make_event):
        from handlers.main import lambda_handler

        client.query.side_effect = DatabaseError("Code: 81. Database default does not exist")
        resp = lambda_handler(make_event("/query"), None)

        assert resp["statusCode"] == 500
        assert resp["body"].startswith("Error: ")


class TestIngestRoute:
    """Test the catch-all ingest path."""

    def test_root_request_is_recorded(self, client, make_event):
        from handlers.main import lambda_handler

        event = make_event("/", headers={"user-agent": "UA1", "host": "h.example"})
        resp = lambda_handler(event, None)

        assert resp["statusCode"] == 200
        assert resp["body"] == "Ok"
        client.raw_insert.assert_called_once()
        args, kwargs = client.raw_insert.call_args
        assert args == ("default.request",)

        lines = kwargs["insert_block"].split("\n")
        assert len(lines) == 1
        row = json.loads(lines[0])
        assert row["userAgent"] == "UA1"
        assert row["host"] == "h.example"
        assert row["requestMethod"] == "GET"
        assert all(row[column] is None for column in EDGE_COLUMNS)

    def test_malformed_edge_header_still_records(self, client, make_event):
        from handlers.main import lambda_handler

        event = make_event("/", headers={"cloudfront-viewer-asn": "²", "user-agent": "UA1"})
        resp = lambda_handler(event, None)

        assert resp["statusCode"] == 200
        assert resp["body"] == "Ok"
        row = json.loads(client.raw_insert.call_args.kwargs["insert_block"])
        assert row["asn"] is None
        assert row["userAgent"] == "UA1"

    def test_insert_failure_returns_500(self, client, make_event):
        from handlers.main import lambda_handler

        client.raw_insert.side_effect = DatabaseError("Code: 516. Authentication failed")
        resp = lambda_handler(make_event("/anything", method="POST"), None)

        assert resp["statusCode"] == 500
        assert resp["body"].startswith("Error: ")
        assert "Authentication failed" in resp["body"]


class TestPingRoute:
    """Test the liveness probe."""

    def test_ping_reachable_store(self, client, make_event):
        from handlers.main import lambda_handler

        client.ping.return_value = True
        resp = lambda_handler(make_event("/ping"), None)

        assert resp["statusCode"] == 200
        assert json.loads(resp["body"]) == {"success": True}
        client.query.assert_not_called()
        client.raw_insert.assert_not_called()
