"""Tests for the reports API client (no network calls)."""

import hashlib
import hmac

import httpx
import pytest

from datastreams.api.client import latest_report_path
from datastreams.errors import ConfigurationError, StreamsAPIError

from conftest import ETH_FEED_ID, FIXED_MILLIS, build_full_report, report_response


class TestLatestReportPath:
    """Tests for latest_report_path()."""

    def test_format(self):
        """Should put the feed id in the feedID query parameter."""
        assert latest_report_path(ETH_FEED_ID) == f"/api/v1/reports/latest?feedID={ETH_FEED_ID}"


class TestFetchLatestReport:
    """Tests for StreamsClient.fetch_latest_report()."""

    def test_sends_signed_get(self, make_client):
        """Should send a GET with the three auth headers."""
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return report_response(ETH_FEED_ID, build_full_report())

        client = make_client(handler)
        payload = client.fetch_latest_report(ETH_FEED_ID)

        assert payload.feed_id == ETH_FEED_ID
        assert payload.full_report == build_full_report()
        assert payload.observations_timestamp == 1_700_000_030

        request = captured[0]
        assert request.method == "GET"
        assert str(request.url) == f"https://streams.test/api/v1/reports/latest?feedID={ETH_FEED_ID}"
        assert request.headers["Authorization"] == "test-key-123"
        assert request.headers["X-Authorization-Timestamp"] == str(FIXED_MILLIS)

        path = f"/api/v1/reports/latest?feedID={ETH_FEED_ID}"
        message = f"GET {path} {hashlib.sha256(b'').hexdigest()} test-key-123 {FIXED_MILLIS}"
        expected = hmac.new(b"test-secret-456", message.encode(), hashlib.sha256).hexdigest()
        assert request.headers["X-Authorization-Signature-SHA256"] == expected

    def test_signs_each_request_afresh(self, make_client):
        """Should read a new timestamp for every request."""
        timestamps: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            timestamps.append(request.headers["X-Authorization-Timestamp"])
            return report_response(ETH_FEED_ID, "0x")

        client = make_client(handler)
        ticks = iter([1, 2])
        client._now_fn = lambda: next(ticks)
        client.fetch_latest_report(ETH_FEED_ID)
        client.fetch_latest_report(ETH_FEED_ID)

        assert timestamps == ["1", "2"]

    def test_http_error_raises(self, make_client):
        """Should raise StreamsAPIError with the status code."""
        client = make_client(lambda request: httpx.Response(401, json={"error": "unauthorized"}))

        with pytest.raises(StreamsAPIError) as exc_info:
            client.fetch_latest_report(ETH_FEED_ID)
        assert exc_info.value.status_code == 401
        assert "401" in str(exc_info.value)

    def test_invalid_json_raises(self, make_client):
        """Should raise for a non-JSON body."""
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(StreamsAPIError, match="Invalid JSON"):
            client.fetch_latest_report(ETH_FEED_ID)

    def test_missing_report_raises(self, make_client):
        """Should raise when the envelope has no report object."""
        client = make_client(lambda request: httpx.Response(200, json={"reports": []}))

        with pytest.raises(StreamsAPIError, match="Invalid envelope"):
            client.fetch_latest_report(ETH_FEED_ID)

    def test_transport_error_raises(self, make_client):
        """Should wrap transport failures."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        with pytest.raises(StreamsAPIError, match="Request failed"):
            client.fetch_latest_report(ETH_FEED_ID)

    def test_empty_credentials_raise(self, make_client):
        """Should raise ConfigurationError before sending anything."""
        client = make_client(lambda request: httpx.Response(200))
        client._api_key = ""

        with pytest.raises(ConfigurationError):
            client.fetch_latest_report(ETH_FEED_ID)
