"""Pytest fixtures for datastreams tests."""

from collections.abc import Callable

import httpx
import pytest

from datastreams.api.client import StreamsClient
from datastreams.config import Settings

FIXED_MILLIS = 1_700_000_000_123
ETH_FEED_ID = "0x000359843a543ee2fe414dc14c7e7920ef10f4372990b79d6361cdc0dd1ba782"
BTC_FEED_ID = "0x00037da06d56d083fe599397a4769a042d63aa73dc4ef57709d31e9971a5b439"


def build_full_report(
    *,
    feed_id: str = ETH_FEED_ID,
    valid_from: int = 1_700_000_000,
    observations: int = 1_700_000_030,
    price_wei: int = 3_000_500_000_000_000_000_000,
    bid_wei: int = 3_000_000_000_000_000_000_000,
    ask_wei: int = 3_001_000_000_000_000_000_000,
    length: int = 544,
) -> str:
    """Build a 0x-prefixed payload with fields at the full-report offsets."""
    buffer = bytearray(max(length, 544))
    buffer[256:288] = bytes.fromhex(feed_id[2:])
    # validFromTimestamp shares the last 4 bytes of the feed id word
    buffer[284:288] = valid_from.to_bytes(4, "big")
    buffer[316:320] = observations.to_bytes(4, "big")
    buffer[448:480] = price_wei.to_bytes(32, "big")
    buffer[480:512] = bid_wei.to_bytes(32, "big")
    buffer[512:544] = ask_wei.to_bytes(32, "big")
    return "0x" + bytes(buffer[:length]).hex()


def build_price_only_report(price: int, length: int = 64) -> str:
    buffer = bytearray(max(length, 64))
    buffer[32:64] = price.to_bytes(32, "big")
    return "0x" + bytes(buffer[:length]).hex()


@pytest.fixture
def fixed_clock() -> Callable[[], int]:
    return lambda: FIXED_MILLIS


@pytest.fixture
def full_report() -> str:
    return build_full_report()


@pytest.fixture
def test_settings(monkeypatch) -> Settings:
    """Settings with credentials, isolated from the real environment and .env."""
    monkeypatch.delenv("STREAMS_API_KEY", raising=False)
    monkeypatch.delenv("STREAMS_API_SECRET", raising=False)
    return Settings(
        _env_file=None,
        streams_api_key="test-key-123",
        streams_api_secret="test-secret-456",
        streams_base_url="https://streams.test",
    )


@pytest.fixture
def make_client(fixed_clock) -> Callable[[Callable[[httpx.Request], httpx.Response]], StreamsClient]:
    """Build a StreamsClient whose HTTP calls are served by a handler function."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> StreamsClient:
        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        return StreamsClient(
            "https://streams.test",
            "test-key-123",
            "test-secret-456",
            http_client=http_client,
            now_fn=fixed_clock,
        )

    return _make


def report_response(feed_id: str, full_report: str) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "report": {
                "feedID": feed_id,
                "fullReport": full_report,
                "validFromTimestamp": 1_700_000_000,
                "observationsTimestamp": 1_700_000_030,
            }
        },
    )
