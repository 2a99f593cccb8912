"""Sequential fetch-and-decode of the latest report for each feed."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from datastreams.api.client import StreamsClient
from datastreams.config import Settings
from datastreams.errors import DecodeError, StreamsAPIError
from datastreams.feeds import Feed
from datastreams.reports.decode import DecodedReport, DecodeMode, decode_report

logger = structlog.get_logger()


@dataclass(frozen=True)
class FeedResult:
    feed: Feed
    report: DecodedReport | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.report is not None


def build_client(settings: Settings) -> StreamsClient:
    """Build a client from settings; raises ConfigurationError without credentials."""
    api_key, api_secret = settings.credentials()
    return StreamsClient(
        settings.streams_base_url,
        api_key,
        api_secret,
        timeout_seconds=settings.streams_timeout_seconds,
    )


def fetch_feed(client: StreamsClient, feed: Feed, mode: DecodeMode) -> FeedResult:
    try:
        payload = client.fetch_latest_report(feed.feed_id)
        report = decode_report(payload.full_report, mode)
    except StreamsAPIError as exc:
        logger.error("Fetch failed", symbol=feed.symbol, status=exc.status_code, error=str(exc))
        return FeedResult(feed=feed, error=str(exc))
    except DecodeError as exc:
        logger.error("Decode failed", symbol=feed.symbol, error=str(exc))
        return FeedResult(feed=feed, error=f"decode failed: {exc}")

    logger.info("Decoded report", symbol=feed.symbol, price=report.benchmark_price, mode=mode.value)
    return FeedResult(feed=feed, report=report)


def run_latest_reports(
    feeds: list[Feed],
    *,
    client: StreamsClient,
    mode: DecodeMode = DecodeMode.FULL,
) -> list[FeedResult]:
    """Fetch feeds one after another; a failing feed does not stop the rest."""
    results = [fetch_feed(client, feed, mode) for feed in feeds]
    failed = [result.feed.symbol for result in results if not result.ok]
    logger.info("Latest reports complete", total=len(results), failed=failed)
    return results
