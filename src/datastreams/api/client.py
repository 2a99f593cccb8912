"""HTTP client for the Data Streams reports API."""

from __future__ import annotations

from collections.abc import Callable
from urllib.parse import urlencode

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError

from datastreams.auth.signer import current_millis, mask_secret, sign_request
from datastreams.errors import StreamsAPIError

logger = structlog.get_logger()

LATEST_REPORT_PATH = "/api/v1/reports/latest"


class ReportPayload(BaseModel):
    """The ``report`` object of the upstream response."""

    feed_id: str = Field(..., alias="feedID")
    full_report: str = Field(..., alias="fullReport")
    valid_from_timestamp: int | None = Field(None, alias="validFromTimestamp")
    observations_timestamp: int | None = Field(None, alias="observationsTimestamp")


class ReportResponse(BaseModel):
    report: ReportPayload


def latest_report_path(feed_id: str) -> str:
    return f"{LATEST_REPORT_PATH}?{urlencode({'feedID': feed_id})}"


class StreamsClient:
    """Signed GET requests against the reports API.

    Every call signs afresh; a signed request is never reused.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        api_secret: str,
        *,
        timeout_seconds: float = 10.0,
        http_client: httpx.Client | None = None,
        now_fn: Callable[[], int] = current_millis,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._api_secret = api_secret
        self._timeout_seconds = timeout_seconds
        self._http_client = http_client
        self._now_fn = now_fn

    @property
    def base_url(self) -> str:
        return self._base_url

    def fetch_latest_report(self, feed_id: str) -> ReportPayload:
        """Fetch the latest report envelope for a feed.

        Raises:
            ConfigurationError: if credentials are empty.
            StreamsAPIError: on transport failure, non-2xx status or an unusable body.
        """
        path = latest_report_path(feed_id)
        signed = sign_request("GET", path, self._api_key, self._api_secret, now_fn=self._now_fn)
        url = f"{self._base_url}{path}"

        logger.info(
            "Fetching latest report",
            feed_id=feed_id,
            api_key=mask_secret(self._api_key),
            timestamp=signed.timestamp_millis,
        )

        try:
            response = self._get(url, signed.headers())
        except httpx.RequestError as exc:
            logger.error("Request error", url=url, error=str(exc))
            raise StreamsAPIError(f"Request failed: {exc}") from exc

        if response.status_code >= 400:
            logger.warning("HTTP error", url=url, status=response.status_code)
            raise StreamsAPIError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            envelope = ReportResponse.model_validate(response.json())
        except ValueError as exc:
            # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors
            kind = "envelope" if isinstance(exc, ValidationError) else "JSON"
            raise StreamsAPIError(f"Invalid {kind} in response: {exc}", status_code=response.status_code) from exc

        logger.info("Fetched report", feed_id=envelope.report.feed_id, elapsed_ms=_elapsed_ms(response))
        return envelope.report

    def _get(self, url: str, headers: dict[str, str]) -> httpx.Response:
        if self._http_client is not None:
            return self._http_client.get(url, headers=headers, timeout=self._timeout_seconds)
        with httpx.Client(timeout=self._timeout_seconds) as client:
            return client.get(url, headers=headers)


def _elapsed_ms(response: httpx.Response) -> int | None:
    try:
        return int(response.elapsed.total_seconds() * 1000)
    except RuntimeError:
        return None
