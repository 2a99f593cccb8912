"""HMAC request signing for the Data Streams REST API."""

from __future__ import annotations

import hashlib
import hmac
import time
from collections.abc import Callable
from dataclasses import dataclass

from datastreams.errors import ConfigurationError

AUTHORIZATION_HEADER = "Authorization"
TIMESTAMP_HEADER = "X-Authorization-Timestamp"
SIGNATURE_HEADER = "X-Authorization-Signature-SHA256"


def current_millis() -> int:
    """Wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def body_hash(body: bytes = b"") -> str:
    """SHA-256 hex digest of the request body (empty for GET)."""
    return hashlib.sha256(body).hexdigest()


def mask_secret(value: str | None, visible: int = 4) -> str:
    if not value:
        return "<empty>"
    if len(value) <= visible:
        return "…"
    return f"{value[:visible]}…"


@dataclass(frozen=True)
class SignedRequest:
    """Signature material for a single outbound request.

    Created fresh per call; the server rejects stale timestamps, so these are
    never cached or reused.
    """

    method: str
    path: str
    api_key: str
    timestamp_millis: int
    signature: str

    def headers(self) -> dict[str, str]:
        return {
            AUTHORIZATION_HEADER: self.api_key,
            TIMESTAMP_HEADER: str(self.timestamp_millis),
            SIGNATURE_HEADER: self.signature,
        }

    def __repr__(self) -> str:
        return (
            f"SignedRequest(method={self.method!r}, path={self.path!r}, "
            f"api_key={mask_secret(self.api_key)!r}, timestamp_millis={self.timestamp_millis}, "
            f"signature={self.signature!r})"
        )


def string_to_sign(method: str, path: str, digest: str, api_key: str, timestamp_millis: int) -> str:
    return f"{method} {path} {digest} {api_key} {timestamp_millis}"


def sign_request(
    method: str,
    path: str,
    api_key: str,
    api_secret: str,
    *,
    body: bytes = b"",
    now_fn: Callable[[], int] = current_millis,
) -> SignedRequest:
    """Sign a request with HMAC-SHA256 over method, path, body hash, key and timestamp.

    The clock is read once, so the timestamp header and the signed timestamp
    always agree.

    Raises:
        ConfigurationError: if the API key or secret is empty.
        ValueError: if the method is empty or the path does not start with "/".
    """
    if not api_key or not api_secret:
        raise ConfigurationError("API key and secret must be non-empty")
    if not method:
        raise ValueError("HTTP method must be non-empty")
    if not path.startswith("/"):
        raise ValueError(f"Request path must start with '/': {path!r}")

    timestamp_millis = now_fn()
    message = string_to_sign(method, path, body_hash(body), api_key, timestamp_millis)
    signature = hmac.new(api_secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()

    return SignedRequest(
        method=method,
        path=path,
        api_key=api_key,
        timestamp_millis=timestamp_millis,
        signature=signature,
    )
