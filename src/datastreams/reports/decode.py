"""Decoding of hex-encoded report payloads into structured fields.

Two interpretations of the same wire format are in use and both are kept:

* ``DecodeMode.FULL`` reads the feed id, both timestamps and three prices at
  the offsets listed in ``datastreams.reports.layout``, scaled by 10^18.
  A buffer too short for any field is an error.
* ``DecodeMode.PRICE_ONLY`` reads a single price from the second word, scaled
  by 10^2. A buffer shorter than two words decodes to a price of zero rather
  than an error; callers rely on that leniency.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from datastreams.errors import DecodeError, MalformedInputError, PriceOverflowError, TruncatedBufferError
from datastreams.reports.layout import (
    FULL_REPORT_LAYOUT,
    PRICE_ONLY_FIELD,
    PRICE_ONLY_MIN_LENGTH,
    FieldKind,
    FieldSpec,
)

logger = structlog.get_logger()

HEX_PREFIX = "0x"
_HEX_BODY = re.compile(r"[0-9a-fA-F]*")


class DecodeMode(Enum):
    FULL = "full"
    PRICE_ONLY = "price_only"


FULL_PRICE_SCALE = 10**18
PRICE_ONLY_SCALE = 10**2

SCALES: dict[DecodeMode, int] = {
    DecodeMode.FULL: FULL_PRICE_SCALE,
    DecodeMode.PRICE_ONLY: PRICE_ONLY_SCALE,
}


@dataclass(frozen=True)
class DecodedReport:
    """Decoded report fields. Price-only decodes leave all but the price unset."""

    raw_report: str
    mode: DecodeMode
    benchmark_price: float
    feed_id: str | None = None
    valid_from_timestamp: int | None = None
    observations_timestamp: int | None = None
    bid: float | None = None
    ask: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "feedId": self.feed_id,
            "validFromTimestamp": self.valid_from_timestamp,
            "observationsTimestamp": self.observations_timestamp,
            "benchmarkPrice": self.benchmark_price,
            "bid": self.bid,
            "ask": self.ask,
            "rawReport": self.raw_report,
            "mode": self.mode.value,
        }


@dataclass(frozen=True)
class DecodeOutcome:
    """Result of a non-raising decode: exactly one of report/error is set."""

    report: DecodedReport | None = None
    error: DecodeError | None = None

    @property
    def ok(self) -> bool:
        return self.report is not None


def parse_raw_report(raw_report: str) -> bytes:
    """Validate a 0x-prefixed hex string and return its bytes."""
    if not isinstance(raw_report, str) or not raw_report.startswith(HEX_PREFIX):
        raise MalformedInputError("Raw report must be a string starting with '0x'")
    body = raw_report[len(HEX_PREFIX) :]
    if not _HEX_BODY.fullmatch(body):
        raise MalformedInputError("Raw report contains non-hexadecimal characters")
    if len(body) % 2:
        raise MalformedInputError(f"Raw report has odd hex length {len(body)}")
    return bytes.fromhex(body)


def read_uint(buffer: bytes, field: FieldSpec) -> int:
    """Read a big-endian unsigned integer, refusing to read past the buffer."""
    if field.end > len(buffer):
        raise TruncatedBufferError(field.name, field.offset, field.end, len(buffer))
    return int.from_bytes(buffer[field.offset : field.end], "big")


def scale_price(value: int, scale: int) -> float:
    """Convert an integer word to a unit amount.

    ``int / int`` is correctly rounded for arbitrarily large integers; a
    quotient beyond float range raises rather than wrapping.
    """
    try:
        return value / scale
    except OverflowError as exc:
        raise PriceOverflowError(f"Price word {value} / {scale} exceeds float range") from exc


def _decode_full(raw_report: str, buffer: bytes) -> DecodedReport:
    # Check every field before reading any, so no partial result is produced.
    for field in FULL_REPORT_LAYOUT:
        if field.end > len(buffer):
            raise TruncatedBufferError(field.name, field.offset, field.end, len(buffer))

    fields: dict[str, Any] = {}
    for field in FULL_REPORT_LAYOUT:
        if field.kind is FieldKind.BYTES32:
            fields[field.name] = HEX_PREFIX + buffer[field.offset : field.end].hex()
        elif field.kind is FieldKind.UINT32:
            fields[field.name] = read_uint(buffer, field)
        else:
            fields[field.name] = scale_price(read_uint(buffer, field), FULL_PRICE_SCALE)

    return DecodedReport(raw_report=raw_report, mode=DecodeMode.FULL, **fields)


def _decode_price_only(raw_report: str, buffer: bytes) -> DecodedReport:
    if len(buffer) < PRICE_ONLY_MIN_LENGTH:
        logger.debug("Short price-only payload, using zero price", length=len(buffer))
        return DecodedReport(raw_report=raw_report, mode=DecodeMode.PRICE_ONLY, benchmark_price=0.0)

    price = scale_price(read_uint(buffer, PRICE_ONLY_FIELD), PRICE_ONLY_SCALE)
    return DecodedReport(raw_report=raw_report, mode=DecodeMode.PRICE_ONLY, benchmark_price=price)


def decode_report(raw_report: str, mode: DecodeMode = DecodeMode.FULL) -> DecodedReport:
    """Decode a raw report under the given mode.

    Raises:
        MalformedInputError: the input is not 0x-prefixed even-length hex.
        TruncatedBufferError: (full mode) a field lies past the end of the buffer.
        PriceOverflowError: a price cannot be represented as a float.
        ValueError: the mode is not a DecodeMode member or value.
    """
    mode = DecodeMode(mode)
    buffer = parse_raw_report(raw_report)
    if mode is DecodeMode.FULL:
        return _decode_full(raw_report, buffer)
    if mode is DecodeMode.PRICE_ONLY:
        return _decode_price_only(raw_report, buffer)
    raise ValueError(f"Unsupported decode mode: {mode!r}")


def try_decode_report(raw_report: str, mode: DecodeMode = DecodeMode.FULL) -> DecodeOutcome:
    mode = DecodeMode(mode)
    try:
        return DecodeOutcome(report=decode_report(raw_report, mode))
    except DecodeError as exc:
        logger.warning("Report decode failed", mode=mode.value, error=str(exc))
        return DecodeOutcome(error=exc)
