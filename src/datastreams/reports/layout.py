"""Byte layout of a full report payload.

The payload is a sequence of 32-byte big-endian words. Offsets are in bytes
from the start of the decoded buffer. The validFromTimestamp bytes overlap the
tail of the feed id word, so the decoded feed id includes them.

    word  bytes      field
    ----  ---------  -------------------------------------------
    8     256..287   feed id (full word)
    8     284..287   validFromTimestamp (uint32, low 4 bytes)
    9     316..319   observationsTimestamp (uint32, low 4 bytes)
    14    448..479   benchmark price (uint256, 18 decimals)
    15    480..511   bid (uint256, 18 decimals)
    16    512..543   ask (uint256, 18 decimals)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

WORD_SIZE = 32


class FieldKind(Enum):
    BYTES32 = "bytes32"
    UINT32 = "uint32"
    PRICE = "price"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    offset: int
    size: int
    kind: FieldKind

    @property
    def end(self) -> int:
        return self.offset + self.size


FULL_REPORT_LAYOUT: tuple[FieldSpec, ...] = (
    FieldSpec("feed_id", 8 * WORD_SIZE, WORD_SIZE, FieldKind.BYTES32),
    FieldSpec("valid_from_timestamp", 9 * WORD_SIZE - 4, 4, FieldKind.UINT32),
    FieldSpec("observations_timestamp", 10 * WORD_SIZE - 4, 4, FieldKind.UINT32),
    FieldSpec("benchmark_price", 14 * WORD_SIZE, WORD_SIZE, FieldKind.PRICE),
    FieldSpec("bid", 15 * WORD_SIZE, WORD_SIZE, FieldKind.PRICE),
    FieldSpec("ask", 16 * WORD_SIZE, WORD_SIZE, FieldKind.PRICE),
)

FULL_REPORT_MIN_LENGTH = max(field.end for field in FULL_REPORT_LAYOUT)

# Price-only payloads carry the price in the second word.
PRICE_ONLY_FIELD = FieldSpec("benchmark_price", WORD_SIZE, WORD_SIZE, FieldKind.PRICE)
PRICE_ONLY_MIN_LENGTH = PRICE_ONLY_FIELD.end
