"""Exception hierarchy for signing, decoding and upstream calls."""

from __future__ import annotations


class DataStreamsError(Exception):
    """Base class for all datastreams errors."""


class ConfigurationError(DataStreamsError):
    """Raised when credentials or settings are missing or empty."""


class DecodeError(DataStreamsError):
    """Raised when a raw report cannot be decoded."""


class MalformedInputError(DecodeError):
    """Raw report is not a 0x-prefixed, even-length hex string."""


class TruncatedBufferError(DecodeError):
    """A layout field extends past the end of the decoded buffer."""

    def __init__(self, field: str, offset: int, end: int, length: int):
        self.field = field
        self.offset = offset
        self.end = end
        self.length = length
        super().__init__(f"Field {field!r} at bytes {offset}..{end} exceeds buffer length {length}")


class PriceOverflowError(DecodeError):
    """A scaled price does not fit the target numeric type."""


class StreamsAPIError(DataStreamsError):
    """Raised when the upstream API call fails or returns an unusable body."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
