"""Exception hierarchy for the RESP client.

Transport problems (connecting, writing) and decoding problems (reading a
reply off the stream) are kept apart so callers can tell a dead socket from
a misbehaving server. Server-side errors sent as ``-`` lines are *not*
exceptions; they decode to :class:`~resp_client.models.reply.Err` replies.
"""

from __future__ import annotations


class RespClientError(Exception):
    """Base class for every error raised by this package."""


class TransportError(RespClientError, ConnectionError):
    """The connection could not be opened, or is closed or unusable."""


class WriteFailed(RespClientError):
    """Sending or flushing a command failed."""


class DecodeError(RespClientError):
    """A reply could not be read off the stream."""


class EmptyRead(DecodeError):
    """The stream ended where a line or payload was expected."""

    def __init__(self, message: str = "read empty data, peer closed the connection") -> None:
        super().__init__(message)


class ReadFailed(DecodeError):
    """The underlying stream raised while reading."""


class UnknownType(DecodeError):
    """The reply started with a byte that is not a known type marker."""

    def __init__(self, marker: bytes) -> None:
        self.marker = marker
        super().__init__(f"unknown reply type marker {marker!r}")


class MalformedLength(DecodeError):
    """A declared bulk length or array count is not a valid integer."""


class MalformedLine(DecodeError):
    """A line or payload was not terminated the way the protocol requires."""


class NestingTooDeep(DecodeError):
    """Nested arrays exceeded the configured maximum depth."""

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        super().__init__(f"array nesting exceeds maximum depth of {max_depth}")


class UndecodableText(DecodeError):
    """Reply bytes could not be decoded with the configured text encoding."""
