"""Reply type markers and protocol limits.

Each reply starts with a single marker byte that selects how the rest of
the reply is read. Only the five RESP2 kinds are supported; newer markers
(maps, sets, doubles, ...) are rejected as unknown.
"""

from __future__ import annotations

from enum import IntEnum

CRLF = b"\r\n"
NULL_LENGTH = -1

MAX_NESTING_DEPTH = 128
MAX_BULK_LENGTH = 512 * 1024 * 1024  # server-side proto-max-bulk-len default
MAX_LINE_LENGTH = 64 * 1024


class ReplyType(IntEnum):
    """Leading-byte markers."""

    STATUS = ord(b"+")
    ERROR = ord(b"-")
    BULK_STRING = ord(b"$")
    INTEGER = ord(b":")
    ARRAY = ord(b"*")


def reply_type_for(marker: int) -> ReplyType | None:
    """Return the ReplyType for a leading byte, or None if unknown."""
    try:
        return ReplyType(marker)
    except ValueError:
        return None
