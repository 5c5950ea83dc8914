"""Reply decoding.

A reply is read from a buffered binary stream one line at a time. The first
byte of the line selects the reply kind:

- ``+`` / ``-``: status line, the rest of the line is the text
- ``:``: integer, the rest of the line is the decimal text
- ``$``: bulk string, the line holds the byte length; the payload follows
  as exactly that many bytes plus CRLF (``$-1`` is null)
- ``*``: array, the line holds the element count; that many replies follow
  (``*-1`` is null, ``*0`` is empty)

Bulk payloads are read by count, never up to the next line break, because
they may contain CRLF themselves.
"""

from __future__ import annotations

import logging
import re
from typing import BinaryIO

from ..errors import (
    EmptyRead,
    MalformedLength,
    MalformedLine,
    NestingTooDeep,
    ReadFailed,
    UndecodableText,
    UnknownType,
)
from ..models.reply import (
    DEFAULT_ENCODING,
    Array,
    BulkString,
    Err,
    Integer,
    Null,
    Ok,
    Reply,
)
from .types import (
    CRLF,
    MAX_BULK_LENGTH,
    MAX_LINE_LENGTH,
    MAX_NESTING_DEPTH,
    NULL_LENGTH,
    ReplyType,
    reply_type_for,
)

logger = logging.getLogger(__name__)

_LENGTH_RE = re.compile(rb"-?[0-9]+")


class ReplyDecoder:
    """Reads exactly one complete reply per :meth:`decode` call.

    The decoder holds only configuration, so one instance can be shared by
    any number of streams.

    Args:
        encoding: Text encoding for status lines and bulk payloads.
        errors: Decode error handler. The default ``surrogateescape`` keeps
            arbitrary payload bytes recoverable via ``BulkString.as_bytes``.
        max_depth: Deepest array nesting accepted.
        max_bulk_length: Largest bulk string length accepted.
        max_line_length: Longest header or status line accepted.
    """

    def __init__(
        self,
        encoding: str = DEFAULT_ENCODING,
        errors: str = "surrogateescape",
        max_depth: int = MAX_NESTING_DEPTH,
        max_bulk_length: int = MAX_BULK_LENGTH,
        max_line_length: int = MAX_LINE_LENGTH,
    ) -> None:
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self.encoding = encoding
        self.errors = errors
        self.max_depth = max_depth
        self.max_bulk_length = max_bulk_length
        self.max_line_length = max_line_length
        self._handlers = {
            ReplyType.STATUS: self._decode_status,
            ReplyType.ERROR: self._decode_error,
            ReplyType.INTEGER: self._decode_integer,
            ReplyType.BULK_STRING: self._decode_bulk_string,
            ReplyType.ARRAY: self._decode_array,
        }

    def decode(self, reader: BinaryIO) -> Reply:
        """Read one reply from ``reader``.

        Args:
            reader: A buffered binary stream supporting ``readline`` and
                ``read``, e.g. ``socket.makefile("rb")`` or ``io.BytesIO``.

        Raises:
            DecodeError: On end of stream, read failure, or malformed input.
        """
        reply = self._decode(reader, depth=0)
        logger.debug("Decoded reply: %r", reply)
        return reply

    def _decode(self, reader: BinaryIO, depth: int) -> Reply:
        line = self._read_line(reader)
        reply_type = reply_type_for(line[0]) if line else None
        if reply_type is None:
            raise UnknownType(line[:1])
        return self._handlers[reply_type](reader, line[1:], depth)

    # -- per-type handlers -------------------------------------------------

    def _decode_status(self, reader: BinaryIO, rest: bytes, depth: int) -> Ok:
        return Ok(self._text(rest))

    def _decode_error(self, reader: BinaryIO, rest: bytes, depth: int) -> Err:
        return Err(self._text(rest))

    def _decode_integer(self, reader: BinaryIO, rest: bytes, depth: int) -> Integer:
        return Integer(self._text(rest))

    def _decode_bulk_string(
        self, reader: BinaryIO, rest: bytes, depth: int
    ) -> BulkString | Null:
        size = self._parse_length(rest, "bulk string length")
        if size == NULL_LENGTH:
            return Null()
        if size > self.max_bulk_length:
            raise MalformedLength(
                f"bulk string length {size} exceeds maximum of {self.max_bulk_length}"
            )

        payload = self._read_exact(reader, size)
        if self._read_exact(reader, len(CRLF)) != CRLF:
            raise MalformedLine(f"bulk string of {size} bytes not followed by CRLF")
        return BulkString(data=self._text(payload), size=size)

    def _decode_array(self, reader: BinaryIO, rest: bytes, depth: int) -> Array | Null:
        count = self._parse_length(rest, "array count")
        if count == NULL_LENGTH:
            return Null()
        if count == 0:
            return Array()
        if depth + 1 > self.max_depth:
            raise NestingTooDeep(self.max_depth)

        items = []
        for _ in range(count):
            items.append(self._decode(reader, depth + 1))
        return Array(tuple(items))

    # -- stream helpers ----------------------------------------------------

    def _read_line(self, reader: BinaryIO) -> bytes:
        """Read one CRLF-terminated line and return it without the CRLF."""
        limit = self.max_line_length + len(CRLF)
        try:
            line = reader.readline(limit)
        except OSError as e:
            raise ReadFailed(f"failed to read data: {e}") from e

        if not line:
            raise EmptyRead()
        if not line.endswith(b"\n"):
            if len(line) >= limit:
                raise MalformedLine(
                    f"line exceeds maximum length of {self.max_line_length} bytes"
                )
            raise EmptyRead("stream closed in the middle of a line")
        if not line.endswith(CRLF):
            raise MalformedLine(f"line not terminated by CRLF: {line!r}")
        return line[: -len(CRLF)]

    def _read_exact(self, reader: BinaryIO, size: int) -> bytes:
        buf = bytearray()
        while len(buf) < size:
            try:
                chunk = reader.read(size - len(buf))
            except OSError as e:
                raise ReadFailed(f"failed to read data: {e}") from e
            if not chunk:
                raise EmptyRead(
                    f"stream closed after {len(buf)} of {size} expected bytes"
                )
            buf.extend(chunk)
        return bytes(buf)

    @staticmethod
    def _parse_length(rest: bytes, what: str) -> int:
        # the number runs up to the first whitespace
        fields = rest.split(None, 1)
        token = fields[0] if fields else b""
        if not _LENGTH_RE.fullmatch(token):
            raise MalformedLength(f"invalid {what}: {rest!r}")
        value = int(token)
        if value < NULL_LENGTH:
            raise MalformedLength(f"invalid {what}: {value}")
        return value

    def _text(self, data: bytes) -> str:
        try:
            return data.decode(self.encoding, self.errors)
        except UnicodeDecodeError as e:
            raise UndecodableText(f"cannot decode {data!r} as {self.encoding}: {e}") from e


_default_decoder = ReplyDecoder()


def read_reply(reader: BinaryIO, **options) -> Reply:
    """Decode one reply from ``reader``.

    Keyword arguments are passed to :class:`ReplyDecoder`; without any, a
    shared default decoder is used.
    """
    decoder = ReplyDecoder(**options) if options else _default_decoder
    return decoder.decode(reader)
