"""Outbound line framing.

A request is sent as one inline command line::

    +----------------------+------+
    | command text (UTF-8) | CRLF |
    +----------------------+------+

Command construction and quoting are up to the caller; this module only
terminates the line and makes sure it actually leaves the buffer.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from ..errors import WriteFailed
from .types import CRLF

logger = logging.getLogger(__name__)

COMMAND_ENCODING = "utf-8"


def build_line(data: str | bytes) -> bytes:
    """Return ``data`` followed by the line terminator.

    Args:
        data: Command text, or already-encoded command bytes.
    """
    if isinstance(data, str):
        data = data.encode(COMMAND_ENCODING)
    return bytes(data) + CRLF


def write_line(writer: BinaryIO, data: str | bytes) -> int:
    """Write one terminated line and flush it to the transport.

    Args:
        writer: A buffered binary writer, e.g. ``socket.makefile("wb")``.
        data: Command text or bytes, without the terminator.

    Returns:
        Number of bytes written, terminator included.

    Raises:
        WriteFailed: If writing or flushing fails.
    """
    line = build_line(data)
    try:
        writer.write(line)
        writer.flush()
    except OSError as e:
        raise WriteFailed(f"failed to send command: {e}") from e
    logger.debug("Sent %d bytes: %r", len(line), line)
    return len(line)
