"""Tests for outbound line framing."""

import io
from unittest.mock import MagicMock

import pytest

from resp_client.errors import WriteFailed
from resp_client.protocol.framing import build_line, write_line
from resp_client.protocol.types import CRLF


def test_build_line_appends_crlf():
    assert build_line("SET name aodhneine") == b"SET name aodhneine\r\n"


def test_build_line_accepts_bytes():
    assert build_line(b"PING") == b"PING\r\n"


def test_build_line_encodes_utf8():
    assert build_line("SET k żółw") == "SET k żółw".encode() + CRLF


def test_write_line_writes_and_flushes():
    """The line must be flushed so it is sent before the reply is read."""
    writer = MagicMock()
    written = write_line(writer, "GET name")
    writer.write.assert_called_once_with(b"GET name\r\n")
    writer.flush.assert_called_once_with()
    assert written == len(b"GET name\r\n")


def test_write_line_to_buffer():
    buf = io.BytesIO()
    write_line(buf, "INCR id")
    assert buf.getvalue() == b"INCR id\r\n"


def test_write_failure_is_typed():
    writer = MagicMock()
    cause = BrokenPipeError("broken pipe")
    writer.write.side_effect = cause
    with pytest.raises(WriteFailed) as exc_info:
        write_line(writer, "PING")
    assert exc_info.value.__cause__ is cause


def test_flush_failure_is_typed():
    writer = MagicMock()
    writer.flush.side_effect = TimeoutError("timed out")
    with pytest.raises(WriteFailed):
        write_line(writer, "PING")
