"""Minimal client for the RESP protocol spoken by Redis-compatible servers."""

from .errors import (
    DecodeError,
    EmptyRead,
    MalformedLength,
    MalformedLine,
    NestingTooDeep,
    ReadFailed,
    RespClientError,
    TransportError,
    UndecodableText,
    UnknownType,
    WriteFailed,
)
from .models import Array, BulkString, Err, Integer, Null, Ok, Reply
from .protocol import ReplyDecoder, build_line, read_reply, write_line
from .transport import Connection, ConnectionInfo, connect

__version__ = "0.1.0"
