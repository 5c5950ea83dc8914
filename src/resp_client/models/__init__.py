"""Data models for decoded replies."""

from .reply import Array, BulkString, Err, Integer, Null, Ok, Reply
