"""Reply model: the values a single decode pass can produce.

Replies form a tree: an :class:`Array` owns its children, which may be
arrays themselves. All variants are frozen dataclasses and are never
modified after the decoder builds them.

::

    Reply = Null | BulkString | Integer | Ok | Err | Array
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Union

DEFAULT_ENCODING = "utf-8"


@dataclass(frozen=True)
class Null:
    """Absence of data (``$-1`` or ``*-1``)."""

    def to_dict(self) -> dict[str, Any]:
        return {"type": "null"}


@dataclass(frozen=True)
class BulkString:
    """A binary-safe string.

    ``size`` is the byte length the server declared, which differs from
    ``len(data)`` whenever the payload holds multi-byte characters.
    """

    data: str
    size: int

    def as_bytes(self, encoding: str = DEFAULT_ENCODING) -> bytes:
        """Return the payload exactly as it was received.

        Must be called with the encoding the decoder used.
        """
        return self.data.encode(encoding, errors="surrogateescape")

    def to_dict(self) -> dict[str, Any]:
        return {"type": "bulk_string", "data": self.data, "size": self.size}


@dataclass(frozen=True)
class Integer:
    """A signed decimal number, kept as the text the server sent."""

    text: str

    @property
    def value(self) -> int:
        return int(self.text)

    def to_dict(self) -> dict[str, Any]:
        return {"type": "integer", "text": self.text}


@dataclass(frozen=True)
class Ok:
    """A ``+`` status line, e.g. ``OK`` or ``PONG``."""

    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "ok", "text": self.text}


@dataclass(frozen=True)
class Err:
    """A ``-`` error line sent by the server."""

    text: str

    @property
    def kind(self) -> str:
        """Leading error code such as ``ERR`` or ``WRONGTYPE``, or ``""``."""
        head = self.text.split(" ", 1)[0]
        return head if head.isupper() else ""

    def to_dict(self) -> dict[str, Any]:
        return {"type": "error", "text": self.text}


@dataclass(frozen=True)
class Array:
    """An ordered collection of replies."""

    items: tuple[Reply, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # accept any iterable, store a tuple
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Reply]:
        return iter(self.items)

    def __getitem__(self, index: int) -> Reply:
        return self.items[index]

    def to_dict(self) -> dict[str, Any]:
        return {"type": "array", "items": [item.to_dict() for item in self.items]}


Reply = Union[Null, BulkString, Integer, Ok, Err, Array]
