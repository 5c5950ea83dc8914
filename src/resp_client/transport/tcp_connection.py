"""TCP connection to a RESP server.

One socket is split into a buffered read half and a buffered write half.
Each :meth:`Connection.execute` call writes one command line and then reads
exactly one reply, so requests and replies stay strictly paired. Calls from
several threads are serialized by a per-connection lock.
"""

from __future__ import annotations

import logging
import socket
import threading
from dataclasses import dataclass
from typing import BinaryIO, Tuple, Union

from ..errors import TransportError
from ..models.reply import Reply
from ..protocol.framing import COMMAND_ENCODING, write_line
from ..protocol.parser import ReplyDecoder

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 5.0

Address = Union[str, Tuple[str, int]]


@dataclass
class ConnectionInfo:
    """Where a connection points."""

    host: str = ""
    port: int = 0
    peer: str = ""


def parse_address(address: Address) -> tuple[str, int]:
    """Split ``"host:port"`` (or ``"[v6addr]:port"``) into its parts.

    Raises:
        ValueError: If the address has no usable host or port.
    """
    if isinstance(address, tuple):
        host, port = address
    else:
        host, sep, port = address.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"Address must look like 'host:port', got {address!r}")
        if host.startswith("[") and host.endswith("]"):
            host = host[1:-1]

    port = int(port)
    if not host:
        raise ValueError(f"Address has no host: {address!r}")
    if not 0 < port <= 65535:
        raise ValueError(f"Port must be 1-65535, got {port}")
    return host, port


class Connection:
    """A single request/response connection to a RESP server.

    Usage::

        with Connection("localhost:6379") as conn:
            conn.execute("SET name aodhneine")   # Ok('OK')
            conn.execute("GET name")             # BulkString('aodhneine', 9)

    Args:
        address: ``"host:port"`` or a ``(host, port)`` tuple.
        connect_timeout: Seconds allowed for establishing the connection.
        timeout: Seconds allowed for each read and write once connected;
            ``None`` blocks indefinitely.
        decoder: Decoder to use for replies; a default one if omitted.
    """

    def __init__(
        self,
        address: Address | None = None,
        connect_timeout: float | None = DEFAULT_CONNECT_TIMEOUT,
        timeout: float | None = None,
        decoder: ReplyDecoder | None = None,
    ) -> None:
        self._address = parse_address(address) if address is not None else None
        self._connect_timeout = connect_timeout
        self._timeout = timeout
        self._decoder = decoder or ReplyDecoder()
        self._lock = threading.Lock()
        self._sock: socket.socket | None = None
        self._reader: BinaryIO | None = None
        self._writer: BinaryIO | None = None
        self._connected = False
        self._broken = False
        self._info = ConnectionInfo()
        if self._address is not None:
            self._info = ConnectionInfo(host=self._address[0], port=self._address[1])

    @classmethod
    def from_socket(
        cls, sock: socket.socket, decoder: ReplyDecoder | None = None
    ) -> Connection:
        """Wrap an already connected socket.

        The socket's own timeout setting is left as is.
        """
        conn = cls(decoder=decoder)
        conn._attach(sock)
        return conn

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def broken(self) -> bool:
        """True once an exchange failed part way; the stream is out of sync."""
        return self._broken

    @property
    def info(self) -> ConnectionInfo:
        return self._info

    def open(self) -> ConnectionInfo:
        """Connect to the server.

        Returns:
            ConnectionInfo for the established connection.

        Raises:
            TransportError: If the name cannot be resolved or the server
                cannot be reached.
        """
        if self._connected:
            return self._info
        if self._address is None:
            raise ValueError("No address to connect to")

        host, port = self._address
        try:
            sock = socket.create_connection((host, port), timeout=self._connect_timeout)
        except OSError as e:
            raise TransportError(f"Could not connect to {host}:{port}: {e}") from e

        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.settimeout(self._timeout)
        self._attach(sock)
        logger.info("Connected to %s", self._info.peer)
        return self._info

    def _attach(self, sock: socket.socket) -> None:
        self._sock = sock
        self._reader = sock.makefile("rb")
        self._writer = sock.makefile("wb")
        self._connected = True
        self._broken = False

        try:
            peer = sock.getpeername()
        except OSError:
            peer = None
        if isinstance(peer, tuple):
            self._info = ConnectionInfo(host=peer[0], port=peer[1], peer=f"{peer[0]}:{peer[1]}")
        else:
            self._info.peer = str(peer or "")

    def close(self) -> None:
        """Close both stream halves and the socket.

        Waits for an in-flight :meth:`execute` to finish; a stalled one is
        only cut short by the read/write ``timeout``.
        """
        with self._lock:
            if not self._connected:
                return

            for resource in (self._writer, self._reader, self._sock):
                try:
                    resource.close()
                except OSError as e:
                    logger.warning("Error closing connection: %s", e)
            self._sock = None
            self._reader = None
            self._writer = None
            self._connected = False
        logger.info("Disconnected from %s", self._info.peer)

    def execute(self, command: str | bytes) -> Reply:
        """Send one command line and return the server's reply.

        Args:
            command: The complete inline command, e.g. ``"LRANGE alist 0 0"``,
                without a line terminator.

        Returns:
            The decoded reply. Server-side errors come back as ``Err``.

        Raises:
            ValueError: If the command contains CR or LF.
            TransportError: If the connection is closed or broken.
            WriteFailed: If the command could not be sent.
            DecodeError: If the reply could not be read or decoded.
        """
        line = command.encode(COMMAND_ENCODING) if isinstance(command, str) else command
        if b"\r" in line or b"\n" in line:
            raise ValueError("Command must be a single line without CR or LF")

        with self._lock:
            self._ensure_usable()
            try:
                write_line(self._writer, line)
                return self._decoder.decode(self._reader)
            except Exception as e:
                # any failure after the write starts leaves the stream out of sync
                self._broken = True
                logger.debug("Exchange with %s failed: %s", self._info.peer, e)
                raise

    def _ensure_usable(self) -> None:
        if not self._connected:
            raise TransportError("Not connected")
        if self._broken:
            raise TransportError(
                "Connection is out of sync after a failed command; open a new one"
            )

    def __enter__(self) -> Connection:
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def connect(address: Address, **kwargs) -> Connection:
    """Open a connection to ``address``; keyword arguments go to Connection."""
    conn = Connection(address, **kwargs)
    conn.open()
    return conn
