"""Transport layer: the TCP connection to a RESP server."""

from .tcp_connection import Connection, ConnectionInfo, connect
