"""MCP server entry point for the RESP client.

Exposes one process-wide server connection as Model Context Protocol
tools, using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .errors import RespClientError
from .transport.tcp_connection import Connection

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "resp-client",
    instructions="Send inline commands to a Redis-compatible server and read typed replies",
)

# Global connection state
_connection: Connection | None = None


def _get_connection() -> Connection:
    """Get the active connection, raising if not connected."""
    if _connection is None or not _connection.connected:
        raise RuntimeError(
            "Not connected to a server. Use the 'connect' tool first."
        )
    return _connection


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(address: str, timeout: float | None = 10.0) -> dict[str, Any]:
    """Open a TCP connection to a RESP server.

    Any previous connection is closed first.

    Args:
        address: Server address as "host:port".
        timeout: Per-read/write deadline in seconds.
    """
    global _connection
    if _connection is not None:
        _connection.close()
        _connection = None

    try:
        conn = Connection(address, timeout=timeout)
        info = conn.open()
    except (RespClientError, ValueError) as e:
        return {"connected": False, "error": str(e)}

    _connection = conn
    return {"connected": True, "host": info.host, "port": info.port}


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the server connection."""
    global _connection
    if _connection is None:
        return {"disconnected": True}
    _connection.close()
    _connection = None
    return {"disconnected": True}


@mcp.tool()
def get_connection_info() -> dict[str, Any]:
    """Report where the current connection points and whether it is usable."""
    if _connection is None:
        return {"connected": False}
    info = _connection.info
    return {
        "connected": _connection.connected,
        "broken": _connection.broken,
        "host": info.host,
        "port": info.port,
        "peer": info.peer,
    }


# ─── COMMAND TOOLS ────────────────────────────────────────────────────

@mcp.tool()
def execute(command: str) -> dict[str, Any]:
    """Run one inline command and return the typed reply.

    Args:
        command: The full command line, e.g. "LRANGE alist 0 -1".
    """
    conn = _get_connection()
    try:
        reply = conn.execute(command)
    except ValueError as e:
        return {"error": str(e)}
    except RespClientError as e:
        logger.warning("Command %r failed: %s", command, e)
        return {"error": str(e), "broken": conn.broken}
    return reply.to_dict()


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
