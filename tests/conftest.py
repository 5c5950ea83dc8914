"""Shared fixtures: an in-process RESP server understanding a few commands."""

from __future__ import annotations

import socketserver
import threading

import pytest


def _bulk(value: str | None) -> bytes:
    if value is None:
        return b"$-1\r\n"
    data = value.encode()
    return b"$%d\r\n%s\r\n" % (len(data), data)


def _array(values: list[str]) -> bytes:
    return b"*%d\r\n" % len(values) + b"".join(_bulk(v) for v in values)


class FakeStore:
    """Just enough of a key-value server for the client tests."""

    def __init__(self) -> None:
        self.strings: dict[str, str] = {}
        self.lists: dict[str, list[str]] = {}
        self.lock = threading.Lock()

    def dispatch(self, args: list[str]) -> bytes:
        name, args = args[0].upper(), args[1:]
        handler = getattr(self, f"cmd_{name.lower()}", None)
        if handler is None:
            return f"-ERR unknown command '{name}'\r\n".encode()
        with self.lock:
            try:
                return handler(*args)
            except TypeError:
                return f"-ERR wrong number of arguments for '{name}' command\r\n".encode()

    def cmd_ping(self) -> bytes:
        return b"+PONG\r\n"

    def cmd_set(self, key, value) -> bytes:
        self.strings[key] = value
        return b"+OK\r\n"

    def cmd_get(self, key) -> bytes:
        return _bulk(self.strings.get(key))

    def cmd_incr(self, key) -> bytes:
        try:
            value = int(self.strings.get(key, "0")) + 1
        except ValueError:
            return b"-ERR value is not an integer or out of range\r\n"
        self.strings[key] = str(value)
        return b":%d\r\n" % value

    def cmd_rpush(self, key, *values) -> bytes:
        if not values:
            raise TypeError
        items = self.lists.setdefault(key, [])
        items.extend(values)
        return b":%d\r\n" % len(items)

    def cmd_lrange(self, key, start, stop) -> bytes:
        items = self.lists.get(key, [])
        start, stop = int(start), int(stop)
        if start < 0:
            start = max(len(items) + start, 0)
        if stop < 0:
            stop = len(items) + stop
        return _array(items[start : stop + 1])

    def cmd_lset(self, key, index, value) -> bytes:
        if key not in self.lists:
            return b"-ERR no such key\r\n"
        items = self.lists[key]
        index = int(index)
        if not -len(items) <= index < len(items):
            return b"-ERR index out of range\r\n"
        items[index] = value
        return b"+OK\r\n"


class _Handler(socketserver.StreamRequestHandler):
    def handle(self) -> None:
        while True:
            line = self.rfile.readline()
            if not line:
                return
            args = line.decode().split()
            if not args:
                continue
            # canned replies: raw bytes, b"" for no reply, None to hang up
            canned = self.server.canned
            if args[0].upper() in canned:
                reply = canned[args[0].upper()]
                if reply is None:
                    return
                if reply:
                    self.wfile.write(reply)
                continue
            self.wfile.write(self.server.store.dispatch(args))


class FakeServer(socketserver.ThreadingTCPServer):
    daemon_threads = True
    allow_reuse_address = True

    def __init__(self) -> None:
        super().__init__(("127.0.0.1", 0), _Handler)
        self.store = FakeStore()
        self.canned: dict[str, bytes | None] = {}

    @property
    def address(self) -> str:
        host, port = self.server_address[:2]
        return f"{host}:{port}"


@pytest.fixture
def fake_server():
    server = FakeServer()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()
