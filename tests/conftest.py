"""Shared pytest fixtures"""
import socket

import pytest

from yak.transport.connection import Connection
from yak_echo_server import YakEchoServer


@pytest.fixture
def listener():
    """Loopback TCP listener on an ephemeral port."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    yield server
    server.close()


@pytest.fixture
def connection_pair(listener):
    """Open Connection plus the accepted server-side socket."""
    port = listener.getsockname()[1]
    conn = Connection.open("127.0.0.1", port)
    conn.socket.settimeout(5.0)
    peer, _ = listener.accept()
    peer.settimeout(5.0)
    yield conn, peer
    conn.close()
    peer.close()


@pytest.fixture
def echo_server():
    server = YakEchoServer().start()
    yield server
    server.stop()


def attach(sock) -> Connection:
    """Build an open Connection around a scripted socket."""
    conn = Connection()
    conn._sock = sock
    conn.peer = "scripted"
    conn.port = 4000
    return conn


@pytest.fixture
def scripted_connection():
    return attach
