"""
Stream I/O Primitives

Loops over a blocking stream socket that either move the full amount of
data, stop short when the peer makes no more progress, or let the OSError
of a hard failure propagate to the caller.
"""
import socket
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


def write_all(sock: socket.socket, data: BytesLike) -> int:
    """
    Send every byte of ``data``.

    Returns:
        ``len(data)`` on success, or the short count sent before the socket
        reported zero progress.

    Raises:
        OSError: On a hard transport failure.
    """
    view = memoryview(data).cast("B")
    total = len(view)
    sent = 0
    while sent < total:
        try:
            n = sock.send(view[sent:])
        except InterruptedError:
            continue
        if n == 0:
            break
        sent += n
    return sent


def read_into(sock: socket.socket, buffer: BytesLike) -> int:
    """
    Fill ``buffer`` from the socket.

    Returns:
        Number of bytes stored; fewer than ``len(buffer)`` means the peer
        closed the stream early.

    Raises:
        OSError: On a hard transport failure.
    """
    view = memoryview(buffer).cast("B")
    total = len(view)
    received = 0
    while received < total:
        try:
            n = sock.recv_into(view[received:], total - received)
        except InterruptedError:
            continue
        if n == 0:
            # Peer closed
            break
        received += n
    return received


def read_all(sock: socket.socket, count: int) -> bytes:
    """
    Receive exactly ``count`` bytes unless the peer closes first.

    Returns:
        The bytes received; a result shorter than ``count`` means the peer
        closed the stream early.

    Raises:
        OSError: On a hard transport failure.
    """
    buffer = bytearray(count)
    received = read_into(sock, buffer)
    del buffer[received:]
    return bytes(buffer)
