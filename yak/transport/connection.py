"""
Connection Lifecycle

Owns the socket of one Yak client endpoint together with the identity of
its peer, and is the front door for sending and receiving messages.

A Connection is either fully open (socket, peer and port set) or fully
closed (no socket, no peer, port 0). Every error raised while sending or
receiving closes the connection before it propagates: the stream position
is unknown at that point and the peer must not be left waiting for a frame
that will never complete.
"""
from __future__ import annotations

import errno
import socket
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

import structlog

from yak.config import settings
from yak.exceptions import (
    InvalidArgumentError,
    MalformedMessageError,
    MessageTooLargeError,
    NotConnectedError,
    OutOfMemoryError,
    YakError,
)
from yak.models import Message
from yak.transport.decoder import read_header, read_payload, read_payload_into
from yak.transport.encoder import MessageType, Payload, write_frame
from yak.transport.resolver import open_connection, validate_endpoint

logger = structlog.get_logger()


def _check_limit(maxlen, name: str = "maxlen") -> None:
    if isinstance(maxlen, bool) or not isinstance(maxlen, int) or maxlen < 0:
        raise InvalidArgumentError(
            f"{name} must be a non-negative integer",
            details={name: maxlen},
        )


class Connection:
    """
    Client side of a Yak connection.

    Not thread-safe: callers serialize sends and receives, normally
    alternating one send with one receive.
    """

    def __init__(self):
        self._sock: Optional[socket.socket] = None
        self.peer: Optional[str] = None
        self.port: int = 0
        self.canonical_name: Optional[str] = None

    @classmethod
    def open(cls, host: Optional[str], port: int) -> "Connection":
        """
        Resolve ``host`` and connect to the first address that accepts.

        ``host=None`` means the default host (``127.0.0.1``).

        Raises:
            InvalidArgumentError: Empty host or port outside [0, 65535];
                raised before any resolution or socket creation.
            HostUnresolvableError: Name resolution failed.
            ConnectionRefusedError: No candidate address accepted.
            OutOfMemoryError: The peer name could not be recorded.
        """
        host = validate_endpoint(host, port)
        resolved = open_connection(host, port)

        conn = cls()
        conn._sock = resolved.sock
        try:
            conn.peer = str(host)
        except MemoryError as e:
            conn.close()
            raise OutOfMemoryError("Cannot record peer name", details={"host": host}) from e
        conn.port = port
        conn.canonical_name = resolved.canonical_name

        logger.info(
            "yak_connected",
            peer=conn.peer,
            port=conn.port,
            canonname=conn.canonical_name,
            address=str(resolved.candidate.sockaddr),
        )
        return conn

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    @property
    def socket(self) -> Optional[socket.socket]:
        """Underlying socket, for out-of-band options such as timeouts."""
        return self._sock

    def close(self) -> int:
        """
        Close the connection and reset it to the closed state.

        Safe to call any number of times.

        Returns:
            0 on success, or the errno of a failed socket close.
        """
        status = 0
        sock, self._sock = self._sock, None
        if sock is not None:
            try:
                sock.close()
            except OSError as e:
                status = e.errno or errno.EIO
                logger.warning(
                    "yak_close_failed",
                    peer=self.peer,
                    port=self.port,
                    error=str(e),
                )
            else:
                logger.debug("yak_closed", peer=self.peer, port=self.port)
        self.peer = None
        self.port = 0
        self.canonical_name = None
        return status

    def _require_open(self) -> socket.socket:
        if self._sock is None:
            raise NotConnectedError("Not connected")
        return self._sock

    @contextmanager
    def _closing_on_error(self, operation: str) -> Iterator[None]:
        try:
            yield
        except YakError as e:
            logger.warning(
                f"yak_{operation}_failed",
                peer=self.peer,
                port=self.port,
                error=e.message,
                error_type=type(e).__name__,
                details=e.details,
            )
            self.close()
            raise
        except BaseException:
            self.close()
            raise

    def send(self, msg_type: MessageType, payload: Payload = b"") -> None:
        """
        Send one message.

        Raises:
            NotConnectedError: The connection is closed.
            InvalidArgumentError: Bad type or payload (connection closed).
            LengthOverflowError: Length does not fit the header (connection
                closed).
            ConnectionResetError, TransportError: Socket failure (connection
                closed).
        """
        sock = self._require_open()
        with self._closing_on_error("send"):
            write_frame(sock, msg_type, payload)

    def receive_into(self, buffer, maxlen: Optional[int] = None) -> Tuple[bytes, int]:
        """
        Receive one message into a caller-supplied buffer.

        Args:
            buffer: Writable bytes-like object receiving the payload
            maxlen: Largest acceptable payload; defaults to ``len(buffer)``

        Returns:
            Tuple of (type, length); the payload is ``buffer[:length]``.

        Raises:
            MessageTooLargeError: Declared length exceeds ``maxlen``. The
                payload is left unread and the connection closed.
        """
        sock = self._require_open()
        with self._closing_on_error("receive"):
            try:
                view = memoryview(buffer)
            except TypeError as e:
                raise InvalidArgumentError(
                    "Receive buffer must be a writable bytes-like object",
                    details={"buffer_type": type(buffer).__name__},
                ) from e
            if view.readonly or not view.c_contiguous:
                raise InvalidArgumentError("Receive buffer must be writable and contiguous")
            view = view.cast("B")
            if maxlen is None:
                maxlen = len(view)
            _check_limit(maxlen)
            if maxlen > len(view):
                raise InvalidArgumentError(
                    f"maxlen {maxlen} exceeds buffer size {len(view)}",
                    details={"maxlen": maxlen, "buffer_size": len(view)},
                )

            header = read_header(sock)
            if header.length > maxlen:
                raise MessageTooLargeError(
                    f"Message of {header.length} bytes exceeds limit of {maxlen}",
                    details={"length": header.length, "maxlen": maxlen},
                )
            read_payload_into(sock, view, header.length)
            return header.type, header.length

    def receive(self, maxlen: Optional[int] = None) -> Message:
        """
        Receive one message into a freshly allocated buffer.

        Args:
            maxlen: Largest acceptable payload; defaults to
                ``settings.max_receive_bytes`` (unlimited when unset)

        Returns:
            The message; its payload now belongs to the caller.

        Raises:
            OutOfMemoryError: Payload buffer could not be allocated.
            MessageTooLargeError: Declared length exceeds ``maxlen``.
        """
        sock = self._require_open()
        with self._closing_on_error("receive"):
            if maxlen is None:
                maxlen = settings.max_receive_bytes
            if maxlen is not None:
                _check_limit(maxlen)

            header = read_header(sock)
            if maxlen is not None and header.length > maxlen:
                raise MessageTooLargeError(
                    f"Message of {header.length} bytes exceeds limit of {maxlen}",
                    details={"length": header.length, "maxlen": maxlen},
                )
            payload = read_payload(sock, header.length)
            return Message(type=header.type, payload=payload)

    def receive_text(self, encoding: str = "utf-8") -> Tuple[bytes, str]:
        """Receive one message and decode its payload as text."""
        message = self.receive()
        with self._closing_on_error("receive"):
            try:
                return message.type, message.text(encoding)
            except UnicodeDecodeError as e:
                raise MalformedMessageError(
                    f"Message payload is not valid {encoding}",
                    details={"encoding": encoding, "error": str(e)},
                ) from e

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        if self._sock is None:
            return "<Connection closed>"
        return f"<Connection {self.peer}:{self.port}>"


def connect(host: Optional[str], port: int) -> Connection:
    """Open a connection; see Connection.open()."""
    return Connection.open(host, port)


def is_open(conn: Optional[Connection]) -> bool:
    """Return True if ``conn`` is non-None and open."""
    return conn is not None and conn.is_open


def close(conn: Optional[Connection]) -> int:
    """Close ``conn`` if given; returns 0 or the errno of a failed close."""
    if conn is None:
        return 0
    return conn.close()


def send(conn: Connection, msg_type: MessageType, payload: Payload = b"") -> None:
    """Send one message on ``conn``; see Connection.send()."""
    if conn is None:
        raise InvalidArgumentError("Connection must not be None")
    conn.send(msg_type, payload)


def receive_into(conn: Connection, buffer, maxlen: Optional[int] = None) -> Tuple[bytes, int]:
    """Receive one message into ``buffer``; see Connection.receive_into()."""
    if conn is None:
        raise InvalidArgumentError("Connection must not be None")
    return conn.receive_into(buffer, maxlen)


def receive(conn: Connection, maxlen: Optional[int] = None) -> Message:
    """Receive one message; see Connection.receive()."""
    if conn is None:
        raise InvalidArgumentError("Connection must not be None")
    return conn.receive(maxlen)
