"""
Frame Decoder

Reads and validates a Yak header, then the payload and its trailing newline.

The header is parsed by a small state machine:

    READ_FIXED  -> read the 4 leading bytes: type, colon, first digit and the
                   byte after it
    READ_DIGITS -> fold digits one byte at a time until '\\n'
    DONE        -> header complete

Two payload disciplines follow the header: reading into a caller-supplied
bounded buffer, or allocating a buffer sized exactly to the message.
"""
import builtins
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Union

from yak.exceptions import (
    ConnectionResetError as YakConnectionResetError,
    IncompleteMessageError,
    MalformedMessageError,
    OutOfMemoryError,
    TransportError,
)
from yak.transport.integer_codec import accumulate_digit, is_digit
from yak.transport.stream_io import read_all, read_into

MIN_HEADER_SIZE = 4

_COLON = ord(":")
_NEWLINE = ord("\n")


class HeaderState(Enum):
    """States of the header parser"""

    READ_FIXED = "read_fixed"
    READ_DIGITS = "read_digits"
    DONE = "done"


@dataclass(frozen=True)
class FrameHeader:
    """Decoded message header"""

    type: bytes
    length: int


def _describe(expected: str, byte: int) -> str:
    return f"malformed message, expecting {expected}, got 0x{byte:02x}"


def _malformed(expected: str, byte: int, part: str) -> MalformedMessageError:
    return MalformedMessageError(
        _describe(expected, byte),
        details={"part": part, "expected": expected, "got": f"0x{byte:02x}"},
    )


def _transport_error(e: OSError, part: str) -> TransportError:
    details = {"part": part, "error": str(e), "errno": e.errno}
    if isinstance(e, builtins.ConnectionResetError):
        return YakConnectionResetError(f"Connection reset while reading message {part}", details=details)
    return TransportError(f"Failed to read message {part}", details=details)


def _read_exact(sock: socket.socket, count: int, part: str) -> bytes:
    try:
        data = read_all(sock, count)
    except OSError as e:
        raise _transport_error(e, part) from e
    if len(data) != count:
        raise IncompleteMessageError(
            f"Peer closed the connection in the middle of the message {part}",
            details={"part": part, "received": len(data), "expected": count},
        )
    return data


def _fill(sock: socket.socket, view: memoryview, part: str) -> None:
    try:
        received = read_into(sock, view)
    except OSError as e:
        raise _transport_error(e, part) from e
    if received != len(view):
        raise IncompleteMessageError(
            f"Peer closed the connection in the middle of the message {part}",
            details={"part": part, "received": received, "expected": len(view)},
        )


def read_header(sock: socket.socket) -> FrameHeader:
    """
    Read and validate one message header.

    Raises:
        MalformedMessageError: If the separator, a digit or the newline is
            missing.
        LengthOverflowError: If the length exceeds the representable range.
        IncompleteMessageError: If the peer closes before the header ends.
        TransportError: On a socket failure.
    """
    state = HeaderState.READ_FIXED
    msg_type = b""
    length = 0
    byte = 0

    while state is not HeaderState.DONE:
        if state is HeaderState.READ_FIXED:
            fixed = _read_exact(sock, MIN_HEADER_SIZE, "header")
            msg_type = fixed[0:1]
            if fixed[1] != _COLON:
                raise _malformed("':'", fixed[1], "header")
            if not is_digit(fixed[2]):
                raise _malformed("a digit", fixed[2], "header")
            length = accumulate_digit(0, fixed[2])
            byte = fixed[3]
            state = HeaderState.READ_DIGITS

        elif state is HeaderState.READ_DIGITS:
            if byte == _NEWLINE:
                state = HeaderState.DONE
                continue
            if not is_digit(byte):
                raise _malformed("a digit or '\\n'", byte, "header")
            length = accumulate_digit(length, byte)
            byte = _read_exact(sock, 1, "header")[0]

    return FrameHeader(type=msg_type, length=length)


def read_trailer(sock: socket.socket) -> None:
    """Consume the newline that ends every message."""
    trailer = _read_exact(sock, 1, "trailer")
    if trailer[0] != _NEWLINE:
        raise _malformed("'\\n'", trailer[0], "trailer")


def read_payload_into(sock: socket.socket, view: memoryview, length: int) -> None:
    """
    Read ``length`` payload bytes into ``view`` followed by the trailer.

    ``view`` must be a flat byte view with room for ``length`` bytes.
    """
    if length > 0:
        _fill(sock, view[:length], "payload")
    read_trailer(sock)


def allocate_payload(length: int) -> bytearray:
    """
    Allocate a buffer sized exactly to ``length``.

    Raises:
        OutOfMemoryError: If the buffer cannot be allocated.
    """
    try:
        return bytearray(length)
    except (MemoryError, OverflowError) as e:
        raise OutOfMemoryError(
            f"Cannot allocate {length} bytes for message payload",
            details={"length": length},
        ) from e


def read_payload(sock: socket.socket, length: int) -> Union[bytes, bytearray]:
    """
    Read an exact-size payload followed by the trailer.

    Returns:
        The filled buffer, handed over to the caller; ``b""`` without
        allocating when ``length`` is zero.
    """
    if length == 0:
        read_trailer(sock)
        return b""

    buffer = allocate_payload(length)
    try:
        _fill(sock, memoryview(buffer), "payload")
        read_trailer(sock)
    except BaseException:
        # the traceback keeps this frame alive; drop the buffer now
        del buffer
        raise
    return buffer

