"""
Frame Encoder

Serializes a (type, payload) message into the Yak wire format:

    T ':' <decimal length> '\\n' <payload bytes> '\\n'

and writes it as three separate transfers: header, payload, trailer.
"""
import builtins
import socket
from typing import Optional, Union

from yak.config import settings
from yak.exceptions import (
    ConnectionResetError as YakConnectionResetError,
    InvalidArgumentError,
    TransportError,
)
from yak.models import coerce_message_type
from yak.transport.integer_codec import render_integer
from yak.transport.stream_io import write_all

SEPARATOR = b":"
NEWLINE = b"\n"

# type byte, ':' and '\n' around the digits
_HEADER_OVERHEAD = 3

MessageType = Union[bytes, bytearray, str, int]
Payload = Union[bytes, bytearray, memoryview, str, None]


def coerce_type(msg_type: MessageType) -> bytes:
    """Normalize the message type, mapping bad input to InvalidArgumentError."""
    try:
        return coerce_message_type(msg_type)
    except ValueError as e:
        raise InvalidArgumentError(str(e), details={"type": repr(msg_type)}) from e


def coerce_payload(payload: Payload) -> memoryview:
    """
    Return a flat byte view over ``payload``.

    ``None`` stands for an empty payload and ``str`` is encoded as UTF-8.
    """
    if payload is None:
        return memoryview(b"")
    if isinstance(payload, str):
        return memoryview(payload.encode("utf-8"))
    try:
        view = memoryview(payload)
    except TypeError as e:
        raise InvalidArgumentError(
            "Payload must be bytes-like or str",
            details={"payload_type": type(payload).__name__},
        ) from e
    if not view.c_contiguous:
        raise InvalidArgumentError("Payload buffer must be contiguous")
    return view.cast("B")


def build_header(msg_type: bytes, length: int, size: Optional[int] = None) -> bytes:
    """
    Build the ``T:<length>\\n`` header within ``size`` bytes.

    Raises:
        InvalidArgumentError: If ``length`` is negative.
        LengthOverflowError: If the rendered length does not fit.
    """
    if size is None:
        size = settings.header_size
    if length < 0:
        raise InvalidArgumentError(f"Negative message length {length}", details={"length": length})
    digits = render_integer(length, size - _HEADER_OVERHEAD)
    return msg_type + SEPARATOR + digits + NEWLINE


def encode_frame(msg_type: MessageType, payload: Payload = b"") -> bytes:
    """Render a complete frame: header, payload and trailer."""
    msg_type = coerce_type(msg_type)
    view = coerce_payload(payload)
    return build_header(msg_type, len(view)) + view.tobytes() + NEWLINE


def _write_stage(sock: socket.socket, data, stage: str) -> None:
    expected = len(data)
    try:
        sent = write_all(sock, data)
    except (builtins.ConnectionResetError, BrokenPipeError) as e:
        raise YakConnectionResetError(
            f"Connection reset while sending message {stage}",
            details={"stage": stage, "error": str(e), "errno": e.errno},
        ) from e
    except OSError as e:
        raise TransportError(
            f"Failed to send message {stage}",
            details={"stage": stage, "error": str(e), "errno": e.errno},
        ) from e
    if sent != expected:
        raise YakConnectionResetError(
            f"Short write while sending message {stage}",
            details={"stage": stage, "sent": sent, "expected": expected},
        )


def write_frame(
    sock: socket.socket,
    msg_type: MessageType,
    payload: Payload = b"",
    header_size: Optional[int] = None,
) -> int:
    """
    Validate and send one message.

    The header is fully built before any byte reaches the socket, so argument
    and overflow errors never leave a partial frame on the wire.

    Returns:
        Total number of bytes written.

    Raises:
        InvalidArgumentError: For a bad type or payload.
        LengthOverflowError: If the header buffer cannot hold the length.
        ConnectionResetError: On a short write or a reset by the peer.
        TransportError: On any other socket failure.
    """
    msg_type = coerce_type(msg_type)
    view = coerce_payload(payload)
    header = build_header(msg_type, len(view), header_size)

    _write_stage(sock, header, "header")
    if len(view) > 0:
        _write_stage(sock, view, "payload")
    _write_stage(sock, NEWLINE, "trailer")
    return len(header) + len(view) + len(NEWLINE)
