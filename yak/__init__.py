"""
Yak: client transport for a small length-prefixed message protocol.

    import yak

    conn = yak.connect("localhost", 4000)
    conn.send("X", b"ping")
    message = conn.receive()
    conn.close()
"""
from yak.client import YakClient
from yak.exceptions import (
    ConnectError,
    ConnectionRefusedError,
    ConnectionResetError,
    HostUnresolvableError,
    IncompleteMessageError,
    InvalidArgumentError,
    LengthOverflowError,
    MalformedMessageError,
    MessageTooLargeError,
    NotConnectedError,
    OutOfMemoryError,
    ProtocolError,
    RemoteError,
    TransportError,
    UnexpectedReplyError,
    YakError,
)
from yak.models import Message
from yak.transport import (
    Connection,
    close,
    connect,
    encode_frame,
    is_open,
    receive,
    receive_into,
    send,
)

__version__ = "1.0.0"

__all__ = [
    "Connection",
    "ConnectError",
    "ConnectionRefusedError",
    "ConnectionResetError",
    "HostUnresolvableError",
    "IncompleteMessageError",
    "InvalidArgumentError",
    "LengthOverflowError",
    "MalformedMessageError",
    "Message",
    "MessageTooLargeError",
    "NotConnectedError",
    "OutOfMemoryError",
    "ProtocolError",
    "RemoteError",
    "TransportError",
    "UnexpectedReplyError",
    "YakClient",
    "YakError",
    "close",
    "connect",
    "encode_frame",
    "is_open",
    "receive",
    "receive_into",
    "send",
]
