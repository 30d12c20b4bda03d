"""Yak client transport: connection lifecycle and wire framing"""
from yak.transport.connection import (
    Connection,
    close,
    connect,
    is_open,
    receive,
    receive_into,
    send,
)
from yak.transport.encoder import encode_frame

__all__ = [
    "Connection",
    "close",
    "connect",
    "encode_frame",
    "is_open",
    "receive",
    "receive_into",
    "send",
]
