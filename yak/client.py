"""
Yak request/reply client

Convenience wrapper for the conventional Yak exchange: the client sends a
command as an ``X`` message and the server answers with ``R`` (result) or
``E`` (error).
"""
from typing import Optional, Union

import structlog

from yak.exceptions import MalformedMessageError, RemoteError, UnexpectedReplyError
from yak.models import (
    MESSAGE_TYPE_ERROR,
    MESSAGE_TYPE_REPLY,
    MESSAGE_TYPE_REQUEST,
)
from yak.transport.connection import Connection
from yak.transport.encoder import MessageType, Payload

logger = structlog.get_logger()


class YakClient:
    """
    Request/reply client over a single Yak connection

    Usage:
      with YakClient("localhost", 4000) as client:
          answer = client.request_text("1 + 2")
    """

    def __init__(self, host: Optional[str], port: int, strict: bool = True):
        self.strict = strict
        self.connection = Connection.open(host, port)

    @property
    def is_open(self) -> bool:
        return self.connection.is_open

    def request(self, command: Payload, msg_type: MessageType = MESSAGE_TYPE_REQUEST) -> Union[bytes, bytearray]:
        """
        Send ``command`` and wait for the answer.

        Returns:
            Payload of the reply.

        Raises:
            RemoteError: The peer answered with an error message; the
                connection stays open.
            UnexpectedReplyError: In strict mode, the reply type is neither
                ``R`` nor ``E``; the connection is closed.
        """
        self.connection.send(msg_type, command)
        reply = self.connection.receive()

        if reply.type == MESSAGE_TYPE_ERROR:
            raise RemoteError(
                reply.payload.decode("utf-8", errors="replace"),
                details={"payload": reply.payload},
            )
        if reply.type != MESSAGE_TYPE_REPLY and self.strict:
            logger.warning(
                "yak_unexpected_reply",
                peer=self.connection.peer,
                port=self.connection.port,
                type=reply.type,
            )
            self.connection.close()
            raise UnexpectedReplyError(
                f"Unexpected message type {reply.type!r} received as answer",
                details={"type": reply.type},
            )
        return reply.payload

    def request_text(self, command: Payload, encoding: str = "utf-8") -> str:
        """
        Send ``command`` and return the reply decoded as text.

        Raises:
            MalformedMessageError: The reply payload is not valid in
                ``encoding``; the connection is closed.
        """
        payload = self.request(command)
        try:
            return payload.decode(encoding)
        except UnicodeDecodeError as e:
            logger.warning(
                "yak_reply_decode_failed",
                peer=self.connection.peer,
                port=self.connection.port,
                encoding=encoding,
                error=str(e),
            )
            self.connection.close()
            raise MalformedMessageError(
                f"Reply payload is not valid {encoding}",
                details={"encoding": encoding, "error": str(e)},
            ) from e

    def close(self) -> int:
        return self.connection.close()

    def __enter__(self) -> "YakClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
