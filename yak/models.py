"""
Core data models
"""
import sys
from typing import Union

from pydantic import BaseModel, ConfigDict, field_validator

# Largest declared payload length the decoder accepts.
LENGTH_MAX = sys.maxsize

MESSAGE_TYPE_REQUEST = b"X"
MESSAGE_TYPE_REPLY = b"R"
MESSAGE_TYPE_ERROR = b"E"


def coerce_message_type(value: Union[bytes, bytearray, str, int]) -> bytes:
    """
    Normalize a message type to a single byte.

    Accepts a one-byte bytes-like object, a one-character string whose
    code point fits in a byte, or an integer in ``[0, 255]``.

    Raises:
        ValueError: If ``value`` does not denote exactly one byte.
    """
    if isinstance(value, bool):
        raise ValueError("message type must be a single byte, got a bool")
    if isinstance(value, int):
        if not 0 <= value <= 0xFF:
            raise ValueError(f"message type must be in [0, 255], got {value}")
        return bytes((value,))
    if isinstance(value, str):
        if len(value) != 1 or ord(value) > 0xFF:
            raise ValueError(f"message type must be a single byte character, got {value!r}")
        return value.encode("latin-1")
    if isinstance(value, (bytes, bytearray, memoryview)):
        value = bytes(value)
        if len(value) != 1:
            raise ValueError(f"message type must be exactly one byte, got {len(value)}")
        return value
    raise ValueError(f"unsupported message type {type(value).__name__}")


class Message(BaseModel):
    """
    One Yak message: an opaque type byte and a raw payload

    A bytearray payload, such as the exact-size buffer filled by the
    allocating receive, is kept without a copy. Other payloads are stored
    as bytes.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: bytes
    payload: Union[bytes, bytearray] = b""

    @field_validator("type", mode="before")
    @classmethod
    def _validate_type(cls, value):
        return coerce_message_type(value)

    @field_validator("payload", mode="before")
    @classmethod
    def _validate_payload(cls, value):
        if value is None:
            return b""
        if isinstance(value, str):
            return value.encode("utf-8")
        if isinstance(value, memoryview):
            return value.tobytes()
        return value

    @property
    def length(self) -> int:
        return len(self.payload)

    @property
    def is_error(self) -> bool:
        return self.type == MESSAGE_TYPE_ERROR

    def text(self, encoding: str = "utf-8") -> str:
        """Decode the payload as text."""
        return self.payload.decode(encoding)
