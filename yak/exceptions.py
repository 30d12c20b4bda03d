"""
Yak Exception Hierarchy

Structured exceptions raised by the Yak client transport.
All custom exceptions inherit from the YakError base class, and each
class carries an errno-style ``code`` so callers that speak in system
error numbers can still map failures the way the C client does.
"""
import errno
from typing import Optional


class YakError(Exception):
    """
    Base exception for all Yak errors.

    Catch this to handle any failure raised by the transport with a single
    except clause.
    """
    code: int = errno.EIO

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Argument and State Errors

class InvalidArgumentError(YakError):
    """
    Null, negative or out-of-range input.

    Raised for a bad host, port, message type, payload or receive buffer.
    """
    code = errno.EINVAL


class NotConnectedError(YakError):
    """Operation attempted on a closed connection."""
    code = errno.EBADF


# Connection Establishment Errors

class ConnectError(YakError):
    """
    Failed to establish a connection.

    Base class for resolution and connect failures. Nothing needs closing
    when these are raised: no connection was established.
    """
    code = errno.EACCES


class HostUnresolvableError(ConnectError):
    """Name resolution of the requested host failed."""
    code = errno.EHOSTUNREACH


class ConnectionRefusedError(ConnectError):
    """Every candidate address refused or could not be reached."""
    code = errno.ECONNREFUSED


# Resource Errors

class ResourceError(YakError):
    """
    Resource exhaustion.

    Base class for resource-related errors.
    """
    pass


class OutOfMemoryError(ResourceError):
    """Buffer for an incoming payload (or the peer name) could not be allocated."""
    code = errno.ENOMEM


# Transport Errors

class TransportError(YakError):
    """
    Underlying socket failure.

    Base class for network communication errors.
    """
    code = errno.EIO


class ConnectionResetError(TransportError):
    """Peer stopped accepting or supplying data in the middle of a transfer."""
    code = errno.ECONNRESET


# Protocol Errors

class ProtocolError(YakError):
    """
    Wire format violation.

    Base class for framing errors detected while decoding or encoding.
    """
    code = errno.EBADMSG


class MalformedMessageError(ProtocolError):
    """Header or trailer syntax violation."""
    pass


class IncompleteMessageError(ProtocolError):
    """Peer closed the stream before a full header or payload arrived."""
    pass


class LengthOverflowError(ProtocolError):
    """Decimal length field exceeds the representable range."""
    code = errno.EOVERFLOW


class MessageTooLargeError(ProtocolError):
    """Declared length exceeds the receive limit chosen by the caller."""
    code = errno.EMSGSIZE


# Request/Reply Errors

class RemoteError(YakError):
    """
    Peer answered a request with an error message.

    The payload of the error message is available as ``message``.
    """
    pass


class UnexpectedReplyError(YakError):
    """Peer answered a request with a message type the client does not know."""
    code = errno.EBADMSG
