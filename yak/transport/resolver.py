"""
Address Resolution

Turns a host name and port into candidate stream addresses and opens a
connected socket against the first candidate that accepts.
"""
import socket
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

import structlog

from yak.config import settings
from yak.exceptions import (
    ConnectionRefusedError as YakConnectionRefusedError,
    HostUnresolvableError,
    InvalidArgumentError,
)

logger = structlog.get_logger()

PORT_MIN = 0
PORT_MAX = 65535


@dataclass(frozen=True)
class Candidate:
    """One resolved address as returned by getaddrinfo()."""

    family: int
    type: int
    proto: int
    canonname: str
    sockaddr: Tuple[Any, ...]


@dataclass
class ResolvedSocket:
    """Connected socket together with the candidate that produced it."""

    sock: socket.socket
    candidate: Candidate
    canonical_name: Optional[str] = None
    failures: List[dict] = field(default_factory=list)


def validate_endpoint(host: Optional[str], port: int) -> str:
    """
    Check connect() arguments without touching the network.

    Returns:
        The host to resolve, with ``None`` replaced by the default host.

    Raises:
        InvalidArgumentError: For an empty or non-string host, or a port that
            is not an integer in ``[0, 65535]``.
    """
    if host is None:
        host = settings.default_host
    if not isinstance(host, str) or not host:
        raise InvalidArgumentError(
            "Host must be a non-empty string",
            details={"host": host},
        )
    if isinstance(port, bool) or not isinstance(port, int):
        raise InvalidArgumentError(
            "Port must be an integer",
            details={"port": port},
        )
    if not PORT_MIN <= port <= PORT_MAX:
        raise InvalidArgumentError(
            f"Port {port} outside [{PORT_MIN}, {PORT_MAX}]",
            details={"port": port},
        )
    return host


def resolve(host: str, port: int) -> List[Candidate]:
    """
    Resolve ``host``/``port`` into stream-oriented candidate addresses.

    Raises:
        HostUnresolvableError: If name resolution fails or yields nothing.
    """
    try:
        infos = socket.getaddrinfo(
            host, port, socket.AF_UNSPEC, socket.SOCK_STREAM, 0, socket.AI_CANONNAME
        )
    except socket.gaierror as e:
        raise HostUnresolvableError(
            f"Cannot resolve host {host!r}",
            details={"host": host, "port": port, "error": str(e), "gai_errno": e.errno},
        ) from e

    if not infos:
        raise HostUnresolvableError(
            f"No stream address for host {host!r}",
            details={"host": host, "port": port},
        )

    candidates = [
        Candidate(family=family, type=socktype, proto=proto, canonname=canonname, sockaddr=sockaddr)
        for family, socktype, proto, canonname, sockaddr in infos
    ]
    logger.debug(
        "yak_resolved",
        host=host,
        port=port,
        canonname=candidates[0].canonname,
        candidates=len(candidates),
    )
    return candidates


def _apply_timeout(sock: socket.socket, timeout: Optional[float], name: str) -> None:
    try:
        sock.settimeout(timeout)
    except ValueError as e:
        raise InvalidArgumentError(
            f"Invalid {name}: {timeout!r}",
            details={name: timeout},
        ) from e


def _try_candidate(candidate: Candidate, timeout: Optional[float]) -> socket.socket:
    sock = socket.socket(candidate.family, candidate.type, candidate.proto)
    try:
        _apply_timeout(sock, timeout, "connect_timeout")
        sock.connect(candidate.sockaddr)
    except BaseException:
        sock.close()
        raise
    return sock


def open_connection(host: str, port: int) -> ResolvedSocket:
    """
    Connect to the first candidate address that accepts.

    Candidates are tried in resolution order; sockets opened for failed
    attempts are closed before moving on.

    Raises:
        HostUnresolvableError: If name resolution fails.
        ConnectionRefusedError: If no candidate accepts the connection.
        InvalidArgumentError: If a configured timeout is out of range; the
            socket is closed.
    """
    candidates = resolve(host, port)
    failures: List[dict] = []

    for candidate in candidates:
        try:
            sock = _try_candidate(candidate, settings.connect_timeout)
        except OSError as e:
            failures.append({"address": str(candidate.sockaddr), "error": str(e), "errno": e.errno})
            logger.debug(
                "yak_connect_attempt_failed",
                host=host,
                port=port,
                address=str(candidate.sockaddr),
                error=str(e),
            )
            continue

        try:
            _apply_timeout(sock, settings.socket_timeout, "socket_timeout")
        except BaseException:
            sock.close()
            raise
        canonical = next((c.canonname for c in candidates if c.canonname), None)
        return ResolvedSocket(
            sock=sock,
            candidate=candidate,
            canonical_name=canonical,
            failures=failures,
        )

    raise YakConnectionRefusedError(
        f"Cannot connect to {host}:{port}",
        details={"host": host, "port": port, "attempts": failures},
    )
