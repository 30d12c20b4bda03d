"""
Threaded Yak echo peer for tests and manual debugging

Answers every ``X`` request with an ``R`` reply carrying the same payload.
Two commands are special:

- ``fail``  -> answers ``E`` with the text ``boom``
- ``weird`` -> answers with the unknown type ``Z``
"""
import socket
import threading
from typing import Optional

import structlog

logger = structlog.get_logger()


class YakEchoServer:
    """Single-connection Yak echo peer bound to an ephemeral loopback port"""

    def __init__(self, host: str = "127.0.0.1", port: int = 0):
        self.server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.server_socket.bind((host, port))
        self.server_socket.listen(1)
        self.host, self.port = self.server_socket.getsockname()[:2]
        self.requests = []
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "YakEchoServer":
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()
        return self

    def stop(self) -> None:
        self.server_socket.close()
        if self._thread is not None:
            self._thread.join(timeout=5)

    def _serve(self) -> None:
        try:
            client_sock, _ = self.server_socket.accept()
        except OSError:
            return
        with client_sock, client_sock.makefile("rb") as rfile:
            while True:
                header = rfile.readline()
                if not header:
                    break
                msg_type, length = header[:1], int(header[2:-1])
                payload = rfile.read(length)
                rfile.read(1)
                self.requests.append((msg_type, payload))

                if payload == b"fail":
                    reply_type, reply = b"E", b"boom"
                elif payload == b"weird":
                    reply_type, reply = b"Z", payload
                else:
                    reply_type, reply = b"R", payload
                client_sock.sendall(reply_type + b":" + str(len(reply)).encode() + b"\n" + reply + b"\n")
        logger.debug("yak_echo_server_done", requests=len(self.requests))
