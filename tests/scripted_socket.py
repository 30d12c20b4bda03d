"""
Scripted socket double for transport tests

Plays back a fixed incoming byte stream, records everything sent, and can
inject partial transfers, interruptions and hard errors.
"""
from collections import deque
from typing import Iterable, Optional, Union


class ScriptedSocket:
    """Minimal stand-in for a blocking stream socket"""

    def __init__(
        self,
        incoming: bytes = b"",
        max_chunk: Optional[int] = None,
        send_script: Iterable[Union[int, BaseException]] = (),
        recv_error: Optional[BaseException] = None,
        interrupt_first_recv: bool = False,
        close_error: Optional[OSError] = None,
    ):
        self.incoming = bytes(incoming)
        self.position = 0
        self.max_chunk = max_chunk
        self.send_script = deque(send_script)
        self.recv_error = recv_error
        self.interrupt_first_recv = interrupt_first_recv
        self.close_error = close_error
        self.sent = bytearray()
        self.send_calls = 0
        self.recv_calls = 0
        self.closed = False
        self.timeout = None

    @property
    def consumed(self) -> int:
        return self.position

    def _limit(self, n: int) -> int:
        if self.max_chunk is not None:
            n = min(n, self.max_chunk)
        return n

    def recv_into(self, buffer, nbytes: int = 0) -> int:
        self.recv_calls += 1
        if self.interrupt_first_recv:
            self.interrupt_first_recv = False
            raise InterruptedError()
        view = memoryview(buffer)
        if nbytes == 0:
            nbytes = len(view)
        remaining = len(self.incoming) - self.position
        if remaining == 0 and self.recv_error is not None:
            raise self.recv_error
        n = self._limit(min(nbytes, remaining))
        view[:n] = self.incoming[self.position:self.position + n]
        self.position += n
        return n

    def recv(self, nbytes: int) -> bytes:
        buffer = bytearray(nbytes)
        n = self.recv_into(buffer, nbytes)
        return bytes(buffer[:n])

    def send(self, data) -> int:
        self.send_calls += 1
        data = bytes(data)
        n = len(data)
        if self.send_script:
            step = self.send_script.popleft()
            if isinstance(step, BaseException):
                raise step
            n = min(n, step)
        n = self._limit(n)
        self.sent.extend(data[:n])
        return n

    def settimeout(self, value) -> None:
        self.timeout = value

    def close(self) -> None:
        self.closed = True
        if self.close_error is not None:
            raise self.close_error
