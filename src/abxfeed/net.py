from __future__ import annotations

import socket
from dataclasses import dataclass

from .constants import DEFAULT_CONNECT_TIMEOUT_MS, DEFAULT_READ_TIMEOUT_MS


class ConnectError(OSError):
    pass


class SendError(OSError):
    pass


class StreamClosed(EOFError):
    """Peer closed the stream before the requested bytes arrived."""

    def __init__(self, expected: int, received: int):
        super().__init__(f"stream closed after {received} of {expected} bytes")
        self.expected = expected
        self.received = received


class TcpConnection:
    def __init__(self, sock: socket.socket):
        self.sock: socket.socket | None = sock

    @classmethod
    def open(
        cls,
        host: str,
        port: int,
        connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS,
        read_timeout_ms: int = DEFAULT_READ_TIMEOUT_MS,
    ) -> "TcpConnection":
        timeout = connect_timeout_ms / 1000.0 if connect_timeout_ms > 0 else None
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as exc:
            raise ConnectError(f"cannot connect to {host}:{port}: {exc}") from exc
        sock.settimeout(read_timeout_ms / 1000.0 if read_timeout_ms > 0 else None)
        return cls(sock)

    def _require_sock(self) -> socket.socket:
        if self.sock is None:
            raise OSError("connection is closed")
        return self.sock

    def send(self, data: bytes) -> None:
        sock = self._require_sock()
        try:
            sent = sock.send(data)
        except OSError as exc:
            raise SendError(f"send failed: {exc}") from exc
        if sent != len(data):
            raise SendError(f"short send: {sent} of {len(data)} bytes accepted")

    def recv_exactly(self, n: int) -> bytes:
        sock = self._require_sock()
        buf = bytearray()
        while len(buf) < n:
            chunk = sock.recv(n - len(buf))
            if not chunk:
                raise StreamClosed(expected=n, received=len(buf))
            buf += chunk
        return bytes(buf)

    def close(self) -> None:
        if self.sock is not None:
            sock, self.sock = self.sock, None
            sock.close()

    def __enter__(self) -> "TcpConnection":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


@dataclass(frozen=True, slots=True)
class Endpoint:
    host: str
    port: int
    connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS
    read_timeout_ms: int = DEFAULT_READ_TIMEOUT_MS

    def open(self) -> TcpConnection:
        return TcpConnection.open(
            self.host,
            self.port,
            connect_timeout_ms=self.connect_timeout_ms,
            read_timeout_ms=self.read_timeout_ms,
        )
