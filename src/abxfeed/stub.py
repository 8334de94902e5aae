from __future__ import annotations

import logging
import socket
import threading
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .client import Client, ClientConfig, RunMetrics
from .constants import REQUEST_SIZE
from .net import StreamClosed, TcpConnection
from .packet import CallType, DecodeError, Record, RequestFrame
from .session import Session

DEMO_SYMBOLS = ("AAPL", "MSFT", "AMZN", "META")


@dataclass(slots=True)
class StubServer:
    """Loopback ABX server serving a fixed record set from a background thread.

    A stream-all request gets every entry of ``records`` in order, then the
    connection is closed. A resend request gets ``resend[seq]`` if present,
    otherwise the connection is closed without an answer. With a non-zero
    ``chunk_size`` frames are written in pieces of that many bytes.
    """

    records: Sequence[Record]
    resend: dict[int, Record] = field(default_factory=dict)
    host: str = "127.0.0.1"
    port: int = 0
    chunk_size: int = 0
    requests: list[RequestFrame] = field(default_factory=list)
    _sock: socket.socket | None = None
    _thread: threading.Thread | None = None
    _stop: threading.Event = field(default_factory=threading.Event)

    @property
    def address(self) -> tuple[str, int]:
        if self._sock is None:
            raise RuntimeError("stub server is not running")
        host, port = self._sock.getsockname()[:2]
        return host, port

    def start(self) -> "StubServer":
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((self.host, self.port))
        sock.listen()
        sock.settimeout(0.1)
        self._sock = sock
        self._stop.clear()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()
        logging.debug("stub server listening on %s:%d", *self.address)
        return self

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> "StubServer":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def _serve(self) -> None:
        assert self._sock is not None
        while not self._stop.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            conn.settimeout(None)
            with TcpConnection(conn) as peer:
                try:
                    self._handle(peer)
                except (OSError, EOFError, DecodeError) as exc:
                    logging.debug("stub server dropped connection: %s", exc)

    def _handle(self, peer: TcpConnection) -> None:
        try:
            request = RequestFrame.from_bytes(peer.recv_exactly(REQUEST_SIZE))
        except StreamClosed:
            return
        self.requests.append(request)

        if request.call_type == CallType.STREAM_ALL:
            for record in self.records:
                self._write(peer, record.to_bytes())
        elif request.resend_seq in self.resend:
            self._write(peer, self.resend[request.resend_seq].to_bytes())

    def _write(self, peer: TcpConnection, data: bytes) -> None:
        assert peer.sock is not None
        if self.chunk_size <= 0:
            peer.sock.sendall(data)
            return
        for i in range(0, len(data), self.chunk_size):
            peer.sock.sendall(data[i : i + self.chunk_size])


def demo_records(count: int) -> list[Record]:
    return [
        Record(
            symbol=DEMO_SYMBOLS[seq % len(DEMO_SYMBOLS)],
            side="B" if seq % 2 else "S",
            quantity=10 * seq,
            price=100 + seq,
            sequence=seq,
        )
        for seq in range(1, count + 1)
    ]


def run_demo(
    *,
    count: int,
    drop: Iterable[int] = (),
    pacing_ms: int = 0,
    chunk_size: int = 0,
) -> tuple[Session, RunMetrics]:
    records = demo_records(count)
    dropped = set(drop)
    streamed = [r for r in records if r.sequence not in dropped]

    with StubServer(streamed, resend={r.sequence: r for r in records}, chunk_size=chunk_size) as server:
        host, port = server.address
        session = Session()
        metrics = Client(ClientConfig(host=host, port=port, pacing_ms=pacing_ms)).run(session)

    return session, metrics
