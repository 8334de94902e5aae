from __future__ import annotations

import pytest

from abxfeed.client import Client, ClientConfig
from abxfeed.export import ordered_records, to_output
from abxfeed.net import ConnectError
from abxfeed.packet import CallType, Record
from abxfeed.session import Session
from abxfeed.stub import StubServer, run_demo


def rec(seq: int, quantity: int = 10) -> Record:
    return Record(symbol="AMZN", side="B", quantity=quantity, price=3000, sequence=seq)


def config_for(server: StubServer) -> ClientConfig:
    host, port = server.address
    return ClientConfig(host=host, port=port, connect_timeout_ms=2000, read_timeout_ms=2000, pacing_ms=0)


def test_end_to_end_with_duplicate_and_gap():
    streamed = [rec(1), rec(2, quantity=1), rec(2, quantity=2), rec(4)]
    resend = {3: rec(3)}
    with StubServer(streamed, resend=resend, chunk_size=3) as server:
        session = Session()
        metrics = Client(config_for(server)).run(session)

    out = to_output(ordered_records(session))
    assert [r["packetSequence"] for r in out] == [1, 2, 3, 4]
    assert out[1]["quantity"] == 2
    assert metrics.streamed == 4
    assert metrics.duplicates == 1
    assert metrics.missing == 1
    assert metrics.recovered == 1
    assert metrics.failed == []
    assert [r.call_type for r in server.requests] == [CallType.STREAM_ALL, CallType.RESEND]


def test_bulk_phase_connect_error_propagates():
    server = StubServer([]).start()
    config = config_for(server)
    server.stop()
    with pytest.raises(ConnectError):
        Client(config).run(Session())


def test_run_demo_fills_dropped_sequences():
    session, metrics = run_demo(count=10, drop=[3, 7], chunk_size=4)
    assert [r.sequence for r in ordered_records(session)] == list(range(1, 11))
    assert metrics.recovered == 2
    assert metrics.duration_s >= 0.0
