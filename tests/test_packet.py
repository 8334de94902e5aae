from __future__ import annotations

import struct

import pytest

from abxfeed.packet import CallType, DecodeError, Record, RequestFrame


def test_stream_all_request_bytes():
    assert RequestFrame.stream_all().to_bytes() == b"\x01\x00"


def test_resend_request_bytes():
    assert RequestFrame.resend(3).to_bytes() == b"\x02\x03"


def test_roundtrip_request():
    raw = RequestFrame.resend(42).to_bytes()
    p = RequestFrame.from_bytes(raw)
    assert p.call_type is CallType.RESEND
    assert p.resend_seq == 42


def test_resend_255_fits():
    assert RequestFrame.resend(255).to_bytes() == b"\x02\xff"


@pytest.mark.parametrize("seq", [256, 1000, -1])
def test_resend_out_of_range(seq):
    with pytest.raises(ValueError):
        RequestFrame.resend(seq)


def test_unknown_call_type():
    with pytest.raises(DecodeError):
        RequestFrame.from_bytes(b"\x07\x00")


def test_decode_record_big_endian():
    raw = b"MSFT" + b"S" + bytes([0, 0, 0x01, 0x2C]) + bytes([0, 0x01, 0x86, 0xA0]) + bytes([0, 0, 0, 7])
    r = Record.from_bytes(raw)
    assert r.symbol == "MSFT"
    assert r.side == "S"
    assert r.quantity == 300
    assert r.price == 100_000
    assert r.sequence == 7


def test_decode_signed_fields():
    raw = b"AB  " + b"B" + struct.pack(">iii", -5, -2_147_483_648, 2_147_483_647)
    r = Record.from_bytes(raw)
    assert r.symbol == "AB  "
    assert r.quantity == -5
    assert r.price == -2_147_483_648
    assert r.sequence == 2_147_483_647


def test_raw_side_and_symbol_bytes_preserved():
    raw = b"X\x00\xfe " + b"\x90" + struct.pack(">iii", 1, 2, 3)
    r = Record.from_bytes(raw)
    assert r.symbol == "X\x00\xfe "
    assert r.side == "\x90"
    assert r.to_bytes() == raw


@pytest.mark.parametrize("size", [0, 16, 18])
def test_wrong_record_size(size):
    with pytest.raises(DecodeError):
        Record.from_bytes(b"\x00" * size)


def test_output_contract():
    r = Record(symbol="AAPL", side="B", quantity=50, price=100, sequence=1)
    assert r.to_dict() == {
        "symbol": "AAPL",
        "buysellindicator": "B",
        "quantity": 50,
        "price": 100,
        "packetSequence": 1,
    }
