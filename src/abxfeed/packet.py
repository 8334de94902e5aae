from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

from .constants import (
    MAX_RESEND_SEQ,
    RECORD_FORMAT,
    RECORD_SIZE,
    REQUEST_FORMAT,
    REQUEST_SIZE,
    RESEND,
    STREAM_ALL,
)

# symbol and side bytes map 1:1 onto characters
TEXT_ENCODING = "latin-1"


class DecodeError(ValueError):
    pass


class CallType(enum.IntEnum):
    STREAM_ALL = STREAM_ALL
    RESEND = RESEND


@dataclass(frozen=True, slots=True)
class RequestFrame:
    call_type: CallType
    resend_seq: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.resend_seq <= MAX_RESEND_SEQ:
            raise ValueError(
                f"resend sequence {self.resend_seq} does not fit the 1-byte request field (0-{MAX_RESEND_SEQ})"
            )

    def to_bytes(self) -> bytes:
        return struct.pack(REQUEST_FORMAT, int(self.call_type), self.resend_seq)

    @staticmethod
    def from_bytes(raw: bytes) -> "RequestFrame":
        if len(raw) != REQUEST_SIZE:
            raise DecodeError(f"request frame must be {REQUEST_SIZE} bytes, got {len(raw)}")
        call_type, resend_seq = struct.unpack(REQUEST_FORMAT, raw)
        try:
            kind = CallType(call_type)
        except ValueError:
            raise DecodeError(f"unknown call type: {call_type}") from None
        return RequestFrame(call_type=kind, resend_seq=resend_seq)

    @staticmethod
    def stream_all() -> "RequestFrame":
        return RequestFrame(call_type=CallType.STREAM_ALL)

    @staticmethod
    def resend(seq: int) -> "RequestFrame":
        return RequestFrame(call_type=CallType.RESEND, resend_seq=seq)


@dataclass(frozen=True, slots=True)
class Record:
    """One order-book event as carried by a 17-byte ABX record frame.

    ``symbol`` and ``side`` are kept exactly as sent, padding and unusual
    side codes included.
    """

    symbol: str
    side: str
    quantity: int
    price: int
    sequence: int

    def to_bytes(self) -> bytes:
        symbol = self.symbol.encode(TEXT_ENCODING)
        side = self.side.encode(TEXT_ENCODING)
        if len(symbol) != 4 or len(side) != 1:
            raise ValueError(f"symbol must be 4 bytes and side 1 byte: {self.symbol!r}/{self.side!r}")
        return struct.pack(RECORD_FORMAT, symbol, side, self.quantity, self.price, self.sequence)

    @staticmethod
    def from_bytes(raw: bytes) -> "Record":
        if len(raw) != RECORD_SIZE:
            raise DecodeError(f"record frame must be {RECORD_SIZE} bytes, got {len(raw)}")
        symbol, side, quantity, price, sequence = struct.unpack(RECORD_FORMAT, raw)
        return Record(
            symbol=symbol.decode(TEXT_ENCODING),
            side=side.decode(TEXT_ENCODING),
            quantity=quantity,
            price=price,
            sequence=sequence,
        )

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "buysellindicator": self.side,
            "quantity": self.quantity,
            "price": self.price,
            "packetSequence": self.sequence,
        }
