from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from .constants import DEFAULT_PACING_MS, RECORD_SIZE
from .net import Endpoint
from .packet import DecodeError, Record, RequestFrame
from .session import Session


class SequenceMismatch(DecodeError):
    pass


class RecoveryFailure(Exception):
    def __init__(self, sequence: int, cause: BaseException):
        super().__init__(f"sequence {sequence}: {cause}")
        self.sequence = sequence
        self.cause = cause


@dataclass(slots=True)
class GapRecovery:
    endpoint: Endpoint
    pacing_ms: int = DEFAULT_PACING_MS

    def fetch_one(self, seq: int) -> Record:
        return self._exchange(RequestFrame.resend(seq))

    def _exchange(self, request: RequestFrame) -> Record:
        seq = request.resend_seq
        with self.endpoint.open() as conn:
            conn.send(request.to_bytes())
            record = Record.from_bytes(conn.recv_exactly(RECORD_SIZE))
        if record.sequence != seq:
            raise SequenceMismatch(f"resend for sequence {seq} answered with sequence {record.sequence}")
        return record

    def run(self, session: Session) -> int:
        gaps = session.gap_count()
        if not gaps:
            logging.info("no gaps up to sequence %d", session.max_sequence)
            return 0

        logging.info("recovering %d missing sequence(s) up to %d", gaps, session.max_sequence)
        recovered = 0
        contacted = False
        for seq in session.missing():
            logging.info("requesting missing sequence: %d", seq)
            try:
                request = RequestFrame.resend(seq)
                # pace only exchanges that reach the peer
                if contacted and self.pacing_ms > 0:
                    time.sleep(self.pacing_ms / 1000.0)
                contacted = True
                record = self._exchange(request)
            except (OSError, EOFError, ValueError) as exc:
                session.failures[seq] = RecoveryFailure(seq, exc)
                logging.error("error requesting sequence %d: %s", seq, exc)
                continue

            session.add(record)
            recovered += 1

        return recovered
