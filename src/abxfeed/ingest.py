from __future__ import annotations

import logging
from dataclasses import dataclass

from .constants import RECORD_SIZE
from .net import Endpoint, StreamClosed
from .packet import DecodeError, Record, RequestFrame
from .session import Session


@dataclass(slots=True)
class StreamIngestor:
    endpoint: Endpoint

    def run(self, session: Session) -> int:
        count = 0
        with self.endpoint.open() as conn:
            logging.info("requesting all packets from %s:%d", self.endpoint.host, self.endpoint.port)
            conn.send(RequestFrame.stream_all().to_bytes())

            while True:
                try:
                    raw = conn.recv_exactly(RECORD_SIZE)
                except StreamClosed as exc:
                    if exc.received:
                        raise DecodeError(f"incomplete record frame at end of stream: {exc}") from exc
                    break

                record = Record.from_bytes(raw)
                logging.debug("recv seq=%d symbol=%r side=%r", record.sequence, record.symbol, record.side)
                session.add(record)
                count += 1

        logging.info("stream closed; records=%d max_sequence=%d", count, session.max_sequence)
        return count
