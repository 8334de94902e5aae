from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from .constants import (
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_HOST,
    DEFAULT_PACING_MS,
    DEFAULT_PORT,
    DEFAULT_READ_TIMEOUT_MS,
)
from .ingest import StreamIngestor
from .net import Endpoint
from .recovery import GapRecovery
from .session import Session


@dataclass(frozen=True, slots=True)
class ClientConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS
    read_timeout_ms: int = DEFAULT_READ_TIMEOUT_MS
    pacing_ms: int = DEFAULT_PACING_MS

    def endpoint(self) -> Endpoint:
        return Endpoint(
            self.host,
            self.port,
            connect_timeout_ms=self.connect_timeout_ms,
            read_timeout_ms=self.read_timeout_ms,
        )


@dataclass(slots=True)
class RunMetrics:
    streamed: int = 0
    duplicates: int = 0
    missing: int = 0
    recovered: int = 0
    failed: list[int] = field(default_factory=list)
    start_ts: float = field(default_factory=time.monotonic)
    end_ts: float | None = None

    @property
    def duration_s(self) -> float:
        if self.end_ts is None:
            return 0.0
        return max(0.0, self.end_ts - self.start_ts)


@dataclass(slots=True)
class Client:
    """Runs the stream-all exchange, then resends for every gap.

    Errors in the bulk phase propagate to the caller untouched; recovery
    failures end up in ``session.failures`` instead.
    """

    config: ClientConfig = field(default_factory=ClientConfig)

    def run(self, session: Session) -> RunMetrics:
        metrics = RunMetrics()
        endpoint = self.config.endpoint()

        metrics.streamed = StreamIngestor(endpoint).run(session)
        metrics.duplicates = session.duplicates
        metrics.missing = session.gap_count()

        metrics.recovered = GapRecovery(endpoint, pacing_ms=self.config.pacing_ms).run(session)
        metrics.failed = sorted(session.failures)
        if metrics.failed:
            logging.warning("unrecovered sequences: %s", metrics.failed)

        metrics.end_ts = time.monotonic()
        return metrics
