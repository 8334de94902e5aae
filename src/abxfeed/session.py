from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

from .packet import Record

if TYPE_CHECKING:
    from .recovery import RecoveryFailure


@dataclass(slots=True)
class Session:
    """Record store and gap-scan state for a single client run."""

    records: dict[int, Record] = field(default_factory=dict)
    max_sequence: int = 0
    duplicates: int = 0
    failures: dict[int, "RecoveryFailure"] = field(default_factory=dict)

    def add(self, record: Record) -> None:
        if record.sequence in self.records:
            self.duplicates += 1
            logging.warning("duplicate sequence %d; keeping latest", record.sequence)
        self.records[record.sequence] = record
        self.max_sequence = max(self.max_sequence, record.sequence)

    def missing(self) -> Iterator[int]:
        return (seq for seq in range(1, self.max_sequence + 1) if seq not in self.records)

    def gap_count(self) -> int:
        present = sum(1 for seq in self.records if 1 <= seq <= self.max_sequence)
        return self.max_sequence - present
