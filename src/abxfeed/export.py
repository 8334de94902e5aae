from __future__ import annotations

import json
from typing import Iterable

from .packet import Record
from .session import Session


def ordered_records(session: Session) -> list[Record]:
    return sorted(session.records.values(), key=lambda r: r.sequence)


def to_output(records: Iterable[Record]) -> list[dict]:
    return [r.to_dict() for r in records]


def write_json(path: str, records: Iterable[Record]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(to_output(records), f, indent=4)
