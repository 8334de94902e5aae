from __future__ import annotations

import argparse
import json
import logging

from .client import Client, ClientConfig, RunMetrics
from .constants import (
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_HOST,
    DEFAULT_OUTPUT,
    DEFAULT_PACING_MS,
    DEFAULT_PORT,
    DEFAULT_READ_TIMEOUT_MS,
)
from .export import ordered_records, write_json
from .session import Session
from .stub import run_demo


def summarize(role: str, out: str, session: Session, metrics: RunMetrics) -> dict:
    return {
        "role": role,
        "out": out,
        "records": len(session.records),
        "max_sequence": session.max_sequence,
        "streamed": metrics.streamed,
        "duplicates": metrics.duplicates,
        "recovered": metrics.recovered,
        "failed": metrics.failed,
        "seconds": metrics.duration_s,
    }


def cmd_fetch(args: argparse.Namespace) -> int:
    config = ClientConfig(
        host=args.host,
        port=args.port,
        connect_timeout_ms=args.connect_timeout_ms,
        read_timeout_ms=args.read_timeout_ms,
        pacing_ms=args.pacing_ms,
    )
    session = Session()
    try:
        metrics = Client(config).run(session)
        records = ordered_records(session)
        write_json(args.out, records)
    except (OSError, EOFError, ValueError) as exc:
        logging.error("run failed: %s", exc)
        return 1
    logging.info("wrote %d records to %s", len(records), args.out)

    payload = summarize("fetch", args.out, session, metrics)
    print(json.dumps(payload, indent=2) if args.json else payload)
    return 0


def cmd_demo(args: argparse.Namespace) -> int:
    try:
        session, metrics = run_demo(
            count=args.count,
            drop=args.drop,
            pacing_ms=args.pacing_ms,
            chunk_size=args.chunk_size,
        )
        write_json(args.out, ordered_records(session))
    except (OSError, EOFError, ValueError) as exc:
        logging.error("demo failed: %s", exc)
        return 1

    payload = summarize("demo", args.out, session, metrics)
    print(json.dumps(payload, indent=2) if args.json else payload)
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="abxfeed", description="ABX exchange feed client (stream + gap recovery).")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(x: argparse.ArgumentParser) -> None:
        x.add_argument("--out", default=DEFAULT_OUTPUT)
        x.add_argument("--pacing-ms", type=int, default=DEFAULT_PACING_MS, help="delay between resend requests")
        x.add_argument("--json", action="store_true")

    fetch = sub.add_parser("fetch", help="stream all packets from a server and fill gaps")
    add_common(fetch)
    fetch.add_argument("--host", default=DEFAULT_HOST)
    fetch.add_argument("--port", type=int, default=DEFAULT_PORT)
    fetch.add_argument("--connect-timeout-ms", type=int, default=DEFAULT_CONNECT_TIMEOUT_MS)
    fetch.add_argument("--read-timeout-ms", type=int, default=DEFAULT_READ_TIMEOUT_MS)
    fetch.set_defaults(func=cmd_fetch)

    demo = sub.add_parser("demo", help="run the client against an in-process stub server")
    add_common(demo)
    demo.add_argument("--count", type=int, default=14)
    demo.add_argument("--drop", type=int, action="append", default=[], help="sequence left out of the stream")
    demo.add_argument("--chunk-size", type=int, default=0, help="split server writes into pieces of this size")
    demo.set_defaults(func=cmd_demo)

    args = p.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
