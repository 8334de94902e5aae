"""ABX market-data feed client

Streams fixed 17-byte records from an ABX server over TCP, fills sequence
gaps with one-shot resend requests and exports the ordered result:
- packet framing kept apart from the connection and the protocol phases
- one explicit Session threaded through ingest, recovery and export
- per-sequence failure isolation during recovery
"""

__all__ = []
