from __future__ import annotations

REQUEST_FORMAT = "!BB"  # call_type, resend_seq
RECORD_FORMAT = "!4sciii"  # symbol, side, quantity, price, sequence

REQUEST_SIZE = 2
RECORD_SIZE = 17

STREAM_ALL = 1
RESEND = 2

MAX_RESEND_SEQ = 0xFF

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_OUTPUT = "output.json"
DEFAULT_PACING_MS = 100
DEFAULT_CONNECT_TIMEOUT_MS = 0
DEFAULT_READ_TIMEOUT_MS = 0
