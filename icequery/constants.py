"""IceQuery constants."""

from __future__ import annotations

# Scheduler defaults
DEFAULT_NET_NAME = "ICECREAM"
DEFAULT_SCHEDULER_PORT = 8765
DEFAULT_CONNECT_TIMEOUT_MS = 2000
DEFAULT_RECEIVE_TIMEOUT_MS = 3000
SCHEDULER_HOST_ENV = "ICECREAM_SCHEDULER_HOST"

# Wire protocol
PROTOCOL_VERSION = 29
DISCOVERY_SLICE_MS = 100
RECV_CHUNK_SIZE = 65536
MAX_FRAME_SIZE = 1 << 20

# Message type codes (icecream numbering starts at 'A')
M_END = 67
M_MON_LOGIN = 82
M_MON_STATS = 87

# Ingestion
MAX_USELESS_POLLS = 3

# Exit codes
EXIT_OK = 0
EXIT_ARGUMENTS = 1
EXIT_CONNECTION = 2
EXIT_NO_DATA = 3
EXIT_SHAPING = 4

# Table glyphs: (column separator, horizontal line, cross)
RICH_GLYPHS = (" │ ", "─", "─┼─")
ASCII_GLYPHS = (" | ", "-", "-+-")
PLAIN_SEPARATOR = " "
