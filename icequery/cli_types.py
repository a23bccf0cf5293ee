"""Type definitions for CLI command arguments."""

from __future__ import annotations

from dataclasses import dataclass

from .constants import (
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_NET_NAME,
    DEFAULT_RECEIVE_TIMEOUT_MS,
    DEFAULT_SCHEDULER_PORT,
)


@dataclass(frozen=True)
class QueryArgs:
    """Arguments for a scheduler query, fixed for the whole run."""

    net_name: str = DEFAULT_NET_NAME
    connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS
    receive_timeout_ms: int = DEFAULT_RECEIVE_TIMEOUT_MS
    scheduler: str | None = None
    port: int = DEFAULT_SCHEDULER_PORT
    quiet: bool = False
    very_quiet: bool = False
    brief: bool = False
    debug: bool = False
    plain: bool = False
    ascii: bool = False
    ascii_fallback: bool = False
    no_table: bool = False
    no_offline: bool = False
    no_noremote: bool = False
    color: str = "auto"
