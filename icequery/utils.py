"""IceQuery utility functions."""

from __future__ import annotations

import ipaddress
import re
import time
from collections.abc import Callable


def elapsed_ms(start: float, clock: Callable[[], float] = time.monotonic) -> int:
    """Milliseconds elapsed since start, a reading of clock."""
    return int((clock() - start) * 1000)


def pluralize(count: int, noun: str) -> str:
    """Return e.g. "1 node(s)"."""
    return f"{count} {noun}(s)"


_HOSTNAME_RE = re.compile(
    r"^(?=.{1,253}$)([A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)"
    r"(\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$"
)


def looks_like_host(host_arg: str) -> bool:
    """Return True if host_arg looks like a hostname or IP address."""
    if not host_arg:
        return False
    host = host_arg
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        return _HOSTNAME_RE.match(host) is not None
