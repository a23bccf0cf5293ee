"""
IceQuery - one-shot status query for an icecream build farm scheduler.

Connects as a monitor, collects the per-node status broadcast and prints
a table of worker nodes plus the total remote build capacity.
"""

from __future__ import annotations

from .cli import main
from .exceptions import IceQueryError, NoUsableDataError, SchedulerConnectionError

__all__ = [
    "IceQueryError",
    "NoUsableDataError",
    "SchedulerConnectionError",
    "main",
]
