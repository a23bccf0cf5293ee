"""IceQuery command implementations."""

from __future__ import annotations

from .query import cmd_query

__all__ = [
    "cmd_query",
]
