"""Parsing of per-node statistics blobs broadcast by the scheduler."""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger("icequery")


@dataclass(frozen=True)
class NodeRecord:
    """Latest known state of one worker node.

    Instances only exist in a fully valid state; see parse_stats().
    """

    host_id: int
    name: str
    ip: str
    platform: str
    max_jobs: int
    no_remote: bool = False
    offline: bool = False

    @property
    def counts_towards_capacity(self) -> bool:
        """True if this node accepts remote jobs right now."""
        return not self.no_remote and not self.offline


def parse_kv_lines(blob: str) -> dict[str, str]:
    """Parse key:value lines, lower-casing keys.

    The first colon on a line separates key from value. Lines without a
    colon are skipped. A later duplicate key wins.
    """
    d: dict[str, str] = {}
    for line in blob.split("\n"):
        if ":" not in line:
            continue
        k, v = line.split(":", 1)
        d[k.strip().lower()] = v.strip()
    return d


def parse_stats(host_id: int, blob: str) -> NodeRecord | None:
    """Build a NodeRecord from a raw stats blob.

    Returns None if any required field is missing, empty or zero, or if
    maxjobs is not a number. None is a filtering signal, not an error.

    Args:
        host_id: Scheduler-assigned host id; 0 is invalid
        blob: Newline separated ``key:value`` text

    Returns:
        A valid NodeRecord, or None
    """
    if host_id <= 0:
        logger.debug("Dropping stats with invalid host id %d", host_id)
        return None

    fields = parse_kv_lines(blob)
    try:
        max_jobs = int(fields.get("maxjobs", ""))
    except ValueError:
        logger.debug("Dropping stats for host %d: bad maxjobs", host_id)
        return None

    name = fields.get("name", "")
    ip = fields.get("ip", "")
    platform = fields.get("platform", "")
    if not (name and ip and platform) or max_jobs <= 0:
        logger.debug("Dropping incomplete stats for host %d", host_id)
        return None

    return NodeRecord(
        host_id=host_id,
        name=name,
        ip=ip,
        platform=platform,
        max_jobs=max_jobs,
        no_remote=fields.get("noremote", "").lower() == "true",
        offline=fields.get("state", "").lower() == "offline",
    )
