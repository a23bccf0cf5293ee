"""Summaries over the collected node records."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .exceptions import NoUsableDataError
from .stats import NodeRecord


@dataclass(frozen=True)
class NodeSummary:
    """Displayed nodes plus the farm totals."""

    nodes: tuple[NodeRecord, ...]
    node_count: int
    core_count: int


def is_displayed(record: NodeRecord, *, filter_offline: bool, filter_noremote: bool) -> bool:
    if filter_offline and record.offline:
        return False
    if filter_noremote and record.no_remote:
        return False
    return True


def count_cores(records: Iterable[NodeRecord]) -> int:
    """Capacity available for remote jobs; filters never change it."""
    return sum(r.max_jobs for r in records if r.counts_towards_capacity)


def summarize(
    records: Iterable[NodeRecord],
    *,
    filter_offline: bool = False,
    filter_noremote: bool = False,
) -> NodeSummary:
    """Deduplicate, filter and total the records.

    Later records for an already seen host id replace the earlier one.
    Output is ordered by host id.

    Raises:
        NoUsableDataError: No records at all, or all of them filtered out
    """
    by_host: dict[int, NodeRecord] = {}
    for record in records:
        by_host[record.host_id] = record
    if not by_host:
        raise NoUsableDataError("No usable data received from the scheduler.")

    all_nodes = [by_host[host_id] for host_id in sorted(by_host)]
    shown = tuple(
        r
        for r in all_nodes
        if is_displayed(r, filter_offline=filter_offline, filter_noremote=filter_noremote)
    )
    if not shown:
        raise NoUsableDataError(
            f"All {len(all_nodes)} node(s) were excluded by the active filters."
        )
    return NodeSummary(nodes=shown, node_count=len(shown), core_count=count_cores(all_nodes))
