"""IceQuery query command implementation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import click

from ..aggregate import NodeSummary, summarize
from ..discovery import discover
from ..ingest import IngestionLoop
from ..session import ConnectionProvider, ConnectionSession
from ..shaping import load_text_shaper
from ..stats import NodeRecord
from ..table import NODE_TABLE_HEADERS, node_table_rows, render_table_lines
from ..utils import pluralize

if TYPE_CHECKING:
    from ..cli_types import QueryArgs

logger = logging.getLogger("icequery")


def format_summary_line(summary: NodeSummary) -> str:
    return (
        f"{pluralize(summary.node_count, 'node')}, "
        f"{pluralize(summary.core_count, 'core')} total."
    )


def echo_color(mode: str) -> bool | None:
    """Map --color to click.echo's color argument (None: decide by TTY)."""
    if mode == "always":
        return True
    if mode == "never":
        return False
    return None


def style_table_lines(
    lines: Sequence[str],
    nodes: Sequence[NodeRecord],
    *,
    plain: bool,
) -> list[str]:
    """Colour rendered lines: bold header, red offline and yellow no-remote rows."""
    first_row = 1 if plain else 2
    styled = [click.style(lines[0], bold=True)]
    styled.extend(lines[1:first_row])
    for line, node in zip(lines[first_row:], nodes):
        if node.offline:
            styled.append(click.style(line, fg="red", dim=True))
        elif node.no_remote:
            styled.append(click.style(line, fg="yellow"))
        else:
            styled.append(line)
    return styled


def cmd_query(args: QueryArgs, *, provider: ConnectionProvider | None = None) -> NodeSummary:
    """Query the scheduler, then print the node table and totals."""
    provider = provider or discover
    wants_table = not (args.brief or args.no_table)
    shaper = load_text_shaper(
        need_ascii=args.ascii and wants_table,
        strict=not args.ascii_fallback,
    )

    with ConnectionSession(args, provider) as session:
        session.open()
        result = IngestionLoop(session.start_polling(), args).run()
    logger.debug(
        "Ingested %d message(s) in %d poll(s), %d record(s) accepted",
        result.messages,
        result.polls,
        len(result.records),
    )

    summary = summarize(
        result.records,
        filter_offline=args.no_offline,
        filter_noremote=args.no_noremote,
    )

    if args.brief:
        click.echo(str(summary.core_count))
        return summary

    color = echo_color(args.color)
    if wants_table:
        lines = render_table_lines(
            NODE_TABLE_HEADERS,
            node_table_rows(summary.nodes),
            plain=args.plain,
            ascii_only=args.ascii,
            shaper=shaper,
        )
        if color is not False:
            lines = style_table_lines(lines, summary.nodes, plain=args.plain)
        for line in lines:
            click.echo(line, color=color)
        click.echo("")
    click.echo(format_summary_line(summary))
    return summary
