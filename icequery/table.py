"""Column-aligned text table rendering."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from .constants import ASCII_GLYPHS, PLAIN_SEPARATOR, RICH_GLYPHS
from .shaping import TextShaper, TextShaping
from .stats import NodeRecord


class Alignment(Enum):
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


@dataclass(frozen=True)
class TableHeader:
    """Per-column metadata."""

    title: str
    alignment: Alignment = Alignment.LEFT
    shaping: TextShaping = TextShaping.PLAIN_WIDTH


NODE_TABLE_HEADERS = (
    TableHeader("Node#", Alignment.RIGHT),
    TableHeader("Offline?", Alignment.CENTER),
    TableHeader("No-remote?", Alignment.CENTER),
    TableHeader("Name", Alignment.LEFT, TextShaping.CUSTOM_ENCODING),
    TableHeader("IP", Alignment.LEFT),
    TableHeader("Cores", Alignment.RIGHT),
    TableHeader("Platform", Alignment.LEFT, TextShaping.CUSTOM_ENCODING),
)


def yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def node_table_rows(records: Iterable[NodeRecord]) -> list[str]:
    """Flatten records into cells matching NODE_TABLE_HEADERS."""
    rows: list[str] = []
    for r in records:
        rows.extend(
            [
                str(r.host_id),
                yes_no(r.offline),
                yes_no(r.no_remote),
                r.name,
                r.ip,
                str(r.max_jobs),
                r.platform,
            ]
        )
    return rows


def pad_cell(text: str, text_width: int, width: int, alignment: Alignment) -> str:
    """Pad text occupying text_width cells out to width cells.

    Centered text puts the odd extra space after the text.
    """
    deficit = max(width - text_width, 0)
    if alignment is Alignment.RIGHT:
        return " " * deficit + text
    if alignment is Alignment.CENTER:
        before = deficit // 2
        return " " * before + text + " " * (deficit - before)
    return text + " " * deficit


def shape_cell(
    text: str,
    header: TableHeader,
    *,
    shaper: TextShaper,
    ascii_only: bool,
) -> tuple[str, int]:
    """Return (display text, display width) for one cell."""
    if ascii_only and header.shaping is TextShaping.CUSTOM_ENCODING:
        folded = shaper.transliterate(text)
        if folded is not None:
            text = folded
    return text, shaper.display_width(text, header.shaping)


def compute_widths(
    headers: Sequence[TableHeader],
    measured: Sequence[int],
    *,
    plain: bool,
) -> list[int]:
    """Compute final column widths over all cells, header row included."""
    ncols = len(headers)
    margins = [0] * ncols
    if not plain:
        margins[0] += 1
        margins[-1] += 1
    widths = [0] * ncols
    for idx, cell_width in enumerate(measured):
        col = idx % ncols
        widths[col] = max(widths[col], cell_width + margins[col])
    return widths


def render_table_lines(
    headers: Sequence[TableHeader],
    rows: Sequence[str],
    *,
    plain: bool = False,
    ascii_only: bool = False,
    shaper: TextShaper | None = None,
) -> list[str]:
    """Lay out a table as a list of lines.

    Args:
        headers: Column metadata; defines the column count
        rows: Flat cell list, row-major, a multiple of len(headers) long
        plain: Single-space separators, no margins, no header rule
        ascii_only: Transliterate shaped columns and use 7-bit glyphs
        shaper: Width/transliteration provider (default: measuring only)

    Returns:
        Header line, then the header rule unless plain, then one line per row
    """
    ncols = len(headers)
    if ncols == 0:
        return []
    if len(rows) % ncols:
        raise ValueError(f"{len(rows)} cells do not fill rows of {ncols} columns")
    shaper = shaper or TextShaper()

    cells = [h.title for h in headers] + list(rows)
    shaped = [
        shape_cell(text, headers[idx % ncols], shaper=shaper, ascii_only=ascii_only)
        for idx, text in enumerate(cells)
    ]
    widths = compute_widths(headers, [w for _, w in shaped], plain=plain)

    if plain:
        col_sep = PLAIN_SEPARATOR
    else:
        col_sep, hline, cross = ASCII_GLYPHS if ascii_only else RICH_GLYPHS

    lines = []
    for start in range(0, len(shaped), ncols):
        parts = [
            pad_cell(text, text_width, widths[col], headers[col].alignment)
            for col, (text, text_width) in enumerate(shaped[start : start + ncols])
        ]
        lines.append(col_sep.join(parts))
        if start == 0 and not plain:
            lines.append(cross.join(hline * w for w in widths))
    return lines


def render_table(
    headers: Sequence[TableHeader],
    rows: Sequence[str],
    *,
    plain: bool = False,
    ascii_only: bool = False,
    shaper: TextShaper | None = None,
) -> str:
    """Render a table to a single newline-joined text block."""
    return "\n".join(
        render_table_lines(headers, rows, plain=plain, ascii_only=ascii_only, shaper=shaper)
    )
