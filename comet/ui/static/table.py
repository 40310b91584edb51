#!/usr/bin/env python3
# comet/ui/static/table.py
from __future__ import annotations

from typing import List, Optional, Sequence

from comet.ui.utils import strip_ansi


def _column_widths(rows: Sequence[Sequence[str]]) -> List[int]:
    """Compute visual widths ignoring ANSI sequences."""
    widths: List[int] = []
    for row in rows:
        for col_idx, cell in enumerate(row):
            cell_length = len(strip_ansi(cell))
            if col_idx >= len(widths):
                widths.append(cell_length)
            else:
                widths[col_idx] = max(widths[col_idx], cell_length)
    return widths


def format_table(
    rows: Sequence[Sequence[object]],
    headers: Optional[Sequence[object]] = None,
    *,
    indent: int = 0,
    gap: int = 2,
) -> str:
    """
    Return a borderless, left-aligned table string.

    Multi-line cells are not split; callers pass one row per output line.
    """
    str_rows = [[str(cell) for cell in row] for row in rows]
    str_headers = [str(h) for h in headers] if headers is not None else None
    widths = _column_widths(([str_headers] if str_headers else []) + str_rows)

    def render_row(row: Sequence[str]) -> str:
        cells = []
        for i, cell in enumerate(row):
            if i == len(row) - 1:
                cells.append(cell)
            else:
                cells.append(cell + " " * (widths[i] - len(strip_ansi(cell)) + gap))
        return (" " * indent + "".join(cells)).rstrip()

    lines: List[str] = []
    if str_headers:
        lines.append(render_row(str_headers))
        lines.append(render_row(["-" * w for w in widths]))
    lines.extend(render_row(row) for row in str_rows)
    return "\n".join(lines)
