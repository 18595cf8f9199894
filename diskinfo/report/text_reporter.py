"""Plain-text table output for terminals."""

from __future__ import annotations

from collections.abc import Sequence

from ..models.schema import DiskRecord
from ..utils.format import format_percent

_HEADERS = ("Device", "Mount", "Type", "Size", "Used", "Free", "Used %", "Free %")
# Right-align the numeric columns.
_NUMERIC = {3, 4, 5, 6, 7}


def render_text(records: Sequence[DiskRecord]) -> str:
    """Return an aligned, df-style table for *records*."""
    rows = [_HEADERS] + [
        (
            r.device,
            r.mountpoint,
            r.fstype,
            r.human_size,
            r.human_used,
            r.human_free,
            format_percent(r.used_percent),
            format_percent(r.free_percent),
        )
        for r in records
    ]
    widths = [max(len(row[i]) for row in rows) for i in range(len(_HEADERS))]

    lines = []
    for row in rows:
        cells = [
            cell.rjust(widths[i]) if i in _NUMERIC else cell.ljust(widths[i])
            for i, cell in enumerate(row)
        ]
        lines.append("  ".join(cells).rstrip())
    return "\n".join(lines)
