"""Render disk records as an HTML page with a sortable table."""

from __future__ import annotations

import html
from collections.abc import Sequence

from ..models.schema import DiskRecord, SkippedMount
from ..utils.format import format_percent, human_readable_size


# ── helpers ──────────────────────────────────────────────────────────────────

def _esc(v) -> str:
    return html.escape(str(v) if v is not None else "")


def _usage_color(pct: float) -> str:
    if pct > 95:
        return "#ef4444"
    if pct > 90:
        return "#f97316"
    if pct > 75:
        return "#facc15"
    return "#22c55e"


def _progress_bar(pct: float) -> str:
    return (
        f'<div class="bar"><div class="fill" '
        f'style="width:{min(max(pct, 0.0), 100.0):.1f}%;background:{_usage_color(pct)}"></div></div>'
        f' <span class="pct">{format_percent(pct)}</span>'
    )


def _cell(text: str, sort_value, numeric: bool = False) -> str:
    cls = ' class="num"' if numeric else ""
    return f'<td{cls} data-sort="{_esc(sort_value)}">{text}</td>'


# ── section renderers ─────────────────────────────────────────────────────────

_COLUMNS = [
    ("Device",  "text"),
    ("Mount",   "text"),
    ("Type",    "text"),
    ("Size",    "number"),
    ("Used",    "number"),
    ("Free",    "number"),
    ("Used %",  "number"),
    ("Free %",  "number"),
]


def _render_table(records: Sequence[DiskRecord]) -> str:
    if not records:
        return '<p class="empty">No partitions to show. Every mount was empty or filtered out.</p>'

    head = "".join(
        f'<th data-type="{kind}" tabindex="0">{_esc(label)}</th>' for label, kind in _COLUMNS
    )
    rows = [
        '<table id="disks" class="sortable">',
        f"<thead><tr>{head}</tr></thead>",
        "<tbody>",
    ]
    for r in records:
        rows.append(
            "<tr>"
            + _cell(_esc(r.device), r.device)
            + _cell(f"<code>{_esc(r.mountpoint)}</code>", r.mountpoint)
            + _cell(_esc(r.fstype), r.fstype)
            + _cell(_esc(r.human_size), r.size_bytes, numeric=True)
            + _cell(_esc(r.human_used), r.used_bytes, numeric=True)
            + _cell(_esc(r.human_free), r.free_bytes, numeric=True)
            + _cell(_progress_bar(r.used_percent), repr(r.used_percent), numeric=True)
            + _cell(_esc(format_percent(r.free_percent)), repr(r.free_percent), numeric=True)
            + "</tr>"
        )
    rows.append("</tbody></table>")
    return "\n".join(rows)


def _render_skipped(skipped: Sequence[SkippedMount]) -> str:
    # Only read failures; filter skips are routine.
    failures = [s for s in skipped if s.reason in ("usage_error", "timeout")]
    if not failures:
        return ""
    items = "".join(
        f"<li><code>{_esc(s.mountpoint)}</code> ({_esc(s.device)}): {_esc(s.detail or s.reason)}</li>"
        for s in failures
    )
    return f'<details class="skipped"><summary>{len(failures)} mount(s) could not be read</summary><ul>{items}</ul></details>'


def _render_errors(errors: Sequence[str]) -> str:
    if not errors:
        return ""
    items = "".join(f"<li>{_esc(e)}</li>" for e in errors)
    return f'<div class="errors"><strong>Collection errors</strong><ul>{items}</ul></div>'


# ── main builder ──────────────────────────────────────────────────────────────

def render_html(
    records: Sequence[DiskRecord],
    hostname: str = "",
    collected_at: str = "",
    skipped: Sequence[SkippedMount] = (),
    errors: Sequence[str] = (),
    static_prefix: str = "/static",
) -> str:
    """Return the full HTML page for *records*."""
    total = sum(r.size_bytes for r in records)
    used = sum(r.used_bytes for r in records)
    free = sum(r.free_bytes for r in records)

    cards = []
    for label, value in [
        ("Filesystems", len(records)),
        ("Total size",  human_readable_size(total)),
        ("Used",        human_readable_size(used)),
        ("Free",        human_readable_size(free)),
    ]:
        cards.append(
            f'<div class="card"><div class="label">{label}</div>'
            f'<div class="value">{_esc(value)}</div></div>'
        )

    title = f"Disk usage - {hostname}" if hostname else "Disk usage"

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width,initial-scale=1">
<title>{_esc(title)}</title>
<link rel="stylesheet" href="{_esc(static_prefix)}/style.css">
</head>
<body>
<div class="header">
<div><h1>{_esc(title)}</h1>
<div class="meta">{_esc(collected_at)}</div></div>
</div>
<div class="cards">{"".join(cards)}</div>
<main>
{_render_errors(errors)}
{_render_table(records)}
{_render_skipped(skipped)}
</main>
<script src="{_esc(static_prefix)}/sortable.js"></script>
</body>
</html>"""
