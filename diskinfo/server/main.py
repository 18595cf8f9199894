"""diskinfo web server — FastAPI application factory."""

from __future__ import annotations

import datetime
import logging
import socket
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles

from .. import __version__
from ..collectors import DiskSource, PsutilDiskSource, collect_detailed
from ..config import Settings
from ..models.schema import DisksResponse
from ..report.html_reporter import render_html

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent.parent / "web" / "static"


def _snapshot(request: Request) -> DisksResponse:
    """Collect fresh usage data for one request."""
    settings: Settings = request.app.state.settings
    result = collect_detailed(
        settings.ignore_types,
        source=request.app.state.source,
        host_prefix=settings.host_prefix,
        timeout=settings.usage_timeout,
    )
    return DisksResponse(
        hostname=socket.gethostname(),
        collected_at=datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds"),
        records=result.records,
        skipped=result.skipped,
        errors=result.errors,
    )


def create_app(settings: Settings | None = None, source: DiskSource | None = None) -> FastAPI:
    """Build the application.

    Handlers are plain ``def`` functions so FastAPI runs them in its
    threadpool; a slow mount stalls one request, not the event loop.
    """
    app = FastAPI(
        title="diskinfo",
        description="Mounted filesystem capacity and usage.",
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
    )
    app.state.settings = settings or Settings()
    app.state.source = source or PsutilDiskSource(host_proc=app.state.settings.host_proc)

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    # ── Health check ──────────────────────────────────────────────────────────

    @app.get("/health", tags=["meta"], summary="Health check")
    def health() -> dict:
        return {"status": "ok"}

    # ── API ───────────────────────────────────────────────────────────────────

    @app.get(
        "/api/disks",
        response_model=DisksResponse,
        tags=["disks"],
        summary="Disk usage records",
        description=(
            "Returns one record per mounted partition with non-zero size whose "
            "filesystem type is not ignored, in OS enumeration order. "
            "``skipped`` lists the partitions that were left out and why."
        ),
    )
    def disks(request: Request) -> DisksResponse:
        return _snapshot(request)

    # ── UI ────────────────────────────────────────────────────────────────────

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    def index(request: Request) -> HTMLResponse:
        snap = _snapshot(request)
        page = render_html(
            snap.records,
            hostname=snap.hostname,
            collected_at=snap.collected_at,
            skipped=snap.skipped,
            errors=snap.errors,
            static_prefix="/static",
        )
        return HTMLResponse(page)

    return app
