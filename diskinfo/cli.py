"""Command-line interface for diskinfo."""

from __future__ import annotations

import argparse
import logging
import sys

from . import __version__
from .collectors import PsutilDiskSource, collect_detailed
from .config import LOG_LEVELS, Settings, load_settings
from .exceptions import ConfigError
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


# ── argument parsing ──────────────────────────────────────────────────────────

def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="diskinfo",
        description="Serve mounted filesystem capacity and usage over HTTP.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  diskinfo\n"
            "  diskinfo -i tmpfs -i devtmpfs --port 9000\n"
            "  diskinfo --host-proc /host/proc --host-prefix /host\n"
            "  diskinfo --once --format table\n"
            "\n"
            "You can also use the DISKINFO_IGNORE_TYPES, DISKINFO_HOST_PROC,\n"
            "DISKINFO_HOST_PREFIX, DISKINFO_PORT and DISKINFO_CONFIG environment variables.\n"
        ),
    )
    parser.add_argument(
        "--ignore-type", "-i",
        dest="ignore_types",
        action="append",
        metavar="TYPE",
        help="File system type to ignore (can be specified multiple times)",
    )
    parser.add_argument(
        "--host-proc", "-p",
        metavar="PATH",
        help="Host /proc directory; partitions are read from its 1/mounts (default: /proc)",
    )
    parser.add_argument(
        "--host-prefix",
        metavar="PATH",
        help="Directory the host's root filesystem is mounted under",
    )
    parser.add_argument(
        "--config", "-c",
        metavar="PATH",
        help="YAML config file",
    )
    parser.add_argument("--host", metavar="ADDR", help="Listen address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, metavar="PORT", help="Listen port (default: 8080)")
    parser.add_argument(
        "--usage-timeout",
        type=float,
        metavar="SECONDS",
        help="Give up on a mount whose usage query takes longer than this",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Log level (default: info)",
    )
    parser.add_argument("--debug", action="store_true", default=False, help="Shortcut for --log-level debug")
    parser.add_argument(
        "--once",
        action="store_true",
        default=False,
        help="Print the current usage and exit instead of serving",
    )
    parser.add_argument(
        "--format",
        choices=["json", "table"],
        default="json",
        help="Output format for --once (default: json)",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"diskinfo {__version__}",
    )
    return parser.parse_args(argv)


def _overrides(args: argparse.Namespace) -> dict:
    return {
        "ignore_types":  args.ignore_types,
        "host_proc":     args.host_proc,
        "host_prefix":   args.host_prefix,
        "host":          args.host,
        "port":          args.port,
        "usage_timeout": args.usage_timeout,
        "log_level":     args.log_level,
    }


# ── modes ─────────────────────────────────────────────────────────────────────

def print_once(settings: Settings, fmt: str = "json") -> None:
    from .report.json_reporter import dump_json
    from .report.text_reporter import render_text

    result = collect_detailed(
        settings.ignore_types,
        source=PsutilDiskSource(host_proc=settings.host_proc),
        host_prefix=settings.host_prefix,
        timeout=settings.usage_timeout,
    )
    if fmt == "table":
        print(render_text(result.records))
    else:
        print(dump_json(result))


def serve(settings: Settings) -> None:
    """Run the HTTP server until SIGINT/SIGTERM."""
    import uvicorn

    from .server.main import create_app

    app = create_app(settings)
    logger.info("Starting server on %s:%d", settings.host, settings.port)
    # uvicorn traps SIGINT/SIGTERM and drains open requests before exiting.
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=settings.shutdown_timeout,
    )
    logger.info("Server exited")


# ── main entry point ──────────────────────────────────────────────────────────

def run(argv=None) -> None:
    args = parse_args(argv)

    try:
        settings = load_settings(args.config, _overrides(args))
    except ConfigError as exc:
        print(f"[error] {exc}", file=sys.stderr)
        sys.exit(2)

    setup_logging(settings.log_level, debug=args.debug)
    if args.debug:
        settings.log_level = "debug"

    logger.debug("Host /proc: %s", settings.host_proc)
    logger.debug("Ignoring filesystem types: %s", ", ".join(settings.ignore_types) or "(none)")

    if args.once:
        print_once(settings, args.format)
        return

    serve(settings)
