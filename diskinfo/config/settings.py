"""Settings loader for diskinfo.

Resolution order (later sources override earlier ones):
  1. Built-in defaults (``_DEFAULTS``)
  2. YAML config file:
       --config <path> CLI flag (explicit_path argument), else
       DISKINFO_CONFIG environment variable, else
       /etc/diskinfo/config.yaml when it exists
  3. Environment variables:
       DISKINFO_IGNORE_TYPES   comma separated, e.g. "tmpfs,cdrom"
       DISKINFO_HOST_PROC      host /proc directory; mounts come from its 1/mounts
       DISKINFO_HOST_PREFIX    where the host's / is mounted, if anywhere
       DISKINFO_PORT           listen port
  4. CLI overrides passed in by the caller. ``ignore_types`` given on the
     command line are appended to the ones from the file/environment rather
     than replacing them.

Example config file::

    ignore_types: [tmpfs, devtmpfs, squashfs]
    server:
      host: 127.0.0.1
      port: 9000
    usage_timeout: 2.5
    log_level: warning
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from ..exceptions import ConfigError

logger = logging.getLogger(__name__)


# Environment variable names
_CONFIG_ENV       = "DISKINFO_CONFIG"
_IGNORE_TYPES_ENV = "DISKINFO_IGNORE_TYPES"
_HOST_PROC_ENV    = "DISKINFO_HOST_PROC"
_HOST_PREFIX_ENV  = "DISKINFO_HOST_PREFIX"
_PORT_ENV         = "DISKINFO_PORT"

_SYSTEM_CONFIG = Path("/etc/diskinfo/config.yaml")

_DEFAULTS: dict[str, Any] = {
    "ignore_types":  [],
    "host_proc":     "/proc",
    "host_prefix":   None,
    "usage_timeout": None,   # seconds; None = wait forever
    "log_level":     "info",
    "server": {
        "host": "0.0.0.0",
        "port": 8080,
        "shutdown_timeout": 5,
    },
}


@dataclass
class Settings:
    """Resolved runtime settings."""

    ignore_types: list[str] = field(default_factory=list)
    host_proc: str = "/proc"
    host_prefix: Optional[str] = None
    usage_timeout: Optional[float] = None
    log_level: str = "info"
    host: str = "0.0.0.0"
    port: int = 8080
    shutdown_timeout: int = 5


# ── YAML loading ──────────────────────────────────────────────────────────────

def _load_yaml(path: Path) -> dict:
    """Load a YAML file and return its top-level mapping."""
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a YAML mapping, got {type(data).__name__}: {path}")
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Return a new dict with override merged recursively into base."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _config_file(explicit_path: str | None, environ: Mapping[str, str]) -> Path | None:
    if explicit_path is not None:
        p = Path(explicit_path)
        if not p.exists():
            raise ConfigError(f"Config file not found: {p}")
        return p

    env_path = environ.get(_CONFIG_ENV)
    if env_path:
        p = Path(env_path)
        if p.exists():
            return p
        logger.warning("%s points to missing file: %s", _CONFIG_ENV, p)

    if _SYSTEM_CONFIG.exists():
        return _SYSTEM_CONFIG
    return None


# ── value coercion ────────────────────────────────────────────────────────────

def split_types(value: str) -> list[str]:
    """Split a comma separated type list, dropping blanks."""
    return [t.strip() for t in value.split(",") if t.strip()]


def _as_type_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return split_types(value)
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"ignore_types must be a list of strings, got {value!r}")


def _as_port(value: Any) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"port must be an integer, got {value!r}") from None
    if not 0 < port < 65536:
        raise ConfigError(f"port out of range: {port}")
    return port


def _as_timeout(value: Any) -> float | None:
    if value is None:
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"usage_timeout must be a number, got {value!r}") from None
    if timeout <= 0:
        raise ConfigError(f"usage_timeout must be positive, got {timeout}")
    return timeout


def _as_shutdown_timeout(value: Any) -> int:
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"shutdown_timeout must be an integer, got {value!r}") from None
    if seconds < 0:
        raise ConfigError(f"shutdown_timeout must not be negative, got {seconds}")
    return seconds


LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def _as_log_level(value: Any) -> str:
    level = str(value).lower()
    if level not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
    return level


def _env_overrides(environ: Mapping[str, str]) -> dict:
    raw: dict[str, Any] = {}
    if environ.get(_IGNORE_TYPES_ENV):
        raw["ignore_types"] = split_types(environ[_IGNORE_TYPES_ENV])
    if environ.get(_HOST_PROC_ENV):
        raw["host_proc"] = environ[_HOST_PROC_ENV]
    if environ.get(_HOST_PREFIX_ENV):
        raw["host_prefix"] = environ[_HOST_PREFIX_ENV]
    if environ.get(_PORT_ENV):
        raw["server"] = {"port": environ[_PORT_ENV]}
    return raw


# ── public API ────────────────────────────────────────────────────────────────

def load_settings(
    explicit_path: str | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load, validate, and return the resolved settings.

    Args:
        explicit_path: Path passed via ``--config``. When provided it must
            exist; otherwise the auto-resolution chain is used.
        overrides: Values from the command line. ``None`` entries are ignored.
            Recognised keys: ignore_types, host_proc, host_prefix,
            usage_timeout, log_level, host, port, shutdown_timeout.
        environ: Environment to read; defaults to ``os.environ``.

    Raises:
        ConfigError: If the file is missing, unreadable, not a mapping, or a
            value has the wrong type.
    """
    environ = os.environ if environ is None else environ

    config = dict(_DEFAULTS)
    path = _config_file(explicit_path, environ)
    if path is not None:
        logger.debug("Loading config from %s", path)
        config = _deep_merge(config, _load_yaml(path))
    config = _deep_merge(config, _env_overrides(environ))

    server = config.get("server") or {}
    if not isinstance(server, dict):
        raise ConfigError(f"server must be a mapping, got {server!r}")

    settings = Settings(
        ignore_types=_as_type_list(config.get("ignore_types")),
        host_proc=str(config.get("host_proc") or "/proc"),
        host_prefix=config.get("host_prefix") or None,
        usage_timeout=_as_timeout(config.get("usage_timeout")),
        log_level=_as_log_level(config.get("log_level") or "info"),
        host=str(server.get("host", "0.0.0.0")),
        port=_as_port(server.get("port", 8080)),
        shutdown_timeout=_as_shutdown_timeout(server.get("shutdown_timeout", 5)),
    )

    for key, val in (overrides or {}).items():
        if val is None:
            continue
        if key == "ignore_types":
            extra = [t for t in _as_type_list(val) if t not in settings.ignore_types]
            settings.ignore_types.extend(extra)
        elif key == "port":
            settings.port = _as_port(val)
        elif key == "usage_timeout":
            settings.usage_timeout = _as_timeout(val)
        elif key == "log_level":
            settings.log_level = _as_log_level(val)
        elif key == "shutdown_timeout":
            settings.shutdown_timeout = _as_shutdown_timeout(val)
        elif hasattr(settings, key):
            setattr(settings, key, val)
        else:
            raise ConfigError(f"Unknown setting: {key}")

    return settings
