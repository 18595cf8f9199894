"""Collect disk usage records for all mounted partitions."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable
from typing import Optional

from ..models.schema import CollectionResult, DiskRecord, SkippedMount, UsageSample
from ..utils.format import human_readable_size
from .base import DiskSource, PsutilDiskSource

logger = logging.getLogger(__name__)


class UsageTimeout(Exception):
    """A usage query gave no answer within the configured timeout."""


# (source name, path) of usage queries whose worker thread has not returned.
_pending: set[tuple[str, str]] = set()
_pending_lock = threading.Lock()


def usage_path(mountpoint: str, host_prefix: Optional[str] = None) -> str:
    """Return the path to query for *mountpoint*, re-rooted under *host_prefix*."""
    if not host_prefix:
        return mountpoint
    return os.path.join(host_prefix, mountpoint.lstrip("/"))


def compute_percentages(used: int, total: int) -> tuple[float, float]:
    """Return ``(used_percent, free_percent)``; the two always sum to 100.

    *total* must be non-zero. The values are left unrounded.
    """
    used_percent = used / total * 100
    return used_percent, 100 - used_percent


def build_record(device: str, mountpoint: str, fstype: str, sample: UsageSample) -> DiskRecord:
    used_percent, free_percent = compute_percentages(sample.used, sample.total)
    return DiskRecord(
        device=device,
        mountpoint=mountpoint,
        fstype=fstype,
        size_bytes=sample.total,
        used_bytes=sample.used,
        free_bytes=sample.free,
        human_size=human_readable_size(sample.total),
        human_used=human_readable_size(sample.used),
        human_free=human_readable_size(sample.free),
        used_percent=used_percent,
        free_percent=free_percent,
    )


def usage_with_timeout(source: DiskSource, path: str, timeout: float) -> UsageSample:
    """Run ``source.usage(path)`` on a daemon thread and wait at most *timeout* seconds.

    Python cannot interrupt a thread blocked in ``statvfs``, so a query that
    misses the deadline is left running. Its thread is a daemon and does not
    hold up interpreter exit. While it is still pending, further queries for
    the same path fail straight away instead of starting another thread.

    Raises:
        UsageTimeout: no answer in time, or an earlier query is still pending.
        Exception:    whatever ``source.usage`` raised, unchanged.
    """
    key = (source.name, path)
    with _pending_lock:
        if key in _pending:
            raise UsageTimeout("previous query is still pending")
        _pending.add(key)

    outcome: dict = {}

    def worker():
        try:
            outcome["sample"] = source.usage(path)
        except Exception as exc:  # noqa: BLE001
            outcome["error"] = exc
        finally:
            with _pending_lock:
                _pending.discard(key)

    thread = threading.Thread(target=worker, name=f"diskinfo-usage:{path}", daemon=True)
    thread.start()
    thread.join(timeout)
    if thread.is_alive():
        raise UsageTimeout(f"no answer within {timeout}s")
    if "error" in outcome:
        raise outcome["error"]
    return outcome["sample"]


def collect_detailed(
    ignore_types: Iterable[str] = (),
    source: Optional[DiskSource] = None,
    host_prefix: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CollectionResult:
    """Collect usage for every mounted partition and report what was skipped.

    Never raises for OS failures: a partition whose usage cannot be read is
    skipped, and a failed enumeration yields an empty result with the error
    recorded in ``errors``.

    Args:
        ignore_types: Filesystem types to leave out (exact, case-sensitive).
        source:       OS adapter. Defaults to :class:`PsutilDiskSource`.
        host_prefix:  Directory the host's filesystem is mounted under, if any.
        timeout:      Seconds to wait for each usage query. ``None`` waits
                      indefinitely.
    """
    source = source or PsutilDiskSource()
    ignored = frozenset(ignore_types)
    result = CollectionResult()

    try:
        partitions = source.partitions()
    except Exception as exc:  # noqa: BLE001
        logger.error("Error retrieving partitions from %s source: %s", source.name, exc)
        result.errors.append(f"partitions: {exc}")
        return result

    def skip(part, reason, detail=None):
        result.skipped.append(SkippedMount(
            device=part.device,
            mountpoint=part.mountpoint,
            fstype=part.fstype,
            reason=reason,
            detail=detail,
        ))

    for part in partitions:
        if not part.mountpoint:
            logger.info("Partition %s has no mountpoint, skipping", part.device)
            skip(part, "no_mountpoint")
            continue

        path = usage_path(part.mountpoint, host_prefix)
        try:
            if timeout is None:
                sample = source.usage(path)
            else:
                sample = usage_with_timeout(source, path, timeout)
        except UsageTimeout as exc:
            logger.warning("Usage query for %s timed out, skipping: %s", path, exc)
            skip(part, "timeout", str(exc))
            continue
        except Exception as exc:  # noqa: BLE001
            logger.warning("Error getting usage for %s from %s source: %s", path, source.name, exc)
            skip(part, "usage_error", str(exc))
            continue

        if sample.total == 0:
            logger.info("Partition %s has total size 0, skipping", part.mountpoint)
            skip(part, "zero_size")
            continue

        if part.fstype in ignored:
            logger.info(
                "Partition %s with type %s is in ignore list, skipping",
                part.mountpoint, part.fstype,
            )
            skip(part, "ignored_type")
            continue

        result.records.append(build_record(part.device, part.mountpoint, part.fstype, sample))

    logger.debug(
        "Collected %d record(s), skipped %d partition(s)",
        len(result.records), len(result.skipped),
    )
    return result


def collect(
    ignore_types: Iterable[str] = (),
    source: Optional[DiskSource] = None,
    host_prefix: Optional[str] = None,
    timeout: Optional[float] = None,
) -> list[DiskRecord]:
    """Return one :class:`DiskRecord` per usable partition, in OS order."""
    return collect_detailed(ignore_types, source, host_prefix, timeout).records
