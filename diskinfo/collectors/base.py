"""Base classes for disk sources.

A disk source is the only place that talks to the operating system. The
collector depends on this two-method interface so it can be driven by a fake
in tests.
"""

from __future__ import annotations

import os
import re
from abc import ABC, abstractmethod

import psutil

from ..models.schema import Partition, UsageSample

DEFAULT_PROC = "/proc"

_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


class DiskSource(ABC):
    name: str = "base"

    @abstractmethod
    def partitions(self) -> list[Partition]:
        """Return every mounted partition, pseudo filesystems included."""
        ...

    @abstractmethod
    def usage(self, path: str) -> UsageSample:
        """Return total/used/free bytes for the filesystem holding *path*.

        Raises OSError (or a subclass) when the path cannot be queried.
        """
        ...


def _unescape(field: str) -> str:
    # The kernel writes space, tab, newline and backslash as \040, \011, \012, \134.
    return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), field)


def read_mounts(path: str) -> list[Partition]:
    """Parse a ``/proc/<pid>/mounts`` file into partitions, in file order."""
    parts = []
    with open(path, encoding="utf-8", errors="surrogateescape") as fh:
        for line in fh:
            fields = line.split()
            if len(fields) < 3:
                continue
            device, mountpoint, fstype = (_unescape(f) for f in fields[:3])
            parts.append(Partition(device=device, mountpoint=mountpoint, fstype=fstype))
    return parts


class PsutilDiskSource(DiskSource):
    """Disk source backed by psutil.

    With a *host_proc* other than ``/proc`` (a host's procfs bind-mounted
    into a container), partitions come from ``<host_proc>/1/mounts``: the
    mount table of the host's init process. psutil itself only reads the
    calling process's ``self/mounts``, which inside a container is the
    container's own namespace.
    """

    name = "psutil"

    def __init__(self, host_proc: str = DEFAULT_PROC):
        self.host_proc = host_proc

    @property
    def mounts_file(self) -> str | None:
        """Host mount table to read, or None to let psutil enumerate."""
        if os.path.normpath(self.host_proc or DEFAULT_PROC) == DEFAULT_PROC:
            return None
        return os.path.join(self.host_proc, "1", "mounts")

    def partitions(self) -> list[Partition]:
        mounts = self.mounts_file
        if mounts is not None:
            return read_mounts(mounts)
        return [
            Partition(device=p.device, mountpoint=p.mountpoint, fstype=p.fstype)
            for p in psutil.disk_partitions(all=True)
        ]

    def usage(self, path: str) -> UsageSample:
        u = psutil.disk_usage(path)
        return UsageSample(total=u.total, used=u.used, free=u.free)
