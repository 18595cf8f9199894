from .base import DiskSource, PsutilDiskSource, read_mounts
from .disk_usage import collect, collect_detailed

__all__ = ["DiskSource", "PsutilDiskSource", "collect", "collect_detailed", "read_mounts"]
