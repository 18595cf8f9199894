"""Pydantic v2 schema definitions for diskinfo."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


# ── OS inputs ─────────────────────────────────────────────────────────────────

class Partition(BaseModel):
    device: str = ""
    mountpoint: str = ""
    fstype: str = ""


class UsageSample(BaseModel):
    total: int = Field(0, ge=0)
    used: int = Field(0, ge=0)
    free: int = Field(0, ge=0)


# ── Collector output ──────────────────────────────────────────────────────────

class DiskRecord(BaseModel):
    device: str
    mountpoint: str
    fstype: str
    size_bytes: int
    used_bytes: int
    free_bytes: int
    human_size: str
    human_used: str
    human_free: str
    used_percent: float
    free_percent: float


SkipReason = Literal[
    "no_mountpoint",
    "usage_error",
    "timeout",
    "zero_size",
    "ignored_type",
]


class SkippedMount(BaseModel):
    device: str = ""
    mountpoint: str = ""
    fstype: str = ""
    reason: SkipReason
    detail: Optional[str] = None


class CollectionResult(BaseModel):
    """Records plus everything that was left out, and why."""

    records: list[DiskRecord] = []
    skipped: list[SkippedMount] = []
    errors: list[str] = []


# ── API ───────────────────────────────────────────────────────────────────────

class DisksResponse(CollectionResult):
    hostname: str
    collected_at: str
