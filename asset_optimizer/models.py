"""Data models used throughout the optimizer pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

STILL_REFERENCED = "still referenced"

STATUS_WRITTEN = "written"
STATUS_EXISTING = "existing"
STATUS_SIMULATED = "simulated"


@dataclass(frozen=True)
class Candidate:
    """Original raster asset selected for transcoding."""

    path: Path
    size_bytes: int


@dataclass(frozen=True)
class ReplacementPair:
    """One literal reference form of an asset, old path to new path."""

    old: str
    new: str


@dataclass(frozen=True)
class TranscodeResult:
    """Outcome of transcoding a single candidate."""

    output_path: Path
    output_bytes: int
    max_side: int
    status: str

    @property
    def wrote(self) -> bool:
        return self.status == STATUS_WRITTEN


@dataclass
class RunReport:
    """Aggregated counters for a whole run."""

    converted_count: int = 0
    files_updated_count: int = 0
    original_bytes: int = 0
    optimized_bytes: int = 0
    deleted_count: int = 0
    kept_originals: List[Tuple[str, str]] = field(default_factory=list)
    would_delete: List[str] = field(default_factory=list)

    @property
    def estimated_savings(self) -> int:
        return max(0, self.original_bytes - self.optimized_bytes)
