"""Configuration objects and constants for the optimizer."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path

from .errors import UsageError

DEFAULT_THRESHOLD_BYTES = 500 * 1024
DEFAULT_QUALITY = 80
DEFAULT_ENCODER = "ffmpeg"
ENCODER_CHOICES = ("ffmpeg", "pillow")

PUBLIC_DIR_NAME = "public"
IMAGES_DIR_NAME = "images"


@dataclass(frozen=True)
class OptimizeConfig:
    """Settings for a single optimizer run; validated on construction."""

    threshold_bytes: float = DEFAULT_THRESHOLD_BYTES
    quality: int = DEFAULT_QUALITY
    dry_run: bool = False
    delete_original: bool = True
    force: bool = False
    project_root: Path = field(default_factory=Path.cwd)
    encoder: str = DEFAULT_ENCODER

    def __post_init__(self) -> None:
        threshold = self.threshold_bytes
        if (
            isinstance(threshold, bool)
            or not isinstance(threshold, (int, float))
            or not math.isfinite(threshold)
            or threshold <= 0
        ):
            raise UsageError(f"Invalid --threshold: {threshold!r} (expected a positive number of bytes)")
        quality = self.quality
        if isinstance(quality, bool) or not isinstance(quality, int) or not 1 <= quality <= 100:
            raise UsageError(f"Invalid --quality: {quality!r} (expected an integer from 1 to 100)")
        if self.encoder not in ENCODER_CHOICES:
            raise UsageError(
                f"Invalid --encoder: {self.encoder!r} (expected one of {', '.join(ENCODER_CHOICES)})"
            )

    @property
    def public_dir(self) -> Path:
        return self.project_root / PUBLIC_DIR_NAME

    @property
    def images_dir(self) -> Path:
        return self.public_dir / IMAGES_DIR_NAME
