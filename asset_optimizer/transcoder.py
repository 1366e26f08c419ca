"""Produce WebP siblings for candidate images."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from .config import OptimizeConfig
from .encoders import ImageEncoder
from .errors import TranscodeError
from .models import (
    STATUS_EXISTING,
    STATUS_SIMULATED,
    STATUS_WRITTEN,
    Candidate,
    TranscodeResult,
)
from .utils import to_posix

logger = logging.getLogger("asset_optimizer.transcoder")

TARGET_EXTENSION = ".webp"
TEMP_SUFFIX = ".tmp.webp"
DEFAULT_MAX_SIDE = 1600
CATEGORY_MAX_SIDE = (
    ("docs/", 1400),
    ("blog/", 1400),
    ("media/", 2000),
)

_SOURCE_SUFFIX = re.compile(r"\.(png|jpe?g)$", re.IGNORECASE)


def replace_extension(relative_posix: str) -> str:
    """Swap a trailing .png/.jpg/.jpeg for .webp."""
    return _SOURCE_SUFFIX.sub(TARGET_EXTENSION, relative_posix)


def output_path_for(source: Path) -> Path:
    return source.with_name(replace_extension(source.name))


def max_side_for(source: Path, images_dir: Path) -> int:
    """Pick the resolution cap from the asset's category folder."""
    relative = to_posix(os.path.relpath(source, images_dir))
    for prefix, max_side in CATEGORY_MAX_SIDE:
        if relative.startswith(prefix):
            return max_side
    return DEFAULT_MAX_SIDE


def transcode_candidate(
    candidate: Candidate,
    config: OptimizeConfig,
    encoder: ImageEncoder,
) -> TranscodeResult:
    """Write the WebP sibling unless it exists; honours dry-run and force."""
    output_path = output_path_for(candidate.path)
    max_side = max_side_for(candidate.path, config.images_dir)

    if output_path.exists() and not config.force:
        logger.debug("Reusing existing %s", output_path)
        return TranscodeResult(
            output_path=output_path,
            output_bytes=output_path.stat().st_size,
            max_side=max_side,
            status=STATUS_EXISTING,
        )

    if config.dry_run:
        return TranscodeResult(
            output_path=output_path,
            output_bytes=0,
            max_side=max_side,
            status=STATUS_SIMULATED,
        )

    temp_path = output_path.with_name(output_path.name + TEMP_SUFFIX)
    try:
        encoder.encode(candidate.path, temp_path, max_side, config.quality)
        if not temp_path.is_file():
            raise TranscodeError(candidate.path, f"{encoder.name} produced no output")
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise
    os.replace(temp_path, output_path)

    return TranscodeResult(
        output_path=output_path,
        output_bytes=output_path.stat().st_size,
        max_side=max_side,
        status=STATUS_WRITTEN,
    )
