"""Candidate discovery under the public image tree."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List

from filetype import guess

from .config import OptimizeConfig
from .errors import ConfigurationError
from .models import Candidate

logger = logging.getLogger("asset_optimizer.scanner")

RAW_MARKER = "_raw."
SOURCE_EXTENSIONS = {".png": "image/png", ".jpg": "image/jpeg", ".jpeg": "image/jpeg"}
_SNIFF_BYTES = 262


def signature_matches(path: Path, expected_mime: str) -> bool:
    """Compare the file header against the MIME type its extension claims."""
    with path.open("rb") as handle:
        header = handle.read(_SNIFF_BYTES)
    kind = guess(header)
    detected = kind.mime if kind else None
    if detected == expected_mime:
        return True
    logger.warning(
        "%s should be %s but its content looks like %s",
        path,
        expected_mime,
        detected or "an unknown format",
    )
    return False


def require_directories(config: OptimizeConfig) -> None:
    """Fail fast when the public tree the run operates on is absent."""
    if not config.public_dir.is_dir():
        raise ConfigurationError(f"Missing public dir: {config.public_dir}")
    if not config.images_dir.is_dir():
        raise ConfigurationError(f"Missing public/images dir: {config.images_dir}")


def walk_files(directory: Path) -> List[Path]:
    """Return every regular file below a directory, sorted per directory."""
    found: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.is_file():
                found.append(path)
    return found


def collect_candidates(config: OptimizeConfig) -> List[Candidate]:
    """List oversized PNG/JPEG images, largest first, skipping raw originals."""
    images_dir = config.images_dir
    if not images_dir.is_dir():
        raise ConfigurationError(f"Missing public/images dir: {images_dir}")

    candidates: List[Candidate] = []
    for path in walk_files(images_dir):
        if RAW_MARKER in path.name:
            logger.debug("Skipping raw original %s", path)
            continue
        expected = SOURCE_EXTENSIONS.get(path.suffix.lower())
        if expected is None:
            continue
        size = path.stat().st_size
        if size < config.threshold_bytes:
            continue
        signature_matches(path, expected)
        candidates.append(Candidate(path=path, size_bytes=size))

    candidates.sort(key=lambda item: (-item.size_bytes, str(item.path)))
    logger.debug("Found %d candidate(s) under %s", len(candidates), images_dir)
    return candidates
