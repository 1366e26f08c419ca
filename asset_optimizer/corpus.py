"""Selection of the text files eligible for reference rewriting."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Tuple

logger = logging.getLogger("asset_optimizer.corpus")

SKIP_DIRS = {"node_modules", ".next", ".git", "dist", "build", "out"}
BINARY_EXTENSIONS = {
    ".png",
    ".jpg",
    ".jpeg",
    ".webp",
    ".avif",
    ".gif",
    ".mp4",
    ".mov",
    ".webm",
    ".zip",
    ".pdf",
}
TEXT_EXTENSIONS = {
    ".md",
    ".mdx",
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".mjs",
    ".cjs",
    ".json",
    ".yml",
    ".yaml",
    ".css",
    ".scss",
    ".txt",
}

TextCorpus = Tuple[Path, ...]


def is_text_file(path: Path) -> bool:
    suffix = path.suffix.lower()
    if suffix in BINARY_EXTENSIONS:
        return False
    return suffix in TEXT_EXTENSIONS


def build_text_corpus(project_root: Path) -> TextCorpus:
    """Walk the project once and snapshot every rewritable text file."""
    selected: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(project_root):
        dirnames[:] = sorted(name for name in dirnames if name not in SKIP_DIRS)
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if is_text_file(path) and path.is_file() and not path.is_symlink():
                selected.append(path)
    logger.debug("Indexed %d text file(s) under %s", len(selected), project_root)
    return tuple(selected)
