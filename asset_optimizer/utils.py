"""Utility helpers for path normalization and size formatting."""

from __future__ import annotations

import os
from pathlib import Path


def to_posix(path: Path | str) -> str:
    """Return a path string with forward slashes regardless of platform."""
    return str(path).replace(os.sep, "/")


def format_bytes(size: float) -> str:
    """Render a byte count the way the report lines print it."""
    if size < 1024:
        return f"{int(size)}B"
    kb = size / 1024
    if kb < 1024:
        return f"{kb:.1f}KB"
    mb = kb / 1024
    if mb < 1024:
        return f"{mb:.2f}MB"
    return f"{mb / 1024:.2f}GB"
