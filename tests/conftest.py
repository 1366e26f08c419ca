from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import pytest

from asset_optimizer.config import OptimizeConfig
from asset_optimizer.encoders import ImageEncoder
from asset_optimizer.errors import TranscodeError

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8\xff\xe0"
FAKE_WEBP = b"RIFF\x00\x00\x00\x00WEBPVP8 " + b"\x00" * 1000


def write_sized(path: Path, size: int, signature: bytes = PNG_SIGNATURE) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(signature + b"\x00" * (size - len(signature)))
    return path


def write_text(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


class RecordingEncoder(ImageEncoder):
    """Writes a fixed fake WebP payload and remembers every call."""

    name = "recording"

    def __init__(self) -> None:
        self.calls: List[Tuple[Path, Path, int, int]] = []

    def encode(self, source: Path, destination: Path, max_side: int, quality: int) -> None:
        self.calls.append((source, destination, max_side, quality))
        destination.write_bytes(FAKE_WEBP)


class FailingEncoder(ImageEncoder):
    """Leaves a partial temp file behind and then fails."""

    name = "failing"

    def encode(self, source: Path, destination: Path, max_side: int, quality: int) -> None:
        destination.write_bytes(b"partial")
        raise TranscodeError(source, "exit status 1")


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "public" / "images").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def encoder() -> RecordingEncoder:
    return RecordingEncoder()


@pytest.fixture
def make_config(project: Path):
    def factory(**overrides) -> OptimizeConfig:
        overrides.setdefault("project_root", project)
        return OptimizeConfig(**overrides)

    return factory


def snapshot_tree(root: Path) -> dict:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }
