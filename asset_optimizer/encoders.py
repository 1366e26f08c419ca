"""Image encoders that turn a raster source into a WebP file."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from PIL import Image

from .errors import TranscodeError, UsageError

logger = logging.getLogger("asset_optimizer.encoders")


class ImageEncoder:
    """Write ``source`` to ``destination`` as WebP, larger side capped at ``max_side``."""

    name = "encoder"

    def encode(self, source: Path, destination: Path, max_side: int, quality: int) -> None:
        raise NotImplementedError


def build_scale_filter(max_side: int) -> str:
    """ffmpeg filter that caps the larger dimension without upscaling."""
    return (
        f"scale='if(gte(iw,ih),min(iw,{max_side}),-2)'"
        f":'if(gte(iw,ih),-2,min(ih,{max_side}))'"
    )


class FfmpegEncoder(ImageEncoder):
    """Shell out to ffmpeg's libwebp encoder."""

    name = "ffmpeg"

    def __init__(self, executable: str = "ffmpeg") -> None:
        self.executable = executable

    def build_command(self, source: Path, destination: Path, max_side: int, quality: int) -> List[str]:
        return [
            self.executable,
            "-hide_banner",
            "-loglevel",
            "error",
            "-y",
            "-i",
            str(source),
            "-vf",
            build_scale_filter(max_side),
            "-f",
            "webp",
            "-c:v",
            "libwebp",
            "-q:v",
            str(quality),
            "-pix_fmt",
            "yuva420p",
            str(destination),
        ]

    def encode(self, source: Path, destination: Path, max_side: int, quality: int) -> None:
        command = self.build_command(source, destination, max_side, quality)
        logger.debug("Running %s", " ".join(command))
        try:
            completed = subprocess.run(command, capture_output=True, text=True, check=False)
        except FileNotFoundError as exc:
            raise TranscodeError(source, f"{self.executable} executable not found") from exc
        if completed.returncode != 0:
            detail = (completed.stderr or "").strip()
            message = f"{self.executable} exited with status {completed.returncode}"
            if detail:
                message = f"{message}: {detail}"
            raise TranscodeError(source, message)


class PillowEncoder(ImageEncoder):
    """Encode in-process with Pillow's WebP plugin."""

    name = "pillow"

    def __init__(self, method: int = 6) -> None:
        self.method = method

    def encode(self, source: Path, destination: Path, max_side: int, quality: int) -> None:
        try:
            with Image.open(source) as raw_image:
                has_alpha = "A" in raw_image.getbands() or "transparency" in raw_image.info
                image = raw_image.convert("RGBA" if has_alpha else "RGB")
                width, height = image.size
                longest_edge = max(width, height)
                if longest_edge > max_side:
                    scale = max_side / float(longest_edge)
                    new_size = (
                        max(1, int(round(width * scale))),
                        max(1, int(round(height * scale))),
                    )
                    image = image.resize(new_size, Image.Resampling.LANCZOS)
                image.save(destination, format="WEBP", quality=quality, method=self.method)
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise TranscodeError(source, str(exc)) from exc


def build_encoder(name: str, executable: Optional[str] = None) -> ImageEncoder:
    """Instantiate the encoder selected on the command line."""
    if name == "ffmpeg":
        resolved = executable or shutil.which("ffmpeg") or "ffmpeg"
        return FfmpegEncoder(resolved)
    if name == "pillow":
        return PillowEncoder()
    raise UsageError(f"Unknown encoder: {name}")
