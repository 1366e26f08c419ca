"""Exception types raised by the optimizer pipeline."""

from __future__ import annotations

from pathlib import Path


class OptimizerError(RuntimeError):
    """Base class for failures that abort an optimizer run."""


class UsageError(OptimizerError, ValueError):
    """Raised when an option value is out of range or malformed."""


class ConfigurationError(OptimizerError):
    """Raised when a required directory is missing."""


class TranscodeError(OptimizerError):
    """Raised when the encoder fails to produce an artifact."""

    def __init__(self, source: Path, detail: str = "") -> None:
        self.source = source
        message = f"Transcoding failed for {source}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
