"""Literal reference rewriting and the deletion safety check."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import OptimizeConfig
from .models import STILL_REFERENCED, Candidate, ReplacementPair

logger = logging.getLogger("asset_optimizer.rewriter")

IMPORT_ALIAS_PREFIX = "@/public/"
PUBLIC_PATH_PREFIX = "public/"

_TEXT_ENCODING = "utf-8"
_TEXT_ERRORS = "surrogateescape"


@dataclass
class RewriteOutcome:
    """Files touched for one candidate, plus dry-run contents held in memory."""

    changed_paths: List[Path] = field(default_factory=list)
    pending: Dict[Path, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CleanupDecision:
    deleted: bool
    would_delete: bool
    kept_reason: Optional[str]


def build_replacement_pairs(old_public_rel: str, new_public_rel: str) -> Tuple[ReplacementPair, ...]:
    """The three literal forms under which a public asset may be referenced."""
    return (
        ReplacementPair(f"/{old_public_rel}", f"/{new_public_rel}"),
        ReplacementPair(
            f"{IMPORT_ALIAS_PREFIX}{old_public_rel}",
            f"{IMPORT_ALIAS_PREFIX}{new_public_rel}",
        ),
        ReplacementPair(
            f"{PUBLIC_PATH_PREFIX}{old_public_rel}",
            f"{PUBLIC_PATH_PREFIX}{new_public_rel}",
        ),
    )


def read_text(path: Path) -> str:
    with path.open("r", encoding=_TEXT_ENCODING, errors=_TEXT_ERRORS, newline="") as handle:
        return handle.read()


def write_text(path: Path, content: str) -> None:
    with path.open("w", encoding=_TEXT_ENCODING, errors=_TEXT_ERRORS, newline="") as handle:
        handle.write(content)


def apply_replacements(text: str, replacements: Iterable[ReplacementPair]) -> str:
    updated = text
    for pair in replacements:
        if not pair.old:
            continue
        updated = updated.replace(pair.old, pair.new)
    return updated


def rewrite_references(
    corpus: Sequence[Path],
    replacements: Sequence[ReplacementPair],
    config: OptimizeConfig,
) -> RewriteOutcome:
    """Substitute every old form in every corpus file; writes unless dry-run."""
    outcome = RewriteOutcome()
    for path in corpus:
        before = read_text(path)
        after = apply_replacements(before, replacements)
        if after == before:
            continue
        outcome.changed_paths.append(path)
        if config.dry_run:
            outcome.pending[path] = after
        else:
            write_text(path, after)
            logger.debug("Updated references in %s", path)
    return outcome


def find_remaining_reference(
    corpus: Sequence[Path],
    needles: Sequence[str],
    pending: Optional[Dict[Path, str]] = None,
) -> Optional[Path]:
    """Return the first corpus file still containing any needle, if one does."""
    pending = pending or {}
    for path in corpus:
        content = pending[path] if path in pending else read_text(path)
        for needle in needles:
            if needle and needle in content:
                return path
    return None


def cleanup_original(
    candidate: Candidate,
    replacements: Sequence[ReplacementPair],
    corpus: Sequence[Path],
    outcome: RewriteOutcome,
    config: OptimizeConfig,
) -> CleanupDecision:
    """Delete the original only when no old reference form survives the rewrite."""
    if not config.delete_original:
        return CleanupDecision(deleted=False, would_delete=False, kept_reason=None)

    needles = [pair.old for pair in replacements]
    holder = find_remaining_reference(corpus, needles, outcome.pending)
    if holder is not None:
        logger.debug("%s is still referenced from %s", candidate.path, holder)
        return CleanupDecision(deleted=False, would_delete=False, kept_reason=STILL_REFERENCED)

    if config.dry_run:
        return CleanupDecision(deleted=False, would_delete=True, kept_reason=None)

    candidate.path.unlink()
    return CleanupDecision(deleted=True, would_delete=False, kept_reason=None)
