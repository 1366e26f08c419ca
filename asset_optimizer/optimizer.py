"""High-level orchestration: scan, transcode, rewrite, clean up."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional

from .config import OptimizeConfig
from .corpus import build_text_corpus
from .encoders import ImageEncoder, build_encoder
from .models import Candidate, RunReport, TranscodeResult
from .rewriter import build_replacement_pairs, cleanup_original, rewrite_references
from .scanner import RAW_MARKER, collect_candidates, require_directories
from .transcoder import replace_extension, transcode_candidate
from .utils import format_bytes, to_posix

logger = logging.getLogger("asset_optimizer")


def public_relative(path: Path, config: OptimizeConfig) -> str:
    return to_posix(os.path.relpath(path, config.public_dir))


def describe_candidate(
    old_rel: str,
    new_rel: str,
    candidate: Candidate,
    result: TranscodeResult,
    config: OptimizeConfig,
) -> str:
    prefix = "[dry-run] " if config.dry_run else ""
    return (
        f"{prefix}{old_rel} -> {new_rel}  "
        f"{format_bytes(candidate.size_bytes)} -> {format_bytes(result.output_bytes)} "
        f"(max {result.max_side}w)"
    )


def run_optimizer(
    config: OptimizeConfig,
    encoder: Optional[ImageEncoder] = None,
) -> RunReport:
    """Process every candidate in scan order and return the aggregate report."""
    require_directories(config)
    report = RunReport()

    candidates = collect_candidates(config)
    if not candidates:
        logger.info(
            "No images >= %s to optimize under public/images (excluding *%s*).",
            format_bytes(config.threshold_bytes),
            RAW_MARKER,
        )
        return report

    if encoder is None:
        encoder = build_encoder(config.encoder)
    corpus = build_text_corpus(config.project_root)
    outputs_seen: Dict[Path, Path] = {}

    for candidate in candidates:
        report.original_bytes += candidate.size_bytes

        old_rel = public_relative(candidate.path, config)
        new_rel = replace_extension(old_rel)

        result = transcode_candidate(candidate, config, encoder)
        previous = outputs_seen.get(result.output_path)
        if previous is not None:
            logger.warning(
                "%s and %s both map to %s; references to both now point at the same file",
                previous,
                candidate.path,
                result.output_path,
            )
        outputs_seen[result.output_path] = candidate.path
        report.optimized_bytes += result.output_bytes
        report.converted_count += 1

        replacements = build_replacement_pairs(old_rel, new_rel)
        outcome = rewrite_references(corpus, replacements, config)
        report.files_updated_count += len(outcome.changed_paths)

        decision = cleanup_original(candidate, replacements, corpus, outcome, config)
        if decision.deleted:
            report.deleted_count += 1
        elif decision.would_delete:
            report.would_delete.append(old_rel)
        elif decision.kept_reason:
            report.kept_originals.append((old_rel, decision.kept_reason))

        logger.info("%s", describe_candidate(old_rel, new_rel, candidate, result, config))

    return report


def log_report(report: RunReport, config: OptimizeConfig) -> None:
    """Emit the end-of-run summary."""
    logger.info("")
    logger.info("Optimized images: %d", report.converted_count)
    logger.info("Text files updated: %d", report.files_updated_count)
    logger.info("Original bytes (sum): %s", format_bytes(report.original_bytes))
    logger.info("Optimized bytes (sum): %s", format_bytes(report.optimized_bytes))
    logger.info("Estimated savings: %s", format_bytes(report.estimated_savings))
    if not config.delete_original:
        logger.info("Kept originals: --keep-original")
        return
    logger.info("Deleted originals: %d", report.deleted_count)
    if report.would_delete:
        logger.info("Would delete originals (dry-run): %d", len(report.would_delete))
        for rel in report.would_delete:
            logger.info("- %s", rel)
    if report.kept_originals:
        logger.info("Kept originals (still referenced):")
        for rel, reason in report.kept_originals:
            logger.info("- %s (%s)", rel, reason)
