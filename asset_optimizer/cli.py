"""Command-line entry point for the asset optimizer."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Sequence

from .config import (
    DEFAULT_ENCODER,
    DEFAULT_QUALITY,
    DEFAULT_THRESHOLD_BYTES,
    ENCODER_CHOICES,
    OptimizeConfig,
)
from .errors import OptimizerError, UsageError
from .optimizer import log_report, run_optimizer

logger = logging.getLogger("asset_optimizer.cli")

EXIT_OK = 0
EXIT_FAILURE = 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="optimize-assets",
        allow_abbrev=False,
        description=(
            "Convert oversized PNG/JPEG files under public/images to WebP, "
            "rewrite references across the project, and remove unreferenced originals."
        ),
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=DEFAULT_THRESHOLD_BYTES,
        metavar="BYTES",
        help=f"Only optimize images at least this large (default: {DEFAULT_THRESHOLD_BYTES})",
    )
    parser.add_argument(
        "--quality",
        type=int,
        default=DEFAULT_QUALITY,
        metavar="1-100",
        help=f"WebP quality (default: {DEFAULT_QUALITY})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report changes but don't write files",
    )
    parser.add_argument(
        "--keep-original",
        action="store_true",
        help="Don't delete originals after rewriting references",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Re-generate output even if it already exists",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Project root containing public/images (default: current directory)",
    )
    parser.add_argument(
        "--encoder",
        choices=ENCODER_CHOICES,
        default=DEFAULT_ENCODER,
        help=f"Backend used to write WebP files (default: {DEFAULT_ENCODER})",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = _build_parser()
    args = parser.parse_args(list(sys.argv[1:] if argv is None else argv))
    try:
        args.config = build_config(args)
    except UsageError as exc:
        parser.error(str(exc))
    return args


def build_config(args: argparse.Namespace) -> OptimizeConfig:
    threshold = args.threshold
    if isinstance(threshold, float) and threshold.is_integer():
        threshold = int(threshold)
    return OptimizeConfig(
        threshold_bytes=threshold,
        quality=args.quality,
        dry_run=args.dry_run,
        delete_original=not args.keep_original,
        force=args.force,
        project_root=(args.root or Path.cwd()).resolve(),
        encoder=args.encoder,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
        force=True,
    )
    config: OptimizeConfig = args.config

    start = time.perf_counter()
    try:
        report = run_optimizer(config)
    except OptimizerError as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE
    except Exception:  # pylint: disable=broad-except
        logger.exception("Unexpected error while optimizing assets")
        return EXIT_FAILURE

    if report.converted_count:
        log_report(report, config)
    logger.debug("Finished in %.2fs", time.perf_counter() - start)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
