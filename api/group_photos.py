#!/usr/bin/env python3
"""Group a folder of photos into moments and chains of recurring faces.

Usage:
    python group_photos.py PATH [PATH ...] [--output group-info.json]

The script will:
1. Read every photo, its EXIF capture time, and detect a face in it
2. Cluster photos taken within minutes of each other into moments
3. Chain moments in which the same face reappears a week to a year later
4. Write the group-info document and print a summary
"""
from dotenv import load_dotenv
load_dotenv()

import argparse
import logging
import sys
from dataclasses import replace
from datetime import timedelta
from pathlib import Path

from face_detector import InsightFaceDetector
from photo_grouping import GroupingConfig, group_photos, write_export
from photo_ingest import IngestProgress, PhotoIngester, find_photos, format_duration
from photo_review import ReviewFilter, face_stats, filter_photos, sort_by_uncertainty
from service_config import DetectionConfig, ServiceConfig

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def parse_args(args: list[str] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        args: List of arguments to parse. If None, uses sys.argv.
    """
    parser = argparse.ArgumentParser(
        description="Group photos into moments and chain recurring faces"
    )
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Photo files or directories",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Export file (default: DATA_DIR/group-info.json)",
    )
    parser.add_argument(
        "--recursive",
        action="store_true",
        help="Search directories recursively",
    )
    parser.add_argument(
        "--cluster-gap-minutes",
        type=float,
        help="Max minutes between photos of one moment",
    )
    parser.add_argument(
        "--similarity-threshold",
        type=float,
        help="Min face similarity to chain two moments",
    )
    parser.add_argument(
        "--review",
        choices=[mode.value for mode in ReviewFilter],
        help="List photos for manual review, least certain detections first",
    )
    parser.add_argument(
        "--review-limit",
        type=int,
        default=20,
        help="Max photos listed by --review (default: 20)",
    )
    parser.add_argument(
        "--device",
        choices=["cpu", "cuda"],
        help="Inference device (default: auto)",
    )
    return parser.parse_args(args)


def build_config(parsed: argparse.Namespace) -> GroupingConfig:
    """Environment thresholds with command line overrides applied."""
    config = GroupingConfig.from_env()
    if parsed.cluster_gap_minutes is not None:
        config = replace(config, cluster_gap=timedelta(minutes=parsed.cluster_gap_minutes))
    if parsed.similarity_threshold is not None:
        config = replace(config, similarity_threshold=parsed.similarity_threshold)
    return config


def log_progress(progress: IngestProgress):
    message = f"Processed {progress.processed}/{progress.total} ({progress.percent:.0f}%)"
    if progress.eta_seconds is not None:
        message += f", about {format_duration(progress.eta_seconds)} remaining"
    logger.info(message)


def print_review(ingested, mode: ReviewFilter, limit: int):
    entries = filter_photos(ingested, mode)
    print(f"\nReview ({mode.value}): {len(entries)} photos")
    if mode == ReviewFilter.FAILED:
        for failed in entries[:limit]:
            print(f"  {failed.path}: {failed.error}")
        return

    for photo in sort_by_uncertainty(entries)[:limit]:
        label = "face" if photo.has_face else "no face"
        print(f"  {photo.path}: {label} ({photo.confidence:.2f})")


def main(args: list[str] = None, detector=None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 if no photo could be read).
    """
    parsed = parse_args(args)

    try:
        config = build_config(parsed)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    paths = find_photos(parsed.paths, recursive=parsed.recursive)
    if not paths:
        logger.error("No photos found")
        return 1

    if detector is None:
        detection_config = DetectionConfig.from_env()
        detector = InsightFaceDetector(
            min_confidence=detection_config.min_face_confidence,
            device=parsed.device or detection_config.device,
            models_dir=detection_config.models_dir,
        )
    else:
        detection_config = DetectionConfig()

    base_dir = parsed.paths[0] if len(parsed.paths) == 1 and parsed.paths[0].is_dir() else None
    ingester = PhotoIngester(
        detector,
        thumbnail_size=detection_config.thumbnail_size,
        on_progress=log_progress,
    )
    ingested = ingester.ingest(paths, base_dir=base_dir)
    if not ingested.photos:
        logger.error("None of the photos could be read")
        return 1

    result = group_photos(ingested.photos, config)

    output = parsed.output or ServiceConfig.from_env().export_path
    write_export(result, output)

    stats = face_stats(ingested)
    print(f"\nPhotos: {stats.total} ({stats.with_face} with faces, "
          f"{stats.without_face} without, {stats.failed} failed)")
    print(f"Without capture time: {len(result.unclustered)}")
    print(f"Chains: {sum(1 for c in result.chains if len(c) > 1)} "
          f"({len(result.matched_groups)} matched groups)")
    print(f"Unmatched groups: {len(result.unmatched_groups)}")
    print(f"Export: {output}")

    if parsed.review:
        print_review(ingested, ReviewFilter(parsed.review), parsed.review_limit)
    return 0


if __name__ == "__main__":
    sys.exit(main())
