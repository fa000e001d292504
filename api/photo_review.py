"""Helpers for reviewing detection results before grouping."""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

import grouping_config
from photo_grouping.models import PhotoRecord
from photo_ingest import IngestResult


class ReviewFilter(str, Enum):
    ALL = "all"
    FACE = "face"
    NO_FACE = "noFace"
    FAILED = "failed"


@dataclass
class FaceStats:
    total: int
    with_face: int
    without_face: int
    failed: int


def filter_photos(result: IngestResult, mode: ReviewFilter = ReviewFilter.ALL) -> list:
    """Photos matching a review filter. FAILED returns FailedPhoto entries."""
    mode = ReviewFilter(mode)
    if mode == ReviewFilter.FACE:
        return [p for p in result.photos if p.has_face]
    if mode == ReviewFilter.NO_FACE:
        return [p for p in result.photos if not p.has_face]
    if mode == ReviewFilter.FAILED:
        return list(result.failed)
    return list(result.photos)


def sort_by_uncertainty(photos: Iterable[PhotoRecord]) -> list[PhotoRecord]:
    """Least certain detections first (confidence closest to the pivot)."""
    return sorted(photos, key=lambda p: abs(p.confidence - grouping_config.UNCERTAINTY_PIVOT))


def face_stats(result: IngestResult) -> FaceStats:
    with_face = sum(1 for p in result.photos if p.has_face)
    return FaceStats(
        total=result.total,
        with_face=with_face,
        without_face=len(result.photos) - with_face,
        failed=len(result.failed),
    )
