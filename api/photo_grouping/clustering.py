"""Time clustering and the mixed-cluster filter."""

import logging
from datetime import timedelta
from typing import Iterable, Optional

from .config import DEFAULT_CONFIG
from .models import Cluster, PhotoRecord

logger = logging.getLogger(__name__)


def split_by_timestamp(
    records: Iterable[PhotoRecord],
) -> tuple[list[PhotoRecord], list[PhotoRecord]]:
    """Separate photos that can be clustered from those missing a timestamp."""
    timestamped = []
    unclustered = []
    for record in records:
        if record.timestamp is None:
            unclustered.append(record)
        else:
            timestamped.append(record)
    return timestamped, unclustered


def cluster_by_time(
    records: Iterable[PhotoRecord],
    gap: Optional[timedelta] = None,
) -> list[Cluster]:
    """
    Group photos into moments of consecutive shots.

    Photos are sorted by capture time (stable, so equal timestamps keep their
    input order). Aware timestamps are compared as naive UTC. A photo joins the current cluster when it was taken within
    ``gap`` of the previous photo, otherwise it starts a new cluster. Photos
    without a timestamp are skipped.

    Args:
        records: Photos in ingestion order
        gap: Max gap between consecutive photos (default 10 minutes)

    Returns:
        Clusters in chronological order, covering every timestamped photo once
    """
    if gap is None:
        gap = DEFAULT_CONFIG.cluster_gap

    timestamped, skipped = split_by_timestamp(records)
    if skipped:
        logger.debug(f"Skipping {len(skipped)} photos without a timestamp")

    ordered = sorted(timestamped, key=lambda p: p.capture_time)

    clusters: list[Cluster] = []
    current: list[PhotoRecord] = []
    for photo in ordered:
        if current and photo.capture_time - current[-1].capture_time > gap:
            clusters.append(Cluster(photos=tuple(current)))
            current = []
        current.append(photo)

    if current:
        clusters.append(Cluster(photos=tuple(current)))

    return clusters


def filter_mixed_clusters(clusters: Iterable[Cluster]) -> list[Cluster]:
    """Keep only clusters with both face and non-face photos.

    Survivors are re-sorted by the timestamp of their first photo.
    """
    clusters = list(clusters)
    mixed = [c for c in clusters if c.is_mixed]

    dropped = len(clusters) - len(mixed)
    if dropped:
        logger.debug(f"Dropped {dropped} clusters without both face and non-face photos")

    return sorted(mixed, key=lambda c: c.photos[0].capture_time)
