"""Grouping pipeline: photos in, matched and unmatched groups out.

Pipeline:
1. Set aside photos without a timestamp
2. Cluster the rest into moments (consecutive shots within the cluster gap)
3. Keep moments with both face and non-face photos
4. Chain moments whose faces recur after a week to a year
5. Partition chains into matched and unmatched groups
"""
import logging
from typing import Optional, Sequence

from .chaining import build_chains
from .clustering import cluster_by_time, filter_mixed_clusters, split_by_timestamp
from .config import DEFAULT_CONFIG, GroupingConfig
from .models import MatchResult, PhotoRecord
from .partition import partition_chains

logger = logging.getLogger(__name__)


def group_photos(
    records: Sequence[PhotoRecord],
    config: Optional[GroupingConfig] = None,
) -> MatchResult:
    """
    Run the full grouping pipeline over a batch of photos.

    Inputs are not modified; every call builds a new result from scratch.

    Args:
        records: Photos in ingestion order
        config: Thresholds (defaults from grouping_config.py)

    Returns:
        MatchResult with matched groups, unmatched groups, and the photos
        that could not be clustered for lack of a timestamp

    Raises:
        TypeError: If records is None or contains something other than a
            PhotoRecord
    """
    if records is None:
        raise TypeError("records must be a sequence of PhotoRecord, not None")
    records = list(records)
    for record in records:
        if not isinstance(record, PhotoRecord):
            raise TypeError(f"Expected PhotoRecord, got {type(record).__name__}")

    config = config or DEFAULT_CONFIG

    timestamped, unclustered = split_by_timestamp(records)
    clusters = cluster_by_time(timestamped, gap=config.cluster_gap)
    mixed = filter_mixed_clusters(clusters)
    chains = build_chains(mixed, config)
    matched, unmatched = partition_chains(chains)

    logger.info(
        f"Grouped {len(timestamped)} photos into {len(clusters)} clusters "
        f"({len(mixed)} mixed): {len(matched)} matched groups, "
        f"{len(unmatched)} unmatched groups, {len(unclustered)} without timestamp"
    )

    return MatchResult(
        matched_groups=matched,
        unmatched_groups=unmatched,
        unclustered=unclustered,
        chains=chains,
    )
