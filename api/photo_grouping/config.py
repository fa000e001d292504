"""Tunable parameters for a grouping run."""

import os
from dataclasses import dataclass
from datetime import timedelta

import grouping_config


@dataclass
class GroupingConfig:
    """Configuration for time clustering and chain linking.

    Defaults come from grouping_config.py.
    """

    cluster_gap: timedelta = timedelta(minutes=grouping_config.CLUSTER_GAP_MINUTES)
    min_link_gap: timedelta = timedelta(days=grouping_config.MIN_LINK_GAP_DAYS)
    max_link_gap: timedelta = timedelta(days=grouping_config.MAX_LINK_GAP_DAYS)
    similarity_threshold: float = grouping_config.SIMILARITY_THRESHOLD

    def __post_init__(self):
        if self.cluster_gap < timedelta(0):
            raise ValueError(f"cluster_gap must not be negative: {self.cluster_gap}")
        if self.min_link_gap < timedelta(0):
            raise ValueError(f"min_link_gap must not be negative: {self.min_link_gap}")
        if self.max_link_gap < self.min_link_gap:
            raise ValueError(
                f"max_link_gap ({self.max_link_gap}) below min_link_gap ({self.min_link_gap})"
            )
        if not -1.0 <= self.similarity_threshold <= 1.0:
            raise ValueError(
                f"similarity_threshold must be within [-1, 1]: {self.similarity_threshold}"
            )

    @classmethod
    def from_env(cls) -> "GroupingConfig":
        return cls(
            cluster_gap=timedelta(minutes=float(
                os.environ.get("CLUSTER_GAP_MINUTES", grouping_config.CLUSTER_GAP_MINUTES)
            )),
            min_link_gap=timedelta(days=float(
                os.environ.get("MIN_LINK_GAP_DAYS", grouping_config.MIN_LINK_GAP_DAYS)
            )),
            max_link_gap=timedelta(days=float(
                os.environ.get("MAX_LINK_GAP_DAYS", grouping_config.MAX_LINK_GAP_DAYS)
            )),
            similarity_threshold=float(
                os.environ.get("SIMILARITY_THRESHOLD", grouping_config.SIMILARITY_THRESHOLD)
            ),
        )

    def to_dict(self) -> dict:
        """Thresholds in the units the HTTP API and CLI use."""
        return {
            "clusterGapMinutes": self.cluster_gap.total_seconds() / 60,
            "minLinkGapDays": self.min_link_gap.total_seconds() / 86400,
            "maxLinkGapDays": self.max_link_gap.total_seconds() / 86400,
            "similarityThreshold": self.similarity_threshold,
        }


DEFAULT_CONFIG = GroupingConfig()
