"""Photo moment grouping module."""

from .models import (
    FaceDetection,
    FaceToggleError,
    PhotoRecord,
    Cluster,
    Chain,
    GroupSummary,
    GroupRecord,
    MatchResult,
)
from .config import GroupingConfig, DEFAULT_CONFIG
from .similarity import cosine_similarity, max_face_similarity
from .clustering import cluster_by_time, filter_mixed_clusters, split_by_timestamp
from .chaining import LinkResult, check_link, build_chains
from .partition import partition_chains
from .pipeline import group_photos
from .export import build_export_document, write_export

__all__ = [
    # Models
    "FaceDetection",
    "FaceToggleError",
    "PhotoRecord",
    "Cluster",
    "Chain",
    "GroupSummary",
    "GroupRecord",
    "MatchResult",
    # Config
    "GroupingConfig",
    "DEFAULT_CONFIG",
    # Similarity
    "cosine_similarity",
    "max_face_similarity",
    # Clustering
    "cluster_by_time",
    "filter_mixed_clusters",
    "split_by_timestamp",
    # Chaining
    "LinkResult",
    "check_link",
    "build_chains",
    # Partition
    "partition_chains",
    # Pipeline
    "group_photos",
    # Export
    "build_export_document",
    "write_export",
]
