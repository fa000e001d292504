"""Grouping API Router.

Endpoints for grouping a batch of already-detected photos into moments and
chains, and for exporting the result as a group-info document.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from photo_grouping import (
    DEFAULT_CONFIG,
    FaceDetection,
    GroupingConfig,
    GroupRecord,
    MatchResult,
    PhotoRecord,
    build_export_document,
    group_photos,
)
from photo_grouping.export import photo_to_dict
from photo_grouping.models import normalize_timestamp

logger = logging.getLogger(__name__)

router = APIRouter(tags=["grouping"])

# Set at startup, falls back to grouping_config.py defaults
_config: GroupingConfig = DEFAULT_CONFIG


def init_grouping_router(config: GroupingConfig):
    """Set the default grouping thresholds. Called once during lifespan."""
    global _config
    _config = config


def get_grouping_config() -> GroupingConfig:
    return _config


# ==================== Request models ====================

class PhotoInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    path: str
    timestamp: Optional[datetime] = None
    has_face: bool = Field(False, alias="hasFace")
    embedding: Optional[list[float]] = None
    confidence: float = Field(0.0, ge=0.0, le=1.0)


class ConfigOverride(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cluster_gap_minutes: Optional[float] = Field(None, alias="clusterGapMinutes", ge=0)
    min_link_gap_days: Optional[float] = Field(None, alias="minLinkGapDays", ge=0)
    max_link_gap_days: Optional[float] = Field(None, alias="maxLinkGapDays", ge=0)
    similarity_threshold: Optional[float] = Field(None, alias="similarityThreshold", ge=-1, le=1)


class GroupRequest(BaseModel):
    photos: list[PhotoInput]
    config: Optional[ConfigOverride] = None


# ==================== Conversion ====================

def to_photo_record(photo: PhotoInput) -> PhotoRecord:
    """Convert a request photo. Raises ValueError on a face without embedding."""
    if photo.has_face:
        if not photo.embedding:
            raise ValueError(f"Photo {photo.path} has a face but no embedding")
        detection = FaceDetection.face(photo.embedding, photo.confidence)
    else:
        # An embedding without a face flag is ignored
        detection = FaceDetection.no_face()
    return PhotoRecord(
        path=photo.path,
        timestamp=normalize_timestamp(photo.timestamp),
        detection=detection,
    )


def resolve_config(override: Optional[ConfigOverride]) -> GroupingConfig:
    """Apply per-request overrides on top of the default thresholds."""
    base = get_grouping_config()
    if override is None:
        return base

    return GroupingConfig(
        cluster_gap=timedelta(minutes=override.cluster_gap_minutes)
        if override.cluster_gap_minutes is not None else base.cluster_gap,
        min_link_gap=timedelta(days=override.min_link_gap_days)
        if override.min_link_gap_days is not None else base.min_link_gap,
        max_link_gap=timedelta(days=override.max_link_gap_days)
        if override.max_link_gap_days is not None else base.max_link_gap,
        similarity_threshold=override.similarity_threshold
        if override.similarity_threshold is not None else base.similarity_threshold,
    )


def group_to_dict(group: GroupRecord) -> dict:
    next_group = None
    if group.next_group is not None:
        next_group = {
            "id": group.next_group.id,
            "hasFace": group.next_group.has_face,
            "photos": [photo_to_dict(p) for p in group.next_group.photos],
        }
    return {
        "id": group.id,
        "chainId": group.chain_id,
        "isFirstInChain": group.is_first_in_chain,
        "isUnmatched": group.is_unmatched,
        "hasFace": group.has_face,
        "similarity": group.similarity,
        "photos": [photo_to_dict(p) for p in group.photos],
        "nextGroup": next_group,
    }


def _run_grouping(request: GroupRequest) -> MatchResult:
    try:
        records = [to_photo_record(p) for p in request.photos]
        config = resolve_config(request.config)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return group_photos(records, config)


# ==================== Grouping endpoints ====================

@router.get("/photos/group/config")
async def get_config():
    """Effective grouping thresholds."""
    return get_grouping_config().to_dict()


@router.post("/photos/group")
async def group(request: GroupRequest):
    """Group photos into matched and unmatched moments."""
    result = _run_grouping(request)
    return {
        "matchedGroups": [group_to_dict(g) for g in result.matched_groups],
        "unmatchedGroups": [group_to_dict(g) for g in result.unmatched_groups],
        "unclustered": [photo_to_dict(p) for p in result.unclustered],
    }


@router.post("/photos/group/export")
async def export(request: GroupRequest):
    """Group photos and return the group-info export document."""
    result = _run_grouping(request)
    return build_export_document(result)
