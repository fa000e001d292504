"""Data models for photo moment grouping."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import numpy as np


class FaceToggleError(ValueError):
    """Raised when a photo cannot be marked as containing a face."""


def normalize_timestamp(value: Optional[datetime]) -> Optional[datetime]:
    """Aware timestamps become naive UTC so all photos compare consistently."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True, eq=False)
class FaceDetection:
    """Result of running face detection on one photo.

    A photo either has a face with an embedding, or has no face and no
    embedding. ``confidence`` is the detection score, 0 when there is no face.
    """

    has_face: bool
    embedding: Optional[np.ndarray] = None
    confidence: float = 0.0

    def __post_init__(self):
        if self.has_face and self.embedding is None:
            raise ValueError("A face detection requires an embedding")
        if not self.has_face and self.embedding is not None:
            raise ValueError("A no-face detection cannot carry an embedding")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence {self.confidence} outside [0, 1]")

    @classmethod
    def no_face(cls) -> "FaceDetection":
        return cls(has_face=False, embedding=None, confidence=0.0)

    @classmethod
    def face(cls, embedding, confidence: float) -> "FaceDetection":
        return cls(
            has_face=True,
            embedding=np.asarray(embedding, dtype=np.float32),
            confidence=float(confidence),
        )


@dataclass(eq=False)
class PhotoRecord:
    """One input photo, normalized for grouping.

    ``detection`` is None while face detection is pending.
    """

    path: str
    timestamp: Optional[datetime] = None
    detection: Optional[FaceDetection] = None

    # Last detector result that carried an embedding, kept for toggling back
    _detected_face: Optional[FaceDetection] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if self.detection is not None and self.detection.has_face:
            self._detected_face = self.detection

    @property
    def capture_time(self) -> Optional[datetime]:
        """Timestamp used for ordering and gaps, naive UTC when it was aware."""
        return normalize_timestamp(self.timestamp)

    @property
    def is_pending(self) -> bool:
        return self.detection is None

    @property
    def has_face(self) -> Optional[bool]:
        if self.detection is None:
            return None
        return self.detection.has_face

    @property
    def embedding(self) -> Optional[np.ndarray]:
        if self.detection is None:
            return None
        return self.detection.embedding

    @property
    def confidence(self) -> float:
        if self.detection is None:
            return 0.0
        return self.detection.confidence

    def apply_detection(self, detection: FaceDetection) -> None:
        """Record the detector's result. Only allowed while pending."""
        if self.detection is not None:
            raise ValueError(f"Detection already applied to {self.path}")
        self.detection = detection
        if detection.has_face:
            self._detected_face = detection

    def toggle_face(self) -> bool:
        """Flip the face flag as a manual correction. Returns the new flag.

        Turning the flag off clears the embedding. Turning it back on restores
        the detector's embedding; a photo the detector never found a face in
        cannot be marked as a face photo.
        """
        if self.has_face:
            self.detection = FaceDetection.no_face()
            return False

        if self._detected_face is None:
            raise FaceToggleError(f"No face embedding available for {self.path}")
        self.detection = self._detected_face
        return True


@dataclass(frozen=True)
class Cluster:
    """A run of photos taken close together in time (one "moment")."""

    photos: tuple[PhotoRecord, ...]

    def __post_init__(self):
        if not self.photos:
            raise ValueError("A cluster must contain at least one photo")

    @property
    def has_face(self) -> bool:
        return any(p.has_face for p in self.photos)

    @property
    def has_non_face(self) -> bool:
        # Pending photos count as non-face
        return any(not p.has_face for p in self.photos)

    @property
    def is_mixed(self) -> bool:
        return self.has_face and self.has_non_face

    @property
    def face_photos(self) -> list[PhotoRecord]:
        return [p for p in self.photos if p.has_face]

    @property
    def start(self) -> datetime:
        return min(p.capture_time for p in self.photos)

    @property
    def end(self) -> datetime:
        return max(p.capture_time for p in self.photos)


@dataclass
class Chain:
    """Clusters linked by a recurring face, in chronological order.

    ``similarities[k]`` is the link score between ``clusters[k]`` and
    ``clusters[k + 1]``.
    """

    id: int
    clusters: list[Cluster]
    similarities: list[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.clusters)

    @property
    def last(self) -> Cluster:
        return self.clusters[-1]

    def append(self, cluster: Cluster, similarity: float) -> None:
        self.clusters.append(cluster)
        self.similarities.append(similarity)


@dataclass
class GroupSummary:
    """Forward reference from a group to the next group in its chain."""

    id: int
    photos: list[PhotoRecord]
    has_face: bool


@dataclass
class GroupRecord:
    """A cluster as presented to the caller, with its chain linkage."""

    id: int
    photos: list[PhotoRecord]
    has_face: bool
    chain_id: int
    is_first_in_chain: bool = True
    next_group: Optional[GroupSummary] = None
    similarity: Optional[float] = None  # Score of the link to next_group
    is_unmatched: bool = False


@dataclass
class MatchResult:
    """Output of one grouping run."""

    matched_groups: list[GroupRecord] = field(default_factory=list)
    unmatched_groups: list[GroupRecord] = field(default_factory=list)
    unclustered: list[PhotoRecord] = field(default_factory=list)  # No timestamp
    chains: list[Chain] = field(default_factory=list)

    @property
    def all_groups(self) -> list[GroupRecord]:
        return self.matched_groups + self.unmatched_groups
