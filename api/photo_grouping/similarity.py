"""Face embedding similarity."""

import logging
from typing import Optional

import numpy as np

from .models import Cluster

logger = logging.getLogger(__name__)


def cosine_similarity(a, b) -> float:
    """Cosine similarity between two embeddings.

    Returns 0.0 when no comparison is possible: a missing vector, vectors of
    different lengths, a zero vector, or non-finite values. Callers treat
    0.0 as "no match", not as orthogonality.
    """
    if a is None or b is None:
        return 0.0

    a = np.asarray(a, dtype=np.float64).ravel()
    b = np.asarray(b, dtype=np.float64).ravel()
    if a.shape != b.shape:
        logger.debug(f"Embedding length mismatch: {a.shape[0]} vs {b.shape[0]}")
        return 0.0

    if not (np.isfinite(a).all() and np.isfinite(b).all()):
        logger.debug("Embedding contains non-finite values")
        return 0.0

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    similarity = float(np.dot(a, b) / (norm_a * norm_b))
    if not np.isfinite(similarity):
        return 0.0
    return similarity


def max_face_similarity(before: Cluster, after: Cluster) -> Optional[float]:
    """Best cosine similarity over every pair of face photos in two clusters.

    None if either cluster has no face photo.
    """
    before_faces = before.face_photos
    after_faces = after.face_photos
    if not before_faces or not after_faces:
        return None

    return max(
        cosine_similarity(p.embedding, q.embedding)
        for p in before_faces
        for q in after_faces
    )
