"""Greedy chaining of moments that share a recurring face."""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_CONFIG, GroupingConfig
from .models import Chain, Cluster
from .similarity import max_face_similarity

logger = logging.getLogger(__name__)


@dataclass
class LinkResult:
    """Result of testing whether one cluster continues another's chain."""

    linked: bool
    reason: str
    similarity: Optional[float] = None


def check_link(
    before: Cluster,
    after: Cluster,
    config: GroupingConfig = DEFAULT_CONFIG,
) -> LinkResult:
    """
    Test whether ``after`` can follow ``before`` in a chain.

    The gap runs from the last photo of ``before`` to the first photo of
    ``after``, counting every photo, and must lie within
    [min_link_gap, max_link_gap]. Similarity only looks at face photos: the
    best pair across the two clusters must reach the similarity threshold.
    """
    gap = after.start - before.end
    if gap < config.min_link_gap:
        return LinkResult(linked=False, reason="gap_too_short")
    if gap > config.max_link_gap:
        return LinkResult(linked=False, reason="gap_too_long")

    similarity = max_face_similarity(before, after)
    if similarity is None:
        return LinkResult(linked=False, reason="no_face_evidence")

    if not similarity >= config.similarity_threshold:
        return LinkResult(linked=False, reason="below_threshold", similarity=similarity)

    return LinkResult(linked=True, reason="linked", similarity=similarity)


def build_chains(
    clusters: list[Cluster],
    config: GroupingConfig = DEFAULT_CONFIG,
) -> list[Chain]:
    """
    Link chronologically ordered clusters into chains.

    Each unclaimed cluster starts a chain, then scans every later unclaimed
    cluster in order, appending the ones that link to the chain's current
    last cluster. A claimed cluster is never reconsidered, so an earlier
    chain keeps a cluster even if a later chain would have matched it better.

    Args:
        clusters: Filtered clusters sorted by start time
        config: Link thresholds

    Returns:
        Chains in order of their first cluster; every cluster appears in
        exactly one chain
    """
    claimed = [False] * len(clusters)
    chains: list[Chain] = []

    for i, cluster in enumerate(clusters):
        if claimed[i]:
            continue

        chain = Chain(id=len(chains) + 1, clusters=[cluster])
        claimed[i] = True

        for j in range(i + 1, len(clusters)):
            if claimed[j]:
                continue

            result = check_link(chain.last, clusters[j], config)
            if result.linked:
                chain.append(clusters[j], result.similarity)
                claimed[j] = True
            else:
                logger.debug(f"Cluster {j} not linked to chain {chain.id}: {result.reason}")

        chains.append(chain)

    return chains
