"""Split chains into matched and unmatched groups."""

from .models import Chain, GroupRecord, GroupSummary


def partition_chains(chains: list[Chain]) -> tuple[list[GroupRecord], list[GroupRecord]]:
    """
    Flatten chains into group records.

    Chains with two or more clusters become matched groups, one per cluster,
    numbered 1..M in chain order. Single-cluster chains become unmatched
    groups numbered from M+1, so ids never collide.

    Returns:
        (matched_groups, unmatched_groups)
    """
    multi = [c for c in chains if len(c) > 1]
    single = [c for c in chains if len(c) == 1]

    matched: list[GroupRecord] = []
    next_id = 1
    for chain in multi:
        first_id = next_id
        for index, cluster in enumerate(chain.clusters):
            group_id = first_id + index
            is_last = index == len(chain) - 1

            next_group = None
            similarity = None
            if not is_last:
                following = chain.clusters[index + 1]
                next_group = GroupSummary(
                    id=group_id + 1,
                    photos=list(following.photos),
                    has_face=following.has_face,
                )
                similarity = chain.similarities[index]

            matched.append(GroupRecord(
                id=group_id,
                photos=list(cluster.photos),
                has_face=cluster.has_face,
                chain_id=chain.id,
                is_first_in_chain=index == 0,
                next_group=next_group,
                similarity=similarity,
            ))
        next_id += len(chain)

    unmatched = []
    for offset, chain in enumerate(single):
        cluster = chain.clusters[0]
        unmatched.append(GroupRecord(
            id=next_id + offset,
            photos=list(cluster.photos),
            has_face=cluster.has_face,
            chain_id=chain.id,
            is_unmatched=True,
        ))

    return matched, unmatched
