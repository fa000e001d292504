"""Export grouping results as a JSON document.

Document layout:

    {"groups": [{"id", "hasFace", "hasMatches",
                 "photos": [{"path", "timestamp", "hasFace"}],
                 "matches": [{"groupId", "similarity", "photos": [...]}]}]}

``matches`` lists the neighbouring groups of the same chain (previous and
next) with the similarity of that link. Unmatched groups have no matches.
"""
import json
import logging
from collections import defaultdict
from pathlib import Path

from .models import GroupRecord, MatchResult, PhotoRecord

logger = logging.getLogger(__name__)


def photo_to_dict(photo: PhotoRecord) -> dict:
    return {
        "path": photo.path,
        "timestamp": photo.timestamp.isoformat() if photo.timestamp else None,
        "hasFace": bool(photo.has_face),
    }


def _match_entry(group: GroupRecord, similarity: float) -> dict:
    return {
        "groupId": group.id,
        "similarity": similarity,
        "photos": [photo_to_dict(p) for p in group.photos],
    }


def build_export_document(result: MatchResult, include_unmatched: bool = True) -> dict:
    """Build the export document for a grouping result."""
    by_chain: dict[int, list[GroupRecord]] = defaultdict(list)
    for group in result.matched_groups:
        by_chain[group.chain_id].append(group)

    entries = []
    for chain_groups in by_chain.values():
        for index, group in enumerate(chain_groups):
            matches = []
            if index > 0:
                previous = chain_groups[index - 1]
                matches.append(_match_entry(previous, previous.similarity))
            if index < len(chain_groups) - 1:
                matches.append(_match_entry(chain_groups[index + 1], group.similarity))

            entries.append({
                "id": group.id,
                "hasFace": group.has_face,
                "hasMatches": bool(matches),
                "photos": [photo_to_dict(p) for p in group.photos],
                "matches": matches,
            })

    if include_unmatched:
        for group in result.unmatched_groups:
            entries.append({
                "id": group.id,
                "hasFace": group.has_face,
                "hasMatches": False,
                "photos": [photo_to_dict(p) for p in group.photos],
                "matches": [],
            })

    return {"groups": entries}


def write_export(result: MatchResult, output_path: Path, include_unmatched: bool = True) -> int:
    """Write the export document to disk. Returns the number of groups written."""
    document = build_export_document(result, include_unmatched=include_unmatched)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(document, f, indent=2)

    logger.info(f"Wrote {len(document['groups'])} groups to {output_path}")
    return len(document["groups"])
