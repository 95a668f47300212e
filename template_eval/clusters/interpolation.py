"""Linear interpolation of two parallel scored-cluster collections."""

from __future__ import annotations

from collections.abc import Iterable

from template_eval.clusters.alignment import Alignment
from template_eval.domain.models import ScoredCluster


def interpolate(
    primary: Iterable[ScoredCluster] | None,
    secondary: Iterable[ScoredCluster] | None,
    weight: float,
    alignment: Alignment,
) -> list[ScoredCluster]:
    """
    Interpolate scores: weight * primary + (1 - weight) * secondary.

    A primary cluster whose aligned secondary is present takes the mixed
    score; otherwise it keeps only its weighted share. Secondary clusters no
    primary used are appended with their (1 - weight) share.

    When the secondary collection repeats an id, the last occurrence is the
    one a primary cluster mixes with. Repeats of an id no primary used are
    all appended.

    Args:
        primary: Clusters for one document
        secondary: Topics for the same document
        weight: Lambda in [0, 1]
        alignment: Cluster-to-topic alignment

    Returns:
        New clusters (inputs are never mutated), in no guaranteed order

    Raises:
        ValueError: If weight is outside [0, 1]
    """
    if not 0.0 <= weight <= 1.0:
        raise ValueError(f"Interpolation weight must be in [0, 1], got {weight}")

    secondary = list(secondary or ())
    secondary_by_id: dict[int, ScoredCluster] = {}
    for topic in secondary:
        secondary_by_id[topic.id] = topic

    merged: list[ScoredCluster] = []
    used: set[int] = set()

    for cluster in primary or ():
        topic = secondary_by_id.get(alignment.topic_for(cluster.id))
        if topic is not None:
            merged.append(cluster.with_score(weight * cluster.score + (1.0 - weight) * topic.score))
            used.add(topic.id)
        else:
            merged.append(cluster.with_score(weight * cluster.score))

    for topic in secondary:
        if topic.id not in used:
            merged.append(topic.with_score((1.0 - weight) * topic.score))

    return merged
