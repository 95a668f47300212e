"""
Selection helpers for scored-cluster lists.

All functions return new lists, never mutate their inputs and treat None as
an empty list.
"""

from __future__ import annotations

from collections.abc import Iterable

from template_eval.domain.models import ScoredCluster, sort_key


def sort_desc_by_score(clusters: Iterable[ScoredCluster] | None) -> list[ScoredCluster]:
    """Stable sort by descending cluster score."""
    return sorted(clusters or (), key=sort_key)


def trim_first_n(clusters: Iterable[ScoredCluster] | None, n: int) -> list[ScoredCluster]:
    """First n clusters, in the given order."""
    if n <= 0:
        return []
    return list(clusters or ())[:n]


def trim_by_cutoff(
    clusters: Iterable[ScoredCluster] | None, cutoff: float
) -> list[ScoredCluster]:
    """Clusters scoring at least cutoff, in the given order."""
    return [cluster for cluster in clusters or () if cluster.score >= cutoff]


def sort_and_trim_first_n(
    clusters: Iterable[ScoredCluster] | None, n: int
) -> list[ScoredCluster]:
    return trim_first_n(sort_desc_by_score(clusters), n)


def sort_and_trim_cutoff(
    clusters: Iterable[ScoredCluster] | None, cutoff: float
) -> list[ScoredCluster]:
    return trim_by_cutoff(sort_desc_by_score(clusters), cutoff)


def exclude_seen(
    primary: Iterable[ScoredCluster] | None,
    secondary: Iterable[ScoredCluster] | None,
) -> list[ScoredCluster]:
    """
    Secondary clusters whose id is not in primary.

    Repeated ids within secondary are also dropped after their first
    occurrence.
    """
    seen = {cluster.id for cluster in primary or ()}
    kept: list[ScoredCluster] = []
    for cluster in secondary or ():
        if cluster.id not in seen:
            seen.add(cluster.id)
            kept.append(cluster)
    return kept


def union_excluding_seen(
    primary: Iterable[ScoredCluster] | None,
    secondary: Iterable[ScoredCluster] | None,
) -> list[ScoredCluster]:
    """Primary unchanged, followed by the secondary clusters it lacks."""
    primary = list(primary or ())
    return primary + exclude_seen(primary, secondary)


def collapse_duplicate_ids(clusters: Iterable[ScoredCluster] | None) -> list[ScoredCluster]:
    """
    One cluster per id.

    Keeps the position of the first occurrence, with its score raised to the
    maximum seen for that id.
    """
    first: dict[int, ScoredCluster] = {}
    best: dict[int, float] = {}
    for cluster in clusters or ():
        if cluster.id not in first:
            first[cluster.id] = cluster
            best[cluster.id] = cluster.score
        elif cluster.score > best[cluster.id]:
            best[cluster.id] = cluster.score

    collapsed = []
    for cluster_id, cluster in first.items():
        if best[cluster_id] != cluster.score:
            cluster = cluster.with_score(best[cluster_id])
        collapsed.append(cluster)
    return collapsed


def merge_all(
    first: Iterable[ScoredCluster] | None,
    second: Iterable[ScoredCluster] | None,
) -> list[ScoredCluster]:
    """
    Order-preserving union by id.

    All of first, then every cluster of second whose id is not in first.
    Unlike exclude_seen, repeats within second are kept.
    """
    first = list(first or ())
    ids = {cluster.id for cluster in first}
    return first + [cluster for cluster in second or () if cluster.id not in ids]
