"""
Greedy cluster-to-topic alignment.

Maps each induced cluster to at most one topic by token-score dot product.
A topic is held by whichever cluster scored highest against it so far; a
cluster that loses its topic is re-aligned against the remaining candidates.
The result depends on input order and is intentionally not an optimal
assignment.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from template_eval.constants import UNMAPPED_ID
from template_eval.domain.models import ScoredCluster

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Alignment:
    """Cluster id to topic id (or UNMAPPED_ID), plus topics nobody claimed."""

    mapping: Mapping[int, int] = field(default_factory=dict)
    unaligned_topics: tuple[int, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "mapping", MappingProxyType(dict(self.mapping)))

    def topic_for(self, cluster_id: int) -> int:
        return self.mapping.get(cluster_id, UNMAPPED_ID)

    def is_injective(self) -> bool:
        """True if no two mapped clusters share a topic."""
        mapped = [topic for topic in self.mapping.values() if topic != UNMAPPED_ID]
        return len(mapped) == len(set(mapped))

    def __len__(self) -> int:
        return len(self.mapping)


def align_clusters_to_topics(
    clusters: Iterable[ScoredCluster] | None,
    topics: Iterable[ScoredCluster] | None,
) -> Alignment:
    """
    Align clusters to topics with greedy displacement.

    Clusters are processed in input order. Each one takes the first topic (in
    topic order) whose dot product beats both the cluster's running best and
    the best score any earlier cluster achieved on that topic. A displaced
    cluster goes back on the work list and searches again under the raised
    thresholds.

    Args:
        clusters: Induced clusters, in priority order
        topics: Second induced set to align against

    Returns:
        Alignment covering every distinct cluster id
    """
    clusters = list(clusters or ())
    topics = list(topics or ())

    # First occurrence of a duplicated id is the one re-run on displacement
    by_id: dict[int, ScoredCluster] = {}
    for cluster in clusters:
        by_id.setdefault(cluster.id, cluster)

    mapping: dict[int, int] = {}
    best_scores: dict[int, float] = {}
    holders: dict[int, int] = {}

    for cluster in clusters:
        pending = deque([cluster])
        while pending:
            current = pending.popleft()
            best = 0.0
            best_topic = UNMAPPED_ID

            for topic in topics:
                score = current.dot(topic)
                if score > best and score > best_scores.get(topic.id, 0.0):
                    best = score
                    best_topic = topic.id

            mapping[current.id] = best_topic
            if best_topic == UNMAPPED_ID:
                continue

            best_scores[best_topic] = best
            previous = holders.get(best_topic)
            holders[best_topic] = current.id
            if previous is not None and previous != current.id:
                logger.debug(
                    f"Cluster {current.id} displaced cluster {previous} from topic {best_topic}"
                )
                pending.append(by_id[previous])

    unaligned = tuple(topic.id for topic in topics if topic.id not in holders)
    for topic_id in unaligned:
        logger.info(f"Topic {topic_id} not aligned with any cluster")

    return Alignment(mapping=mapping, unaligned_topics=unaligned)
