"""
Unit tests for template_eval.clusters.alignment module.
"""

import logging

import pytest

from template_eval.clusters.alignment import Alignment, align_clusters_to_topics
from template_eval.constants import UNMAPPED_ID
from tests.conftest import make_cluster


class TestAlignClustersToTopics:
    """Test the greedy displacement aligner."""

    def test_single_best_topic(self):
        clusters = [make_cluster(1, a=1.0)]
        topics = [make_cluster(10, a=2.0), make_cluster(20, b=5.0)]
        alignment = align_clusters_to_topics(clusters, topics)
        assert alignment.topic_for(1) == 10
        assert alignment.unaligned_topics == (20,)

    def test_displaced_cluster_realigns(self):
        clusters = [make_cluster(1, a=1.0), make_cluster(2, a=2.0)]
        topics = [make_cluster(10, a=1.0), make_cluster(20, a=0.5, b=1.0)]
        alignment = align_clusters_to_topics(clusters, topics)
        # Cluster 2 outscores cluster 1 on topic 10; cluster 1 falls back to topic 20
        assert alignment.topic_for(2) == 10
        assert alignment.topic_for(1) == 20
        assert alignment.is_injective()

    def test_displaced_cluster_can_end_unmapped(self):
        clusters = [make_cluster(1, a=1.0), make_cluster(2, a=2.0)]
        topics = [make_cluster(10, a=1.0)]
        alignment = align_clusters_to_topics(clusters, topics)
        assert alignment.topic_for(2) == 10
        assert alignment.topic_for(1) == UNMAPPED_ID

    def test_first_strictly_better_topic_wins_ties(self):
        clusters = [make_cluster(1, a=1.0, b=1.0)]
        topics = [make_cluster(10, a=1.0), make_cluster(20, b=1.0)]
        assert align_clusters_to_topics(clusters, topics).topic_for(1) == 10

    def test_order_sensitive(self):
        wide = make_cluster(1, a=1.0, b=1.0)
        narrow = make_cluster(2, a=1.0)
        topics = [make_cluster(10, a=1.0), make_cluster(20, b=1.0)]

        forward = align_clusters_to_topics([wide, narrow], topics)
        assert forward.topic_for(1) == 10
        assert forward.topic_for(2) == UNMAPPED_ID

        backward = align_clusters_to_topics([narrow, wide], topics)
        assert backward.topic_for(2) == 10
        assert backward.topic_for(1) == 20

    def test_deterministic(self):
        clusters = [make_cluster(i, **{f"t{i % 3}": float(i), "shared": 1.0}) for i in range(8)]
        topics = [make_cluster(100 + i, **{f"t{i}": 1.0, "shared": float(i)}) for i in range(3)]
        first = align_clusters_to_topics(clusters, topics)
        second = align_clusters_to_topics(clusters, topics)
        assert dict(first.mapping) == dict(second.mapping)
        assert first.unaligned_topics == second.unaligned_topics

    @pytest.mark.parametrize("seed", range(5))
    def test_injective(self, seed):
        clusters = [
            make_cluster(i, **{f"t{(i * seed + j) % 5}": float(j + 1) for j in range(3)})
            for i in range(10)
        ]
        topics = [make_cluster(50 + i, **{f"t{i}": 1.0, f"t{(i + seed) % 5}": 0.5}) for i in range(5)]
        assert align_clusters_to_topics(clusters, topics).is_injective()

    def test_empty_topics_leave_all_unmapped(self):
        clusters = [make_cluster(1, a=1.0), make_cluster(2, b=1.0)]
        alignment = align_clusters_to_topics(clusters, [])
        assert alignment.topic_for(1) == UNMAPPED_ID
        assert alignment.topic_for(2) == UNMAPPED_ID
        assert alignment.unaligned_topics == ()

    def test_zero_overlap_is_unmapped(self):
        alignment = align_clusters_to_topics([make_cluster(1, a=1.0)], [make_cluster(10, z=1.0)])
        assert alignment.topic_for(1) == UNMAPPED_ID

    def test_unaligned_topics_logged(self, caplog):
        with caplog.at_level(logging.INFO):
            align_clusters_to_topics([make_cluster(1, a=1.0)], [make_cluster(10, z=1.0)])
        assert "Topic 10 not aligned" in caplog.text

    def test_none_inputs(self):
        alignment = align_clusters_to_topics(None, None)
        assert len(alignment) == 0


class TestAlignment:
    """Test the Alignment value object."""

    def test_unknown_cluster_unmapped(self):
        assert Alignment({1: 10}).topic_for(99) == UNMAPPED_ID

    def test_is_injective_ignores_unmapped(self):
        assert Alignment({1: UNMAPPED_ID, 2: UNMAPPED_ID, 3: 10}).is_injective()
        assert not Alignment({1: 10, 2: 10}).is_injective()

    def test_mapping_is_read_only(self):
        alignment = Alignment({1: 10})
        with pytest.raises(TypeError):
            alignment.mapping[2] = 20
