"""
Unit tests for template_eval.clusters.interpolation module.
"""

import pytest

from template_eval.clusters.alignment import Alignment
from template_eval.clusters.interpolation import interpolate
from tests.conftest import make_cluster


@pytest.fixture
def primary():
    return [make_cluster(1, 0.4, a=1.0), make_cluster(2, 0.2, b=1.0)]


@pytest.fixture
def secondary():
    return [make_cluster(10, 0.8), make_cluster(20, 0.6)]


@pytest.fixture
def alignment():
    # Cluster 2 is unaligned; topic 20 is never claimed
    return Alignment({1: 10, 2: -1})


def scores(clusters):
    return {cluster.id: cluster.score for cluster in clusters}


class TestInterpolate:
    """Test linear score interpolation."""

    def test_mixed_scores(self, primary, secondary, alignment):
        result = scores(interpolate(primary, secondary, 0.5, alignment))
        assert result[1] == pytest.approx(0.6)
        assert result[2] == pytest.approx(0.1)
        assert result[20] == pytest.approx(0.3)
        # An aligned topic is folded into its cluster
        assert 10 not in result

    def test_weight_one_reproduces_primary(self, primary, secondary, alignment):
        result = scores(interpolate(primary, secondary, 1.0, alignment))
        assert result[1] == 0.4
        assert result[2] == 0.2
        assert result[20] == 0.0

    def test_weight_zero_reproduces_secondary(self, primary, secondary, alignment):
        result = scores(interpolate(primary, secondary, 0.0, alignment))
        assert result[1] == 0.8
        assert result[2] == 0.0
        assert result[20] == 0.6

    def test_aligned_topic_missing_from_document(self, primary, alignment):
        result = scores(interpolate(primary, [make_cluster(20, 0.6)], 0.5, alignment))
        assert result[1] == pytest.approx(0.2)

    def test_inputs_not_mutated(self, primary, secondary, alignment):
        interpolate(primary, secondary, 0.3, alignment)
        assert [cluster.score for cluster in primary] == [0.4, 0.2]
        assert [cluster.score for cluster in secondary] == [0.8, 0.6]

    def test_tokens_kept(self, primary, secondary, alignment):
        merged = {c.id: c for c in interpolate(primary, secondary, 0.5, alignment)}
        assert merged[1].token_score("a") == 1.0

    @pytest.mark.parametrize("weight", [-0.1, 1.01])
    def test_weight_out_of_range(self, primary, secondary, alignment, weight):
        with pytest.raises(ValueError, match="weight"):
            interpolate(primary, secondary, weight, alignment)

    def test_none_collections(self, alignment):
        assert interpolate(None, None, 0.5, alignment) == []

    def test_repeated_topic_last_one_mixes(self, primary, alignment):
        secondary = [make_cluster(10, 0.8), make_cluster(10, 0.2)]
        result = interpolate(primary, secondary, 0.5, alignment)
        assert scores(result)[1] == pytest.approx(0.3)
        assert 10 not in scores(result)

    def test_repeated_unused_topic_appended_each_time(self, primary, alignment):
        secondary = [make_cluster(20, 0.6), make_cluster(20, 0.4)]
        result = interpolate(primary, secondary, 0.5, alignment)
        repeated = [cluster.score for cluster in result if cluster.id == 20]
        assert repeated == pytest.approx([0.3, 0.2])
