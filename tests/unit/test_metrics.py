"""
Unit tests for template_eval.evaluation.metrics module.
"""

import pytest

from template_eval.constants import UNMAPPED_ID
from template_eval.domain.models import GoldEntity
from template_eval.evaluation.accumulator import EvaluationTally
from template_eval.evaluation.metrics import (
    TierMetrics,
    Tiers,
    best_candidate,
    candidate_score,
    compute_tiers,
    f1_score,
    safe_ratio,
)


class TestRatios:
    """Test zero-safe arithmetic."""

    def test_safe_ratio(self):
        assert safe_ratio(1, 4) == 0.25
        assert safe_ratio(3, 0) == 0.0

    def test_f1_zero_when_both_zero(self):
        assert f1_score(0.0, 0.0) == 0.0

    def test_f1_harmonic_mean(self):
        assert f1_score(0.75, 0.6) == pytest.approx(2 / 3)


class TestTierMetrics:
    """Test metric derivation from counts."""

    def test_from_counts(self):
        metrics = TierMetrics.from_counts(3, 1, 2)
        assert metrics.precision == 0.75
        assert metrics.recall == 0.6
        assert metrics.f1 == pytest.approx(2 / 3)

    def test_no_guesses_no_gold(self):
        metrics = TierMetrics.from_counts(0, 0, 0)
        assert (metrics.precision, metrics.recall, metrics.f1) == (0.0, 0.0, 0.0)

    def test_compute_tiers(self):
        tiers = compute_tiers(3, 1, 2, no_gold_fp=4, unseen_fn=5)
        assert tiers.strict.precision == 0.75
        assert tiers.all_guessed.precision == pytest.approx(3 / 8)
        assert tiers.all_guessed.recall == 0.6
        assert tiers.full_domain.precision == pytest.approx(3 / 8)
        assert tiers.full_domain.recall == pytest.approx(3 / 10)

    def test_tiers_collapse_without_extras(self):
        tiers = compute_tiers(2, 2, 2)
        assert tiers.strict == tiers.all_guessed == tiers.full_domain


def credit(tally, candidate_id, template_type, guesses, *golds):
    entities = [GoldEntity(template_type, (mention,)) for mention in golds]
    tally.record_entities(candidate_id, template_type, entities, guesses)


class TestBestCandidate:
    """Test best-id selection per type."""

    def test_empty_tally(self):
        score = best_candidate(EvaluationTally(), "ATTACK")
        assert score.id == UNMAPPED_ID
        assert score.tiers == Tiers()

    def test_highest_strict_f1_wins(self):
        tally = EvaluationTally()
        credit(tally, 1, "ATTACK", ["soldiers"], "peasants", "priest")
        credit(tally, 2, "ATTACK", ["peasants"], "peasants", "priest")
        score = best_candidate(tally, "ATTACK")
        assert score.id == 2
        assert (score.strict.correct, score.strict.incorrect, score.strict.missed) == (1, 0, 1)

    def test_ties_keep_first_seen(self):
        tally = EvaluationTally()
        credit(tally, 9, "ATTACK", [], "peasants")
        credit(tally, 3, "ATTACK", [], "peasants")
        assert best_candidate(tally, "ATTACK").id == 9

    def test_zero_f1_candidate_still_reported(self):
        tally = EvaluationTally()
        credit(tally, 5, "ATTACK", ["army"], "peasants")
        score = best_candidate(tally, "ATTACK")
        assert score.id == 5
        assert score.strict.f1 == 0.0

    def test_false_positive_only_id_is_not_a_candidate(self):
        tally = EvaluationTally()
        tally.false_positives[11] = {"ATTACK": 2}
        score = best_candidate(tally, "ATTACK")
        assert score.id == UNMAPPED_ID
        assert score.strict.incorrect == 0

    def test_type_without_credit_stays_unmapped(self):
        tally = EvaluationTally()
        credit(tally, 5, "ATTACK", ["army"], "army")
        tally.false_positives[5]["BOMBING"] = 1
        assert best_candidate(tally, "BOMBING").id == UNMAPPED_ID

    def test_candidate_score_uses_no_gold_and_unseen(self):
        tally = EvaluationTally()
        credit(tally, 4, "ATTACK", ["peasants"], "peasants")
        tally.record_entities(4, "ATTACK", [], ["a", "b", "c"])
        tally.unseen_false_negatives["ATTACK"] = 3
        score = candidate_score(tally, 4, "ATTACK")
        assert score.strict.precision == 1.0
        assert score.all_guessed.precision == 0.25
        assert score.full_domain.recall == 0.25
