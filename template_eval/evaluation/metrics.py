"""
Precision / recall / F1 over evaluation tallies.

Three tiers are reported for every candidate:

- STRICT: only stories that have gold for the type, only stories that were run
- ALL-GUESSED: precision also charges guesses made on stories with no gold
- FULL-DOMAIN: recall also charges gold in stories that were never run
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from template_eval.constants import UNMAPPED_ID

if TYPE_CHECKING:
    from template_eval.evaluation.accumulator import EvaluationTally


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0.0 when the denominator is not positive."""
    return numerator / denominator if denominator > 0 else 0.0


def f1_score(precision: float, recall: float) -> float:
    total = precision + recall
    return 2 * precision * recall / total if total > 0 else 0.0


@dataclass(frozen=True)
class TierMetrics:
    """Counts and derived metrics for one tier."""

    correct: int = 0
    incorrect: int = 0
    missed: int = 0
    precision: float = 0.0
    recall: float = 0.0
    f1: float = 0.0

    @classmethod
    def from_counts(cls, correct: int, incorrect: int, missed: int) -> TierMetrics:
        precision = safe_ratio(correct, correct + incorrect)
        recall = safe_ratio(correct, correct + missed)
        return cls(
            correct=correct,
            incorrect=incorrect,
            missed=missed,
            precision=precision,
            recall=recall,
            f1=f1_score(precision, recall),
        )


@dataclass(frozen=True)
class Tiers:
    strict: TierMetrics = TierMetrics()
    all_guessed: TierMetrics = TierMetrics()
    full_domain: TierMetrics = TierMetrics()


def compute_tiers(
    correct: int,
    incorrect: int,
    missed: int,
    no_gold_fp: int = 0,
    unseen_fn: int = 0,
) -> Tiers:
    """
    Compute all three metric tiers from raw counts.

    Args:
        correct: Guesses that matched gold
        incorrect: Wrong guesses on stories with gold
        missed: Gold not guessed, on stories that were run
        no_gold_fp: Guesses on stories with no gold for the type
        unseen_fn: Gold on stories that were never run

    Returns:
        Tiers; zero denominators give zero metrics, never an error
    """
    return Tiers(
        strict=TierMetrics.from_counts(correct, incorrect, missed),
        all_guessed=TierMetrics.from_counts(correct, incorrect + no_gold_fp, missed),
        full_domain=TierMetrics.from_counts(correct, incorrect + no_gold_fp, missed + unseen_fn),
    )


@dataclass(frozen=True)
class CandidateScore:
    """Best candidate id for one template type, with its metrics."""

    id: int
    tiers: Tiers

    @property
    def strict(self) -> TierMetrics:
        return self.tiers.strict

    @property
    def all_guessed(self) -> TierMetrics:
        return self.tiers.all_guessed

    @property
    def full_domain(self) -> TierMetrics:
        return self.tiers.full_domain


def candidate_score(tally: EvaluationTally, candidate_id: int, template_type: str) -> CandidateScore:
    """Metrics of one candidate id for one type."""
    correct, incorrect, missed = tally.counts(candidate_id, template_type)
    tiers = compute_tiers(
        correct,
        incorrect,
        missed,
        no_gold_fp=tally.no_gold_count(candidate_id, template_type),
        unseen_fn=tally.unseen_false_negatives.get(template_type, 0),
    )
    return CandidateScore(id=candidate_id, tiers=tiers)


def best_candidate(tally: EvaluationTally, template_type: str) -> CandidateScore:
    """
    Candidate id with the highest strict F1 for a type.

    Candidates are the ids with a true-positive entry for the type, in first
    seen order; ties keep the earlier id. A tally with no such ids yields
    UNMAPPED_ID with zero metrics.
    """
    best = CandidateScore(id=UNMAPPED_ID, tiers=Tiers())
    best_f1 = -1.0
    for candidate_id in tally.candidate_ids(template_type):
        score = candidate_score(tally, candidate_id, template_type)
        if score.strict.f1 > best_f1:
            best_f1 = score.strict.f1
            best = score
    return best
