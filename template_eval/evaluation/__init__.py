"""Evaluation tallies, metric tiers and report formatting."""

from template_eval.evaluation.accumulator import (
    EntityEvaluation,
    EvaluationTally,
    evaluate_entities,
)
from template_eval.evaluation.metrics import (
    CandidateScore,
    TierMetrics,
    Tiers,
    best_candidate,
    compute_tiers,
)

__all__ = [
    "EntityEvaluation",
    "EvaluationTally",
    "evaluate_entities",
    "CandidateScore",
    "TierMetrics",
    "Tiers",
    "best_candidate",
    "compute_tiers",
]
