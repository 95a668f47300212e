"""Grid search over cluster selection cutoffs."""

from template_eval.gauntlet.search import (
    GauntletSearch,
    GridAxis,
    GridPoint,
    GridResult,
    entity_evaluator,
    interpolation_evaluator,
    selection_evaluator,
)

__all__ = [
    "GauntletSearch",
    "GridAxis",
    "GridPoint",
    "GridResult",
    "selection_evaluator",
    "interpolation_evaluator",
    "entity_evaluator",
]
