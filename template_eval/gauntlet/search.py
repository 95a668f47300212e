"""
Brute-force grid search over selection cutoffs.

Every grid point gets a fresh EvaluationTally, runs the point evaluator once
over all stories and reports the best candidate id per template type. Points
share no state, so they can be evaluated concurrently.

Usage:
    search = GauntletSearch(
        default_selection_axes(),
        selection_evaluator(run_log, answer_key),
        template_types=answer_key.template_types,
    )
    for result in search.run():
        ...
"""

from __future__ import annotations

import itertools
import logging
import sys
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np
from tqdm import tqdm

from template_eval.clusters.alignment import Alignment, align_clusters_to_topics
from template_eval.clusters.interpolation import interpolate
from template_eval.clusters.selection import exclude_seen, merge_all, sort_and_trim_first_n
from template_eval.constants import (
    DEFAULT_DOC_RANGE,
    DEFAULT_INTERP_DOC_RANGE,
    DEFAULT_INTERP_STEPS,
    DEFAULT_SENT_RANGE,
    DEFAULT_SIG_RANGE,
    MUC_TYPES,
)
from template_eval.domain.models import ScoredCluster, gold_entities, templates_of_type
from template_eval.entity_resolution.matchers import EntityMatcher
from template_eval.evaluation.accumulator import EvaluationTally
from template_eval.evaluation.metrics import CandidateScore, best_candidate
from template_eval.ingest.answer_key import AnswerKey
from template_eval.ingest.run_log import RunLog
from template_eval.utils.parallel import execute_parallel
from template_eval.utils.stats import ExecutionStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridAxis:
    """One named search dimension with its values in search order."""

    name: str
    values: tuple[float | int, ...]

    def __post_init__(self):
        object.__setattr__(self, "values", tuple(self.values))
        if not self.values:
            raise ValueError(f"Grid axis {self.name!r} has no values")

    @classmethod
    def from_range(cls, name: str, start: int, stop: int, step: int) -> GridAxis:
        """Integer axis from start to stop inclusive."""
        if step <= 0:
            raise ValueError(f"Grid axis {name!r} needs a positive step, got {step}")
        return cls(name, tuple(range(start, stop + 1, step)))

    @classmethod
    def weights(cls, name: str = "interp", steps: int = DEFAULT_INTERP_STEPS) -> GridAxis:
        """Evenly spaced weights over [0, 1] inclusive."""
        if steps < 1:
            raise ValueError(f"Weight axis needs at least one step, got {steps}")
        return cls(name, tuple(round(float(v), 6) for v in np.linspace(0.0, 1.0, steps)))


@dataclass(frozen=True)
class GridPoint:
    """One combination of axis values."""

    index: int
    params: dict[str, float | int] = field(default_factory=dict)

    def __getitem__(self, name: str) -> float | int:
        return self.params[name]


@dataclass
class GridResult:
    point: GridPoint
    tally: EvaluationTally
    scores: dict[str, CandidateScore]


PointEvaluator = Callable[[GridPoint, EvaluationTally], None]


class GauntletSearch:
    """Evaluate every point of a Cartesian grid."""

    def __init__(
        self,
        axes: Sequence[GridAxis],
        evaluate_point: PointEvaluator,
        template_types: Sequence[str] = MUC_TYPES,
        max_workers: int = 1,
        show_progress: bool = True,
        stats: ExecutionStats | None = None,
    ):
        """
        Initialize the search.

        Args:
            axes: Grid axes, outermost first
            evaluate_point: Called once per point with the point and its fresh tally
            template_types: Types every result must score
            max_workers: Points evaluated concurrently (1 = sequential)
            show_progress: Whether to show a progress bar
            stats: Optional counters; "points" per evaluated point, "failed" per error

        Raises:
            ValueError: If there are no axes, no template types or max_workers < 1
        """
        if not axes:
            raise ValueError("GauntletSearch needs at least one grid axis")
        if not template_types:
            raise ValueError("GauntletSearch needs at least one template type")
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.axes = list(axes)
        self.evaluate_point = evaluate_point
        self.template_types = tuple(template_types)
        self.max_workers = max_workers
        self.show_progress = show_progress
        self.stats = stats

    def points(self) -> list[GridPoint]:
        """All grid points in axis order (last axis varies fastest)."""
        names = [axis.name for axis in self.axes]
        return [
            GridPoint(index=i, params=dict(zip(names, values)))
            for i, values in enumerate(itertools.product(*(axis.values for axis in self.axes)))
        ]

    def __len__(self) -> int:
        size = 1
        for axis in self.axes:
            size *= len(axis.values)
        return size

    def evaluate(self, point: GridPoint) -> GridResult:
        """Evaluate one point on a fresh tally."""
        tally = EvaluationTally()
        self.evaluate_point(point, tally)
        scores = {
            template_type: best_candidate(tally, template_type)
            for template_type in self.template_types
        }
        return GridResult(point=point, tally=tally, scores=scores)

    def run(self) -> list[GridResult]:
        """
        Evaluate the whole grid.

        Returns:
            One GridResult per point, in grid order

        Raises:
            Exception: The first error (in grid order) raised by any point
        """
        points = self.points()
        logger.info(f"Running gauntlet over {len(points)} grid points")

        if self.max_workers == 1:
            results = []
            for point in tqdm(
                points,
                desc="Gauntlet",
                unit="point",
                file=sys.stderr,
                disable=not self.show_progress,
            ):
                try:
                    results.append(self.evaluate(point))
                except Exception as e:
                    self._point_failed(point, e)
                    if self.stats is not None:
                        self.stats.increment("failed")
                    raise
                if self.stats is not None:
                    self.stats.increment("points")
            return results

        outcomes = execute_parallel(
            points,
            self.evaluate,
            max_workers=self.max_workers,
            desc="Gauntlet",
            unit="point",
            show_progress=self.show_progress,
            error_handler=self._point_failed,
            stats=self.stats,
            stats_key="points",
        )
        outcomes.sort(key=lambda outcome: outcome[0].index)
        for _, _, error in outcomes:
            if error is not None:
                raise error
        return [result for _, result, _ in outcomes]

    @staticmethod
    def _point_failed(point: GridPoint, error: Exception) -> None:
        logger.error(f"Grid point {point.params} failed: {error}")


def default_selection_axes() -> list[GridAxis]:
    return [
        GridAxis.from_range("docs", *DEFAULT_DOC_RANGE),
        GridAxis.from_range("sents", *DEFAULT_SENT_RANGE),
        GridAxis.from_range("sigs", *DEFAULT_SIG_RANGE),
    ]


def default_interpolation_axes() -> list[GridAxis]:
    return [
        GridAxis.weights("interp"),
        GridAxis.from_range("docs", *DEFAULT_INTERP_DOC_RANGE),
        GridAxis.from_range("sents", *DEFAULT_SENT_RANGE),
    ]


def add_top(
    selected: list[ScoredCluster], candidates: Iterable[ScoredCluster] | None, n: int
) -> list[ScoredCluster]:
    """Add the n best candidates not already selected."""
    return merge_all(selected, sort_and_trim_first_n(exclude_seen(selected, candidates), n))


def select_clusters(
    run_log: RunLog, story: str, docs: int, sents: int, sigs: int
) -> list[ScoredCluster]:
    """Top documents, then the best new sentence clusters, then the best new sig clusters."""
    selected = sort_and_trim_first_n(run_log.docs(story), docs)
    selected = add_top(selected, run_log.sentences(story), sents)
    return add_top(selected, run_log.sigs(story), sigs)


def _count_story(stats: ExecutionStats | None, templates) -> None:
    if stats is not None:
        stats.increment("stories")
        if not templates:
            stats.increment("no_gold")


def unseen_stories(run_log: RunLog, answer_key: AnswerKey) -> list[str]:
    """Answer-key stories (lower-cased) that the run log never reached."""
    run_stories = {story.lower() for story in run_log.stories()}
    return [story for story in answer_key.stories() if story not in run_stories]


def _charge_unseen(
    tally: EvaluationTally,
    stories: Iterable[str],
    answer_key: AnswerKey,
    stats: ExecutionStats | None,
    entity_level: bool,
) -> None:
    for story in stories:
        tally.record_unseen(
            answer_key.get_templates(story), answer_key.template_types, entity_level=entity_level
        )
        if stats is not None:
            stats.increment("unseen")


def selection_evaluator(
    run_log: RunLog, answer_key: AnswerKey, stats: ExecutionStats | None = None
) -> PointEvaluator:
    """
    Document-classification evaluator over axes docs, sents, sigs.

    Gold stories absent from the run log count once per type against
    full-domain recall.
    """
    unseen = unseen_stories(run_log, answer_key)

    def evaluate(point: GridPoint, tally: EvaluationTally) -> None:
        for story in run_log.stories():
            selected = select_clusters(run_log, story, point["docs"], point["sents"], point["sigs"])
            templates = answer_key.get_templates(story)
            tally.record_document(
                templates, [cluster.id for cluster in selected], answer_key.template_types
            )
            _count_story(stats, templates)
        _charge_unseen(tally, unseen, answer_key, stats, entity_level=False)

    return evaluate


def interpolation_evaluator(
    cluster_log: RunLog,
    topic_log: RunLog,
    answer_key: AnswerKey,
    alignment: Alignment | None = None,
    stats: ExecutionStats | None = None,
) -> PointEvaluator:
    """
    Document-classification evaluator over axes interp, docs, sents.

    Cluster and topic document scores are interpolated with the given
    alignment (computed from the logs' cluster and topic definitions when
    omitted). A positive sents budget is split evenly between cluster and
    topic sentence lists. Gold stories absent from the cluster log count once
    per type against full-domain recall.
    """
    if alignment is None:
        alignment = align_clusters_to_topics(cluster_log.clusters, topic_log.topics)
    unseen = unseen_stories(cluster_log, answer_key)

    def evaluate(point: GridPoint, tally: EvaluationTally) -> None:
        half = point["sents"] // 2
        for story in cluster_log.stories():
            mixed = interpolate(
                cluster_log.docs(story), topic_log.docs(story), point["interp"], alignment
            )
            selected = sort_and_trim_first_n(mixed, point["docs"])
            if point["sents"] > 0:
                selected = add_top(selected, cluster_log.sentences(story), half)
                selected = add_top(selected, topic_log.sentences(story), half)
            templates = answer_key.get_templates(story)
            tally.record_document(
                templates, [cluster.id for cluster in selected], answer_key.template_types
            )
            _count_story(stats, templates)
        _charge_unseen(tally, unseen, answer_key, stats, entity_level=False)

    return evaluate


def entity_evaluator(
    run_log: RunLog,
    answer_key: AnswerKey,
    matcher: EntityMatcher | None = None,
    stats: ExecutionStats | None = None,
) -> PointEvaluator:
    """
    Entity-level evaluator over axes docs, sents, sigs.

    Every candidate id known to the run log is scored on every story: a
    selected id contributes its fill guesses, an unselected one contributes
    none (so its gold counts as missed). Gold stories absent from the run log
    are charged to full-domain recall.
    """
    matcher = matcher or EntityMatcher()
    candidates = run_log.candidate_ids()
    unseen = unseen_stories(run_log, answer_key)

    def evaluate(point: GridPoint, tally: EvaluationTally) -> None:
        for story in run_log.stories():
            selected = {
                cluster.id
                for cluster in select_clusters(
                    run_log, story, point["docs"], point["sents"], point["sigs"]
                )
            }
            templates = answer_key.get_templates(story)
            golds_by_type = {
                template_type: gold_entities(templates_of_type(template_type, templates))
                for template_type in answer_key.template_types
            }
            for candidate_id in candidates:
                guesses = []
                if candidate_id in selected:
                    guesses = run_log.fills_for(story, candidate_id)
                for template_type, golds in golds_by_type.items():
                    tally.record_entities(candidate_id, template_type, golds, guesses, matcher)
            _count_story(stats, templates)

        _charge_unseen(tally, unseen, answer_key, stats, entity_level=True)

    return evaluate
