"""
Evaluation tallies for one gauntlet grid point.

Two recording modes share one tally:

- document mode: a story counts as one gold item per incident type and each
  selected cluster id is a guess for every type
- entity mode: each selected id's fill guesses are matched against the gold
  entities of the story
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from template_eval.domain.models import GoldEntity, GoldTemplate, gold_entities, templates_of_type
from template_eval.entity_resolution.matchers import EntityMatcher, similar

logger = logging.getLogger(__name__)

Counts = dict[int, dict[str, int]]


@dataclass(frozen=True)
class EntityEvaluation:
    """Outcome of matching one guess list against one gold list."""

    correct: int
    incorrect: int
    missed: int
    guess_matched: tuple[bool, ...] = ()
    gold_match_counts: tuple[int, ...] = ()

    def as_tuple(self) -> tuple[int, int, int]:
        return self.correct, self.incorrect, self.missed


def evaluate_entities(
    golds: Sequence[GoldEntity] | None,
    guesses: Sequence[str] | None,
    matcher: EntityMatcher | None = None,
) -> EntityEvaluation:
    """
    Score guesses against gold entities.

    Every guess is tried against every gold, so one guess may credit several
    golds and several guesses may credit one gold. Optional golds never count
    as missed. Wrong guesses that are near-duplicates of an earlier wrong
    guess are only charged once.

    Args:
        golds: Gold entities for one story and type
        guesses: Free-text guesses for the same story and type
        matcher: EntityMatcher to use (default: one with warnings enabled)

    Returns:
        EntityEvaluation with counts and per-guess / per-gold match flags
    """
    golds = list(golds or ())
    guesses = list(guesses or ())
    matcher = matcher or EntityMatcher()

    guess_matched = [False] * len(guesses)
    gold_match_counts = [0] * len(golds)

    for i, guess in enumerate(guesses):
        for j, gold in enumerate(golds):
            if matcher.matches(gold, guess):
                guess_matched[i] = True
                gold_match_counts[j] += 1

    correct = sum(1 for count in gold_match_counts if count > 0)
    missed = sum(
        1 for gold, count in zip(golds, gold_match_counts) if count == 0 and not gold.optional
    )

    wrong = [guess for guess, matched in zip(guesses, guess_matched) if not matched]
    incorrect = len(wrong) - duplicates_that_were_wrong(wrong)

    return EntityEvaluation(
        correct=correct,
        incorrect=incorrect,
        missed=missed,
        guess_matched=tuple(guess_matched),
        gold_match_counts=tuple(gold_match_counts),
    )


def duplicates_that_were_wrong(wrong_guesses: Sequence[str]) -> int:
    """
    Number of wrong guesses that repeat an earlier wrong guess.

    Scans in order; each not-yet-redundant guess marks every later similar
    guess as redundant.
    """
    redundant = [False] * len(wrong_guesses)
    count = 0
    for i, guess in enumerate(wrong_guesses):
        if redundant[i]:
            continue
        for j in range(i + 1, len(wrong_guesses)):
            if not redundant[j] and similar(guess, wrong_guesses[j]):
                logger.debug(f"Redundant wrong guess: {wrong_guesses[j]!r} ~ {guess!r}")
                redundant[j] = True
                count += 1
    return count


def _bump(counts: Counts, candidate_id: int, template_type: str, amount: int) -> None:
    per_type = counts.setdefault(candidate_id, {})
    per_type[template_type] = per_type.get(template_type, 0) + amount


@dataclass
class EvaluationTally:
    """
    Running counts for one grid point.

    Count maps are candidate_id -> template_type -> count, insertion-ordered
    so the first-seen candidate is well defined.
    """

    true_positives: Counts = field(default_factory=dict)
    false_positives: Counts = field(default_factory=dict)
    false_negatives: Counts = field(default_factory=dict)
    totals: dict[str, int] = field(default_factory=dict)
    no_gold_false_positives: Counts = field(default_factory=dict)
    unseen_false_negatives: dict[str, int] = field(default_factory=dict)

    def record_entities(
        self,
        candidate_id: int,
        template_type: str,
        golds: Sequence[GoldEntity] | None,
        guesses: Sequence[str] | None,
        matcher: EntityMatcher | None = None,
    ) -> tuple[int, int, int]:
        """
        Evaluate one candidate's guesses for one story and add the triple.

        Stories without gold for the type only add the guess volume to the
        no-gold false positives.

        Returns:
            The (correct, incorrect, missed) triple added, (0, 0, 0) for no gold
        """
        guesses = list(guesses or ())
        if not golds:
            _bump(self.no_gold_false_positives, candidate_id, template_type, len(guesses))
            return 0, 0, 0

        result = evaluate_entities(golds, guesses, matcher)
        _bump(self.true_positives, candidate_id, template_type, result.correct)
        _bump(self.false_positives, candidate_id, template_type, result.incorrect)
        _bump(self.false_negatives, candidate_id, template_type, result.missed)
        return result.as_tuple()

    def record_document(
        self,
        templates: Sequence[GoldTemplate] | None,
        guessed_ids: Iterable[int],
        template_types: Sequence[str],
    ) -> None:
        """
        Count one story in document-classification mode.

        Every guessed id is credited once for each type the story has gold
        for, and charged once for each type it lacks.
        """
        guessed_ids = list(guessed_ids)

        if not templates:
            for candidate_id in guessed_ids:
                for template_type in template_types:
                    _bump(self.no_gold_false_positives, candidate_id, template_type, 1)
            return

        for template_type in template_types:
            if templates_of_type(template_type, templates):
                self.totals[template_type] = self.totals.get(template_type, 0) + 1
                counts = self.true_positives
            else:
                counts = self.false_positives
            for candidate_id in guessed_ids:
                _bump(counts, candidate_id, template_type, 1)

    def record_unseen(
        self,
        templates: Sequence[GoldTemplate] | None,
        template_types: Sequence[str],
        entity_level: bool = True,
    ) -> None:
        """Charge gold of a story that was never run to the full-domain recall."""
        for template_type in template_types:
            typed = templates_of_type(template_type, templates)
            if not typed:
                continue
            amount = len(gold_entities(typed)) if entity_level else 1
            self.unseen_false_negatives[template_type] = (
                self.unseen_false_negatives.get(template_type, 0) + amount
            )

    def candidate_ids(self, template_type: str | None = None) -> list[int]:
        """
        Ids with a true-positive entry (for one type, if given), first seen first.

        An id that only ever produced false positives is not a candidate; a
        type whose ids are all like that stays unmapped.
        """
        if template_type is None:
            return list(self.true_positives)
        return [
            candidate_id
            for candidate_id, per_type in self.true_positives.items()
            if template_type in per_type
        ]

    def counts(self, candidate_id: int, template_type: str) -> tuple[int, int, int]:
        """
        (correct, incorrect, missed) of one candidate for one type.

        Missed combines entity-mode false negatives with the document-mode
        shortfall against the type's gold total.
        """
        correct = self.true_positives.get(candidate_id, {}).get(template_type, 0)
        incorrect = self.false_positives.get(candidate_id, {}).get(template_type, 0)
        missed = self.false_negatives.get(candidate_id, {}).get(template_type, 0)
        missed += max(0, self.totals.get(template_type, 0) - correct)
        return correct, incorrect, missed

    def no_gold_count(self, candidate_id: int, template_type: str) -> int:
        return self.no_gold_false_positives.get(candidate_id, {}).get(template_type, 0)

    def merge(self, other: EvaluationTally) -> EvaluationTally:
        """Add every count of other into this tally and return self."""
        for mine, theirs in (
            (self.true_positives, other.true_positives),
            (self.false_positives, other.false_positives),
            (self.false_negatives, other.false_negatives),
            (self.no_gold_false_positives, other.no_gold_false_positives),
        ):
            for candidate_id, per_type in theirs.items():
                for template_type, count in per_type.items():
                    _bump(mine, candidate_id, template_type, count)
        for mine_flat, theirs_flat in (
            (self.totals, other.totals),
            (self.unseen_false_negatives, other.unseen_false_negatives),
        ):
            for template_type, count in theirs_flat.items():
                mine_flat[template_type] = mine_flat.get(template_type, 0) + count
        return self
