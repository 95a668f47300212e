"""
Gold Entity Matching Module.

Decides whether a free-text guess names the same real-world entity as a gold
answer-key entity, and whether two wrong guesses are near-duplicates of each
other. Each matching rule is isolated and tried in a fixed order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from rapidfuzz.distance import Levenshtein

from template_eval.constants import (
    TYPO_DISTANCE_DIVISOR,
    TYPO_MAX_LENGTH_DIFF,
    TYPO_MIN_LENGTH,
)
from template_eval.domain.models import GoldEntity

logger = logging.getLogger(__name__)

# Parser escapes for parentheses, as they appear in extracted guesses
_PAREN_ESCAPES = (
    ("-LRB- ", "("),
    (" -RRB-", ")"),
    ("-lrb- ", "("),
    (" -rrb-", ")"),
)


class MatchType(Enum):
    """Which rule matched a guess to a gold mention."""

    NO_MATCH = "no_match"
    GUESS_CONTAINS_MENTION = "guess_contains_mention"
    MENTION_CONTAINS_GUESS = "mention_contains_guess"
    EDIT_DISTANCE = "edit_distance"
    RIGHTMOST_TOKEN = "rightmost_token"


@dataclass(frozen=True)
class MatchResult:
    """Result of matching one guess against one gold entity."""

    matched: bool
    match_type: MatchType
    mention: str | None = None  # The gold mention that matched
    needs_review: bool = False  # Only the "of " exclusion blocked a containment match


def rightmost_token(text: str) -> str:
    """Substring after the last space, or the text itself."""
    return text[text.rfind(" ") + 1 :]


def _bounded_find(haystack: str, needle: str) -> int:
    """
    Index of needle in haystack if it starts a word, else -1.

    Only the first occurrence is considered, so "maid" never matches "aid".
    """
    index = haystack.find(needle)
    if index > 0 and haystack[index - 1] != " ":
        return -1
    return index


def _preceded_by_of(haystack: str, index: int) -> bool:
    # "party of ohio" must not match "ohio"; "roof ohio" still may
    prefix = haystack[:index]
    return prefix == "of " or prefix.endswith(" of ")


class EntityMatcher:
    """
    Matches guesses to gold entities with case-insensitive fuzzy rules.

    Rules, tried per gold mention in order:
    1. The guess contains the mention at a word start.
    2. The mention contains the guess at a word start.
    3. Both strings are long and within a small edit distance (typos).
    4. The rightmost tokens are equal (least precise, tried last).

    A containment hit that is directly preceded by "of " is rejected, and also
    disables rule 4 for that mention. When that is the only thing that fired
    the result is flagged for manual review.
    """

    def __init__(self, warnings: bool = True):
        """
        Initialize matcher.

        Args:
            warnings: Log a warning for results that need manual review
        """
        self.warnings = warnings

    @staticmethod
    def normalize_guess(guess: str) -> str:
        """Restore escaped parentheses and lower-case the guess."""
        if "RB-" in guess or "rb-" in guess:
            for escaped, literal in _PAREN_ESCAPES:
                guess = guess.replace(escaped, literal)
        return guess.lower()

    def match(self, gold: GoldEntity, guess: str) -> MatchResult:
        """
        Match a guess against every mention of a gold entity.

        Args:
            gold: Gold entity from the answer key
            guess: Free-text guess

        Returns:
            MatchResult for the first satisfied rule, or NO_MATCH
        """
        guess = self.normalize_guess(guess).strip()
        if not guess:
            return MatchResult(False, MatchType.NO_MATCH)
        guess_tail = rightmost_token(guess)
        needs_review = False

        for raw_mention in gold.mentions:
            mention = raw_mention.lower()
            of_blocked = False

            index = _bounded_find(guess, mention)
            if index > -1:
                if not _preceded_by_of(guess, index):
                    return MatchResult(True, MatchType.GUESS_CONTAINS_MENTION, raw_mention)
                of_blocked = True

            index = _bounded_find(mention, guess)
            if index > -1:
                if not _preceded_by_of(mention, index):
                    return MatchResult(True, MatchType.MENTION_CONTAINS_GUESS, raw_mention)
                of_blocked = True

            if self._is_typo(guess, mention):
                logger.debug(f"Edit distance match: {guess!r} with gold {mention!r}")
                return MatchResult(True, MatchType.EDIT_DISTANCE, raw_mention)

            if not of_blocked and rightmost_token(mention) == guess_tail:
                logger.debug(f"Rightmost match: {guess!r} with gold {mention!r}")
                return MatchResult(True, MatchType.RIGHTMOST_TOKEN, raw_mention)

            needs_review = needs_review or of_blocked

        if needs_review and self.warnings:
            logger.warning(f"Match blocked by 'of' rule, review: gold={gold} guess={guess!r}")
        return MatchResult(False, MatchType.NO_MATCH, needs_review=needs_review)

    def matches(self, gold: GoldEntity, guess: str) -> bool:
        """True if the guess names the gold entity."""
        return self.match(gold, guess).matched

    def find_gold(self, golds: Iterable[GoldEntity] | None, guess: str) -> GoldEntity | None:
        """First gold entity the guess matches, or None."""
        for gold in golds or ():
            if self.matches(gold, guess):
                return gold
        return None

    @staticmethod
    def _is_typo(guess: str, mention: str) -> bool:
        if len(guess) <= TYPO_MIN_LENGTH or len(mention) <= TYPO_MIN_LENGTH:
            return False
        if abs(len(guess) - len(mention)) >= TYPO_MAX_LENGTH_DIFF:
            return False
        return Levenshtein.distance(guess, mention) < len(guess) // TYPO_DISTANCE_DIVISOR


def similar(one: str, two: str) -> bool:
    """
    True if two guesses plausibly name the same entity.

    Cruder than EntityMatcher: equality, plural forms and shared endings
    ("the guerrillas" vs "guerrilla"). Only used to avoid double-counting
    wrong guesses, never for gold matching.
    """
    one = one.lower()
    two = two.lower()

    if one == two:
        return True

    # Plural version
    if one in (two + "s", two + "es") or two in (one + "s", one + "es"):
        return True

    # One string just has modifiers on the same root
    if one.endswith(two) or two.endswith(one):
        return True
    return any(
        one.endswith(two + suffix) or two.endswith(one + suffix) for suffix in ("s", "es")
    )
