"""
Entity Resolution Module.

Decides whether free-text guesses name gold answer-key entities, and whether
two wrong guesses are near-duplicates.
"""

from template_eval.entity_resolution.matchers import (
    EntityMatcher,
    MatchResult,
    MatchType,
    similar,
)

__all__ = [
    "EntityMatcher",
    "MatchResult",
    "MatchType",
    "similar",
]
