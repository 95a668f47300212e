"""
Template Eval - scoring induced event-template clusters against a MUC answer key.

This package provides utilities for:
- Aligning induced clusters to a second induced set (topics)
- Interpolating and selecting scored clusters per document
- Matching free-text entity guesses to gold answer-key entities
- Grid-searching selection cutoffs and reporting per-type precision/recall/F1
"""

import logging

# Set up NullHandler to prevent "No handler found" warnings
# when used as a library. Applications should configure their own handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

# Re-export commonly used items
from template_eval.constants import MUC_TYPES, UNMAPPED_ID
from template_eval.domain.models import (
    GoldEntity,
    GoldTemplate,
    MalformedRecordError,
    ScoredCluster,
)

__all__ = [
    "__version__",
    # Constants
    "MUC_TYPES",
    "UNMAPPED_ID",
    # Models
    "ScoredCluster",
    "GoldEntity",
    "GoldTemplate",
    "MalformedRecordError",
]
