"""
Constants for template_eval package.

Centralizes magic numbers and configuration defaults.
"""

# Sentinel id for a cluster that found no topic, or a report with no candidates
UNMAPPED_ID = -1

# MUC incident types (the closed list of gold template types)
MUC_TYPES = (
    "ATTACK",
    "BOMBING",
    "KIDNAPPING",
    "ARSON",
    "ROBBERY",
    "FORCED WORK STOPPAGE",
)

# Report-line names, keyed by type prefix
SHORT_TYPE_NAMES = {
    "KIDNAP": "KIDNAP",
    "FORCED": "WORK",
}

# MUC answer key slot names
MESSAGE_ID = "MESSAGE: ID"
MESSAGE_TEMPLATE = "MESSAGE: TEMPLATE"
INCIDENT_TYPE = "INCIDENT: TYPE"
HUMAN_PERP = "PERP: INDIVIDUAL ID"
ORG_PERP = "PERP: ORGANIZATION ID"
HUMAN_TARGET = "HUM TGT: DESCRIPTION"  # "HUM TGT: NAME" is always repeated here
PHYS_TARGET = "PHYS TGT: ID"
INSTRUMENT = "INCIDENT: INSTRUMENT ID"

PERP_SLOTS = (HUMAN_PERP, ORG_PERP)
HUMAN_TARGET_SLOTS = (HUMAN_TARGET,)
PHYS_TARGET_SLOTS = (PHYS_TARGET,)
INSTRUMENT_SLOTS = (INSTRUMENT,)

# Values the annotators use for an empty slot
EMPTY_SLOT_VALUES = frozenset({"*", "-"})

# Cluster record serialization
MAX_SERIALIZED_TOKENS = 27

# Typo tolerance for gold matching
TYPO_MIN_LENGTH = 15  # both strings must be longer than this
TYPO_MAX_LENGTH_DIFF = 5  # exclusive
TYPO_DISTANCE_DIVISOR = 6  # edit distance must be < len(guess) // 6

# Default gauntlet grids (inclusive ranges, step)
DEFAULT_DOC_RANGE = (0, 10, 2)
DEFAULT_SENT_RANGE = (0, 10, 2)
DEFAULT_SIG_RANGE = (0, 4, 2)
DEFAULT_INTERP_DOC_RANGE = (4, 10, 2)
DEFAULT_INTERP_STEPS = 21  # lambda = 0.00, 0.05, ..., 1.00
