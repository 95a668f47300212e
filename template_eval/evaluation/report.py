"""
Report formatting for gauntlet results.

Each grid point prints a header line followed by one line per template type:

    **EVAL** docs=2 sents=4 sigs=0
    EVAL KIDNAP:	24	STRICT P: 3/4 = 0.750 R: 3/5 = 0.600 F1: 0.667	ALL-GUESSED ...
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from template_eval.constants import SHORT_TYPE_NAMES
from template_eval.evaluation.metrics import CandidateScore, TierMetrics

if TYPE_CHECKING:
    from template_eval.gauntlet.search import GridResult

logger = logging.getLogger(__name__)

TIER_LABELS = (
    ("STRICT", "strict"),
    ("ALL-GUESSED", "all_guessed"),
    ("FULL-DOMAIN", "full_domain"),
)

CSV_FIELDS = [
    "point",
    "type",
    "id",
    "correct",
    "incorrect",
    "missed",
    "no_gold_fp",
    "unseen_fn",
    "strict_p",
    "strict_r",
    "strict_f1",
    "all_guessed_p",
    "all_guessed_r",
    "all_guessed_f1",
    "full_domain_p",
    "full_domain_r",
    "full_domain_f1",
]


def short_type_name(template_type: str) -> str:
    """Report name of a type: KIDNAPPING -> KIDNAP, FORCED WORK STOPPAGE -> WORK."""
    for prefix, short in SHORT_TYPE_NAMES.items():
        if template_type.startswith(prefix):
            return short
    return template_type


def format_params(params: Mapping[str, float | int]) -> str:
    """Grid point parameters as 'name=value' pairs, floats with 2 decimals."""
    return " ".join(
        f"{name}={value:.2f}" if isinstance(value, float) else f"{name}={value}"
        for name, value in params.items()
    )


def format_header(params: Mapping[str, float | int]) -> str:
    return f"**EVAL** {format_params(params)}"


def format_tier(label: str, metrics: TierMetrics) -> str:
    guessed = metrics.correct + metrics.incorrect
    gold = metrics.correct + metrics.missed
    return (
        f"{label} P: {metrics.correct}/{guessed} = {metrics.precision:.3f}"
        f" R: {metrics.correct}/{gold} = {metrics.recall:.3f}"
        f" F1: {metrics.f1:.3f}"
    )


def format_type_line(template_type: str, score: CandidateScore) -> str:
    tiers = "\t".join(
        format_tier(label, getattr(score.tiers, attribute)) for label, attribute in TIER_LABELS
    )
    return f"EVAL {short_type_name(template_type)}:\t{score.id}\t{tiers}"


def format_result(result: GridResult) -> list[str]:
    """Header plus one line per declared type for one grid point."""
    lines = [format_header(result.point.params)]
    for template_type, score in result.scores.items():
        lines.append(format_type_line(template_type, score))
    return lines


def declared_lines(
    declared: Mapping[str, int | None], results: Sequence[GridResult]
) -> list[str]:
    """
    One line per type the run declared an id for, with how many grid points
    picked that same id as best.
    """
    lines = []
    for template_type, declared_id in declared.items():
        if declared_id is None:
            continue
        hits = sum(
            1
            for result in results
            if template_type in result.scores and result.scores[template_type].id == declared_id
        )
        lines.append(
            f"DECLARED {short_type_name(template_type)}:\t{declared_id}"
            f"\tbest at {hits}/{len(results)} grid points"
        )
    return lines


def log_results(results: Iterable[GridResult], log: logging.Logger | None = None) -> None:
    """Emit every grid point's report block through a logger."""
    log = log or logger
    for result in results:
        for line in format_result(result):
            log.info(line)


def result_rows(result: GridResult) -> list[dict[str, str | int | float]]:
    """CSV rows for one grid point, one per declared type."""
    rows = []
    point = format_params(result.point.params)
    for template_type, score in result.scores.items():
        strict = score.strict
        row: dict[str, str | int | float] = {
            "point": point,
            "type": template_type,
            "id": score.id,
            "correct": strict.correct,
            "incorrect": strict.incorrect,
            "missed": strict.missed,
            "no_gold_fp": score.all_guessed.incorrect - strict.incorrect,
            "unseen_fn": score.full_domain.missed - strict.missed,
        }
        for _, attribute in TIER_LABELS:
            metrics = getattr(score.tiers, attribute)
            row[f"{attribute}_p"] = round(metrics.precision, 4)
            row[f"{attribute}_r"] = round(metrics.recall, 4)
            row[f"{attribute}_f1"] = round(metrics.f1, 4)
        rows.append(row)
    return rows


def write_csv(results: Iterable[GridResult], path: Path) -> int:
    """
    Write report rows for all grid points to a CSV file.

    Returns:
        Number of rows written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for result in results:
            for row in result_rows(result):
                writer.writerow(row)
                count += 1
    logger.info(f"Wrote {count} report rows to {path}")
    return count
