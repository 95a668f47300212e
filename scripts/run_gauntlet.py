#!/usr/bin/env python3
"""
Grid-search cluster selection cutoffs and report the best cluster per template type.

Modes:
  selection      docs x sents x sigs, document classification (default)
  interpolation  interp x docs x sents, cluster/topic score interpolation
  entities       docs x sents x sigs, entity fills matched against gold entities

Usage:
    python scripts/run_gauntlet.py                        # Dry run: load inputs, show the grid
    python scripts/run_gauntlet.py --execute              # Run the gauntlet
    python scripts/run_gauntlet.py --mode interpolation --topics topics.log --execute
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from template_eval.cli import (
    add_execute_argument,
    add_input_arguments,
    print_dry_run_header,
    print_execute_header,
    setup_logging,
)
from template_eval.config import (
    get_answer_key_path,
    get_cluster_log_path,
    get_settings,
    get_topic_log_path,
)
from template_eval.domain.models import MalformedRecordError
from template_eval.entity_resolution.matchers import EntityMatcher
from template_eval.evaluation.report import declared_lines, log_results, write_csv
from template_eval.gauntlet.search import (
    GauntletSearch,
    default_interpolation_axes,
    default_selection_axes,
    entity_evaluator,
    interpolation_evaluator,
    selection_evaluator,
)
from template_eval.ingest.answer_key import AnswerKey
from template_eval.ingest.run_log import read_run_log
from template_eval.utils.stats import ExecutionStats

load_dotenv()

MODES = ("selection", "interpolation", "entities")


def build_search(
    args, logger: logging.Logger, stats: ExecutionStats
) -> tuple[GauntletSearch, dict[str, int | None]]:
    """Load inputs and build the search for the chosen mode, plus the run's declared ids."""
    settings = get_settings()

    answer_key = AnswerKey.from_file(args.answer_key or get_answer_key_path())
    answer_key.entity_counts()
    cluster_log = read_run_log(args.clusters or get_cluster_log_path())

    if args.mode == "interpolation":
        topic_log_path = args.topics or get_topic_log_path()
        if topic_log_path is None:
            raise ValueError("Interpolation mode needs --topics or TOPIC_LOG_PATH")
        topic_log = read_run_log(topic_log_path)
        axes = default_interpolation_axes()
        evaluator = interpolation_evaluator(cluster_log, topic_log, answer_key, stats=stats)
    elif args.mode == "entities":
        axes = default_selection_axes()
        evaluator = entity_evaluator(
            cluster_log, answer_key, matcher=EntityMatcher(warnings=True), stats=stats
        )
    else:
        axes = default_selection_axes()
        evaluator = selection_evaluator(cluster_log, answer_key, stats=stats)

    logger.info(f"Stories in run log: {len(cluster_log.stories())}")
    logger.info(f"Stories in answer key: {len(answer_key)}")
    logger.info(f"Template types: {', '.join(answer_key.template_types)}")
    declared = {
        template_type: cluster_log.declared_id(template_type)
        for template_type in answer_key.template_types
    }
    for template_type, declared_id in declared.items():
        if declared_id is not None:
            logger.info(f"Run declares {template_type} = {declared_id}")

    search = GauntletSearch(
        axes,
        evaluator,
        template_types=answer_key.template_types,
        max_workers=args.workers or settings.gauntlet_workers,
        stats=stats,
    )
    return search, declared


def main():
    parser = argparse.ArgumentParser(description="Grid-search cluster selection cutoffs")
    parser.add_argument("--mode", choices=MODES, default="selection", help="Gauntlet mode")
    add_input_arguments(parser)
    parser.add_argument("--csv", type=Path, default=None, help="Also write report rows to CSV")
    parser.add_argument("--workers", type=int, default=None, help="Grid points run concurrently")
    add_execute_argument(parser)
    args = parser.parse_args()

    settings = get_settings()
    logger = setup_logging("run_gauntlet", execute=args.execute, log_dir=settings.log_dir)
    stats = ExecutionStats(points=0, stories=0, no_gold=0, unseen=0)

    try:
        search, declared = build_search(args, logger, stats)
    except (FileNotFoundError, MalformedRecordError, ValueError) as e:
        logger.error(f"Cannot start gauntlet: {e}")
        sys.exit(1)

    if not args.execute:
        print_dry_run_header(f"Gauntlet ({args.mode})", logger)
        for axis in search.axes:
            logger.info(f"  {axis.name}: {list(axis.values)}")
        logger.info(f"  Grid points: {len(search)}")
        logger.info("")
        logger.info("To run the gauntlet, add --execute")
        return

    print_execute_header(f"Gauntlet ({args.mode})", logger)
    results = search.run()

    log_results(results, logger)
    for line in declared_lines(declared, results):
        logger.info(line)

    csv_path = args.csv or settings.report_csv_path
    if csv_path:
        write_csv(results, csv_path)

    logger.info("=" * 70)
    logger.info(f"Evaluated {len(results)} grid points | {stats.summary()}")
    logger.info("=" * 70)


if __name__ == "__main__":
    main()
