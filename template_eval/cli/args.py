"""
Argument parsing utilities for template_eval CLI.

Provides standard argument patterns used across scripts. Input paths default
to None so that scripts can fall back to the .env settings.
"""

from pathlib import Path


def add_execute_argument(parser):
    """
    Add standard --execute argument to an ArgumentParser.

    Args:
        parser: argparse.ArgumentParser instance
    """
    parser.add_argument(
        "--execute",
        action="store_true",
        help="Actually run the evaluation and log to file (default is dry-run)",
    )


def add_input_arguments(parser, topics: bool = True):
    """
    Add run-log and answer-key path arguments.

    Args:
        parser: argparse.ArgumentParser instance
        topics: Whether to add --topics as well
    """
    parser.add_argument(
        "--answer-key",
        type=Path,
        default=None,
        help="MUC answer key file (default: ANSWER_KEY_PATH)",
    )
    parser.add_argument(
        "--clusters",
        type=Path,
        default=None,
        help="Run log with cluster guesses (default: CLUSTER_LOG_PATH)",
    )
    if topics:
        parser.add_argument(
            "--topics",
            type=Path,
            default=None,
            help="Run log with topic guesses (default: TOPIC_LOG_PATH)",
        )
