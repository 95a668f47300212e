"""Common CLI utilities for template_eval scripts."""

from template_eval.cli.args import add_execute_argument, add_input_arguments
from template_eval.cli.logging import (
    print_dry_run_header,
    print_execute_header,
    setup_logging,
)

__all__ = [
    "add_execute_argument",
    "add_input_arguments",
    "setup_logging",
    "print_dry_run_header",
    "print_execute_header",
]
