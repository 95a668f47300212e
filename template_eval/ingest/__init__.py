"""Readers for run logs and MUC answer keys."""

from template_eval.ingest.answer_key import AnswerKey
from template_eval.ingest.run_log import RunLog, parse_run_log, read_run_log

__all__ = ["AnswerKey", "RunLog", "parse_run_log", "read_run_log"]
