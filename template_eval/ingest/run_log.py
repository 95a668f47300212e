"""
Run-log reader.

A run log is the debug output of a template-induction run. Only a handful of
line shapes carry records; everything else is free-form chatter and ignored:

    43: (43/??) DEV-MUC3-0043          story header
    Top 0   112       0.0251           document-level cluster (rank, id, score)
    SigSent 0.232 24                   sentence-level cluster (score, id)
    Adding Consistent 0.71 7           high-confidence cluster (score, id)
    Adding Consistent2 id=7 score=...  same, older record form
    Cluster KIDNAP = 24                type declaration (also Topic / Frame map)
      Cluster id=24 score=... [ ... ]  cluster definition (also Topic id=...)
    Fill 24 the urban guerrillas       entity-fill guess of a candidate

A line that has a record shape but fails to parse is fatal.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from template_eval.clusters.selection import collapse_duplicate_ids
from template_eval.domain.models import MalformedRecordError, ScoredCluster

logger = logging.getLogger(__name__)

STORY_HEADER = re.compile(r"^\d+: .*\S")
TOP_CLUSTER = re.compile(r"^Top \d+\s+\S+\s+.*")
SIG_SENTENCE = re.compile(r"^SigSent2? .*")
CONSISTENT_RECORD = re.compile(r"^Adding Consistent2? id.+")
CONSISTENT_SCORE = re.compile(r"^Adding Consistent2? \d.+")
CLUSTER_TYPE = re.compile(r"^Cluster [A-Za-z]+ = \S+")
TOPIC_TYPE = re.compile(r"^Topic [A-Za-z]+ = \S+")
FRAME_MAP = re.compile(r"^Frame map [A-Za-z]+: \S+")
CLUSTER_DEFINITION = re.compile(r"^\s*Cluster id=.+")
TOPIC_DEFINITION = re.compile(r"^\s*Topic id=.+")
FILL_GUESS = re.compile(r"^Fill (\S+) (.*\S)")


@dataclass
class RunLog:
    """
    Everything one run log declares.

    Per-story maps are keyed by the story key as written in the log.
    type_declarations holds the (name, id) pairs the induction run itself
    assigned; they are reported next to the search results, never scored.
    """

    doc_clusters: dict[str, list[ScoredCluster]] = field(default_factory=dict)
    sentence_clusters: dict[str, list[ScoredCluster]] = field(default_factory=dict)
    sig_clusters: dict[str, list[ScoredCluster]] = field(default_factory=dict)
    fills: dict[str, dict[int, list[str]]] = field(default_factory=dict)
    type_declarations: list[tuple[str, int]] = field(default_factory=list)
    clusters: list[ScoredCluster] = field(default_factory=list)
    topics: list[ScoredCluster] = field(default_factory=list)

    def stories(self) -> list[str]:
        """Story keys in sorted order."""
        return sorted(self.doc_clusters)

    def docs(self, story: str) -> list[ScoredCluster]:
        return self.doc_clusters.get(story, [])

    def sentences(self, story: str) -> list[ScoredCluster]:
        return self.sentence_clusters.get(story, [])

    def sigs(self, story: str) -> list[ScoredCluster]:
        return self.sig_clusters.get(story, [])

    def fills_for(self, story: str, candidate_id: int) -> list[str]:
        """Entity-fill guesses of one candidate in one story."""
        return self.fills.get(story, {}).get(candidate_id, [])

    def declared_id(self, template_type: str) -> int | None:
        """
        Id the run declared for a template type, None if it declared none.

        Declared names may be shortened ("KIDNAP" for KIDNAPPING); the first
        declaration whose name starts the type name wins.
        """
        wanted = template_type.upper()
        for name, declared in self.type_declarations:
            if wanted.startswith(name.upper()):
                return declared
        return None

    def candidate_ids(self) -> list[int]:
        """Every cluster id guessed or filled in any story, ascending."""
        ids: set[int] = set()
        for per_story in (self.doc_clusters, self.sentence_clusters, self.sig_clusters):
            for clusters in per_story.values():
                ids.update(cluster.id for cluster in clusters)
        for story_fills in self.fills.values():
            ids.update(story_fills)
        return sorted(ids)

    def start_story(self, story: str) -> None:
        self.doc_clusters[story] = []
        self.sentence_clusters[story] = []
        self.sig_clusters[story] = []
        self.fills[story] = {}


def _scored(cluster_id: str, score: str) -> ScoredCluster:
    return ScoredCluster(id=int(cluster_id), score=float(score))


def _parse_line(line: str, run_log: RunLog, story: str | None) -> str | None:
    """Apply one line to the run log and return the (possibly new) current story."""
    if STORY_HEADER.match(line):
        story = line.split()[-1]
        run_log.start_story(story)
        return story

    if CLUSTER_TYPE.match(line) or TOPIC_TYPE.match(line):
        parts = line.split()
        run_log.type_declarations.append((parts[1], int(parts[3])))
        logger.debug(f"{parts[0]} type set {parts[1]} to {parts[3]}")
        return story

    if FRAME_MAP.match(line):
        parts = line.split()
        run_log.type_declarations.append((parts[2].rstrip(":"), int(parts[3])))
        return story

    if CLUSTER_DEFINITION.match(line):
        run_log.clusters.append(ScoredCluster.from_record(line[line.index("id=") :]))
        return story

    if TOPIC_DEFINITION.match(line):
        run_log.topics.append(ScoredCluster.from_record(line[line.index("id=") :]))
        return story

    per_story = (
        TOP_CLUSTER.match(line)
        or SIG_SENTENCE.match(line)
        or CONSISTENT_RECORD.match(line)
        or CONSISTENT_SCORE.match(line)
        or FILL_GUESS.match(line)
    )
    if not per_story:
        return story
    if story is None:
        raise MalformedRecordError("record before any story header")

    if TOP_CLUSTER.match(line):
        parts = line.split()
        run_log.doc_clusters[story].append(_scored(parts[2], parts[3]))
    elif SIG_SENTENCE.match(line):
        parts = line.split()
        run_log.sentence_clusters[story].append(_scored(parts[2], parts[1]))
    elif CONSISTENT_RECORD.match(line):
        run_log.sig_clusters[story].append(ScoredCluster.from_record(line[line.index("id=") :]))
    elif CONSISTENT_SCORE.match(line):
        parts = line.split()
        run_log.sig_clusters[story].append(_scored(parts[3], parts[2]))
    else:
        match = FILL_GUESS.match(line)
        candidate_id = int(match.group(1))
        run_log.fills[story].setdefault(candidate_id, []).append(match.group(2))
    return story


def parse_run_log(lines: Iterable[str]) -> RunLog:
    """
    Parse run-log lines.

    Raises:
        MalformedRecordError: With the 1-based line number of the first bad record
    """
    run_log = RunLog()
    story = None
    for number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        try:
            story = _parse_line(line, run_log, story)
        except (ValueError, IndexError) as e:
            raise MalformedRecordError(f"Line {number}: {e} ({line!r})") from e

    for story_key, sentences in run_log.sentence_clusters.items():
        run_log.sentence_clusters[story_key] = collapse_duplicate_ids(sentences)

    if not run_log.type_declarations:
        logger.warning("Run log declares no template type ids")
    return run_log


def read_run_log(path: Path) -> RunLog:
    """
    Read a run log from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist
        MalformedRecordError: If a record line can't be parsed
    """
    logger.info(f"Reading run log: {path}")
    with open(path, encoding="utf-8") as f:
        run_log = parse_run_log(f)
    logger.info(
        f"Read {len(run_log.doc_clusters)} stories, {len(run_log.clusters)} clusters, "
        f"{len(run_log.topics)} topics from {path.name}"
    )
    return run_log
