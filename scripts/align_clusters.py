#!/usr/bin/env python3
"""
Align the clusters of one run log to the topics of another and print the mapping.

Cluster definitions ("Cluster id=...") are read from --clusters and topic
definitions ("Topic id=...") from --topics; both may be the same file.

Usage:
    python scripts/align_clusters.py --clusters clusters.log --topics topics.log
    python scripts/align_clusters.py --execute    # also write the log file
"""

import argparse
import sys

from dotenv import load_dotenv

from template_eval.cli import (
    add_execute_argument,
    add_input_arguments,
    print_execute_header,
    setup_logging,
)
from template_eval.clusters.alignment import align_clusters_to_topics
from template_eval.config import get_settings
from template_eval.constants import UNMAPPED_ID
from template_eval.domain.models import MalformedRecordError
from template_eval.ingest.run_log import read_run_log

load_dotenv()


def main():
    parser = argparse.ArgumentParser(description="Align induced clusters to topics")
    add_input_arguments(parser)
    add_execute_argument(parser)
    args = parser.parse_args()

    settings = get_settings()
    logger = setup_logging("align_clusters", execute=args.execute, log_dir=settings.log_dir)

    cluster_log_path = args.clusters or settings.cluster_log_path
    topic_log_path = args.topics or settings.topic_log_path or cluster_log_path
    if cluster_log_path is None:
        logger.error("No cluster run log given (--clusters or CLUSTER_LOG_PATH)")
        sys.exit(1)

    try:
        cluster_log = read_run_log(cluster_log_path)
        topic_log = (
            cluster_log if topic_log_path == cluster_log_path else read_run_log(topic_log_path)
        )
    except (FileNotFoundError, MalformedRecordError) as e:
        logger.error(f"Cannot read run log: {e}")
        sys.exit(1)

    print_execute_header("Cluster to Topic Alignment", logger)
    logger.info(f"Clusters: {len(cluster_log.clusters)}  Topics: {len(topic_log.topics)}")

    alignment = align_clusters_to_topics(cluster_log.clusters, topic_log.topics)

    logger.info("")
    for cluster in cluster_log.clusters:
        topic_id = alignment.topic_for(cluster.id)
        label = "unmapped" if topic_id == UNMAPPED_ID else str(topic_id)
        logger.info(f"  Cluster {cluster.id:>5} -> Topic {label}")
        logger.debug(f"    {cluster.to_record(settings.max_serialized_tokens)}")

    mapped = sum(1 for topic in alignment.mapping.values() if topic != UNMAPPED_ID)
    logger.info("")
    logger.info(f"Mapped {mapped}/{len(alignment)} clusters")
    if alignment.unaligned_topics:
        logger.info(f"Unaligned topics: {', '.join(map(str, alignment.unaligned_topics))}")


if __name__ == "__main__":
    main()
