"""
Cluster operations.

- Alignment: greedy one-to-one matching of clusters to topics
- Interpolation: mixing cluster and topic scores per document
- Selection: sorting, trimming and id-level unions of cluster lists
"""

from template_eval.clusters.alignment import Alignment, align_clusters_to_topics
from template_eval.clusters.interpolation import interpolate
from template_eval.clusters.selection import (
    collapse_duplicate_ids,
    exclude_seen,
    merge_all,
    sort_and_trim_cutoff,
    sort_and_trim_first_n,
    sort_desc_by_score,
    trim_by_cutoff,
    trim_first_n,
    union_excluding_seen,
)

__all__ = [
    "Alignment",
    "align_clusters_to_topics",
    "interpolate",
    "sort_desc_by_score",
    "trim_first_n",
    "trim_by_cutoff",
    "sort_and_trim_first_n",
    "sort_and_trim_cutoff",
    "exclude_seen",
    "union_excluding_seen",
    "collapse_duplicate_ids",
    "merge_all",
]
