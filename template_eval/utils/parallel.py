"""
Parallel execution utilities for template_eval.

Runs independent work items (gauntlet grid points) on a thread pool with a
tqdm progress bar and per-item error capture.
"""

import logging
import sys
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TypeVar

from tqdm import tqdm

from template_eval.utils.stats import ExecutionStats

logger = logging.getLogger(__name__)

T = TypeVar("T")  # Input type
R = TypeVar("R")  # Result type


def execute_parallel(
    items: Iterable[T],
    worker_func: Callable[[T], R],
    max_workers: int = 4,
    desc: str = "Processing",
    unit: str = "item",
    show_progress: bool = True,
    error_handler: Callable[[T, Exception], None] | None = None,
    stats: ExecutionStats | None = None,
    stats_key: str | None = None,
) -> list[tuple[T, R | None, Exception | None]]:
    """
    Execute a function in parallel across multiple items with progress tracking.

    Args:
        items: Iterable of items to process
        worker_func: Function to call for each item (takes item, returns result)
        max_workers: Maximum number of parallel workers
        desc: Progress bar description
        unit: Progress bar unit name
        show_progress: Whether to show progress bar
        error_handler: Optional callback for errors (item, exception) -> None
        stats: Optional ExecutionStats instance for tracking
        stats_key: Optional key to increment in stats on success

    Returns:
        List of tuples (item, result, exception) in completion order

    Example:
        results = execute_parallel(points, search.evaluate, max_workers=4, unit="point")
        for point, result, error in results:
            if error:
                logger.error(f"{point.params} failed: {error}")
    """
    items_list = list(items)
    total = len(items_list)

    if total == 0:
        return []

    results: list[tuple[T, R | None, Exception | None]] = []

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_item = {executor.submit(worker_func, item): item for item in items_list}

        progress_bar = None
        if show_progress:
            progress_bar = tqdm(
                total=total,
                desc=desc,
                unit=unit,
                file=sys.stderr,  # Use stderr to avoid conflicts
                mininterval=1.0,  # Update at most once per second
                dynamic_ncols=True,
            )

        try:
            for future in as_completed(future_to_item):
                item = future_to_item[future]
                result = None
                error = None

                try:
                    result = future.result()
                    if stats and stats_key:
                        stats.increment(stats_key)

                except Exception as e:
                    error = e
                    if error_handler:
                        error_handler(item, e)
                    else:
                        logger.debug(f"Error processing {item}: {e}")
                    if stats:
                        stats.increment("failed")

                finally:
                    results.append((item, result, error))
                    if progress_bar:
                        progress_bar.update(1)

        finally:
            if progress_bar:
                progress_bar.close()

    return results
