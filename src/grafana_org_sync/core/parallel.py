"""
Bounded parallel map for fanning out backend requests.

Used for paged user listing and per-user membership lookups.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Hashable, Iterable, Optional, TypeVar

from .constants import DEFAULT_WORKER_COUNT
from .errors import ParallelFetchError

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


def parallel_map(
    items: Iterable[K],
    fn: Callable[[K], V],
    worker_count: int = DEFAULT_WORKER_COUNT,
    operation: str = "fetch",
    logger: Optional[logging.Logger] = None
) -> Dict[K, V]:
    """
    Apply fn to every item on a bounded pool of worker threads.

    All items are processed even if some of them fail. The pool is drained
    before anything is returned, and a single failure fails the whole call:
    callers never see a partial result.

    Args:
        items: Unique, hashable work items (offsets, users, ...)
        fn: Function fetching the result for one item
        worker_count: Number of concurrent workers
        operation: Short description used in log lines and errors
        logger: Logger instance

    Returns:
        Dictionary mapping each item to its result

    Raises:
        ValueError: If worker_count is not positive
        ParallelFetchError: If at least one item failed
    """
    if worker_count < 1:
        raise ValueError(f"worker_count must be positive, got {worker_count}")

    logger = logger or logging.getLogger(__name__)
    work = list(items)
    results: Dict[K, V] = {}
    failed = 0

    with ThreadPoolExecutor(max_workers=worker_count) as executor:
        future_to_item = {executor.submit(fn, item): item for item in work}

        for future in as_completed(future_to_item):
            item = future_to_item[future]
            try:
                results[item] = future.result()
            except Exception as e:
                failed += 1
                logger.error(f"Failed to {operation} for {item!r}: {e}")

    if failed:
        raise ParallelFetchError(failed, len(work), operation)

    logger.debug(f"Completed {operation} for {len(work)} items")
    return results
