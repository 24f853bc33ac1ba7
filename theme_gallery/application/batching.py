"""Bounded-concurrency batch execution and retry policy."""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most ``size`` items."""
    if size < 1:
        raise ValueError("Batch size must be positive")
    for start in range(0, len(items), size):
        yield items[start:start + size]


def run_batches(
    items: Sequence[T],
    batch_size: int,
    per_item: Callable[[T], R],
    inter_batch_delay: float = 0.0,
    cancel_event: Optional[threading.Event] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> List[R]:
    """
    Run ``per_item`` over ``items``, one batch at a time.

    Items inside a batch run concurrently; a batch only starts once the
    previous one is done. Results come back in input order. When
    ``cancel_event`` is set, no further batch is started and the results
    gathered so far are returned.

    Args:
        items: Work items
        batch_size: Maximum number of items in flight
        per_item: Function applied to each item; exceptions propagate
        inter_batch_delay: Seconds to pause between batches
        cancel_event: Optional event that stops the run between batches
        sleep: Sleep function (injectable for tests)

    Returns:
        Results for every processed item
    """
    results: List[R] = []
    batches = list(chunked(items, batch_size))

    with ThreadPoolExecutor(max_workers=batch_size) as executor:
        for index, batch in enumerate(batches):
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Cancelled after {len(results)}/{len(items)} items")
                break

            results.extend(executor.map(per_item, batch))

            if inter_batch_delay > 0 and index < len(batches) - 1:
                sleep(inter_batch_delay)

    return results


@dataclass
class RetryPolicy:
    """
    Retry an operation while its outcome asks for it.

    The operation returns an outcome value instead of raising; the predicate
    decides from that value whether another attempt is worthwhile.
    """

    max_attempts: int = 3
    backoff_seconds: float = 1.0
    backoff_factor: float = 2.0
    retry_predicate: Callable[[object], bool] = lambda outcome: False

    def delay_for(self, attempt: int) -> float:
        return self.backoff_seconds * (self.backoff_factor ** attempt)

    def run(self, operation: Callable[[], R], sleep: Callable[[float], None] = time.sleep) -> R:
        outcome = operation()
        for attempt in range(1, self.max_attempts):
            if not self.retry_predicate(outcome):
                break
            delay = self.delay_for(attempt - 1)
            logger.warning(f"Retrying in {delay}s (attempt {attempt + 1}/{self.max_attempts})")
            sleep(delay)
            outcome = operation()
        return outcome
