"""Per-repository task scheduling: sequential or a bounded thread pool."""

from __future__ import annotations

import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, TypeVar

from .logging import get_logger

logger = get_logger("scheduler")

T = TypeVar("T")
R = TypeVar("R")

_SKIPPED = object()


class SequentialScheduler:
    """Run units one at a time on the calling thread."""

    def __init__(self) -> None:
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop after the unit in flight; remaining units are dropped."""
        self._cancelled.set()

    def _guarded(self, fn: Callable[[T], R], item: T):
        if self._cancelled.is_set():
            return _SKIPPED
        return fn(item)

    def map(self, fn: Callable[[T], R], items: Iterable[T]) -> list[R]:
        results = []
        for item in items:
            value = self._guarded(fn, item)
            if value is _SKIPPED:
                break
            results.append(value)
        return results


class PoolScheduler(SequentialScheduler):
    """Run units on a bounded worker pool; results keep input order."""

    def __init__(self, workers: int | None = None) -> None:
        super().__init__()
        self.workers = max(1, workers or os.cpu_count() or 1)

    def map(self, fn: Callable[[T], R], items: Iterable[T]) -> list[R]:
        items = list(items)
        done: dict[int, R] = {}
        executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="repofleet")
        try:
            futures = {executor.submit(self._guarded, fn, item): i for i, item in enumerate(items)}
            for future in as_completed(futures):
                value = future.result()
                if value is not _SKIPPED:
                    done[futures[future]] = value
        except BaseException:
            # Ctrl-C or a unit raised: let in-flight units finish, drop the queue.
            self.cancel()
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        if len(done) < len(items):
            logger.info("Cancelled: %d of %d units not run", len(items) - len(done), len(items))
        # Buffer by input index, emit in input order (not completion order).
        return [done[i] for i in sorted(done)]


def make_scheduler(parallel: bool = False, workers: int | None = None) -> SequentialScheduler:
    """Pick the scheduling strategy; the aggregation contract is the same either way."""
    if parallel and (workers is None or workers > 1):
        return PoolScheduler(workers)
    return SequentialScheduler()
