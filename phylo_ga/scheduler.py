"""
Fitness scheduling.

A single bounded worker pool shared by every individual of a run, plus the
run context that owns it together with the individual id counter.
"""

import itertools
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Hashable, Optional


class FitnessScheduler:
    """
    Bounded worker pool for fitness computations.

    Tasks are keyed by the caller (normally an individual id). The
    key -> Future registry is the only shared mutable structure; it is
    guarded by a lock and entries are removed when their task finishes.
    """

    def __init__(self, max_workers: Optional[int] = None):
        """
        Args:
            max_workers: Number of worker threads (defaults to CPU count)
        """
        self.max_workers = max_workers or os.cpu_count() or 1
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="fitness",
        )
        self._pending: Dict[Hashable, Future] = {}
        self._lock = threading.Lock()

    def submit(self, key: Hashable, fn: Callable[[], Any]) -> Future:
        """
        Queue a task and register it under key.

        Args:
            key: Registry key for the task
            fn: Zero-argument callable to run on a worker

        Returns:
            Future for the task result
        """
        with self._lock:
            future = self._executor.submit(fn)
            self._pending[key] = future
        future.add_done_callback(lambda _: self._forget(key))
        return future

    def _forget(self, key: Hashable) -> None:
        with self._lock:
            self._pending.pop(key, None)

    def is_pending(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._pending

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def wait_for(self, key: Hashable) -> None:
        """Block until the task registered under key finishes, if it is still registered."""
        with self._lock:
            future = self._pending.get(key)
        if future is not None:
            future.result()

    def shutdown(self) -> None:
        """
        Stop the pool immediately.

        Outstanding tasks are not waited for and queued ones are cancelled.
        Fitness reads after shutdown have no defined result.
        """
        self._executor.shutdown(wait=False, cancel_futures=True)


class RunContext:
    """
    Process-wide resources for one GA run.

    Owns the fitness scheduler and the monotonic individual id counter, so
    neither has to be hidden global state. Call shutdown() (or use the
    context as a ``with`` block) once the run is over.
    """

    def __init__(self, max_workers: Optional[int] = None):
        self.scheduler = FitnessScheduler(max_workers)
        self._ids = itertools.count()
        self._id_lock = threading.Lock()

    def next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def shutdown(self) -> None:
        self.scheduler.shutdown()

    def __enter__(self) -> "RunContext":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.shutdown()
