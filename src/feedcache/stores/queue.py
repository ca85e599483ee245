"""Serial execution queue shared by the store implementations."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from feedcache.cache.store import StoreError
from feedcache.result import Failure, Result

logger = logging.getLogger(__name__)


class SerialQueue:
    """Runs submitted jobs one at a time, in submission order.

    Backed by a single-worker thread pool. Stores submit every operation,
    completion call included, so side effects on one store never interleave.
    """

    def __init__(self, name: str = "feedcache-store"):
        self.name = name
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Enqueue ``fn(*args)``.

        Returns:
            Future for the job's return value

        Raises:
            RuntimeError: If the queue has been closed
        """
        return self._executor.submit(self._run, fn, *args)

    def deliver(
        self, job: Callable[[], Result], completion: Callable[[Result], None]
    ) -> Optional[Future]:
        """Enqueue ``job`` and pass its result to ``completion`` exactly once.

        An exception escaping ``job`` is delivered as ``Failure(StoreError)``.
        On a closed queue the failure is delivered on the calling thread.

        Args:
            job: Store operation returning a Success or Failure
            completion: Receives the job's result

        Returns:
            Future for the queued job, or None if the queue is closed
        """

        def run() -> None:
            try:
                result = job()
            except Exception as e:
                logger.exception(f"Unexpected error in {self.name} job")
                result = Failure(StoreError(f"Unexpected store error: {e}"))
            completion(result)

        try:
            return self.submit(run)
        except RuntimeError as e:
            logger.warning(f"Rejected job on closed queue {self.name}: {e}")
            completion(Failure(StoreError("Feed store is closed")))
            return None

    def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except Exception:
            logger.exception(f"Unhandled error in {self.name} job")
            raise

    def close(self) -> None:
        """Wait for pending jobs and stop the worker."""
        self._executor.shutdown(wait=True)
