"""
Task manager module for parallel processing.

Provides a thread-based worker pool, task chunking and per-worker resources
that are built lazily and never shared between workers.
"""

import os
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskChunker:
    """Utility class to divide a list of tasks into chunks for parallel processing."""

    @staticmethod
    def chunk_by_size(tasks: List[Any], chunk_size: int) -> List[List[Any]]:
        """
        Divide tasks into chunks of specified size.

        Args:
            tasks: List of tasks to divide
            chunk_size: Maximum size of each chunk

        Returns:
            List of task chunks
        """
        if not tasks:
            return []
        if chunk_size <= 0:
            chunk_size = 1

        return [tasks[i:i + chunk_size] for i in range(0, len(tasks), chunk_size)]


class WorkerResources(Generic[T]):
    """
    One lazily built resource per worker thread.

    The resource is created by ``factory`` the first time a thread asks for
    it and is then reused by that thread only.
    """

    def __init__(self, factory: Callable[[], T]):
        self._factory = factory
        self._local = threading.local()
        self._created_lock = threading.Lock()
        self._created = 0

    def get(self) -> T:
        resource = getattr(self._local, "resource", None)
        if resource is None:
            resource = self._factory()
            self._local.resource = resource
            with self._created_lock:
                self._created += 1
            logger.debug(f"Created worker resource in thread {threading.current_thread().name}")
        return resource

    @property
    def created(self) -> int:
        """Number of resources built so far, at most one per worker."""
        with self._created_lock:
            return self._created


class ThreadWorkerPool:
    """Worker pool using concurrent.futures.ThreadPoolExecutor."""

    def __init__(self, num_workers: Optional[int] = None, thread_name_prefix: str = "ovlrefine-worker"):
        """
        Initialize worker pool.

        Args:
            num_workers: Number of worker threads. Defaults to CPU count.
            thread_name_prefix: Prefix for worker thread names
        """
        resolved_workers = num_workers
        if not isinstance(resolved_workers, int) or resolved_workers <= 0:
            resolved_workers = os.cpu_count() or 4
        self.num_workers = resolved_workers
        self.thread_name_prefix = thread_name_prefix
        self._pool: Optional[ThreadPoolExecutor] = None

    def _create_pool(self):
        if self._pool is None:
            logger.debug(f"Creating ThreadPoolExecutor with {self.num_workers} workers.")
            self._pool = ThreadPoolExecutor(max_workers=self.num_workers,
                                            thread_name_prefix=self.thread_name_prefix)

    def _close_pool(self):
        if self._pool is not None:
            logger.debug("Shutting down ThreadPoolExecutor.")
            self._pool.shutdown(wait=True)
            self._pool = None

    def map(self, func: Callable, tasks: List[Any],
            on_done: Optional[Callable[[Any], None]] = None) -> List[Any]:
        """
        Apply function to each task in parallel using threads.

        Args:
            func: Function to apply to each task.
            tasks: List of tasks.
            on_done: Called from the submitting thread with each result as it completes.

        Returns:
            List of results in the same order as tasks.

        Raises:
            Exception: Re-raises the first exception encountered in a worker.
        """
        if not tasks:
            return []

        if self._pool is None:
            self._create_pool()

        results = [None] * len(tasks)
        future_to_index = {self._pool.submit(func, task): i for i, task in enumerate(tasks)}

        try:
            for future in as_completed(list(future_to_index)):
                index = future_to_index[future]
                results[index] = future.result()
                if on_done is not None:
                    on_done(results[index])
        except Exception as e:
            logger.error(f"Error during ThreadPoolExecutor execution: {e}", exc_info=True)
            for future in future_to_index:
                future.cancel()
            self._close_pool()
            raise

        return results

    def __enter__(self):
        self._create_pool()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._close_pool()
