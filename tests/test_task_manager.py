"""
Unit tests for parallel processing functionality.
"""

import threading
import time
import unittest

from ovlrefine.parallel.task_manager import TaskChunker, ThreadWorkerPool, WorkerResources


def square(x):
    """Square a number."""
    return x * x


def slow_square(x):
    """Square a number with delay."""
    time.sleep(0.01)
    return x * x


def sometimes_fails(x):
    """Function that fails for certain inputs."""
    if x % 5 == 0:
        raise ValueError(f"Value not allowed: {x}")
    return x * 2


class TestTaskChunker(unittest.TestCase):
    """Tests for TaskChunker class."""

    def test_chunk_by_size(self):
        chunks = TaskChunker.chunk_by_size([1, 2, 3, 4, 5, 6, 7], 2)
        self.assertEqual(chunks, [[1, 2], [3, 4], [5, 6], [7]])

    def test_chunk_by_size_invalid_size(self):
        self.assertEqual(TaskChunker.chunk_by_size([1, 2], 0), [[1], [2]])

    def test_chunks_are_disjoint_and_complete(self):
        indices = list(range(103))
        chunks = TaskChunker.chunk_by_size(indices, 16)
        flattened = [i for chunk in chunks for i in chunk]
        self.assertEqual(flattened, indices)


class TestWorkerResources(unittest.TestCase):

    def test_lazy_creation(self):
        resources = WorkerResources(object)
        self.assertEqual(resources.created, 0)
        first = resources.get()
        self.assertIs(resources.get(), first)
        self.assertEqual(resources.created, 1)

    def test_one_resource_per_thread(self):
        resources = WorkerResources(object)
        seen = {}
        barrier = threading.Barrier(3)

        def worker(name):
            barrier.wait()
            seen[name] = (resources.get(), resources.get())

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(resources.created, 3)
        for first, second in seen.values():
            self.assertIs(first, second)
        self.assertEqual(len({id(first) for first, _ in seen.values()}), 3)


class TestThreadWorkerPool(unittest.TestCase):

    def test_thread_pool_basic(self):
        with ThreadWorkerPool(num_workers=2) as pool:
            results = pool.map(square, [1, 2, 3, 4, 5])
        self.assertEqual(results, [1, 4, 9, 16, 25])

    def test_order_preserved(self):
        with ThreadWorkerPool(num_workers=4) as pool:
            results = pool.map(slow_square, list(range(20)))
        self.assertEqual(results, [x * x for x in range(20)])

    def test_empty_tasks(self):
        with ThreadWorkerPool(num_workers=2) as pool:
            self.assertEqual(pool.map(square, []), [])

    def test_default_workers(self):
        pool = ThreadWorkerPool(num_workers=0)
        self.assertGreaterEqual(pool.num_workers, 1)

    def test_on_done_called_for_every_task(self):
        done = []
        with ThreadWorkerPool(num_workers=3) as pool:
            pool.map(square, [1, 2, 3, 4], on_done=done.append)
        self.assertEqual(sorted(done), [1, 4, 9, 16])

    def test_error_handling(self):
        """Test that worker errors are propagated."""
        with self.assertRaises(ValueError):
            with ThreadWorkerPool(num_workers=2) as pool:
                pool.map(sometimes_fails, [1, 2, 5, 7])

    def test_worker_thread_names(self):
        with ThreadWorkerPool(num_workers=2, thread_name_prefix="refine-test") as pool:
            names = pool.map(lambda _: threading.current_thread().name, [1, 2, 3])
        self.assertTrue(all(name.startswith("refine-test") for name in names))
