"""
Unit tests for the worker thread pool.
"""

import logging
import threading
import time

import pytest

from promdoc.core.thread_pool import ThreadPool


@pytest.fixture
def pool():
    pool = ThreadPool(min_workers=2, max_workers=4, queue_size=4, idle_timeout=0.1)
    pool.start()
    yield pool
    pool.shutdown(wait=False, timeout=1.0)


class TestThreadPool:

    def test_runs_tasks(self, pool: ThreadPool):
        done = threading.Event()

        assert pool.submit(done.set) is True
        assert done.wait(2.0)

    def test_submit_before_start(self):
        with pytest.raises(RuntimeError):
            ThreadPool().submit(lambda: None)

    def test_failing_task_does_not_kill_worker(self, pool: ThreadPool, caplog):
        done = threading.Event()

        def boom():
            raise ValueError("boom")

        with caplog.at_level(logging.ERROR, logger="promdoc.core.thread_pool"):
            pool.submit(boom)
            pool.submit(boom)
            pool.submit(done.set)

            assert done.wait(2.0)
            assert pool.wait_idle(2.0)

        failures = [r for r in caplog.records if "task failed" in r.getMessage()]
        assert len(failures) == 2

    def test_tasks_run_concurrently(self, pool: ThreadPool):
        barrier = threading.Barrier(2, timeout=2.0)
        results = []

        def meet():
            barrier.wait()
            results.append(True)

        pool.submit(meet)
        pool.submit(meet)

        assert pool.wait_idle(3.0)
        assert results == [True, True]

    def test_full_queue_rejects(self):
        pool = ThreadPool(min_workers=1, max_workers=1, queue_size=1, idle_timeout=0.1)
        pool.start()
        release = threading.Event()
        started = threading.Event()

        def block():
            started.set()
            release.wait(5.0)

        try:
            assert pool.submit(block)
            assert started.wait(2.0)
            assert pool.submit(block)          # waits in the queue
            assert pool.submit(block) is False  # queue full
            assert pool.outstanding == 2
        finally:
            release.set()
            pool.shutdown(wait=True, timeout=5.0)

    def test_shutdown_waits_for_running_tasks(self):
        pool = ThreadPool(min_workers=1, max_workers=1, queue_size=4, idle_timeout=0.1)
        pool.start()
        finished = []

        def slow():
            time.sleep(0.3)
            finished.append(True)

        pool.submit(slow)
        pool.submit(slow)
        pool.shutdown(wait=True, timeout=5.0)

        assert finished == [True, True]
        assert pool.outstanding == 0

    def test_shutdown_timeout(self):
        pool = ThreadPool(min_workers=1, max_workers=1, queue_size=4, idle_timeout=0.1)
        pool.start()
        release = threading.Event()
        pool.submit(release.wait, args=(5.0,))

        start = time.time()
        pool.shutdown(wait=True, timeout=0.3)

        assert time.time() - start < 2.0
        release.set()

    def test_submit_after_shutdown(self, pool: ThreadPool):
        pool.shutdown(wait=True, timeout=1.0)

        with pytest.raises(RuntimeError):
            pool.submit(lambda: None)
