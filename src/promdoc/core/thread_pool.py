"""
=============================================================================
THREAD POOL
=============================================================================

Runs each accepted connection as an independent unit of work, so a slow
client never blocks the accept loop or any other client.

    ┌─────────────────────────────────────────────────────────────────────┐
    │   accept loop ──submit(conn)──►  TASK QUEUE (bounded)               │
    │                                     │                               │
    │                                     │ get()                         │
    │                                     ▼                               │
    │        ┌──────────┐ ┌──────────┐ ┌──────────┐ ┌──────────┐          │
    │        │ Worker 0 │ │ Worker 1 │ │ Worker 2 │ │ Worker 3 │  ...     │
    │        │ (idle)   │ │ (busy)   │ │ (busy)   │ │ (idle)   │          │
    │        └──────────┘ └──────────┘ └──────────┘ └──────────┘          │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WORKER LIFECYCLE
=============================================================================

    def run(self):
        while not shutdown:
            task = queue.get()      ← blocks (with idle_timeout)
            if task is None:        ← poison pill
                break
            execute(task)           ← exceptions are logged, never raised
            queue.task_done()

=============================================================================
SHUTDOWN
=============================================================================

Shutdown never cancels work that was already submitted. It

    1. rejects new submissions,
    2. waits until every submitted task has FINISHED (queued and running),
       bounded by a timeout,
    3. sends one poison pill per worker and joins them.

This is what lets an in-flight response reach its client after the
operator presses Ctrl+C.

=============================================================================
SCALING
=============================================================================

min_workers threads start with the pool. When every worker is busy and
tasks are waiting, another worker is added, up to max_workers. Workers
are not scaled down.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """
    A deferred function call.

    Attributes:
        func: The function to execute.
        args: Positional arguments.
        kwargs: Keyword arguments.
        submitted_at: time.time() at submission, for queue-wait logging.
    """
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """Worker thread that processes tasks from the shared queue."""

    def __init__(
        self,
        pool: "ThreadPool",
        worker_id: int,
        idle_timeout: float = 60.0
    ):
        # daemon=True: a stuck worker never keeps the process alive past
        # the pool's shutdown timeout
        super().__init__(name=f"promdoc-worker-{worker_id}", daemon=True)

        self.pool = pool
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout

        self.state = WorkerState.IDLE
        self._shutdown = threading.Event()

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")
        task_queue = self.pool._task_queue

        while not self._shutdown.is_set():
            try:
                task = task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                continue

            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                task_queue.task_done()
                if task is not None:
                    self.pool._task_finished()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        """Run one task; a failing task is logged, never raised."""
        self.state = WorkerState.BUSY
        start_time = time.time()
        waited = start_time - task.submitted_at
        if waited > 1.0:
            logger.debug(f"Worker {self.worker_id}: task waited {waited:.2f}s in queue")

        try:
            task.func(*task.args, **task.kwargs)
        except Exception as e:
            elapsed = time.time() - start_time
            logger.exception(
                f"Worker {self.worker_id} task failed after {elapsed:.3f}s: {e}"
            )
        finally:
            self.state = WorkerState.IDLE

    def shutdown(self):
        self._shutdown.set()


class ThreadPool:
    """
    Bounded thread pool.

        pool = ThreadPool(min_workers=4, max_workers=16)
        pool.start()

        if not pool.submit(handle, args=(conn,)):
            ...                      # queue full: reject with 503

        pool.shutdown(wait=True, timeout=30)
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 128,
        idle_timeout: float = 60.0
    ):
        """
        Args:
            min_workers: Threads started with the pool.
            max_workers: Upper bound when scaling up under load.
            queue_size: Tasks that may wait for a worker; beyond this
                        submit() returns False.
            idle_timeout: How often an idle worker re-checks for shutdown.
        """
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.queue_size = queue_size
        self.idle_timeout = idle_timeout

        self._task_queue: queue.Queue[Optional[Task]] = queue.Queue(maxsize=queue_size)

        self._workers: list[Worker] = []
        self._lock = threading.Lock()  # Protects _workers
        self._started = False
        self._shutdown = False
        self._next_worker_id = 0

        # Submitted but not yet finished (queued + running)
        self._outstanding = 0
        self._outstanding_cond = threading.Condition()

    def start(self):
        if self._started:
            return

        logger.debug(f"Starting thread pool with {self.min_workers} workers")

        for _ in range(self.min_workers):
            self._add_worker()

        self._started = True
        self._shutdown = False

    def _add_worker(self) -> Worker:
        with self._lock:
            if len(self._workers) >= self.max_workers:
                raise RuntimeError("Maximum workers reached")

            worker = Worker(
                pool=self,
                worker_id=self._next_worker_id,
                idle_timeout=self.idle_timeout,
            )
            self._next_worker_id += 1
            self._workers.append(worker)
            worker.start()
            return worker

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
    ) -> bool:
        """
        Submit a task without waiting for queue space.

        Args:
            func: The function to execute.
            args: Positional arguments.
            kwargs: Keyword arguments.

        Returns:
            True if queued, False if the queue was full.

        Raises:
            RuntimeError: If the pool is not running.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        task = Task(func=func, args=args, kwargs=kwargs or {})

        with self._outstanding_cond:
            self._outstanding += 1

        try:
            self._task_queue.put(task, block=False)
        except queue.Full:
            self._task_finished()
            return False

        self._maybe_scale_up()
        return True

    def _task_finished(self):
        with self._outstanding_cond:
            self._outstanding -= 1
            if self._outstanding <= 0:
                self._outstanding_cond.notify_all()

    def _maybe_scale_up(self):
        """Add a worker when all are busy and tasks are waiting."""
        with self._lock:
            busy_count = sum(1 for w in self._workers if w.state == WorkerState.BUSY)
            at_capacity = busy_count == len(self._workers)
            if not at_capacity or len(self._workers) >= self.max_workers:
                return
            if self._task_queue.qsize() == 0:
                return
            logger.debug(
                f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers"
            )
        self._add_worker()

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every submitted task has finished.

        Returns:
            True if idle, False if timeout expired first.
        """
        with self._outstanding_cond:
            return self._outstanding_cond.wait_for(
                lambda: self._outstanding <= 0, timeout=timeout
            )

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the pool.

        Args:
            wait: Let submitted tasks (queued and running) finish first.
            timeout: Upper bound in seconds on that wait; remaining tasks
                     are abandoned to their daemon threads.
        """
        if not self._started:
            return

        logger.debug("Shutting down thread pool...")
        self._shutdown = True
        deadline = time.time() + timeout if timeout is not None else None

        if wait and not self.wait_idle(timeout):
            logger.warning(
                f"Shutdown timeout, abandoning {self.outstanding} unfinished connection(s)"
            )

        for _ in self._workers:
            try:
                self._task_queue.put(None, block=False)
            except queue.Full:
                pass  # Workers still exit via their shutdown event

        for worker in self._workers:
            worker.shutdown()
            remaining = None if deadline is None else max(deadline - time.time(), 0.1)
            worker.join(timeout=remaining)

        self._workers.clear()
        self._started = False

        logger.debug("Thread pool shutdown complete")

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def outstanding(self) -> int:
        """Tasks submitted and not yet finished."""
        return self._outstanding
