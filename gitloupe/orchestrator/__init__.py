"""
Task Orchestrator — Parallel execution for snapshot builds

A snapshot build reads every loose object independently, so the reads fan
out over an IOPool and come back in scan order. The git augmentation step
runs as one bounded call: when it overruns, the caller gets a FAILED result
at the deadline and signals its own worker to stop.

Usage:
    from gitloupe.orchestrator import get_orchestrator

    orchestrator = get_orchestrator()

    # One TaskResult per item, in item order, one deadline for the batch
    results = orchestrator.map_results(load_one, hashes)

    # Bounded single call
    result = orchestrator.run_with_timeout(augment, timeout=30.0)

Configuration via environment variables:
    GITLOUPE_PARALLEL_ENABLED=true    # Enable/disable parallel reads
    GITLOUPE_IO_WORKERS=8             # Thread pool size
    GITLOUPE_TASK_TIMEOUT=60          # Batch deadline (seconds)
"""

import threading
from concurrent.futures import Future, wait as wait_for
from typing import Any, Callable, Dict, Iterable, List, Optional

from .task import Task, TaskStatus, TaskResult, io_task, execute_task
from .config import OrchestratorConfig
from .pools import IOPool


def timed_out(wait: float) -> TaskResult:
    return TaskResult(
        task_id="",
        status=TaskStatus.FAILED,
        error=f"Timed out after {wait:g}s",
        error_kind="timeout",
    )


class TaskOrchestrator:
    """
    Runs read tasks on an IOPool, or inline when parallelism is disabled.

    The pool is created on first submit, so an orchestrator that never
    runs anything never starts threads.
    """

    def __init__(self, config: Optional[OrchestratorConfig] = None):
        self._config = config or OrchestratorConfig.from_env()
        self._config.validate()

        self._lock = threading.Lock()
        self._pool: Optional[IOPool] = None
        self._closed = False

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    def _get_pool(self) -> IOPool:
        with self._lock:
            if self._closed:
                raise RuntimeError("Orchestrator is shut down")
            if self._pool is None:
                self._pool = IOPool(self._config.io_workers)
            return self._pool

    def submit(self, task: Task) -> Future:
        """
        Future resolving to the task's TaskResult.

        Raises:
            RuntimeError: If the orchestrator is shut down
        """
        if not self._config.enabled:
            if self._closed:
                raise RuntimeError("Orchestrator is shut down")
            done = Future()
            done.set_result(execute_task(task))
            return done
        return self._get_pool().submit(task)

    def map_results(
        self,
        fn: Callable,
        items: Iterable[Any],
        timeout: Optional[float] = None
    ) -> List[TaskResult]:
        """
        Apply fn to each item. Failures come back as FAILED results
        rather than raising.

        Args:
            fn: Single-argument callable
            items: Items to process
            timeout: Deadline for the whole batch (default: config.task_timeout).
                Items unfinished at the deadline are cancelled and reported
                with error_kind "timeout".

        Returns:
            TaskResults in the same order as items
        """
        items = list(items)
        if not items:
            return []

        deadline = timeout if timeout is not None else self._config.task_timeout
        futures = [self.submit(io_task(fn=fn, args=(item,), timeout=deadline)) for item in items]
        return self._settle(futures, deadline)

    def run_with_timeout(
        self,
        fn: Callable,
        args: tuple = (),
        kwargs: Dict[str, Any] = None,
        timeout: Optional[float] = None,
        name: str = ""
    ) -> TaskResult:
        """
        Run one call, giving up after timeout.

        On timeout a FAILED result with error_kind "timeout" is returned at
        the deadline. A call that already started keeps its worker until it
        returns, so long-running callers check a stop flag of their own.
        """
        deadline = timeout if timeout is not None else self._config.task_timeout
        task = io_task(fn=fn, args=args, kwargs=kwargs, name=name, timeout=deadline)
        return self._settle([self.submit(task)], deadline)[0]

    def _settle(self, futures: List[Future], deadline: float) -> List[TaskResult]:
        wait_for(futures, timeout=deadline)
        results = []
        for future in futures:
            if future.done() and not future.cancelled():
                results.append(future.result())
            else:
                future.cancel()
                results.append(timed_out(deadline))
        return results

    def shutdown(self, wait: bool = True, cancel_pending: bool = False) -> None:
        """
        Args:
            wait: Block until running tasks return
            cancel_pending: Drop tasks that have not started
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            pool = self._pool

        if pool is not None:
            pool.shutdown(wait=wait, cancel_pending=cancel_pending)


_orchestrator: Optional[TaskOrchestrator] = None
_orchestrator_lock = threading.Lock()


def get_orchestrator() -> TaskOrchestrator:
    """Process-wide orchestrator, configured from the environment."""
    global _orchestrator

    if _orchestrator is None:
        with _orchestrator_lock:
            if _orchestrator is None:
                _orchestrator = TaskOrchestrator()

    return _orchestrator


def reset_orchestrator(cancel_pending: bool = False) -> None:
    """Shut down the process-wide orchestrator; the next get builds a new one."""
    global _orchestrator

    with _orchestrator_lock:
        if _orchestrator is not None:
            _orchestrator.shutdown(wait=True, cancel_pending=cancel_pending)
            _orchestrator = None


__all__ = [
    "TaskOrchestrator",
    "Task",
    "TaskStatus",
    "TaskResult",
    "io_task",
    "OrchestratorConfig",
    "IOPool",
    "get_orchestrator",
    "reset_orchestrator",
]
