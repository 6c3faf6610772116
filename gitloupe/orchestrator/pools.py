"""
IOPool — Worker threads for object reads and git calls

Every submitted Task resolves to a TaskResult; a read that raises comes
back FAILED instead of breaking the batch it belongs to.
"""

from concurrent.futures import ThreadPoolExecutor, Future

from .task import Task, execute_task


THREAD_PREFIX = "gitloupe-io-"


class IOPool:
    """Fixed-size thread pool owned by one TaskOrchestrator."""

    def __init__(self, workers: int):
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=THREAD_PREFIX)
        self._closed = False

    def submit(self, task: Task) -> Future:
        if self._closed:
            raise RuntimeError("Pool is shut down")
        return self._executor.submit(execute_task, task)

    def shutdown(self, wait: bool = True, cancel_pending: bool = False) -> None:
        """
        Stop accepting tasks. cancel_pending drops queued reads that have
        not started; a read already running always finishes.
        """
        self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=cancel_pending)
