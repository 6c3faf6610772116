"""
Tests for the task orchestrator — config, tasks, map_results, timeouts
"""

import threading
import time

import pytest

from gitloupe.core.errors import MalformedObject
from gitloupe.orchestrator import (
    TaskOrchestrator, OrchestratorConfig, TaskStatus, io_task, get_orchestrator, reset_orchestrator
)
from gitloupe.orchestrator.task import execute_task


class TestOrchestratorConfig:

    def test_defaults(self):
        config = OrchestratorConfig()
        assert config.enabled is True
        assert config.io_workers == 8

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("GITLOUPE_PARALLEL_ENABLED", "false")
        monkeypatch.setenv("GITLOUPE_IO_WORKERS", "3")
        monkeypatch.setenv("GITLOUPE_TASK_TIMEOUT", "not-a-number")
        config = OrchestratorConfig.from_env()
        assert config.enabled is False
        assert config.io_workers == 3
        assert config.task_timeout == 60.0

    def test_validate(self):
        with pytest.raises(ValueError):
            OrchestratorConfig(io_workers=0).validate()
        with pytest.raises(ValueError):
            OrchestratorConfig(task_timeout=0).validate()


class TestTasks:

    def test_ids_are_unique(self):
        assert io_task(fn=len).id != io_task(fn=len).id

    def test_execute_success(self):
        result = execute_task(io_task(fn=len, args=("abc",)))
        assert result.success
        assert result.result == 3
        assert result.duration_ms >= 0

    def test_execute_captures_loupe_error_kind(self):
        def boom():
            raise MalformedObject("bad header", hash="a" * 40)

        result = execute_task(io_task(fn=boom))
        assert result.failed
        assert result.error == "bad header"
        assert result.error_kind == "malformed"

    def test_execute_captures_other_errors(self):
        def boom():
            raise KeyError("x")

        result = execute_task(io_task(fn=boom))
        assert result.error_kind == "KeyError"

    def test_to_dict_stringifies_unserializable(self):
        result = execute_task(io_task(fn=object))
        assert isinstance(result.to_dict()["result"], str)
        assert result.to_dict()["status"] == "completed"


class TestMapResults:

    @pytest.mark.parametrize("enabled", [False, True])
    def test_order_preserved(self, enabled):
        orchestrator = TaskOrchestrator(OrchestratorConfig(enabled=enabled, io_workers=4))
        try:
            results = orchestrator.map_results(lambda n: n * n, range(50))
        finally:
            orchestrator.shutdown()
        assert [r.result for r in results] == [n * n for n in range(50)]

    def test_failures_do_not_abort(self, parallel_orchestrator):
        def pick(n):
            if n == 2:
                raise ValueError("two")
            return n

        results = parallel_orchestrator.map_results(pick, [1, 2, 3])
        assert [r.success for r in results] == [True, False, True]
        assert results[1].error == "two"

    def test_empty(self, sequential_orchestrator):
        assert sequential_orchestrator.map_results(len, []) == []

    def test_one_deadline_for_the_batch(self):
        orchestrator = TaskOrchestrator(OrchestratorConfig(enabled=True, io_workers=1))
        started = time.monotonic()
        try:
            results = orchestrator.map_results(lambda _: time.sleep(0.2), range(4), timeout=0.3)
            elapsed = time.monotonic() - started
        finally:
            orchestrator.shutdown(cancel_pending=True)

        assert elapsed < 0.6
        assert results[0].success
        assert results[-1].error_kind == "timeout"
        assert results[-1].error == "Timed out after 0.3s"

    def test_runs_on_worker_threads(self, parallel_orchestrator):
        names = parallel_orchestrator.map_results(lambda _: threading.current_thread().name, range(4))
        assert all(r.result.startswith("gitloupe-io-") for r in names)


class TestRunWithTimeout:

    def test_completes(self, parallel_orchestrator):
        result = parallel_orchestrator.run_with_timeout(sum, args=([1, 2, 3],), timeout=5)
        assert result.result == 6

    def test_times_out(self, parallel_orchestrator):
        result = parallel_orchestrator.run_with_timeout(time.sleep, args=(0.5,), timeout=0.05)
        assert result.failed
        assert result.error_kind == "timeout"
        assert result.error == "Timed out after 0.05s"

    def test_sequential_runs_inline(self, sequential_orchestrator):
        result = sequential_orchestrator.run_with_timeout(threading.current_thread)
        assert result.result is threading.current_thread()


class TestLifecycle:

    def test_submit_after_shutdown(self):
        orchestrator = TaskOrchestrator(OrchestratorConfig(enabled=False))
        orchestrator.shutdown()
        with pytest.raises(RuntimeError):
            orchestrator.submit(io_task(fn=len, args=("",)))

    def test_shutdown_cancels_queued_tasks(self):
        orchestrator = TaskOrchestrator(OrchestratorConfig(enabled=True, io_workers=1))
        started = []

        def slow(n):
            started.append(n)
            time.sleep(0.2)

        futures = [orchestrator.submit(io_task(fn=slow, args=(n,))) for n in range(5)]
        time.sleep(0.05)
        orchestrator.shutdown(wait=True, cancel_pending=True)

        assert started == [0]
        assert all(f.cancelled() for f in futures[1:])

    def test_global_singleton(self):
        first = get_orchestrator()
        assert get_orchestrator() is first
        reset_orchestrator()
        assert get_orchestrator() is not first
