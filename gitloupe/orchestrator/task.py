"""
Task — Unit of parallelizable work

- Task: a callable plus arguments, immutable after creation
- TaskResult: outcome of execution (value or captured error)

Object reads never raise through the pool: failures come back as FAILED
results carrying the error message and kind, so one bad object cannot
abort a batch.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import itertools
from typing import Callable, Any, Dict, Optional

import orjson
import xxhash


class TaskStatus(Enum):
    """Task lifecycle states."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Task:
    """
    Unit of parallelizable work.

    Immutable after creation. Carries all context needed for execution.
    """
    id: str = field(default_factory=lambda: _generate_task_id())

    fn: Callable = field(default=None)
    args: tuple = field(default_factory=tuple)
    kwargs: Dict[str, Any] = field(default_factory=dict)

    timeout: float = 60.0  # seconds

    name: str = ""
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if isinstance(other, Task):
            return self.id == other.id
        return False


@dataclass
class TaskResult:
    """Outcome of task execution."""
    task_id: str
    status: TaskStatus
    result: Any = None
    error: Optional[str] = None
    error_kind: Optional[str] = None  # LoupeError.kind or exception class name

    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    duration_ms: Optional[float] = None

    @property
    def success(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @property
    def failed(self) -> bool:
        return self.status == TaskStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for display/logging."""
        return {
            "task_id": self.task_id,
            "status": self.status.value,
            "result": self.result if _is_serializable(self.result) else str(self.result),
            "error": self.error,
            "error_kind": self.error_kind,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "duration_ms": self.duration_ms,
        }


_task_counter = itertools.count()


def _generate_task_id() -> str:
    """Generate unique task ID using xxhash."""
    seed = f"{datetime.now(timezone.utc).isoformat()}-{next(_task_counter)}"
    return xxhash.xxh64(seed.encode()).hexdigest()[:12]


def _is_serializable(obj: Any) -> bool:
    """Check if object can be serialized to JSON."""
    try:
        orjson.dumps(obj)
        return True
    except (TypeError, orjson.JSONEncodeError):
        return False


def execute_task(task: Task) -> TaskResult:
    """Run a task, capturing its value or its error."""
    started_at = datetime.now(timezone.utc)

    try:
        value = task.fn(*task.args, **task.kwargs)
        status, error, error_kind = TaskStatus.COMPLETED, None, None
    except Exception as e:
        value = None
        status = TaskStatus.FAILED
        error = getattr(e, 'message', None) or str(e)
        error_kind = getattr(e, 'kind', type(e).__name__)

    completed_at = datetime.now(timezone.utc)
    return TaskResult(
        task_id=task.id,
        status=status,
        result=value,
        error=error,
        error_kind=error_kind,
        started_at=started_at.isoformat(),
        completed_at=completed_at.isoformat(),
        duration_ms=(completed_at - started_at).total_seconds() * 1000,
    )


def io_task(
    fn: Callable,
    args: tuple = (),
    kwargs: Dict[str, Any] = None,
    name: str = "",
    timeout: float = 60.0
) -> Task:
    """
    Create an I/O-bound task (file reads, subprocess calls).

    Example:
        task = io_task(fn=read_object, args=(hash, git_dir), name="read")
    """
    return Task(
        fn=fn,
        args=args,
        kwargs=kwargs or {},
        name=name,
        timeout=timeout
    )
