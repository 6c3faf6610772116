"""
OrchestratorConfig — Worker settings for snapshot builds

Environment variables (unset or unparsable values keep the default):
- GITLOUPE_PARALLEL_ENABLED: read objects on worker threads (default: true)
- GITLOUPE_IO_WORKERS: worker thread count (default: 8)
- GITLOUPE_TASK_TIMEOUT: seconds one batch of reads may take (default: 60)
"""

import os
from dataclasses import dataclass
from typing import Any, Callable, Optional


def _parse_flag(text: str) -> Optional[bool]:
    text = text.lower()
    if text in ("true", "1", "yes", "on"):
        return True
    if text in ("false", "0", "no", "off"):
        return False
    return None


def _from_env(key: str, parse: Callable[[str], Any], default: Any) -> Any:
    text = os.environ.get(key, "").strip()
    if not text:
        return default
    try:
        value = parse(text)
    except ValueError:
        return default
    return default if value is None else value


@dataclass
class OrchestratorConfig:
    """How snapshot reads are spread over threads."""

    enabled: bool = True         # False: every task runs inline on the caller
    io_workers: int = 8
    task_timeout: float = 60.0   # Deadline for a batch or a single bounded call

    @classmethod
    def from_env(cls) -> 'OrchestratorConfig':
        return cls(
            enabled=_from_env("GITLOUPE_PARALLEL_ENABLED", _parse_flag, True),
            io_workers=_from_env("GITLOUPE_IO_WORKERS", int, 8),
            task_timeout=_from_env("GITLOUPE_TASK_TIMEOUT", float, 60.0),
        )

    def validate(self) -> None:
        """Raise ValueError naming the variable that holds a bad value."""
        if self.io_workers < 1:
            raise ValueError("GITLOUPE_IO_WORKERS must be >= 1")
        if self.task_timeout <= 0:
            raise ValueError("GITLOUPE_TASK_TIMEOUT must be > 0")
