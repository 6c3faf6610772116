"""
Snapshot — Immutable view of a repository's objects at one moment

Build pipeline:
    resolve git dir -> scan loose hashes -> read + enrich (parallel)
                    -> optional git augmentation (bounded by a timeout)

A snapshot is never partially mutated: every refresh builds a new one from
scratch and SnapshotHolder swaps the reference. Per-object failures are
recorded, not raised; a failed augmentation leaves the loose-only result.
"""

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Optional, List, Dict, Mapping, Tuple, Union, TYPE_CHECKING

from .errors import LoupeError, NotARepository
from .objects import EnrichedObject, ObjectType
from .store import require_git_dir, list_object_hashes, read_object
from .decoder import enrich

if TYPE_CHECKING:
    from ..config import Config
    from ..orchestrator import TaskOrchestrator
    from ..services.git import GitCapability


logger = logging.getLogger(__name__)

DEFAULT_AUGMENT_TIMEOUT = 30.0


@dataclass(frozen=True)
class ReadFailure:
    """An object that could not be loaded."""
    hash: str
    kind: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {'hash': self.hash, 'kind': self.kind, 'message': self.message}


@dataclass(frozen=True)
class Snapshot:
    """
    All objects loaded from one repository.

    objects keep scan order (shard by shard), augmented ones appended.
    error is set only when the path is not a repository.
    """
    root: str
    objects: Tuple[EnrichedObject, ...] = ()
    failures: Tuple[ReadFailure, ...] = ()
    augmented: int = 0
    augmentation_error: Optional[str] = None
    error: Optional[str] = None
    _index: Mapping[str, EnrichedObject] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        index = MappingProxyType({obj.hash: obj for obj in self.objects})
        object.__setattr__(self, '_index', index)

    @classmethod
    def invalid(cls, path: Union[str, Path], reason: Optional[str] = None) -> 'Snapshot':
        return cls(root=str(path), error=reason or f"{path} is not a valid repository root")

    @property
    def valid(self) -> bool:
        return self.error is None

    @property
    def count(self) -> int:
        return len(self.objects)

    @property
    def skipped(self) -> int:
        return len(self.failures)

    def lookup(self, hash: str) -> Optional[EnrichedObject]:
        """Exact hash lookup (case-insensitive)."""
        if not hash:
            return None
        return self._index.get(hash.strip().lower())

    def hashes(self) -> List[str]:
        return [obj.hash for obj in self.objects]

    def counts_by_type(self) -> Dict[str, int]:
        """Object count per type, every type present (zero when absent)."""
        counts = {t.value: 0 for t in ObjectType}
        for obj in self.objects:
            counts[obj.object_type.value] += 1
        return counts

    def summary(self) -> str:
        if self.error is not None:
            return self.error
        return f"snapshot contains {self.count} objects ({self.skipped} skipped due to errors)"


def _load_loose(hash: str, git_dir: Path) -> EnrichedObject:
    return enrich(read_object(hash, git_dir))


class SnapshotBuilder:
    """
    Builds snapshots from a repository path.

    Usage:
        builder = SnapshotBuilder(augmenter=GitIntegration(git_dir))
        snapshot = builder.build("/path/to/repo")
        print(snapshot.summary())
    """

    def __init__(
        self,
        augmenter: Optional['GitCapability'] = None,
        orchestrator: Optional['TaskOrchestrator'] = None,
        config: Optional['Config'] = None
    ):
        """
        Args:
            augmenter: Git collaborator for packed objects (None = loose only)
            orchestrator: Task orchestrator for parallel reads (None = global)
            config: Application config; scan.augment and scan.git_timeout apply
        """
        self.augmenter = augmenter
        self._orchestrator = orchestrator
        self.config = config

    @property
    def orchestrator(self) -> 'TaskOrchestrator':
        if self._orchestrator is None:
            from ..orchestrator import get_orchestrator
            self._orchestrator = get_orchestrator()
        return self._orchestrator

    @property
    def augment_enabled(self) -> bool:
        if self.augmenter is None:
            return False
        return self.config is None or self.config.scan.augment

    @property
    def augment_timeout(self) -> float:
        if self.config is None:
            return DEFAULT_AUGMENT_TIMEOUT
        return float(self.config.scan.git_timeout)

    def build(self, path: Union[str, Path]) -> Snapshot:
        """Build a snapshot. Never raises for repository content problems."""
        try:
            git_dir = require_git_dir(path)
        except NotARepository as e:
            logger.warning("%s", e.message)
            return Snapshot.invalid(path, e.message)

        objects, failures = self._load_loose_objects(git_dir)

        augmented = 0
        augmentation_error = None
        if self.augment_enabled:
            extra, extra_failures, augmentation_error = self._augment(
                {obj.hash for obj in objects} | {f.hash for f in failures}
            )
            objects.extend(extra)
            failures.extend(extra_failures)
            augmented = len(extra)

        snapshot = Snapshot(
            root=str(git_dir),
            objects=tuple(objects),
            failures=tuple(failures),
            augmented=augmented,
            augmentation_error=augmentation_error,
        )
        logger.info(snapshot.summary())
        return snapshot

    def _load_loose_objects(self, git_dir: Path) -> Tuple[List[EnrichedObject], List[ReadFailure]]:
        try:
            hashes = list_object_hashes(git_dir)
        except OSError as e:
            logger.warning("Cannot scan %s: %s", git_dir, e)
            return [], []
        results = self.orchestrator.map_results(
            lambda h: _load_loose(h, git_dir), hashes
        )

        objects: List[EnrichedObject] = []
        failures: List[ReadFailure] = []
        for hash, result in zip(hashes, results):
            if result.success:
                objects.append(result.result)
            else:
                logger.warning("Skipping object %s: %s", hash, result.error)
                failures.append(ReadFailure(hash, result.error_kind or "error", result.error or ""))
        return objects, failures

    def _augment(self, known: set) -> Tuple[List[EnrichedObject], List[ReadFailure], Optional[str]]:
        """
        Pull reachable objects the loose scan did not see.

        Runs as one bounded task. Objects are materialized sequentially
        inside it so a single-worker pool cannot deadlock on nested submits.
        On timeout the stop event ends the worker's loop before its next
        git call.
        """
        stop = threading.Event()
        result = self.orchestrator.run_with_timeout(
            self._materialize_missing,
            args=(known, stop),
            timeout=self.augment_timeout,
            name="augment",
        )
        if not result.success:
            if result.error_kind == "timeout":
                stop.set()
            logger.warning("Augmentation unavailable, continuing with loose objects only: %s",
                           result.error)
            return [], [], result.error or result.error_kind

        objects, failures = result.result
        logger.debug("Augmented snapshot with %d packed objects (%d failed)",
                     len(objects), len(failures))
        return objects, failures, None

    def _materialize_missing(
        self,
        known: set,
        stop: Optional[threading.Event] = None
    ) -> Tuple[List[EnrichedObject], List[ReadFailure]]:
        objects: List[EnrichedObject] = []
        failures: List[ReadFailure] = []
        for hash in self.augmenter.list_all_reachable_hashes():
            if stop is not None and stop.is_set():
                logger.debug("Augmentation stopped after %d objects", len(objects))
                break
            if hash in known:
                continue
            try:
                objects.append(enrich(self.augmenter.read_object(hash), packed=True))
            except LoupeError as e:
                logger.warning("Skipping packed object %s: %s", hash, e.message)
                failures.append(ReadFailure(hash, e.kind, e.message))
        return objects, failures


def build_snapshot(
    path: Union[str, Path],
    augmenter: Optional['GitCapability'] = None,
    orchestrator: Optional['TaskOrchestrator'] = None,
    config: Optional['Config'] = None
) -> Snapshot:
    """Convenience wrapper around SnapshotBuilder.build()."""
    return SnapshotBuilder(augmenter=augmenter, orchestrator=orchestrator, config=config).build(path)


class SnapshotHolder:
    """
    Keeps the current snapshot; refresh and switch replace it whole.

    Readers calling .current always see a complete snapshot, old or new.
    """

    def __init__(self, builder: SnapshotBuilder, path: Union[str, Path]):
        self.builder = builder
        self.path = Path(path)
        self._lock = threading.Lock()
        self._current: Optional[Snapshot] = None

    @property
    def current(self) -> Snapshot:
        if self._current is None:
            return self.refresh()
        return self._current

    def refresh(self) -> Snapshot:
        """Rebuild from scratch for the current path."""
        snapshot = self.builder.build(self.path)
        with self._lock:
            self._current = snapshot
        return snapshot

    def switch(self, path: Union[str, Path]) -> Snapshot:
        """Point at another repository and rebuild."""
        self.path = Path(path)
        return self.refresh()
