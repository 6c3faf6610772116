"""
gitloupe — Read-only inspector for Git object stores

Loads the loose objects of a repository, decodes trees, commits and tags,
and renders them with cross-linked hashes.
"""

__version__ = "0.1.0"

from .core.snapshot import Snapshot, SnapshotBuilder, build_snapshot
from .core.objects import EnrichedObject, GitObject, ObjectType

__all__ = [
    "__version__",
    "Snapshot", "SnapshotBuilder", "build_snapshot",
    "EnrichedObject", "GitObject", "ObjectType",
]
