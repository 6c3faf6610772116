"""
Core — Object layer for gitloupe

Contains the foundational pieces:
- Objects: GitObject, parsed-content union, EnrichedObject
- Store: Loose object scanner and reader
- Decoder: Tree/commit/tag decoders, binary heuristic
- Snapshot: Immutable, failure-tolerant view of a repository
- Resolver: Hash/alias/prefix/keyword resolution
- Query: Filter, search and sort for list views
"""

from .errors import (
    LoupeError, ObjectNotFound, MalformedObject, MalformedTreeEntry,
    AugmentationUnavailable, NotARepository
)
from .objects import (
    ObjectType, GitObject, TreeEntry, CommitHeader, TagHeader,
    TreeContent, CommitContent, TagContent, BlobContent, ParsedContent,
    EnrichedObject, compute_object_hash, is_valid_hash
)
from .store import resolve_git_dir, require_git_dir, list_object_hashes, read_object
from .decoder import (
    is_binary_blob, parse_tree, serialize_tree, parse_commit, parse_tag,
    enrich, extract_timestamp, format_ident_date
)
from .snapshot import ReadFailure, Snapshot, SnapshotBuilder, SnapshotHolder, build_snapshot
from .resolver import ResolveStatus, ResolveResult, HashResolver, format_resolve_prompt
from .query import SORT_METHODS, filter_by_type, search, sort_objects, select

__all__ = [
    # Errors
    "LoupeError", "ObjectNotFound", "MalformedObject", "MalformedTreeEntry",
    "AugmentationUnavailable", "NotARepository",
    # Objects
    "ObjectType", "GitObject", "TreeEntry", "CommitHeader", "TagHeader",
    "TreeContent", "CommitContent", "TagContent", "BlobContent", "ParsedContent",
    "EnrichedObject", "compute_object_hash", "is_valid_hash",
    # Store
    "resolve_git_dir", "require_git_dir", "list_object_hashes", "read_object",
    # Decoder
    "is_binary_blob", "parse_tree", "serialize_tree", "parse_commit", "parse_tag",
    "enrich", "extract_timestamp", "format_ident_date",
    # Snapshot
    "ReadFailure", "Snapshot", "SnapshotBuilder", "SnapshotHolder", "build_snapshot",
    # Resolver
    "ResolveStatus", "ResolveResult", "HashResolver", "format_resolve_prompt",
    # Query
    "SORT_METHODS", "filter_by_type", "search", "sort_objects", "select",
]
