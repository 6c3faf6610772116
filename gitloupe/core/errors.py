"""
Errors — Typed failures raised by the object layer

Local-object failures (ObjectNotFound, MalformedObject) are caught at the
snapshot boundary and recorded. MalformedTreeEntry never leaves parse_tree.
AugmentationUnavailable never leaves the augmentation step.
"""

from typing import Optional


class LoupeError(Exception):
    """Base class for all gitloupe errors."""

    kind = "error"

    def __init__(self, message: str, hash: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hash = hash


class ObjectNotFound(LoupeError):
    """No loose object file exists at the derived path."""
    kind = "not_found"


class MalformedObject(LoupeError):
    """Decompression failed, header is missing or unparsable, or size mismatch."""
    kind = "malformed"


class MalformedTreeEntry(LoupeError):
    """A tree entry was truncated mid-parse."""
    kind = "malformed_tree_entry"

    def __init__(self, message: str, offset: int = 0, hash: Optional[str] = None):
        super().__init__(message, hash=hash)
        self.offset = offset


class AugmentationUnavailable(LoupeError):
    """The external git collaborator failed or is absent."""
    kind = "augmentation_unavailable"


class NotARepository(LoupeError):
    """Path is neither a git directory nor a working tree with one."""
    kind = "not_a_repository"
