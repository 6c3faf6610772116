"""
Objects — In-memory model of Git objects and their parsed content

GitObject is the raw object as stored (type, hash, size, payload bytes).
EnrichedObject pairs it with parsed content, a tagged union selected by
object type:

    tree   -> TreeContent(entries)
    commit -> CommitContent(header)
    tag    -> TagContent(header)
    blob   -> BlobContent(is_binary)

Consumers branch on the parsed type instead of probing optional fields.

Limitation: hashes are taken from the lookup key and never recomputed when
reading. compute_object_hash() exists for integrity checks and tests.
"""

import base64
import hashlib
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Dict, Any, Union

from .errors import MalformedObject


HASH_PATTERN = re.compile(r'^[0-9a-f]{40}$')


def is_valid_hash(value: str) -> bool:
    """True for a 40-character lowercase hex string."""
    return bool(value) and bool(HASH_PATTERN.match(value))


class ObjectType(Enum):
    """Git object kinds."""
    BLOB = "blob"
    TREE = "tree"
    COMMIT = "commit"
    TAG = "tag"

    @classmethod
    def parse(cls, token: str, hash: Optional[str] = None) -> 'ObjectType':
        """Map a header type token to an ObjectType."""
        try:
            return cls(token)
        except ValueError:
            raise MalformedObject(f"Unknown object type '{token}'", hash=hash)


@dataclass(frozen=True)
class GitObject:
    """
    A raw Git object.

    content is the binary payload after the header NUL. It is never
    assumed to be UTF-8: trees hold raw hash bytes, blobs may be anything.
    """
    object_type: ObjectType
    hash: str
    size: int
    content: bytes = field(repr=False)

    def __post_init__(self):
        if len(self.content) != self.size:
            raise MalformedObject(
                f"Declared size {self.size} does not match payload length {len(self.content)}",
                hash=self.hash
            )

    @property
    def type_name(self) -> str:
        return self.object_type.value


def compute_object_hash(object_type: ObjectType, content: bytes) -> str:
    """SHA-1 over "<type> <size>\\0<content>", as Git addresses objects."""
    header = f"{object_type.value} {len(content)}".encode('ascii')
    return hashlib.sha1(header + b'\0' + content).hexdigest()


# =============================================================================
# Parsed content
# =============================================================================

@dataclass(frozen=True)
class TreeEntry:
    """One directory entry inside a tree object."""
    mode: str
    entry_type: str   # tree | blob | commit | unknown
    hash: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'mode': self.mode,
            'type': self.entry_type,
            'hash': self.hash,
            'name': self.name,
        }


@dataclass(frozen=True)
class CommitHeader:
    """Structured commit headers plus message."""
    tree: str = ""
    parent: Tuple[str, ...] = ()
    author: str = ""
    committer: str = ""
    message: str = ""
    extra: Dict[str, str] = field(default_factory=dict, hash=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tree': self.tree,
            'parent': list(self.parent),
            'author': self.author,
            'committer': self.committer,
            'message': self.message,
            'extra': dict(self.extra),
        }


@dataclass(frozen=True)
class TagHeader:
    """Structured annotated-tag headers plus message."""
    object: str = ""
    object_type: str = ""
    tag: str = ""
    tagger: str = ""
    message: str = ""
    extra: Dict[str, str] = field(default_factory=dict, hash=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'object': self.object,
            'type': self.object_type,
            'tag': self.tag,
            'tagger': self.tagger,
            'message': self.message,
            'extra': dict(self.extra),
        }


@dataclass(frozen=True)
class TreeContent:
    entries: Tuple[TreeEntry, ...] = ()


@dataclass(frozen=True)
class CommitContent:
    header: CommitHeader


@dataclass(frozen=True)
class TagContent:
    header: TagHeader


@dataclass(frozen=True)
class BlobContent:
    is_binary: bool


ParsedContent = Union[TreeContent, CommitContent, TagContent, BlobContent, None]


@dataclass(frozen=True)
class EnrichedObject:
    """
    A GitObject with its decoded content.

    Exactly one of parsed_tree / parsed_commit / is_binary_blob is set,
    according to the object type (tags expose parsed_tag instead).
    """
    obj: GitObject
    parsed: ParsedContent = None
    packed: bool = False  # Materialized through the git collaborator

    @property
    def hash(self) -> str:
        return self.obj.hash

    @property
    def object_type(self) -> ObjectType:
        return self.obj.object_type

    @property
    def size(self) -> int:
        return self.obj.size

    @property
    def content(self) -> bytes:
        return self.obj.content

    @property
    def parsed_tree(self) -> Optional[Tuple[TreeEntry, ...]]:
        if isinstance(self.parsed, TreeContent):
            return self.parsed.entries
        return None

    @property
    def parsed_commit(self) -> Optional[CommitHeader]:
        if isinstance(self.parsed, CommitContent):
            return self.parsed.header
        return None

    @property
    def parsed_tag(self) -> Optional[TagHeader]:
        if isinstance(self.parsed, TagContent):
            return self.parsed.header
        return None

    @property
    def is_binary_blob(self) -> Optional[bool]:
        if isinstance(self.parsed, BlobContent):
            return self.parsed.is_binary
        return None

    def text(self) -> str:
        """Payload as text (lossy for binary content)."""
        return self.obj.content.decode('utf-8', errors='replace')

    def to_dict(self, include_content: bool = False, include_raw: bool = False) -> Dict[str, Any]:
        """
        Plain data contract for crossing a serialization boundary.

        Args:
            include_content: Add blob text for non-binary blobs
            include_raw: Add base64 of the raw payload

        Returns:
            JSON-compatible dict (no bytes)
        """
        data: Dict[str, Any] = {
            'type': self.obj.type_name,
            'hash': self.obj.hash,
            'size': self.obj.size,
            'packed': self.packed,
        }

        parsed = self.parsed
        if isinstance(parsed, TreeContent):
            data['entries'] = [e.to_dict() for e in parsed.entries]
        elif isinstance(parsed, CommitContent):
            data['commit'] = parsed.header.to_dict()
        elif isinstance(parsed, TagContent):
            data['tag'] = parsed.header.to_dict()
        elif isinstance(parsed, BlobContent):
            data['is_binary'] = parsed.is_binary
            if include_content and not parsed.is_binary:
                data['text'] = self.text()

        if include_raw:
            data['raw'] = base64.b64encode(self.obj.content).decode('ascii')

        return data
