"""
Loose Object Store — Scanner and reader over .git/objects

Layout:
    objects/
      ab/                      <- 2-hex shard
        cdef0123...(38 hex)    <- zlib("<type> <size>\\0<payload>")
      info/  pack/             <- not shards, skipped

Packed objects are never read here. The snapshot builder may add them
through the git collaborator.
"""

import logging
import os
import zlib
from pathlib import Path
from typing import List, Optional, Union

from .errors import ObjectNotFound, MalformedObject, NotARepository
from .objects import GitObject, ObjectType


logger = logging.getLogger(__name__)

OBJECTS_DIR = "objects"
SPECIAL_DIRS = ("info", "pack")
HEX_DIGITS = frozenset("0123456789abcdef")

PathLike = Union[str, Path]


# =============================================================================
# Repository root resolution
# =============================================================================

def resolve_git_dir(path: PathLike) -> Optional[Path]:
    """
    Find the git directory for a path.

    Accepts a working tree (with .git directory, or a .git file holding
    "gitdir: <path>" as worktrees and submodules use) or a git directory
    itself (bare repository or .git). Returns None when neither applies.
    """
    path = Path(path)
    dot_git = path / ".git"

    if dot_git.is_dir():
        return dot_git

    if dot_git.is_file():
        try:
            line = dot_git.read_text(encoding="utf-8").strip()
        except OSError:
            return None
        if line.startswith("gitdir:"):
            target = Path(line[len("gitdir:"):].strip())
            if not target.is_absolute():
                target = path / target
            if (target / OBJECTS_DIR).is_dir():
                return target
        return None

    if (path / OBJECTS_DIR).is_dir():
        return path

    return None


def require_git_dir(path: PathLike) -> Path:
    """resolve_git_dir, raising NotARepository instead of returning None."""
    git_dir = resolve_git_dir(path)
    if git_dir is None:
        raise NotARepository(f"{path} is not a valid repository root")
    return git_dir


# =============================================================================
# Scanner
# =============================================================================

def _is_hex(name: str, length: int) -> bool:
    return len(name) == length and all(c in HEX_DIGITS for c in name)


def list_object_hashes(repo_root: PathLike) -> List[str]:
    """
    Enumerate loose object hashes under repo_root/objects.

    Args:
        repo_root: Git directory (the one containing objects/)

    Returns:
        40-hex hashes, shard by shard. Empty if objects/ does not exist.
    """
    objects_dir = Path(repo_root) / OBJECTS_DIR
    if not objects_dir.is_dir():
        return []

    hashes = []
    for shard in sorted(os.listdir(objects_dir)):
        if shard in SPECIAL_DIRS:
            continue
        shard_dir = objects_dir / shard
        if not shard_dir.is_dir() or not _is_hex(shard, 2):
            continue
        for name in sorted(os.listdir(shard_dir)):
            # Skip temp files git leaves while writing (tmp_obj_*)
            if _is_hex(name, 38):
                hashes.append(shard + name)

    logger.debug("Found %d loose objects under %s", len(hashes), objects_dir)
    return hashes


# =============================================================================
# Reader
# =============================================================================

def object_path(hash: str, repo_root: PathLike) -> Path:
    """Derived path of a loose object: objects/<hash[0:2]>/<hash[2:]>."""
    return Path(repo_root) / OBJECTS_DIR / hash[:2] / hash[2:]


def parse_object_bytes(hash: str, data: bytes) -> GitObject:
    """
    Split decompressed object bytes into header and payload.

    Raises:
        MalformedObject: No NUL terminator, bad header, or size mismatch
    """
    nul = data.find(b'\0')
    if nul == -1:
        raise MalformedObject("No NUL header terminator", hash=hash)

    header = data[:nul].decode('ascii', errors='replace')
    type_token, sep, size_token = header.partition(' ')
    if not sep or not size_token.isdigit():
        raise MalformedObject(f"Unparsable object header '{header}'", hash=hash)

    return GitObject(
        object_type=ObjectType.parse(type_token, hash=hash),
        hash=hash,
        size=int(size_token),
        content=data[nul + 1:],
    )


def read_object(hash: str, repo_root: PathLike) -> GitObject:
    """
    Read and decode one loose object.

    Args:
        hash: 40-hex object id (used as-is, not re-verified)
        repo_root: Git directory containing objects/

    Raises:
        ObjectNotFound: No file at the derived path
        MalformedObject: Decompression or header failure
    """
    hash = hash.lower()
    path = object_path(hash, repo_root)

    try:
        compressed = path.read_bytes()
    except (FileNotFoundError, IsADirectoryError):
        raise ObjectNotFound(f"No loose object at {path}", hash=hash)
    except OSError as e:
        raise MalformedObject(f"Unreadable object file: {e}", hash=hash)

    try:
        data = zlib.decompress(compressed)
    except zlib.error as e:
        raise MalformedObject(f"Decompression failed: {e}", hash=hash)

    return parse_object_bytes(hash, data)
