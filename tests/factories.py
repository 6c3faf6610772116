"""
Test Data Factory — Real loose-object stores for gitloupe tests

Writes genuine zlib-compressed objects under a temporary .git/objects,
so tests exercise the same bytes git would produce without needing git.

Usage:
    def test_something(loose_factory):
        blob = loose_factory.add_blob(b"hello\\n")
        tree = loose_factory.add_tree([("100644", "hello.txt", blob)])
        commit = loose_factory.add_commit(tree, message="Add hello\\n")
        snapshot = loose_factory.build_snapshot()
"""

import hashlib
import shutil
import subprocess
import time
import zlib
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pytest

from gitloupe.core.decoder import serialize_tree, entry_type_for_mode
from gitloupe.core.errors import AugmentationUnavailable
from gitloupe.core.objects import TreeEntry
from gitloupe.core.snapshot import SnapshotBuilder
from gitloupe.orchestrator import TaskOrchestrator, OrchestratorConfig
from gitloupe.services.git import GitCapability


AUTHOR = "Test User <test@example.com>"


def git_is_available() -> bool:
    return shutil.which("git") is not None


requires_git = pytest.mark.skipif(not git_is_available(), reason="git executable not installed")


def run_git(cwd: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True)


def create_git_repo(path: Path) -> Path:
    """Two commits made by the git CLI: README.md (edited) and src/main.py."""
    path.mkdir()
    run_git(path, "init", "-q")
    run_git(path, "config", "user.email", "test@example.com")
    run_git(path, "config", "user.name", "Test User")
    run_git(path, "config", "commit.gpgsign", "false")

    (path / "README.md").write_text("# Test\n")
    (path / "src").mkdir()
    (path / "src" / "main.py").write_text("print('hi')\n")
    run_git(path, "add", ".")
    run_git(path, "commit", "-q", "-m", "Initial commit")

    (path / "README.md").write_text("# Test\n\nMore.\n")
    run_git(path, "commit", "-q", "-am", "Second commit")
    return path


def ident(timestamp: int, offset: str = "+0000", who: str = AUTHOR) -> str:
    return f"{who} {timestamp} {offset}"


def object_hash(object_type: str, content: bytes) -> str:
    return hashlib.sha1(f"{object_type} {len(content)}".encode() + b"\0" + content).hexdigest()


def tree_entries(entries: Sequence[Tuple[str, str, str]]) -> List[TreeEntry]:
    return [TreeEntry(mode, entry_type_for_mode(mode), hash, name) for mode, name, hash in entries]


def commit_payload(
    tree: str,
    parents: Sequence[str] = (),
    message: str = "Commit\n",
    timestamp: int = 1700000000,
    author: Optional[str] = None,
    committer: Optional[str] = None,
    extra_headers: Sequence[str] = ()
) -> bytes:
    lines = [f"tree {tree}"]
    lines.extend(f"parent {p}" for p in parents)
    lines.append(f"author {author or ident(timestamp)}")
    lines.append(f"committer {committer or ident(timestamp)}")
    lines.extend(extra_headers)
    return ("\n".join(lines) + "\n\n" + message).encode("utf-8")


def tag_payload(target: str, target_type: str = "commit", name: str = "v1.0",
                message: str = "Release\n", timestamp: int = 1700000500) -> bytes:
    text = (
        f"object {target}\n"
        f"type {target_type}\n"
        f"tag {name}\n"
        f"tagger {ident(timestamp)}\n"
        f"\n{message}"
    )
    return text.encode("utf-8")


class LooseObjectFactory:
    """
    Builds a throwaway repository of loose objects.

    Layout: <tmp>/repo/.git/objects/<aa>/<38 hex>
    """

    def __init__(self, tmp_path: Path):
        self.work_tree = tmp_path / "repo"
        self.git_dir = self.work_tree / ".git"
        self.objects_dir = self.git_dir / "objects"
        self.objects_dir.mkdir(parents=True)
        (self.objects_dir / "info").mkdir()
        (self.objects_dir / "pack").mkdir()
        self.written: Dict[str, Tuple[str, bytes]] = {}

    # =========================================================================
    # Writers
    # =========================================================================

    def path_for(self, hash: str) -> Path:
        return self.objects_dir / hash[:2] / hash[2:]

    def write_raw(self, hash: str, data: bytes) -> Path:
        """Write arbitrary bytes at the object path (for corrupt objects)."""
        path = self.path_for(hash)
        path.parent.mkdir(exist_ok=True)
        path.write_bytes(data)
        return path

    def write_object(self, object_type: str, content: bytes) -> str:
        hash = object_hash(object_type, content)
        header = f"{object_type} {len(content)}".encode() + b"\0"
        self.write_raw(hash, zlib.compress(header + content))
        self.written[hash] = (object_type, content)
        return hash

    def add_blob(self, content: Union[str, bytes]) -> str:
        if isinstance(content, str):
            content = content.encode("utf-8")
        return self.write_object("blob", content)

    def add_tree(self, entries: Sequence[Tuple[str, str, str]]) -> str:
        """entries: (mode, name, hash) triples, written in the given order."""
        return self.write_object("tree", serialize_tree(tree_entries(entries)))

    def add_commit(self, tree: str, parents: Sequence[str] = (), message: str = "Commit\n",
                   timestamp: int = 1700000000, **kwargs) -> str:
        return self.write_object("commit", commit_payload(tree, parents, message, timestamp, **kwargs))

    def add_tag(self, target: str, **kwargs) -> str:
        return self.write_object("tag", tag_payload(target, **kwargs))

    # =========================================================================
    # Scenarios
    # =========================================================================

    def create_sample_repo(self) -> Dict[str, str]:
        """
        Two commits, nested trees, a binary blob and an annotated tag.

        Returns:
            name -> hash for every object written
        """
        h = {}
        h["readme"] = self.add_blob("# Sample\n\nA small repository.\n")
        h["main"] = self.add_blob("print('hello')\n")
        h["image"] = self.add_blob(b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + bytes(range(256)))
        h["src"] = self.add_tree([("100644", "main.py", h["main"])])
        h["root_tree"] = self.add_tree([
            ("100644", "README.md", h["readme"]),
            ("100644", "logo.png", h["image"]),
            ("40000", "src", h["src"]),
        ])
        h["first"] = self.add_commit(h["root_tree"], message="Initial import\n", timestamp=1700000000)
        h["readme_v2"] = self.add_blob("# Sample\n\nNow with docs.\n")
        h["root_tree_v2"] = self.add_tree([
            ("100644", "README.md", h["readme_v2"]),
            ("100644", "logo.png", h["image"]),
            ("40000", "src", h["src"]),
        ])
        h["second"] = self.add_commit(
            h["root_tree_v2"], parents=[h["first"]],
            message="Update readme\n\nExplain the docs.\n", timestamp=1700003600
        )
        h["tag"] = self.add_tag(h["second"], name="v1.0", message="First release\n")
        return h

    # =========================================================================
    # Snapshot helpers
    # =========================================================================

    def build_snapshot(self, augmenter: Optional[GitCapability] = None, config=None,
                       parallel: bool = False):
        orchestrator = TaskOrchestrator(OrchestratorConfig(enabled=parallel, io_workers=4))
        try:
            return SnapshotBuilder(
                augmenter=augmenter, orchestrator=orchestrator, config=config
            ).build(self.work_tree)
        finally:
            orchestrator.shutdown()


class FakeGitCapability(GitCapability):
    """
    In-memory GitCapability.

    objects holds what git "has" (typically packed objects); reachable
    defaults to all of them plus any extra hashes given.
    """

    def __init__(
        self,
        objects: Optional[Dict[str, Tuple[str, bytes]]] = None,
        reachable: Optional[List[str]] = None,
        fail_listing: bool = False,
        broken: Sequence[str] = (),
        delay: float = 0.0
    ):
        self.objects = dict(objects or {})
        self.reachable = list(reachable) if reachable is not None else list(self.objects)
        self.fail_listing = fail_listing
        self.broken = set(broken)
        self.delay = delay
        self.calls: List[Tuple[str, str]] = []

    def add(self, object_type: str, content: bytes) -> str:
        hash = object_hash(object_type, content)
        self.objects[hash] = (object_type, content)
        self.reachable.append(hash)
        return hash

    def _get(self, hash: str) -> Tuple[str, bytes]:
        if hash in self.broken or hash not in self.objects:
            raise AugmentationUnavailable(f"git cat-file failed: bad object {hash}", hash=hash)
        return self.objects[hash]

    def list_all_reachable_hashes(self) -> List[str]:
        self.calls.append(("rev-list", ""))
        if self.delay:
            time.sleep(self.delay)
        if self.fail_listing:
            raise AugmentationUnavailable("git rev-list failed: not a git repository")
        return list(self.reachable)

    def cat_file_type(self, hash: str) -> str:
        self.calls.append(("type", hash))
        return self._get(hash)[0]

    def cat_file_size(self, hash: str) -> int:
        self.calls.append(("size", hash))
        return len(self._get(hash)[1])

    def cat_file_pretty(self, hash: str) -> str:
        return self._get(hash)[1].decode("utf-8", errors="replace")

    def list_tree(self, hash: str) -> List[TreeEntry]:
        from gitloupe.core.decoder import parse_tree
        return parse_tree(self._get(hash)[1])

    def cat_file_raw(self, hash: str, object_type: str) -> bytes:
        self.calls.append(("raw", hash))
        return self._get(hash)[1]
