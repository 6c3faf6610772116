"""
Git Integration — Optional collaborator for packed objects

The loose-object core never needs git. When a git executable is present,
this module reaches the objects the core cannot read itself (those inside
packfiles) and offers git's own view of trees for cross-checking.

Everything goes through the narrow GitCapability interface so snapshot
builds can be tested with a fake and run fine when git is absent. Any
failure (no executable, non-zero exit, timeout) surfaces as
AugmentationUnavailable.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, List, Union

from ..core.errors import AugmentationUnavailable
from ..core.objects import GitObject, ObjectType, TreeEntry, is_valid_hash
from ..core.decoder import entry_type_for_mode


logger = logging.getLogger(__name__)

DEFAULT_GIT_TIMEOUT = 30.0


class GitCapability(ABC):
    """Read-only operations the snapshot builder may ask of git."""

    @abstractmethod
    def list_all_reachable_hashes(self) -> List[str]:
        """Hashes of every object reachable from any ref."""

    @abstractmethod
    def cat_file_type(self, hash: str) -> str:
        """Object type token (blob, tree, commit, tag)."""

    @abstractmethod
    def cat_file_size(self, hash: str) -> int:
        """Payload size in bytes."""

    @abstractmethod
    def cat_file_pretty(self, hash: str) -> str:
        """Human-readable rendering of the object."""

    @abstractmethod
    def list_tree(self, hash: str) -> List[TreeEntry]:
        """Entries of a tree object as git lists them."""

    @abstractmethod
    def cat_file_raw(self, hash: str, object_type: str) -> bytes:
        """Raw payload bytes, exactly as stored after the header."""

    def read_object(self, hash: str) -> GitObject:
        """
        Materialize an object through the collaborator.

        The payload is raw, so it goes through the same decoders as
        loose objects.
        """
        object_type = ObjectType.parse(self.cat_file_type(hash), hash=hash)
        size = self.cat_file_size(hash)
        content = self.cat_file_raw(hash, object_type.value)
        return GitObject(object_type=object_type, hash=hash, size=size, content=content)


def parse_ls_tree(output: str) -> List[TreeEntry]:
    """
    Parse `git ls-tree` output.

    Format per record: <mode> SP <type> SP <hash> TAB <name>. Records are
    NUL-terminated with -z (names unquoted), newline-terminated otherwise.
    """
    records = output.split("\0") if "\0" in output else output.split("\n")
    entries = []
    for line in records:
        if not line.strip():
            continue
        head, sep, name = line.partition('\t')
        parts = head.split(' ')
        if not sep or len(parts) != 3:
            continue
        mode, _git_type, hash = parts
        entries.append(TreeEntry(
            mode=mode,
            entry_type=entry_type_for_mode(mode),
            hash=hash,
            name=name,
        ))
    return entries


class GitIntegration(GitCapability):
    """GitCapability backed by the git executable."""

    def __init__(self, git_dir: Union[str, Path], timeout: float = DEFAULT_GIT_TIMEOUT,
                 executable: str = "git"):
        """
        Args:
            git_dir: Git directory (the one holding objects/)
            timeout: Per-invocation timeout in seconds
            executable: Git binary name or path
        """
        self.git_dir = Path(git_dir)
        self.timeout = timeout
        self.executable = executable
        self._available: Optional[bool] = None

    @property
    def is_available(self) -> bool:
        """Check (once) that the git executable runs."""
        if self._available is None:
            try:
                subprocess.run(
                    [self.executable, "--version"],
                    capture_output=True,
                    timeout=self.timeout,
                    check=True
                )
                self._available = True
            except (OSError, subprocess.SubprocessError):
                self._available = False
        return self._available

    def _run_git(self, args: List[str]) -> bytes:
        """Run a git command against git_dir and return raw stdout."""
        command = [self.executable, f"--git-dir={self.git_dir}"] + args
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                timeout=self.timeout,
                check=True
            )
        except FileNotFoundError:
            raise AugmentationUnavailable(f"git executable '{self.executable}' not found")
        except subprocess.TimeoutExpired:
            raise AugmentationUnavailable(f"git {args[0]} timed out after {self.timeout:g}s")
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode('utf-8', errors='replace').strip() if e.stderr else ""
            raise AugmentationUnavailable(f"git {args[0]} failed: {stderr or e.returncode}")
        except OSError as e:
            raise AugmentationUnavailable(f"git {args[0]} could not run: {e}")
        return result.stdout

    def _run_text(self, args: List[str]) -> str:
        return self._run_git(args).decode('utf-8', errors='replace')

    def list_all_reachable_hashes(self) -> List[str]:
        output = self._run_text(["rev-list", "--objects", "--all"])
        hashes = []
        seen = set()
        for line in output.split('\n'):
            token = line.strip().split(' ', 1)[0]
            if is_valid_hash(token) and token not in seen:
                seen.add(token)
                hashes.append(token)
        logger.debug("git reports %d reachable objects", len(hashes))
        return hashes

    def cat_file_type(self, hash: str) -> str:
        return self._run_text(["cat-file", "-t", hash]).strip()

    def cat_file_size(self, hash: str) -> int:
        output = self._run_text(["cat-file", "-s", hash]).strip()
        if not output.isdigit():
            raise AugmentationUnavailable(f"Unexpected size output for {hash}: '{output}'", hash=hash)
        return int(output)

    def cat_file_pretty(self, hash: str) -> str:
        return self._run_text(["cat-file", "-p", hash])

    def list_tree(self, hash: str) -> List[TreeEntry]:
        return parse_ls_tree(self._run_text(["ls-tree", "-z", hash]))

    def cat_file_raw(self, hash: str, object_type: str) -> bytes:
        return self._run_git(["cat-file", object_type, hash])
