"""
CheckCommand — Integrity checks over the snapshot

For every object (or one resolved ref):
- SHA-1 of "<type> <size>\\0<payload>" must equal the object's hash
- Trees are compared with `git ls-tree` when git is usable

Objects skipped while building the snapshot are reported too.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..commands.base import BaseCommand, EXIT_OK, EXIT_FAILURE
from ..core.errors import AugmentationUnavailable
from ..core.objects import EnrichedObject, TreeEntry, compute_object_hash
from ..core.resolver import ResolveStatus, format_resolve_prompt
from ..presentation.symbols import safe_print
from ..presentation.template import OutputTemplate


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckIssue:
    """One integrity problem."""
    hash: str
    kind: str      # hash_mismatch | tree_mismatch | unreadable
    message: str


def _entry_key(entry: TreeEntry) -> Tuple[str, str, str, str]:
    # ls-tree zero-pads modes to six digits
    return (entry.mode.zfill(6), entry.entry_type, entry.hash, entry.name)


def verify_hash(obj: EnrichedObject) -> Optional[CheckIssue]:
    actual = compute_object_hash(obj.object_type, obj.content)
    if actual != obj.hash:
        return CheckIssue(obj.hash, "hash_mismatch", f"content hashes to {actual}")
    return None


def compare_tree(obj: EnrichedObject, git_entries: List[TreeEntry]) -> Optional[CheckIssue]:
    ours = sorted(_entry_key(e) for e in obj.parsed_tree or ())
    theirs = sorted(_entry_key(e) for e in git_entries)
    if ours == theirs:
        return None
    missing = len(set(theirs) - set(ours))
    extra = len(set(ours) - set(theirs))
    return CheckIssue(
        obj.hash, "tree_mismatch",
        f"decoded {len(ours)} entries, git lists {len(theirs)} ({missing} missing, {extra} unexpected)"
    )


class CheckCommand(BaseCommand):
    """Verify object integrity."""

    def run_checks(self, objects: List[EnrichedObject], use_git: bool = True) -> Tuple[List[CheckIssue], int, Optional[str]]:
        """
        Returns:
            (issues, trees compared with git, reason git comparison stopped)
        """
        issues: List[CheckIssue] = []
        git = self.git if use_git else None
        git_error = None
        compared = 0

        for obj in objects:
            issue = verify_hash(obj)
            if issue:
                issues.append(issue)

            if git is None or obj.parsed_tree is None:
                continue
            try:
                issue = compare_tree(obj, git.list_tree(obj.hash))
            except AugmentationUnavailable as e:
                logger.warning("Stopping tree comparison: %s", e.message)
                git_error = e.message
                git = None
                continue
            compared += 1
            if issue:
                issues.append(issue)

        return issues, compared, git_error

    def check(self, ref: Optional[str] = None, use_git: bool = True) -> int:
        if not self.require_snapshot():
            return EXIT_FAILURE

        snapshot = self.snapshot
        if ref:
            result = self.resolver.resolve(ref)
            if result.status != ResolveStatus.FOUND:
                print(format_resolve_prompt(result, self.codec))
                return EXIT_FAILURE
            objects = [result.obj]
            failures = []
        else:
            objects = list(snapshot.objects)
            failures = [CheckIssue(f.hash, "unreadable", f"{f.kind}: {f.message}") for f in snapshot.failures]

        issues, compared, git_error = self.run_checks(objects, use_git=use_git)
        issues = failures + issues

        s = self.symbols
        template = OutputTemplate(symbols=s)
        template.header("GITLOUPE CHECK", snapshot.root)

        pairs = [
            ("hashes verified", len(objects)),
            ("trees compared with git", compared),
        ]
        template.section("CHECKED", template.format_pairs(pairs))

        if git_error:
            template.section("GIT", f"{s.check_warn} {git_error}")
        elif use_git and self.git is None:
            template.section("GIT", f"{s.check_warn} git not available, tree comparison skipped")

        if issues:
            lines = [f"{i.hash[:8]} [{self.codec.encode(i.hash)}] {i.kind}: {i.message}" for i in issues]
            template.section("PROBLEMS", template.format_list(lines, bullet=s.check_fail))
            template.footer(f"{s.check_fail} {len(issues)} problem(s) found")
        else:
            template.footer(f"{s.check_pass} All checks passed")

        safe_print(template.render())
        return EXIT_FAILURE if issues else EXIT_OK


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'check'


def register_parser(subparsers):
    """Register check command parser."""
    p = subparsers.add_parser('check', help='Verify object hashes and tree decoding')
    p.add_argument('ref', nargs='?',
                   help='Check one object (hash, prefix, alias, or keyword)')
    p.add_argument('--no-git', action='store_true',
                   help='Skip comparison with git ls-tree')
    return p


def handle(cli, args):
    """Handle check command dispatch."""
    return cli._check_cmd.check(ref=args.ref, use_git=not args.no_git)
