"""
ShowCommand — Detail view of one object

Accepts a full hash, an alias code (AA-BB), a hash prefix, or a keyword.
Hashes inside the detail (tree entries, parents, tag targets) are shown
with their alias so they can be followed with another `show`.
"""

import sys

from ..commands.base import BaseCommand, EXIT_OK, EXIT_FAILURE
from ..core.resolver import ResolveStatus, format_resolve_prompt
from ..output import OutputSpec
from ..presentation.formatters import ObjectFormatter


class ShowCommand(BaseCommand):
    """Show one object."""

    FORMATS = ("auto", "detail", "json")

    def show(self, ref: str, format: str = None, full: bool = False, raw: bool = False) -> int:
        if not self.require_snapshot():
            return EXIT_FAILURE

        result = self.resolver.resolve(ref)
        if result.status != ResolveStatus.FOUND:
            print(format_resolve_prompt(result, self.codec))
            return EXIT_FAILURE

        obj = result.obj

        if raw:
            sys.stdout.buffer.write(obj.content)
            sys.stdout.flush()
            return EXIT_OK

        formatter = ObjectFormatter(
            snapshot=self.snapshot,
            codec=self.codec,
            symbols=self.symbols,
            full=full,
        )
        as_json = self.effective_format(format) == "json"
        spec = OutputSpec(
            data=obj.to_dict(include_content=True),
            shape="detail",
            title=None if as_json else formatter.heading(obj),
            body=formatter.body(obj),
        )
        self.emit(spec, format=format, full=full)
        return EXIT_OK


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'show'


def register_parser(subparsers):
    """Register show command parser."""
    p = subparsers.add_parser('show', help='Show one object in detail')
    p.add_argument('ref', help='Hash, hash prefix (4+), alias code (AA-BB), or keyword')
    p.add_argument('--format', '-f', choices=ShowCommand.FORMATS,
                   help='Output format')
    p.add_argument('--full', action='store_true',
                   help='Full hashes, whole blob, complete signatures')
    p.add_argument('--raw', action='store_true',
                   help='Write the raw payload bytes to stdout')
    return p


def handle(cli, args):
    """Handle show command dispatch."""
    return cli._show_cmd.show(args.ref, format=args.format, full=args.full, raw=args.raw)
