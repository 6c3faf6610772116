"""
ListCommand — Browse snapshot objects

Filters by type, searches hashes and content, sorts by date, type, size
or hash. The same pipeline the interactive viewer applied to its list.
"""

from ..commands.base import BaseCommand, EXIT_OK, EXIT_FAILURE
from ..core.query import select, SORT_METHODS
from ..core.objects import ObjectType
from ..output import OutputSpec
from ..presentation.formatters import object_row


LIST_COLUMNS = ["ALIAS", "TYPE", "HASH", "SIZE", "DATE", "SUMMARY"]


class ListCommand(BaseCommand):
    """List objects in the snapshot."""

    FORMATS = ("auto", "table", "json")

    def list_objects(
        self,
        object_type: str = None,
        term: str = None,
        sort: str = None,
        limit: int = None,
        format: str = None,
        full: bool = False
    ) -> int:
        if not self.require_snapshot():
            return EXIT_FAILURE

        snapshot = self.snapshot
        method = sort or self.config.display.sort
        objects = select(snapshot.objects, object_type=object_type, term=term,
                         method=method, limit=limit)

        footer = f"{len(objects)} of {snapshot.count} objects"
        if snapshot.skipped:
            footer += f" ({snapshot.skipped} skipped due to errors)"

        if self.effective_format(format) == "json":
            spec = OutputSpec(data=[obj.to_dict() for obj in objects], shape="json")
        else:
            spec = OutputSpec(
                data=[object_row(obj, self.codec) for obj in objects],
                shape="table",
                columns=LIST_COLUMNS,
                column_keys=[c.lower() for c in LIST_COLUMNS],
                footer=footer,
            )
        self.emit(spec, format=format, full=full)
        return EXIT_OK


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'list'


def register_parser(subparsers):
    """Register list command parser."""
    p = subparsers.add_parser('list', help='List objects (filter, search, sort)')
    p.add_argument('--type', '-t', dest='object_type',
                   choices=['all'] + [t.value for t in ObjectType],
                   help='Only objects of this type')
    p.add_argument('--search', '-s', dest='term',
                   help='Case-insensitive match on hash or content')
    p.add_argument('--sort', choices=SORT_METHODS,
                   help='Sort order (default: display.sort config)')
    p.add_argument('--limit', '-n', type=int,
                   help='Show at most N objects')
    p.add_argument('--format', '-f', choices=ListCommand.FORMATS,
                   help='Output format')
    p.add_argument('--full', action='store_true',
                   help='Do not truncate summaries')
    return p


def handle(cli, args):
    """Handle list command dispatch."""
    return cli._list_cmd.list_objects(
        object_type=args.object_type,
        term=args.term,
        sort=args.sort,
        limit=args.limit,
        format=args.format,
        full=args.full,
    )
