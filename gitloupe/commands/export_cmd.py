"""
ExportCommand — Whole snapshot as JSON

The document crosses a serialization boundary: no bytes, blob text only
for non-binary blobs, raw payloads as base64 on request.
"""

from pathlib import Path
from typing import Optional, List

import orjson

from ..commands.base import BaseCommand, EXIT_OK, EXIT_FAILURE
from ..core.query import filter_by_type
from ..core.objects import ObjectType


class ExportCommand(BaseCommand):
    """Serialize the snapshot."""

    def build_document(
        self,
        object_type: Optional[str] = None,
        include_content: bool = True,
        include_raw: bool = False
    ) -> dict:
        snapshot = self.snapshot
        objects = filter_by_type(snapshot.objects, object_type)
        entries: List[dict] = []
        for obj in objects:
            data = obj.to_dict(include_content=include_content, include_raw=include_raw)
            data["alias"] = self.codec.encode(obj.hash)
            entries.append(data)

        return {
            "root": snapshot.root,
            "summary": snapshot.summary(),
            "counts": snapshot.counts_by_type(),
            "augmented": snapshot.augmented,
            "augmentation_error": snapshot.augmentation_error,
            "objects": entries,
            "failures": [f.to_dict() for f in snapshot.failures],
        }

    def export(
        self,
        output: Optional[str] = None,
        object_type: Optional[str] = None,
        include_content: bool = True,
        include_raw: bool = False,
        compact: bool = False
    ) -> int:
        if not self.require_snapshot():
            return EXIT_FAILURE

        document = self.build_document(object_type, include_content, include_raw)
        option = 0 if compact else orjson.OPT_INDENT_2
        payload = orjson.dumps(document, option=option)

        if output:
            path = Path(output)
            try:
                path.write_bytes(payload + b"\n")
            except OSError as e:
                print(f"Error: cannot write {path}: {e}")
                return EXIT_FAILURE
            print(f"{self.symbols.check_pass} Exported {len(document['objects'])} objects to {path}")
        else:
            print(payload.decode("utf-8"))
        return EXIT_OK


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'export'


def register_parser(subparsers):
    """Register export command parser."""
    p = subparsers.add_parser('export', help='Export the snapshot as JSON')
    p.add_argument('--output', '-o', metavar='FILE',
                   help='Write to FILE instead of stdout')
    p.add_argument('--type', '-t', dest='object_type',
                   choices=['all'] + [t.value for t in ObjectType],
                   help='Only objects of this type')
    p.add_argument('--no-content', action='store_true',
                   help='Omit blob text')
    p.add_argument('--raw', action='store_true',
                   help='Include base64 of each raw payload')
    p.add_argument('--compact', action='store_true',
                   help='Single-line JSON')
    return p


def handle(cli, args):
    """Handle export command dispatch."""
    return cli._export_cmd.export(
        output=args.output,
        object_type=args.object_type,
        include_content=not args.no_content,
        include_raw=args.raw,
        compact=args.compact,
    )
