"""
StatsCommand — Snapshot overview

Counts by type, total payload size, skipped objects and whether git
augmentation contributed packed objects.
"""

from ..commands.base import BaseCommand, EXIT_OK, EXIT_FAILURE
from ..output import OutputSpec
from ..presentation.formatters import format_size
from ..presentation.symbols import symbol_for_type, safe_print
from ..presentation.template import OutputTemplate


MAX_FAILURES_SHOWN = 10


class StatsCommand(BaseCommand):
    """Summarize the snapshot."""

    def stats_data(self) -> dict:
        snapshot = self.snapshot
        return {
            "root": snapshot.root,
            "objects": snapshot.count,
            "skipped": snapshot.skipped,
            "by_type": snapshot.counts_by_type(),
            "total_size": sum(obj.size for obj in snapshot.objects),
            "augmented": snapshot.augmented,
            "augmentation_error": snapshot.augmentation_error,
            "failures": [f.to_dict() for f in snapshot.failures],
            "summary": snapshot.summary(),
        }

    def stats(self, format: str = None) -> int:
        if not self.require_snapshot():
            return EXIT_FAILURE

        data = self.stats_data()
        if self.effective_format(format) == "json":
            self.emit(OutputSpec(data=data, shape="json"), format="json")
            return EXIT_OK

        s = self.symbols
        template = OutputTemplate(symbols=s)
        template.header("GITLOUPE STATS", data["root"])
        template.legend({symbol_for_type(s, t): t for t in data["by_type"]})

        type_pairs = [
            (f"{symbol_for_type(s, t)} {t}", count) for t, count in data["by_type"].items()
        ]
        type_pairs.append(("total size", format_size(data["total_size"])))
        template.section("OBJECTS", template.format_pairs(type_pairs))

        if self.config.scan.augment:
            if data["augmentation_error"]:
                augment_text = f"{s.check_warn} unavailable: {data['augmentation_error']}"
            elif self._cli.augmenter is None:
                augment_text = f"{s.check_warn} git not found, loose objects only"
            else:
                augment_text = f"{s.check_pass} {data['augmented']} packed objects added"
        else:
            augment_text = "disabled"
        template.section("GIT AUGMENTATION", augment_text)

        if data["failures"]:
            shown = data["failures"][:MAX_FAILURES_SHOWN]
            lines = [f"{f['hash'][:8]} {f['kind']}: {f['message']}" for f in shown]
            if len(data["failures"]) > len(shown):
                lines.append(f"{s.ellipsis} and {len(data['failures']) - len(shown)} more")
            template.section("SKIPPED", template.format_list(lines, bullet=s.check_fail))

        template.footer(data["summary"])
        safe_print(template.render())
        return EXIT_OK


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'stats'


def register_parser(subparsers):
    """Register stats command parser."""
    p = subparsers.add_parser('stats', help='Object counts, skipped objects, augmentation status')
    p.add_argument('--format', '-f', choices=StatsCommand.FORMATS,
                   help='Output format')
    return p


def handle(cli, args):
    """Handle stats command dispatch."""
    return cli._stats_cmd.stats(format=args.format)
