"""
CLI — Command interface for gitloupe

Read-only: nothing here writes to the repository. The snapshot is built
lazily on first use so `config` and `--help` work outside a repository.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from .config import ConfigManager
from .core.resolver import HashResolver
from .core.snapshot import Snapshot, SnapshotBuilder, SnapshotHolder
from .core.store import resolve_git_dir
from .orchestrator import get_orchestrator, reset_orchestrator
from .presentation.codec import HashCodec
from .presentation.symbols import get_symbols
from .services.git import GitIntegration
from .commands.list_cmd import ListCommand
from .commands.show_cmd import ShowCommand
from .commands.stats_cmd import StatsCommand
from .commands.export_cmd import ExportCommand
from .commands.check_cmd import CheckCommand
from .commands.config_cmd import ConfigCommand
from . import __version__


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"


def configure_logging(verbose: bool = False) -> None:
    """
    WARNING by default, DEBUG with --verbose. GITLOUPE_LOG_LEVEL overrides
    the default but not --verbose.
    """
    if verbose:
        level = logging.DEBUG
    else:
        name = os.environ.get("GITLOUPE_LOG_LEVEL", "WARNING").upper()
        level = getattr(logging, name, None)
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)


class LoupeCLI:
    """Command-line interface over one repository."""

    def __init__(self, repo_path: Path, augment: Optional[bool] = None):
        """
        Args:
            repo_path: Working tree or git directory
            augment: Override scan.augment (None = use config)
        """
        self.repo_path = Path(repo_path)
        self.config_manager = ConfigManager(self.repo_path)
        self.config = self.config_manager.load()
        if augment is not None:
            self.config.scan.augment = augment

        self.symbols = get_symbols(self.config.display.symbols)
        self.codec = HashCodec()
        self.git_dir = resolve_git_dir(self.repo_path)

        self._git: Optional[GitIntegration] = None
        self._git_checked = False
        self._holder: Optional[SnapshotHolder] = None
        self._resolver: Optional[HashResolver] = None

        self._list_cmd = ListCommand(self)
        self._show_cmd = ShowCommand(self)
        self._stats_cmd = StatsCommand(self)
        self._export_cmd = ExportCommand(self)
        self._check_cmd = CheckCommand(self)
        self._config_cmd = ConfigCommand(self)

    @property
    def git(self) -> Optional[GitIntegration]:
        """GitIntegration for this repository, or None if git cannot run."""
        if not self._git_checked:
            self._git_checked = True
            if self.git_dir is not None:
                git = GitIntegration(self.git_dir, timeout=self.config.scan.git_timeout)
                if git.is_available:
                    self._git = git
                else:
                    logger.info("git executable not available, reading loose objects only")
        return self._git

    @property
    def augmenter(self) -> Optional[GitIntegration]:
        return self.git if self.config.scan.augment else None

    @property
    def holder(self) -> SnapshotHolder:
        if self._holder is None:
            builder = SnapshotBuilder(
                augmenter=self.augmenter,
                orchestrator=get_orchestrator(),
                config=self.config,
            )
            self._holder = SnapshotHolder(builder, self.repo_path)
        return self._holder

    @property
    def snapshot(self) -> Snapshot:
        return self.holder.current

    @property
    def resolver(self) -> HashResolver:
        snapshot = self.snapshot
        if self._resolver is None or self._resolver.snapshot is not snapshot:
            self._resolver = HashResolver(snapshot, self.codec)
        return self._resolver


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitloupe",
        description="gitloupe -- Read-only inspector for Git object stores",
        epilog="Reads loose objects directly; asks git for packed ones when available."
    )

    parser.add_argument(
        '--repo', '-r',
        default=os.environ.get("GITLOUPE_REPO", "."),
        help='Repository (working tree or git dir; default: GITLOUPE_REPO or current)'
    )
    parser.add_argument(
        '--no-augment',
        action='store_true',
        help='Do not ask git for packed objects'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Debug logging on stderr'
    )
    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'gitloupe {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    from .commands import register_all
    register_all(subparsers)
    return parser


def main(argv=None) -> int:
    """
    Main entry point.

    Returns the exit status: non-zero when the path is not a repository,
    a reference does not resolve, or a check finds problems.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 0

    cli = LoupeCLI(Path(args.repo), augment=False if args.no_augment else None)

    from .commands import dispatch
    try:
        return dispatch(args.command, cli, args)
    except KeyError as e:
        print(f"Error: {e}")
        parser.print_help()
        return 1
    finally:
        reset_orchestrator(cancel_pending=True)


if __name__ == '__main__':
    sys.exit(main())
