"""
BaseCommand — Shared foundation for all CLI commands

Commands receive the CLI instance and reach its resources through
properties; nothing is re-initialized per command.
"""

from typing import Optional, TYPE_CHECKING

from ..output import OutputSpec, render
from ..presentation.symbols import safe_print

if TYPE_CHECKING:
    from ..cli import LoupeCLI


EXIT_OK = 0
EXIT_FAILURE = 1


class BaseCommand:
    """Base class for CLI commands with access to shared resources."""

    # Output formats this command can render; others fall back to "auto"
    FORMATS = ("auto", "json")

    def __init__(self, cli: 'LoupeCLI'):
        self._cli = cli

    @property
    def repo_path(self):
        return self._cli.repo_path

    @property
    def config(self):
        return self._cli.config

    @property
    def symbols(self):
        return self._cli.symbols

    @property
    def codec(self):
        return self._cli.codec

    @property
    def snapshot(self):
        """Current snapshot (built on first access)."""
        return self._cli.snapshot

    @property
    def resolver(self):
        return self._cli.resolver

    @property
    def git(self):
        """GitIntegration when git is usable, else None."""
        return self._cli.git

    def effective_format(self, requested: Optional[str]) -> str:
        """
        CLI flag wins over config. A configured format the command cannot
        render (table for `show`, detail for `list`) becomes "auto", which
        renders the command's own shape.
        """
        chosen = requested or self.config.display.format
        return chosen if chosen in self.FORMATS else "auto"

    def emit(self, spec: OutputSpec, format: Optional[str] = None, full: bool = False) -> None:
        safe_print(render(
            spec,
            format=self.effective_format(format),
            symbols=self.symbols,
            full=full,
        ))

    def require_snapshot(self) -> bool:
        """Print the reason and return False when the path is not a repository."""
        snapshot = self.snapshot
        if not snapshot.valid:
            print(f"Error: {snapshot.summary()}")
            return False
        return True
