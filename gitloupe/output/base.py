"""
BaseRenderer — Shared state for table, detail and json renderers

A renderer turns one OutputSpec into text. Cells are clipped to the
terminal width with the symbol set's ellipsis unless `--full` was given.
"""

import shutil
from abc import ABC, abstractmethod
from typing import Any, Optional, TYPE_CHECKING

from ..presentation.symbols import get_symbols

if TYPE_CHECKING:
    from ..presentation.symbols import SymbolSet
    from . import OutputSpec


MIN_CELL = 20


class BaseRenderer(ABC):

    def __init__(self, symbols: Optional["SymbolSet"] = None, width: Optional[int] = None,
                 full: bool = False):
        self.symbols = symbols or get_symbols()
        self.width = width or shutil.get_terminal_size().columns
        self.full = full

    @abstractmethod
    def render(self, spec: "OutputSpec") -> str:
        ...

    def truncate(self, text: str, length: Optional[int] = None) -> str:
        """Clip to length (default: width less a margin) unless full."""
        if self.full or not text:
            return text or ""
        limit = max(MIN_CELL, self.width - 10) if length is None else length
        if len(text) <= limit:
            return text
        ellipsis = self.symbols.ellipsis
        if limit <= len(ellipsis):
            return text[:limit]
        return text[:limit - len(ellipsis)] + ellipsis

    def safe_str(self, value: Any) -> str:
        """Cell text: None is blank, booleans read Yes/No."""
        if value is None:
            return ""
        if isinstance(value, bool):
            return "Yes" if value else "No"
        return str(value)
