"""
OutputTemplate — Framed report layout for stats, check and config

    ==========================================
    GITLOUPE STATS - /path/to/repo/.git
    ==========================================
    Legend: [C] commit  [T] tree

    OBJECTS
    -------
    [C] commit  2
    ...
    ------------------------------------------
    Summary: snapshot contains 12 objects (0 skipped due to errors)
    ==========================================

Usage:
    template = OutputTemplate(symbols=symbols)
    template.header("GITLOUPE STATS", snapshot.root)
    template.section("OBJECTS", template.format_pairs(pairs))
    template.footer(snapshot.summary())
    print(template.render())
"""

import shutil
from typing import Dict, List, Optional, Sequence, Tuple

from .symbols import SymbolSet, get_symbols


FRAME = "="
RULE = "-"
MAX_WIDTH = 100


class OutputTemplate:
    """Collects a header, titled sections and a summary line, then renders them."""

    def __init__(self, symbols: Optional[SymbolSet] = None, width: Optional[int] = None):
        self.symbols = symbols or get_symbols()
        self.width = min(width or shutil.get_terminal_size().columns, MAX_WIDTH)
        self._title: Optional[str] = None
        self._legend: Optional[str] = None
        self._sections: List[Tuple[str, str]] = []
        self._summary: Optional[str] = None

    def header(self, title: str, subtitle: Optional[str] = None) -> "OutputTemplate":
        self._title = f"{title} - {subtitle}" if subtitle else title
        return self

    def legend(self, items: Dict[str, str]) -> "OutputTemplate":
        """Symbol key shown under the header; empty items add nothing."""
        if items:
            keys = "  ".join(f"{symbol} {meaning}" for symbol, meaning in items.items())
            self._legend = f"Legend: {keys}"
        return self

    def section(self, title: str, content: str) -> "OutputTemplate":
        self._sections.append((title, content))
        return self

    def footer(self, summary: Optional[str] = None) -> "OutputTemplate":
        self._summary = summary
        return self

    def render(self) -> str:
        frame = FRAME * self.width
        lines: List[str] = []

        if self._title:
            lines += [frame, self._title, frame]
            if self._legend:
                lines.append(self._legend)
            lines.append("")

        for title, content in self._sections:
            if title:
                lines += [title, RULE * len(title)]
            if content:
                lines.append(content)
            lines.append("")

        lines.append(RULE * self.width)
        if self._summary:
            lines.append(f"Summary: {self._summary}")
        lines.append(frame)
        return "\n".join(lines)

    def format_pairs(self, pairs: Sequence[Tuple[object, object]]) -> str:
        """Labels padded to one column: "label  value" per line."""
        labels = [str(label) for label, _ in pairs]
        pad = max(map(len, labels), default=0)
        return "\n".join(f"{label.ljust(pad)}  {value}" for label, (_, value) in zip(labels, pairs))

    def format_list(self, items: Sequence[str], bullet: Optional[str] = None) -> str:
        marker = bullet or self.symbols.bullet
        return "\n".join(f"{marker} {item}" for item in items)
