"""
TableRenderer — Render rows as an aligned, grep-friendly table

    ALIAS  TYPE    HASH      SIZE  SUMMARY
    ─────  ──────  ────────  ────  ───────────────
    KM-XP  commit  3b18e512  245   Fix bug
"""

from typing import TYPE_CHECKING, List, Dict

from .base import BaseRenderer

if TYPE_CHECKING:
    from . import OutputSpec


COLUMN_GAP = "  "


class TableRenderer(BaseRenderer):
    """
    Render a list of dicts as columns.

    The last column absorbs whatever width remains and is truncated.
    """

    def render(self, spec: "OutputSpec") -> str:
        rows = spec.data if isinstance(spec.data, list) else []
        if not rows:
            return spec.empty_message

        columns = spec.columns or self._infer_columns(rows)
        column_keys = spec.column_keys or [c.lower().replace(" ", "_") for c in columns]
        widths = self._calculate_widths(rows, columns, column_keys)

        lines = []
        if spec.title:
            lines.append(f"{spec.title}\n")

        lines.append(self._line(columns, widths))
        lines.append(COLUMN_GAP.join(self.symbols.box_h * w for w in widths))
        for row in rows:
            lines.append(self._line([self.safe_str(row.get(k, "")) for k in column_keys], widths))

        if spec.footer:
            lines.append("")
            lines.append(spec.footer)

        return "\n".join(lines)

    def _infer_columns(self, rows: List[Dict]) -> List[str]:
        return [k.replace("_", " ").upper() for k in rows[0].keys()]

    def _calculate_widths(self, rows: List[Dict], columns: List[str], column_keys: List[str]) -> List[int]:
        widths = [len(col) for col in columns]
        for row in rows:
            for i, key in enumerate(column_keys):
                widths[i] = max(widths[i], len(self.safe_str(row.get(key, ""))))

        if not self.full and widths:
            fixed = sum(widths[:-1]) + len(COLUMN_GAP) * (len(widths) - 1)
            widths[-1] = max(len(columns[-1]), min(widths[-1], self.width - fixed - 1))
        return widths

    def _line(self, cells: List[str], widths: List[int]) -> str:
        parts = []
        for i, (cell, w) in enumerate(zip(cells, widths)):
            cell = self.truncate(cell, w)
            parts.append(cell if i == len(widths) - 1 else cell.ljust(w))
        return COLUMN_GAP.join(parts).rstrip()
