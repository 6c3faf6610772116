"""
DetailRenderer — Render a single item with full details

Format:
    Heading line

    body (pre-formatted text), or
      Field: value
      Field:
        • item
"""

from typing import TYPE_CHECKING

from .base import BaseRenderer

if TYPE_CHECKING:
    from . import OutputSpec


MAX_LIST_ITEMS = 10


class DetailRenderer(BaseRenderer):
    """Render one object (or any dict) as a readable block."""

    def render(self, spec: "OutputSpec") -> str:
        if not spec.data and not spec.body:
            return spec.empty_message

        lines = []
        if spec.title:
            lines.append(spec.title)
            lines.append("")

        if spec.body:
            lines.append(spec.body)
        elif isinstance(spec.data, dict):
            lines.extend(self._fields(spec.data))
        else:
            lines.append(self.safe_str(spec.data))

        if spec.footer:
            lines.append("")
            lines.append(spec.footer)

        return "\n".join(lines)

    def _fields(self, data: dict) -> list:
        s = self.symbols
        lines = []
        for key, value in data.items():
            if key.startswith("_"):
                continue
            label = key.replace("_", " ").title()
            if isinstance(value, dict):
                lines.append(f"  {label}:")
                for k, v in value.items():
                    lines.append(f"    {k}: {self.truncate(self.safe_str(v), self.width - 10)}")
            elif isinstance(value, list):
                lines.append(f"  {label}:")
                shown = value if self.full else value[:MAX_LIST_ITEMS]
                for item in shown:
                    lines.append(f"    {s.bullet} {self.truncate(self.safe_str(item), self.width - 6)}")
                if len(value) > len(shown):
                    lines.append(f"    {s.ellipsis} and {len(value) - len(shown)} more")
            else:
                text = self.truncate(self.safe_str(value), self.width - len(label) - 6)
                lines.append(f"  {label}: {text}")
        return lines
