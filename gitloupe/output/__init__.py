"""
Output Module — View layer for gitloupe

Commands build an OutputSpec (the data plus display hints) and hand it to
render(); they never format text for a specific output mode themselves.

Usage:
    from gitloupe.output import OutputSpec, render

    spec = OutputSpec(
        data=[{"type": "commit", "hash": "3b18e512"}],
        shape="table",
        columns=["TYPE", "HASH"],
    )
    print(render(spec, format="auto"))
"""

from dataclasses import dataclass
from typing import Any, List, Optional, TYPE_CHECKING

from .base import BaseRenderer
from .table import TableRenderer
from .detail import DetailRenderer
from .json import JsonRenderer

if TYPE_CHECKING:
    from ..presentation.symbols import SymbolSet


@dataclass
class OutputSpec:
    """
    What a command wants shown.

    data is what `--format json` prints. shape is the renderer used for
    "auto": "table", "detail" or "json" ("auto" here infers it from data).
    body, when set, replaces the detail renderer's field listing.
    """
    data: Any
    shape: str = "auto"
    title: Optional[str] = None
    columns: Optional[List[str]] = None
    column_keys: Optional[List[str]] = None
    body: Optional[str] = None
    footer: Optional[str] = None
    empty_message: str = "No objects found."


RENDERERS = {
    "table": TableRenderer,
    "detail": DetailRenderer,
    "json": JsonRenderer,
}


def auto_detect_shape(data: Any) -> str:
    """Lists of dicts become tables, everything else a detail view."""
    if isinstance(data, list) and data and all(isinstance(x, dict) for x in data):
        return "table"
    return "detail"


def get_renderer(format: str, symbols: "SymbolSet", width: Optional[int] = None,
                 full: bool = False) -> BaseRenderer:
    """
    Raises:
        ValueError: If format names no renderer
    """
    try:
        renderer_class = RENDERERS[format]
    except KeyError:
        raise ValueError(f"Unknown format '{format}'. Valid: {', '.join(RENDERERS)}")
    return renderer_class(symbols=symbols, width=width, full=full)


def render(spec: OutputSpec, format: str = "auto", symbols: Optional["SymbolSet"] = None,
           width: Optional[int] = None, full: bool = False) -> str:
    """
    Render spec as text. format "auto" uses spec.shape, inferring it from
    spec.data when the spec says "auto" too.
    """
    if format == "auto":
        format = spec.shape if spec.shape != "auto" else auto_detect_shape(spec.data)
    return get_renderer(format, symbols, width, full).render(spec)


__all__ = [
    "OutputSpec", "render", "get_renderer", "auto_detect_shape", "RENDERERS",
    "BaseRenderer", "TableRenderer", "DetailRenderer", "JsonRenderer",
]
