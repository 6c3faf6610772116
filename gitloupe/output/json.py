"""
JsonRenderer — Render data as JSON for piping

Keys starting with "_" are internal and stripped. Serialization goes
through orjson, which also handles dataclasses and enums.
"""

from typing import TYPE_CHECKING, Any

import orjson

from .base import BaseRenderer

if TYPE_CHECKING:
    from . import OutputSpec


def _default(obj: Any) -> Any:
    """Fallback for types orjson does not know."""
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if isinstance(obj, (bytes, bytearray)):
        return obj.decode("utf-8", errors="replace")
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    return str(obj)


def dumps(data: Any, compact: bool = False) -> str:
    option = 0 if compact else orjson.OPT_INDENT_2
    return orjson.dumps(data, default=_default, option=option).decode("utf-8")


class JsonRenderer(BaseRenderer):
    """Render data as JSON (pretty by default)."""

    def __init__(self, *args, compact: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.compact = compact

    def render(self, spec: "OutputSpec") -> str:
        data = self._clean_data(spec.data)
        output = {"title": spec.title, "data": data} if spec.title else data
        return dumps(output, compact=self.compact)

    def _clean_data(self, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                k: self._clean_data(v)
                for k, v in data.items()
                if not str(k).startswith("_")
            }
        if isinstance(data, (list, tuple)):
            return [self._clean_data(item) for item in data]
        return data
