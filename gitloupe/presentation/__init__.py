"""
Presentation — Display layer for gitloupe

Contains display and formatting:
- Symbols: Visual vocabulary (unicode/ascii)
- Codec: AA-BB alias codes for object hashes
- Formatters: List rows, cross-linked detail text
- Template: Structured output with header/section/footer
"""

from .symbols import (
    SymbolSet, get_symbols, symbol_for_type,
    safe_print, sanitize_control_chars, truncate
)
from .codec import HashCodec
from .formatters import ObjectFormatter, format_size, object_row, object_summary
from .template import OutputTemplate

__all__ = [
    # Symbols
    "SymbolSet", "get_symbols", "symbol_for_type",
    "safe_print", "sanitize_control_chars", "truncate",
    # Codec
    "HashCodec",
    # Formatters
    "ObjectFormatter", "format_size", "object_row", "object_summary",
    # Template
    "OutputTemplate",
]
