"""
Symbols — Visual vocabulary for object types and states

Two sets: UNICODE for capable terminals, ASCII otherwise. display.symbols
picks one explicitly; "auto" looks at the stdout encoding and locale.

Output hygiene lives here too, since both act on text about to be shown:
- sanitize_control_chars(): drops terminal control chars from repository text
- safe_print(): prints even when stdout cannot encode the symbols
"""

import codecs
import os
import sys
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Output hygiene
# =============================================================================

# Tab, newline and carriage return survive; every other C0 char is dropped
_CONTROL_CHARS = {code: None for code in range(32) if code not in (9, 10, 13)}

ASCII_FALLBACKS = str.maketrans({
    '→': '->',
    '…': '...',
    '•': '*',
    '├': '+',
    '└': '+',
    '─': '-',
    '✓': '[OK]',
    '✗': '[ERR]',
    '⚠': '[!]',
})


def sanitize_control_chars(text: str) -> str:
    """
    Strip control characters from blob and commit text.

    Repository content is arbitrary; an escape sequence in a commit message
    must not reach the terminal.
    """
    if not text:
        return text
    return text.translate(_CONTROL_CHARS)


def safe_print(text: str, end: str = '\n', file=None) -> None:
    """print(), retrying with ASCII fallbacks and then '?' on UnicodeEncodeError."""
    stream = file or sys.stdout
    try:
        print(text, end=end, file=stream)
        return
    except UnicodeEncodeError:
        pass

    text = text.translate(ASCII_FALLBACKS)
    encoding = getattr(stream, 'encoding', None) or 'utf-8'
    print(text.encode(encoding, errors='replace').decode(encoding), end=end, file=stream)


# =============================================================================
# Display limits
# =============================================================================

SUMMARY_LENGTH = 72       # Commit subject line
PREVIEW_LINES = 20        # Blob preview in detail view
HASH_DISPLAY_LENGTH = 8   # Short hash (e.g., "3b18e512")


def truncate(text: str, length: int = SUMMARY_LENGTH, full: bool = False) -> str:
    """
    Clip to length with a trailing "..." unless full.

        truncate("A very long text...", 10)    -> "A very ..."
        truncate("Any length", 5, full=True)   -> "Any length"
    """
    if not text:
        return ""
    if full or len(text) <= length:
        return text
    return text[:length] if length <= 3 else text[:length - 3] + "..."


# =============================================================================
# Symbol sets
# =============================================================================

@dataclass(frozen=True)
class SymbolSet:
    # Object types (looked up by symbol_for_type)
    blob: str
    tree: str
    commit: str
    tag: str
    unknown: str

    binary: str
    packed: str
    arrow: str

    check_pass: str
    check_warn: str
    check_fail: str

    tree_branch: str
    tree_end: str
    bullet: str
    box_h: str
    ellipsis: str


UNICODE = SymbolSet(
    blob='▪', tree='▸', commit='●', tag='◆', unknown='?',
    binary='⊘', packed='◌', arrow='→',
    check_pass='✓', check_warn='⚠', check_fail='✗',
    tree_branch='├─', tree_end='└─', bullet='•', box_h='─', ellipsis='…',
)

ASCII = SymbolSet(
    blob='[B]', tree='[T]', commit='[C]', tag='[G]', unknown='[?]',
    binary='[bin]', packed='[P]', arrow='->',
    check_pass='[OK]', check_warn='[!]', check_fail='[ERR]',
    tree_branch='+-', tree_end='+-', bullet='*', box_h='-', ellipsis='...',
)

OBJECT_TYPES = ('blob', 'tree', 'commit', 'tag')


def supports_unicode() -> bool:
    """
    Best guess whether stdout can show the UNICODE set. Unknown means no.

    GITLOUPE_ASCII_ONLY=1 forces ASCII.
    """
    if os.environ.get('GITLOUPE_ASCII_ONLY', '').lower() in ('1', 'true', 'yes'):
        return False

    encoding = getattr(sys.stdout, 'encoding', None)
    if encoding:
        try:
            return codecs.lookup(encoding).name.startswith('utf')
        except LookupError:
            pass

    locale = (os.environ.get('LC_ALL') or os.environ.get('LANG') or '').lower()
    return 'utf-8' in locale or 'utf8' in locale


def get_symbols(preference: Optional[str] = None) -> SymbolSet:
    """Symbol set for "unicode", "ascii", or "auto"/None (detected)."""
    if preference == 'unicode':
        return UNICODE
    if preference == 'ascii':
        return ASCII
    return UNICODE if supports_unicode() else ASCII


def symbol_for_type(symbols: SymbolSet, object_type: str) -> str:
    """Symbol for an object or tree-entry type; unknown types get symbols.unknown."""
    return getattr(symbols, object_type if object_type in OBJECT_TYPES else 'unknown')
