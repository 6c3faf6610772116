"""
Decoder — Parse object payloads by type

- Trees: binary entries "<mode> <name>\\0<20 raw hash bytes>", repeated
- Commits and tags: text headers, blank line, message
- Blobs: binary-or-text heuristic only

Decoders are pure and never raise on bad input: a truncated tree entry
drops the rest of the tree with a warning, unknown header keys are kept
aside, and the binary heuristic may misclassify without error.
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple, Union, Iterable

from .errors import MalformedTreeEntry
from .objects import (
    GitObject, ObjectType, EnrichedObject,
    TreeEntry, CommitHeader, TagHeader,
    TreeContent, CommitContent, TagContent, BlobContent,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Binary detection
# =============================================================================

BINARY_SCAN_LIMIT = 8000
PRINTABLE_RATIO_THRESHOLD = 0.10

# \t \n \r and 0x20-0x7E
PRINTABLE_BYTES = bytes([0x09, 0x0A, 0x0D]) + bytes(range(0x20, 0x7F))


def is_binary_blob(content: bytes) -> bool:
    """
    Heuristic: is this blob binary?

    Looks at the first 8000 bytes. Any NUL means binary. Otherwise binary
    when fewer than 10% of the scanned bytes are printable. Empty content
    is text. This is a guess, not a guarantee.
    """
    sample = content[:BINARY_SCAN_LIMIT]
    if not sample:
        return False
    if b'\0' in sample:
        return True

    # translate() with a delete table leaves only the non-printable bytes
    non_printable = len(sample.translate(None, PRINTABLE_BYTES))
    printable = len(sample) - non_printable
    return printable / len(sample) < PRINTABLE_RATIO_THRESHOLD


# =============================================================================
# Tree decoding
# =============================================================================

HASH_BYTES = 20

TREE_MODES = frozenset({'40000', '040000', '0000'})
BLOB_MODES = frozenset({'100644', '100664', '100755', '0644', '00644'})
SUBMODULE_MODE = '160000'
SYMLINK_MODE = '120000'


def entry_type_for_mode(mode: str) -> str:
    """
    Derive the entry type from a tree entry mode.

    Includes historical modes still found in old repositories
    (0000, 0644, 00644, 100664).
    """
    if mode in TREE_MODES:
        return 'tree'
    if mode in BLOB_MODES or mode.startswith('100'):
        return 'blob'
    if mode == SUBMODULE_MODE:
        return 'commit'
    if mode == SYMLINK_MODE:
        return 'blob'
    return 'unknown'


def _read_tree_entry(content: bytes, pos: int) -> Tuple[Optional[TreeEntry], int]:
    """
    Read one entry starting at pos.

    Returns:
        (entry, next position), or (None, pos) when no further entry starts

    Raises:
        MalformedTreeEntry: Fewer than 20 hash bytes remain
    """
    space = content.find(b' ', pos)
    if space == -1:
        return None, pos

    mode = content[pos:space].decode('ascii', errors='replace')
    name_start = space + 1

    nul = content.find(b'\0', name_start)
    if nul == -1:
        return None, pos

    name = content[name_start:nul].decode('utf-8', errors='replace')
    hash_start = nul + 1
    raw_hash = content[hash_start:hash_start + HASH_BYTES]
    if len(raw_hash) != HASH_BYTES:
        raise MalformedTreeEntry(
            f"Entry '{name}' has {len(raw_hash)} of {HASH_BYTES} hash bytes",
            offset=pos
        )

    entry = TreeEntry(
        mode=mode,
        entry_type=entry_type_for_mode(mode),
        hash=raw_hash.hex(),
        name=name,
    )
    return entry, hash_start + HASH_BYTES


def parse_tree(content: bytes) -> List[TreeEntry]:
    """
    Decode a tree payload into its entries, in stored order.

    Trailing bytes that do not start a complete entry are dropped. A
    truncated entry ends the parse; entries read so far are returned.
    """
    entries = []
    pos = 0

    while pos < len(content):
        try:
            entry, pos = _read_tree_entry(content, pos)
        except MalformedTreeEntry as e:
            logger.warning("Truncated tree at offset %d: %s", e.offset, e.message)
            break
        if entry is None:
            break
        entries.append(entry)

    return entries


def serialize_tree(entries: Iterable[TreeEntry]) -> bytes:
    """Encode entries back into the tree payload format."""
    parts = []
    for entry in entries:
        parts.append(entry.mode.encode('ascii'))
        parts.append(b' ')
        parts.append(entry.name.encode('utf-8'))
        parts.append(b'\0')
        parts.append(bytes.fromhex(entry.hash))
    return b''.join(parts)


# =============================================================================
# Commit and tag decoding
# =============================================================================

def _as_text(payload: Union[str, bytes]) -> str:
    if isinstance(payload, bytes):
        return payload.decode('utf-8', errors='replace')
    return payload


def split_headers(payload: Union[str, bytes]) -> Tuple[List[Tuple[str, str]], str]:
    """
    Split a commit/tag payload into ordered headers and message.

    Headers end at the first empty line, which is consumed. Lines starting
    with a space continue the previous header (multi-line gpgsig, mergetag).
    Header lines without a space are ignored.

    Returns:
        ([(key, value), ...], message)
    """
    lines = _as_text(payload).split('\n')
    headers: List[Tuple[str, str]] = []

    i = 0
    while i < len(lines):
        line = lines[i]
        if line == '':
            break
        if line.startswith(' ') and headers:
            key, value = headers[-1]
            headers[-1] = (key, value + '\n' + line[1:])
        else:
            key, sep, value = line.partition(' ')
            if sep:
                headers.append((key, value))
        i += 1

    message = '\n'.join(lines[i + 1:])
    return headers, message


def parse_commit(payload: Union[str, bytes]) -> CommitHeader:
    """
    Decode a commit payload.

    tree, author and committer keep the last occurrence. parent collects
    every occurrence in file order (empty for root commits). Other keys
    land in extra.
    """
    headers, message = split_headers(payload)

    tree = author = committer = ""
    parents = []
    extra = {}

    for key, value in headers:
        if key == 'tree':
            tree = value
        elif key == 'parent':
            parents.append(value)
        elif key == 'author':
            author = value
        elif key == 'committer':
            committer = value
        else:
            extra[key] = value

    return CommitHeader(
        tree=tree,
        parent=tuple(parents),
        author=author,
        committer=committer,
        message=message,
        extra=extra,
    )


def parse_tag(payload: Union[str, bytes]) -> TagHeader:
    """Decode an annotated tag payload (object, type, tag, tagger)."""
    headers, message = split_headers(payload)

    fields = {'object': "", 'type': "", 'tag': "", 'tagger': ""}
    extra = {}
    for key, value in headers:
        if key in fields:
            fields[key] = value
        else:
            extra[key] = value

    return TagHeader(
        object=fields['object'],
        object_type=fields['type'],
        tag=fields['tag'],
        tagger=fields['tagger'],
        message=message,
        extra=extra,
    )


# =============================================================================
# Enrichment
# =============================================================================

def enrich(obj: GitObject, packed: bool = False) -> EnrichedObject:
    """Run the decoder matching the object's type."""
    if obj.object_type == ObjectType.TREE:
        parsed = TreeContent(entries=tuple(parse_tree(obj.content)))
    elif obj.object_type == ObjectType.COMMIT:
        parsed = CommitContent(header=parse_commit(obj.content))
    elif obj.object_type == ObjectType.TAG:
        parsed = TagContent(header=parse_tag(obj.content))
    else:
        parsed = BlobContent(is_binary=is_binary_blob(obj.content))

    return EnrichedObject(obj=obj, parsed=parsed, packed=packed)


# =============================================================================
# Identity lines ("Name <email> 1234567890 +0000")
# =============================================================================

IDENT_DATE_PATTERN = re.compile(r' (\d+) ([+-])(\d{2})(\d{2})$')


def extract_timestamp(ident: str) -> int:
    """Epoch seconds from an author/committer/tagger line, 0 if absent."""
    if not ident:
        return 0
    match = IDENT_DATE_PATTERN.search(ident)
    if not match:
        return 0
    return int(match.group(1))


def format_ident_date(ident: str) -> str:
    """Render the date of an identity line in its own timezone."""
    if not ident:
        return ""
    match = IDENT_DATE_PATTERN.search(ident)
    if not match:
        return ""

    seconds, sign, hours, minutes = match.groups()
    offset = timedelta(hours=int(hours), minutes=int(minutes))
    if sign == '-':
        offset = -offset

    try:
        moment = datetime.fromtimestamp(int(seconds), tz=timezone(offset))
    except (OverflowError, OSError, ValueError):
        return ""
    return moment.strftime('%Y-%m-%d %H:%M:%S %z')

