"""
Formatters — Object-to-string transformations for consistent output

Centralized formatting for list rows and the detail view:
- Sizes and short hashes
- Cross-linked hash references (alias code, "not loaded" marker)
- Tree entries, commit and tag headers, blob previews

Dependency direction: commands -> presentation -> core
"""

from typing import Optional, List, Dict, Any, TYPE_CHECKING

from ..core.objects import (
    EnrichedObject, TreeEntry, CommitHeader, TagHeader,
    TreeContent, CommitContent, TagContent, BlobContent
)
from ..core.decoder import format_ident_date
from ..core.resolver import subject_of
from .symbols import (
    SymbolSet, get_symbols, symbol_for_type, sanitize_control_chars, truncate,
    HASH_DISPLAY_LENGTH, PREVIEW_LINES, SUMMARY_LENGTH
)

if TYPE_CHECKING:
    from ..core.snapshot import Snapshot
    from .codec import HashCodec


SIZE_UNITS = ("B", "KiB", "MiB", "GiB")


def format_size(size: int) -> str:
    """
    Human-readable byte count.

    Examples:
        format_size(512)     -> "512 B"
        format_size(2048)    -> "2.0 KiB"
    """
    value = float(size)
    for unit in SIZE_UNITS:
        if value < 1024 or unit == SIZE_UNITS[-1]:
            if unit == "B":
                return f"{int(value)} B"
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def short_hash(hash: str) -> str:
    return hash[:HASH_DISPLAY_LENGTH]


def object_summary(obj: EnrichedObject, full: bool = False) -> str:
    """One-line description: subject, entry count, or blob kind."""
    parsed = obj.parsed
    if isinstance(parsed, (CommitContent, TagContent)):
        return truncate(sanitize_control_chars(subject_of(obj)), SUMMARY_LENGTH, full)
    if isinstance(parsed, TreeContent):
        count = len(parsed.entries)
        return f"{count} entr{'y' if count == 1 else 'ies'}"
    if isinstance(parsed, BlobContent):
        if parsed.is_binary:
            return "binary"
        first_line = obj.text().split('\n', 1)[0]
        return truncate(sanitize_control_chars(first_line), SUMMARY_LENGTH, full)
    return ""


def object_row(obj: EnrichedObject, codec: Optional['HashCodec'] = None) -> Dict[str, Any]:
    """Table row for the list view."""
    header = obj.parsed_commit
    return {
        "alias": codec.encode(obj.hash) if codec else "",
        "type": obj.object_type.value,
        "hash": short_hash(obj.hash),
        "size": obj.size,
        "date": format_ident_date(header.author)[:10] if header else "",
        "summary": object_summary(obj),
    }


class ObjectFormatter:
    """
    Detail text for one object, with hashes linked against a snapshot.

    A referenced hash is shown with its alias code so it can be passed
    straight to `show`; hashes absent from the snapshot are marked.
    """

    def __init__(
        self,
        snapshot: Optional['Snapshot'] = None,
        codec: Optional['HashCodec'] = None,
        symbols: Optional[SymbolSet] = None,
        full: bool = False
    ):
        self.snapshot = snapshot
        self.codec = codec
        self.symbols = symbols or get_symbols()
        self.full = full

    def ref(self, hash: str) -> str:
        """Cross-link a hash: "3b18e512 [KM-XP]" or "3b18e512 (not loaded)"."""
        text = short_hash(hash) if not self.full else hash
        if self.snapshot is not None and self.snapshot.lookup(hash) is None:
            return f"{text} (not loaded)"
        if self.codec is not None:
            return f"{text} [{self.codec.encode(hash)}]"
        return text

    def tree_lines(self, entries: List[TreeEntry]) -> List[str]:
        s = self.symbols
        if not entries:
            return ["(empty tree)"]
        lines = []
        for i, entry in enumerate(entries):
            branch = s.tree_end if i == len(entries) - 1 else s.tree_branch
            marker = symbol_for_type(s, entry.entry_type)
            name = sanitize_control_chars(entry.name)
            lines.append(f"{branch} {marker} {entry.mode:>6} {name} {s.arrow} {self.ref(entry.hash)}")
        return lines

    def commit_lines(self, header: CommitHeader) -> List[str]:
        lines = [f"tree:      {self.ref(header.tree)}" if header.tree else "tree:      (none)"]
        if not header.parent:
            lines.append("parents:   (root commit)")
        for parent in header.parent:
            lines.append(f"parent:    {self.ref(parent)}")
        lines.append(f"author:    {sanitize_control_chars(header.author)}")
        date = format_ident_date(header.author)
        if date:
            lines.append(f"date:      {date}")
        lines.append(f"committer: {sanitize_control_chars(header.committer)}")
        lines.extend(self._extra_lines(header.extra))
        lines.append("")
        lines.extend(self._message_lines(header.message))
        return lines

    def tag_lines(self, header: TagHeader) -> List[str]:
        target = self.ref(header.object) if header.object else "(none)"
        lines = [
            f"object:    {target} ({header.object_type or 'unknown'})",
            f"tag:       {sanitize_control_chars(header.tag)}",
            f"tagger:    {sanitize_control_chars(header.tagger)}",
        ]
        lines.extend(self._extra_lines(header.extra))
        lines.append("")
        lines.extend(self._message_lines(header.message))
        return lines

    def blob_lines(self, obj: EnrichedObject) -> List[str]:
        s = self.symbols
        if obj.is_binary_blob:
            return [f"{s.binary} Binary content ({format_size(obj.size)}) not shown"]
        text = sanitize_control_chars(obj.text())
        lines = text.split('\n')
        if not self.full and len(lines) > PREVIEW_LINES:
            hidden = len(lines) - PREVIEW_LINES
            lines = lines[:PREVIEW_LINES] + [f"{s.ellipsis} {hidden} more lines (use --full)"]
        return lines

    def _extra_lines(self, extra: Dict[str, str]) -> List[str]:
        lines = []
        for key, value in extra.items():
            first, _, rest = value.partition('\n')
            suffix = f" {self.symbols.ellipsis}" if rest and not self.full else ""
            lines.append(f"{key}: {sanitize_control_chars(first)}{suffix}")
            if rest and self.full:
                lines.extend(f"  {line}" for line in rest.split('\n'))
        return lines

    def _message_lines(self, message: str) -> List[str]:
        return ["    " + line if line else "" for line in sanitize_control_chars(message).rstrip('\n').split('\n')]

    def body(self, obj: EnrichedObject) -> str:
        """Type-specific body of the detail view."""
        parsed = obj.parsed
        if isinstance(parsed, TreeContent):
            lines = self.tree_lines(list(parsed.entries))
        elif isinstance(parsed, CommitContent):
            lines = self.commit_lines(parsed.header)
        elif isinstance(parsed, TagContent):
            lines = self.tag_lines(parsed.header)
        elif isinstance(parsed, BlobContent):
            lines = self.blob_lines(obj)
        else:
            lines = [sanitize_control_chars(obj.text())]
        return "\n".join(lines)

    def heading(self, obj: EnrichedObject) -> str:
        """ "● commit 3b18e512dba7... [KM-XP]  245 B" """
        s = self.symbols
        marker = symbol_for_type(s, obj.object_type.value)
        alias = f" [{self.codec.encode(obj.hash)}]" if self.codec else ""
        packed = f" {s.packed} packed" if obj.packed else ""
        return f"{marker} {obj.object_type.value} {obj.hash}{alias}  {format_size(obj.size)}{packed}"
